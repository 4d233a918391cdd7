"""
Crawl orchestration: discover -> dedupe -> fetch -> persist -> pace -> repeat.

The orchestrator owns the CrawlState and runs until the target number of
records has been persisted or the listing stagnates. Everything that goes
wrong below this level (a broken listing round, a detail page that never
renders, an item without a title) becomes a journal entry or a counted round;
none of it ends the crawl.
"""

import logging
from typing import List, Optional

from harvester.constants import LISTING_ERROR_MIN_DELAY_MS, TITLE_PREVIEW_CHARS
from harvester.diagnostics import Diagnostics, NullDiagnostics
from harvester.exceptions import FetchExhaustedError, ListingNotReadyError, describe_error
from harvester.frontier import FrontierDiscoverer
from harvester.infrastructure.rate_limiter import Pacer
from harvester.journal import FailureSink, ResultSink
from harvester.models import CrawlOutcome, CrawlSummary, FailureEntry, RoundOutcome
from harvester.stagnation import StagnationDetector
from harvester.state import CrawlState

logger = logging.getLogger(__name__)

REASON_EMPTY_TITLE = "empty title"
REASON_FETCH_FAILED = "fetch failed"
REASON_PERSIST_FAILED = "persist failed"
REASON_UNEXPECTED = "unexpected error"


class CrawlOrchestrator:
    """
    Main crawl loop over one listing page.

    States: Running -> TargetReached | Stagnant. The ListingFatalError
    terminal state is produced before the loop starts, when the listing
    cannot be opened at all (see harvester.runner).
    """

    def __init__(
        self,
        listing_page,
        start_url: str,
        target: int,
        state: CrawlState,
        discoverer: FrontierDiscoverer,
        fetcher,
        results: ResultSink,
        failures: FailureSink,
        stagnation: StagnationDetector,
        pacer: Pacer,
        diagnostics: Optional[Diagnostics] = None,
        listing_error_delay: float = LISTING_ERROR_MIN_DELAY_MS / 1000,
    ):
        """
        Initialize the orchestrator.

        Args:
            listing_page: Page showing the listing (kept open for the whole crawl)
            start_url: Listing entry point, stored as each record's category_url
            target: Number of unique records to accumulate
            state: Crawl state rebuilt from the output journal
            discoverer: Extracts candidates from the listing
            fetcher: Object with ``async fetch(url, source_listing_url)``
            results: Output journal
            failures: Failure journal
            stagnation: Decides when the listing is exhausted
            pacer: Delay + jitter between fetches
            diagnostics: Snapshot capture for anomalous listing rounds
            listing_error_delay: Minimum pause after a listing error (seconds)
        """
        self.listing_page = listing_page
        self.start_url = start_url
        self.target = target
        self.state = state
        self.discoverer = discoverer
        self.fetcher = fetcher
        self.results = results
        self.failures = failures
        self.stagnation = stagnation
        self.pacer = pacer
        self.diagnostics = diagnostics or NullDiagnostics()
        self.listing_error_delay = listing_error_delay

        self.rounds = 0
        self.saved_this_run = 0
        self.failed_this_run = 0

    @property
    def target_reached(self) -> bool:
        return self.state.total >= self.target

    async def run(self) -> CrawlSummary:
        """Run rounds until the target is reached or the listing stagnates."""
        logger.info(
            f"Starting crawl: total={self.state.total} target={self.target} "
            f"max_no_new={self.stagnation.max_no_new}"
        )

        while not self.target_reached and not self.stagnation.should_stop:
            self.rounds += 1
            try:
                await self.run_round()
            except Exception as e:
                await self._listing_error(e)

        outcome = CrawlOutcome.TARGET_REACHED if self.target_reached else CrawlOutcome.STAGNANT
        if outcome is CrawlOutcome.STAGNANT:
            logger.warning(
                f"Stopping: no new records for {self.stagnation.stagnant_rounds} round(s)"
            )
        return self.summary(outcome)

    async def run_round(self) -> Optional[RoundOutcome]:
        """
        One pass over the listing.

        Returns:
            The round's outcome, or None for an empty listing round

        Raises:
            ListingNotReadyError: If the listing shows no item links in time
        """
        await self.discoverer.ensure_ready(self.listing_page)

        candidates = await self.discoverer.discover(self.listing_page)
        if not candidates:
            self.stagnation.record_listing_failure()
            logger.warning(
                f"No item URLs on listing (stagnant rounds={self.stagnation.stagnant_rounds})"
            )
            await self.diagnostics.capture(self.listing_page, "diag_list_empty")
            await self.pacer.pause(self.pacer.config.base_delay)
            return None

        outcome = await self.process_candidates(candidates)
        self.stagnation.record_round(outcome)
        logger.info(
            f"Round {self.rounds}: discovered={outcome.discovered} added={outcome.added} "
            f"failed={outcome.failed} total={self.state.total}/{self.target}"
        )

        if not self.target_reached:
            try:
                await self.discoverer.reveal_more(self.listing_page)
            except Exception as e:
                # The round is already accounted for; the next ensure_ready decides
                logger.warning(f"Could not scroll listing: {describe_error(e)}")
        return outcome

    async def process_candidates(self, candidates: List[str]) -> RoundOutcome:
        """Fetch and persist every new candidate, in discovery order."""
        added = 0
        failed = 0

        for url in candidates:
            if self.target_reached:
                break
            if self.state.seen.contains(url):
                continue

            try:
                saved = await self._fetch_and_persist(url)
            except Exception as e:
                # Confined to this candidate so the round's additions still count
                reason = f"{REASON_UNEXPECTED}: {describe_error(e)}"
                logger.warning(f"  x {url}: {reason}")
                self._record_failure(url, reason)
                saved = False

            if saved:
                added += 1
            elif saved is False:
                failed += 1

            if not self.target_reached:
                await self.pacer.wait()

        return RoundOutcome(discovered=len(candidates), added=added, failed=failed)

    async def _fetch_and_persist(self, url: str) -> Optional[bool]:
        """
        Returns:
            True if a record was saved, False on a recorded failure, None
            if the item turned out to be already saved under another URL
        """
        logger.info(f"> Item: {url}")

        try:
            record = await self.fetcher.fetch(url, self.start_url)
        except FetchExhaustedError as e:
            reason = f"{REASON_FETCH_FAILED}: {describe_error(e.last_error)}"
            logger.warning(f"  x {url}: {reason}")
            self._record_failure(url, reason)
            return False

        if record is None:
            logger.info(f"  - skip {url} (no title)")
            self._record_failure(url, REASON_EMPTY_TITLE)
            return False

        if self.state.seen.contains(record.url):
            # Redirected onto an item that is already in the journal
            logger.info(f"  = {url} resolves to saved item {record.url}")
            self.state.remember(url)
            return None

        try:
            self.results.append(record)
        except OSError as e:
            reason = f"{REASON_PERSIST_FAILED}: {describe_error(e)}"
            logger.error(f"  x {url}: {reason}")
            self._record_failure(url, reason)
            return False

        aliases = (url,) if url != record.url else ()
        self.state.record_saved(record.url, *aliases)
        self.saved_this_run += 1

        logger.info(
            f"  + saved {self.state.total}/{self.target} | {record.title[:TITLE_PREVIEW_CHARS]}"
        )
        return True

    def _record_failure(self, url: str, reason: str) -> None:
        self.failed_this_run += 1
        try:
            self.failures.append(FailureEntry(url=url, reason=reason))
        except OSError as e:
            logger.error(f"Could not write failure entry for {url}: {describe_error(e)}")

    async def _listing_error(self, error: Exception) -> None:
        self.stagnation.record_listing_failure()
        if isinstance(error, ListingNotReadyError):
            logger.warning(
                f"Listing not ready (stagnant rounds={self.stagnation.stagnant_rounds}): "
                f"{describe_error(error.cause)}"
            )
        else:
            logger.warning(
                f"Listing error (stagnant rounds={self.stagnation.stagnant_rounds}): "
                f"{describe_error(error)}"
            )
        await self.diagnostics.capture(self.listing_page, "diag_list_error")
        await self.pacer.pause(max(self.listing_error_delay, self.pacer.config.base_delay))

    def summary(self, outcome: CrawlOutcome) -> CrawlSummary:
        return CrawlSummary(
            outcome=outcome,
            total=self.state.total,
            target=self.target,
            rounds=self.rounds,
            saved_this_run=self.saved_this_run,
            failed_this_run=self.failed_this_run,
            output_path=str(self.results.path),
            failure_path=str(self.failures.path),
        )
