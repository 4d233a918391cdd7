"""Wires configuration, browser and crawl components into one run."""

import logging
import random
from typing import Optional

from harvester.browser_config import (
    DEBUG_CONFIG,
    DEFAULT_BLOCKED_RESOURCES,
    HEADLESS_CONFIG,
    BrowserConfig,
)
from harvester.config import CrawlConfig
from harvester.diagnostics import Diagnostics
from harvester.exceptions import ListingNavigationError
from harvester.fetcher import RetryingFetcher
from harvester.frontier import FrontierDiscoverer
from harvester.infrastructure.browser_session import BrowserSession, navigate_with_retry
from harvester.infrastructure.rate_limiter import Pacer, PacingConfig
from harvester.journal import FailureSink, ResultSink
from harvester.models import CrawlOutcome, CrawlSummary
from harvester.orchestrator import CrawlOrchestrator
from harvester.retry import RetryPolicy
from harvester.site_profile import SiteProfile, get_profile
from harvester.stagnation import StagnationDetector
from harvester.state import CrawlState

logger = logging.getLogger(__name__)


def build_browser_config(config: CrawlConfig) -> BrowserConfig:
    """Translate the run's substrate options into a BrowserConfig.

    Starts from HEADLESS_CONFIG, or DEBUG_CONFIG for a visible browser.
    """
    preset = HEADLESS_CONFIG if config.headless else DEBUG_CONFIG
    return preset.model_copy(update={
        "browser_type": config.browser_type,
        "slow_mo": config.effective_slow_mo,
        "block_resources": list(DEFAULT_BLOCKED_RESOURCES) if config.block_images else [],
    })


async def run_crawl(
    config: CrawlConfig,
    browser_config: Optional[BrowserConfig] = None,
    profile: Optional[SiteProfile] = None,
    rng: Optional[random.Random] = None,
) -> CrawlSummary:
    """
    Run a complete crawl.

    Startup replays the output journal and launches the browser; both raise
    on failure (JournalError, BrowserLaunchError). If the listing cannot be
    opened at all the summary carries CrawlOutcome.LISTING_FATAL_ERROR.
    """
    profile = profile or get_profile(config.profile)
    browser_config = browser_config or build_browser_config(config)

    logger.debug(f"Run configuration: {config.to_dict()}")

    state = CrawlState.from_journal(config.output_path)
    results = ResultSink(config.output_path)
    failures = FailureSink(config.failure_path)

    logger.info(f"Start URL : {config.url}")
    logger.info(f"Browser   : {browser_config.browser_type}")
    logger.info(f"Headless  : {browser_config.headless}")
    logger.info(f"Output    : {results.path.resolve()}")
    logger.info(f"Failures  : {failures.path.resolve()}")
    logger.info(f"Target    : {config.target}")

    if state.total >= config.target:
        logger.info("Journal already holds the target number of records")
        return CrawlSummary(
            outcome=CrawlOutcome.TARGET_REACHED,
            total=state.total,
            target=config.target,
            output_path=str(results.path),
            failure_path=str(failures.path),
        )

    policy = RetryPolicy(tries=config.tries)

    async with BrowserSession(browser_config) as session:
        listing_page = await session.new_page()

        try:
            await navigate_with_retry(
                listing_page,
                config.url,
                policy=policy,
                wait_until=browser_config.wait_until,
                timeout_ms=browser_config.navigation_timeout,
            )
        except ListingNavigationError as e:
            logger.error(str(e))
            return CrawlSummary(
                outcome=CrawlOutcome.LISTING_FATAL_ERROR,
                total=state.total,
                target=config.target,
                output_path=str(results.path),
                failure_path=str(failures.path),
            )

        orchestrator = CrawlOrchestrator(
            listing_page=listing_page,
            start_url=config.url,
            target=config.target,
            state=state,
            discoverer=FrontierDiscoverer(profile),
            fetcher=RetryingFetcher(
                session.context,
                profile,
                policy=policy,
                wait_until=browser_config.wait_until,
                navigation_timeout_ms=browser_config.navigation_timeout,
            ),
            results=results,
            failures=failures,
            stagnation=StagnationDetector(config.max_no_new),
            pacer=Pacer(
                PacingConfig(base_delay=config.delay_seconds, jitter=config.jitter_seconds),
                rng=rng,
            ),
            diagnostics=Diagnostics(config.diagnostics_dir),
        )
        return await orchestrator.run()
