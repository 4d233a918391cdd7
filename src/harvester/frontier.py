"""
Frontier discovery on an infinitely-scrolling listing.

The listing reveals more items as it is scrolled. Discovery scrolls until the
page stops growing (or a step budget runs out), then collects the item links
currently in the DOM. This is a heuristic for "lazy content has stopped
appearing", not a proof that the listing is complete.
"""

import logging
from typing import Awaitable, Callable, List, Optional

from harvester.constants import (
    LISTING_READY_TIMEOUT_MS,
    NUDGE_SETTLE_MS,
    NUDGE_VIEWPORT_FACTOR,
    REVEAL_MAX_STEPS,
    REVEAL_SETTLE_MS,
    REVEAL_STEP_PX,
)
from harvester.exceptions import ListingNotReadyError
from harvester.site_profile import SiteProfile
from harvester.url_canonicalizer import canonicalize, is_in_scope_item

logger = logging.getLogger(__name__)

SignalFn = Callable[[], Awaitable[float]]
StepFn = Callable[[], Awaitable[None]]

SCROLL_HEIGHT_JS = "() => (document.body ? document.body.scrollHeight : 0)"
SCROLL_BY_JS = "(px) => window.scrollBy(0, px)"
NUDGE_JS = "(factor) => window.scrollBy(0, Math.floor(window.innerHeight * factor))"
HREFS_JS = "(anchors) => anchors.map((a) => a.getAttribute('href')).filter(Boolean)"


class StableWhen:
    """
    Repeat a step until a signal stops changing.

    After each step the signal is sampled; once it has been unchanged for
    ``unchanged_for`` consecutive steps the loop ends. ``max_steps`` bounds the
    work regardless of the signal.
    """

    def __init__(self, signal: SignalFn, unchanged_for: int = 1, max_steps: int = REVEAL_MAX_STEPS):
        if unchanged_for < 1:
            raise ValueError("unchanged_for must be at least 1")
        if max_steps < 0:
            raise ValueError("max_steps must not be negative")
        self._signal = signal
        self.unchanged_for = unchanged_for
        self.max_steps = max_steps

    async def run(self, step: StepFn) -> int:
        """Drive ``step`` until the signal is stable.

        Returns:
            Number of steps performed
        """
        last = await self._signal()
        unchanged = 0
        steps = 0

        while steps < self.max_steps:
            await step()
            steps += 1
            current = await self._signal()
            if current == last:
                unchanged += 1
                if unchanged >= self.unchanged_for:
                    break
            else:
                unchanged = 0
                last = current

        return steps


class FrontierDiscoverer:
    """Extracts in-scope, canonical item URLs from a listing page."""

    def __init__(
        self,
        profile: SiteProfile,
        max_steps: int = REVEAL_MAX_STEPS,
        step_px: int = REVEAL_STEP_PX,
        settle_ms: int = REVEAL_SETTLE_MS,
        ready_timeout_ms: int = LISTING_READY_TIMEOUT_MS,
        unchanged_for: int = 1,
    ):
        """
        Args:
            profile: Site scope rules and item-link selector
            max_steps: Scroll steps per discovery call
            step_px: Pixels scrolled per step
            settle_ms: Wait after each scroll before sampling the page height
            ready_timeout_ms: How long to wait for the first item link
            unchanged_for: Consecutive unchanged samples that end the reveal
        """
        self.profile = profile
        self.max_steps = max_steps
        self.step_px = step_px
        self.settle_ms = settle_ms
        self.ready_timeout_ms = ready_timeout_ms
        self.unchanged_for = unchanged_for

    async def ensure_ready(self, page) -> None:
        """Wait until the listing shows at least one item link.

        Raises:
            ListingNotReadyError: If the item link never appears in time
        """
        try:
            await page.wait_for_selector("body", timeout=self.ready_timeout_ms)
            await page.wait_for_selector(
                self.profile.item_link_selector, timeout=self.ready_timeout_ms
            )
        except Exception as e:
            raise ListingNotReadyError(page.url, e) from e

    async def reveal(self, page) -> int:
        """Scroll the listing until its height stops growing.

        Returns:
            Number of scroll steps performed
        """
        async def scroll_height() -> float:
            return await page.evaluate(SCROLL_HEIGHT_JS)

        async def scroll_step() -> None:
            await page.evaluate(SCROLL_BY_JS, self.step_px)
            await page.wait_for_timeout(self.settle_ms)

        stable = StableWhen(scroll_height, unchanged_for=self.unchanged_for, max_steps=self.max_steps)
        steps = await stable.run(scroll_step)
        logger.debug(f"Listing reveal finished after {steps} step(s)")
        return steps

    async def discover(self, page) -> List[str]:
        """Reveal lazy content and return candidate item URLs in document order."""
        await self.reveal(page)

        hrefs = await page.eval_on_selector_all(self.profile.item_link_selector, HREFS_JS)
        return self.extract_candidates(hrefs or [], page.url)

    def extract_candidates(self, hrefs: List[str], base_url: Optional[str]) -> List[str]:
        """Resolve, canonicalize, scope-filter and dedupe raw hrefs."""
        seen = set()
        candidates: List[str] = []

        for href in hrefs:
            url = canonicalize(href, base_url)
            if url is None or not is_in_scope_item(url, self.profile):
                continue
            if url in seen:
                continue
            seen.add(url)
            candidates.append(url)

        logger.debug(f"Extracted {len(candidates)} candidate(s) from {len(hrefs)} link(s)")
        return candidates

    async def reveal_more(
        self,
        page,
        factor: float = NUDGE_VIEWPORT_FACTOR,
        settle_ms: int = NUDGE_SETTLE_MS,
    ) -> None:
        """Nudge the listing to load further items before the next round."""
        await page.evaluate(NUDGE_JS, factor)
        await page.wait_for_timeout(settle_ms)
