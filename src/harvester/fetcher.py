"""
Detail-page fetching with bounded retries.

Every attempt opens a fresh page on the shared browser context. A page whose
navigation failed may keep half-loaded state around, so retries never reuse
it; each attempt's page is closed before the next one starts.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Optional

from harvester.constants import (
    DESCRIPTION_SETTLE_MS,
    FIELD_TIMEOUT_MS,
    NAVIGATION_TIMEOUT_MS,
    POST_NAVIGATION_SETTLE_MS,
    TITLE_TIMEOUT_MS,
)
from harvester.exceptions import FetchExhaustedError, describe_error
from harvester.models import Record, utc_now
from harvester.retry import AttemptOutcome, RetryPolicy
from harvester.site_profile import SiteProfile
from harvester.url_canonicalizer import canonicalize, clean_text

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]
ClockFn = Callable[[], datetime]


@dataclass
class ItemDetails:
    """Fields read from a rendered detail page."""
    title: str
    price: Optional[str]
    description: Optional[str]
    final_url: str


class RetryingFetcher:
    """
    Opens item detail pages and extracts a Record from them.

    Navigation and render failures (timeouts, connection resets, the title
    never appearing) are retried per the RetryPolicy. A page that renders but
    has an empty title is a content failure and is not retried.
    """

    def __init__(
        self,
        context,
        profile: SiteProfile,
        policy: Optional[RetryPolicy] = None,
        sleep: Optional[SleepFn] = None,
        clock: Optional[ClockFn] = None,
        wait_until: str = "commit",
        navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS,
        title_timeout_ms: int = TITLE_TIMEOUT_MS,
        field_timeout_ms: int = FIELD_TIMEOUT_MS,
        settle_ms: int = POST_NAVIGATION_SETTLE_MS,
    ):
        """
        Initialize the fetcher.

        Args:
            context: Browser context shared with the listing page; must
                provide ``new_page()``
            profile: Selectors for the detail page fields
            policy: Retry budget and backoff schedule
            sleep: Coroutine used for backoff waits (default: asyncio.sleep)
            clock: Source of ``scraped_at`` timestamps
            wait_until: Playwright navigation wait condition
            navigation_timeout_ms: Timeout for ``page.goto``
            title_timeout_ms: Timeout for the title element to materialize
            field_timeout_ms: Timeout for reading optional fields
            settle_ms: Pause after navigation commits
        """
        self._context = context
        self.profile = profile
        self.policy = policy or RetryPolicy()
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or utc_now
        self.wait_until = wait_until
        self.navigation_timeout_ms = navigation_timeout_ms
        self.title_timeout_ms = title_timeout_ms
        self.field_timeout_ms = field_timeout_ms
        self.settle_ms = settle_ms

    async def fetch(self, url: str, source_listing_url: str) -> Optional[Record]:
        """
        Fetch one item.

        Args:
            url: Canonical item URL to open
            source_listing_url: Listing the item was discovered on

        Returns:
            The Record, or None if the page rendered without a title

        Raises:
            FetchExhaustedError: If every attempt failed to render the page
        """
        details = await self.fetch_details(url)
        if details is None:
            return None

        return Record(
            source_listing_url=source_listing_url,
            url=details.final_url,
            title=details.title,
            price=details.price,
            description=details.description,
            scraped_at=self._clock(),
        )

    async def fetch_details(self, url: str) -> Optional[ItemDetails]:
        """Run the attempt loop and return the extracted fields."""
        attempt = 1
        while True:
            try:
                return await self._attempt(url)
            except Exception as e:
                outcome = self.policy.after_failure(attempt)
                if outcome is AttemptOutcome.EXHAUSTED:
                    logger.warning(
                        f"Giving up on {url} after {attempt} attempt(s): {describe_error(e)}"
                    )
                    raise FetchExhaustedError(url, attempt, e) from e

                backoff = self.policy.backoff(attempt)
                logger.info(
                    f"Retry {attempt}/{self.policy.tries} after {backoff:.1f}s -> "
                    f"{url}: {describe_error(e)}"
                )
                await self._sleep(backoff)
                attempt += 1

    async def _attempt(self, url: str) -> Optional[ItemDetails]:
        page = await self._context.new_page()
        try:
            await page.goto(url, wait_until=self.wait_until, timeout=self.navigation_timeout_ms)
            await page.wait_for_timeout(self.settle_ms)

            title_locator = page.locator(self.profile.title_selector).first
            await title_locator.wait_for(timeout=self.title_timeout_ms)

            return await self._extract(page, url)
        finally:
            await self._close(page)

    async def _extract(self, page, requested_url: str) -> Optional[ItemDetails]:
        title = await self._read_text(page, self.profile.title_selector)
        if not title:
            logger.info(f"No title on {requested_url}")
            return None

        description_locator = page.locator(self.profile.description_selector).first
        try:
            await description_locator.scroll_into_view_if_needed(timeout=self.field_timeout_ms)
        except Exception as e:
            logger.debug(f"Description not scrollable on {requested_url}: {describe_error(e)}")
        await page.wait_for_timeout(DESCRIPTION_SETTLE_MS)

        price = await self._read_text(page, self.profile.price_selector)
        description = await self._read_text(page, self.profile.description_selector)

        return ItemDetails(
            title=title,
            price=price or None,
            description=description or None,
            final_url=canonicalize(page.url) or requested_url,
        )

    async def _read_text(self, page, selector: str) -> str:
        """Inner text of the first match, whitespace-collapsed; '' if absent."""
        try:
            text = await page.locator(selector).first.inner_text(timeout=self.field_timeout_ms)
        except Exception as e:
            logger.debug(f"No text for {selector}: {describe_error(e)}")
            return ""
        return clean_text(text)

    async def _close(self, page) -> None:
        try:
            await page.close()
        except Exception as e:
            logger.debug(f"Error closing page: {describe_error(e)}")
