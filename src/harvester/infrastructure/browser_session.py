"""
Browser session management.

One browser and one shared browsing context serve the whole crawl: the
listing page lives on it, and every detail attempt opens (and closes) its own
page on it. Resource blocking is installed once on the context.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from harvester.browser_config import BrowserConfig
from harvester.constants import POST_NAVIGATION_SETTLE_MS, RELOAD_SETTLE_MS
from harvester.exceptions import BrowserLaunchError, ListingNavigationError, describe_error
from harvester.retry import AttemptOutcome, RetryPolicy

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class BrowserSession:
    """
    Playwright browser + shared context, used as an async context manager:

        async with BrowserSession(config) as session:
            listing = await session.new_page()
            ...

    Raises BrowserLaunchError on entry if the engine cannot be started.
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        """
        Initialize the session.

        Args:
            config: BrowserConfig instance with substrate settings
        """
        self._config = config or BrowserConfig()
        self._playwright = None
        self._browser = None
        self._context = None

        logger.debug(f"BrowserSession initialized with config: {self._config}")

    @property
    def config(self) -> BrowserConfig:
        return self._config

    @property
    def context(self):
        """The shared browsing context."""
        if self._context is None:
            raise RuntimeError(
                "Browser is not running. Use BrowserSession as an async context manager: "
                "async with BrowserSession(config) as session:"
            )
        return self._context

    async def __aenter__(self) -> "BrowserSession":
        """Enter async context manager, launching browser and context."""
        from playwright.async_api import async_playwright

        logger.info(
            f"Launching {self._config.browser_type} browser (headless={self._config.headless})"
        )

        try:
            self._playwright = await async_playwright().start()
            launcher = getattr(self._playwright, self._config.engine)
            self._browser = await launcher.launch(**self._config.launch_options())
            self._context = await self._browser.new_context(**self._config.context_options())

            if self._config.block_resources:
                await self._context.route("**/*", self._route_handler)
        except Exception as e:
            await self._shutdown()
            raise BrowserLaunchError(self._config.browser_type, e) from e

        logger.info("Browser launched successfully")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager, closing context and browser."""
        await self._shutdown()
        logger.info("Browser closed")

    async def _shutdown(self) -> None:
        if self._context is not None:
            try:
                await self._context.close()
            except Exception as e:
                logger.debug(f"Error closing context: {describe_error(e)}")
            self._context = None

        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.debug(f"Error closing browser: {describe_error(e)}")
            self._browser = None

        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def _route_handler(self, route) -> None:
        """Abort blocked resource types, let everything else through."""
        if route.request.resource_type in self._config.block_resources:
            await route.abort()
        else:
            await route.continue_()

    async def new_page(self):
        """Open a page on the shared context with the configured default timeouts."""
        page = await self.context.new_page()
        page.set_default_timeout(self._config.action_timeout)
        page.set_default_navigation_timeout(self._config.navigation_timeout)
        return page


async def navigate_with_retry(
    page,
    url: str,
    policy: Optional[RetryPolicy] = None,
    wait_until: str = "commit",
    timeout_ms: Optional[int] = None,
    sleep: Optional[SleepFn] = None,
    settle_ms: int = POST_NAVIGATION_SETTLE_MS,
) -> None:
    """
    Navigate a long-lived page, retrying flaky navigations in place.

    Used for the listing page, which must keep its identity across the crawl.
    After a failure the page is stopped, the backoff waited out and a reload
    attempted before the next ``goto``.

    Raises:
        ListingNavigationError: If every attempt failed
    """
    policy = policy or RetryPolicy()
    sleep = sleep or asyncio.sleep
    goto_options = {"wait_until": wait_until}
    if timeout_ms is not None:
        goto_options["timeout"] = timeout_ms

    attempt = 1
    while True:
        try:
            await page.goto(url, **goto_options)
            await page.wait_for_timeout(settle_ms)
            return
        except Exception as e:
            if policy.after_failure(attempt) is AttemptOutcome.EXHAUSTED:
                raise ListingNavigationError(url, e) from e

            backoff = policy.backoff(attempt)
            logger.warning(
                f"Navigation retry {attempt}/{policy.tries} after {backoff:.1f}s -> {describe_error(e)}"
            )
            try:
                await page.evaluate("() => window.stop()")
            except Exception as stop_error:
                logger.debug(f"window.stop() failed: {describe_error(stop_error)}")
            await sleep(backoff)
            try:
                await page.reload(**goto_options)
            except Exception as reload_error:
                logger.debug(f"Reload failed: {describe_error(reload_error)}")
            await sleep(RELOAD_SETTLE_MS / 1000)
            attempt += 1
