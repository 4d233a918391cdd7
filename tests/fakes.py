"""In-memory stand-ins for the Playwright objects the harvester talks to."""

from typing import Dict, List, Optional

from harvester.frontier import HREFS_JS, NUDGE_JS, SCROLL_BY_JS, SCROLL_HEIGHT_JS
from harvester.site_profile import TOKOPEDIA_PROFILE


class FakeTimeoutError(Exception):
    """Mimics playwright's TimeoutError."""


FIELD_BY_SELECTOR = {
    TOKOPEDIA_PROFILE.title_selector: "title",
    TOKOPEDIA_PROFILE.price_selector: "price",
    TOKOPEDIA_PROFILE.description_selector: "description",
}


class FakeLocator:
    def __init__(self, page: "FakeDetailPage", selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    def _value(self) -> Optional[str]:
        item = self.page.item or {}
        return item.get(FIELD_BY_SELECTOR.get(self.selector, ""))

    async def wait_for(self, timeout=None):
        if self._value() is None:
            raise FakeTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.selector}")

    async def inner_text(self, timeout=None):
        value = self._value()
        if value is None:
            raise FakeTimeoutError(f"Timeout {timeout}ms exceeded reading {self.selector}")
        return value

    async def scroll_into_view_if_needed(self, timeout=None):
        if self._value() is None:
            raise FakeTimeoutError("element not found")


class FakeDetailPage:
    """A detail tab opened from a FakeContext."""

    def __init__(self, context: "FakeContext"):
        self.context = context
        self.url = "about:blank"
        self.item: Optional[dict] = None
        self.closed = False
        self.requested: Optional[str] = None

    async def goto(self, url, wait_until=None, timeout=None):
        self.requested = url
        self.context.goto_log.append(url)
        remaining = self.context.failures.get(url, 0)
        if remaining > 0:
            self.context.failures[url] = remaining - 1
            raise FakeTimeoutError(f"page.goto: Timeout {timeout}ms exceeded")
        self.item = self.context.items.get(url)
        self.url = (self.item or {}).get("final_url", url)

    async def wait_for_timeout(self, ms):
        return None

    def locator(self, selector):
        return FakeLocator(self, selector)

    async def close(self):
        self.closed = True


class FakeContext:
    """
    Shared browser context.

    Args:
        items: url -> {"title", "price", "description", "final_url"}
        failures: url -> number of navigations that fail before one succeeds
            (float("inf") for a page that never loads)
    """

    def __init__(self, items: Optional[Dict[str, dict]] = None, failures: Optional[Dict[str, float]] = None):
        self.items = items or {}
        self.failures = dict(failures or {})
        self.pages: List[FakeDetailPage] = []
        self.goto_log: List[str] = []

    async def new_page(self):
        page = FakeDetailPage(self)
        self.pages.append(page)
        return page


class FakeListingPage:
    """
    Listing page whose height grows per a scripted sequence.

    Args:
        hrefs: Links returned for the item-link selector
        heights: Successive scrollHeight samples; the last one repeats
        ready: Whether the item-link selector ever appears
    """

    def __init__(
        self,
        hrefs: Optional[List[str]] = None,
        heights: Optional[List[int]] = None,
        ready: bool = True,
        url: str = "https://www.tokopedia.com/p/komputer-laptop/laptop",
    ):
        self.hrefs = list(hrefs or [])
        self.heights = list(heights or [1000])
        self.ready = ready
        self.url = url
        self.scrolls: List[int] = []
        self.nudges: List[float] = []
        self.waits: List[int] = []
        self.height_samples = 0

    async def wait_for_selector(self, selector, timeout=None):
        if selector != "body" and not self.ready:
            raise FakeTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def evaluate(self, expression, arg=None):
        if expression == SCROLL_HEIGHT_JS:
            index = min(self.height_samples, len(self.heights) - 1)
            self.height_samples += 1
            return self.heights[index]
        if expression == SCROLL_BY_JS:
            self.scrolls.append(arg)
            return None
        if expression == NUDGE_JS:
            self.nudges.append(arg)
            return None
        raise AssertionError(f"unexpected script: {expression}")

    async def eval_on_selector_all(self, selector, expression):
        assert expression == HREFS_JS
        return list(self.hrefs)

    async def wait_for_timeout(self, ms):
        self.waits.append(ms)

    async def screenshot(self, path=None, full_page=False):
        with open(path, "wb") as f:
            f.write(b"\x89PNG fake")

    async def content(self):
        return "<html><body>listing</body></html>"


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
