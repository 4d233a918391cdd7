"""
Browser configuration for Playwright-based harvesting.

This module provides a validated Pydantic configuration model for all
browser-related settings and pre-configured instances for common use cases.
These options only affect how pages are rendered, never the crawl algorithm.
"""
import sys
from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from harvester.constants import DEFAULT_ACTION_TIMEOUT_MS, NAVIGATION_TIMEOUT_MS


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)

# Flags that keep Chromium stable against HTTP/2 and QUIC hiccups
CHROMIUM_ARGS = [
    "--disable-dev-shm-usage",
    "--disable-quic",
    "--disable-blink-features=AutomationControlled",
]

# Resource types aborted unless images are explicitly allowed
DEFAULT_BLOCKED_RESOURCES = ("image", "font", "media")

BrowserType = Literal["firefox", "chromium", "chrome", "webkit"]


def default_launch_args() -> List[str]:
    """Chromium launch arguments for the current platform."""
    args = list(CHROMIUM_ARGS)
    if sys.platform.startswith("linux"):
        args.insert(0, "--no-sandbox")
    return args


class BrowserConfig(BaseModel):
    """
    Configuration for the BrowserSession.

    All fields are validated by Pydantic to ensure type safety and valid values.
    """

    model_config = ConfigDict(validate_assignment=True)

    browser_type: BrowserType = Field(
        default="firefox",
        description="Engine: firefox, webkit, bundled chromium or the system 'chrome' channel"
    )

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode (no visible UI)"
    )

    slow_mo: int = Field(
        default=0,
        ge=0,
        description="Milliseconds Playwright waits between operations"
    )

    navigation_timeout: int = Field(
        default=NAVIGATION_TIMEOUT_MS,
        description="Page navigation timeout in milliseconds",
        ge=1000,
        le=600000
    )

    action_timeout: int = Field(
        default=DEFAULT_ACTION_TIMEOUT_MS,
        description="Default timeout for DOM queries on the listing page",
        ge=1000,
        le=600000
    )

    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="commit",
        description="When to consider navigation complete"
    )

    block_resources: List[str] = Field(
        default_factory=lambda: list(DEFAULT_BLOCKED_RESOURCES),
        description="Resource types to abort (e.g., 'image', 'font', 'media')"
    )

    launch_args: List[str] = Field(
        default_factory=default_launch_args,
        description="Extra launch arguments, applied to chromium and chrome only"
    )

    locale: str = Field(default="id-ID", description="Browser locale")
    timezone_id: str = Field(default="Asia/Jakarta", description="Browser timezone")

    viewport: Dict[str, int] = Field(
        default_factory=lambda: {"width": 1366, "height": 768},
        description="Viewport size"
    )

    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User agent string")

    accept_language: str = Field(
        default="id-ID,id;q=0.9,en-US;q=0.8,en;q=0.7",
        description="Accept-Language header sent with every request"
    )

    @property
    def is_chromium_based(self) -> bool:
        return self.browser_type in ("chromium", "chrome")

    def launch_options(self) -> dict:
        """Keyword arguments for ``BrowserType.launch``."""
        options = {"headless": self.headless, "slow_mo": self.slow_mo}
        if self.browser_type == "chrome":
            options["channel"] = "chrome"
        if self.is_chromium_based and self.launch_args:
            options["args"] = list(self.launch_args)
        return options

    def context_options(self) -> dict:
        """Keyword arguments for ``Browser.new_context``."""
        return {
            "locale": self.locale,
            "timezone_id": self.timezone_id,
            "viewport": dict(self.viewport),
            "user_agent": self.user_agent,
            "extra_http_headers": {"accept-language": self.accept_language},
        }

    @property
    def engine(self) -> str:
        """Playwright engine attribute name (``chrome`` runs on chromium)."""
        return "chromium" if self.browser_type == "chrome" else self.browser_type


# --- Pre-configured Instances for Common Use Cases ---

HEADLESS_CONFIG = BrowserConfig()
"""
Default configuration: headless Firefox with images, fonts and media blocked.

Firefox tends to avoid the HTTP/2 protocol errors headless Chromium hits on
heavily protected storefronts.
"""

DEBUG_CONFIG = BrowserConfig(
    headless=False,
    slow_mo=120,
    block_resources=[],
)
"""
Visible browser with slowed-down actions and full resource loading.

Best for watching a crawl or debugging selectors.
"""
