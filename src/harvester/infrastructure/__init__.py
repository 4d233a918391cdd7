"""
Infrastructure Package.

Provides the shared browser session and delay-based pacing used by the
crawl loop.
"""

from .browser_session import (
    BrowserSession,
    navigate_with_retry,
)
from .rate_limiter import (
    Pacer,
    PacingConfig,
)

__all__ = [
    # Browser Session
    "BrowserSession",
    "navigate_with_retry",
    # Pacing
    "Pacer",
    "PacingConfig",
]
