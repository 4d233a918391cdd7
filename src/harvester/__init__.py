"""Resumable catalog harvester for infinitely-scrolling, JavaScript-rendered listings."""

__version__ = "0.1.0"

from harvester.url_canonicalizer import canonicalize, is_in_scope_item, clean_text
from harvester.state import CrawlState, DedupStore
from harvester.retry import RetryPolicy, AttemptOutcome
from harvester.fetcher import RetryingFetcher, ItemDetails
from harvester.frontier import FrontierDiscoverer, StableWhen
from harvester.stagnation import StagnationDetector
from harvester.journal import ResultSink, FailureSink, replay_journal, JournalReplay
from harvester.orchestrator import CrawlOrchestrator
from harvester.models import (
    Record,
    FailureEntry,
    RoundOutcome,
    CrawlOutcome,
    CrawlSummary,
)
from harvester.site_profile import SiteProfile, TOKOPEDIA_PROFILE, get_profile
from harvester.browser_config import BrowserConfig
from harvester.config import CrawlConfig
from harvester.diagnostics import Diagnostics, NullDiagnostics
from harvester.exceptions import (
    HarvesterError,
    FetchExhaustedError,
    ListingNotReadyError,
    ListingNavigationError,
    JournalError,
    BrowserLaunchError,
)

# Infrastructure
from harvester.infrastructure import (
    BrowserSession,
    navigate_with_retry,
    Pacer,
    PacingConfig,
)

__all__ = [
    # Core
    "canonicalize",
    "is_in_scope_item",
    "clean_text",
    "CrawlState",
    "DedupStore",
    "RetryPolicy",
    "AttemptOutcome",
    "RetryingFetcher",
    "ItemDetails",
    "FrontierDiscoverer",
    "StableWhen",
    "StagnationDetector",
    "ResultSink",
    "FailureSink",
    "replay_journal",
    "JournalReplay",
    "CrawlOrchestrator",
    # Models
    "Record",
    "FailureEntry",
    "RoundOutcome",
    "CrawlOutcome",
    "CrawlSummary",
    # Configuration
    "SiteProfile",
    "TOKOPEDIA_PROFILE",
    "get_profile",
    "BrowserConfig",
    "CrawlConfig",
    # Diagnostics
    "Diagnostics",
    "NullDiagnostics",
    # Errors
    "HarvesterError",
    "FetchExhaustedError",
    "ListingNotReadyError",
    "ListingNavigationError",
    "JournalError",
    "BrowserLaunchError",
    # Infrastructure
    "BrowserSession",
    "navigate_with_retry",
    "Pacer",
    "PacingConfig",
]
