# src/harvester/constants.py
"""Centralized constants for the catalog harvester.

This module contains magic numbers and default values that are used across
multiple modules. For user-configurable settings, see config.py and
browser_config.py.
"""

# =============================================================================
# Crawl Loop Constants
# =============================================================================

# Desired number of unique records when no target is given
DEFAULT_TARGET = 2000

# Base delay between detail fetches (milliseconds)
DEFAULT_DELAY_MS = 2500

# Upper bound of the random jitter added to the base delay (milliseconds)
DEFAULT_JITTER_MS = 600

# Consecutive rounds without a new record before giving up
DEFAULT_MAX_NO_NEW_ROUNDS = 10

# Minimum pause after a listing-level error (milliseconds)
LISTING_ERROR_MIN_DELAY_MS = 2500

# Default output journal
DEFAULT_OUTPUT_PATH = "tokopedia_laptop.jsonl"

# Suffix used to derive the failure journal from the output journal
FAILURE_JOURNAL_SUFFIX = ".failures.jsonl"

# Directory for listing diagnostics (screenshots + HTML)
DEFAULT_DIAGNOSTICS_DIR = "diagnostics"


# =============================================================================
# Retry Constants
# =============================================================================

# Attempts per detail page before it is recorded as a failure
DEFAULT_FETCH_TRIES = 4

# Backoff grows linearly with the attempt number, capped
INITIAL_BACKOFF_DELAY_SECONDS = 1.2
MAX_BACKOFF_DELAY_SECONDS = 10.0


# =============================================================================
# Timing Constants (milliseconds, as Playwright expects)
# =============================================================================

NAVIGATION_TIMEOUT_MS = 90_000
DEFAULT_ACTION_TIMEOUT_MS = 45_000
LISTING_READY_TIMEOUT_MS = 45_000
TITLE_TIMEOUT_MS = 35_000

# Best-effort reads of optional fields (price, description)
FIELD_TIMEOUT_MS = 5_000

# Pause after a navigation commits, before querying the DOM
POST_NAVIGATION_SETTLE_MS = 1500

# Pause after scrolling the description into view
DESCRIPTION_SETTLE_MS = 250

# Pause after window.stop() before reloading a stuck listing
RELOAD_SETTLE_MS = 800


# =============================================================================
# Listing Reveal Constants
# =============================================================================

# Scroll steps per discovery call and distance per step
REVEAL_MAX_STEPS = 10
REVEAL_STEP_PX = 1200
REVEAL_SETTLE_MS = 900

# Between rounds the listing is nudged by this many viewport heights
NUDGE_VIEWPORT_FACTOR = 1.4
NUDGE_SETTLE_MS = 1200


# =============================================================================
# Output Constants
# =============================================================================

# Characters of the title echoed in progress lines
TITLE_PREVIEW_CHARS = 70
