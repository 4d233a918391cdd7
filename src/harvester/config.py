from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional
from pathlib import Path
import os

from harvester.constants import (
    DEFAULT_DELAY_MS,
    DEFAULT_DIAGNOSTICS_DIR,
    DEFAULT_FETCH_TRIES,
    DEFAULT_JITTER_MS,
    DEFAULT_MAX_NO_NEW_ROUNDS,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_TARGET,
    FAILURE_JOURNAL_SUFFIX,
)
from harvester.site_profile import DEFAULT_START_URL

load_dotenv()  # Loads variables from .env file

ENV_PREFIX = "HARVEST_"

BROWSER_TYPES = ("firefox", "chromium", "chrome", "webkit")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def default_failure_path(output_path: str) -> str:
    """Failure journal next to the output journal: ``out.jsonl`` -> ``out.failures.jsonl``."""
    path = Path(output_path)
    stem = path.name[: -len(path.suffix)] if path.suffix else path.name
    return str(path.with_name(stem + FAILURE_JOURNAL_SUFFIX))


@dataclass
class CrawlConfig:
    """Configuration for one harvesting run."""
    url: str = DEFAULT_START_URL
    target: int = DEFAULT_TARGET
    delay_ms: int = DEFAULT_DELAY_MS
    jitter_ms: int = DEFAULT_JITTER_MS
    max_no_new: int = DEFAULT_MAX_NO_NEW_ROUNDS
    tries: int = DEFAULT_FETCH_TRIES
    output_path: str = DEFAULT_OUTPUT_PATH
    failure_output_path: Optional[str] = None
    diagnostics_dir: str = DEFAULT_DIAGNOSTICS_DIR
    profile: str = "tokopedia"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Substrate options (see BrowserConfig)
    browser_type: str = "firefox"
    headless: bool = True
    slow_mo: Optional[int] = None
    block_images: bool = True

    def __post_init__(self):
        if self.target < 1:
            raise ValueError("target must be at least 1")
        if self.max_no_new < 1:
            raise ValueError("max_no_new must be at least 1")
        if self.delay_ms < 0 or self.jitter_ms < 0:
            raise ValueError("delay and jitter must not be negative")
        if self.tries < 1:
            raise ValueError("tries must be at least 1")
        if self.browser_type not in BROWSER_TYPES:
            raise ValueError(
                f"browser must be one of {', '.join(BROWSER_TYPES)}, got {self.browser_type!r}"
            )

    @property
    def failure_path(self) -> str:
        return self.failure_output_path or default_failure_path(self.output_path)

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000

    @property
    def jitter_seconds(self) -> float:
        return self.jitter_ms / 1000

    @property
    def effective_slow_mo(self) -> int:
        """Slow-mo in ms; defaults to 120 for a visible browser, 0 headless."""
        if self.slow_mo is not None:
            return self.slow_mo
        return 0 if self.headless else 120

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """Load configuration from environment variables.

        Variables are prefixed with HARVEST_, e.g. HARVEST_TARGET=500.

        Returns:
            CrawlConfig: Configuration instance with values from environment
        """
        slow_mo = _env("SLOW_MO")
        return cls(
            url=_env("URL", DEFAULT_START_URL),
            target=int(_env("TARGET", str(DEFAULT_TARGET))),
            delay_ms=int(_env("DELAY", str(DEFAULT_DELAY_MS))),
            jitter_ms=int(_env("JITTER", str(DEFAULT_JITTER_MS))),
            max_no_new=int(_env("MAX_NO_NEW", str(DEFAULT_MAX_NO_NEW_ROUNDS))),
            tries=int(_env("TRIES", str(DEFAULT_FETCH_TRIES))),
            output_path=_env("OUT", DEFAULT_OUTPUT_PATH),
            failure_output_path=_env("FAIL_OUT"),
            diagnostics_dir=_env("DIAG_DIR", DEFAULT_DIAGNOSTICS_DIR),
            profile=_env("PROFILE", "tokopedia"),
            log_level=_env("LOG_LEVEL", "INFO"),
            log_file=_env("LOG_FILE"),
            browser_type=_env("BROWSER", "firefox"),
            headless=not _env_bool("HEADFUL", False),
            slow_mo=int(slow_mo) if slow_mo else None,
            block_images=_env_bool("BLOCK_IMAGES", True),
        )

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary (for logging the run setup)."""
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
        }
