"""Data models for the catalog harvester."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a datetime the way the journals store it (ISO-8601, ms, ``Z``)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Record:
    """One harvested item, written once to the output journal."""

    source_listing_url: str
    url: str
    title: str
    price: Optional[str] = None
    description: Optional[str] = None
    scraped_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        """Journal representation of the record."""
        return {
            "category_url": self.source_listing_url,
            "url": self.url,
            "title": self.title,
            "price": self.price,
            "description": self.description,
            "scraped_at": format_timestamp(self.scraped_at),
        }


@dataclass(frozen=True)
class FailureEntry:
    """A candidate that did not produce a record."""

    url: str
    reason: str
    at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "reason": self.reason,
            "at": format_timestamp(self.at),
        }


@dataclass(frozen=True)
class RoundOutcome:
    """Per-round counts fed to the stagnation detector."""

    discovered: int
    added: int
    failed: int = 0


class CrawlOutcome(Enum):
    """Terminal state of a crawl."""
    TARGET_REACHED = "target_reached"
    STAGNANT = "stagnant"
    LISTING_FATAL_ERROR = "listing_fatal_error"


@dataclass
class CrawlSummary:
    """What a finished crawl reports."""

    outcome: CrawlOutcome
    total: int
    target: int
    rounds: int = 0
    saved_this_run: int = 0
    failed_this_run: int = 0
    output_path: str = ""
    failure_path: str = ""

    @property
    def target_reached(self) -> bool:
        return self.outcome is CrawlOutcome.TARGET_REACHED
