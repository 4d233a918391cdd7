"""Crawl state rebuilt from the output journal."""

import logging
from typing import Iterable, Optional, Set

from harvester.journal import JournalReplay, PathLike, replay_journal

logger = logging.getLogger(__name__)


class DedupStore:
    """Canonical URLs that are already persisted (or known aliases of them)."""

    def __init__(self, urls: Optional[Iterable[str]] = None):
        self._urls: Set[str] = set(urls or ())

    def contains(self, url: str) -> bool:
        return url in self._urls

    def add(self, url: str) -> None:
        self._urls.add(url)

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)


class CrawlState:
    """
    Process-scoped crawl progress.

    The journal is the only durable state; this object is derived from it
    once at startup and then mutated in memory as records are appended.

    Attributes:
        seen: URLs that must not be fetched again
        total: Number of distinct records persisted so far
    """

    def __init__(self, seen: Optional[DedupStore] = None, total: Optional[int] = None):
        self.seen = seen if seen is not None else DedupStore()
        self.total = len(self.seen) if total is None else total
        self.malformed_lines = 0
        self.parsed_lines = 0

    @classmethod
    def from_replay(cls, replay: JournalReplay) -> "CrawlState":
        state = cls(DedupStore(replay.seen))
        state.parsed_lines = replay.parsed
        state.malformed_lines = replay.malformed
        return state

    @classmethod
    def from_journal(cls, path: PathLike) -> "CrawlState":
        """Replay the output journal at ``path``.

        Raises:
            JournalError: If the journal exists but cannot be read
        """
        state = cls.from_replay(replay_journal(path))
        logger.info(
            f"Resume: {state.parsed_lines} line(s) | seen: {len(state.seen)}"
        )
        return state

    def record_saved(self, url: str, *aliases: str) -> None:
        """Account for a record just appended under ``url``."""
        self.seen.add(url)
        for alias in aliases:
            self.seen.add(alias)
        self.total += 1

    def remember(self, url: str) -> None:
        """Mark ``url`` as not worth fetching again without counting a record."""
        self.seen.add(url)
