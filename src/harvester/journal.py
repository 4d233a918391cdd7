"""Append-only JSONL journals for harvested records and failures.

The output journal doubles as the crawl's resume state: on startup it is
replayed line by line to rebuild the set of already-saved URLs.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Set, Union

from harvester.exceptions import JournalError
from harvester.models import FailureEntry, Record

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class JournalReplay:
    """What was recovered from an existing output journal."""
    seen: Set[str] = field(default_factory=set)
    parsed: int = 0
    malformed: int = 0


class JsonlJournal:
    """A newline-delimited JSON file that is only ever appended to."""

    def __init__(self, path: PathLike):
        """
        Args:
            path: Journal file; created (with parent directories) on first append
        """
        self.path = Path(path)
        self._checked_tail = False

    def append_entry(self, entry: dict) -> None:
        """Append one entry as a single line.

        The line is written with one ``write`` call in append mode so an
        interrupted process leaves at most a partial last line, which replay
        skips.
        """
        line = json.dumps(entry, ensure_ascii=False) + "\n"
        if not self._checked_tail:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self._has_partial_tail():
                # Terminate a line left behind by a killed process
                line = "\n" + line
            self._checked_tail = True
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line)
            f.flush()

    def _has_partial_tail(self) -> bool:
        try:
            with open(self.path, "rb") as f:
                f.seek(0, 2)
                if f.tell() == 0:
                    return False
                f.seek(-1, 2)
                return f.read(1) != b"\n"
        except FileNotFoundError:
            return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.path)!r})"


class ResultSink(JsonlJournal):
    """Output journal of successfully harvested records."""

    def append(self, record: Record) -> None:
        self.append_entry(record.to_dict())


class FailureSink(JsonlJournal):
    """Journal of candidates that did not yield a record."""

    def append(self, entry: FailureEntry) -> None:
        self.append_entry(entry.to_dict())


def replay_journal(path: PathLike) -> JournalReplay:
    """Rebuild the set of saved URLs from an output journal.

    Blank lines are ignored; lines that are not JSON objects are counted as
    malformed and skipped. A missing file is an empty journal.

    Args:
        path: Output journal to replay

    Returns:
        JournalReplay with the distinct saved URLs and line counts

    Raises:
        JournalError: If the file exists but cannot be read
    """
    replay = JournalReplay()
    journal_path = Path(path)

    if not journal_path.exists():
        return replay

    try:
        with open(journal_path, "r", encoding="utf-8", errors="replace") as f:
            for line_number, line in enumerate(f, start=1):
                text = line.strip()
                if not text:
                    continue
                try:
                    entry = json.loads(text)
                except json.JSONDecodeError:
                    replay.malformed += 1
                    logger.debug(f"Skipping malformed journal line {line_number}")
                    continue
                if not isinstance(entry, dict):
                    replay.malformed += 1
                    continue
                replay.parsed += 1
                url = entry.get("url")
                if isinstance(url, str) and url:
                    replay.seen.add(url)
    except OSError as e:
        raise JournalError(str(journal_path), e) from e

    if replay.malformed:
        logger.warning(
            f"Journal {journal_path}: skipped {replay.malformed} malformed line(s)"
        )
    return replay
