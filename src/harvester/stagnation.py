"""Stagnation detection: deciding when the listing has run dry."""

import logging

from harvester.constants import DEFAULT_MAX_NO_NEW_ROUNDS
from harvester.models import RoundOutcome

logger = logging.getLogger(__name__)


class StagnationDetector:
    """
    Counts consecutive rounds that persisted no new record.

    A round that discovered candidates but only re-saw duplicates (or only
    failed to fetch them) still counts as stagnant; any round that adds a
    record resets the counter.
    """

    def __init__(self, max_no_new: int = DEFAULT_MAX_NO_NEW_ROUNDS):
        if max_no_new < 1:
            raise ValueError("max_no_new must be at least 1")
        self.max_no_new = max_no_new
        self.stagnant_rounds = 0

    @property
    def should_stop(self) -> bool:
        return self.stagnant_rounds >= self.max_no_new

    def record_round(self, outcome: RoundOutcome) -> bool:
        """Update the counter with a finished round.

        Returns:
            True once the stagnation threshold is reached
        """
        if outcome.added > 0:
            self.stagnant_rounds = 0
        else:
            self.stagnant_rounds += 1
            logger.debug(
                f"No new records this round (discovered={outcome.discovered}, "
                f"failed={outcome.failed}); stagnant {self.stagnant_rounds}/{self.max_no_new}"
            )
        return self.should_stop

    def record_listing_failure(self) -> bool:
        """Count an empty or broken listing round as a no-progress round."""
        return self.record_round(RoundOutcome(discovered=0, added=0))
