"""Tests for RetryPolicy."""

import pytest

from harvester.retry import AttemptOutcome, RetryPolicy


class TestRetryPolicy:
    """Tests for the retry state machine."""

    def test_defaults(self):
        """Test default tries and backoff bounds."""
        policy = RetryPolicy()
        assert policy.tries == 4
        assert policy.base_backoff == 1.2
        assert policy.cap_backoff == 10.0

    def test_backoff_grows_with_attempt(self):
        """Test that backoff grows by the base step per attempt."""
        policy = RetryPolicy()
        assert policy.backoff(1) == pytest.approx(1.2)
        assert policy.backoff(2) == pytest.approx(2.4)
        assert policy.backoff(3) == pytest.approx(3.6)

    def test_backoff_is_capped(self):
        """Test that backoff never exceeds the cap."""
        policy = RetryPolicy(tries=20)
        assert policy.backoff(9) == pytest.approx(10.0)
        assert policy.backoff(15) == pytest.approx(10.0)

    def test_after_failure(self):
        """Test that failures are retryable until the last try."""
        policy = RetryPolicy(tries=3)
        assert policy.after_failure(1) is AttemptOutcome.RETRYABLE
        assert policy.after_failure(2) is AttemptOutcome.RETRYABLE
        assert policy.after_failure(3) is AttemptOutcome.EXHAUSTED

    def test_single_try_never_retries(self):
        """Test that a one-try policy is exhausted by the first failure."""
        policy = RetryPolicy(tries=1)
        assert policy.after_failure(1) is AttemptOutcome.EXHAUSTED

    @pytest.mark.parametrize("kwargs", [
        {"tries": 0},
        {"base_backoff": -1},
        {"cap_backoff": -0.5},
    ])
    def test_invalid_policy(self, kwargs):
        """Test that invalid budgets are rejected."""
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)
