"""Tests for download retry timing (ExponentialBackoff)."""

from formula_tap.core.resilience import ExponentialBackoff


class TestExponentialBackoff:
    def test_should_retry_within_limit(self):
        backoff = ExponentialBackoff(max_retries=3)
        assert backoff.should_retry(0) is True
        assert backoff.should_retry(2) is True

    def test_should_not_retry_at_limit(self):
        backoff = ExponentialBackoff(max_retries=3)
        assert backoff.should_retry(3) is False

    def test_delay_within_jitter_band(self):
        backoff = ExponentialBackoff(base_delay=1.0, max_delay=60.0)
        for attempt, base in enumerate([1.0, 2.0, 4.0, 8.0]):
            assert base * 0.75 <= backoff.calculate_delay(attempt) <= base * 1.25

    def test_delay_capped_at_max(self):
        backoff = ExponentialBackoff(base_delay=1.0, max_delay=10.0)
        assert backoff.calculate_delay(100) <= 10.0 * 1.25

    def test_zero_base_delay(self):
        assert ExponentialBackoff(base_delay=0.0).calculate_delay(5) == 0.0


class TestRetryAfter:
    def test_honours_header(self):
        assert ExponentialBackoff(max_delay=30.0).retry_after("7") == 7.0

    def test_capped_at_max_delay(self):
        assert ExponentialBackoff(max_delay=30.0).retry_after("3600") == 30.0

    def test_missing_or_invalid_header(self):
        backoff = ExponentialBackoff(max_delay=5.0)
        assert backoff.retry_after(None) == 5.0
        assert backoff.retry_after("Wed, 21 Oct 2015 07:28:00 GMT") == 5.0
