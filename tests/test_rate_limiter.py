import pytest

from gowild_scanner.exceptions import RateLimitError
from gowild_scanner.rate_limiter import MinIntervalRateLimiter
from tests.conftest import FakeClock


def test_first_batch_allowed():
    limiter = MinIntervalRateLimiter(10, clock=FakeClock(100.0))
    limiter.acquire()
    assert limiter.last_scan == 100.0


def test_second_batch_inside_window_rejected_with_rounded_up_wait():
    clock = FakeClock(100.0)
    limiter = MinIntervalRateLimiter(10, clock=clock)
    limiter.acquire()

    clock.advance(3.2)
    with pytest.raises(RateLimitError) as exc:
        limiter.check()

    assert exc.value.retry_after == 7
    assert str(exc.value) == "Rate limited. Please wait 7 seconds."


def test_rejected_request_does_not_reset_window():
    clock = FakeClock(100.0)
    limiter = MinIntervalRateLimiter(10, clock=clock)
    limiter.acquire()

    clock.advance(5)
    with pytest.raises(RateLimitError):
        limiter.acquire()

    clock.advance(5)
    limiter.acquire()
    assert limiter.last_scan == 110.0


def test_remaining():
    clock = FakeClock(0.0)
    limiter = MinIntervalRateLimiter(10, clock=clock)
    assert limiter.remaining() == 0.0

    limiter.mark()
    clock.advance(4)
    assert limiter.remaining() == 6.0

    clock.advance(20)
    assert limiter.remaining() == 0.0
