import pytest

from onion_bot.relay.ratelimit import RateLimiter, Verdict


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_sixth_message_in_window_is_denied():
    clock = _Clock()
    limiter = RateLimiter(points=5, duration=1.0, clock=clock)

    verdicts = [limiter.consume(7) for _ in range(6)]

    assert verdicts[:5] == [Verdict.ALLOWED] * 5
    assert verdicts[5] is Verdict.DENIED
    assert limiter.state_for(7).points_remaining == 0


def test_window_resets_after_duration():
    clock = _Clock()
    limiter = RateLimiter(points=1, duration=1.0, clock=clock)

    assert limiter.consume(7) is Verdict.ALLOWED
    clock.now += 0.5
    assert limiter.consume(7) is Verdict.DENIED
    clock.now += 0.5
    assert limiter.consume(7) is Verdict.ALLOWED


def test_authors_have_independent_budgets():
    limiter = RateLimiter(points=1, duration=10.0, clock=_Clock())

    assert limiter.consume(1) is Verdict.ALLOWED
    assert limiter.consume(2) is Verdict.ALLOWED
    assert limiter.consume(1) is Verdict.DENIED


def test_prune_forgets_elapsed_windows():
    clock = _Clock()
    limiter = RateLimiter(points=5, duration=1.0, clock=clock)
    limiter.consume(1)
    clock.now += 0.5
    limiter.consume(2)
    clock.now += 0.6

    assert limiter.prune() == 1
    assert limiter.state_for(1) is None
    assert limiter.state_for(2) is not None


@pytest.mark.parametrize("points, duration", [(0, 1.0), (5, 0)])
def test_rejects_invalid_configuration(points, duration):
    with pytest.raises(ValueError):
        RateLimiter(points=points, duration=duration)
