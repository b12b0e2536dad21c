import pytest

from exceptions import InvariantViolation
from rate_limiter import RateLimiter


@pytest.mark.asyncio
async def test_first_dispatch_does_not_wait(fake_clock):
    limiter = RateLimiter(5.0, clock=fake_clock, sleep=fake_clock.sleep)

    started = await limiter.acquire()

    assert started == 100.0
    assert fake_clock.sleeps == []
    assert limiter.last_dispatch_start == 100.0


@pytest.mark.asyncio
async def test_waits_out_the_remaining_interval(fake_clock):
    limiter = RateLimiter(5.0, clock=fake_clock, sleep=fake_clock.sleep)
    await limiter.acquire()
    fake_clock.now += 3.0

    assert limiter.delay_until_ready() == pytest.approx(2.0)
    started = await limiter.acquire()

    assert fake_clock.sleeps == [pytest.approx(2.0)]
    assert started - 100.0 >= 5.0


@pytest.mark.asyncio
async def test_no_wait_once_interval_has_elapsed(fake_clock):
    limiter = RateLimiter(5.0, clock=fake_clock, sleep=fake_clock.sleep)
    await limiter.acquire()
    fake_clock.now += 7.5

    await limiter.acquire()

    assert fake_clock.sleeps == []


@pytest.mark.asyncio
async def test_wait_does_not_claim_the_slot(fake_clock):
    limiter = RateLimiter(5.0, clock=fake_clock, sleep=fake_clock.sleep)
    limiter.record_dispatch()

    await limiter.wait()

    assert limiter.last_dispatch_start == 100.0
    assert limiter.delay_until_ready() == 0.0


@pytest.mark.asyncio
async def test_rewaits_when_woken_early():
    now = [0.0]
    sleeps = []

    async def early_sleep(seconds):
        sleeps.append(seconds)
        now[0] += seconds - 1.0 if len(sleeps) == 1 else seconds

    limiter = RateLimiter(4.0, clock=lambda: now[0], sleep=early_sleep)
    limiter.record_dispatch()

    started = await limiter.acquire()

    assert sleeps == [4.0, 1.0]
    assert started >= 4.0


def test_recording_too_early_is_an_invariant_violation(fake_clock):
    limiter = RateLimiter(5.0, clock=fake_clock, sleep=fake_clock.sleep)
    limiter.record_dispatch()
    fake_clock.now += 1.0

    with pytest.raises(InvariantViolation):
        limiter.record_dispatch()


def test_reset_forgets_last_dispatch(fake_clock):
    limiter = RateLimiter(5.0, clock=fake_clock, sleep=fake_clock.sleep)
    limiter.record_dispatch()
    limiter.reset()

    assert limiter.last_dispatch_start is None
    assert limiter.delay_until_ready() == 0.0
