import pytest

from research.exceptions import RateLimitExceededError
from research.models.source import RateLimit
from research.sources.rate_limiter import TokenBucket, RateLimiterPool


def test_bucket_starts_full_and_drains(fake_clock):
    bucket = TokenBucket(capacity=3, refill_per_second=1, name="test", clock=fake_clock, sleep=fake_clock.sleep)

    assert bucket.try_acquire() == 0
    assert bucket.try_acquire() == 0
    assert bucket.try_acquire() == 0
    assert bucket.try_acquire() == pytest.approx(1.0)


def test_bucket_refills_over_time_up_to_capacity(fake_clock):
    bucket = TokenBucket(capacity=2, refill_per_second=0.5, clock=fake_clock, sleep=fake_clock.sleep)
    bucket.try_acquire(2)

    fake_clock.now += 2
    assert bucket.available == pytest.approx(1.0)

    fake_clock.now += 100
    assert bucket.available == pytest.approx(2.0)


def test_acquire_sleeps_until_a_token_is_available(fake_clock):
    bucket = TokenBucket(capacity=1, refill_per_second=0.25, clock=fake_clock, sleep=fake_clock.sleep)

    bucket.acquire()
    bucket.acquire()

    assert fake_clock.sleeps == [pytest.approx(4.0)]


def test_acquire_gives_up_beyond_max_wait(fake_clock):
    bucket = TokenBucket(capacity=1, refill_per_second=0.1, name="slow", clock=fake_clock, sleep=fake_clock.sleep)
    bucket.acquire()

    with pytest.raises(RateLimitExceededError):
        bucket.acquire(max_wait=1)

    assert fake_clock.sleeps == []


def test_bucket_parameters_come_from_source_rate_limit(fake_clock):
    bucket = TokenBucket.from_rate_limit(RateLimit(requests=30, period_minutes=60), clock=fake_clock)

    assert bucket.capacity == 30
    assert bucket.refill_per_second == pytest.approx(30 / 3600)


def test_invalid_bucket_is_rejected():
    with pytest.raises(ValueError):
        TokenBucket(capacity=0, refill_per_second=1)


def test_pool_keeps_one_bucket_per_source(fake_clock, source_factory):
    pool = RateLimiterPool(clock=fake_clock, sleep=fake_clock.sleep)
    hindu = source_factory("The Hindu", rate_limit={"requests": 10, "period_minutes": 60})
    pib = source_factory("PIB")

    assert pool.for_source(hindu) is pool.for_source(hindu)
    assert pool.for_source(hindu) is not pool.for_source(pib)
    assert pool.for_source(hindu).capacity == 10
