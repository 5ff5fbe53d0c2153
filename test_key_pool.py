import pytest

from exceptions import ConfigurationError
from key_pool import CredentialRecord, KeyPool, mask_key


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def test_empty_pool_fails_fast():
    with pytest.raises(ConfigurationError):
        KeyPool([])


def test_all_keys_start_available():
    pool = KeyPool(["a", "b", "c"])
    assert len(pool) == 3
    assert pool.available_count() == 3


def test_acquire_is_first_fit():
    pool = KeyPool(["A", "B", "C"])
    assert pool.acquire() == "A"
    assert pool.acquire() == "A"


def test_acquire_skips_rate_limited_key():
    pool = KeyPool(["A", "B", "C"])
    pool.mark_rate_limited("A")
    assert pool.acquire() == "B"


def test_acquire_records_last_used():
    clock = FakeClock(now=50.0)
    pool = KeyPool(["A"], clock=clock)
    pool.acquire()
    assert pool._records[0].last_used_at == 50.0


def test_acquire_returns_none_when_all_cooling_down():
    pool = KeyPool(["A", "B"])
    pool.mark_rate_limited("A")
    pool.mark_rate_limited("B")
    assert pool.acquire() is None
    assert pool.available_count() == 0


def test_cooldown_expiry_makes_key_available_without_clearing_flag():
    clock = FakeClock()
    pool = KeyPool(["A"], clock=clock)
    pool.mark_rate_limited("A", cooldown_seconds=1)
    assert pool.acquire() is None

    clock.advance(1)
    assert pool.acquire() == "A"
    # the flag stays set; only the reset time decides availability
    assert pool._records[0].is_rate_limited is True


def test_is_available_by_key():
    clock = FakeClock()
    pool = KeyPool(["A", "B"], clock=clock)
    pool.mark_rate_limited("A", cooldown_seconds=5)
    assert pool.is_available("A") is False
    assert pool.is_available("B") is True
    assert pool.is_available("missing") is False
    clock.advance(5)
    assert pool.is_available("A") is True


def test_mark_unknown_key_is_noop():
    pool = KeyPool(["A"])
    pool.mark_rate_limited("missing")
    assert pool.acquire() == "A"


def test_mark_rate_limited_sets_reset_time():
    clock = FakeClock(now=10.0)
    pool = KeyPool(["A", "B"], clock=clock)
    pool.mark_rate_limited("A")
    record = pool._records[0]
    assert record.is_rate_limited is True
    assert record.rate_limit_reset_at == 70.0


def test_mark_rate_limited_logs_when_all_exhausted(caplog):
    pool = KeyPool(["A"])
    with caplog.at_level("WARNING", logger="key_pool"):
        pool.mark_rate_limited("A")
    assert "All API keys are currently rate limited" in caplog.text


def test_record_availability_predicate():
    record = CredentialRecord(identifier="k", is_rate_limited=True, rate_limit_reset_at=5.0)
    assert not record.is_available(4.9)
    assert record.is_available(5.0)


def test_snapshot_masks_keys():
    clock = FakeClock()
    pool = KeyPool(["AIzaSyLongSecretKey", "AIzaSyOther"], clock=clock)
    pool.mark_rate_limited("AIzaSyLongSecretKey", cooldown_seconds=30)
    snap = pool.snapshot()
    assert snap[0] == {"key": "AIzaSy...", "available": False, "rate_limited": True, "reset_in_seconds": 30}
    assert snap[1]["available"] is True
    assert "AIzaSyLongSecretKey" not in str(snap)
    assert mask_key("abcdefgh") == "abcdef..."
