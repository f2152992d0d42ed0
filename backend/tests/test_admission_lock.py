"""
Admission lock strategies: serialization, timeouts and Redis degradation.
"""

import asyncio
from datetime import date

import pytest
from pydantic import ValidationError
from redis.exceptions import ConnectionError as RedisConnectionError

from ludus.core.config import Settings
from ludus.core.exceptions import AdmissionBusyError
from ludus.services import admission_service
from ludus.services.admission_service import RedisAdmissionLock
from ludus.services.interfaces.admission import admission_key
from ludus.services.interfaces.local_admission import LocalAdmissionLock
from ludus.services.strategy_factory import get_admission_strategy


class FakeRedisLock:
    def __init__(self, acquire_result=True, acquire_error=None):
        self.acquire_result = acquire_result
        self.acquire_error = acquire_error
        self.released = False

    async def acquire(self):
        if self.acquire_error:
            raise self.acquire_error
        return self.acquire_result

    async def release(self):
        self.released = True


class FakeRedis:
    def __init__(self, lock: FakeRedisLock):
        self._lock = lock
        self.lock_names = []

    def lock(self, name, timeout=None, blocking_timeout=None):
        self.lock_names.append(name)
        return self._lock


def use_fake_redis(monkeypatch, fake):
    async def fake_get_redis():
        return fake

    monkeypatch.setattr(admission_service, "get_redis", fake_get_redis)


def test_admission_key_format():
    assert admission_key(7, date(2025, 6, 1)) == "admission:7:2025-06-01"
    assert admission_key(7, date(2025, 6, 1), "09:30") == "admission:7:2025-06-01:09:30"


def test_default_strategy_is_local():
    assert isinstance(get_admission_strategy(), LocalAdmissionLock)


@pytest.mark.asyncio
async def test_local_lock_serializes_same_key():
    lock = LocalAdmissionLock()
    inside = 0
    peak = 0

    async def worker():
        nonlocal inside, peak
        async with lock.hold("admission:1:2025-06-01"):
            inside += 1
            peak = max(peak, inside)
            await asyncio.sleep(0.01)
            inside -= 1

    await asyncio.gather(*(worker() for _ in range(5)))
    assert peak == 1
    assert lock.active_keys() == []


@pytest.mark.asyncio
async def test_local_lock_different_keys_do_not_block():
    lock = LocalAdmissionLock(timeout=0.5)
    both_inside = asyncio.Event()
    entered = []

    async def worker(key):
        async with lock.hold(key):
            entered.append(key)
            if len(entered) == 2:
                both_inside.set()
            await asyncio.wait_for(both_inside.wait(), timeout=1)

    await asyncio.gather(worker("admission:1:2025-06-01"), worker("admission:1:2025-06-02"))
    assert sorted(entered) == ["admission:1:2025-06-01", "admission:1:2025-06-02"]


@pytest.mark.asyncio
async def test_local_lock_times_out():
    lock = LocalAdmissionLock(timeout=0.05)
    key = "admission:1:2025-06-01"

    async with lock.hold(key):
        with pytest.raises(AdmissionBusyError) as exc_info:
            async with lock.hold(key):
                pass
        assert exc_info.value.status_code == 409

    assert lock.active_keys() == []


@pytest.mark.asyncio
async def test_local_lock_released_on_error():
    lock = LocalAdmissionLock(timeout=0.05)
    key = "admission:1:2025-06-01"

    with pytest.raises(RuntimeError):
        async with lock.hold(key):
            raise RuntimeError("boom")

    async with lock.hold(key):
        assert lock.active_keys() == [key]


@pytest.mark.asyncio
async def test_redis_lock_degrades_to_local_when_disabled():
    # Redis is disabled in the test environment
    lock = RedisAdmissionLock(timeout=0.5)
    async with lock.hold("admission:1:2025-06-01"):
        assert lock.fallback.active_keys() == ["admission:1:2025-06-01"]
    assert lock.fallback.active_keys() == []


@pytest.mark.asyncio
async def test_redis_lock_acquires_and_releases(monkeypatch):
    fake_lock = FakeRedisLock()
    fake = FakeRedis(fake_lock)
    use_fake_redis(monkeypatch, fake)

    lock = RedisAdmissionLock(timeout=0.5)
    async with lock.hold("admission:3:2025-06-01"):
        assert lock.fallback.active_keys() == []

    assert fake.lock_names == ["lock:admission:3:2025-06-01"]
    assert fake_lock.released


@pytest.mark.asyncio
async def test_redis_lock_busy(monkeypatch):
    use_fake_redis(monkeypatch, FakeRedis(FakeRedisLock(acquire_result=False)))

    lock = RedisAdmissionLock(timeout=0.1)
    with pytest.raises(AdmissionBusyError):
        async with lock.hold("admission:3:2025-06-01"):
            pass


@pytest.mark.asyncio
async def test_redis_error_falls_back_to_local(monkeypatch):
    fake_lock = FakeRedisLock(acquire_error=RedisConnectionError("connection refused"))
    use_fake_redis(monkeypatch, FakeRedis(fake_lock))

    lock = RedisAdmissionLock(timeout=0.5)
    async with lock.hold("admission:3:2025-06-01"):
        assert lock.fallback.active_keys() == ["admission:3:2025-06-01"]
    assert not fake_lock.released


@pytest.mark.parametrize(
    "overrides",
    [{"CAPACITY_GRANULARITY": "hour"}, {"ADMISSION_STRATEGY": "zookeeper"}],
)
def test_unknown_admission_settings_fail_at_load(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_known_admission_settings_load():
    loaded = Settings(CAPACITY_GRANULARITY="slot", ADMISSION_STRATEGY="redis")
    assert (loaded.CAPACITY_GRANULARITY, loaded.ADMISSION_STRATEGY) == ("slot", "redis")
