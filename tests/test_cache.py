import threading

from app.core.cache import CacheStore, EntryState
from conftest import FakeClock


def test_missing_key_returns_none():
    store = CacheStore(FakeClock())
    assert store.get("panchangam:2024-01-22") is None


def test_cas_loading_wins_once_until_released():
    store = CacheStore(FakeClock())
    assert store.compare_and_set_loading("k") is True
    assert store.compare_and_set_loading("k") is False
    assert store.get("k").state is EntryState.LOADING

    store.set("k", {"a": 1}, EntryState.READY)
    assert store.compare_and_set_loading("k") is True


def test_cas_from_failed_and_keeps_value():
    store = CacheStore(FakeClock())
    store.set("k", {"old": True}, EntryState.READY)
    store.set("k", {"old": True}, EntryState.FAILED, error="boom")

    assert store.compare_and_set_loading("k") is True
    entry = store.get("k")
    assert entry.state is EntryState.LOADING
    assert entry.value == {"old": True}


def test_ready_entry_expires_logically_but_stays_servable():
    clock = FakeClock()
    store = CacheStore(clock, default_ttl=60)
    store.set("k", "v", EntryState.READY)
    assert store.is_fresh(store.get("k"))

    clock.advance(60)
    entry = store.get("k")
    assert not store.is_fresh(entry)
    assert entry.state is EntryState.READY
    assert entry.value == "v"


def test_failed_write_preserves_fetched_at():
    clock = FakeClock()
    store = CacheStore(clock)
    ready = store.set("k", "v", EntryState.READY)
    clock.advance(5)
    failed = store.set("k", "v", EntryState.FAILED, error="timeout")
    assert failed.fetched_at == ready.fetched_at
    assert failed.error == "timeout"


def test_per_entry_ttl_override():
    clock = FakeClock()
    store = CacheStore(clock, default_ttl=1000)
    store.set("short", "v", EntryState.READY, ttl=10)
    clock.advance(11)
    assert not store.is_fresh(store.get("short"))


def test_cas_is_exclusive_across_threads():
    store = CacheStore(FakeClock())
    wins = []
    barrier = threading.Barrier(16)

    def contend():
        barrier.wait()
        wins.append(store.compare_and_set_loading("race"))

    threads = [threading.Thread(target=contend) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert wins.count(True) == 1


def test_sweep_drops_old_entries_but_not_loading_ones():
    clock = FakeClock()
    store = CacheStore(clock)
    store.set("old", "v", EntryState.READY)
    store.compare_and_set_loading("busy")
    clock.advance(100)
    store.set("new", "v", EntryState.READY)

    assert store.sweep(retention_s=50) == 1
    assert store.get("old") is None
    assert store.get("busy") is not None
    assert store.get("new") is not None


def test_sweep_keeps_a_recent_cold_failure():
    clock = FakeClock()
    store = CacheStore(clock)
    store.compare_and_set_loading("panchangam:2024-01-22")
    store.set("panchangam:2024-01-22", None, EntryState.FAILED, error="HTTP 503")
    clock.advance(1)

    assert store.sweep(retention_s=3 * 24 * 60 * 60) == 0
    assert store.get("panchangam:2024-01-22").error == "HTTP 503"


def test_sweep_ages_cold_failures_from_first_touch():
    clock = FakeClock()
    store = CacheStore(clock)
    store.compare_and_set_loading("k")
    clock.advance(30)
    store.set("k", None, EntryState.FAILED, error="boom")
    assert store.get("k").created_at == 1000.0

    clock.advance(30)
    assert store.sweep(retention_s=50) == 1
    assert store.get("k") is None


def test_summary_reports_state_and_age():
    clock = FakeClock()
    store = CacheStore(clock)
    store.set("k", "v", EntryState.READY)
    clock.advance(2.5)
    store.compare_and_set_loading("cold")

    summary = store.summary()
    assert summary["k"] == {"state": "ready", "age_s": 2.5}
    assert summary["cold"] == {"state": "loading", "age_s": None}
