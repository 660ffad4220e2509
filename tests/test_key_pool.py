import threading
from collections import Counter

import pytest

from fitness_chat.errors import NoCredentialsConfigured, PoolEmpty
from fitness_chat.services.key_pool import KeyPool


def test_initialize_filters_missing_and_blank_values_in_order():
    pool = KeyPool.initialize([None, "k1", "", "k2", "   ", None, "k3"])
    assert pool.credentials == ("k1", "k2", "k3")
    assert pool.size == 3
    assert len(pool) == 3


def test_initialize_keeps_duplicates():
    pool = KeyPool.initialize(["k1", "k1", "k2"])
    assert pool.credentials == ("k1", "k1", "k2")


def test_initialize_keeps_values_as_configured():
    pool = KeyPool.initialize([" k1", "k2\n", "\t"])
    assert pool.credentials == (" k1", "k2\n")


def test_initialize_allows_empty_pool():
    pool = KeyPool.initialize([None, ""])
    assert pool.size == 0
    assert not pool


def test_take_next_is_round_robin_in_configured_order():
    pool = KeyPool.initialize(["k1", "k2", "k3"])
    assert [pool.take_next() for _ in range(3)] == ["k1", "k2", "k3"]
    # (N+1)-th call wraps back to the first key.
    assert pool.take_next() == "k1"


def test_take_next_on_single_key_pool_always_returns_it():
    pool = KeyPool.initialize(["only"])
    assert [pool.take_next() for _ in range(4)] == ["only"] * 4


def test_take_next_on_empty_pool_raises_pool_empty():
    pool = KeyPool.initialize([])
    with pytest.raises(PoolEmpty):
        pool.take_next()
    # PoolEmpty is reported to the API as "No API keys configured".
    with pytest.raises(NoCredentialsConfigured, match="No API keys configured"):
        pool.take_next()


def test_take_next_advances_exactly_once_per_call_under_threads():
    pool = KeyPool.initialize(["k1", "k2", "k3"])
    taken = []
    taken_lock = threading.Lock()

    def worker():
        local = [pool.take_next() for _ in range(100)]
        with taken_lock:
            taken.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert Counter(taken) == {"k1": 200, "k2": 200, "k3": 200}
    assert pool.status()["cursor"] == 0


def test_status_masks_keys():
    pool = KeyPool.initialize(["sk-or-v1-abcdefghijkl", "short"])
    pool.take_next()
    status = pool.status()
    assert status == {
        "total_keys": 2,
        "cursor": 1,
        "keys": ["sk-or-v1...", "***"],
    }
