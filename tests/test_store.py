import threading

import pytest

from kvpatterns.store import KeyValueStore, NoSuchKey


@pytest.fixture
def store():
    return KeyValueStore()


def test_put(store):
    key, value = "create-key", "create-value"

    with pytest.raises(NoSuchKey):
        store.get(key)

    store.put(key, value)

    assert store.get(key) == value


def test_get(store):
    key, value = "read-key", "read-value"

    with pytest.raises(NoSuchKey) as info:
        store.get(key)
    assert str(info.value) == "no such key"

    store.put(key, value)

    assert store.get(key) == value


def test_delete(store):
    key, value = "delete-key", "delete-value"

    store.put(key, value)
    assert store.get(key) == value

    store.delete(key)

    with pytest.raises(NoSuchKey):
        store.get(key)


def test_delete_missing_key_is_a_no_op(store):
    store.put("kept", "value")
    store.delete("missing")
    assert store.get("kept") == "value"


def test_put_overwrites(store):
    store.put("k", "first")
    store.put("k", "second")
    assert store.get("k") == "second"


def test_no_such_key_is_a_key_error(store):
    with pytest.raises(KeyError):
        store.get("absent")


def test_concurrent_puts_all_land(store):
    def writer(n):
        for i in range(50):
            store.put(f"{n}-{i}", str(i))

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert all(store.get(f"{n}-{i}") == str(i) for n in range(8) for i in range(50))