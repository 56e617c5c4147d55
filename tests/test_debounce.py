import threading
import time

import pytest

from kvpatterns.cancellation import ContextCanceled, background, with_cancel
from kvpatterns.debounce import debounce_first, debounce_last


def counter():
    lock = threading.Lock()
    count = 0

    def circuit(ctx):
        nonlocal count
        with lock:
            count += 1
            return str(count)

    def calls():
        with lock:
            return count

    return circuit, calls


def fail_after(threshold):
    count = 0

    def circuit(ctx):
        nonlocal count
        count += 1
        if count > threshold:
            raise RuntimeError("INTENTIONAL FAIL!")
        return "Success"

    return circuit, lambda: count


def burst(func, ctx, n=10):
    results = []
    lock = threading.Lock()

    def worker():
        try:
            value = func(ctx)
        except Exception as exc:
            value = exc
        with lock:
            results.append(value)

    threads = [threading.Thread(target=worker) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def test_debounce_first_bursts():
    circuit, calls = fail_after(1)
    debounced = debounce_first(circuit, 0.5)
    ctx = background()

    first = burst(debounced, ctx)
    assert first == ["Success"] * 10
    assert calls() == 1

    time.sleep(1.0)

    second = burst(debounced, ctx)
    assert calls() == 2
    assert len(second) == 10
    assert all(isinstance(r, RuntimeError) for r in second)


def test_debounce_first_window_extends_with_each_call():
    circuit, calls = counter()
    debounced = debounce_first(circuit, 0.3)
    ctx = background()
    results = []
    for _ in range(3):
        results.append(debounced(ctx))
        time.sleep(0.2)
    time.sleep(0.4)
    results.append(debounced(ctx))
    assert results == ["1", "1", "1", "2"]
    assert calls() == 2


def test_debounce_last_bursts():
    circuit, calls = counter()
    debounced = debounce_last(circuit, 0.3)
    ctx = background()

    assert burst(debounced, ctx) == [""] * 10
    assert calls() == 0

    time.sleep(0.8)
    assert calls() == 1

    assert burst(debounced, ctx) == ["1"] * 10
    time.sleep(0.8)
    assert calls() == 2
    assert debounced(ctx) == "2"


def test_debounce_last_canceled_context():
    circuit, calls = counter()
    debounced = debounce_last(circuit, 5)
    ctx = with_cancel(background())
    assert debounced(ctx) == ""
    ctx.cancel()
    time.sleep(0.3)
    with pytest.raises(ContextCanceled):
        debounced(ctx)
    assert calls() == 0