import time

import pytest

from kvpatterns.cancellation import DeadlineExceeded, background, with_timeout
from kvpatterns.throttle import TooManyCalls, throttle


def calls_count_function():
    count = 0

    def effector(ctx):
        nonlocal count
        count += 1
        return f"call {count}"

    return effector, lambda: count


def call_quietly(func, ctx):
    try:
        return func(ctx)
    except TooManyCalls:
        return None


@pytest.mark.parametrize("max_tokens", [1, 10])
def test_throttle_max(max_tokens):
    effector, calls = calls_count_function()
    throttled = throttle(effector, max_tokens, max_tokens, 1.0)
    ctx = background()
    for _ in range(100):
        call_quietly(throttled, ctx)
    assert calls() == max_tokens


def test_throttle_raises_when_empty():
    effector, _ = calls_count_function()
    throttled = throttle(effector, 1, 1, 10.0)
    ctx = background()
    assert throttled(ctx) == "call 1"
    with pytest.raises(TooManyCalls, match="too many calls"):
        throttled(ctx)


def test_throttle_call_frequency():
    effector, calls = calls_count_function()
    throttled = throttle(effector, 1, 1, 0.4)
    ctx = background()
    start = time.monotonic()
    results = []
    for tick in range(1, 21):
        time.sleep(max(0.0, start + tick * 0.1 - time.monotonic()))
        results.append(call_quietly(throttled, ctx))
    passed = [r for r in results if r is not None]
    assert passed == ["call 1", "call 2", "call 3", "call 4", "call 5"]
    assert results.count(None) == 15
    assert calls() == 5


def test_throttle_variable_refill():
    effector, calls = calls_count_function()
    throttled = throttle(effector, 4, 2, 0.5)
    ctx = background()
    first = [call_quietly(throttled, ctx) for _ in range(6)]
    assert first.count(None) == 2
    time.sleep(0.6)
    second = [call_quietly(throttled, ctx) for _ in range(3)]
    assert second == ["call 5", "call 6", None]
    assert calls() == 6


def test_throttle_refill_is_capped():
    effector, calls = calls_count_function()
    throttled = throttle(effector, 2, 2, 0.1)
    ctx = background()
    assert throttled(ctx) == "call 1"
    time.sleep(0.5)
    results = [call_quietly(throttled, ctx) for _ in range(5)]
    assert results.count(None) == 3
    assert calls() == 3


def test_throttle_context_timeout():
    effector, calls = calls_count_function()
    ctx = with_timeout(background(), 0.25)
    throttled = throttle(effector, 1, 1, 1.0)
    assert throttled(ctx) == "call 1"
    time.sleep(0.3)
    with pytest.raises(DeadlineExceeded):
        throttled(ctx)
    assert calls() == 1