"""Token-bucket throttle for effectors."""

from __future__ import annotations

import threading
import time
from typing import Callable

from kvpatterns.cancellation import Context

Effector = Callable[[Context], str]


class TooManyCalls(Exception):
    """Raised when the throttle has no tokens left."""

    def __init__(self, message: str = "too many calls") -> None:
        super().__init__(message)


def throttle(effector: Effector, max_tokens: int, refill: int, interval: float) -> Effector:
    """Allow at most ``max_tokens`` calls, adding ``refill`` tokens every ``interval`` seconds.

    Refilling starts with the first call and stops when that call's context ends.
    """
    lock = threading.Lock()
    tokens = max_tokens
    started = False

    def refiller(ctx: Context) -> None:
        nonlocal tokens
        next_tick = time.monotonic() + interval
        while not ctx.wait(max(0.0, next_tick - time.monotonic())):
            with lock:
                tokens = min(tokens + refill, max_tokens)
            next_tick += interval
            now = time.monotonic()
            if next_tick <= now:
                # ticks missed while busy are dropped, not replayed
                next_tick += interval * ((now - next_tick) // interval + 1)

    def throttled(ctx: Context) -> str:
        nonlocal tokens, started
        if ctx.done():
            raise ctx.error()
        with lock:
            if not started:
                started = True
                threading.Thread(target=refiller, args=(ctx,), daemon=True).start()
            if tokens <= 0:
                raise TooManyCalls()
            tokens -= 1
            return effector(ctx)

    return throttled