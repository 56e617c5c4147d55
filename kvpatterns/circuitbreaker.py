"""Circuit breaker that backs off exponentially after repeated failures."""

from __future__ import annotations

import threading
import time
from typing import Callable

from kvpatterns.cancellation import Context

Circuit = Callable[[Context], str]

_BASE_BACKOFF = 2.0
_MAX_SHIFT = 64


class ServiceUnreachable(Exception):
    """Raised while the breaker is open and refuses to call the service."""

    def __init__(self, message: str = "service unreachable") -> None:
        super().__init__(message)


def breaker(circuit: Circuit, failure_threshold: int) -> Circuit:
    """Wrap ``circuit`` so it opens once failures reach ``failure_threshold``.

    While open, calls fail fast with ServiceUnreachable until a back-off of
    2s doubled per extra failure has passed since the last attempt.
    """
    lock = threading.Lock()
    consecutive_failures = 0
    last_attempt = time.monotonic()

    def guarded(ctx: Context) -> str:
        nonlocal consecutive_failures, last_attempt

        with lock:
            excess = consecutive_failures - failure_threshold
            if excess >= 0:
                retry_at = last_attempt + _BASE_BACKOFF * 2 ** min(excess, _MAX_SHIFT)
                if not time.monotonic() > retry_at:
                    raise ServiceUnreachable()

        try:
            response = circuit(ctx)
        except Exception:
            with lock:
                last_attempt = time.monotonic()
                consecutive_failures += 1
            raise

        with lock:
            last_attempt = time.monotonic()
            consecutive_failures = 0
        return response

    return guarded