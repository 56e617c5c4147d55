"""Retry wrapper for effectors that fail transiently."""

from __future__ import annotations

import logging
from typing import Callable

from kvpatterns.cancellation import Context

Effector = Callable[[Context], str]

log = logging.getLogger(__name__)


def retry(effector: Effector, retries: int, delay: float) -> Effector:
    """Call ``effector`` up to ``retries`` extra times, ``delay`` seconds apart.

    The last failure is raised; a context that ends during a delay raises its error.
    """

    def retrying(ctx: Context) -> str:
        attempt = 0
        while True:
            try:
                return effector(ctx)
            except Exception:
                if attempt >= retries:
                    raise
            attempt += 1
            log.warning("Attempt %d failed; retrying in %ss", attempt, delay)
            if ctx.wait(delay):
                raise ctx.error()

    return retrying