"""Debouncing wrappers that collapse bursts of calls into one."""

from __future__ import annotations

import threading
import time
from typing import Callable

from kvpatterns.cancellation import Context

Circuit = Callable[[Context], str]

_POLL_INTERVAL = 0.1

_Outcome = tuple  # (result, error)


def _call(circuit: Circuit, ctx: Context) -> _Outcome:
    try:
        return circuit(ctx), None
    except Exception as exc:
        return None, exc


def _replay(outcome: _Outcome) -> str:
    result, error = outcome
    if error is not None:
        raise error
    return result


def debounce_first(circuit: Circuit, duration: float) -> Circuit:
    """Call ``circuit`` at once, then replay its outcome for calls within ``duration`` seconds.

    Every call, replayed or not, pushes the quiet window forward.
    """
    lock = threading.Lock()
    threshold: float | None = None
    outcome: _Outcome = ("", None)

    def debounced(ctx: Context) -> str:
        nonlocal threshold, outcome
        with lock:
            try:
                if threshold is not None and time.monotonic() < threshold:
                    return _replay(outcome)
                outcome = _call(circuit, ctx)
                return _replay(outcome)
            finally:
                threshold = time.monotonic() + duration

    return debounced


def debounce_last(circuit: Circuit, duration: float) -> Circuit:
    """Call ``circuit`` only once calls have stopped for ``duration`` seconds.

    Each call returns the outcome of the most recent completed run, which is
    an empty string before the first run.
    """
    lock = threading.Lock()
    threshold = time.monotonic()
    running = False
    outcome: _Outcome = ("", None)

    def watch(ctx: Context) -> None:
        nonlocal outcome, running
        try:
            while True:
                if ctx.wait(_POLL_INTERVAL):
                    with lock:
                        outcome = ("", ctx.error())
                    return
                with lock:
                    if time.monotonic() > threshold:
                        outcome = _call(circuit, ctx)
                        return
        finally:
            with lock:
                running = False

    def debounced(ctx: Context) -> str:
        nonlocal threshold, running
        with lock:
            threshold = time.monotonic() + duration
            if not running:
                running = True
                threading.Thread(target=watch, args=(ctx,), daemon=True).start()
            return _replay(outcome)

    return debounced