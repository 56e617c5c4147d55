"""A future whose result is computed once in the background."""

from __future__ import annotations

import threading
from typing import Any, Callable

from kvpatterns.cancellation import Context

_SLEEP_SECONDS = 2.0


class Future:
    """Runs ``func(*args)`` on a background thread; ``result`` waits for it."""

    def __init__(self, func: Callable[..., Any], *args: Any) -> None:
        self._done = threading.Event()
        self._value: Any = None
        self._error: BaseException | None = None
        threading.Thread(target=self._run, args=(func, args), daemon=True).start()

    def _run(self, func: Callable[..., Any], args: tuple) -> None:
        try:
            self._value = func(*args)
        except Exception as exc:
            self._error = exc
        finally:
            self._done.set()

    def result(self) -> Any:
        """Block until the work finishes; return its value or raise its error."""
        self._done.wait()
        if self._error is not None:
            raise self._error
        return self._value


def _sleep_then_report(ctx: Context) -> str:
    if ctx.wait(_SLEEP_SECONDS):
        raise ctx.error()
    return "I slept for 2 seconds"


def slow_function(ctx: Context) -> Future:
    """Start two seconds of work that stops early if ``ctx`` is done."""
    return Future(_sleep_then_report, ctx)