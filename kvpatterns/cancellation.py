"""Cancellation contexts: cancel signals and deadlines passed down to work."""

from __future__ import annotations

import threading


class ContextCanceled(Exception):
    """Raised when work stops because its context was canceled."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceeded(TimeoutError):
    """Raised when work stops because its context's deadline passed."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class Context:
    """A cancel signal that propagates from a parent context to its children."""

    def __init__(self, parent: Context | None = None) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._error: BaseException | None = None
        self._children: list[Context] = []
        self._timer: threading.Timer | None = None
        self._parent = parent
        if parent is not None:
            parent._adopt(self)

    def _adopt(self, child: Context) -> None:
        with self._lock:
            if self._error is None:
                self._children.append(child)
                return
            error = self._error
        child._finish(error)

    def _forget(self, child: Context) -> None:
        with self._lock:
            if child in self._children:
                self._children.remove(child)

    def _finish(self, error: BaseException) -> None:
        with self._lock:
            if self._error is not None:
                return
            self._error = error
            children, self._children = self._children, []
            timer, self._timer = self._timer, None
        self._event.set()
        if timer is not None:
            timer.cancel()
        for child in children:
            child._finish(error)
        if self._parent is not None:
            self._parent._forget(self)

    def _arm_timer(self, seconds: float) -> None:
        timer = threading.Timer(seconds, self._finish, args=(DeadlineExceeded(),))
        timer.daemon = True
        with self._lock:
            if self._error is not None:
                return
            self._timer = timer
        timer.start()

    def cancel(self) -> None:
        """Cancel this context and every context derived from it."""
        self._finish(ContextCanceled())

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the context is done or the timeout passes; return whether it is done."""
        return self._event.wait(timeout)

    def done(self) -> bool:
        """Return whether the context has been canceled or has expired."""
        return self._event.is_set()

    def error(self) -> BaseException | None:
        """Return why the context is done, or None while it is still live."""
        with self._lock:
            return self._error


def background() -> Context:
    """Return a fresh root context."""
    return Context()


def with_cancel(parent: Context) -> Context:
    """Return a child of ``parent`` that can be canceled on its own."""
    return Context(parent)


def with_timeout(parent: Context, seconds: float) -> Context:
    """Return a child of ``parent`` that expires after ``seconds``."""
    ctx = Context(parent)
    if seconds <= 0:
        ctx._finish(DeadlineExceeded())
    elif not ctx.done():
        ctx._arm_timer(seconds)
    return ctx