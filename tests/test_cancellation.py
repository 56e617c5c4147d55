import pytest

from kvpatterns.cancellation import (
    Context,
    ContextCanceled,
    DeadlineExceeded,
    background,
    with_cancel,
    with_timeout,
)


def test_background_is_live():
    ctx = background()
    assert ctx.done() is False
    assert ctx.error() is None
    assert ctx.wait(0.01) is False


def test_cancel_marks_done_with_canceled_error():
    ctx = with_cancel(background())
    ctx.cancel()
    assert ctx.done() is True
    assert isinstance(ctx.error(), ContextCanceled)
    assert "canceled" in str(ctx.error())
    assert ctx.wait(0) is True


def test_first_error_is_kept():
    ctx = with_timeout(background(), 0.01)
    assert ctx.wait(2.0) is True
    ctx.cancel()
    assert isinstance(ctx.error(), DeadlineExceeded)


def test_parent_cancel_reaches_children():
    parent = with_cancel(background())
    child = with_cancel(parent)
    grandchild = with_cancel(child)
    parent.cancel()
    assert child.done() and grandchild.done()
    assert isinstance(grandchild.error(), ContextCanceled)


def test_child_cancel_leaves_parent_live():
    parent = with_cancel(background())
    child = with_cancel(parent)
    child.cancel()
    assert child.done() is True
    assert parent.done() is False


def test_child_of_done_parent_starts_done():
    parent = with_cancel(background())
    parent.cancel()
    child = Context(parent)
    assert child.done() is True
    assert isinstance(child.error(), ContextCanceled)


def test_timeout_expires_with_deadline_error():
    ctx = with_timeout(background(), 0.05)
    assert ctx.wait(2.0) is True
    assert "deadline" in str(ctx.error())
    with pytest.raises(TimeoutError):
        raise ctx.error()


def test_timeout_canceled_before_expiry():
    ctx = with_timeout(background(), 5)
    assert ctx.done() is False
    ctx.cancel()
    assert isinstance(ctx.error(), ContextCanceled)


def test_timeout_inherited_from_parent():
    parent = with_timeout(background(), 0.05)
    child = with_timeout(parent, 30)
    assert child.wait(2.0) is True
    assert isinstance(child.error(), DeadlineExceeded)


def test_non_positive_timeout_is_done_at_once():
    ctx = with_timeout(background(), 0)
    assert ctx.done() is True
    assert isinstance(ctx.error(), DeadlineExceeded)