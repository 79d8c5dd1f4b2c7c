"""Thread safety utilities."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")

def wrap_with_lock(
    fn: Callable[..., T] | None,
    lock: Any = None,
) -> Callable[..., T] | None:
    """Wraps a function call with a lock.

    Args:
        fn: The function to serialise. ``None`` is passed through.
        lock: The lock to hold while ``fn`` runs. A fresh
            :class:`threading.RLock` is used when omitted, so the wrapped
            function may call itself (or other functions wrapped with the
            same lock) without deadlocking.

    Returns:
        The wrapped function, or ``None`` if ``fn`` is ``None``.
    """
    if fn is None:
        return None
    lk = lock if lock is not None else threading.RLock()

    def wrapped(*args: Any, **kwargs: Any) -> T:
        """Wrapped function call."""
        with lk:
            return fn(*args, **kwargs)

    return wrapped
