"""Conditional construction of a value from a boolean."""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

T = TypeVar("T")


def if_true(value: bool, func: Callable[[], T]) -> Optional[T]:
    """``func()`` if ``value`` is true, otherwise None; ``func`` is only called when needed."""
    return func() if value else None


def if_false(value: bool, func: Callable[[], T]) -> Optional[T]:
    """``func()`` if ``value`` is false, otherwise None; ``func`` is only called when needed."""
    return None if value else func()