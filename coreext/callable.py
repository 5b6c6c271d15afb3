"""Callable objects in three strengths: called by reference, mutably, or by value.

Parameters are passed as one value: ``()`` for no parameters, the value itself
for one parameter, and a tuple for two or more. Plain Python callables are
supported by the module-level functions and always take a tuple of their
arguments.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class CallInto(ABC):
    """A function that may be called once, consuming itself."""

    @abstractmethod
    def into_call(self, params: Any) -> Any:
        """Call this function with ``params``."""


class CallMut(CallInto):
    """A function that may change its own state when called."""

    @abstractmethod
    def mut_call(self, params: Any) -> Any:
        """Call this function with ``params``, possibly changing its state."""

    def into_call(self, params: Any) -> Any:
        return self.mut_call(params)


class CallRef(CallMut):
    """A function that leaves its state untouched when called."""

    @abstractmethod
    def ref_call(self, params: Any) -> Any:
        """Call this function with ``params`` without changing its state."""

    def mut_call(self, params: Any) -> Any:
        return self.ref_call(params)


def _call_plain(func: Any, params: Any) -> Any:
    if not callable(func):
        raise TypeError(f"{type(func).__name__!r} object is not callable")
    if not isinstance(params, tuple):
        raise TypeError("plain callables take a tuple of their arguments")
    return func(*params)


def ref_call(func: Any, params: Any) -> Any:
    """Call ``func`` as a :class:`CallRef`, or a plain callable with a tuple of arguments."""
    if isinstance(func, CallRef):
        return func.ref_call(params)
    if isinstance(func, CallInto):
        raise TypeError(f"{type(func).__name__!r} object does not support ref_call")
    return _call_plain(func, params)


def mut_call(func: Any, params: Any) -> Any:
    """Call ``func`` as a :class:`CallMut`, or a plain callable with a tuple of arguments."""
    if isinstance(func, CallMut):
        return func.mut_call(params)
    if isinstance(func, CallInto):
        raise TypeError(f"{type(func).__name__!r} object does not support mut_call")
    return _call_plain(func, params)


def into_call(func: Any, params: Any) -> Any:
    """Call ``func`` as a :class:`CallInto`, or a plain callable with a tuple of arguments."""
    if isinstance(func, CallInto):
        return func.into_call(params)
    return _call_plain(func, params)