"""
Context manager for validation configuration (e.g., recursion limits).
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

# Context variable for the recursive-descent limit
_max_depth: ContextVar[int | None] = ContextVar("max_depth", default=None)
# Number of recursive schemas entered by the validation in progress
_depth: ContextVar[int] = ContextVar("recursion_depth", default=0)


def get_max_depth() -> int | None:
    """Return the active recursion limit, or None when unbounded."""
    return _max_depth.get()


def recursion_depth() -> int:
    """Return how many recursive schemas the current validation is inside."""
    return _depth.get()


@contextmanager
def validation_context(*, max_depth: int | None = None) -> Iterator[None]:
    """
    Context manager for validation configuration.

    Args:
        max_depth: Maximum number of nested `recursive` descents a single
                   validation may perform. Exceeding it yields a failure
                   instead of a RecursionError. None means unbounded.

    Example:
        from lockstep import object_, optional, recursive, validate, validation_context

        node = recursive(lambda: object_(next=optional(node)))

        with validation_context(max_depth=100):
            validate(node, deeply_nested)  # Err past 100 levels
    """
    if max_depth is not None and max_depth < 0:
        raise ValueError("max_depth must be non-negative")

    token = _max_depth.set(max_depth)
    try:
        yield
    finally:
        _max_depth.reset(token)


@contextmanager
def descend() -> Iterator[int]:
    """Enter one recursive schema; yields the depth before entering."""
    depth = _depth.get()
    token = _depth.set(depth + 1)
    try:
        yield depth
    finally:
        _depth.reset(token)
