"""
Type definitions for lockstep.

Provides the Result type (Ok/Err), the structured ValidateError and
type aliases shared by every schema.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, NoReturn, TypeVar

T = TypeVar("T")
E = TypeVar("E")

# Type aliases
PathSegment = str | int
Path = tuple[PathSegment, ...]
ConvertFn = Callable[[Any], Any]
PredicateFn = Callable[[Any], bool]


@dataclass(frozen=True, slots=True)
class ValidateError:
    """
    Structured validation failure.

    The path locates the failure relative to the validation root and reads
    root-to-leaf, e.g. ("users", 3, "email").
    """

    message: str
    path: Path = ()

    def prepend(self, segment: PathSegment) -> ValidateError:
        """Return a copy with `segment` added in front of the path."""
        return ValidateError(self.message, (segment, *self.path))

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"{self.message} at {format_path(self.path)}"


class ValidationFailed(Exception):
    """Raised by unwrap() and parse() when validation did not succeed."""

    def __init__(self, error: ValidateError):
        self.error = error
        super().__init__(str(error))


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success result containing a value."""

    value: T
    converted: bool = False

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Error result containing an error value."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        if isinstance(self.error, ValidateError):
            raise ValidationFailed(self.error)
        raise ValidationFailed(ValidateError(str(self.error)))


ValidateResult = Ok[Any] | Err[ValidateError]
Supplier = Callable[[], Any]


def format_path(path: Path) -> str:
    """Render a path as `a.b[0].c`."""
    out = ""
    for segment in path:
        if isinstance(segment, int):
            out += f"[{segment}]"
        elif out:
            out += f".{segment}"
        else:
            out = str(segment)
    return out


def failure(message: str, path: Path = ()) -> Err[ValidateError]:
    return Err(ValidateError(message, path))
