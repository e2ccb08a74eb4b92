"""
Schema constructors for lockstep.

Leaves are module constants; combinators are factory functions returning
immutable schema nodes. Child schemas may be given as shorthand (see
`to_schema`).
"""

from __future__ import annotations

from typing import Any

from .core import (
    ArrayOf,
    Convert,
    Literal,
    OptionalProperty,
    Or,
    Predicate,
    RecordOf,
    Recursive,
    Schema,
    TupleOf,
    any_,
    bigint,
    boolean,
    never,
    null,
    number,
    object_,
    string,
    symbol,
    to_child_schema,
    to_schema,
    unknown,
)
from .types import ConvertFn, PredicateFn, Supplier

integer = bigint
none = null


def literal(value: Any) -> Literal:
    """
    Accept exactly `value` (same type, equal value).

    Usage:
        literal("active")
        or_(literal(0), literal(1))
    """
    return Literal(value)


def optional(schema: Schema | Any) -> OptionalProperty:
    """
    Mark an object property as omittable.

    Usage:
        object_(name=string, email=optional(string))
    """
    return OptionalProperty(to_schema(schema))


def Array_(element: Schema | Any) -> ArrayOf:
    """
    Validate every element of a list or tuple.

    Usage:
        Array_(number)
        Array_(object_(id=string))
    """
    return ArrayOf(to_child_schema(element))


array = Array_


def non_empty_array(element: Schema | Any) -> ArrayOf:
    """Like Array_, but rejects empty sequences."""
    return ArrayOf(to_child_schema(element), non_empty=True)


def tuple_(*elements: Schema | Any) -> TupleOf:
    """
    Validate a fixed-length sequence position by position.

    Usage:
        tuple_(string, number)
    """
    return TupleOf(tuple(to_child_schema(e) for e in elements))


def record(key: Schema | Any, value: Schema | Any) -> RecordOf:
    """
    Validate every key and value of a mapping.

    Usage:
        record(string, number)
    """
    return RecordOf(to_child_schema(key), to_child_schema(value))


def or_(*schemas: Schema | Any) -> Or:
    """
    Accept the first branch that succeeds.

    Usage:
        or_(number, string)
        or_(convert(int), literal(None))
    """
    if not schemas:
        raise TypeError("or_() requires at least one schema")
    return Or(tuple(to_child_schema(s) for s in schemas))


union = or_


def recursive(supplier: Supplier) -> Recursive:
    """
    Defer to the schema returned by `supplier`, allowing self-reference.

    Usage:
        tree = recursive(lambda: object_(children=Array_(tree)))
    """
    if not callable(supplier):
        raise TypeError("recursive() requires a zero-argument callable")
    return Recursive(supplier)


def convert(converter: ConvertFn) -> Convert:
    """
    Transform a value; exceptions raised by `converter` become failures.

    Usage:
        convert(int)
        convert(json.loads)
    """
    if not callable(converter):
        raise TypeError("convert() requires a callable")
    return Convert(converter)


def predicate(fn: PredicateFn) -> Predicate:
    """
    Keep values for which `fn` returns true.

    Usage:
        predicate(lambda x: x > 0)
        predicate(str.isalpha)
    """
    if not callable(fn):
        raise TypeError("predicate() requires a callable")
    return Predicate(fn)


__all__ = [
    "Array_",
    "any_",
    "array",
    "bigint",
    "boolean",
    "convert",
    "integer",
    "literal",
    "never",
    "non_empty_array",
    "none",
    "null",
    "number",
    "object_",
    "optional",
    "or_",
    "predicate",
    "record",
    "recursive",
    "string",
    "symbol",
    "tuple_",
    "union",
    "unknown",
]
