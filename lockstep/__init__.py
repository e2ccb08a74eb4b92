"""
lockstep - composable runtime validation for in-memory data.

Usage:
    from lockstep import Array_, convert, number, object_, optional, or_, string, validate

    schema = object_(
        name=string,
        age=optional(or_(number, convert(int))),
        tags=Array_(string),
    )

    result = validate(schema, data)
"""

from .context import get_max_depth, recursion_depth, validation_context
from .core import Kind, Schema, is_converting, to_schema
from .schema import is_valid, parse, to_pydantic, to_type_hint, validate
from .schemas import (
    Array_,
    any_,
    array,
    bigint,
    boolean,
    convert,
    integer,
    literal,
    never,
    non_empty_array,
    none,
    null,
    number,
    object_,
    optional,
    or_,
    predicate,
    record,
    recursive,
    string,
    symbol,
    tuple_,
    union,
    unknown,
)
from .types import Err, Ok, ValidateError, ValidationFailed

__all__ = [
    # Result types
    "Ok",
    "Err",
    "ValidateError",
    "ValidationFailed",
    # Core
    "Kind",
    "Schema",
    "is_converting",
    "to_schema",
    # Leaves
    "boolean",
    "number",
    "bigint",
    "integer",
    "string",
    "symbol",
    "null",
    "none",
    "unknown",
    "any_",
    "never",
    "literal",
    # Combinators
    "object_",
    "optional",
    "Array_",
    "array",
    "non_empty_array",
    "tuple_",
    "record",
    "or_",
    "union",
    "recursive",
    "convert",
    "predicate",
    # Schema
    "validate",
    "is_valid",
    "parse",
    "to_type_hint",
    "to_pydantic",
    # Context
    "validation_context",
    "get_max_depth",
    "recursion_depth",
]
