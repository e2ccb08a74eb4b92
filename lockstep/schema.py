"""
Schema operations for lockstep.

Provides validate(), is_valid(), parse(), to_type_hint() and to_pydantic().
"""

from __future__ import annotations

import enum
from typing import Annotated, Any
from typing import Literal as TypingLiteral
from typing import Optional as TypingOptional
from typing import Union as TypingUnion

from pydantic import BaseModel, Field, create_model

from .core import (
    ArrayOf,
    Kind,
    Literal,
    ObjectSchema,
    OptionalProperty,
    Or,
    Primitive,
    Properties,
    RecordOf,
    Recursive,
    Schema,
    TupleOf,
    resolve,
    to_schema,
)
from .types import ValidateResult

_PRIMITIVE_HINTS: dict[Kind, Any] = {
    Kind.BOOLEAN: bool,
    Kind.NUMBER: int | float,
    Kind.BIGINT: int,
    Kind.STRING: str,
    Kind.SYMBOL: enum.Enum,
    Kind.NULL: None,
}


def validate(schema: Schema | Any, value: Any) -> ValidateResult:
    """
    Validate a value against a schema.

    Args:
        schema: A schema, or shorthand accepted by to_schema()
        value: The in-memory value to check

    Returns:
        Ok(value) if validation passes (value may be converted)
        Err(ValidateError(message, path)) if validation fails

    Usage:
        schema = object_(
            name=string,
            age=optional(number),
            tags=Array_(string),
        )
        result = validate(schema, {"name": "Alice", "tags": []})
    """
    return to_schema(schema).validate(value)


def is_valid(schema: Schema | Any, value: Any) -> bool:
    """Return True if `value` passes `schema`."""
    return to_schema(schema).validate(value).is_ok()


def parse(schema: Schema | Any, value: Any) -> Any:
    """
    Validate and return the (possibly converted) value.

    Raises:
        ValidationFailed: if validation fails
    """
    return to_schema(schema).validate(value).unwrap()


def to_type_hint(schema: Schema | Any) -> Any:
    """
    Map a schema to the Python type hint describing its accepted values.

    Converters, predicates and recursive cycles map to Any.
    """
    return _type_hint(to_schema(schema), set())


def _type_hint(schema: Schema, seen: set[Schema]) -> Any:
    match schema:
        case Primitive(kind=kind):
            return _PRIMITIVE_HINTS.get(kind, Any)
        case Literal(value=value):
            return TypingLiteral[value]
        case ObjectSchema() | Properties():
            return dict[str, Any]
        case OptionalProperty(schema=inner):
            return _type_hint(inner, seen)
        case ArrayOf(element=element, non_empty=non_empty):
            hint = list[_type_hint(element, seen)]  # type: ignore[misc]
            if non_empty:
                return Annotated[hint, Field(min_length=1)]
            return hint
        case TupleOf(elements=elements):
            if not elements:
                return tuple[()]
            return tuple[tuple(_type_hint(e, seen) for e in elements)]  # type: ignore[misc]
        case RecordOf(key=key, value=value):
            return dict[_type_hint(key, seen), _type_hint(value, seen)]  # type: ignore[misc]
        case Or(schemas=schemas):
            return TypingUnion[tuple(_type_hint(s, seen) for s in schemas)]
        case Recursive():
            if schema in seen:
                return Any
            seen.add(schema)
            return _type_hint(resolve(schema), seen)

    return Any


def to_pydantic(name: str, schema: Schema | Any) -> type[BaseModel]:
    """
    Compile an object schema to a Pydantic model.

    Args:
        name: Name of the generated model class
        schema: Object schema, or dict shorthand

    Returns:
        A Pydantic BaseModel subclass

    Usage:
        User = to_pydantic("User", object_(
            name=string,
            email=optional(string),
        ))
        user = User(name="Alice")
    """
    schema = to_schema(schema)
    if not isinstance(schema, Properties):
        raise TypeError("Schema must be an object schema")

    fields: dict[str, Any] = {}

    for key, property_schema in schema.properties.items():
        if not isinstance(key, str):
            raise TypeError(f"Property names must be strings, got {key!r}")
        if isinstance(property_schema, OptionalProperty):
            hint = to_type_hint(property_schema.schema)
            fields[key] = (TypingOptional[hint], None)
        else:
            fields[key] = (to_type_hint(property_schema), ...)

    return create_model(name, **fields)
