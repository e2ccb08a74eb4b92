"""
Core schema classes for lockstep.

Every schema is an immutable node tagged with a Kind. The node classes form a
closed set and validation is a single dispatch over them, walking the schema
tree alongside the input value.
"""

from __future__ import annotations

import ast
import enum
import functools
import inspect
import linecache
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from itertools import islice, repeat
from types import MappingProxyType
from typing import Any, Callable

from .context import descend, get_max_depth
from .types import (
    ConvertFn,
    Err,
    Ok,
    PredicateFn,
    Supplier,
    ValidateResult,
    failure,
)

logger = logging.getLogger(__name__)


class Kind(str, enum.Enum):
    """Kind tag carried by every schema."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    BIGINT = "bigint"
    STRING = "string"
    SYMBOL = "symbol"
    NULL = "null"
    UNKNOWN = "unknown"
    ANY = "any"
    NEVER = "never"
    LITERAL = "literal"
    OBJECT = "object"
    PROPERTIES = "properties"
    ARRAY = "Array"
    NON_EMPTY_ARRAY = "NonEmptyArray"
    TUPLE = "tuple"
    RECORD = "record"
    OPTIONAL = "optional"
    OR = "or"
    RECURSIVE = "recursive"
    CONVERT = "convert"
    PREDICATE = "predicate"


class Schema:
    """Base class for all schema nodes."""

    __slots__ = ()

    kind: Kind

    def validate(self, value: Any) -> ValidateResult:
        """
        Validate a value.

        Returns:
            Ok(value) if validation passes, possibly transformed
            Err(ValidateError) if validation fails
        """
        return _validate(self, value)

    @property
    def converting(self) -> bool:
        """Whether a successful validation may return a different value."""
        return is_converting(self)


@dataclass(frozen=True, slots=True, eq=False)
class Primitive(Schema):
    """Leaf schema checking a runtime category."""

    kind: Kind
    check: Callable[[Any], bool]
    message: str = ""


@dataclass(frozen=True, slots=True, eq=False)
class Literal(Schema):
    """Leaf schema accepting exactly one value."""

    value: Any
    kind = Kind.LITERAL


@dataclass(frozen=True, slots=True, eq=False)
class ObjectSchema(Schema):
    """
    Bare "is a mapping" check.

    Calling it builds a properties schema:
        object_({"name": string})
        object_(name=string, age=optional(number))
    """

    kind = Kind.OBJECT

    def __call__(
        self, properties: Mapping[Any, Any] | None = None, /, **kwargs: Any
    ) -> Properties:
        fields = dict(properties or {})
        fields.update(kwargs)
        return Properties({key: to_schema(v) for key, v in fields.items()})


@dataclass(frozen=True, slots=True, eq=False)
class OptionalProperty(Schema):
    """Marks an object property as omittable. Not validatable by itself."""

    schema: Schema
    kind = Kind.OPTIONAL


@dataclass(frozen=True, slots=True, eq=False)
class Properties(Schema):
    """Schema for mappings with declared properties."""

    properties: Mapping[Any, Schema]
    required_keys: tuple[Any, ...] = field(init=False, repr=False)
    optional_keys: tuple[Any, ...] = field(init=False, repr=False)
    kind = Kind.PROPERTIES

    def __post_init__(self) -> None:
        properties = MappingProxyType(dict(self.properties))
        required = tuple(
            k for k, s in properties.items() if not isinstance(s, OptionalProperty)
        )
        optional = tuple(
            k for k, s in properties.items() if isinstance(s, OptionalProperty)
        )
        object.__setattr__(self, "properties", properties)
        object.__setattr__(self, "required_keys", required)
        object.__setattr__(self, "optional_keys", optional)


@dataclass(frozen=True, slots=True, eq=False)
class ArrayOf(Schema):
    """Schema for lists/tuples whose every element matches `element`."""

    element: Schema
    non_empty: bool = False

    @property
    def kind(self) -> Kind:  # type: ignore[override]
        return Kind.NON_EMPTY_ARRAY if self.non_empty else Kind.ARRAY


@dataclass(frozen=True, slots=True, eq=False)
class TupleOf(Schema):
    """Schema for fixed-length sequences with one schema per position."""

    elements: tuple[Schema, ...]
    kind = Kind.TUPLE


@dataclass(frozen=True, slots=True, eq=False)
class RecordOf(Schema):
    """Schema for mappings with uniformly typed keys and values."""

    key: Schema
    value: Schema
    kind = Kind.RECORD


@dataclass(frozen=True, slots=True, eq=False)
class Or(Schema):
    """Union: the first matching branch wins."""

    schemas: tuple[Schema, ...]
    kind = Kind.OR


@dataclass(frozen=True, slots=True, eq=False)
class Recursive(Schema):
    """Defers to the schema returned by `supplier`, resolved per validation."""

    supplier: Supplier
    kind = Kind.RECURSIVE


@dataclass(frozen=True, slots=True, eq=False)
class Convert(Schema):
    converter: ConvertFn
    kind = Kind.CONVERT


@dataclass(frozen=True, slots=True, eq=False)
class Predicate(Schema):
    predicate: PredicateFn
    kind = Kind.PREDICATE


# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------


def _is_number(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def _is_bigint(x: Any) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


boolean = Primitive(Kind.BOOLEAN, lambda x: isinstance(x, bool), "not a boolean")
number = Primitive(Kind.NUMBER, _is_number, "not a number")
bigint = Primitive(Kind.BIGINT, _is_bigint, "not a bigint")
string = Primitive(Kind.STRING, lambda x: isinstance(x, str), "not a string")
symbol = Primitive(Kind.SYMBOL, lambda x: isinstance(x, enum.Enum), "not a symbol")
null = Primitive(Kind.NULL, lambda x: x is None, "not null")
unknown = Primitive(Kind.UNKNOWN, lambda _: True)
any_ = Primitive(Kind.ANY, lambda _: True)
never = Primitive(
    Kind.NEVER, lambda _: False, "never type does not accept any value"
)
object_ = ObjectSchema()

_TYPE_SCHEMAS: dict[Any, Schema] = {
    bool: boolean,
    int: bigint,
    float: number,
    str: string,
    type(None): null,
    object: unknown,
}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate(schema: Schema, value: Any) -> ValidateResult:
    match schema:
        case Primitive(check=check, message=message):
            return Ok(value) if check(value) else failure(message)
        case Literal(value=expected):
            if type(value) is type(expected) and value == expected:
                return Ok(value)
            return failure(f"not {expected!r}")
        case ObjectSchema():
            return Ok(value) if isinstance(value, Mapping) else failure("not an object")
        case Properties():
            return _validate_properties(schema, value)
        case ArrayOf(element=element, non_empty=non_empty):
            if not isinstance(value, (list, tuple)):
                return failure("not an array")
            if non_empty and not value:
                return failure("empty array")
            return _validate_items(repeat(element), value)
        case TupleOf(elements=elements):
            if not isinstance(value, (list, tuple)):
                return failure("not a tuple")
            if len(value) != len(elements):
                return failure(f"expected {len(elements)} elements, got {len(value)}")
            return _validate_items(elements, value)
        case RecordOf():
            return _validate_record(schema, value)
        case Or(schemas=schemas):
            return _validate_or(schemas, value)
        case Recursive():
            return _validate_recursive(schema, value)
        case Convert(converter=converter):
            try:
                converted = converter(value)
            except Exception as e:
                logger.debug("Converter %r raised %s", converter, type(e).__name__)
                return failure(str(e) or type(e).__name__)
            return Ok(converted, converted=True)
        case Predicate(predicate=predicate):
            if predicate(value):
                return Ok(value)
            return failure(_predicate_message(predicate))
        case OptionalProperty():
            raise TypeError("optional() can only be used as an object property")

    raise TypeError(f"Not a schema: {schema!r}")


def _validate_properties(schema: Properties, value: Any) -> ValidateResult:
    if not isinstance(value, Mapping):
        return failure("not an object")

    changed: dict[Any, Any] | None = None
    converted = False

    for key in (*schema.required_keys, *schema.optional_keys):
        property_schema = schema.properties[key]
        if isinstance(property_schema, OptionalProperty):
            if key not in value:
                continue
            property_schema = property_schema.schema
        elif key not in value:
            return failure("missing required property", (key,))

        original = value[key]
        result = _validate(property_schema, original)
        if isinstance(result, Err):
            return Err(result.error.prepend(key))

        converted = converted or result.converted
        if result.value is not original:
            if changed is None:
                changed = dict(value)
            changed[key] = result.value

    return Ok(value if changed is None else changed, converted)


def _validate_items(schemas: Iterable[Schema], value: list | tuple) -> ValidateResult:
    changed: list[Any] | None = None
    converted = False

    for index, (item_schema, item) in enumerate(zip(schemas, value)):
        result = _validate(item_schema, item)
        if isinstance(result, Err):
            return Err(result.error.prepend(index))

        converted = converted or result.converted
        if result.value is not item:
            if changed is None:
                changed = list(value)
            changed[index] = result.value

    if changed is None:
        return Ok(value, converted)
    if isinstance(value, list):
        return Ok(changed, converted)
    if hasattr(value, "_make"):
        # namedtuples keep their class
        return Ok(type(value)._make(changed), converted)
    return Ok(tuple(changed), converted)


def _validate_record(schema: RecordOf, value: Any) -> ValidateResult:
    if not isinstance(value, Mapping):
        return failure("not an object")

    changed: dict[Any, Any] | None = None
    converted = False

    for index, (key, item) in enumerate(value.items()):
        key_result = _validate(schema.key, key)
        if isinstance(key_result, Err):
            return Err(key_result.error.prepend(key))
        item_result = _validate(schema.value, item)
        if isinstance(item_result, Err):
            return Err(item_result.error.prepend(key))

        converted = converted or key_result.converted or item_result.converted
        if changed is None and (
            key_result.value is not key or item_result.value is not item
        ):
            # Entries before this one were unchanged
            changed = dict(islice(value.items(), index))
        if changed is not None:
            if key_result.value in changed:
                return failure("duplicate key after conversion", (key,))
            changed[key_result.value] = item_result.value

    return Ok(value if changed is None else changed, converted)


def _validate_or(schemas: tuple[Schema, ...], value: Any) -> ValidateResult:
    messages = []
    for branch in schemas:
        result = _validate(branch, value)
        if isinstance(result, Ok):
            return result
        messages.append(result.error.message)

    issues = " ".join(f"({i}) {message}" for i, message in enumerate(messages, 1))
    logger.debug("All %d union branches failed", len(messages))
    return failure(f"must resolve any one of the following issues: {issues}")


def _validate_recursive(schema: Recursive, value: Any) -> ValidateResult:
    max_depth = get_max_depth()
    with descend() as depth:
        if max_depth is not None and depth >= max_depth:
            logger.debug("Recursion limit of %d reached", max_depth)
            return failure("maximum recursion depth exceeded")
        return _validate(resolve(schema), value)


@functools.lru_cache(maxsize=32)
def _parse_source(filename: str) -> tuple[str, ast.Module] | None:
    source = "".join(linecache.getlines(filename))
    if not source:
        return None
    try:
        return source, ast.parse(source)
    except (SyntaxError, ValueError):
        return None


def _positional_args(node: ast.Lambda) -> tuple[str, ...]:
    return tuple(a.arg for a in (*node.args.posonlyargs, *node.args.args))


def _lambda_source(fn: Callable[..., Any]) -> str | None:
    """Source text of just the lambda expression, or None if ambiguous."""
    code = fn.__code__
    try:
        filename = inspect.getsourcefile(fn)
    except TypeError:
        return None
    parsed = _parse_source(filename) if filename else None
    if parsed is None:
        return None

    source, tree = parsed
    arg_names = code.co_varnames[: code.co_argcount]
    matches = [
        node
        for node in ast.walk(tree)
        if isinstance(node, ast.Lambda)
        and node.lineno == code.co_firstlineno
        and _positional_args(node) == arg_names
    ]
    if len(matches) != 1:
        return None
    return ast.get_source_segment(source, matches[0])


def _describe(fn: Callable[..., Any]) -> str:
    if getattr(fn, "__name__", "") == "<lambda>":
        return _lambda_source(fn) or repr(fn)
    try:
        return inspect.getsource(fn).strip()
    except (OSError, TypeError):
        return repr(fn)


def _predicate_message(fn: Callable[..., Any]) -> str:
    name = getattr(fn, "__name__", "")
    if name and name != "<lambda>":
        return f"predicate {name} not met: {_describe(fn)}"
    return f"predicate not met: {_describe(fn)}"


# ---------------------------------------------------------------------------
# Structure helpers
# ---------------------------------------------------------------------------


def resolve(schema: Recursive) -> Schema:
    """Call the supplier of a recursive schema."""
    return to_schema(schema.supplier())


def is_converting(schema: Schema) -> bool:
    """
    Static converting/non-converting classification.

    A union counts as converting when any branch converts. A recursive cycle
    contributes nothing beyond the nodes it passes through.
    """
    return _is_converting(schema, set())


def _is_converting(schema: Schema, seen: set[Schema]) -> bool:
    match schema:
        case Convert():
            return True
        case OptionalProperty(schema=inner):
            return _is_converting(inner, seen)
        case Properties(properties=properties):
            return any(_is_converting(s, seen) for s in properties.values())
        case ArrayOf(element=element):
            return _is_converting(element, seen)
        case TupleOf(elements=elements):
            return any(_is_converting(s, seen) for s in elements)
        case RecordOf(key=key, value=value):
            return _is_converting(key, seen) or _is_converting(value, seen)
        case Or(schemas=schemas):
            return any(_is_converting(s, seen) for s in schemas)
        case Recursive():
            if schema in seen:
                return False
            seen.add(schema)
            return _is_converting(resolve(schema), seen)
    return False


def to_child_schema(v: Any) -> Schema:
    """Coerce a non-property child schema; optional() is rejected here."""
    schema = to_schema(v)
    if isinstance(schema, OptionalProperty):
        raise TypeError("optional() can only be used as an object property")
    return schema


def to_schema(v: Any) -> Schema:
    """
    Coerce a value to a schema.

    Conversion rules:
        Schema -> pass through
        None -> null
        bool / int / float / str / NoneType / object -> matching leaf
        other type -> predicate with isinstance check
        dict -> properties with recursive conversion
        list -> Array of list[0], or Array of or_() over several items
        tuple -> tuple schema
        Callable -> predicate
    """
    if isinstance(v, Schema):
        return v

    if v is None:
        return null

    if isinstance(v, type):
        if v in _TYPE_SCHEMAS:
            return _TYPE_SCHEMAS[v]

        def type_check(x: Any, t: type = v) -> bool:
            return isinstance(x, t)

        type_check.__name__ = f"is_{v.__name__}"
        return Predicate(type_check)

    if isinstance(v, dict):
        return object_(v)

    if isinstance(v, list):
        if len(v) == 0:
            raise ValueError("Empty list cannot be converted to schema")
        if len(v) == 1:
            return ArrayOf(to_child_schema(v[0]))
        return ArrayOf(Or(tuple(to_child_schema(item) for item in v)))

    if isinstance(v, tuple):
        return TupleOf(tuple(to_child_schema(item) for item in v))

    if callable(v):
        return Predicate(v)

    raise TypeError(f"Cannot convert {type(v).__name__} to schema")
