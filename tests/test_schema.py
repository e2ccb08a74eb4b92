"""
Tests for lockstep entry points, shorthand coercion and Pydantic interop.
"""

from typing import Any, Literal, Optional, Union

import pytest

from lockstep import (
    Array_,
    Err,
    Ok,
    ValidateError,
    ValidationFailed,
    bigint,
    boolean,
    convert,
    is_valid,
    literal,
    null,
    number,
    object_,
    optional,
    or_,
    parse,
    predicate,
    record,
    recursive,
    string,
    to_pydantic,
    to_schema,
    to_type_hint,
    tuple_,
    unknown,
    validate,
)
from lockstep.core import ArrayOf, Or, Predicate, Properties, TupleOf


class Point:
    pass


class TestEntryPoints:
    def test_validate_delegates(self):
        assert validate(number, 1) == number.validate(1)

    def test_validate_accepts_shorthand(self):
        assert isinstance(validate({"name": str}, {"name": "a"}), Ok)

    def test_is_valid(self):
        assert is_valid(string, "a")
        assert not is_valid(string, 1)

    def test_parse_returns_converted_value(self):
        assert parse(object_(n=convert(int)), {"n": "3"}) == {"n": 3}

    def test_parse_raises(self):
        with pytest.raises(ValidationFailed) as exc_info:
            parse(object_(n=number), {"n": "3"})
        assert exc_info.value.error == ValidateError("not a number", ("n",))
        assert str(exc_info.value) == "not a number at n"

    def test_schemas_are_reusable(self):
        schema = object_(a=convert(int))
        first = {"a": "1"}
        second = {"a": "2"}
        assert validate(schema, first).value == {"a": 1}
        assert validate(schema, second).value == {"a": 2}
        assert first == {"a": "1"}

    def test_schemas_are_immutable(self):
        schema = object_(a=number)
        with pytest.raises(AttributeError):
            schema.properties = {}
        with pytest.raises(TypeError):
            schema.properties["b"] = string


class TestToSchema:
    def test_schema_passthrough(self):
        assert to_schema(number) is number

    def test_type_coercion(self):
        assert to_schema(bool) is boolean
        assert to_schema(int) is bigint
        assert to_schema(float) is number
        assert to_schema(str) is string
        assert to_schema(None) is null
        assert to_schema(object) is unknown

    def test_class_coercion(self):
        v = to_schema(Point)
        assert isinstance(v, Predicate)
        assert isinstance(v.validate(Point()), Ok)
        result = v.validate(1)
        assert isinstance(result, Err)
        assert result.error.message.startswith("predicate is_Point not met")

    def test_dict_coercion(self):
        v = to_schema({"name": str})
        assert isinstance(v, Properties)

    def test_list_coercion(self):
        v = to_schema([str])
        assert isinstance(v, ArrayOf)

    def test_multi_item_list_coercion(self):
        v = to_schema([str, int])
        assert isinstance(v, ArrayOf)
        assert isinstance(v.element, Or)
        assert isinstance(v.validate(["a", 1]), Ok)

    def test_tuple_coercion(self):
        assert isinstance(to_schema((str, int)), TupleOf)

    def test_callable_coercion(self):
        v = to_schema(lambda x: x > 0)
        assert isinstance(v, Predicate)
        assert isinstance(v.validate(5), Ok)

    def test_empty_list(self):
        with pytest.raises(ValueError):
            to_schema([])

    def test_unsupported(self):
        with pytest.raises(TypeError):
            to_schema(42)


class TestToTypeHint:
    def test_leaves(self):
        assert to_type_hint(boolean) is bool
        assert to_type_hint(string) is str
        assert to_type_hint(bigint) is int
        assert to_type_hint(unknown) is Any

    def test_literal(self):
        assert to_type_hint(literal("a")) == Literal["a"]

    def test_containers(self):
        assert to_type_hint(Array_(string)) == list[str]
        assert to_type_hint(tuple_(string, bigint)) == tuple[str, int]
        assert to_type_hint(record(string, bigint)) == dict[str, int]
        assert to_type_hint(object_(a=string)) == dict[str, Any]

    def test_union(self):
        assert to_type_hint(or_(string, bigint)) == Union[str, int]

    def test_opaque_functions(self):
        assert to_type_hint(convert(int)) is Any
        assert to_type_hint(predicate(callable)) is Any

    def test_recursive_cycle(self):
        node = recursive(lambda: Array_(node))
        assert to_type_hint(node) == list[Any]


class TestToPydantic:
    def test_simple_model(self):
        schema = object_(name=string, age=bigint)
        User = to_pydantic("User", schema)
        user = User(name="Alice", age=30)
        assert user.name == "Alice"
        assert user.age == 30

    def test_optional_fields(self):
        schema = object_(name=string, email=optional(string))
        User = to_pydantic("User", schema)
        user = User(name="Alice")
        assert user.name == "Alice"
        assert user.email is None

    def test_pydantic_validation(self):
        from pydantic import ValidationError

        User = to_pydantic("User", {"name": str})

        with pytest.raises(ValidationError):
            User()  # Missing required field

    def test_list_field(self):
        Post = to_pydantic("Post", object_(tags=Array_(string)))
        assert Post(tags=["a"]).tags == ["a"]

    def test_field_annotation(self):
        Model = to_pydantic("Model", object_(tag=optional(string)))
        assert Model.model_fields["tag"].annotation == Optional[str]

    def test_requires_object_schema(self):
        with pytest.raises(TypeError):
            to_pydantic("Bad", Array_(string))
