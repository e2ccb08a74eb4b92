"""
Tests for the or_ (union) combinator.
"""

import json

import pytest

from lockstep import (
    Err,
    Ok,
    ValidateError,
    boolean,
    convert,
    literal,
    null,
    number,
    object_,
    optional,
    or_,
    predicate,
    string,
    union,
    validate,
)


class TestOr:
    def test_first_success(self):
        assert validate(or_(number, string), 1) == Ok(1)
        assert validate(or_(number, string), "a") == Ok("a")

    def test_aggregated_failure(self):
        result = validate(or_(number, string), True)
        assert result == Err(
            ValidateError(
                "must resolve any one of the following issues: (1) not a number (2) not a string"
            )
        )

    def test_three_branches(self):
        result = validate(or_(boolean, null, literal("x")), 0)
        assert result.error.message == (
            "must resolve any one of the following issues: "
            "(1) not a boolean (2) not null (3) not 'x'"
        )

    def test_converting_branches(self):
        result = validate(or_(convert(json.loads), convert(str)), None)
        assert result == Ok("None", converted=True)

    def test_short_circuit_returns_value_unmodified(self):
        calls = []

        def is_zero(x):
            calls.append("zero")
            return x == 0

        def is_one(x):
            calls.append("one")
            return x == 1

        def is_two(x):
            calls.append("two")
            return x == 2

        result = validate(or_(predicate(is_zero), predicate(is_one), predicate(is_two)), 1)
        assert result == Ok(1)
        assert calls == ["zero", "one"]

    def test_first_match_wins(self):
        schema = or_(convert(lambda x: "first"), convert(lambda x: "second"))
        assert validate(schema, 0).value == "first"

    def test_returns_branch_result_verbatim(self):
        value = {"a": 1}
        result = validate(or_(number, object_(a=number)), value)
        assert result.value is value
        assert result.converted is False

    def test_path_is_prepended_by_parent(self):
        result = validate(object_(id=or_(number, string)), {"id": None})
        assert result.error.path == ("id",)
        assert "(1) not a number (2) not a string" in result.error.message

    def test_branch_paths_are_not_committed(self):
        schema = or_(object_(a=number), object_(b=string))
        result = validate(schema, {"a": "x", "b": 1})
        assert result.error.path == ()

    def test_union_alias(self):
        assert union is or_

    def test_requires_schemas(self):
        with pytest.raises(TypeError):
            or_()

    def test_rejects_optional_branch(self):
        with pytest.raises(TypeError):
            or_(number, optional(string))

    def test_converting_classification(self):
        assert or_(number, string).converting is False
        assert or_(number, convert(int)).converting is True
