"""Tests for coercing literals and variable values to input types."""

from __future__ import annotations

import pytest
from graphql.language import parse_type, parse_value

from graphnode.graphql import ast as sast
from graphnode.graphql.coercion import Undefined, coerce_input_value, coerce_value


@pytest.fixture
def resolve_type(schema):
    return lambda name: sast.get_named_type(schema.document, name)


@pytest.mark.parametrize(
    "literal, type_, expected",
    [
        ("5", "Int", 5),
        ("-2147483648", "Int", -(2**31)),
        ("5", "Float", 5.0),
        ("1.5", "Float", 1.5),
        ('"u1"', "ID", "u1"),
        ("7", "ID", "7"),
        ("true", "Boolean", True),
        ('"text"', "String", "text"),
        ("null", "String", None),
        ('"12345678901234567890"', "BigInt", "12345678901234567890"),
        ("USER", "Role", "USER"),
        ('["a", "b"]', "[String!]", ["a", "b"]),
        ('"a"', "[String!]", ["a"]),
    ],
)
def test_valid_literals(resolve_type, literal, type_, expected):
    assert coerce_value(parse_value(literal), parse_type(type_), resolve_type) == expected


@pytest.mark.parametrize(
    "literal, type_",
    [
        ("2147483648", "Int"),
        ("1.5", "Int"),
        ('"5"', "Int"),
        ("5", "String"),
        ("1.5", "ID"),
        ("null", "String!"),
        ('"USER"', "Role"),
        ("GUEST", "Role"),
        ('["a", 1]', "[String!]"),
        ("[null]", "[String!]"),
    ],
)
def test_invalid_literals(resolve_type, literal, type_):
    assert coerce_value(parse_value(literal), parse_type(type_), resolve_type) is Undefined


def test_input_object_literals(resolve_type):
    value = coerce_value(
        parse_value('{age_gt: 5, name_in: ["a"], role: ADMIN}'),
        parse_type("User_filter"),
        resolve_type,
    )
    assert value == {"age_gt": 5, "name_in": ["a"], "role": "ADMIN"}


def test_input_object_rejects_unknown_fields(resolve_type):
    value = coerce_value(parse_value("{nope: 1}"), parse_type("User_filter"), resolve_type)
    assert value is Undefined


def test_variables_in_literals(resolve_type):
    value = coerce_value(
        parse_value("{age_gt: $min}"), parse_type("User_filter"), resolve_type, {"min": 18}
    )
    assert value == {"age_gt": 18}


@pytest.mark.parametrize(
    "value, type_, expected",
    [
        (5, "Int", 5),
        (5, "Float", 5.0),
        (3, "ID", "3"),
        ("x", "ID", "x"),
        (False, "Boolean", False),
        (None, "Int", None),
        ("ADMIN", "Role", "ADMIN"),
        ("a", "[String]", ["a"]),
        ([1, 2], "[Int!]!", [1, 2]),
        ({"name_starts_with": "A"}, "User_filter", {"name_starts_with": "A"}),
    ],
)
def test_valid_variable_values(resolve_type, value, type_, expected):
    assert coerce_input_value(value, parse_type(type_), resolve_type) == expected


@pytest.mark.parametrize(
    "value, type_",
    [
        (True, "Int"),
        (2**31, "Int"),
        (1.5, "Int"),
        ("1", "Float"),
        (1.5, "ID"),
        (None, "ID!"),
        ("GUEST", "Role"),
        ([1, None], "[Int!]"),
        ({"unknown": 1}, "User_filter"),
        (["x"], "User_filter"),
    ],
)
def test_invalid_variable_values(resolve_type, value, type_):
    assert coerce_input_value(value, parse_type(type_), resolve_type) is Undefined
