"""Tests for deriving the API schema from entity schemas."""

from __future__ import annotations

import pytest
from graphql import parse
from graphql.language import EnumTypeDefinitionNode, InputObjectTypeDefinitionNode, ScalarTypeDefinitionNode

from graphnode.data.schema import Schema
from graphnode.graphql import APISchemaError, api_schema
from graphnode.graphql import ast as sast
from graphnode.graphql.api_schema import entity_field_names, pluralize


@pytest.mark.parametrize(
    "name, plural",
    [
        ("user", "users"),
        ("category", "categories"),
        ("day", "days"),
        ("box", "boxes"),
        ("status", "statuses"),
        ("match", "matches"),
        ("tokenBalance", "tokenBalances"),
    ],
)
def test_pluralize(name, plural):
    assert pluralize(name) == plural


def test_entity_field_names_are_lower_camel_case():
    assert entity_field_names("TokenHolder") == ("tokenHolder", "tokenHolders")


def _field_names(definition):
    return [field.name.value for field in definition.fields]


def test_root_query_and_subscription_fields(schema):
    query = sast.get_root_query_type(schema.document)
    subscription = sast.get_root_subscription_type(schema.document)

    expected = ["named", "nameds", "user", "users", "post", "posts"]
    assert _field_names(query) == expected
    assert _field_names(subscription) == expected


def test_collection_field_arguments(schema):
    query = sast.get_root_query_type(schema.document)
    users = sast.get_field_type(query, "users")

    assert [argument.name.value for argument in users.arguments] == [
        "skip",
        "first",
        "orderBy",
        "orderDirection",
        "where",
    ]
    first = users.arguments[1]
    assert first.default_value.value == "100"
    assert sast.unwrap_named_type(users.arguments[2].type) == "User_orderBy"
    assert sast.unwrap_named_type(users.arguments[4].type) == "User_filter"


def test_default_first_is_configurable(entity_schema):
    document = api_schema(entity_schema.document, default_first=10)
    query = sast.get_root_query_type(document)
    users = sast.get_field_type(query, "users")
    assert users.arguments[1].default_value.value == "10"


def test_single_entity_field_takes_required_id(schema):
    query = sast.get_root_query_type(schema.document)
    user = sast.get_field_type(query, "user")
    assert [argument.name.value for argument in user.arguments] == ["id"]
    assert sast.unwrap_named_type(user.arguments[0].type) == "ID"


def test_entity_list_fields_gain_collection_arguments(schema):
    user = sast.get_named_type(schema.document, "User")

    friends = sast.get_field_type(user, "friends")
    assert [argument.name.value for argument in friends.arguments][:2] == ["skip", "first"]

    # Scalar lists and single references are left alone
    assert not sast.get_field_type(user, "tags").arguments
    assert not sast.get_field_type(user, "bestFriend").arguments


def test_order_by_enum_lists_entity_fields(schema):
    order_by = sast.get_named_type(schema.document, "User_orderBy")
    assert isinstance(order_by, EnumTypeDefinitionNode)
    assert [value.name.value for value in order_by.values] == [
        "id",
        "name",
        "age",
        "role",
        "tags",
        "bestFriend",
        "friends",
        "posts",
    ]


def test_filter_input_fields(schema):
    user_filter = sast.get_named_type(schema.document, "User_filter")
    assert isinstance(user_filter, InputObjectTypeDefinitionNode)
    names = set(_field_names(user_filter))

    assert {"name", "name_not", "name_starts_with", "name_not_ends_with", "name_in"} <= names
    assert {"age", "age_gt", "age_lte", "age_in", "age_not_in"} <= names
    assert {"role", "role_not", "role_in", "role_not_in"} <= names
    assert "role_gt" not in names
    assert {"tags", "tags_not", "tags_contains", "tags_not_contains"} <= names
    assert {"friends_contains", "bestFriend", "bestFriend_starts_with"} <= names
    # Derived fields cannot be filtered on
    assert not any(name.startswith("posts") for name in names)


def test_references_are_filtered_by_id_strings(schema):
    post_filter = sast.get_named_type(schema.document, "Post_filter")
    author = sast.get_field_type(post_filter, "author")
    author_in = sast.get_field_type(post_filter, "author_in")
    assert sast.unwrap_named_type(author.type) == "String"
    assert sast.is_list_type(author_in.type)


def test_graph_scalars_are_declared_once(schema):
    scalars = [
        d.name.value
        for d in schema.document.definitions
        if isinstance(d, ScalarTypeDefinitionNode)
    ]
    assert scalars == ["BigInt"]


def test_declared_graph_scalars_are_not_duplicated():
    document = parse("scalar Bytes\ntype Token @entity { id: ID! hash: Bytes }")
    result = api_schema(document)
    scalars = [
        d.name.value for d in result.definitions if isinstance(d, ScalarTypeDefinitionNode)
    ]
    assert scalars == ["Bytes"]


def test_api_schema_builds_an_executable_schema(schema):
    graphql_schema = schema.graphql_schema
    assert graphql_schema.query_type.name == "Query"
    assert graphql_schema.subscription_type.name == "Subscription"
    assert "users" in graphql_schema.query_type.fields


def test_reserved_type_names_are_rejected():
    with pytest.raises(APISchemaError, match="Type Query is reserved"):
        api_schema(parse("type Query { users: [Int] }"))


def test_schema_without_entities_is_rejected():
    with pytest.raises(APISchemaError, match="does not define any entity types"):
        api_schema(parse("enum Color { RED }"))


def test_api_schema_keeps_entity_schema_definitions(entity_schema):
    document = api_schema(entity_schema.document)
    api = Schema(name="example", id="QmExample", document=document)
    for name in ("Role", "Named", "User", "Post", "OrderDirection"):
        assert sast.get_named_type(api.document, name) is not None
