"""Tests for the shared data types."""

from __future__ import annotations

import pytest
from graphql import GraphQLSchema

from graphnode.data import GraphQLParseError, Position, QueryError, QueryResult, Schema
from graphnode.data.subgraph import (
    DataSource,
    ManifestError,
    SubgraphManifest,
    is_valid_subgraph_name,
    link_to_id,
)
from graphnode.data.subscription import SubscriptionError, SubscriptionResult


def test_schema_parse_reports_syntax_errors():
    with pytest.raises(GraphQLParseError) as info:
        Schema.parse(name="broken", id="QmBroken", sdl="type User {")
    error = info.value
    assert not str(error).startswith("Syntax Error")
    assert error.locations() == [Position(line=1, column=12)]


def test_schema_equality_and_graphql_schema(entity_schema):
    same = Schema(name=entity_schema.name, id=entity_schema.id, document=entity_schema.document)
    assert same == entity_schema
    assert isinstance(entity_schema.graphql_schema, GraphQLSchema)
    assert entity_schema.graphql_schema is entity_schema.graphql_schema
    assert "type Post @entity" in entity_schema.sdl()


def test_query_result_serialization():
    assert QueryResult(data={"a": 1}).to_dict() == {"data": {"a": 1}}
    assert QueryResult().to_dict() == {}

    result = QueryResult.from_error(GraphQLParseError("Unexpected <EOF>", [Position(2, 3)]))
    assert result.has_errors()
    assert result.to_dict() == {
        "errors": [{"locations": [{"line": 2, "column": 3}], "message": "Unexpected <EOF>"}]
    }


def test_query_errors_from_decoding_failures():
    cause = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
    error = QueryError(cause)
    assert not error.is_graphql_error
    assert error.to_dict() == {"message": str(cause)}


def test_subscription_result_from_error():
    result = SubscriptionResult.from_error(GraphQLParseError("bad"))
    assert result.stream is None
    assert [type(error) for error in result.errors] == [SubscriptionError]
    assert result.errors[0].to_dict() == {"message": "bad"}


@pytest.mark.parametrize(
    "name, valid",
    [
        ("example", True),
        ("org/example-subgraph_2", True),
        ("a/b/c", True),
        ("", False),
        ("/example", False),
        ("example/", False),
        ("has space", False),
        ("dots.not.allowed", False),
    ],
)
def test_subgraph_names(name, valid):
    assert is_valid_subgraph_name(name) is valid


def test_link_to_id():
    assert link_to_id("/ipfs/QmAbc") == "QmAbc"
    assert link_to_id("QmAbc/") == "QmAbc"
    with pytest.raises(ManifestError, match="Invalid subgraph link"):
        link_to_id("/ipfs/../etc")


def test_data_source_requires_kind_and_name():
    assert DataSource.from_dict({"kind": "ethereum/contract", "name": "A"}).network is None
    with pytest.raises(ManifestError, match="missing a required field"):
        DataSource.from_dict({"kind": "ethereum/contract"})


@pytest.mark.asyncio
async def test_manifest_resolution(link_resolver, entity_schema):
    manifest = await SubgraphManifest.resolve("/ipfs/QmManifest", link_resolver, name="example")
    assert manifest.id == "QmManifest"
    assert manifest.location == "/ipfs/QmManifest"
    assert manifest.spec_version == "0.0.1"
    assert manifest.schema.name == "example"
    assert manifest.schema.sdl() == entity_schema.sdl()
    assert [source.name for source in manifest.data_sources] == ["Users"]
    assert manifest.networks() == ("mainnet",)
    assert link_resolver.requests == ["/ipfs/QmManifest", "/ipfs/QmSchema"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "files, message",
    [
        ({"/ipfs/QmBad": b"- just\n- a list\n"}, "expected a mapping"),
        ({"/ipfs/QmBad": b"specVersion: 0.0.1\n"}, "does not link to a schema file"),
        (
            {"/ipfs/QmBad": b"schema:\n  file:\n    /: /ipfs/QmSdl\n", "/ipfs/QmSdl": b"type {"},
            "Invalid schema /ipfs/QmSdl",
        ),
    ],
)
async def test_invalid_manifests(make_link_resolver, files, message):
    with pytest.raises(ManifestError, match=message):
        await SubgraphManifest.resolve("/ipfs/QmBad", make_link_resolver(files), name="bad")
