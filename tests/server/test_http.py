"""Tests for the HTTP query endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from graphnode.server import create_app
from graphnode.server.middleware import REQUEST_ID_HEADER

USERS_QUERY = {"query": "{ users { id name } }"}
EXPECTED_USERS = {
    "data": {
        "users": [
            {"id": "u1", "name": "Alice"},
            {"id": "u2", "name": "Bob"},
            {"id": "u3", "name": "Carol"},
        ]
    }
}


def test_query_default_subgraph(client):
    response = client.post("/graphql", json=USERS_QUERY)
    assert response.status_code == 200
    assert response.json() == EXPECTED_USERS
    assert response.headers["access-control-allow-origin"] == "*"


def test_query_subgraph_by_name(client):
    response = client.post("/subgraphs/name/example/users/graphql", json=USERS_QUERY)
    assert response.status_code == 200
    assert response.json() == EXPECTED_USERS


def test_query_subgraph_by_id(client):
    response = client.post(
        "/subgraphs/id/QmManifest/graphql",
        json={
            "query": "query Post($id: ID!) { post(id: $id) { title author { name } } }",
            "variables": {"id": "p1"},
            "operationName": "Post",
        },
    )
    assert response.json() == {"data": {"post": {"title": "Hello", "author": {"name": "Alice"}}}}


def test_unknown_subgraphs(client):
    for path in ("/subgraphs/name/nope/graphql", "/subgraphs/id/QmNope/graphql"):
        response = client.post(path, json=USERS_QUERY)
        assert response.status_code == 404
        name = path.split("/")[3]
        assert response.json() == {"errors": [{"message": f"Unknown subgraph name or ID: {name}"}]}


def test_field_errors_are_returned_with_200(client):
    response = client.post("/graphql", json={"query": "{ users(first: 5000) { id } }"})
    assert response.status_code == 200
    body = response.json()
    assert body["data"] == {"users": None}
    assert len(body["errors"]) == 1


def test_null_list_filters(client):
    path = "/subgraphs/name/example/users/graphql"
    response = client.post(path, json={"query": "{ users(where: {name_in: null}) { id } }"})
    assert response.status_code == 200
    assert response.json() == {"data": {"users": []}}

    response = client.post(path, json={"query": "{ users(where: {name_not_in: null}) { id } }"})
    assert response.status_code == 200
    assert response.json() == {"data": {"users": [{"id": "u1"}, {"id": "u2"}, {"id": "u3"}]}}


def test_malformed_requests(client):
    cases = [
        (b"not json", "Invalid JSON"),
        (b"[]", "Request data is not an object"),
        (b"{}", 'The "query" field missing in request data'),
        (b'{"query": 1}', 'The "query" field is not a string'),
        (b'{"query": "{ users { id } }", "variables": []}', "Invalid query variables provided"),
    ]
    for body, message in cases:
        response = client.post("/graphql", content=body)
        assert response.status_code == 400, body
        assert response.json() == {"errors": [{"message": message}]}


def test_syntax_errors_report_locations(client):
    response = client.post("/graphql", json={"query": "{ users { id }"})
    assert response.status_code == 400
    [error] = response.json()["errors"]
    assert error["locations"] == [{"line": 1, "column": 15}]


def test_no_schema_available(settings, link_resolver):
    with TestClient(create_app(settings, link_resolver=link_resolver)) as client:
        response = client.post("/graphql", json=USERS_QUERY)
    assert response.status_code == 500
    assert response.json() == {"errors": [{"message": "No schema available to query"}]}


def test_failed_startup_deployments_do_not_stop_the_node(settings, link_resolver):
    settings = settings.with_overrides(subgraphs=(("broken", "/ipfs/QmMissing"),))
    with TestClient(create_app(settings, link_resolver=link_resolver)) as client:
        response = client.post("/subgraphs/name/broken/graphql", json=USERS_QUERY)
    assert response.status_code == 404


def test_preflight_requests(client):
    for path in ("/graphql", "/subgraphs/name/example/users/graphql", "/subgraphs/id/Qm/graphql"):
        response = client.options(path)
        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-headers"] == "Content-Type"


def test_graphiql(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Graph Node GraphiQL" in response.text


def test_graphiql_can_be_disabled(settings, link_resolver):
    settings = settings.with_overrides(graphiql_enabled=False)
    with TestClient(create_app(settings, link_resolver=link_resolver)) as client:
        response = client.get("/")
    assert response.status_code == 404
    assert response.text == "Not found"


def test_unknown_routes_and_methods_are_not_found(client):
    for response in (client.get("/nope"), client.get("/graphql"), client.put("/graphql")):
        assert response.status_code == 404
        assert response.text == "Not found"


def test_request_ids(client):
    response = client.post("/graphql", json=USERS_QUERY, headers={REQUEST_ID_HEADER: "req-1"})
    assert response.headers[REQUEST_ID_HEADER] == "req-1"

    response = client.post("/graphql", json=USERS_QUERY)
    assert response.headers[REQUEST_ID_HEADER]


def test_metrics(client):
    client.post("/graphql", json=USERS_QUERY)
    response = client.get("/metrics")
    assert response.status_code == 200
    assert 'graphnode_graphql_queries_total{kind="query",outcome="success"}' in response.text
    assert "graphnode_subgraphs_deployed 1.0" in response.text
