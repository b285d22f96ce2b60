import sys
from pathlib import Path
from typing import Any, Dict, Optional

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for path in (ROOT, SRC):
    path_str = str(path)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

import pytest
from fastapi.testclient import TestClient
from graphql import parse

from graphnode.core.settings import GraphNodeSettings
from graphnode.data.query import Query, QueryVariables
from graphnode.data.schema import Schema
from graphnode.data.store import EntityKey
from graphnode.data.subgraph import LinkResolver, LinkResolverError
from graphnode.graphql import QueryExecutionOptions, StoreResolver, api_schema, execute_query
from graphnode.observability import clear_metric_cache
from graphnode.server import create_app
from graphnode.store import InMemoryStore

SUBGRAPH_ID = "QmExampleSubgraph"

ENTITY_SDL = """
enum Role {
  ADMIN
  USER
}

interface Named {
  id: ID!
  name: String!
}

type User implements Named @entity {
  id: ID!
  name: String!
  age: Int
  role: Role
  tags: [String!]
  bestFriend: User
  friends: [User!]
  posts: [Post!] @derivedFrom(field: "author")
}

type Post @entity {
  id: ID!
  title: String!
  author: User!
  score: BigInt
}
"""

USERS = [
    {
        "id": "u1",
        "name": "Alice",
        "age": 30,
        "role": "ADMIN",
        "tags": ["a", "b"],
        "bestFriend": "u2",
        "friends": ["u2", "u3"],
    },
    {"id": "u2", "name": "Bob", "age": 25, "role": "USER", "tags": ["b"], "friends": ["u1"]},
    {"id": "u3", "name": "Carol", "age": 35, "role": "USER"},
]

POSTS = [
    {"id": "p1", "title": "Hello", "author": "u1", "score": "100"},
    {"id": "p2", "title": "World", "author": "u1"},
    {"id": "p3", "title": "Bye", "author": "u2"},
]

MANIFEST_LINK = "/ipfs/QmManifest"
SCHEMA_LINK = "/ipfs/QmSchema"


def manifest_yaml(schema_link: str = SCHEMA_LINK) -> bytes:
    return f"""
specVersion: 0.0.1
schema:
  file:
    /: {schema_link}
dataSources:
  - kind: ethereum/contract
    name: Users
    network: mainnet
    source:
      address: "0x0000000000000000000000000000000000000001"
    mapping:
      kind: ethereum/events
""".encode(
        "utf-8"
    )


class StaticLinkResolver(LinkResolver):
    """Serves a fixed set of files by link and records the requests."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files: Dict[str, bytes] = dict(files or {})
        self.requests = []

    async def cat(self, link: str) -> bytes:
        self.requests.append(link)
        try:
            return self.files[link]
        except KeyError:
            raise LinkResolverError(f"Unknown link: {link}") from None


@pytest.fixture(autouse=True)
def _clear_metric_cache():
    clear_metric_cache()
    yield
    clear_metric_cache()


@pytest.fixture
def entity_schema() -> Schema:
    return Schema.parse(name="example", id=SUBGRAPH_ID, sdl=ENTITY_SDL)


@pytest.fixture
def schema(entity_schema: Schema) -> Schema:
    """The API schema of the example subgraph."""
    return entity_schema.with_document(api_schema(entity_schema.document))


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    for user in USERS:
        store.set(EntityKey(SUBGRAPH_ID, "User", user["id"]), user)
    for post in POSTS:
        store.set(EntityKey(SUBGRAPH_ID, "Post", post["id"]), post)
    return store


@pytest.fixture
def make_query(schema: Schema):
    def make(text: str, variables: Optional[Dict[str, Any]] = None, operation_name=None) -> Query:
        return Query(
            schema=schema,
            document=parse(text),
            variables=QueryVariables.from_mapping(variables),
            operation_name=operation_name,
        )

    return make


@pytest.fixture
def run_query(schema: Schema, store: InMemoryStore, make_query):
    """Execute a query against the example store and return the serialized result."""

    def run(text: str, variables: Optional[Dict[str, Any]] = None, operation_name=None, **kwargs):
        resolver = StoreResolver(store, schema, **kwargs)
        result = execute_query(
            make_query(text, variables, operation_name), QueryExecutionOptions(resolver=resolver)
        )
        return result.to_dict()

    return run


@pytest.fixture
def link_resolver() -> StaticLinkResolver:
    return StaticLinkResolver(
        {
            MANIFEST_LINK: manifest_yaml(),
            SCHEMA_LINK: ENTITY_SDL.encode("utf-8"),
            "/ipfs/QmOther": manifest_yaml(),
        }
    )


@pytest.fixture
def settings() -> GraphNodeSettings:
    return GraphNodeSettings(ipfs_url="http://ipfs.test:5001", default_first=100, max_first=1000)


@pytest.fixture
def make_link_resolver():
    return StaticLinkResolver


@pytest.fixture
def deployed_store() -> InMemoryStore:
    """Example entities stored under the id of the subgraph at ``MANIFEST_LINK``."""
    store = InMemoryStore()
    for user in USERS:
        store.set(EntityKey("QmManifest", "User", user["id"]), user)
    for post in POSTS:
        store.set(EntityKey("QmManifest", "Post", post["id"]), post)
    return store


@pytest.fixture
def app(settings, deployed_store, link_resolver):
    settings = settings.with_overrides(subgraphs=(("example/users", MANIFEST_LINK),))
    return create_app(settings, store=deployed_store, link_resolver=link_resolver)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client
