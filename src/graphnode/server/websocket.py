"""GraphQL subscriptions over WebSocket (the ``graphql-ws`` protocol)."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Annotated, Any, Dict, Literal, Optional, Union

from fastapi import APIRouter, WebSocket
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ..data.graphql import GraphQLError, GraphQLParseError
from ..data.query import Query, QueryResult, QueryVariables
from ..data.subscription import Subscription, SubscriptionError
from ..observability import websocket_connections
from ..runner import GraphQLRunner
from ..subgraph.registry import SubgraphRegistry
from ..telemetry import connection_context, log_structured
from .request import parse_query_document

logger = logging.getLogger(__name__)

SUBPROTOCOL = "graphql-ws"
INVALID_MESSAGE_CLOSE_CODE = 4400

router = APIRouter()


class StartPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str
    variables: Optional[Dict[str, Any]] = None
    operation_name: Optional[str] = Field(default=None, alias="operationName")


class ConnectionInit(BaseModel):
    type: Literal["connection_init"]
    payload: Optional[Any] = None


class ConnectionTerminate(BaseModel):
    type: Literal["connection_terminate"]


class Start(BaseModel):
    type: Literal["start"]
    id: str
    payload: StartPayload


class Stop(BaseModel):
    type: Literal["stop"]
    id: str


IncomingMessage = Annotated[
    Union[ConnectionInit, ConnectionTerminate, Start, Stop],
    Field(discriminator="type"),
]

_incoming_messages = TypeAdapter(IncomingMessage)


def parse_incoming_message(text: str) -> IncomingMessage:
    """Decode a client message; raises ``ValidationError`` if it is malformed."""
    return _incoming_messages.validate_json(text)


def connection_ack_message() -> Dict[str, Any]:
    return {"type": "connection_ack"}


def error_message(operation_id: str, message: str) -> Dict[str, Any]:
    return {"type": "error", "id": operation_id, "payload": message}


def data_message(operation_id: str, result: QueryResult) -> Dict[str, Any]:
    return {"type": "data", "id": operation_id, "payload": result.to_dict()}


def complete_message(operation_id: str) -> Dict[str, Any]:
    return {"type": "complete", "id": operation_id}


class GraphQLWebSocketConnection:
    """A single client connection; every ``start`` runs as its own task.

    Outgoing messages go through a queue drained by one writer task so that
    concurrent operations never write to the socket at the same time.
    """

    def __init__(
        self,
        websocket: WebSocket,
        registry: SubgraphRegistry,
        runner: GraphQLRunner,
        subgraph: str,
    ):
        self.id = str(uuid.uuid4())
        self.websocket = websocket
        self.registry = registry
        self.runner = runner
        self.subgraph = subgraph
        self.operations: Dict[str, asyncio.Task] = {}
        self._outgoing: "asyncio.Queue[Optional[Dict[str, Any]]]" = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None

    async def serve(self) -> None:
        offered = self.websocket.scope.get("subprotocols") or []
        await self.websocket.accept(subprotocol=SUBPROTOCOL if SUBPROTOCOL in offered else None)

        gauge = websocket_connections()
        gauge.inc()
        with connection_context(self.id, subgraph=self.subgraph):
            log_structured("debug", "websocket_connection_opened")
            self._writer = asyncio.create_task(self._write_messages())
            try:
                await self._read_messages()
            finally:
                await self._cancel_operations()
                if not self._writer.done():
                    self._writer.cancel()
                await asyncio.gather(self._writer, return_exceptions=True)
                gauge.dec()
                log_structured("debug", "websocket_connection_closed")

    def send(self, message: Dict[str, Any]) -> None:
        self._outgoing.put_nowait(message)

    async def _write_messages(self) -> None:
        while True:
            message = await self._outgoing.get()
            if message is None:
                return
            logger.debug("Sending message on connection %s: %s", self.id, message)
            await self.websocket.send_json(message)

    async def _read_messages(self) -> None:
        while True:
            raw = await self.websocket.receive()
            if raw["type"] == "websocket.disconnect":
                return

            text = raw.get("text")
            if text is None:
                text = (raw.get("bytes") or b"").decode("utf-8", errors="replace")

            try:
                message = parse_incoming_message(text)
            except ValidationError as exc:
                log_structured(
                    "warning",
                    "websocket_invalid_message",
                    error_message=f"Invalid GraphQL over WebSocket message: {text}: {exc}",
                )
                await self._close(INVALID_MESSAGE_CLOSE_CODE)
                return

            logger.debug("Received message on connection %s: %r", self.id, message)

            if isinstance(message, ConnectionTerminate):
                await self._close(1000)
                return
            if isinstance(message, ConnectionInit):
                self.send(connection_ack_message())
            elif isinstance(message, Stop):
                self._stop(message.id)
            else:
                self._start(message)

    async def _close(self, code: int) -> None:
        # Flush whatever is queued before closing
        self._outgoing.put_nowait(None)
        await asyncio.gather(self._writer, return_exceptions=True)
        await self.websocket.close(code=code)

    def _stop(self, operation_id: str) -> None:
        task = self.operations.pop(operation_id, None)
        if task is None:
            self.send(error_message(operation_id, f"Unknown operation ID: {operation_id}"))
            return
        task.cancel()
        log_structured("debug", "websocket_operation_stopped", operation_id=operation_id)
        self.send(complete_message(operation_id))

    def _start(self, message: Start) -> None:
        operation_id = message.id
        if operation_id in self.operations:
            self.send(
                error_message(operation_id, f"Operation with ID already started: {operation_id}")
            )
            return

        schema = self.registry.resolve(self.subgraph)
        if schema is None:
            self.send(error_message(operation_id, f"Unknown subgraph name or ID: {self.subgraph}"))
            return

        payload = message.payload
        try:
            document = parse_query_document(payload.query)
        except GraphQLParseError as exc:
            self.send(error_message(operation_id, f"Invalid query: {payload.query}: {exc}"))
            return

        subscription = Subscription(
            Query(
                schema=schema,
                document=document,
                variables=QueryVariables.from_mapping(payload.variables),
                operation_name=payload.operation_name,
            )
        )
        log_structured("debug", "websocket_operation_started", operation_id=operation_id)
        self.operations[operation_id] = asyncio.create_task(
            self._run_operation(operation_id, subscription)
        )

    async def _run_operation(self, operation_id: str, subscription: Subscription) -> None:
        try:
            stream = await self.runner.run_subscription(subscription)
            try:
                async for result in stream:
                    self.send(data_message(operation_id, result))
            finally:
                await stream.aclose()
        except SubscriptionError as exc:
            self.send(data_message(operation_id, QueryResult.from_error(exc.error)))
        except Exception as exc:
            log_structured(
                "error",
                "websocket_operation_failed",
                operation_id=operation_id,
                error_type=exc.__class__.__name__,
                error_message=str(exc),
            )
            error = GraphQLError(f"Subscription failed: {exc}")
            self.send(data_message(operation_id, QueryResult.from_error(error)))
        finally:
            # A stopped operation has already been removed and answered
            if self.operations.pop(operation_id, None) is not None:
                self.send(complete_message(operation_id))

    async def _cancel_operations(self) -> None:
        tasks = list(self.operations.values())
        self.operations.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


@router.websocket("/subgraphs/name/{name:path}")
async def subscribe_by_name(websocket: WebSocket, name: str) -> None:
    await _serve(websocket, name)


@router.websocket("/subgraphs/id/{subgraph_id}")
async def subscribe_by_id(websocket: WebSocket, subgraph_id: str) -> None:
    await _serve(websocket, subgraph_id)


async def _serve(websocket: WebSocket, subgraph: str) -> None:
    state = websocket.app.state
    connection = GraphQLWebSocketConnection(websocket, state.registry, state.runner, subgraph)
    await connection.serve()


__all__ = [
    "GraphQLWebSocketConnection",
    "INVALID_MESSAGE_CLOSE_CODE",
    "SUBPROTOCOL",
    "parse_incoming_message",
    "router",
]
