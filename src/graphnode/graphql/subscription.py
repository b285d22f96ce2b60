"""Execution of GraphQL subscriptions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, List, Mapping, Set, Tuple

from graphql.language import (
    DocumentNode,
    ObjectTypeDefinitionNode,
    OperationDefinitionNode,
    OperationType,
)

from ..data.query import QueryResult
from ..data.store import EntityChangeStream, Store
from ..data.subscription import Subscription, SubscriptionResult
from . import ast as qast
from .errors import ExecutionError, NoRootSubscriptionObjectType, NotSupported
from .execution import Execution, coerce_variable_values, collect_fields
from .resolver import Resolver


@dataclass
class SubscriptionExecutionOptions:
    """Options available for subscription execution."""

    resolver: Resolver
    store: Store
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))


def execute_subscription(
    subscription: Subscription, options: SubscriptionExecutionOptions
) -> SubscriptionResult:
    """Start a subscription.

    The returned result carries a stream that yields the initial result of
    the subscription and then a fresh result whenever entities the
    subscription selects have changed.
    """
    query = subscription.query
    logger = options.logger
    logger.debug("Execute subscription against subgraph %s", query.schema.id)

    try:
        operation = qast.get_operation(query.document, query.operation_name)
    except ExecutionError as exc:
        return SubscriptionResult.from_error(exc)

    if operation.operation != OperationType.SUBSCRIPTION:
        return SubscriptionResult.from_error(NotSupported("Only subscriptions are supported"))

    subscription_type = qast.get_root_subscription_type(query.schema.document)
    if subscription_type is None:
        return SubscriptionResult.from_error(NoRootSubscriptionObjectType())

    try:
        variables = coerce_variable_values(query.schema.document, operation, query.variables)
    except ExecutionError as exc:
        return SubscriptionResult.from_error(exc)

    def execute() -> QueryResult:
        execution = Execution(
            schema=query.schema,
            document=query.document,
            resolver=options.resolver,
            variables=variables,
            operation=operation,
            logger=logger,
        )
        data = execution.execute_selection_set(
            [operation.selection_set], subscription_type, None
        )
        return QueryResult(data=data, errors=execution.errors)

    entity_types = collect_entity_types(
        query.schema.document, subscription_type, operation, query.document, variables
    )
    source_stream = options.store.subscribe((query.schema.id, name) for name in entity_types)
    return SubscriptionResult(stream=_response_stream(source_stream, execute, logger))


def collect_entity_types(
    schema: DocumentNode,
    subscription_type: ObjectTypeDefinitionNode,
    operation: OperationDefinitionNode,
    document: DocumentNode,
    variables: Mapping[str, Any],
) -> List[str]:
    """Names of the entity types the root fields of a subscription return.

    Interfaces and unions expand to their possible object types.
    """
    grouped = collect_fields(
        schema, document, subscription_type, [operation.selection_set], variables
    )

    names: List[str] = []
    seen: Set[str] = set()
    for fields in grouped.values():
        field_definition = qast.get_field_type(subscription_type, fields[0].name.value)
        if field_definition is None:
            continue
        named_type = qast.get_named_type(schema, qast.unwrap_named_type(field_definition.type))
        if named_type is None:
            continue
        for object_type in qast.get_possible_types(schema, named_type):
            name = object_type.name.value
            if name not in seen:
                seen.add(name)
                names.append(name)
    return names


async def _response_stream(
    source_stream: EntityChangeStream,
    execute: Callable[[], QueryResult],
    logger: logging.Logger,
) -> AsyncIterator[QueryResult]:
    try:
        yield execute()
        async for change in source_stream:
            # Changes that queued up while the last result was produced are
            # covered by a single new result
            pending: Tuple = (change, *source_stream.drain())
            logger.debug("Re-running subscription after %d entity change(s)", len(pending))
            yield execute()
    finally:
        source_stream.close()


__all__ = ["SubscriptionExecutionOptions", "collect_entity_types", "execute_subscription"]
