# -*- coding: utf-8 -*-
"""
Framework independent processing of GraphQL queries received over HTTP.

:func:`run_http_query` takes care of validating the HTTP level parameters
(method, payload shape, JSON encoded variables), executing the operation(s)
with :func:`py_gql.graphql` and encoding the result. Expected failures are
reported by raising :class:`~py_gql_starlette.exc.HttpQueryError` which
carries the HTTP status, body and headers the web framework should respond
with.
"""

import json
import logging
from typing import Any, Dict, Mapping, NamedTuple, Optional

from py_gql import graphql
from py_gql.exc import GraphQLSyntaxError, InvalidOperationError
from py_gql.execution import get_operation
from py_gql.lang import parse
from py_gql.tracers import ApolloTracer

from .errors import format_errors
from .exc import HttpQueryError
from .options import GraphQLOptions, OptionsLike, resolve_options


logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class HttpQueryResponse(NamedTuple):
    """
    Successful result of :func:`run_http_query`.

    Attributes:
        graphql_response (str): JSON encoded response body.
        headers (Dict[str, str]): Headers to set on the HTTP response.
    """

    graphql_response: str
    headers: Dict[str, str]


async def run_http_query(
    request: Any,
    *,
    method: str,
    options: OptionsLike,
    query: Any
) -> HttpQueryResponse:
    """
    Process a GraphQL request.

    Args:
        request: Web framework request, passed as is to the options and
            context callables.
        method: HTTP method of the request.
        options: Static options or callable deriving them from ``request``.
        query: Request payload. This should be the decoded body for ``POST``
            requests and the query string parameters for ``GET`` requests. A
            list of operations in a ``POST`` body is processed as a batch.

    Returns:
        Encoded response and headers.

    Raises:
        HttpQueryError: When the request cannot be processed.
    """
    is_get = False

    if method == "POST":
        if query is None:
            raise HttpQueryError(
                500,
                "POST body missing. Did you forget use body-parser middleware?",
            )
        payload = query
    elif method == "GET":
        if not query:
            raise HttpQueryError(400, "GET query missing.")
        is_get = True
        payload = query
    else:
        raise HttpQueryError(
            405,
            "GraphQL server supports only GET/POST requests.",
            headers={"Allow": "GET, POST"},
        )

    try:
        resolved = await resolve_options(options, request)
    except Exception as err:
        logger.error("Failed to resolve GraphQL options", exc_info=True)
        raise HttpQueryError(
            500, "Invalid options provided to GraphQL server: %s" % err
        ) from err

    is_batch = isinstance(payload, list)
    operations = payload if is_batch else [payload]

    if is_batch and not operations:
        raise HttpQueryError(400, "Received an empty list of operations.")

    context = await resolved.resolve_context(request)

    if is_batch:
        logger.debug("Processing batch of %d operations", len(operations))

    responses = [
        await _process_operation(params, resolved, context, is_get)
        for params in operations
    ]

    if not is_batch:
        response = responses[0]
        if "errors" in response and "data" not in response:
            raise HttpQueryError(
                400,
                json.dumps(response),
                is_graphql_error=True,
                headers={"Content-Type": JSON_CONTENT_TYPE},
            )
        body = json.dumps(response)
    else:
        body = json.dumps(responses)

    return HttpQueryResponse(
        body,
        {
            "Content-Type": JSON_CONTENT_TYPE,
            "Content-Length": str(len(body.encode("utf-8"))),
        },
    )


async def _process_operation(
    params: Any, options: GraphQLOptions, context: Any, is_get: bool
) -> Dict[str, Any]:
    if not isinstance(params, Mapping):
        params = {}

    query = params.get("query")
    if not isinstance(query, str) or not query.strip():
        raise HttpQueryError(400, "Must provide query string.")

    variables = _decode_json_param(
        params.get("variables"), "Variables are invalid JSON."
    )
    if variables is not None and not isinstance(variables, Mapping):
        raise HttpQueryError(400, "Variables must be an object.")

    operation_name = params.get("operationName") or None
    if operation_name is not None and not isinstance(operation_name, str):
        raise HttpQueryError(400, "Operation name must be a string.")

    if is_get:
        _assert_query_operation(query, operation_name)

    tracer = ApolloTracer() if options.tracing else None

    result = await graphql(
        options.schema,
        query,
        variables=variables,
        operation_name=operation_name,
        root=options.root,
        context=context,
        validators=options.validators,
        middlewares=options.middlewares,
        instrumentation=tracer,
    )

    if tracer is not None:
        result.add_extension(tracer)

    response = result.response()
    if result.errors:
        response["errors"] = format_errors(
            result.errors, options.format_error, options.debug
        )

    if options.format_response is not None:
        response = options.format_response(response)

    return response


def _decode_json_param(value: Any, message: str) -> Any:
    if not isinstance(value, str):
        return value
    if not value:
        return None
    try:
        return json.loads(value)
    except ValueError:
        raise HttpQueryError(400, message)


def _assert_query_operation(query: str, operation_name: Optional[str]) -> None:
    # Invalid documents are left for the executor to report as GraphQL errors.
    try:
        operation = get_operation(parse(query), operation_name)
    except (GraphQLSyntaxError, InvalidOperationError):
        return

    if operation.operation != "query":
        raise HttpQueryError(
            405,
            "GET supports only query operation",
            headers={"Allow": "POST"},
        )

