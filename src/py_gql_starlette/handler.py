# -*- coding: utf-8 -*-
"""
Starlette request handler executing GraphQL queries.
"""

import logging
from typing import Any, Awaitable, Callable, MutableMapping

from starlette.requests import Request
from starlette.responses import Response

from .exc import HttpQueryError
from .http_query import run_http_query
from .options import OptionsLike


logger = logging.getLogger(__name__)

# Key under which the decoded request body is stored in the ASGI scope by the
# body parser and upload middleware.
BODY_SCOPE_KEY = "py_gql_starlette.body"

Handler = Callable[[Request], Awaitable[Response]]


def get_parsed_body(scope: MutableMapping[str, Any]) -> Any:
    return scope.get(BODY_SCOPE_KEY)


def set_parsed_body(scope: MutableMapping[str, Any], body: Any) -> None:
    scope[BODY_SCOPE_KEY] = body


def error_response(err: HttpQueryError) -> Response:
    # Headers set on the error (e.g. Content-Type) take precedence over the
    # default media type.
    return Response(
        err.message,
        status_code=err.status_code,
        headers=err.headers,
        media_type="text/plain",
    )


def graphql_starlette(options: OptionsLike) -> Handler:
    """
    Build a Starlette endpoint processing GraphQL requests.

    ``POST`` requests read the operation(s) from the body decoded by the body
    parser or upload middleware while all other requests read them from the
    query string. The returned function can be used directly as a Starlette
    route endpoint.

    Args:
        options: Either a static :class:`~py_gql_starlette.GraphQLOptions`
            instance or a callable taking the current request and returning
            one (or an awaitable resolving to one).

    Returns:
        Request handler.

    Raises:
        ValueError: if ``options`` is missing.
    """
    if not options:
        raise ValueError("GraphQL server requires options.")

    async def graphql_handler(request: Request) -> Response:
        if request.method == "POST":
            query = get_parsed_body(request.scope)
        else:
            query = dict(request.query_params)

        try:
            graphql_response, headers = await run_http_query(
                request, method=request.method, options=options, query=query,
            )
        except HttpQueryError as err:
            logger.debug("Rejected GraphQL request: %r", err)
            return error_response(err)

        return Response(graphql_response, headers=headers)

    return graphql_handler
