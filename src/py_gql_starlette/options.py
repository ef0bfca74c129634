# -*- coding: utf-8 -*-
"""
Execution options used when processing GraphQL queries over HTTP.
"""

from inspect import isawaitable
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Optional,
    Sequence,
    Union,
    cast,
)

from py_gql.schema import Schema
from py_gql.validation import Validator

from .errors import ErrorFormatter


ResponseFormatter = Callable[[Dict[str, Any]], Dict[str, Any]]


class GraphQLOptions:
    """
    Settings forwarded to :func:`py_gql.graphql` for a single request.

    Args:
        schema: Schema to execute queries against.

        context: Custom application-specific execution context. If this is a
            callable, it is called with the current request and its result
            (awaited if necessary) is used as the context value.

        root: Root resolution value passed to the top-level resolvers.

        debug: Include exception details in the serialized errors.

        format_error: Serialize a single error. Defaults to
            :func:`py_gql_starlette.errors.default_format_error`.

        format_response: Post-process each response document before it is
            encoded.

        validators: Custom validators, replacing the default ones.

        middlewares: List of py_gql middleware functions wrapping every
            field resolution.

        tracing: Record execution timings and expose them in the ``tracing``
            response extension following the Apollo tracing format.
    """

    __slots__ = (
        "schema",
        "context",
        "root",
        "debug",
        "format_error",
        "format_response",
        "validators",
        "middlewares",
        "tracing",
    )

    def __init__(
        self,
        schema: Schema,
        *,
        context: Any = None,
        root: Any = None,
        debug: bool = False,
        format_error: Optional[ErrorFormatter] = None,
        format_response: Optional[ResponseFormatter] = None,
        validators: Optional[Sequence[Validator]] = None,
        middlewares: Optional[Sequence[Callable[..., Any]]] = None,
        tracing: bool = False
    ):
        self.schema = schema
        self.context = context
        self.root = root
        self.debug = debug
        self.format_error = format_error
        self.format_response = format_response
        self.validators = validators
        self.middlewares = middlewares
        self.tracing = tracing

    def __repr__(self) -> str:
        return "<%s schema=%r debug=%r tracing=%r>" % (
            self.__class__.__name__,
            self.schema,
            self.debug,
            self.tracing,
        )

    async def resolve_context(self, request: Any) -> Any:
        """
        Compute the context value for a request.
        """
        if callable(self.context):
            value = self.context(request)
            if isawaitable(value):
                value = await value
            return value
        return self.context


OptionsFunction = Callable[
    [Any], Union[GraphQLOptions, Awaitable[GraphQLOptions]]
]
OptionsLike = Union[GraphQLOptions, OptionsFunction]


async def resolve_options(options: OptionsLike, request: Any) -> GraphQLOptions:
    """
    Get the options for the current request.

    Args:
        options: Either a static :class:`GraphQLOptions` instance or a
            callable deriving one from the request. The callable can return an
            awaitable.
        request: Current request.

    Returns:
        Resolved options.

    Raises:
        TypeError: if the resolved value is not a :class:`GraphQLOptions`
            instance or it doesn't define a schema.
    """
    if isinstance(options, GraphQLOptions):
        resolved = options  # type: Any
    elif callable(options):
        resolved = options(request)
        if isawaitable(resolved):
            resolved = await resolved
    else:
        resolved = options

    if not isinstance(resolved, GraphQLOptions):
        raise TypeError(
            "Expected GraphQLOptions instance but got %r" % (resolved,)
        )

    if not isinstance(resolved.schema, Schema):
        raise TypeError("Expected a py_gql Schema but got %r" % resolved.schema)

    return cast(GraphQLOptions, resolved)
