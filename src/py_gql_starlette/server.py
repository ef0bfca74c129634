# -*- coding: utf-8 -*-

import functools as ft
import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from py_gql.schema import Schema
from py_gql.validation import Validator
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from .body_parser import BodyParserMiddleware
from .config import (
    Custom,
    Default,
    Disabled,
    SettingLike,
    coerce_setting,
    is_production,
)
from .errors import ErrorFormatter
from .handler import graphql_starlette
from .middleware import (
    HEALTH_CHECK_PATH,
    FactoryMiddleware,
    GraphQLMiddleware,
    HealthCheck,
    HealthCheckMiddleware,
    MiddlewareFactory,
    middleware_at_path,
)
from .options import GraphQLOptions, ResponseFormatter
from .playground import DEFAULT_PLAYGROUND_VERSION, render_playground_page
from .uploads import FileUploadMiddleware, FileUploadOptions


logger = logging.getLogger(__name__)

DEFAULT_PATH = "/graphql"

DEFAULT_CORS_OPTIONS = {
    "allow_origins": ["*"],
    "allow_methods": ["GET", "HEAD", "PUT", "POST", "DELETE", "PATCH"],
    "allow_headers": ["*"],
}


class GraphQLServer:
    """
    Serve a py_gql schema from a Starlette application.

    Args:
        schema: Schema to execute queries against.

        context: Execution context, or callable taking the current request and
            returning it (or an awaitable resolving to it).

        root: Root resolution value.

        debug: Include exception details in the serialized errors.

        format_error: Custom error serializer.

        format_response: Post-process each response document.

        validators: Custom validators.

        middlewares: py_gql middleware functions.

        default_resolver: Alternative default resolver. It is installed on
            the schema as its global default resolver
            (:attr:`py_gql.schema.Schema.default_resolver`) and is therefore
            shared by every request.

        tracing: Expose Apollo tracing data in the response extensions.

        uploads: Multipart upload support. ``True`` uses the default
            :class:`~py_gql_starlette.uploads.FileUploadOptions`, ``False``
            disables uploads and a mapping is used as keyword arguments for
            :class:`~py_gql_starlette.uploads.FileUploadOptions`.

        subscriptions_path: Subscription endpoint advertised in the explorer
            page. Defaults to the GraphQL path.

        playground_version: Version of GraphQL Playground to load.

    Attributes:
        graphql_path (Optional[str]): Path the GraphQL middleware has been
            installed at, set by :meth:`apply_middleware`.
    """

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
        default_resolver: Optional[Callable[..., Any]] = None,
        tracing: bool = False,
        uploads: Union[bool, FileUploadOptions, Mapping[str, Any]] = True,
        subscriptions_path: Optional[str] = None,
        playground_version: str = DEFAULT_PLAYGROUND_VERSION
    ):
        if schema is None:
            raise ValueError("GraphQL server requires a schema.")

        self.schema = schema
        self.context = context
        self.root = root
        self.debug = debug
        self.format_error = format_error
        self.format_response = format_response
        self.validators = validators
        self.middlewares = middlewares
        self.tracing = tracing
        self.uploads_config = _uploads_config(uploads)
        self.subscriptions_path = subscriptions_path
        self.playground_version = playground_version
        self.graphql_path = None  # type: Optional[str]

        if default_resolver is not None:
            schema.default_resolver = default_resolver

    async def create_graphql_options(self, request: Request) -> GraphQLOptions:
        """
        Build the execution options for a request.

        Override this to customize options per request.
        """
        return GraphQLOptions(
            self.schema,
            context=self.context,
            root=self.root,
            debug=self.debug,
            format_error=self.format_error,
            format_response=self.format_response,
            validators=self.validators,
            middlewares=self.middlewares,
            tracing=self.tracing,
        )

    def apply_middleware(
        self,
        app: Starlette,
        *,
        path: str = DEFAULT_PATH,
        cors: SettingLike = None,
        body_parser_config: SettingLike = None,
        disable_health_check: bool = False,
        on_health_check: Optional[HealthCheck] = None,
        gui: Optional[bool] = None
    ) -> None:
        """
        Install the GraphQL middleware on a Starlette application.

        The middleware are installed in front of any middleware already
        registered on ``app``. Apart from the health check, they only run for
        requests on ``path``.

        Args:
            app: Application to install the middleware on.

            path: Path to serve GraphQL requests on.

            cors: CORS policy. ``False`` disables CORS handling, ``True`` or
                ``None`` use a permissive default policy and a mapping (or
                :class:`~py_gql_starlette.config.Custom`) is passed as keyword
                arguments to :class:`starlette.middleware.cors.CORSMiddleware`.

            body_parser_config: Body parsing, same convention as ``cors`` with
                options from
                :class:`~py_gql_starlette.body_parser.BodyParserOptions`.

            disable_health_check: Do not install the health check on
                ``/.well-known/apollo/server-health``.

            on_health_check: Callable run on every health check request, the
                check fails if it raises.

            gui: Serve GraphQL Playground to browsers doing ``GET`` requests
                on ``path``. Defaults to enabled unless the
                ``PY_GQL_STARLETTE_ENV`` environment variable is set to
                ``production``.
        """
        path = path or DEFAULT_PATH
        chain = []  # type: List[MiddlewareFactory]

        if not disable_health_check:
            chain.append(
                middleware_at_path(
                    HEALTH_CHECK_PATH,
                    ft.partial(
                        HealthCheckMiddleware, on_health_check=on_health_check
                    ),
                )
            )

        self.graphql_path = path

        cors_factory = _configured(cors, CORSMiddleware, DEFAULT_CORS_OPTIONS)
        if cors_factory is not None:
            chain.append(middleware_at_path(path, cors_factory))

        body_parser_factory = _configured(
            body_parser_config, BodyParserMiddleware, {}
        )
        if body_parser_factory is not None:
            chain.append(middleware_at_path(path, body_parser_factory))

        if self.uploads_config is not None:
            chain.append(
                middleware_at_path(
                    path,
                    ft.partial(
                        FileUploadMiddleware, options=self.uploads_config
                    ),
                )
            )

        gui_enabled = bool(gui) or (gui is None and not is_production())
        playground_html = (
            render_playground_page(
                path,
                subscription_endpoint=self.subscriptions_path or path,
                version=self.playground_version,
            )
            if gui_enabled
            else None
        )

        chain.append(
            middleware_at_path(
                path,
                ft.partial(
                    GraphQLMiddleware,
                    handler=graphql_starlette(self.create_graphql_options),
                    playground_html=playground_html,
                ),
            )
        )

        logger.debug(
            "Installing %d GraphQL middleware at %s (gui: %s)",
            len(chain),
            path,
            gui_enabled,
        )

        # Starlette puts the last added middleware first.
        for factory in reversed(chain):
            app.add_middleware(FactoryMiddleware, factory=factory)


def _configured(
    value: SettingLike, middleware_cls: Any, defaults: Mapping[str, Any]
) -> Optional[MiddlewareFactory]:
    setting = coerce_setting(value)
    if isinstance(setting, Disabled):
        return None
    if isinstance(setting, Default):
        return ft.partial(middleware_cls, **defaults)
    if isinstance(setting, Custom):
        return ft.partial(middleware_cls, **setting.options)
    raise TypeError("Unsupported setting %r" % setting)


def _uploads_config(
    uploads: Union[bool, FileUploadOptions, Mapping[str, Any], None]
) -> Optional[FileUploadOptions]:
    if isinstance(uploads, FileUploadOptions):
        return uploads
    if uploads is True:
        return FileUploadOptions()
    if not uploads:
        return None
    return FileUploadOptions(**uploads)
