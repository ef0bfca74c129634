# -*- coding: utf-8 -*-
"""
ASGI middleware installed by
:meth:`py_gql_starlette.GraphQLServer.apply_middleware`.
"""

import logging
from inspect import isawaitable
from typing import Any, Callable, Optional

from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send

from ._utils import prefers_html
from .handler import Handler


logger = logging.getLogger(__name__)

HEALTH_CHECK_PATH = "/.well-known/apollo/server-health"
HEALTH_CHECK_MEDIA_TYPE = "application/health+json"

MiddlewareFactory = Callable[[ASGIApp], ASGIApp]
HealthCheck = Callable[[Request], Any]


def middleware_at_path(
    path: str, factory: MiddlewareFactory
) -> MiddlewareFactory:
    """
    Restrict a middleware to a single path.

    The middleware built by ``factory`` only sees HTTP requests for which the
    path is exactly ``path``, everything else goes straight to the wrapped
    application.

    Args:
        path: Request path.
        factory: Callable building the middleware from the wrapped
            application, e.g. a middleware class.

    Returns:
        A new middleware factory.
    """

    def install(app: ASGIApp) -> ASGIApp:
        middleware = factory(app)

        async def scoped(scope: Scope, receive: Receive, send: Send) -> None:
            if scope["type"] == "http" and scope["path"] == path:
                await middleware(scope, receive, send)
            else:
                await app(scope, receive, send)

        return scoped

    return install


class FactoryMiddleware:
    """
    Adapter used to register a middleware factory through
    :meth:`starlette.applications.Starlette.add_middleware`.
    """

    def __init__(self, app: ASGIApp, factory: MiddlewareFactory):
        self.app = factory(app)

    async def __call__(
        self, scope: Scope, receive: Receive, send: Send
    ) -> None:
        await self.app(scope, receive, send)


class HealthCheckMiddleware:
    """
    Respond to health checks following
    https://tools.ietf.org/html/draft-inadarei-api-health-check-01.

    Args:
        app: Wrapped ASGI application, only used for non HTTP requests.
        on_health_check: Optional callable receiving the request. The check
            fails if it raises (or if the awaitable it returns raises).
    """

    def __init__(
        self, app: ASGIApp, on_health_check: Optional[HealthCheck] = None
    ):
        self.app = app
        self.on_health_check = on_health_check

    async def __call__(
        self, scope: Scope, receive: Receive, send: Send
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        status_code, status = 200, "pass"

        if self.on_health_check is not None:
            try:
                result = self.on_health_check(Request(scope, receive))
                if isawaitable(result):
                    await result
            except Exception:
                logger.warning("Health check failed", exc_info=True)
                status_code, status = 503, "fail"

        response = JSONResponse(
            {"status": status},
            status_code=status_code,
            media_type=HEALTH_CHECK_MEDIA_TYPE,
        )
        await response(scope, receive, send)


class GraphQLMiddleware:
    """
    Final middleware of the GraphQL path: serve the explorer page to browsers
    and hand everything else to the GraphQL handler.

    Args:
        app: Wrapped ASGI application, only used for non HTTP requests.
        handler: GraphQL request handler.
        playground_html: Explorer page, ``None`` disables it.
    """

    def __init__(
        self,
        app: ASGIApp,
        handler: Handler,
        playground_html: Optional[str] = None,
    ):
        self.app = app
        self.handler = handler
        self.playground_html = playground_html

    async def __call__(
        self, scope: Scope, receive: Receive, send: Send
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)

        if (
            self.playground_html is not None
            and request.method == "GET"
            and prefers_html(request.headers.get("accept", ""))
        ):
            response = HTMLResponse(self.playground_html)  # type: Response
        else:
            response = await self.handler(request)

        await response(scope, receive, send)
