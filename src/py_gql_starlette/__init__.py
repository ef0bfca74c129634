# -*- coding: utf-8 -*-
"""
py_gql_starlette

Serve `py_gql <https://github.com/lirsacc/py-gql>`_ schemas over HTTP from
`Starlette <https://www.starlette.io/>`_ applications.

Use :class:`GraphQLServer` to install the full middleware stack (health
check, CORS, body parsing, file uploads and the GraphQL Playground explorer)
on an application or :func:`graphql_starlette` to build a bare endpoint.
"""

from .version import __version__  # isort:skip

from .config import Custom, Default, Disabled
from .exc import GraphQLServerError, HttpQueryError, UploadError
from .handler import graphql_starlette
from .http_query import HttpQueryResponse, run_http_query
from .middleware import middleware_at_path
from .options import GraphQLOptions
from .playground import render_playground_page
from .server import GraphQLServer
from .uploads import FileUploadOptions, process_file_uploads


__all__ = (
    "__version__",
    "GraphQLServer",
    "GraphQLOptions",
    "FileUploadOptions",
    "graphql_starlette",
    "run_http_query",
    "HttpQueryResponse",
    "process_file_uploads",
    "render_playground_page",
    "middleware_at_path",
    "GraphQLServerError",
    "HttpQueryError",
    "UploadError",
    "Custom",
    "Default",
    "Disabled",
)
