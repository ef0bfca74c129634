# -*- coding: utf-8 -*-
"""
Minimal application serving a counter schema.

Run with: ``uvicorn starlette_server:app``.
"""

import logging

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from py_gql import build_schema
from py_gql_starlette import GraphQLServer


logging.basicConfig(level=logging.DEBUG)

ROOT = {"counter": 0}

schema = build_schema(
    """
    scalar Upload

    type Query {
        counter: Int
    }

    type Mutation {
        increment(amount: Int = 1): Int
        uploadSize(file: Upload!): Int
    }
    """
)


@schema.resolver("Mutation.increment")
def increment(root, *_, amount):
    root["counter"] += amount
    return root["counter"]


@schema.resolver("Mutation.uploadSize")
def upload_size(*_, file):
    return file.size


async def sdl(request: Request) -> PlainTextResponse:
    return PlainTextResponse(schema.to_string())


async def check_database(request: Request) -> None:
    if ROOT["counter"] < 0:
        raise RuntimeError("Counter went negative")


app = Starlette(routes=[Route("/sdl", sdl)])

server = GraphQLServer(schema, root=ROOT, tracing=True)
server.apply_middleware(app, on_health_check=check_database)
