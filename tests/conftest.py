# -*- coding: utf-8 -*-
""" Global fixtures """

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from py_gql import build_schema
from py_gql.exc import ResolverError

from py_gql_starlette import GraphQLServer


SDL = """
scalar Upload

type Query {
    hello(value: String = "world"): String!
    counter: Int
    viewer: String
    fail: String
}

type Mutation {
    increment(amount: Int = 1): Int
    uploadSize(file: Upload!): Int
    uploadContents(files: [Upload!]!): [String!]!
}
"""


@pytest.fixture
def schema():
    schema_ = build_schema(SDL)

    @schema_.resolver("Query.hello")
    def resolve_hello(*_, value):
        return "Hello {}!".format(value)

    @schema_.resolver("Query.counter")
    def resolve_counter(root, *_):
        return root["counter"]

    @schema_.resolver("Query.viewer")
    def resolve_viewer(_root, ctx, *_):
        return ctx["viewer"] if ctx else None

    @schema_.resolver("Query.fail")
    def resolve_fail(*_):
        raise ResolverError("Nope")

    @schema_.resolver("Mutation.increment")
    def resolve_increment(root, *_, amount):
        root["counter"] += amount
        return root["counter"]

    @schema_.resolver("Mutation.uploadSize")
    def resolve_upload_size(*_, file):
        return len(file.file.read())

    @schema_.resolver("Mutation.uploadContents")
    def resolve_upload_contents(*_, files):
        return [f.file.read().decode("utf-8") for f in files]

    return schema_


@pytest.fixture
def root():
    return {"counter": 0}


async def _other(request: Request) -> PlainTextResponse:
    body = await request.body()
    return PlainTextResponse("other:%s" % body.decode("utf-8"))


@pytest.fixture
def make_app(schema, root):
    """ Helper building an application with the GraphQL middleware. """

    def factory(server_kwargs=None, **kwargs):
        app = Starlette(
            routes=[Route("/other", _other, methods=["GET", "POST"])]
        )
        server = GraphQLServer(schema, root=root, **(server_kwargs or {}))
        server.apply_middleware(app, **kwargs)
        return app

    return factory


@pytest.fixture
def make_client(make_app):
    def factory(server_kwargs=None, raise_server_exceptions=True, **kwargs):
        return TestClient(
            make_app(server_kwargs, **kwargs),
            raise_server_exceptions=raise_server_exceptions,
        )

    return factory


@pytest.fixture
def client(make_client):
    return make_client()
