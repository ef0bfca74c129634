# -*- coding: utf-8 -*-
""" Test the middleware installation on a Starlette application """

import pytest
from starlette.applications import Starlette
from starlette.testclient import TestClient

from py_gql import build_schema

from py_gql_starlette import Custom, GraphQLServer
from py_gql_starlette.middleware import HEALTH_CHECK_PATH


def test_schema_is_required():
    with pytest.raises(ValueError):
        GraphQLServer(None)  # type: ignore


def test_graphql_path_is_recorded(schema):
    server = GraphQLServer(schema)
    assert server.graphql_path is None
    server.apply_middleware(Starlette(), path="/api/graphql")
    assert server.graphql_path == "/api/graphql"


def test_default_path(schema):
    server = GraphQLServer(schema)
    server.apply_middleware(Starlette())
    assert server.graphql_path == "/graphql"


@pytest.mark.parametrize(
    "uploads,expected",
    [
        (True, (1000000, None, None)),
        ({"max_files": 2}, (1000000, None, 2)),
    ],
)
def test_uploads_config(schema, uploads, expected):
    config = GraphQLServer(schema, uploads=uploads).uploads_config
    assert (
        config.max_field_size,
        config.max_file_size,
        config.max_files,
    ) == expected


def test_uploads_can_be_disabled(schema):
    assert GraphQLServer(schema, uploads=False).uploads_config is None


def test_post_query(client):
    response = client.post("/graphql", json={"query": "{ hello counter }"})
    assert response.status_code == 200
    assert response.json() == {"data": {"hello": "Hello world!", "counter": 0}}


def test_get_query(client):
    response = client.get(
        "/graphql",
        params={"query": "{ hello }"},
        headers={"Accept": "application/json"},
    )
    assert response.status_code == 200
    assert response.json() == {"data": {"hello": "Hello world!"}}


def test_get_mutation_is_rejected(client, root):
    response = client.get(
        "/graphql",
        params={"query": "mutation { increment }"},
        headers={"Accept": "application/json"},
    )
    assert response.status_code == 405
    assert response.headers["allow"] == "POST"
    assert root["counter"] == 0


def test_batch(client):
    response = client.post(
        "/graphql",
        json=[{"query": "{ hello }"}, {"query": "mutation { increment }"}],
    )
    assert response.status_code == 200
    assert response.json() == [
        {"data": {"hello": "Hello world!"}},
        {"data": {"increment": 1}},
    ]


def test_unsupported_method(client):
    response = client.put("/graphql", json={"query": "{ hello }"})
    assert response.status_code == 405
    assert response.headers["allow"] == "GET, POST"


def test_context_is_passed_to_resolvers(make_client):
    client = make_client(
        server_kwargs={"context": lambda request: {"viewer": request.url.path}}
    )
    response = client.post("/graphql", json={"query": "{ viewer }"})
    assert response.json() == {"data": {"viewer": "/graphql"}}


def test_default_resolver_is_used_for_fields_without_resolver():
    schema = build_schema(
        """
        type Query {
            answer: Int
            explicit: Int
        }
        """
    )

    @schema.resolver("Query.explicit")
    def resolve_explicit(*_):
        return 1

    def default_resolver(root, ctx, info, **args):
        return 42

    app = Starlette()
    GraphQLServer(schema, default_resolver=default_resolver).apply_middleware(
        app
    )

    response = TestClient(app).post(
        "/graphql", json={"query": "{ answer explicit }"}
    )
    assert response.status_code == 200
    assert response.json() == {"data": {"answer": 42, "explicit": 1}}


def test_create_graphql_options_can_be_overridden(schema):
    class Server(GraphQLServer):
        async def create_graphql_options(self, request):
            options = await super().create_graphql_options(request)
            options.context = {"viewer": request.headers["x-viewer"]}
            return options

    app = Starlette()
    Server(schema).apply_middleware(app)
    response = TestClient(app).post(
        "/graphql", json={"query": "{ viewer }"}, headers={"X-Viewer": "Bob"}
    )
    assert response.json() == {"data": {"viewer": "Bob"}}


def test_other_paths_are_not_affected(client):
    response = client.post(
        "/other",
        content=b'{"query": "{ hello }"}',
        headers={"Content-Type": "application/json", "Origin": "http://a.b"},
    )
    assert response.status_code == 200
    assert response.text == 'other:{"query": "{ hello }"}'
    assert "access-control-allow-origin" not in response.headers


def test_sub_paths_are_not_affected(client):
    response = client.get("/graphql/foo", headers={"Accept": "text/html"})
    assert response.status_code == 404


class TestCors:
    def test_default_policy(self, client):
        response = client.post(
            "/graphql",
            json={"query": "{ hello }"},
            headers={"Origin": "http://example.com"},
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_preflight(self, client):
        response = client.options(
            "/graphql",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
            },
        )
        assert response.status_code == 200
        assert "POST" in response.headers["access-control-allow-methods"]

    def test_true_uses_the_default_policy(self, make_client):
        response = make_client(cors=True).post(
            "/graphql",
            json={"query": "{ hello }"},
            headers={"Origin": "http://example.com"},
        )
        assert response.headers["access-control-allow-origin"] == "*"

    def test_disabled(self, make_client):
        response = make_client(cors=False).post(
            "/graphql",
            json={"query": "{ hello }"},
            headers={"Origin": "http://example.com"},
        )
        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers

    @pytest.mark.parametrize(
        "cors",
        [
            {
                "allow_origins": ["http://example.com"],
                "expose_headers": ["X-Custom"],
            },
            Custom(
                allow_origins=["http://example.com"],
                expose_headers=["X-Custom"],
            ),
        ],
    )
    def test_custom_policy(self, make_client, cors):
        client = make_client(cors=cors)

        response = client.post(
            "/graphql",
            json={"query": "{ hello }"},
            headers={"Origin": "http://example.com"},
        )
        assert (
            response.headers["access-control-allow-origin"]
            == "http://example.com"
        )
        assert response.headers["access-control-expose-headers"] == "X-Custom"

        response = client.post(
            "/graphql",
            json={"query": "{ hello }"},
            headers={"Origin": "http://other.com"},
        )
        assert "access-control-allow-origin" not in response.headers

    def test_invalid_setting(self, make_app):
        with pytest.raises(TypeError):
            make_app(cors="yes")


class TestBodyParser:
    def test_disabled(self, make_client):
        response = make_client(body_parser_config=False).post(
            "/graphql", json={"query": "{ hello }"}
        )
        assert response.status_code == 500
        assert response.text == (
            "POST body missing. Did you forget use body-parser middleware?"
        )

    def test_custom_limit(self, make_client):
        client = make_client(body_parser_config={"json_limit": 10})
        response = client.post("/graphql", json={"query": "{ hello }"})
        assert response.status_code == 413

    def test_invalid_json(self, client):
        response = client.post(
            "/graphql",
            content=b'{"query": ',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.text == "Invalid JSON."

    def test_form_body(self, client):
        response = client.post("/graphql", data={"query": "{ hello }"})
        assert response.status_code == 200
        assert response.json() == {"data": {"hello": "Hello world!"}}


class TestHealthCheck:
    def test_pass(self, client):
        response = client.get(HEALTH_CHECK_PATH)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/health+json"
        assert response.json() == {"status": "pass"}

    def test_any_method(self, client):
        response = client.post(HEALTH_CHECK_PATH)
        assert response.status_code == 200

    def test_disabled(self, make_client):
        response = make_client(disable_health_check=True).get(
            HEALTH_CHECK_PATH
        )
        assert response.status_code == 404

    def test_sync_callback(self, make_client):
        seen = []
        client = make_client(on_health_check=lambda req: seen.append(req))
        response = client.get(HEALTH_CHECK_PATH)
        assert response.status_code == 200
        assert response.json() == {"status": "pass"}
        assert [r.url.path for r in seen] == [HEALTH_CHECK_PATH]

    def test_async_callback(self, make_client):
        async def check(request):
            return True

        response = make_client(on_health_check=check).get(HEALTH_CHECK_PATH)
        assert response.status_code == 200
        assert response.json() == {"status": "pass"}

    def test_failing_callback(self, make_client):
        async def check(request):
            raise ConnectionError("Database is down")

        response = make_client(on_health_check=check).get(HEALTH_CHECK_PATH)
        assert response.status_code == 503
        assert response.headers["content-type"] == "application/health+json"
        assert response.json() == {"status": "fail"}

    def test_is_not_moved_with_the_graphql_path(self, make_client):
        client = make_client(path="/api")
        assert client.get(HEALTH_CHECK_PATH).status_code == 200


class TestPlayground:
    def test_browser_gets_the_playground(self, client):
        response = client.get("/graphql", headers={"Accept": "text/html"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "GraphQLPlayground.init" in response.text
        assert '"endpoint": "/graphql"' in response.text

    def test_browser_accept_header(self, client):
        response = client.get(
            "/graphql",
            headers={
                "Accept": "text/html,application/xhtml+xml,"
                "application/xml;q=0.9,*/*;q=0.8"
            },
        )
        assert response.headers["content-type"].startswith("text/html")

    @pytest.mark.parametrize(
        "accept",
        [
            "application/json",
            "application/json, text/html",
            "text/html;q=0.5, application/json",
            "*/*",
            "",
        ],
    )
    def test_non_browser_requests_reach_the_handler(self, client, accept):
        response = client.get(
            "/graphql",
            params={"query": "{ hello }"},
            headers={"Accept": accept},
        )
        assert response.status_code == 200
        assert response.json() == {"data": {"hello": "Hello world!"}}

    def test_post_never_gets_the_playground(self, client):
        response = client.post(
            "/graphql",
            json={"query": "{ hello }"},
            headers={"Accept": "text/html"},
        )
        assert response.json() == {"data": {"hello": "Hello world!"}}

    def test_disabled(self, make_client):
        response = make_client(gui=False).get(
            "/graphql", headers={"Accept": "text/html"}
        )
        assert response.status_code == 400
        assert response.text == "GET query missing."

    def test_disabled_in_production(self, make_client, monkeypatch):
        monkeypatch.setenv("PY_GQL_STARLETTE_ENV", "production")
        response = make_client().get(
            "/graphql", headers={"Accept": "text/html"}
        )
        assert response.status_code == 400

    def test_forced_in_production(self, make_client, monkeypatch):
        monkeypatch.setenv("PY_GQL_STARLETTE_ENV", "production")
        response = make_client(gui=True).get(
            "/graphql", headers={"Accept": "text/html"}
        )
        assert response.headers["content-type"].startswith("text/html")

    def test_custom_path(self, make_client):
        client = make_client(path="/api")
        response = client.get("/api", headers={"Accept": "text/html"})
        assert '"endpoint": "/api"' in response.text
        assert '"subscriptionEndpoint": "/api"' in response.text
        assert client.get(
            "/graphql", headers={"Accept": "text/html"}
        ).status_code == 404

    def test_subscriptions_path(self, make_client):
        client = make_client(server_kwargs={"subscriptions_path": "/ws"})
        response = client.get("/graphql", headers={"Accept": "text/html"})
        assert '"subscriptionEndpoint": "/ws"' in response.text


def test_existing_middleware_run_after(schema, root):
    seen = []

    class Recorder:
        def __init__(self, app):
            self.app = app

        async def __call__(self, scope, receive, send):
            seen.append(scope.get("path"))
            await self.app(scope, receive, send)

    app = Starlette()
    app.add_middleware(Recorder)
    GraphQLServer(schema, root=root).apply_middleware(app)

    client = TestClient(app)
    client.post("/graphql", json={"query": "{ hello }"})
    client.get("/missing")

    # The GraphQL middleware respond directly on the GraphQL path.
    assert seen == ["/missing"]
