# -*- coding: utf-8 -*-
"""
ASGI middleware decoding request bodies ahead of the GraphQL handler.

The decoded body is stored in the ASGI scope (see
:func:`py_gql_starlette.handler.get_parsed_body`) and the raw body is replayed
to the wrapped application so that it can still be read downstream.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Union

from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ._utils import parse_bytes
from .exc import BodyParserError
from .handler import BODY_SCOPE_KEY, set_parsed_body


logger = logging.getLogger(__name__)

JSON_TYPES = (
    "application/json",
    "application/json-patch+json",
    "application/vnd.api+json",
    "application/csp-report",
)
FORM_TYPES = ("application/x-www-form-urlencoded",)
TEXT_TYPES = ("text/plain",)

_STRICT_JSON_START = ("{", "[")


class BodyParserOptions:
    """
    Configuration of :class:`BodyParserMiddleware`.

    Args:
        enable_types: Kinds of bodies to decode, any of ``json``, ``form`` and
            ``text``.
        json_limit: Maximum size of JSON bodies.
        form_limit: Maximum size of urlencoded bodies.
        text_limit: Maximum size of text bodies.
        strict: Only accept JSON objects and arrays.
        encoding: Charset used to decode the body.

    Limits are either a number of bytes or a string such as ``"1mb"``.
    """

    __slots__ = (
        "enable_types",
        "json_limit",
        "form_limit",
        "text_limit",
        "strict",
        "encoding",
    )

    def __init__(
        self,
        enable_types: Sequence[str] = ("json", "form"),
        json_limit: Union[int, str] = "1mb",
        form_limit: Union[int, str] = "56kb",
        text_limit: Union[int, str] = "1mb",
        strict: bool = True,
        encoding: str = "utf-8",
    ):
        unknown = set(enable_types) - {"json", "form", "text"}
        if unknown:
            raise ValueError(
                "Unknown body types %s" % ", ".join(sorted(unknown))
            )

        self.enable_types = tuple(enable_types)
        self.json_limit = parse_bytes(json_limit)
        self.form_limit = parse_bytes(form_limit)
        self.text_limit = parse_bytes(text_limit)
        self.strict = strict
        self.encoding = encoding

    def match(self, content_type: str) -> Optional[str]:
        """
        Find which enabled body kind handles a given content type.
        """
        media_type = content_type.split(";", 1)[0].strip().lower()
        for kind, media_types in (
            ("json", JSON_TYPES),
            ("form", FORM_TYPES),
            ("text", TEXT_TYPES),
        ):
            if kind in self.enable_types and media_type in media_types:
                return kind
        return None

    def limit(self, kind: str) -> int:
        return {
            "json": self.json_limit,
            "form": self.form_limit,
            "text": self.text_limit,
        }[kind]


class BodyParserMiddleware:
    """
    Decode JSON, urlencoded and text request bodies.

    Requests with other content types (e.g. ``multipart/form-data``) are
    passed through untouched. Invalid bodies are rejected with a ``400``
    response and bodies over the configured limit with a ``413`` response.

    Args:
        app: Wrapped ASGI application.
        **options: See :class:`BodyParserOptions`.
    """

    def __init__(self, app: ASGIApp, **options: Any):
        self.app = app
        self.options = BodyParserOptions(**options)

    async def __call__(
        self, scope: Scope, receive: Receive, send: Send
    ) -> None:
        if scope["type"] != "http" or BODY_SCOPE_KEY in scope:
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        kind = self.options.match(request.headers.get("content-type", ""))
        if kind is None:
            await self.app(scope, receive, send)
            return

        try:
            body = await _read_body(request, self.options.limit(kind))
            parsed = await self._decode(kind, body, scope)
        except BodyParserError as err:
            logger.debug("Invalid %s request body: %s", kind, err)
            response = PlainTextResponse(err.message, status_code=err.status)
            await response(scope, receive, send)
            return

        set_parsed_body(scope, parsed)
        await self.app(scope, _replay(body, receive), send)

    async def _decode(self, kind: str, body: bytes, scope: Scope) -> Any:
        if kind == "form":
            # Starlette's form parser reads from a fresh receive channel.
            form = await Request(scope, _replay(body, _empty_receive)).form()
            return dict(form)

        try:
            text = body.decode(self.options.encoding)
        except (UnicodeDecodeError, LookupError):
            raise BodyParserError(415, "Unsupported charset.")

        if kind == "text":
            return text

        stripped = text.strip()
        if not stripped:
            return {}

        if self.options.strict and stripped[0] not in _STRICT_JSON_START:
            raise BodyParserError(
                400, "Invalid JSON, only supports object and array."
            )

        try:
            return json.loads(stripped)
        except ValueError:
            raise BodyParserError(400, "Invalid JSON.")


async def _read_body(request: Request, limit: int) -> bytes:
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise BodyParserError(413, "Request entity too large.")

    chunks = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > limit:
            raise BodyParserError(413, "Request entity too large.")
        chunks.append(chunk)
    return b"".join(chunks)


def _replay(body: bytes, receive: Receive) -> Callable[[], Awaitable[Message]]:
    sent = False

    async def replay() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


async def _empty_receive() -> Dict[str, Any]:
    return {"type": "http.disconnect"}
