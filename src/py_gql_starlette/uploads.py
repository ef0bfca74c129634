# -*- coding: utf-8 -*-
"""
Support for file uploads following the `GraphQL multipart request
specification <https://github.com/jaydenseric/graphql-multipart-request-spec>`_.

A multipart request carries an ``operations`` field (the JSON encoded
operation or list of operations), a ``map`` field associating each file
field with the paths of the variables it should populate and the files
themselves. Every mapped variable is replaced with the corresponding
:class:`starlette.datastructures.UploadFile` instance before the operations
are handed to the GraphQL handler.
"""

import json
import logging
from typing import Any, List, Optional, Union

from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send

from .exc import HttpQueryError, UploadError
from .handler import error_response, set_parsed_body


logger = logging.getLogger(__name__)

MULTIPART_CONTENT_TYPE = "multipart/form-data"


class FileUploadOptions:
    """
    Limits applied when parsing multipart requests.

    Args:
        max_field_size: Maximum size in bytes of the non file fields.
        max_file_size: Maximum size in bytes of each uploaded file.
        max_files: Maximum number of files in a single request.

    ``None`` means no limit.
    """

    __slots__ = ("max_field_size", "max_file_size", "max_files")

    def __init__(
        self,
        max_field_size: Optional[int] = 1000000,
        max_file_size: Optional[int] = None,
        max_files: Optional[int] = None,
    ):
        self.max_field_size = max_field_size
        self.max_file_size = max_file_size
        self.max_files = max_files

    def __repr__(self) -> str:
        return "%s(max_field_size=%r, max_file_size=%r, max_files=%r)" % (
            self.__class__.__name__,
            self.max_field_size,
            self.max_file_size,
            self.max_files,
        )


def is_multipart(content_type: str) -> bool:
    return (
        content_type.split(";", 1)[0].strip().lower() == MULTIPART_CONTENT_TYPE
    )


async def process_file_uploads(
    request: Request, options: FileUploadOptions
) -> Any:
    """
    Parse a multipart GraphQL request.

    The file count and field size limits are enforced by Starlette while the
    body is being parsed. The file size limit applies to every uploaded file,
    whether the ``map`` field references it or not.

    Args:
        request: Incoming request, its body must not have been consumed.
        options: Limits to enforce.

    Returns:
        The decoded ``operations`` field with all the mapped variables set to
        the uploaded files.

    Raises:
        UploadError: if the request is not a valid multipart GraphQL request
            or breaks one of the limits.
    """
    try:
        form = await request.form(
            max_files=_limit(options.max_files),
            max_part_size=_limit(options.max_field_size),
        )
    except MultiPartException as err:
        raise _parser_error(err.message, options)
    except HTTPException as err:
        # Starlette converts parser errors when running inside an app.
        if err.status_code != 400:
            raise UploadError(err.status_code, str(err.detail))
        raise _parser_error(str(err.detail), options)

    if options.max_file_size is not None:
        for _, value in form.multi_items():
            if (
                isinstance(value, UploadFile)
                and value.size is not None
                and value.size > options.max_file_size
            ):
                raise UploadError(
                    413,
                    "File truncated as it exceeds the %d byte size limit."
                    % options.max_file_size,
                )

    operations = _json_field(form, "operations", options)
    if not isinstance(operations, (dict, list)):
        raise UploadError(
            400, "Invalid type for the 'operations' multipart field."
        )

    file_map = _json_field(form, "map", options)
    if not isinstance(file_map, dict) or not all(
        isinstance(paths, list) and all(isinstance(p, str) for p in paths)
        for paths in file_map.values()
    ):
        raise UploadError(400, "Invalid type for the 'map' multipart field.")

    if options.max_files is not None and len(file_map) > options.max_files:
        raise UploadError(
            413, "%d max file uploads exceeded." % options.max_files
        )

    for key, paths in file_map.items():
        upload = form.get(key)
        if not isinstance(upload, UploadFile):
            raise UploadError(
                400, "File missing in the request for map entry %r." % key
            )

        for path in paths:
            _set_path(operations, path, upload)

    return operations


def _limit(value: Optional[int]) -> Union[int, float]:
    return float("inf") if value is None else value


def _parser_error(message: str, options: FileUploadOptions) -> UploadError:
    if message.startswith("Too many files") and options.max_files is not None:
        return UploadError(
            413, "%d max file uploads exceeded." % options.max_files
        )
    if message.startswith("Part exceeded maximum size"):
        return UploadError(
            413,
            "A multipart field value exceeds the %s byte size limit."
            % options.max_field_size,
        )
    return UploadError(400, "Invalid multipart request: %s" % message)


def _json_field(form: FormData, name: str, options: FileUploadOptions) -> Any:
    value = form.get(name)
    if not isinstance(value, str):
        raise UploadError(400, "Missing multipart field '%s'." % name)

    if (
        options.max_field_size is not None
        and len(value.encode("utf-8")) > options.max_field_size
    ):
        raise UploadError(
            413,
            "The '%s' multipart field value exceeds the %d byte size limit."
            % (name, options.max_field_size),
        )

    try:
        return json.loads(value)
    except ValueError:
        raise UploadError(
            400, "Invalid JSON in the '%s' multipart field." % name
        )


def _set_path(target: Any, path: str, value: Any) -> None:
    segments = path.split(".")  # type: List[str]
    try:
        for segment in segments[:-1]:
            target = target[_key(target, segment)]
        target[_key(target, segments[-1])] = value
    except (KeyError, IndexError, TypeError, ValueError):
        raise UploadError(
            400, "Invalid path %r in the 'map' multipart field." % path
        )


def _key(container: Any, segment: str) -> Any:
    if isinstance(container, list):
        return int(segment)
    if isinstance(container, dict):
        return segment
    raise TypeError(segment)


class FileUploadMiddleware:
    """
    Decode multipart GraphQL requests, other requests are passed through.

    Exposed :class:`~py_gql_starlette.exc.UploadError` and
    :class:`~py_gql_starlette.exc.HttpQueryError` are converted into
    responses, any other exception propagates.

    Args:
        app: Wrapped ASGI application.
        options: Upload limits.
    """

    def __init__(self, app: ASGIApp, options: FileUploadOptions):
        self.app = app
        self.options = options

    async def __call__(
        self, scope: Scope, receive: Receive, send: Send
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        if not is_multipart(request.headers.get("content-type", "")):
            await self.app(scope, receive, send)
            return

        try:
            body = await process_file_uploads(request, self.options)
        except UploadError as err:
            if not err.expose:
                raise
            logger.warning("Rejected upload request (%d): %s", err.status, err)
            await request.close()
            response = PlainTextResponse(
                err.message, status_code=err.status
            )  # type: Response
            await response(scope, receive, send)
            return
        except HttpQueryError as err:
            await request.close()
            await error_response(err)(scope, receive, send)
            return

        set_parsed_body(scope, body)
        try:
            await self.app(scope, receive, send)
        finally:
            await request.close()
