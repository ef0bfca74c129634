# -*- coding: utf-8 -*-
"""This module implements all the exceptions exposed by this library."""

from typing import Mapping, Optional


class GraphQLServerError(Exception):
    """
    Base exception from which all other inherit.
    """

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class HttpQueryError(GraphQLServerError):
    """
    Expected error raised while processing a GraphQL query over HTTP.

    This is the only error type which the request handler converts into a
    HTTP response itself, any other exception is left to the web framework.

    Args:
        status_code: HTTP status code of the response
        message: Response body
        is_graphql_error: Whether ``message`` is a serialized GraphQL
            response (JSON) or a plain text explanation
        headers: Extra headers to set on the response

    Attributes:
        status_code (int): HTTP status code of the response
        message (str): Response body
        is_graphql_error (bool): Whether ``message`` is a serialized GraphQL
            response (JSON) or a plain text explanation
        headers (Dict[str, str]): Extra headers to set on the response
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        is_graphql_error: bool = False,
        headers: Optional[Mapping[str, str]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.is_graphql_error = is_graphql_error
        self.headers = dict(headers) if headers else {}

    def __repr__(self) -> str:
        return "%s(%d, %r)" % (
            self.__class__.__name__,
            self.status_code,
            self.message,
        )


class UploadError(GraphQLServerError):
    """
    Raised when a multipart upload request cannot be processed.

    Args:
        status: HTTP status code describing the failure
        message: Explanatory message
        expose: Whether the status and message are safe to send to the
            client as is

    Attributes:
        status (int): HTTP status code describing the failure
        message (str): Explanatory message
        expose (bool): Whether the status and message are safe to send to the
            client as is
    """

    def __init__(self, status: int, message: str, expose: bool = True):
        super().__init__(message)
        self.status = status
        self.expose = expose


class BodyParserError(GraphQLServerError):
    """
    Raised when the request body cannot be decoded.

    Args:
        status: HTTP status code describing the failure
        message: Explanatory message
    """

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
