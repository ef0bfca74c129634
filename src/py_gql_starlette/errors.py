# -*- coding: utf-8 -*-
"""
Serialization of errors included in GraphQL responses.
"""

import traceback
from typing import Any, Callable, Dict, Iterable, List, Optional

from py_gql.exc import GraphQLResponseError


ErrorFormatter = Callable[[Exception], Dict[str, Any]]


def default_format_error(
    error: Exception, debug: bool = False
) -> Dict[str, Any]:
    """
    Convert an exception to a JSON serializable dictionnary.

    GraphQL response errors are serialized with their own
    :meth:`~py_gql.exc.GraphQLResponseError.to_dict` method, any other
    exception only exposes its message.

    Args:
        error: Exception to serialize.
        debug: Add the exception type and traceback under
            ``extensions.exception``.

    Returns:
        Serialized error.
    """
    if isinstance(error, GraphQLResponseError):
        formatted = error.to_dict()
    else:
        formatted = {"message": str(error)}

    if debug:
        extensions = dict(formatted.get("extensions") or {})
        extensions["exception"] = {
            "type": error.__class__.__name__,
            "stacktrace": traceback.format_exception(
                type(error), error, error.__traceback__
            ),
        }
        formatted["extensions"] = extensions

    return formatted


def format_errors(
    errors: Iterable[Exception],
    formatter: Optional[ErrorFormatter] = None,
    debug: bool = False,
) -> List[Dict[str, Any]]:
    """
    Serialize a list of errors, using the custom formatter when provided.
    """
    if formatter is None:
        return [default_format_error(err, debug) for err in errors]
    return [formatter(err) for err in errors]
