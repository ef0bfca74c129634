# -*- coding: utf-8 -*-
"""
Configuration helpers shared by the middleware installer.

Some of the middleware (CORS, body parsing) accept a three way setting which
is represented by the :class:`Disabled`, :class:`Default` and :class:`Custom`
classes. :func:`coerce_setting` converts the looser values accepted by the
public API (``bool``, ``None`` or a mapping of options) into one of them.
"""

from typing import Any, Dict, Mapping, Optional, Union

from starlette.config import Config


ENVIRONMENT_VARIABLE = "PY_GQL_STARLETTE_ENV"
PRODUCTION = "production"


class Setting:
    """ Base class for middleware settings. """

    __slots__ = ()

    def __eq__(self, other: Any) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return "%s()" % self.__class__.__name__


class Disabled(Setting):
    """ Do not install the middleware. """

    __slots__ = ()


class Default(Setting):
    """ Install the middleware with its default options. """

    __slots__ = ()


class Custom(Setting):
    """
    Install the middleware with custom options.

    Args:
        **options: Keyword arguments forwarded to the middleware.
    """

    __slots__ = ("options",)

    def __init__(self, **options: Any):
        self.options = options  # type: Dict[str, Any]

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Custom) and self.options == other.options

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.options)))

    def __repr__(self) -> str:
        return "Custom(%s)" % ", ".join(
            "%s=%r" % kv for kv in sorted(self.options.items())
        )


SettingLike = Union[Setting, bool, Mapping[str, Any], None]


def coerce_setting(value: SettingLike) -> Setting:
    """
    Normalize a user provided middleware setting.

    >>> coerce_setting(False)
    Disabled()

    >>> coerce_setting(None)
    Default()

    >>> coerce_setting({"allow_origins": ["*"]})
    Custom(allow_origins=['*'])

    Args:
        value: ``False`` disables the middleware, ``True`` or ``None`` use the
            default configuration and a mapping is used as custom options.

    Returns:
        Normalized setting.

    Raises:
        TypeError: if ``value`` cannot be interpreted.
    """
    if isinstance(value, Setting):
        return value
    if value is None or value is True:
        return Default()
    if value is False:
        return Disabled()
    if isinstance(value, Mapping):
        return Custom(**value)
    raise TypeError(
        "Expected a boolean, a mapping or a Setting instance but got %r"
        % (value,)
    )


def is_production(config: Optional[Config] = None) -> bool:
    """
    Whether the current process is marked as running in production.

    The marker is read from the ``PY_GQL_STARLETTE_ENV`` environment variable
    every time this is called.
    """
    config = config if config is not None else Config()
    return (
        config(ENVIRONMENT_VARIABLE, default="").strip().lower() == PRODUCTION
    )
