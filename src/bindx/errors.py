"""Exception taxonomy.

Every failure raised by bindx derives from BindxError, so applications can
catch the whole family at once. Failures inside a binding are re-raised with
the bound property and path prepended; rewrap() keeps the category of the
original error so callers can still match on it.
"""

from __future__ import annotations


class BindxError(Exception):
    pass


class PathSyntaxError(BindxError):
    """Binding path contains forbidden characters or has the wrong shape."""


class PropertyResolutionError(BindxError):
    """A property or selector could not be resolved."""


class TypeMismatchError(BindxError, TypeError):
    """A value failed a type guard."""


class InjectionConfigError(BindxError):
    """Injection handler missing, duplicated, or removed after use."""


class ListAccessError(BindxError):
    """Invalid list source or length."""


class RouteError(BindxError):
    pass


class BindingError(BindxError):
    """A non-bindx exception escaped from inside a binding."""


def rewrap(ex: BaseException, message: str) -> BindxError:
    """Build an error of the same category as ``ex`` carrying ``message``.

    Use as ``raise rewrap(ex, msg) from ex``.
    """
    cls = type(ex) if isinstance(ex, BindxError) else BindingError
    return cls(message)
