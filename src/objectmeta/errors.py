"""
Exception taxonomy for property-path reflection.

Every failure raised by this package derives from ReflectionError so callers
can catch the whole family at once. The more specific classes also inherit
the builtin exception a Python caller would naturally expect (a missing
accessor is an AttributeError, an unsupported operation is a
NotImplementedError).
"""

from typing import Any, Optional, Sequence


class ReflectionError(Exception):
    """Base class for all reflection failures."""


class AccessorNotFoundError(ReflectionError, AttributeError):
    """No read or write accessor is registered for a property."""

    def __init__(self, kind: str, property_name: str, owner: type):
        self.kind = kind
        self.property_name = property_name
        self.owner = owner
        super().__init__(
            f"There is no {kind} for property named '{property_name}' in '{owner!r}'"
        )


class AmbiguousAccessorError(ReflectionError):
    """An accessor whose candidates could not be ordered was invoked."""


class UnsupportedOperationError(ReflectionError, NotImplementedError):
    """The wrapped object does not support the requested operation."""


class InstantiationError(ReflectionError):
    """The object factory could not create an instance.

    Attributes:
        requested_type: Type that was requested from the factory
        arg_types: Constructor argument types, if any were given
        arg_values: Constructor argument values, if any were given
    """

    def __init__(
        self,
        requested_type: Any,
        arg_types: Optional[Sequence[type]] = None,
        arg_values: Optional[Sequence[Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.requested_type = requested_type
        self.arg_types = tuple(arg_types or ())
        self.arg_values = tuple(arg_values or ())
        types_str = ','.join(getattr(t, '__name__', repr(t)) for t in self.arg_types)
        values_str = ','.join(str(v) for v in self.arg_values)
        message = (
            f"Error instantiating {requested_type!r} with invalid types ({types_str}) "
            f"or values ({values_str})."
        )
        if cause is not None:
            message += f" Cause: {cause!r}"
        super().__init__(message)
