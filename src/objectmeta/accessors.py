"""
Resolved read/write operations stored in a TypeDescriptor.

An accessor binds a property to the way it is reached on an instance: by
calling a named accessor method, or by plain attribute access (data slots and
``property`` objects). Ambiguous resolutions are stored as accessors too, so
building a descriptor never fails and the error only surfaces on invocation.
"""

from dataclasses import dataclass
from typing import Any

from objectmeta.errors import AmbiguousAccessorError


@dataclass(frozen=True)
class MethodAccessor:
    """Calls ``method_name`` on the target.

    The method is looked up on the instance at call time, so a subclass
    override is dispatched exactly as a normal call would be.
    """
    method_name: str
    value_type: type
    generic_type: Any = None
    declaring_class: type = object

    def invoke(self, target: Any, *args: Any) -> Any:
        return getattr(target, self.method_name)(*args)


@dataclass(frozen=True)
class AttributeAccessor:
    """Reads (no args) or writes (one arg) an attribute by name."""
    attribute_name: str
    value_type: type
    generic_type: Any = None
    declaring_class: type = object

    def invoke(self, target: Any, *args: Any) -> Any:
        if args:
            setattr(target, self.attribute_name, args[0])
            return None
        return getattr(target, self.attribute_name)


@dataclass(frozen=True)
class AmbiguousAccessor:
    """Placeholder for a property whose candidates conflict."""
    delegate: Any
    message: str

    @property
    def value_type(self) -> type:
        return self.delegate.value_type

    @property
    def generic_type(self) -> Any:
        return self.delegate.generic_type

    @property
    def declaring_class(self) -> type:
        return self.delegate.declaring_class

    def invoke(self, target: Any, *args: Any) -> Any:
        raise AmbiguousAccessorError(self.message)
