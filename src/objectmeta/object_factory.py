"""
Object instantiation policy.

The path resolver never calls constructors directly: when a write has to
materialize a missing intermediate object it asks an ObjectFactory. The
default factory maps abstract collection contracts to concrete builtins and
calls the resolved class.
"""

import collections.abc
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from objectmeta.errors import InstantiationError
from objectmeta.type_utils import is_sequence_like, raw_class

logger = logging.getLogger(__name__)


class ObjectFactory(ABC):
    """Creates instances on behalf of the path resolver."""

    @abstractmethod
    def create(
        self,
        cls: Any,
        constructor_arg_types: Optional[Sequence[type]] = None,
        constructor_args: Optional[Sequence[Any]] = None,
    ) -> Any:
        """Create an instance of ``cls`` (or its concrete implementation)."""

    @abstractmethod
    def resolve_concrete_type(self, cls: Any) -> type:
        """Map an abstract contract to the class that will be instantiated."""

    @abstractmethod
    def is_collection(self, cls: Any) -> bool:
        """True for element collections (mappings and text excluded)."""


# Abstract contracts -> concrete builtin used to satisfy them
_CONCRETE_TYPES = {
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
}


class DefaultObjectFactory(ObjectFactory):
    """Instantiates classes with positional constructor arguments."""

    def create(self, cls, constructor_arg_types=None, constructor_args=None):
        class_to_create = self.resolve_concrete_type(cls)
        return self._instantiate(class_to_create, constructor_arg_types, constructor_args)

    def _instantiate(self, cls: type, constructor_arg_types, constructor_args):
        try:
            if constructor_arg_types is None or constructor_args is None:
                return cls()
            if len(constructor_arg_types) != len(constructor_args):
                raise TypeError(
                    f"{len(constructor_arg_types)} argument type(s) given for "
                    f"{len(constructor_args)} argument(s)"
                )
            for expected, value in zip(constructor_arg_types, constructor_args):
                if value is not None and not isinstance(value, raw_class(expected)):
                    raise TypeError(f"{value!r} is not an instance of {expected!r}")
            return cls(*constructor_args)
        except Exception as e:
            logger.debug(f"Instantiation of {cls!r} failed: {e}")
            raise InstantiationError(cls, constructor_arg_types, constructor_args, cause=e) from e

    def resolve_concrete_type(self, cls):
        cls = raw_class(cls) if not isinstance(cls, type) else cls
        return _CONCRETE_TYPES.get(cls, cls)

    def is_collection(self, cls):
        return is_sequence_like(self.resolve_concrete_type(cls))

