"""
Extension point for custom object wrappers.

A framework can register an ObjectWrapperFactory to take over the wrapping
of values it knows better than the default record/mapping/collection
strategies (proxies, lazily loaded objects...). It is consulted before any
default strategy is chosen.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from objectmeta.errors import ReflectionError

if TYPE_CHECKING:
    from objectmeta.meta_object import MetaObject
    from objectmeta.wrappers import ObjectWrapper


class ObjectWrapperFactory(ABC):

    @abstractmethod
    def has_wrapper_for(self, obj: Any) -> bool:
        """True if this factory wants to wrap ``obj``."""

    @abstractmethod
    def get_wrapper_for(self, meta_object: 'MetaObject', obj: Any) -> 'ObjectWrapper':
        """Wrapper for ``obj``; only called when has_wrapper_for() returned True."""


class DefaultObjectWrapperFactory(ObjectWrapperFactory):
    """Never provides a wrapper, leaving every value to the default strategies."""

    def has_wrapper_for(self, obj):
        return False

    def get_wrapper_for(self, meta_object, obj):
        raise ReflectionError(
            "The DefaultObjectWrapperFactory should never be called to provide an ObjectWrapper."
        )
