"""
Process-wide defaults used when callers do not pass factories explicitly.

    >>> from objectmeta.config import set_default_object_factory
    >>> set_default_object_factory(MyFactory())
"""

import logging

from objectmeta.descriptor import DescriptorFactory
from objectmeta.object_factory import DefaultObjectFactory, ObjectFactory
from objectmeta.wrapper_factory import DefaultObjectWrapperFactory, ObjectWrapperFactory

logger = logging.getLogger(__name__)

_default_object_factory: ObjectFactory = DefaultObjectFactory()
_default_wrapper_factory: ObjectWrapperFactory = DefaultObjectWrapperFactory()
_default_descriptor_factory: DescriptorFactory = DescriptorFactory()


def set_default_object_factory(factory: ObjectFactory) -> None:
    """Set the factory used to materialize missing intermediate objects."""
    global _default_object_factory
    _default_object_factory = factory
    logger.debug(f"Default object factory set to {type(factory).__name__}")


def get_default_object_factory() -> ObjectFactory:
    return _default_object_factory


def set_default_wrapper_factory(factory: ObjectWrapperFactory) -> None:
    """Set the custom-wrapper extension consulted before the default strategies."""
    global _default_wrapper_factory
    _default_wrapper_factory = factory
    logger.debug(f"Default wrapper factory set to {type(factory).__name__}")


def get_default_wrapper_factory() -> ObjectWrapperFactory:
    return _default_wrapper_factory


def set_descriptor_cache_enabled(enabled: bool) -> None:
    """Turn the shared descriptor cache on or off for the default descriptor factory."""
    _default_descriptor_factory.set_cache_enabled(enabled)


def get_default_descriptor_factory() -> DescriptorFactory:
    return _default_descriptor_factory


def reset_defaults() -> None:
    """Restore the stock factories (used by tests)."""
    global _default_object_factory, _default_wrapper_factory, _default_descriptor_factory
    _default_object_factory = DefaultObjectFactory()
    _default_wrapper_factory = DefaultObjectWrapperFactory()
    _default_descriptor_factory = DescriptorFactory()
