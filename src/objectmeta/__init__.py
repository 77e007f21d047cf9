"""
Reflective property-path access for arbitrary Python objects.

Reads and writes nested values addressed by dotted, optionally indexed paths
such as ``customer.address.city`` or ``items[0].price``, over records
(dataclasses, plain classes, accessor-method classes), mappings and
collections alike.

Quick Start:
    >>> from objectmeta import get_value, set_value, MetaClass
    >>>
    >>> get_value(order, "items[0].price")
    9.99
    >>> set_value(order, "customer.address.city", "Lyon")   # creates missing links
    >>>
    >>> MetaClass.for_class(Order).find_property("ITEMS[0].PRICE")
    'items[0].price'

Architecture:
    tokenizer → descriptor → meta_class → wrappers → meta_object

    - TypeDescriptor: per-class accessor metadata, built once and cached
    - MetaClass: path queries against a class alone
    - ObjectWrapper: record / mapping / collection adapters
    - MetaObject: path reads and writes against a live instance

Modules:
    - tokenizer: path segments
    - naming: accessor-method naming conventions
    - descriptor: TypeDescriptor and its shared cache
    - meta_class: type-level path resolution
    - wrappers: object wrappers
    - meta_object: instance-level path resolution
    - object_factory / wrapper_factory: pluggable collaborators
    - property_copier: slot-by-slot copy
    - config: process-wide defaults
"""

from typing import Any

# Errors
from objectmeta.errors import (
    ReflectionError,
    AccessorNotFoundError,
    AmbiguousAccessorError,
    UnsupportedOperationError,
    InstantiationError,
)

# Tokenizer
from objectmeta.tokenizer import PathSegment, tokenize

# Descriptors
from objectmeta.descriptor import (
    TypeDescriptor,
    DescriptorFactory,
    describe,
    clear_descriptor_cache,
)

# Path resolution
from objectmeta.meta_class import MetaClass
from objectmeta.meta_object import MetaObject, NULL_META_OBJECT, for_object

# Wrappers and collaborators
from objectmeta.wrappers import (
    ObjectWrapper,
    BaseWrapper,
    RecordWrapper,
    MapWrapper,
    CollectionWrapper,
)
from objectmeta.object_factory import ObjectFactory, DefaultObjectFactory
from objectmeta.wrapper_factory import ObjectWrapperFactory, DefaultObjectWrapperFactory

# Utilities
from objectmeta.property_copier import copy_properties

# Configuration
from objectmeta.config import (
    set_default_object_factory,
    get_default_object_factory,
    set_default_wrapper_factory,
    get_default_wrapper_factory,
    set_descriptor_cache_enabled,
    get_default_descriptor_factory,
    reset_defaults,
)


def get_value(obj: Any, path: str) -> Any:
    """Read the value at ``path`` inside ``obj`` with the default factories."""
    return for_object(obj).get_value(path)


def set_value(obj: Any, path: str, value: Any) -> None:
    """Write ``value`` at ``path`` inside ``obj`` with the default factories."""
    for_object(obj).set_value(path, value)


__all__ = [
    # Errors
    'ReflectionError',
    'AccessorNotFoundError',
    'AmbiguousAccessorError',
    'UnsupportedOperationError',
    'InstantiationError',
    # Tokenizer
    'PathSegment',
    'tokenize',
    # Descriptors
    'TypeDescriptor',
    'DescriptorFactory',
    'describe',
    'clear_descriptor_cache',
    # Path resolution
    'MetaClass',
    'MetaObject',
    'NULL_META_OBJECT',
    'for_object',
    'get_value',
    'set_value',
    # Wrappers and collaborators
    'ObjectWrapper',
    'BaseWrapper',
    'RecordWrapper',
    'MapWrapper',
    'CollectionWrapper',
    'ObjectFactory',
    'DefaultObjectFactory',
    'ObjectWrapperFactory',
    'DefaultObjectWrapperFactory',
    # Utilities
    'copy_properties',
    # Configuration
    'set_default_object_factory',
    'get_default_object_factory',
    'set_default_wrapper_factory',
    'get_default_wrapper_factory',
    'set_descriptor_cache_enabled',
    'get_default_descriptor_factory',
    'reset_defaults',
]

__version__ = '1.0.0'
__description__ = 'Reflective property-path access for Python objects'
