"""
Instance-level property path resolution.

MetaObject is the entry point for reading and writing nested values::

    meta = for_object(order)
    meta.get_value("items[0].price")        # 9.99
    meta.set_value("customer.address.city", "Lyon")

Each intermediate value is wrapped again on the way down. A missing
intermediate value reads as None; on write it is created through the object
factory unless the value being written is itself None.
"""

import collections.abc
import logging
from typing import Any, Iterable, Optional, Tuple

from objectmeta import config
from objectmeta.descriptor import DescriptorFactory
from objectmeta.object_factory import DefaultObjectFactory, ObjectFactory
from objectmeta.tokenizer import tokenize
from objectmeta.wrapper_factory import DefaultObjectWrapperFactory, ObjectWrapperFactory
from objectmeta.wrappers import CollectionWrapper, MapWrapper, ObjectWrapper, RecordWrapper

logger = logging.getLogger(__name__)


def _is_element_collection(obj: Any) -> bool:
    # NamedTuples are records even though they are tuples
    if isinstance(obj, (str, bytes)) or hasattr(type(obj), '_fields'):
        return False
    return isinstance(obj, collections.abc.Collection)


class MetaObject:
    """Binds one instance to the wrapper that knows how to address it."""

    def __init__(
        self,
        obj: Any,
        object_factory: ObjectFactory,
        object_wrapper_factory: ObjectWrapperFactory,
        descriptor_factory: DescriptorFactory,
    ):
        self._original_object = obj
        self.object_factory = object_factory
        self.object_wrapper_factory = object_wrapper_factory
        self.descriptor_factory = descriptor_factory

        if isinstance(obj, ObjectWrapper):
            self._object_wrapper = obj
        elif object_wrapper_factory.has_wrapper_for(obj):
            self._object_wrapper = object_wrapper_factory.get_wrapper_for(self, obj)
        elif isinstance(obj, collections.abc.Mapping):
            self._object_wrapper = MapWrapper(self, obj)
        elif _is_element_collection(obj):
            self._object_wrapper = CollectionWrapper(self, obj)
        else:
            self._object_wrapper = RecordWrapper(self, obj)

    @classmethod
    def for_object(
        cls,
        obj: Any,
        object_factory: ObjectFactory,
        object_wrapper_factory: ObjectWrapperFactory,
        descriptor_factory: DescriptorFactory,
    ) -> 'MetaObject':
        if obj is None:
            return NULL_META_OBJECT
        return cls(obj, object_factory, object_wrapper_factory, descriptor_factory)

    @property
    def original_object(self) -> Any:
        return self._original_object

    @property
    def object_wrapper(self) -> ObjectWrapper:
        return self._object_wrapper

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def get_value(self, name: str) -> Any:
        """Read the value at ``name``; None if any intermediate value is missing."""
        segment = tokenize(name)
        meta = self
        while segment.has_next():
            meta = meta.meta_object_for_property(segment.indexed_name)
            if meta is NULL_META_OBJECT:
                return None
            segment = segment.next()
        return meta._object_wrapper.get(segment)

    def set_value(self, name: str, value: Any) -> None:
        """Write ``value`` at ``name``, creating missing intermediate objects.

        Writing None through a missing intermediate value does nothing.
        """
        segment = tokenize(name)
        meta = self
        while segment.has_next():
            child = meta.meta_object_for_property(segment.indexed_name)
            if child is NULL_META_OBJECT:
                if value is None:
                    logger.debug(f"Skipped writing None to '{name}': '{segment.indexed_name}' is missing")
                    return
                child = meta._object_wrapper.instantiate_property_value(
                    segment.full_path, segment, meta.object_factory
                )
            meta = child
            segment = segment.next()
        meta._object_wrapper.set(segment, value)

    def meta_object_for_property(self, name: str) -> 'MetaObject':
        value = self.get_value(name)
        return MetaObject.for_object(
            value, self.object_factory, self.object_wrapper_factory, self.descriptor_factory
        )

    # ------------------------------------------------------------------
    # Queries, delegated to the wrapper
    # ------------------------------------------------------------------

    def find_property(self, name: str, use_camel_case_mapping: bool = False) -> Optional[str]:
        return self._object_wrapper.find_property(name, use_camel_case_mapping)

    def getter_names(self) -> Tuple[str, ...]:
        return self._object_wrapper.getter_names()

    def setter_names(self) -> Tuple[str, ...]:
        return self._object_wrapper.setter_names()

    def get_getter_type(self, name: str) -> type:
        return self._object_wrapper.get_getter_type(name)

    def get_setter_type(self, name: str) -> type:
        return self._object_wrapper.get_setter_type(name)

    def has_getter(self, name: str) -> bool:
        return self._object_wrapper.has_getter(name)

    def has_setter(self, name: str) -> bool:
        return self._object_wrapper.has_setter(name)

    def is_collection(self) -> bool:
        return self._object_wrapper.is_collection()

    def add(self, element: Any) -> None:
        self._object_wrapper.add(element)

    def add_all(self, elements: Iterable[Any]) -> None:
        self._object_wrapper.add_all(elements)

    def __repr__(self) -> str:
        return f"MetaObject({self._original_object!r}, wrapper={type(self._object_wrapper).__name__})"


class _NullObject:
    """Stands in for a missing value; has no properties."""

    def __repr__(self) -> str:
        return '<null>'


NULL_META_OBJECT = MetaObject(
    _NullObject(), DefaultObjectFactory(), DefaultObjectWrapperFactory(), DescriptorFactory(cache_enabled=False)
)


def for_object(
    obj: Any,
    object_factory: Optional[ObjectFactory] = None,
    wrapper_factory: Optional[ObjectWrapperFactory] = None,
    descriptor_factory: Optional[DescriptorFactory] = None,
) -> MetaObject:
    """MetaObject for ``obj``, using the process-wide defaults for any factory not given."""
    return MetaObject.for_object(
        obj,
        object_factory if object_factory is not None else config.get_default_object_factory(),
        wrapper_factory if wrapper_factory is not None else config.get_default_wrapper_factory(),
        descriptor_factory if descriptor_factory is not None else config.get_default_descriptor_factory(),
    )
