"""
Object wrappers: one read/write/query contract over three container shapes.

    RecordWrapper      attribute-bearing objects, via their TypeDescriptor
    MapWrapper         mappings, via key lookup (every key is writable)
    CollectionWrapper  collections, append-only plus positional indexing

A wrapper is bound to exactly one instance and one owning MetaObject, is
created fresh for every access and only ever sees terminal path segments for
get()/set(); dotted paths are walked by MetaObject.
"""

import array
import collections.abc
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, Optional, Tuple

from objectmeta.errors import ReflectionError, UnsupportedOperationError
from objectmeta.meta_class import MetaClass
from objectmeta.tokenizer import PathSegment, tokenize

if TYPE_CHECKING:
    from objectmeta.meta_object import MetaObject
    from objectmeta.object_factory import ObjectFactory

logger = logging.getLogger(__name__)

# Sequence kinds addressed by integer index, besides collections.abc.Sequence
_INDEXABLE_TYPES = (collections.abc.Sequence, array.array, memoryview)
_MUTABLE_INDEXABLE_TYPES = (collections.abc.MutableSequence, array.array, bytearray, memoryview)


class ObjectWrapper(ABC):
    """Uniform access contract shared by every wrapping strategy."""

    @abstractmethod
    def get(self, segment: PathSegment) -> Any:
        """Value addressed by a terminal segment."""

    @abstractmethod
    def set(self, segment: PathSegment, value: Any) -> None:
        """Assign the value addressed by a terminal segment."""

    @abstractmethod
    def find_property(self, name: str, use_camel_case_mapping: bool = False) -> Optional[str]:
        ...

    @abstractmethod
    def getter_names(self) -> Tuple[str, ...]:
        ...

    @abstractmethod
    def setter_names(self) -> Tuple[str, ...]:
        ...

    @abstractmethod
    def get_getter_type(self, path: str) -> type:
        ...

    @abstractmethod
    def get_setter_type(self, path: str) -> type:
        ...

    @abstractmethod
    def has_getter(self, path: str) -> bool:
        ...

    @abstractmethod
    def has_setter(self, path: str) -> bool:
        ...

    @abstractmethod
    def instantiate_property_value(
        self, name: str, segment: PathSegment, object_factory: 'ObjectFactory'
    ) -> 'MetaObject':
        """Create the missing value at ``segment``, store it and return its MetaObject."""

    @abstractmethod
    def is_collection(self) -> bool:
        ...

    @abstractmethod
    def add(self, element: Any) -> None:
        ...

    @abstractmethod
    def add_all(self, elements: Iterable[Any]) -> None:
        ...


class BaseWrapper(ObjectWrapper):
    """Indexed access shared by the record and mapping wrappers."""

    def __init__(self, meta_object: 'MetaObject'):
        self.meta_object = meta_object

    def resolve_collection(self, segment: PathSegment, obj: Any) -> Any:
        """Container named by ``segment``; an empty name addresses ``obj`` itself."""
        if segment.name == '':
            return obj
        return self.meta_object.get_value(segment.name)

    def get_collection_value(self, segment: PathSegment, collection: Any) -> Any:
        if isinstance(collection, collections.abc.Mapping):
            return collection.get(segment.index)
        return collection[self._parse_index(segment, collection)]

    def set_collection_value(self, segment: PathSegment, collection: Any, value: Any) -> None:
        if isinstance(collection, collections.abc.MutableMapping):
            collection[segment.index] = value
            return
        index = self._parse_index(segment, collection)
        if not isinstance(collection, _MUTABLE_INDEXABLE_TYPES):
            raise ReflectionError(
                f"The '{segment.name}' property of {collection!r} is not a mutable sequence."
            )
        collection[index] = value

    @staticmethod
    def _parse_index(segment: PathSegment, collection: Any) -> int:
        if isinstance(collection, str) or not isinstance(collection, _INDEXABLE_TYPES):
            raise ReflectionError(
                f"The '{segment.name}' property of {collection!r} is not a mapping or sequence."
            )
        # plain ASCII digits only: int() would also take '1_0', ' 1' or '+1'
        if not (segment.index and segment.index.isascii() and segment.index.isdigit()):
            raise ReflectionError(
                f"Invalid index '{segment.index}' for the '{segment.name}' property: expected an integer."
            )
        index = int(segment.index)
        if not 0 <= index < len(collection):
            raise IndexError(
                f"Index {index} out of range for the '{segment.name}' property of size {len(collection)}"
            )
        return index

    def is_collection(self) -> bool:
        return False

    def add(self, element):
        raise UnsupportedOperationError(f"{type(self).__name__} does not support add()")

    def add_all(self, elements):
        raise UnsupportedOperationError(f"{type(self).__name__} does not support add_all()")


class RecordWrapper(BaseWrapper):
    """Wraps an attribute-bearing object through the descriptor of its class.

    Typed queries over a dotted path look at the current runtime value of the
    first segment when there is one, so a subclass instance reports its own
    narrower types rather than the declared ones.
    """

    def __init__(self, meta_object: 'MetaObject', obj: Any):
        super().__init__(meta_object)
        self._object = obj
        self._meta_class = MetaClass.for_class(type(obj), meta_object.descriptor_factory)

    def get(self, segment):
        if segment.index is not None:
            collection = self.resolve_collection(segment, self._object)
            return self.get_collection_value(segment, collection)
        return self._get_record_property(segment)

    def set(self, segment, value):
        if segment.index is not None:
            collection = self.resolve_collection(segment, self._object)
            self.set_collection_value(segment, collection, value)
        else:
            self._set_record_property(segment, value)

    def _get_record_property(self, segment: PathSegment) -> Any:
        accessor = self._meta_class.get_get_accessor(segment.name)
        return accessor.invoke(self._object)

    def _set_record_property(self, segment: PathSegment, value: Any) -> None:
        accessor = self._meta_class.get_set_accessor(segment.name)
        try:
            accessor.invoke(self._object, value)
        except ReflectionError:
            raise
        except Exception as e:
            raise ReflectionError(
                f"Could not set property '{segment.name}' of '{type(self._object)!r}' "
                f"with value {value!r}. Cause: {e!r}"
            ) from e

    def find_property(self, name, use_camel_case_mapping=False):
        return self._meta_class.find_property(name, use_camel_case_mapping)

    def getter_names(self):
        return self._meta_class.getter_names()

    def setter_names(self):
        return self._meta_class.setter_names()

    def get_setter_type(self, path):
        from objectmeta.meta_object import NULL_META_OBJECT

        segment = tokenize(path)
        if not segment.has_next():
            return self._meta_class.get_setter_type(path)
        meta_value = self.meta_object.meta_object_for_property(segment.indexed_name)
        if meta_value is NULL_META_OBJECT:
            return self._meta_class.get_setter_type(path)
        return meta_value.get_setter_type(segment.children)

    def get_getter_type(self, path):
        from objectmeta.meta_object import NULL_META_OBJECT

        segment = tokenize(path)
        if not segment.has_next():
            return self._meta_class.get_getter_type(path)
        meta_value = self.meta_object.meta_object_for_property(segment.indexed_name)
        if meta_value is NULL_META_OBJECT:
            return self._meta_class.get_getter_type(path)
        return meta_value.get_getter_type(segment.children)

    def has_setter(self, path):
        from objectmeta.meta_object import NULL_META_OBJECT

        segment = tokenize(path)
        if not segment.has_next():
            return self._meta_class.has_setter(path)
        if not self._meta_class.has_setter(segment.name):
            return False
        if not self._meta_class.has_getter(segment.name):
            return self._meta_class.has_setter(path)
        meta_value = self.meta_object.meta_object_for_property(segment.indexed_name)
        if meta_value is NULL_META_OBJECT:
            return self._meta_class.has_setter(path)
        return meta_value.has_setter(segment.children)

    def has_getter(self, path):
        from objectmeta.meta_object import NULL_META_OBJECT

        segment = tokenize(path)
        if not segment.has_next():
            return self._meta_class.has_getter(path)
        if not self._meta_class.has_getter(segment.name):
            return False
        meta_value = self.meta_object.meta_object_for_property(segment.indexed_name)
        if meta_value is NULL_META_OBJECT:
            return self._meta_class.has_getter(path)
        return meta_value.has_getter(segment.children)

    def instantiate_property_value(self, name, segment, object_factory):
        from objectmeta.meta_object import MetaObject

        value_type = self.get_setter_type(segment.indexed_name)
        try:
            new_object = object_factory.create(value_type)
            meta_value = MetaObject.for_object(
                new_object,
                self.meta_object.object_factory,
                self.meta_object.object_wrapper_factory,
                self.meta_object.descriptor_factory,
            )
            self.set(segment, new_object)
        except ReflectionError:
            raise
        except Exception as e:
            raise ReflectionError(
                f"Cannot set value of property '{name}' because '{segment.indexed_name}' is None "
                f"and cannot be instantiated on instance of {value_type!r}. Cause: {e!r}"
            ) from e
        logger.debug(f"Instantiated {value_type.__name__} for '{segment.indexed_name}' while setting '{name}'")
        return meta_value


class MapWrapper(BaseWrapper):
    """Wraps a mapping; keys are property names and every key is writable."""

    def __init__(self, meta_object: 'MetaObject', mapping: collections.abc.Mapping):
        super().__init__(meta_object)
        self._map = mapping

    def get(self, segment):
        if segment.index is not None:
            collection = self.resolve_collection(segment, self._map)
            return self.get_collection_value(segment, collection)
        return self._map.get(segment.name)

    def set(self, segment, value):
        if segment.index is not None:
            collection = self.resolve_collection(segment, self._map)
            self.set_collection_value(segment, collection, value)
        else:
            self._map[segment.name] = value

    def find_property(self, name, use_camel_case_mapping=False):
        return name

    def getter_names(self):
        return tuple(self._map.keys())

    def setter_names(self):
        return tuple(self._map.keys())

    def _stored_type(self, segment: PathSegment) -> type:
        value = self._map.get(segment.name)
        return type(value) if value is not None else object

    def get_setter_type(self, path):
        from objectmeta.meta_object import NULL_META_OBJECT

        segment = tokenize(path)
        if not segment.has_next():
            return self._stored_type(segment)
        meta_value = self.meta_object.meta_object_for_property(segment.indexed_name)
        if meta_value is NULL_META_OBJECT:
            return object
        return meta_value.get_setter_type(segment.children)

    def get_getter_type(self, path):
        from objectmeta.meta_object import NULL_META_OBJECT

        segment = tokenize(path)
        if not segment.has_next():
            return self._stored_type(segment)
        meta_value = self.meta_object.meta_object_for_property(segment.indexed_name)
        if meta_value is NULL_META_OBJECT:
            return object
        return meta_value.get_getter_type(segment.children)

    def has_setter(self, path):
        return True

    def has_getter(self, path):
        from objectmeta.meta_object import NULL_META_OBJECT

        segment = tokenize(path)
        if not segment.has_next():
            return segment.name in self._map
        if segment.name not in self._map:
            return False
        meta_value = self.meta_object.meta_object_for_property(segment.indexed_name)
        if meta_value is NULL_META_OBJECT:
            return True
        return meta_value.has_getter(segment.children)

    def instantiate_property_value(self, name, segment, object_factory):
        from objectmeta.meta_object import MetaObject

        child = object_factory.create(dict)
        self.set(segment, child)
        logger.debug(f"Created mapping for '{segment.indexed_name}' while setting '{name}'")
        return MetaObject.for_object(
            child,
            self.meta_object.object_factory,
            self.meta_object.object_wrapper_factory,
            self.meta_object.descriptor_factory,
        )


class CollectionWrapper(BaseWrapper):
    """Wraps a collection: elements can be appended or addressed by position
    (``[0]``), but named properties do not exist."""

    def __init__(self, meta_object: 'MetaObject', collection: collections.abc.Collection):
        super().__init__(meta_object)
        self._collection = collection

    def _unsupported(self, operation: str):
        return UnsupportedOperationError(
            f"{type(self._collection).__name__} collections do not support {operation}"
        )

    def get(self, segment):
        if segment.name == '' and segment.index is not None:
            return self.get_collection_value(segment, self._collection)
        raise self._unsupported(f"reading property '{segment.indexed_name}'")

    def set(self, segment, value):
        if segment.name == '' and segment.index is not None:
            self.set_collection_value(segment, self._collection, value)
            return
        raise self._unsupported(f"writing property '{segment.indexed_name}'")

    def find_property(self, name, use_camel_case_mapping=False):
        raise self._unsupported("find_property()")

    def getter_names(self):
        raise self._unsupported("getter_names()")

    def setter_names(self):
        raise self._unsupported("setter_names()")

    def get_setter_type(self, path):
        raise self._unsupported("get_setter_type()")

    def get_getter_type(self, path):
        raise self._unsupported("get_getter_type()")

    def has_setter(self, path):
        raise self._unsupported("has_setter()")

    def has_getter(self, path):
        raise self._unsupported("has_getter()")

    def instantiate_property_value(self, name, segment, object_factory):
        raise self._unsupported("instantiate_property_value()")

    def is_collection(self):
        return True

    def add(self, element):
        if isinstance(self._collection, collections.abc.MutableSequence):
            self._collection.append(element)
        elif isinstance(self._collection, collections.abc.MutableSet):
            self._collection.add(element)
        else:
            raise self._unsupported("add()")

    def add_all(self, elements):
        if isinstance(self._collection, collections.abc.MutableSequence):
            self._collection.extend(elements)
        elif isinstance(self._collection, collections.abc.MutableSet):
            self._collection |= set(elements)
        else:
            raise self._unsupported("add_all()")
