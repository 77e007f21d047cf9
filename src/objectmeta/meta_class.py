"""
Type-level property path resolution.

MetaClass answers questions about a dotted path against a class alone, with
no instance involved: does ``customer.address.city`` exist, what type does it
declare, what is its canonical spelling. Each step resolves one segment
through the TypeDescriptor of the current type and moves on to the declared
read type of that property (or to the element type for indexed segments over
a typed collection).
"""

import dataclasses
import logging
from typing import Any, Optional, Tuple

from objectmeta.descriptor import DescriptorFactory, TypeDescriptor
from objectmeta.tokenizer import PathSegment, tokenize
from objectmeta.type_utils import element_type, is_sequence_like

logger = logging.getLogger(__name__)


class MetaClass:
    """Path-aware view over one TypeDescriptor."""

    def __init__(self, cls: Any, descriptor_factory: DescriptorFactory):
        self._descriptor_factory = descriptor_factory
        self._descriptor: TypeDescriptor = descriptor_factory.find_for_type(cls)

    @classmethod
    def for_class(cls, type_: Any, descriptor_factory: Optional[DescriptorFactory] = None) -> 'MetaClass':
        if descriptor_factory is None:
            from objectmeta.config import get_default_descriptor_factory
            descriptor_factory = get_default_descriptor_factory()
        return cls(type_, descriptor_factory)

    @property
    def type(self) -> type:
        return self._descriptor.type

    @property
    def descriptor(self) -> TypeDescriptor:
        return self._descriptor

    def meta_class_for_property(self, name: str) -> 'MetaClass':
        """MetaClass of the declared read type of a single property."""
        return MetaClass(self._descriptor.get_getter_type(name), self._descriptor_factory)

    def _meta_class_for_segment(self, segment: PathSegment) -> 'MetaClass':
        return MetaClass(self._getter_type_of(segment), self._descriptor_factory)

    def _getter_type_of(self, segment: PathSegment) -> type:
        value_type = self._descriptor.get_getter_type(segment.name)
        if segment.index is not None and is_sequence_like(value_type):
            element = element_type(self._descriptor.get_generic_getter_type(segment.name))
            if element is not None:
                return element
        return value_type

    def _setter_type_of(self, segment: PathSegment) -> type:
        value_type = self._descriptor.get_setter_type(segment.name)
        if segment.index is not None and is_sequence_like(value_type):
            element = element_type(self._descriptor.get_generic_setter_type(segment.name))
            if element is not None:
                return element
        return value_type

    # ------------------------------------------------------------------
    # Canonical names
    # ------------------------------------------------------------------

    def find_property(self, name: str, use_camel_case_mapping: bool = False) -> Optional[str]:
        """Canonical dotted path for ``name``, matched case-insensitively.

        With ``use_camel_case_mapping`` separators are ignored as well, so a
        column label such as ``TOTAL_PRICE`` finds ``totalPrice`` or
        ``total_price``. Returns None as soon as one segment is unknown.
        """
        if use_camel_case_mapping:
            name = name.replace('_', '')

        parts = []
        meta = self
        for segment in tokenize(name):
            prop_name = meta._descriptor.find_property_name(segment.name)
            if prop_name is None:
                return None
            parts.append(prop_name if segment.index is None else f"{prop_name}[{segment.index}]")
            if segment.has_next():
                if not meta._descriptor.has_getter(prop_name):
                    return None
                meta = meta._meta_class_for_segment(dataclasses.replace(segment, name=prop_name))
        return '.'.join(parts)

    def getter_names(self) -> Tuple[str, ...]:
        return self._descriptor.readable_property_names

    def setter_names(self) -> Tuple[str, ...]:
        return self._descriptor.writable_property_names

    # ------------------------------------------------------------------
    # Declared types
    # ------------------------------------------------------------------

    def get_getter_type(self, path: str) -> type:
        segment = tokenize(path)
        meta = self
        while segment.has_next():
            meta = meta._meta_class_for_segment(segment)
            segment = segment.next()
        return meta._getter_type_of(segment)

    def get_setter_type(self, path: str) -> type:
        segment = tokenize(path)
        meta = self
        while segment.has_next():
            meta = meta._meta_class_for_segment(segment)
            segment = segment.next()
        return meta._setter_type_of(segment)

    # ------------------------------------------------------------------
    # Existence checks (never raise for unknown names)
    # ------------------------------------------------------------------

    def has_getter(self, path: str) -> bool:
        segment = tokenize(path)
        meta = self
        while segment.has_next():
            if not meta._descriptor.has_getter(segment.name):
                return False
            meta = meta._meta_class_for_segment(segment)
            segment = segment.next()
        return meta._descriptor.has_getter(segment.name)

    def has_setter(self, path: str) -> bool:
        segment = tokenize(path)
        meta = self
        while segment.has_next():
            descriptor = meta._descriptor
            if not descriptor.has_setter(segment.name):
                return False
            if descriptor.has_getter(segment.name):
                meta = meta._meta_class_for_segment(segment)
            else:
                meta = MetaClass(meta._setter_type_of(segment), meta._descriptor_factory)
            segment = segment.next()
        return meta._descriptor.has_setter(segment.name)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_get_accessor(self, name: str):
        return self._descriptor.get_get_accessor(name)

    def get_set_accessor(self, name: str):
        return self._descriptor.get_set_accessor(name)

    def has_default_constructor(self) -> bool:
        return self._descriptor.has_default_constructor()

    def __repr__(self) -> str:
        return f"MetaClass({getattr(self.type, '__qualname__', self.type)!r})"
