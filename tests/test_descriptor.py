"""
Tests for TypeDescriptor construction and the shared descriptor cache.

Tests cover:
- Accessor discovery (methods, properties, data slots)
- Read and write tie-breaks, including ambiguity
- Immutable slots and reserved names
- Default construction
- Case-insensitive name index
- Cache identity and eviction
"""

import functools
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import ClassVar, Final, List, NamedTuple

import pytest

from objectmeta.accessors import AmbiguousAccessor, AttributeAccessor, MethodAccessor
from objectmeta.descriptor import (
    DescriptorFactory,
    TypeDescriptor,
    cached_types,
    clear_descriptor_cache,
    describe,
)
from objectmeta.errors import AccessorNotFoundError, AmbiguousAccessorError, ReflectionError
from conftest import Item, Order


class Animal:
    pass


class Dog(Animal):
    pass


class Conflicted:
    def get_code(self) -> int:
        return 1

    def getCode(self) -> str:
        return "1"


class Flags:
    def get_active(self) -> bool:
        return False

    def is_active(self) -> bool:
        return True


class Odd:
    def is_ready(self) -> str:
        return "yes"


class Shelter:
    def get_resident(self) -> Animal:
        return Animal()


class DogShelter(Shelter):
    def get_resident(self) -> Dog:
        return Dog()


class Vet:
    def get_patient(self) -> Animal:
        return Animal()

    def getPatient(self) -> Dog:
        return Dog()


class Gadget:
    def get_serial(self) -> str:
        return "A1"

    def set_serial(self, serial: str):
        self.serial_seen = serial


class NumberedGadget(Gadget):
    """Overrides with unrelated annotations."""

    def get_serial(self) -> int:
        return 1

    def set_serial(self, serial: int):
        self.serial_seen = serial


class Writer:
    def set_mode(self, mode: str):
        pass


class BinaryWriter(Writer):
    def set_mode(self, mode: int):
        pass


class Both:
    def __init__(self):
        self._name = "prop"

    @property
    def name(self) -> str:
        return self._name

    def get_name(self) -> str:
        return "method"


class Switch:
    @property
    def active(self) -> bool:
        return False

    def get_active(self) -> bool:
        return True


class Unannotated:
    def is_active(self):
        return True


class Thermostat:
    def __init__(self):
        self._target = 0

    def get_target(self) -> int:
        return self._target

    def set_target(self, value: int):
        self._target = value

    def setTarget(self, value: object):
        self._target = value


class Kennel:
    def set_guest(self, guest: Animal):
        self.guest_seen = guest

    def setGuest(self, guest: Dog):
        self.guest_seen = guest


class Register:
    def set_code(self, code: int):
        pass

    def setCode(self, code: str):
        pass


class Label:
    def __init__(self):
        self._text = ""

    def set_text(self, value: int):
        self._text = str(value)

    def setText(self, value: bytes):
        self._text = value.decode()

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str):
        self._text = value


@dataclass(frozen=True)
class Point:
    x: int = 0
    y: int = 0


class Settings:
    version: Final[int] = 1
    name: str = "default"
    LIMIT: ClassVar[int] = 10


class Pair(NamedTuple):
    left: int
    right: int


class Slotted:
    __slots__ = ("width", "height")

    def __init__(self, width=1, height=2):
        self.width = width
        self.height = height


class Plain:
    def __init__(self, name: str, age: int = 0):
        self.name = name
        self.age = age


@dataclass
class Hidden:
    visible: int = 0
    _secret: int = 0


class Temperature:
    def __init__(self):
        self._celsius = 0.0

    @property
    def celsius(self) -> float:
        return self._celsius

    @celsius.setter
    def celsius(self, value: float):
        self._celsius = value

    @property
    def kelvin(self) -> float:
        return self._celsius + 273.15


class Invoice:
    @functools.cached_property
    def total(self) -> float:
        return 42.0


class Shape(ABC):
    @abstractmethod
    def area(self) -> float:
        ...


@dataclass
class TotalHolder:
    total_price: float = 0.0


class CamelHolder:
    def getTotalPrice(self) -> float:
        return 0.0


class Broken:
    x: "DoesNotExist" = None


class TestAccessorDiscovery:
    """Test which members become read and write accessors."""

    def test_dataclass_fields(self):
        descriptor = describe(Order)
        assert descriptor.readable_property_names == ("items", "customer", "tags", "notes")
        assert descriptor.writable_property_names == ("items", "customer", "tags", "notes")
        assert descriptor.get_getter_type("items") is list
        assert descriptor.get_generic_getter_type("items") == List[Item]

    def test_optional_annotation_unwrapped(self):
        from conftest import Customer, Address
        assert describe(Customer).get_getter_type("address") is Address

    def test_property_read_and_write(self):
        descriptor = describe(Temperature)
        assert descriptor.has_getter("celsius")
        assert descriptor.has_setter("celsius")
        assert descriptor.get_setter_type("celsius") is float
        assert isinstance(descriptor.get_get_accessor("celsius"), AttributeAccessor)

    def test_read_only_property(self):
        descriptor = describe(Temperature)
        assert descriptor.has_getter("kelvin")
        assert not descriptor.has_setter("kelvin")

    def test_cached_property_is_readable(self):
        descriptor = describe(Invoice)
        assert descriptor.get_getter_type("total") is float
        assert descriptor.get_get_accessor("total").invoke(Invoice()) == 42.0
        assert not descriptor.has_setter("total")

    def test_accessor_methods(self):
        descriptor = describe(Thermostat)
        accessor = descriptor.get_get_accessor("target")
        assert isinstance(accessor, MethodAccessor)
        assert accessor.method_name == "get_target"

    def test_boolean_prefix_requires_bool_return(self):
        assert not describe(Odd).has_getter("ready")

    def test_unannotated_boolean_prefix_is_ignored(self):
        assert not describe(Unannotated).has_getter("active")

    def test_unresolvable_annotation_degrades_to_object(self):
        """A forward reference that cannot be resolved never breaks the build."""
        assert describe(Broken).get_getter_type("x") is object


class TestGetterTieBreak:
    """Test resolution of competing read accessors."""

    def test_boolean_prefix_preferred(self):
        accessor = describe(Flags).get_get_accessor("active")
        assert accessor.method_name == "is_active"

    def test_override_with_narrower_return_type(self):
        """A subclass override narrowing the return type wins."""
        assert describe(DogShelter).get_getter_type("resident") is Dog

    def test_narrower_type_wins_regardless_of_order(self):
        assert describe(Vet).get_getter_type("patient") is Dog

    def test_override_with_unrelated_return_type(self):
        """Only the most-derived definition of a method name is a candidate."""
        descriptor = describe(NumberedGadget)
        accessor = descriptor.get_get_accessor("serial")
        assert not isinstance(accessor, AmbiguousAccessor)
        assert descriptor.get_getter_type("serial") is int
        assert accessor.invoke(NumberedGadget()) == 1

    def test_override_keeps_base_class_unchanged(self):
        assert describe(Gadget).get_getter_type("serial") is str

    def test_method_preferred_over_property_of_same_type(self):
        descriptor = describe(Both)
        accessor = descriptor.get_get_accessor("name")
        assert isinstance(accessor, MethodAccessor)
        assert accessor.invoke(Both()) == "method"

    def test_method_preferred_over_bool_property(self):
        accessor = describe(Switch).get_get_accessor("active")
        assert accessor.method_name == "get_active"

    def test_unrelated_types_are_ambiguous(self):
        """Building succeeds; only invoking the accessor fails."""
        descriptor = describe(Conflicted)
        assert descriptor.has_getter("code")
        assert descriptor.get_getter_type("code") is int
        accessor = descriptor.get_get_accessor("code")
        assert isinstance(accessor, AmbiguousAccessor)
        with pytest.raises(AmbiguousAccessorError, match="ambiguous type for property 'code'"):
            accessor.invoke(Conflicted())


class TestSetterTieBreak:
    """Test resolution of competing write accessors."""

    def test_exact_getter_type_match_wins(self):
        descriptor = describe(Thermostat)
        assert descriptor.get_setter_type("target") is int
        assert descriptor.get_set_accessor("target").method_name == "set_target"

    def test_overridden_setter_with_unrelated_parameter(self):
        descriptor = describe(BinaryWriter)
        assert descriptor.get_setter_type("mode") is int
        assert not isinstance(descriptor.get_set_accessor("mode"), AmbiguousAccessor)

    def test_overridden_accessor_pair(self):
        descriptor = describe(NumberedGadget)
        assert descriptor.get_setter_type("serial") is int
        gadget = NumberedGadget()
        descriptor.get_set_accessor("serial").invoke(gadget, 7)
        assert gadget.serial_seen == 7

    def test_narrower_parameter_wins(self):
        assert describe(Kennel).get_setter_type("guest") is Dog

    def test_unrelated_parameters_are_ambiguous(self):
        descriptor = describe(Register)
        assert descriptor.has_setter("code")
        with pytest.raises(AmbiguousAccessorError, match="Ambiguous setters"):
            descriptor.get_set_accessor("code").invoke(Register(), 1)

    def test_getter_type_match_replaces_ambiguity(self):
        """A later exact match still replaces an earlier ambiguous pair."""
        descriptor = describe(Label)
        assert descriptor.get_setter_type("text") is str
        accessor = descriptor.get_set_accessor("text")
        assert not isinstance(accessor, AmbiguousAccessor)
        label = Label()
        accessor.invoke(label, "hello")
        assert label.text == "hello"


class TestSlots:
    """Test data slots and their mutability."""

    def test_frozen_dataclass_is_read_only(self):
        descriptor = describe(Point)
        assert descriptor.has_getter("x")
        assert not descriptor.has_setter("x")

    def test_final_annotation_is_read_only(self):
        descriptor = describe(Settings)
        assert descriptor.has_getter("version")
        assert not descriptor.has_setter("version")
        assert descriptor.has_setter("name")

    def test_class_var_is_not_a_slot(self):
        assert not describe(Settings).has_getter("LIMIT")

    def test_named_tuple_fields_are_read_only(self):
        descriptor = describe(Pair)
        assert descriptor.readable_property_names == ("left", "right")
        assert descriptor.writable_property_names == ()

    def test_dunder_slots(self):
        descriptor = describe(Slotted)
        assert set(descriptor.slot_names) == {"width", "height"}
        slotted = Slotted()
        descriptor.get_set_accessor("width").invoke(slotted, 10)
        assert slotted.width == 10

    def test_init_parameters_of_plain_class(self):
        descriptor = describe(Plain)
        assert descriptor.get_getter_type("name") is str
        assert descriptor.get_setter_type("age") is int

    def test_underscore_names_are_reserved(self):
        descriptor = describe(Hidden)
        assert descriptor.has_getter("visible")
        assert not descriptor.has_getter("_secret")


class TestDefaultConstructor:
    """Test zero-argument construction detection."""

    def test_dataclass_with_defaults(self):
        descriptor = describe(Order)
        assert descriptor.has_default_constructor()
        assert descriptor.default_constructor is Order

    def test_required_init_parameter(self):
        descriptor = describe(Plain)
        assert not descriptor.has_default_constructor()
        with pytest.raises(ReflectionError, match="There is no default constructor"):
            descriptor.default_constructor

    def test_abstract_class(self):
        assert not describe(Shape).has_default_constructor()


class TestLookupErrors:
    """Test failures for unknown property names."""

    def test_unknown_getter_type(self):
        with pytest.raises(AccessorNotFoundError, match="There is no getter for property named 'nope'"):
            describe(Order).get_getter_type("nope")

    def test_unknown_setter_accessor_is_attribute_error(self):
        with pytest.raises(AttributeError):
            describe(Point).get_set_accessor("x")

    def test_existence_checks_do_not_raise(self):
        descriptor = describe(Order)
        assert not descriptor.has_getter("nope")
        assert not descriptor.has_setter("nope")


class TestCaseInsensitiveIndex:
    """Test canonical name lookup."""

    def test_upper_case_lookup(self):
        assert describe(Order).find_property_name("ITEMS") == "items"

    def test_separators_ignored(self):
        assert describe(TotalHolder).find_property_name("TOTALPRICE") == "total_price"
        assert describe(TotalHolder).find_property_name("total_PRICE") == "total_price"

    def test_camel_case_accessor(self):
        assert describe(CamelHolder).find_property_name("totalprice") == "totalPrice"

    def test_unknown_name(self):
        assert describe(Order).find_property_name("missing") is None


class TestDescriptorCache:
    """Test the shared cache."""

    def test_same_instance_returned(self):
        assert describe(Order) is describe(Order)
        assert Order in cached_types()

    def test_generic_alias_normalized(self):
        assert describe(List[Item]) is describe(list)

    def test_clear_cache(self):
        first = describe(Order)
        clear_descriptor_cache()
        assert Order not in cached_types()
        assert describe(Order) is not first

    def test_factory_without_cache(self):
        factory = DescriptorFactory(cache_enabled=False)
        built = factory.find_for_type(Order)
        assert isinstance(built, TypeDescriptor)
        assert built is not describe(Order)
        assert not factory.is_cache_enabled()

    def test_factory_with_cache(self):
        assert DescriptorFactory().find_for_type(Order) is describe(Order)

    def test_concurrent_first_builds_converge(self):
        """Racing first requests all receive the single installed descriptor."""
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: describe(Order), range(32)))
        assert len({id(d) for d in results}) == 1
        assert results[0] is describe(Order)

    def test_descriptor_maps_are_read_only(self):
        descriptor = describe(Order)
        with pytest.raises(TypeError):
            descriptor._get_accessors["x"] = None
