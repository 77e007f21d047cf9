"""Tests for process-wide defaults."""
from objectmeta import (
    DefaultObjectFactory,
    DefaultObjectWrapperFactory,
    describe,
    get_default_descriptor_factory,
    get_default_object_factory,
    get_default_wrapper_factory,
    get_value,
    reset_defaults,
    set_default_object_factory,
    set_default_wrapper_factory,
    set_descriptor_cache_enabled,
    set_value,
)
from conftest import Customer, Order


class CountingFactory(DefaultObjectFactory):
    """Records every type it is asked to create."""

    def __init__(self):
        self.created = []

    def create(self, cls, constructor_arg_types=None, constructor_args=None):
        self.created.append(cls)
        return super().create(cls, constructor_arg_types, constructor_args)


def test_stock_defaults():
    assert isinstance(get_default_object_factory(), DefaultObjectFactory)
    assert isinstance(get_default_wrapper_factory(), DefaultObjectWrapperFactory)
    assert get_default_descriptor_factory().is_cache_enabled()


def test_custom_object_factory_used_for_materialization():
    factory = CountingFactory()
    set_default_object_factory(factory)
    order = Order()
    set_value(order, "customer.address.city", "Lyon")
    assert [cls.__name__ for cls in factory.created] == ["Customer", "Address"]


def test_one_child_per_missing_segment():
    factory = CountingFactory()
    set_default_object_factory(factory)
    order = Order(customer=Customer())
    set_value(order, "customer.address.city", "Lyon")
    assert len(factory.created) == 1


def test_disable_descriptor_cache():
    set_descriptor_cache_enabled(False)
    factory = get_default_descriptor_factory()
    assert not factory.is_cache_enabled()
    assert factory.find_for_type(Order) is not describe(Order)
    assert get_value(Order(), "items") == []


def test_reset_defaults():
    custom = CountingFactory()
    set_default_object_factory(custom)
    set_descriptor_cache_enabled(False)
    reset_defaults()
    assert get_default_object_factory() is not custom
    assert get_default_descriptor_factory().is_cache_enabled()
