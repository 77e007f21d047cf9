"""Pytest configuration and shared fixtures."""
import pytest
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from objectmeta import clear_descriptor_cache, reset_defaults


@dataclass
class Item:
    """Order line."""
    price: float = 0.0
    name: str = ""


@dataclass
class Address:
    city: Optional[str] = None
    street: str = ""


@dataclass
class Customer:
    name: str = ""
    address: Optional[Address] = None


@dataclass
class Order:
    """Root object of most path tests."""
    items: List[Item] = field(default_factory=list)
    customer: Optional[Customer] = None
    tags: Dict[str, str] = field(default_factory=dict)
    notes: Tuple[str, ...] = ()


@pytest.fixture(autouse=True)
def reset_reflection_state():
    """Restore the default factories and empty the descriptor cache around each test."""
    reset_defaults()
    clear_descriptor_cache()

    yield

    reset_defaults()
    clear_descriptor_cache()


@pytest.fixture
def order():
    """An order with one item and no customer."""
    return Order(items=[Item(price=9.99, name="pen")])


@pytest.fixture
def full_order():
    """An order whose customer and address are populated."""
    return Order(
        items=[Item(price=1.5, name="ink"), Item(price=3.0, name="pad")],
        customer=Customer(name="Ada", address=Address(city="Paris", street="Rue Lepic")),
        tags={"priority": "high"},
        notes=("fragile",),
    )
