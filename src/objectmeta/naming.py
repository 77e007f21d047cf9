"""Accessor-method naming conventions.

Both Python and camelCase spellings are recognized::

    get_total_price / getTotalPrice  -> read accessor for total_price / totalPrice
    is_active       / isActive       -> boolean read accessor for active
    set_total_price / setTotalPrice  -> write accessor

An ``is_`` accessor only counts when it is annotated ``-> bool``; an
unannotated ``def is_active(self)`` is not a read accessor.
"""

from objectmeta.errors import ReflectionError

GETTER_PREFIX = 'get'
BOOLEAN_GETTER_PREFIX = 'is'
SETTER_PREFIX = 'set'


def _strip_prefix(name: str, prefix: str):
    """Return the property part after ``prefix`` or None if the convention does not match."""
    if not name.startswith(prefix):
        return None
    rest = name[len(prefix):]
    if rest.startswith('_'):
        rest = rest[1:]
        return rest or None
    if rest and rest[0].isupper():
        return decapitalize(rest)
    return None


def decapitalize(name: str) -> str:
    """JavaBeans-style decapitalization: ``Name`` -> ``name``, ``URL`` stays ``URL``."""
    if len(name) > 1 and name[1].isupper() and name[0].isupper():
        return name
    return name[0].lower() + name[1:]


def is_getter(name: str) -> bool:
    return _strip_prefix(name, GETTER_PREFIX) is not None or is_boolean_getter(name)


def is_boolean_getter(name: str) -> bool:
    return _strip_prefix(name, BOOLEAN_GETTER_PREFIX) is not None


def is_setter(name: str) -> bool:
    return _strip_prefix(name, SETTER_PREFIX) is not None


def is_property(name: str) -> bool:
    return is_getter(name) or is_setter(name)


def method_to_property(name: str) -> str:
    """Derive the logical property name from an accessor method name."""
    for prefix in (BOOLEAN_GETTER_PREFIX, GETTER_PREFIX, SETTER_PREFIX):
        prop = _strip_prefix(name, prefix)
        if prop is not None:
            return prop
    raise ReflectionError(
        f"Error parsing property name '{name}'. Didn't start with 'is', 'get' or 'set'."
    )
