"""
Per-type accessor metadata and its process-wide cache.

A TypeDescriptor answers, for one class, which properties can be read and
written, through which accessor, and with which declared type. Building one
walks the whole MRO, so descriptors are built once and shared by every caller
through describe().

Accessor discovery, most-derived class first:

    1. Accessor methods (get_x / getX / is_x / isX / set_x / setX) and
       ``property`` objects become read/write candidates for a logical name.
       Only the definition attribute lookup reaches counts, so an override
       replaces the inherited member whatever its annotations.
    2. Competing candidates are ordered by declared type; candidates that
       cannot be ordered produce an AmbiguousAccessor that fails on use.
       Between a method and a ``property`` of the same type the method wins.
    3. Data slots (annotations, __slots__, NamedTuple fields, plain
       __init__ parameters) fill in any property still uncovered.
"""

import dataclasses
import functools
import inspect
import keyword
import logging
import typing
from types import FunctionType, MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from objectmeta import naming
from objectmeta.accessors import AmbiguousAccessor, AttributeAccessor, MethodAccessor
from objectmeta.errors import AccessorNotFoundError, ReflectionError
from objectmeta.type_utils import is_assignable, is_class_var, is_final, raw_class

logger = logging.getLogger(__name__)

# Shared cache: type -> descriptor. Entries are installed with setdefault so
# concurrent first builds converge on a single instance without locking reads.
_descriptor_cache: Dict[type, 'TypeDescriptor'] = {}


@dataclasses.dataclass(frozen=True)
class _Candidate:
    """A read or write accessor found on some class in the MRO."""
    property_name: str
    member_name: str
    value_type: type
    generic_type: Any
    declaring_class: type
    is_method: bool
    boolean_prefix: bool = False

    def to_accessor(self):
        if self.is_method:
            return MethodAccessor(self.member_name, self.value_type, self.generic_type, self.declaring_class)
        return AttributeAccessor(self.member_name, self.value_type, self.generic_type, self.declaring_class)


@dataclasses.dataclass(frozen=True)
class _Slot:
    """A data slot exposed directly as an attribute."""
    name: str
    hint: Any
    read_only: bool
    declaring_class: type


def _type_name(cls: Any) -> str:
    return getattr(cls, '__qualname__', None) or repr(cls)


def _is_valid_property_name(name: str) -> bool:
    return bool(name) and not name.startswith('_') and not keyword.iskeyword(name)


def _safe_type_hints(obj: Any) -> Dict[str, Any]:
    """get_type_hints() that degrades to raw annotations instead of raising."""
    try:
        return typing.get_type_hints(obj)
    except Exception as e:
        logger.debug(f"Could not resolve type hints of {_type_name(obj)}: {e}")
        return dict(getattr(obj, '__annotations__', None) or {})


def _own_annotations(klass: type) -> Dict[str, Any]:
    try:
        return dict(inspect.get_annotations(klass))
    except Exception as e:
        logger.debug(f"Could not read annotations of {_type_name(klass)}: {e}")
        return {}


def _mro(cls: type) -> Iterator[type]:
    for klass in cls.__mro__:
        if klass is object or klass is typing.Generic:
            continue
        yield klass


class TypeDescriptor:
    """
    Cached set of class definition information for one type.

    Never mutated after construction: all maps are exposed as read-only
    mapping proxies. Lookups for names without an accessor raise
    AccessorNotFoundError; has_getter()/has_setter() are the non-raising
    existence checks.
    """

    def __init__(self, cls: type):
        self.type = cls
        self._get_accessors: Dict[str, Any] = {}
        self._set_accessors: Dict[str, Any] = {}
        self._get_types: Dict[str, type] = {}
        self._set_types: Dict[str, type] = {}
        self._generic_get_types: Dict[str, Any] = {}
        self._generic_set_types: Dict[str, Any] = {}
        self._slot_names: List[str] = []

        self._default_constructor = self._find_default_constructor(cls)
        getters, setters = self._collect_accessor_candidates(cls)
        self._resolve_getter_conflicts(getters)
        self._resolve_setter_conflicts(setters)
        self._add_slots(cls)

        self.readable_property_names: Tuple[str, ...] = tuple(self._get_accessors)
        self.writable_property_names: Tuple[str, ...] = tuple(self._set_accessors)
        self.slot_names: Tuple[str, ...] = tuple(self._slot_names)

        case_insensitive: Dict[str, str] = {}
        for prop_name in self.readable_property_names + self.writable_property_names:
            case_insensitive[prop_name.upper()] = prop_name
        for prop_name in self.readable_property_names + self.writable_property_names:
            case_insensitive.setdefault(prop_name.replace('_', '').upper(), prop_name)

        self._case_insensitive_property_map = MappingProxyType(case_insensitive)
        self._get_accessors = MappingProxyType(self._get_accessors)
        self._set_accessors = MappingProxyType(self._set_accessors)
        self._get_types = MappingProxyType(self._get_types)
        self._set_types = MappingProxyType(self._set_types)
        self._generic_get_types = MappingProxyType(self._generic_get_types)
        self._generic_set_types = MappingProxyType(self._generic_set_types)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @staticmethod
    def _find_default_constructor(cls: type):
        """Return ``cls`` if it can be called with no arguments, else None."""
        if inspect.isabstract(cls) or getattr(cls, '_is_protocol', False):
            return None
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            return None
        for param in signature.parameters.values():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            if param.default is param.empty:
                return None
        return cls

    def _collect_accessor_candidates(self, cls: type):
        """Group read and write candidates by logical property name.

        A member shadowed by a more-derived definition of the same name is
        overridden and never reached, so it is not a candidate.
        """
        getters: Dict[str, List[_Candidate]] = {}
        setters: Dict[str, List[_Candidate]] = {}

        for klass in _mro(cls):
            for member_name, member in list(vars(klass).items()):
                if member_name.startswith('_'):
                    continue
                if not isinstance(member, (property, functools.cached_property, FunctionType)):
                    continue
                if inspect.getattr_static(cls, member_name, None) is not member:
                    continue
                if isinstance(member, property):
                    self._add_property_candidates(klass, member_name, member, getters, setters)
                elif isinstance(member, functools.cached_property):
                    hint = _safe_type_hints(member.func).get('return', Any)
                    self._add_candidate(getters, _Candidate(
                        member_name, member_name, raw_class(hint), hint, klass, is_method=False))
                else:
                    self._add_method_candidate(klass, member_name, member, getters, setters)

        return getters, setters

    def _add_property_candidates(self, klass, name, prop, getters, setters):
        read_hint = Any
        if prop.fget is not None:
            read_hint = _safe_type_hints(prop.fget).get('return', Any)
            self._add_candidate(getters, _Candidate(
                name, name, raw_class(read_hint), read_hint, klass, is_method=False))
        if prop.fset is not None:
            write_hint = read_hint
            params = self._positional_params(prop.fset)
            if params is not None and len(params) == 1:
                write_hint = _safe_type_hints(prop.fset).get(params[0].name, read_hint)
            self._add_candidate(setters, _Candidate(
                name, name, raw_class(write_hint), write_hint, klass, is_method=False))

    def _add_method_candidate(self, klass, name, func, getters, setters):
        is_getter = naming.is_getter(name)
        is_setter = naming.is_setter(name)
        if not (is_getter or is_setter):
            return
        params = self._positional_params(func)
        if params is None:
            return
        hints = _safe_type_hints(func)
        prop_name = naming.method_to_property(name)

        if is_getter and not params:
            hint = hints.get('return', Any)
            return_type = raw_class(hint)
            boolean_prefix = naming.is_boolean_getter(name)
            if boolean_prefix and return_type is not bool:
                return
            self._add_candidate(getters, _Candidate(
                prop_name, name, return_type, hint, klass, is_method=True, boolean_prefix=boolean_prefix))
        elif is_setter and len(params) == 1:
            hint = hints.get(params[0].name, Any)
            self._add_candidate(setters, _Candidate(
                prop_name, name, raw_class(hint), hint, klass, is_method=True))

    @staticmethod
    def _positional_params(func) -> Optional[List[inspect.Parameter]]:
        """Parameters after ``self``; None if the signature is not a plain positional one."""
        try:
            params = list(inspect.signature(func).parameters.values())
        except (TypeError, ValueError):
            return None
        if not params:
            return None
        params = params[1:]
        for param in params:
            if param.kind not in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
                return None
        return params

    @staticmethod
    def _add_candidate(groups, candidate: _Candidate) -> None:
        if _is_valid_property_name(candidate.property_name):
            groups.setdefault(candidate.property_name, []).append(candidate)

    def _resolve_getter_conflicts(self, conflicting_getters: Dict[str, List[_Candidate]]) -> None:
        for prop_name, candidates in conflicting_getters.items():
            winner = None
            is_ambiguous = False
            for candidate in candidates:
                if winner is None:
                    winner = candidate
                    continue
                winner_type = winner.value_type
                candidate_type = candidate.value_type
                if candidate_type is winner_type:
                    if candidate_type is bool and (candidate.boolean_prefix or winner.boolean_prefix):
                        if candidate.boolean_prefix:
                            winner = candidate
                    elif candidate.is_method != winner.is_method:
                        if candidate.is_method:
                            winner = candidate
                    elif candidate_type is not bool:
                        is_ambiguous = True
                        break
                elif is_assignable(candidate_type, winner_type):
                    # winner already declares the narrower type
                    pass
                elif is_assignable(winner_type, candidate_type):
                    winner = candidate
                else:
                    is_ambiguous = True
                    break
            self._add_get_accessor(prop_name, winner, is_ambiguous)

    def _add_get_accessor(self, name: str, candidate: _Candidate, is_ambiguous: bool) -> None:
        accessor = candidate.to_accessor()
        if is_ambiguous:
            message = (
                f"Illegal overloaded getter with ambiguous type for property '{name}' "
                f"in class '{_type_name(candidate.declaring_class)}'. "
                f"The candidate return types cannot be ordered, so the result would be unpredictable."
            )
            logger.debug(f"Ambiguous getter: {message}")
            accessor = AmbiguousAccessor(accessor, message)
        self._get_accessors[name] = accessor
        self._get_types[name] = candidate.value_type
        self._generic_get_types[name] = candidate.generic_type

    def _resolve_setter_conflicts(self, conflicting_setters: Dict[str, List[_Candidate]]) -> None:
        for prop_name, setters in conflicting_setters.items():
            getter_type = self._get_types.get(prop_name)
            is_getter_ambiguous = isinstance(self._get_accessors.get(prop_name), AmbiguousAccessor)
            is_setter_ambiguous = False
            match = None
            for setter in setters:
                if not is_getter_ambiguous and setter.value_type is getter_type:
                    match = setter
                    break
                if not is_setter_ambiguous:
                    match = self._pick_better_setter(match, setter, prop_name)
                    is_setter_ambiguous = match is None
            if match is not None:
                self._add_set_accessor(prop_name, match)

    def _pick_better_setter(self, setter1: Optional[_Candidate], setter2: _Candidate, prop_name: str):
        if setter1 is None:
            return setter2
        type1 = setter1.value_type
        type2 = setter2.value_type
        if is_assignable(type1, type2):
            return setter2
        if is_assignable(type2, type1):
            return setter1
        message = (
            f"Ambiguous setters defined for property '{prop_name}' in class "
            f"'{_type_name(setter2.declaring_class)}' with types "
            f"'{_type_name(type1)}' and '{_type_name(type2)}'."
        )
        logger.debug(message)
        self._set_accessors[prop_name] = AmbiguousAccessor(setter1.to_accessor(), message)
        self._set_types[prop_name] = type1
        self._generic_set_types[prop_name] = setter1.generic_type
        return None

    def _add_set_accessor(self, name: str, candidate: _Candidate) -> None:
        self._set_accessors[name] = candidate.to_accessor()
        self._set_types[name] = candidate.value_type
        self._generic_set_types[name] = candidate.generic_type

    def _add_slots(self, cls: type) -> None:
        for slot in self._collect_slots(cls):
            if not _is_valid_property_name(slot.name):
                continue
            self._slot_names.append(slot.name)
            value_type = raw_class(slot.hint)
            accessor = AttributeAccessor(slot.name, value_type, slot.hint, slot.declaring_class)
            if slot.name not in self._set_accessors and not slot.read_only:
                self._set_accessors[slot.name] = accessor
                self._set_types[slot.name] = value_type
                self._generic_set_types[slot.name] = slot.hint
            if slot.name not in self._get_accessors:
                self._get_accessors[slot.name] = accessor
                self._get_types[slot.name] = value_type
                self._generic_get_types[slot.name] = slot.hint

    @staticmethod
    def _collect_slots(cls: type) -> List[_Slot]:
        """Data slots of ``cls``, most-derived declaration first."""
        resolved = _safe_type_hints(cls)
        frozen = dataclasses.is_dataclass(cls) and cls.__dataclass_params__.frozen
        is_tuple = issubclass(cls, tuple)
        slots: Dict[str, _Slot] = {}

        def add(name, hint, read_only, klass):
            if name in slots:
                return
            static = inspect.getattr_static(cls, name, None)
            if isinstance(static, (property, functools.cached_property)):
                return
            slots[name] = _Slot(name, hint, read_only or frozen or is_tuple, klass)

        for klass in _mro(cls):
            for name, raw_hint in _own_annotations(klass).items():
                hint = resolved.get(name, raw_hint)
                if is_class_var(hint) or is_class_var(raw_hint):
                    continue
                add(name, hint, is_final(hint) or is_final(raw_hint), klass)

            declared_slots = vars(klass).get('__slots__', ())
            if isinstance(declared_slots, str):
                declared_slots = (declared_slots,)
            for name in declared_slots:
                if name in ('__dict__', '__weakref__'):
                    continue
                add(name, resolved.get(name, Any), False, klass)

            if is_tuple:
                for name in getattr(klass, '_fields', ()):
                    add(name, resolved.get(name, Any), True, klass)

            init = vars(klass).get('__init__')
            if isinstance(init, FunctionType) and not dataclasses.is_dataclass(klass) and not is_tuple:
                init_hints = _safe_type_hints(init)
                for param in list(inspect.signature(init).parameters.values())[1:]:
                    if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                        continue
                    add(param.name, resolved.get(param.name, init_hints.get(param.name, Any)), False, klass)

        return list(slots.values())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def default_constructor(self):
        if self._default_constructor is not None:
            return self._default_constructor
        raise ReflectionError(f"There is no default constructor for {self.type!r}")

    def has_default_constructor(self) -> bool:
        return self._default_constructor is not None

    def get_get_accessor(self, property_name: str):
        accessor = self._get_accessors.get(property_name)
        if accessor is None:
            raise AccessorNotFoundError('getter', property_name, self.type)
        return accessor

    def get_set_accessor(self, property_name: str):
        accessor = self._set_accessors.get(property_name)
        if accessor is None:
            raise AccessorNotFoundError('setter', property_name, self.type)
        return accessor

    def get_getter_type(self, property_name: str) -> type:
        value_type = self._get_types.get(property_name)
        if value_type is None:
            raise AccessorNotFoundError('getter', property_name, self.type)
        return value_type

    def get_setter_type(self, property_name: str) -> type:
        value_type = self._set_types.get(property_name)
        if value_type is None:
            raise AccessorNotFoundError('setter', property_name, self.type)
        return value_type

    def get_generic_getter_type(self, property_name: str) -> Any:
        """Full annotation behind get_getter_type(), e.g. ``List[Item]``."""
        self.get_getter_type(property_name)
        return self._generic_get_types[property_name]

    def get_generic_setter_type(self, property_name: str) -> Any:
        self.get_setter_type(property_name)
        return self._generic_set_types[property_name]

    def has_getter(self, property_name: str) -> bool:
        return property_name in self._get_accessors

    def has_setter(self, property_name: str) -> bool:
        return property_name in self._set_accessors

    def find_property_name(self, name: str) -> Optional[str]:
        """Canonical property name for ``name`` ignoring case, or None."""
        return self._case_insensitive_property_map.get(name.upper())

    def __repr__(self) -> str:
        return (
            f"TypeDescriptor({_type_name(self.type)}, "
            f"readable={list(self.readable_property_names)}, "
            f"writable={list(self.writable_property_names)})"
        )


# =============================================================================
# CACHE
# =============================================================================

def _normalize_type(cls: Any) -> type:
    if isinstance(cls, type):
        return cls
    return raw_class(cls)


def describe(cls: Any) -> TypeDescriptor:
    """Get the shared descriptor for ``cls``, building it on first use."""
    cls = _normalize_type(cls)
    descriptor = _descriptor_cache.get(cls)
    if descriptor is not None:
        return descriptor
    built = TypeDescriptor(cls)
    descriptor = _descriptor_cache.setdefault(cls, built)
    if descriptor is built:
        logger.debug(f"Built descriptor for {_type_name(cls)}")
    return descriptor


def clear_descriptor_cache() -> None:
    """Evict every cached descriptor."""
    logger.debug(f"Clearing {len(_descriptor_cache)} cached descriptor(s)")
    _descriptor_cache.clear()


def cached_types() -> Mapping[type, TypeDescriptor]:
    """Read-only view of the shared cache."""
    return MappingProxyType(_descriptor_cache)


class DescriptorFactory:
    """Hands out TypeDescriptors, from the shared cache unless caching is disabled."""

    def __init__(self, cache_enabled: bool = True):
        self._cache_enabled = cache_enabled

    def is_cache_enabled(self) -> bool:
        return self._cache_enabled

    def set_cache_enabled(self, cache_enabled: bool) -> None:
        self._cache_enabled = cache_enabled

    def find_for_type(self, cls: Any) -> TypeDescriptor:
        if self._cache_enabled:
            return describe(cls)
        return TypeDescriptor(_normalize_type(cls))
