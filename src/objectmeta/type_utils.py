"""
Helpers that reduce type annotations to runtime classes.

Annotations found on fields, properties and accessor methods can be plain
classes, typing generics (``List[Item]``, ``Optional[Item]``), PEP 604 unions,
``Annotated`` / ``Final`` / ``ClassVar`` qualifiers, TypeVars or unresolved
forward references. The descriptor stores both the raw class (for
assignability checks) and the annotation itself (for element-type discovery).
"""

import collections.abc
import types
from typing import Annotated, Any, ClassVar, Final, ForwardRef, Optional, TypeVar, Union, get_args, get_origin

NoneType = type(None)

_QUALIFIERS = (Annotated, Final, ClassVar)


def strip_qualifiers(hint: Any) -> Any:
    """Remove Annotated/Final/ClassVar wrappers, keeping the inner annotation."""
    while True:
        origin = get_origin(hint)
        if origin in _QUALIFIERS:
            args = get_args(hint)
            if not args:
                return Any
            hint = args[0]
        elif hint is Final or hint is ClassVar:
            return Any
        else:
            return hint


def unwrap_optional(hint: Any) -> Any:
    """Return X for Optional[X] / X | None; any other annotation unchanged."""
    hint = strip_qualifiers(hint)
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(hint) if arg is not NoneType]
        if len(args) == 1:
            return args[0]
    return hint


def raw_class(hint: Any) -> type:
    """Reduce an annotation to the class an accessor actually declares.

    Unions of more than one concrete type, Any, unresolved forward references
    and unbound TypeVars all collapse to ``object``.
    """
    hint = unwrap_optional(hint)

    if hint is None or hint is NoneType:
        return NoneType
    if hint is Any or isinstance(hint, (str, ForwardRef)):
        return object
    if isinstance(hint, TypeVar):
        bound = hint.__bound__
        return raw_class(bound) if bound is not None else object

    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        return object
    if isinstance(origin, type):
        return origin
    if isinstance(hint, type):
        return hint
    return object


def element_type(hint: Any) -> Optional[type]:
    """Element class of a single-parameter container annotation.

    ``List[Item]`` and ``Sequence[Item]`` give ``Item``; ``Tuple[Item, ...]``
    gives ``Item``. Classes that carry their own ``__args__`` (runtime
    parameterized containers) are honored the same way. Returns None when no
    single element type is declared.
    """
    hint = unwrap_optional(hint)
    args = get_args(hint)
    if not args and isinstance(hint, type):
        args = getattr(hint, '__args__', ())
        if not isinstance(args, tuple):
            args = ()
    if len(args) == 1:
        return raw_class(args[0])
    if len(args) == 2 and args[1] is Ellipsis and raw_class(hint) is tuple:
        return raw_class(args[0])
    return None


def is_final(hint: Any) -> bool:
    return hint is Final or get_origin(hint) is Final


def is_class_var(hint: Any) -> bool:
    return hint is ClassVar or get_origin(hint) is ClassVar


def is_assignable(target: type, source: type) -> bool:
    """True when a value of class ``source`` can stand where ``target`` is declared."""
    try:
        return issubclass(source, target)
    except TypeError:
        return False


def is_sequence_like(cls: type) -> bool:
    """Collections addressed by integer index: not mappings, not text."""
    try:
        return (
            issubclass(cls, collections.abc.Collection)
            and not issubclass(cls, (collections.abc.Mapping, str, bytes))
        )
    except TypeError:
        return False
