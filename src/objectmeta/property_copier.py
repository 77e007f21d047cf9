"""Shallow copy of data slots between two instances of the same class."""

import logging
from typing import Any

from objectmeta import config

logger = logging.getLogger(__name__)


def copy_properties(cls: type, source: Any, destination: Any) -> None:
    """Copy every data slot of ``cls`` from ``source`` to ``destination``.

    Values are copied by reference. Slots that cannot be written (``Final``
    annotations, frozen dataclass fields) are left untouched, as are
    properties exposed only through accessor methods.
    """
    descriptor = config.get_default_descriptor_factory().find_for_type(cls)
    copied = 0
    for name in descriptor.slot_names:
        if not (descriptor.has_getter(name) and descriptor.has_setter(name)):
            continue
        value = descriptor.get_get_accessor(name).invoke(source)
        descriptor.get_set_accessor(name).invoke(destination, value)
        copied += 1
    logger.debug(f"Copied {copied} slot(s) of {cls.__name__}")
