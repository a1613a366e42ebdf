"""Slot signalling for hlapi scripts.

Example:
    >>> from hlapi.signals import Signaler, SlotRegistry
    >>>
    >>> registry = SlotRegistry()
    >>> registry.add("hello", lambda signaler, node: setattr(node, "value", "world"))
    >>> signaler = Signaler(registry)
"""

from .signaler import Signaler, SlotFunction, SlotRegistry

__all__ = ["Signaler", "SlotFunction", "SlotRegistry"]
