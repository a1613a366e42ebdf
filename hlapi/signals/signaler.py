"""Slot registry and signaler.

The signaler is the seam between the dispatcher and the script evaluator.
Nodes whose name matches a registered slot are executed by invoking that
slot. Ambient objects (the request, the response and the result
accumulator) are published to slots through named scopes, which are pushed
and popped around a block of evaluation.

A signaler is created per dispatch and never shared between concurrent
requests; the slot registry is populated at startup and only read afterwards.
"""

import inspect
import logging
from contextlib import asynccontextmanager
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Union,
)

from hlapi.core.node import Node
from hlapi.exceptions import EvaluationError, ScopeError

logger = logging.getLogger(__name__)

SlotFunction = Callable[["Signaler", Node], Union[None, Awaitable[None]]]

_MISSING = object()


class SlotRegistry:
    """Registry mapping slot names to slot functions.

    Example:
        >>> registry = SlotRegistry()
        >>> @registry.register("hello")
        ... def hello(signaler, node):
        ...     node.value = "world"
    """

    def __init__(self: "SlotRegistry") -> None:
        self._slots: Dict[str, SlotFunction] = {}

    def __contains__(self: "SlotRegistry", name: str) -> bool:
        return name in self._slots

    def add(self: "SlotRegistry", name: str, slot: SlotFunction) -> None:
        """Register a slot under a name, replacing any existing slot."""
        if name in self._slots:
            logger.debug(f"Replacing slot [{name}]")
        self._slots[name] = slot

    def register(
        self: "SlotRegistry", *names: str
    ) -> Callable[[SlotFunction], SlotFunction]:
        """Decorator registering a function under one or more slot names."""

        def decorator(func: SlotFunction) -> SlotFunction:
            for name in names:
                self.add(name, func)
            return func

        return decorator

    def get(self: "SlotRegistry", name: str) -> Optional[SlotFunction]:
        return self._slots.get(name)

    def names(self: "SlotRegistry") -> List[str]:
        return sorted(self._slots)

    def copy(self: "SlotRegistry") -> "SlotRegistry":
        """Return an independent registry with the same slots."""
        registry = SlotRegistry()
        registry._slots.update(self._slots)
        return registry


class Signaler:
    """Evaluates script trees by invoking slots, with ambient scopes.

    Attributes:
        registry: Slots available to evaluated scripts
        services: Dispatcher services slots may need (storage, reflector, ...)
    """

    def __init__(
        self: "Signaler",
        registry: SlotRegistry,
        services: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Initialize the signaler.

        Args:
            registry: Slot registry
            services: Named services made available to slots
        """
        self.registry = registry
        self.services: Dict[str, Any] = dict(services or {})
        self._scopes: Dict[str, List[Any]] = {}

    @asynccontextmanager
    async def scope(self: "Signaler", name: str, value: Any) -> AsyncIterator[Any]:
        """Publish an ambient object for the duration of a block.

        The object is popped again when the block exits, also on errors.

        Args:
            name: Scope name, e.g. ``http.request``
            value: Object to publish
        """
        stack = self._scopes.setdefault(name, [])
        stack.append(value)
        try:
            yield value
        finally:
            stack.pop()

    def peek(self: "Signaler", name: str, default: Any = _MISSING) -> Any:
        """Return the innermost object published under a scope name.

        Raises:
            ScopeError: If nothing is in scope and no default was given
        """
        stack = self._scopes.get(name)
        if stack:
            return stack[-1]
        if default is not _MISSING:
            return default
        raise ScopeError(f"No object named '{name}' is in scope")

    def service(self: "Signaler", name: str) -> Any:
        """Return a named dispatcher service.

        Raises:
            EvaluationError: If the service has not been provided
        """
        try:
            return self.services[name]
        except KeyError:
            raise EvaluationError(f"No service named '{name}' is available") from None

    async def signal(self: "Signaler", name: str, node: Node) -> None:
        """Invoke the slot registered under a name with a node.

        Raises:
            EvaluationError: If no such slot exists
        """
        slot = self.registry.get(name)
        if slot is None:
            raise EvaluationError(
                f"No slot exists for [{name}]", details={"slot": name}
            )
        result = slot(self, node)
        if inspect.isawaitable(result):
            await result

    async def eval(self: "Signaler", lambda_node: Node) -> None:
        """Evaluate the children of a node in order.

        Children whose name is empty or starts with ``.`` are data and are
        skipped; every other child is signalled as a slot invocation.
        """
        for node in lambda_node.children:
            if not node.name or node.name.startswith("."):
                continue
            await self.signal(node.name, node)


__all__ = ["SlotFunction", "SlotRegistry", "Signaler"]
