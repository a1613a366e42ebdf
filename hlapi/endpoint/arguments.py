"""Argument binding.

Attaches the arguments supplied by the caller (query parameters and payload)
to the script being executed, validating them against the script's
``[.arguments]`` declaration.

An endpoint without a declaration accepts everything unchecked. As soon as
a declaration exists, even an empty one, every argument must be declared.
A declared type of ``*`` turns validation off for the whole subtree below it.
"""

import logging
from typing import Mapping, Optional

from hlapi.constants import NodeNames
from hlapi.core.converter import PASSTHROUGH_TYPES, convert
from hlapi.core.node import Node
from hlapi.exceptions import MultipleDeclarationsError, UnknownArgumentError

logger = logging.getLogger(__name__)


def _declared_type(declaration: Node) -> Optional[str]:
    value = declaration.value
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def detach_declaration(script: Node) -> Optional[Node]:
    """Detach and return the script's declaration block, if any.

    Raises:
        MultipleDeclarationsError: If the script declares more than one block
    """
    declarations = script.all(NodeNames.ARGUMENTS)
    if len(declarations) > 1:
        raise MultipleDeclarationsError(
            f"Found {len(declarations)} [{NodeNames.ARGUMENTS}] declarations, "
            "only one is allowed"
        )
    if not declarations:
        return None
    return declarations[0].untie()


class ArgumentBinder:
    """Binds query and payload arguments to a script.

    Binding must run exactly once per dispatch, since it replaces the
    declaration block with the bound arguments.
    """

    def bind(
        self,
        script: Node,
        query: Optional[Mapping[str, str]] = None,
        payload: Optional[Node] = None,
    ) -> None:
        """Attach arguments to a script.

        Args:
            script: Script to bind arguments to, mutated in place
            query: Query parameters, converted according to their declared type
            payload: Structured payload, validated recursively; left untouched

        Raises:
            UnknownArgumentError: If an argument is not declared
            ArgumentConversionError: If an argument does not match its type
            MultipleDeclarationsError: If the script has several declarations
        """
        declaration = detach_declaration(script)
        arguments = Node(NodeNames.ARGUMENTS)

        if query:
            for name, value in query.items():
                arguments.add(Node(name, self._convert_query(declaration, name, value)))

        if payload is not None:
            for child in payload:
                copy = child.clone()
                if declaration is not None:
                    self._convert_recursively(copy, declaration.first(copy.name))
                arguments.add(copy)

        if len(arguments):
            script.insert(0, arguments)
        logger.debug(f"Bound {len(arguments)} argument(s)")

    @staticmethod
    def _convert_query(declaration: Optional[Node], name: str, value: str) -> object:
        if declaration is None:
            return value
        declared = declaration.first(name)
        if declared is None:
            raise UnknownArgumentError(name)
        type_tag = _declared_type(declared)
        # Query values are only accepted for declarations carrying a type.
        if type_tag is None:
            raise UnknownArgumentError(name)
        return convert(value, type_tag)

    def _convert_recursively(self, argument: Node, declaration: Optional[Node]) -> None:
        if declaration is None:
            raise UnknownArgumentError(argument.name)

        type_tag = _declared_type(declaration)
        if type_tag in PASSTHROUGH_TYPES:
            return

        if type_tag is not None and argument.value is not None:
            argument.value = convert(argument.value, type_tag)

        for child in argument:
            self._convert_recursively(child, declaration.first(child.name))


__all__ = ["ArgumentBinder", "detach_declaration"]
