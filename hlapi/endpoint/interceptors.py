"""Interceptor composition.

An interceptor is an ``interceptor.hl`` script in any ancestor folder of an
endpoint. It wraps every endpoint below its folder: the endpoint body is
spliced in wherever the interceptor contains an ``[.interceptor]`` marker.
The nearest interceptor wraps the endpoint first, each interceptor further
up wraps the result of the previous one.
"""

import logging
from typing import Callable, List, Optional

from hlapi.constants import Files, NodeNames
from hlapi.core import hyperlambda
from hlapi.core.node import Node
from hlapi.storage import ScriptStorageInterface

logger = logging.getLogger(__name__)

Parser = Callable[[str], Node]


def is_contract_node(node: Node) -> bool:
    """Check if a node belongs to the endpoint's contract.

    Contract nodes (declaration, description, type, authorisation and
    validators) are moved in front of the interceptor, so they still run
    before anything the interceptor does and stay visible to reflection.
    """
    return node.name in (
        NodeNames.ARGUMENTS,
        NodeNames.DESCRIPTION,
        NodeNames.TYPE,
        NodeNames.AUTH,
    ) or node.name.startswith(NodeNames.VALIDATORS_PREFIX)


def apply_interceptor(script: Node, interceptor: Node) -> Node:
    """Wrap a script with a single interceptor.

    Contract nodes are detached from the script and inserted at the top of
    the interceptor in their original order. A copy of the remaining script
    body is then inserted before every marker node in the interceptor, and
    the marker is removed.

    Args:
        script: Endpoint script (or the result of a previous wrap)
        interceptor: Parsed interceptor script, mutated in place

    Returns:
        The interceptor, which is now the root of the composed script
    """
    contract = [node for node in script if is_contract_node(node)]
    for node in reversed(contract):
        interceptor.insert(0, node)

    markers = [
        node for node in interceptor.descendants() if node.name == NodeNames.INTERCEPTOR
    ]
    for marker in markers:
        for node in script:
            marker.insert_before(node.clone())
        marker.untie()

    return interceptor


def ancestor_folders(path: str) -> List[str]:
    """List the folders containing a file, nearest first, ending with the root.

    Example:
        >>> ancestor_folders("modules/foo/bar.get.hl")
        ['modules/foo', 'modules', '']
    """
    segments = [segment for segment in path.split("/") if segment][:-1]
    folders = []
    while True:
        folders.append("/".join(segments))
        if not segments:
            return folders
        segments = segments[:-1]


class InterceptorComposer:
    """Applies every ancestor interceptor to an endpoint script."""

    def __init__(
        self,
        storage: ScriptStorageInterface,
        parser: Optional[Parser] = None,
        interceptor_file: str = Files.INTERCEPTOR,
    ) -> None:
        """Initialize the composer.

        Args:
            storage: Capability provider used to find and read interceptors
            parser: Source to tree parser, defaults to the Hyperlambda parser
            interceptor_file: File name of interceptor scripts
        """
        self.storage = storage
        self.parser = parser or hyperlambda.parse
        self.interceptor_file = interceptor_file

    def _interceptor_path(self, folder: str) -> str:
        return f"{folder}/{self.interceptor_file}" if folder else self.interceptor_file

    async def apply(self, script: Node, endpoint_path: str) -> Node:
        """Compose a script with all interceptors above its file.

        Args:
            script: Parsed endpoint script
            endpoint_path: Relative path of the endpoint file

        Returns:
            Composed script; the script itself if no interceptor exists
        """
        for folder in ancestor_folders(endpoint_path):
            path = self._interceptor_path(folder)
            if not await self.storage.exists_async(path):
                continue
            logger.debug(f"Applying interceptor {path} to {endpoint_path}")
            interceptor = hyperlambda.parse_script(
                await self.storage.read_async(path), path, self.parser
            )
            script = apply_interceptor(script, interceptor)
        return script


__all__ = [
    "InterceptorComposer",
    "ancestor_folders",
    "apply_interceptor",
    "is_contract_node",
]
