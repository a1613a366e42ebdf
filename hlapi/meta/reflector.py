"""Endpoint meta-data reflection.

Walks the API folders of script storage and describes every endpoint file
it finds: URL, verb, declared arguments, authorisation, description, plus
whatever the registered classifier chain contributes. Nothing is cached,
every listing re-reads storage.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from hlapi.constants import Files, HTTPVerbs, LogIcons, NodeNames
from hlapi.core import hyperlambda
from hlapi.core.converter import to_text
from hlapi.core.node import Node
from hlapi.endpoint.resolver import EndpointResolver, is_legal_segment
from hlapi.storage import ScriptStorageInterface

from .classifiers import DEFAULT_CLASSIFIERS, Classifier
from .models import EndpointMetadata, ForeignKeyLookup, InputDescriptor

logger = logging.getLogger(__name__)

Parser = Callable[[str], Node]


def get_inputs(script: Node) -> List[InputDescriptor]:
    """Extract input descriptors from a script's declaration block."""
    declaration = script.first(NodeNames.ARGUMENTS)
    if declaration is None:
        return []
    return [
        InputDescriptor(
            name=node.name,
            type=to_text(node.value) if node.value is not None else None,
        )
        for node in declaration
    ]


def get_auth(script: Node) -> Optional[List[str]]:
    """Extract the roles allowed to invoke an endpoint.

    A verification node without roles allows any authenticated user, which
    is reported as ``*``. No verification node at all means no restriction.
    """
    roles: List[str] = []
    found = False
    for node in script.all(NodeNames.AUTH):
        found = True
        if node.value is not None:
            roles.extend(
                role.strip() for role in to_text(node.value).split(",") if role.strip()
            )
    if not found:
        return None
    return roles or ["*"]


def get_description(script: Node) -> Optional[str]:
    value = script.get(NodeNames.DESCRIPTION)
    return to_text(value) if value not in (None, "") else None


def attach_lookups(script: Node, inputs: List[InputDescriptor]) -> None:
    """Attach foreign key lookups from ``[.foreign-keys]`` to matching inputs."""
    foreign_keys = script.first(NodeNames.FOREIGN_KEYS)
    if foreign_keys is None:
        return
    by_name = {descriptor.name: descriptor for descriptor in inputs}
    for entry in foreign_keys:
        descriptor = by_name.get(to_text(entry.get("column", "")))
        if descriptor is None:
            continue
        descriptor.lookup = ForeignKeyLookup(
            table=to_text(entry.get("table")),
            key=to_text(entry.get("foreign_column")),
            name=to_text(entry.get("foreign_name")),
            long=bool(entry.get("long", False)),
        )


def parse_endpoint_filename(filename: str) -> Optional[Tuple[str, str]]:
    """Split ``<name>.<verb>.hl`` into (name, verb), or None if not an endpoint."""
    parts = filename.split(".")
    if len(parts) != 3 or f".{parts[2]}" != Files.SCRIPT_SUFFIX:
        return None
    name, verb = parts[0], parts[1]
    if verb not in HTTPVerbs.ALL or not is_legal_segment(name):
        return None
    return name, verb


class EndpointReflector:
    """Produces meta-data records for every endpoint in script storage."""

    def __init__(
        self,
        storage: ScriptStorageInterface,
        api_roots: Sequence[str] = ("modules", "system"),
        api_prefix: str = "magic",
        classifiers: Optional[List[Classifier]] = None,
        parser: Optional[Parser] = None,
    ) -> None:
        """Initialize the reflector.

        Args:
            storage: Script storage to walk
            api_roots: Top level folders to describe
            api_prefix: Prefix of the reported endpoint URLs
            classifiers: Classifier chain, defaults to the built in chain
            parser: Source to tree parser, defaults to the Hyperlambda parser
        """
        self.storage = storage
        self.api_roots = tuple(api_roots)
        self.api_prefix = api_prefix.strip("/")
        self.classifiers: List[Classifier] = list(
            DEFAULT_CLASSIFIERS if classifiers is None else classifiers
        )
        self.parser = parser or hyperlambda.parse
        self.resolver = EndpointResolver(storage, self.api_roots)

    def register_classifier(self, classifier: Classifier) -> Classifier:
        """Append a classifier to the chain. Usable as a decorator."""
        self.classifiers.append(classifier)
        return classifier

    async def list_endpoints(self) -> List[EndpointMetadata]:
        """Describe every endpoint below the API folders.

        A file that cannot be parsed or classified yields a record carrying
        an ``error`` field instead of aborting the listing.
        """
        records: List[EndpointMetadata] = []
        for root in self.api_roots:
            if is_legal_segment(root):
                await self._handle_folder(root, records)
        logger.info(f"{LogIcons.DISCOVERY} Reflected {len(records)} endpoint(s)")
        return records

    async def _handle_folder(self, folder: str, records: List[EndpointMetadata]) -> None:
        for path in self.storage.list_files(folder, Files.SCRIPT_SUFFIX):
            parsed = parse_endpoint_filename(path.rsplit("/", 1)[-1])
            if parsed is None:
                continue
            records.append(await self.describe(path, parsed[1]))

        for subfolder in self.storage.list_folders(folder):
            if not is_legal_segment(subfolder.rsplit("/", 1)[-1]):
                logger.debug(f"Skipping folder with illegal name: {subfolder}")
                continue
            await self._handle_folder(subfolder, records)

    def _url(self, path: str) -> str:
        url = path.rsplit(".", 2)[0]
        return f"{self.api_prefix}/{url}" if self.api_prefix else url

    async def describe(self, path: str, verb: str) -> EndpointMetadata:
        """Build the meta-data record of a single endpoint file.

        Args:
            path: Relative path of the endpoint file
            verb: Verb the file answers

        Returns:
            Meta-data record, with ``error`` set if the file is malformed
        """
        record = EndpointMetadata(path=self._url(path), verb=verb)
        try:
            script = hyperlambda.parse_script(
                await self.storage.read_async(path), path, self.parser
            )

            inputs = get_inputs(script)
            if verb in HTTPVerbs.MUTATING:
                attach_lookups(script, inputs)
            if inputs:
                record.input = inputs
            record.auth = get_auth(script)
            record.description = get_description(script)

            for classifier in self.classifiers:
                for key, value in classifier(script, verb, inputs).items():
                    setattr(record, key, value)
        except Exception as e:
            logger.warning(f"{LogIcons.WARNING} Could not describe {path}: {e}")
            record.error = str(e) or type(e).__name__
        return record

    async def get_arguments(self, url: str, verb: str) -> Optional[Node]:
        """Return the declaration block of a single endpoint.

        Args:
            url: Endpoint URL, with or without the API prefix
            verb: HTTP verb

        Returns:
            The ``[.arguments]`` node, or None if the endpoint declares none

        Raises:
            InvalidUrlError: If the URL contains illegal characters
            EndpointNotFoundError: If no such endpoint exists
        """
        url = url.strip("/")
        if self.api_prefix and url.startswith(f"{self.api_prefix}/"):
            url = url[len(self.api_prefix) + 1 :]
        path = self.resolver.require(url, verb)
        script = hyperlambda.parse_script(
            await self.storage.read_async(path), path, self.parser
        )
        declaration = script.first(NodeNames.ARGUMENTS)
        return declaration.untie() if declaration is not None else None


__all__ = [
    "EndpointReflector",
    "attach_lookups",
    "get_auth",
    "get_description",
    "get_inputs",
    "parse_endpoint_filename",
]
