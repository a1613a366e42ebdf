"""Endpoint resolution: (URL, verb) to a validated endpoint file path."""

import logging
import re
from typing import Optional, Sequence

from hlapi.constants import Files, HTTPVerbs
from hlapi.exceptions import EndpointNotFoundError, InvalidUrlError, UnauthorizedError
from hlapi.storage import ScriptStorageInterface

logger = logging.getLogger(__name__)

# One optional leading dot supports hidden folders and files.
_SEGMENT = re.compile(r"\.?[A-Za-z0-9_-]+", re.ASCII)


def is_legal_segment(segment: str) -> bool:
    """Check if a single URL segment only contains legal characters."""
    return _SEGMENT.fullmatch(segment) is not None


def is_legal_url(url: str) -> bool:
    """Check if every segment of a URL is legal.

    Args:
        url: Slash separated URL, optionally with a leading slash

    Returns:
        True if the URL can safely be mapped to a file path
    """
    segments = url.lstrip("/").split("/")
    return all(is_legal_segment(segment) for segment in segments)


class EndpointResolver:
    """Maps URLs and verbs to endpoint files in script storage.

    Candidate files are named ``<url>.<verb>.hl`` relative to the storage
    root. Validation happens before the storage is consulted, so illegal
    URLs never reach the file system.
    """

    def __init__(
        self,
        storage: ScriptStorageInterface,
        api_roots: Sequence[str] = ("modules", "system"),
    ) -> None:
        """Initialize the resolver.

        Args:
            storage: Capability provider used for existence checks
            api_roots: Top level folders that may be resolved as API endpoints
        """
        self.storage = storage
        self.api_roots = tuple(api_roots)

    def endpoint_path(self, url: str, verb: str) -> str:
        """Build the relative endpoint file path for a URL and verb.

        Raises:
            InvalidUrlError: If any URL segment contains illegal characters
        """
        url = url.lstrip("/")
        if not is_legal_url(url):
            raise InvalidUrlError(url)
        return f"{url}.{verb.lower()}{Files.SCRIPT_SUFFIX}"

    def is_api_url(self, url: str) -> bool:
        """Check if a URL starts with one of the permitted top level folders."""
        url = url.lstrip("/")
        return any(url.startswith(f"{root}/") for root in self.api_roots)

    def resolve(self, url: str, verb: str) -> Optional[str]:
        """Resolve a URL and verb to an existing endpoint file.

        Args:
            url: URL relative to the storage root, e.g. ``modules/foo``
            verb: HTTP verb

        Returns:
            Relative file path, or None if no such endpoint exists

        Raises:
            InvalidUrlError: If the URL contains illegal characters
        """
        path = self.endpoint_path(url, verb)
        if verb.lower() not in HTTPVerbs.ALL:
            logger.debug(f"Unsupported verb '{verb}' for {url}")
            return None
        if not self.storage.exists(path):
            logger.debug(f"No endpoint file at {path}")
            return None
        return path

    def resolve_api(self, url: str, verb: str) -> Optional[str]:
        """Resolve an API URL, enforcing the permitted top level folders.

        Raises:
            UnauthorizedError: If the URL is outside of the permitted folders
            InvalidUrlError: If the URL contains illegal characters
        """
        if not self.is_api_url(url):
            raise UnauthorizedError(
                f"The URL '{url}' is not inside of an API folder",
                details={"url": url, "allowed": list(self.api_roots)},
            )
        return self.resolve(url, verb)

    def require(self, url: str, verb: str) -> str:
        """Resolve a URL and verb, failing if no endpoint exists.

        Raises:
            EndpointNotFoundError: If no endpoint file exists
        """
        path = self.resolve(url, verb)
        if path is None:
            raise EndpointNotFoundError(
                f"No endpoint found at '{url}' for verb '{verb}'",
                details={"url": url, "verb": verb},
            )
        return path


__all__ = ["EndpointResolver", "is_legal_segment", "is_legal_url"]
