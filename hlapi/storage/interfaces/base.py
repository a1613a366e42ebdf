"""Abstract base class for script storage providers.

This module defines the ScriptStorageInterface that every capability
provider must implement. The dispatcher never touches the file system
directly; it resolves, reads and lists endpoint files through this
interface, which keeps it testable and backend agnostic.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Dict, List

logger = logging.getLogger(__name__)


class ScriptStorageInterface(ABC):
    """Abstract base class for script storage backends.

    All paths are relative to the provider's root and use ``/`` as
    separator, e.g. ``modules/foo/bar.get.hl``. Folder paths are returned
    without a trailing slash.

    Implementations must handle:
        - Path validation relative to their storage root
        - Both synchronous and asynchronous reads
        - Sorted, deterministic listings

    Example:
        >>> class MyStorage(ScriptStorageInterface):
        ...     def exists(self, path):
        ...         # Implementation here
        ...         pass
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if a file exists.

        Args:
            path: Relative file path

        Returns:
            True if the path is an existing file, False otherwise
        """
        pass

    async def exists_async(self, path: str) -> bool:
        """Asynchronous variant of :meth:`exists`.

        Note:
            Default implementation delegates to the synchronous method.
        """
        return self.exists(path)

    @abstractmethod
    def read(self, path: str) -> str:
        """Read a text file.

        Args:
            path: Relative file path

        Returns:
            File content decoded as UTF-8

        Raises:
            FileNotFoundError: If the file does not exist
        """
        pass

    @abstractmethod
    async def read_async(self, path: str) -> str:
        """Asynchronous variant of :meth:`read`."""
        pass

    @abstractmethod
    def list_folders(self, path: str) -> List[str]:
        """List the immediate sub folders of a folder.

        Args:
            path: Relative folder path

        Returns:
            Sorted list of relative folder paths
        """
        pass

    @abstractmethod
    def list_files(self, path: str, suffix: str = "") -> List[str]:
        """List the files of a folder, optionally filtered by suffix.

        Args:
            path: Relative folder path
            suffix: Only return files whose name ends with this suffix

        Returns:
            Sorted list of relative file paths
        """
        pass

    @abstractmethod
    async def open_stream(self, path: str) -> BinaryIO:
        """Open a file for binary streaming.

        The caller owns the returned handle and is responsible for closing it.

        Args:
            path: Relative file path

        Returns:
            Open binary file object
        """
        pass

    def get_storage_info(self) -> Dict[str, Any]:
        """Get storage provider information (optional method).

        Returns:
            Dict with storage information

        Note:
            Default implementation returns basic info.
            Providers should override with specific details.
        """
        return {
            "provider": self.__class__.__name__,
            "supports_streaming": True,
        }
