"""Local filesystem storage implementation.

This module provides a local filesystem-based implementation of the
ScriptStorageInterface, used to resolve endpoint scripts, interceptors
and static files from a root folder on disk.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, BinaryIO, Dict, List

from hlapi.exceptions import PathTraversalError, StorageError

from .base import ScriptStorageInterface

logger = logging.getLogger(__name__)


class LocalScriptStorage(ScriptStorageInterface):
    """Local filesystem storage implementation.

    Features:
        - Async I/O using asyncio.to_thread()
        - Path traversal prevention relative to the root directory
        - Sorted listings using ``/`` separated relative paths

    Args:
        root_dir: Root directory holding the application files
        create_root: Automatically create root directory if missing (default: False)

    Example:
        >>> storage = LocalScriptStorage(root_dir="/var/hlapi/files")
        >>> storage.exists("modules/foo.get.hl")
        True
    """

    def __init__(self, root_dir: str = "files", create_root: bool = False):
        """Initialize local script storage.

        Args:
            root_dir: Root directory for application files
            create_root: Create root directory if it doesn't exist
        """
        self.root_dir = Path(root_dir).resolve()

        if create_root:
            self.root_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Local script storage initialized at: {self.root_dir}")

        if not self.root_dir.is_dir():
            raise StorageError(
                f"Root directory does not exist: {self.root_dir}",
                details={"provider": "local", "operation": "init"},
            )

    def _get_full_path(self, path: str) -> Path:
        """Get and validate full filesystem path.

        Args:
            path: Relative path

        Returns:
            Validated absolute Path object

        Raises:
            PathTraversalError: If path escapes root directory
        """
        full_path = self.root_dir / path.lstrip("/")

        # resolve() also catches symlinks pointing outside the root
        try:
            full_path.resolve().relative_to(self.root_dir)
        except (ValueError, RuntimeError):
            logger.error(f"Path escape attempt blocked: {path}")
            raise PathTraversalError(
                "Path escapes root directory", details={"path": path}
            )

        return full_path

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.root_dir).as_posix()

    def exists(self, path: str) -> bool:
        return self._get_full_path(path).is_file()

    async def exists_async(self, path: str) -> bool:
        full_path = self._get_full_path(path)
        return await asyncio.to_thread(full_path.is_file)

    def read(self, path: str) -> str:
        return self._get_full_path(path).read_text(encoding="utf-8")

    async def read_async(self, path: str) -> str:
        full_path = self._get_full_path(path)
        return await asyncio.to_thread(full_path.read_text, encoding="utf-8")

    def list_folders(self, path: str) -> List[str]:
        full_path = self._get_full_path(path)
        if not full_path.is_dir():
            return []
        return sorted(self._relative(idx) for idx in full_path.iterdir() if idx.is_dir())

    def list_files(self, path: str, suffix: str = "") -> List[str]:
        full_path = self._get_full_path(path)
        if not full_path.is_dir():
            return []
        return sorted(
            self._relative(idx)
            for idx in full_path.iterdir()
            if idx.is_file() and idx.name.endswith(suffix)
        )

    async def open_stream(self, path: str) -> BinaryIO:
        full_path = self._get_full_path(path)
        logger.debug(f"Opening stream: {path}")
        return await asyncio.to_thread(full_path.open, "rb")

    def get_storage_info(self) -> Dict[str, Any]:
        info = super().get_storage_info()
        info["root_dir"] = str(self.root_dir)
        return info
