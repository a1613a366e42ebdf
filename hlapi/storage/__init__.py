"""Script storage for hlapi.

The capability provider behind endpoint resolution: existence checks,
synchronous and asynchronous reads, folder and file listings, and binary
streams for static files.

Example:
    >>> from hlapi.storage import get_script_storage
    >>>
    >>> storage = get_script_storage(root_dir="/var/hlapi/files")
    >>> storage.exists("modules/foo.get.hl")
    True
"""

import logging
import os
from typing import Any, Dict, Optional

from hlapi.exceptions import PathTraversalError, StorageError

from .interfaces import LocalScriptStorage, ScriptStorageInterface

logger = logging.getLogger(__name__)

DEFAULT_ROOT_FOLDER = os.environ.get("HLAPI_ROOT_FOLDER", "files")

__all__ = [
    "get_script_storage",
    "ScriptStorageInterface",
    "LocalScriptStorage",
    "StorageError",
    "PathTraversalError",
    "DEFAULT_ROOT_FOLDER",
]


def get_script_storage(
    provider: Optional[str] = None,
    root_dir: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
    **kwargs: Any,
) -> ScriptStorageInterface:
    """Factory function to get a script storage interface.

    Provider can be specified via:
        1. provider parameter
        2. HLAPI_STORAGE_PROVIDER environment variable
        3. Default: "local"

    Args:
        provider: Storage provider type, currently only "local"
        root_dir: Root directory for local storage (convenience parameter)
        config: Provider-specific configuration dict. May include:
            Local:
                - root_dir: Root directory for files (default: HLAPI_ROOT_FOLDER)
                - create_root: Auto-create root directory (default: False)
        **kwargs: Additional provider-specific parameters

    Returns:
        ScriptStorageInterface implementation for the specified provider

    Raises:
        ValueError: If provider type is invalid
        StorageError: If provider initialization fails
    """
    provider = provider or os.getenv("HLAPI_STORAGE_PROVIDER", "local")
    provider = provider.lower() if provider else "local"

    config = config or {}
    config.update(kwargs)

    logger.info(f"Initializing script storage: provider={provider}")

    if provider == "local":
        local_root_dir = root_dir or config.get("root_dir", DEFAULT_ROOT_FOLDER)
        return LocalScriptStorage(
            root_dir=local_root_dir,
            create_root=config.get("create_root", False),
        )

    available = ["local"]
    raise ValueError(
        f"Unknown storage provider: '{provider}'. "
        f"Available providers: {', '.join(available)}"
    )
