"""Storage provider interfaces."""

from .base import ScriptStorageInterface
from .local import LocalScriptStorage

__all__ = ["ScriptStorageInterface", "LocalScriptStorage"]
