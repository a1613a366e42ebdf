"""Configuration models for the hlapi dispatcher and server.

Every field can be populated either by its own name or by its ``HLAPI_*``
environment variable name, so ``get_dispatcher_config()`` can build a
configuration straight from the process environment.
"""

import os
from typing import Any, List

from pydantic import AliasChoices, BaseModel, Field, field_validator


def _env(name: str, env: str) -> AliasChoices:
    return AliasChoices(name, env)


class DispatcherConfig(BaseModel):
    """Configuration model for the hlapi dispatcher.

    Attributes:
        title: API title
        description: API description
        version: API version
        debug: Enable debug mode
        host: Server host address
        port: Server port number
        root_folder: Folder holding modules, system and www files
        api_prefix: First URL segment routed to endpoint scripts
        api_roots: Top level folders that may be resolved as endpoints
        www_folder: Folder static files and mixin pages are served from
        interceptor_file: File name of interceptor scripts
        log_level: Logging level
        cors_enabled: Enable CORS middleware
        cors_origins: Allowed CORS origins
    """

    # API Configuration
    title: str = "hlapi"
    description: str = "Script-per-endpoint API server"
    version: str = "1.0.0"
    debug: bool = Field(default=False, validation_alias=_env("debug", "HLAPI_DEBUG"))

    # Server Configuration
    host: str = Field(default="0.0.0.0", validation_alias=_env("host", "HLAPI_HOST"))
    port: int = Field(default=8000, validation_alias=_env("port", "HLAPI_PORT"))

    # Dispatch Configuration
    root_folder: str = Field(
        default="files", validation_alias=_env("root_folder", "HLAPI_ROOT_FOLDER")
    )
    api_prefix: str = Field(
        default="magic", validation_alias=_env("api_prefix", "HLAPI_API_PREFIX")
    )
    api_roots: List[str] = Field(
        default_factory=lambda: ["modules", "system"],
        validation_alias=_env("api_roots", "HLAPI_API_ROOTS"),
    )
    www_folder: str = Field(
        default="etc/www", validation_alias=_env("www_folder", "HLAPI_WWW_FOLDER")
    )
    interceptor_file: str = "interceptor.hl"

    # Logging Configuration
    log_level: str = Field(
        default="info", validation_alias=_env("log_level", "HLAPI_LOG_LEVEL")
    )

    # CORS Configuration
    cors_enabled: bool = True
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    cors_methods: List[str] = Field(default_factory=lambda: ["*"])
    cors_headers: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("api_roots", "cors_origins", mode="before")
    @classmethod
    def _split_comma_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("api_prefix", "www_folder")
    @classmethod
    def _strip_slashes(cls, value: str) -> str:
        return value.strip("/")


def get_dispatcher_config(**overrides: Any) -> DispatcherConfig:
    """Build a dispatcher configuration from the environment.

    Args:
        **overrides: Explicit values taking precedence over the environment

    Returns:
        DispatcherConfig instance

    Environment Variables:
        HLAPI_ROOT_FOLDER: Folder holding the application files (default: "files")
        HLAPI_API_PREFIX: URL prefix routed to endpoints (default: "magic")
        HLAPI_API_ROOTS: Comma-separated folders exposed as API (default: "modules,system")
        HLAPI_WWW_FOLDER: Folder for static files and mixin pages (default: "etc/www")
        HLAPI_HOST / HLAPI_PORT: Server address
        HLAPI_LOG_LEVEL: Logging level (default: "info")
        HLAPI_DEBUG: Enable debug mode
    """
    values = {
        key: value for key, value in os.environ.items() if key.startswith("HLAPI_")
    }
    values.update(overrides)
    return DispatcherConfig(**values)


__all__ = ["DispatcherConfig", "get_dispatcher_config"]
