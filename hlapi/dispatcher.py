"""HTTP dispatcher.

Entry point of the request pipeline. URLs starting with the API prefix are
resolved to endpoint scripts, composed with their interceptors, bound to the
caller's arguments and executed; everything else is served from the www
folder by the static/mixin file server.

Example:
    >>> from hlapi import HttpDispatcher, get_dispatcher_config
    >>>
    >>> dispatcher = HttpDispatcher.from_config(get_dispatcher_config(root_folder="files"))
    >>> response = await dispatcher.execute_get("magic/modules/foo")
    >>> response.content
    {'result': 'hello world'}
"""

import logging
from typing import Any, Dict, Mapping, Optional

from hlapi.config import DispatcherConfig
from hlapi.constants import HTTPVerbs, LogIcons
from hlapi.core import hyperlambda
from hlapi.core.node import Node
from hlapi.endpoint.arguments import ArgumentBinder
from hlapi.endpoint.executor import RequestExecutor
from hlapi.endpoint.interceptors import InterceptorComposer
from hlapi.endpoint.models import EndpointRequest, EndpointResponse
from hlapi.endpoint.resolver import EndpointResolver
from hlapi.endpoint.slots import create_default_registry
from hlapi.endpoint.static import MimeTypeRegistry, StaticFileServer, mime_types
from hlapi.exceptions import EndpointNotFoundError, UnauthorizedError
from hlapi.meta.reflector import EndpointReflector
from hlapi.signals import SlotRegistry
from hlapi.storage import ScriptStorageInterface, get_script_storage

logger = logging.getLogger(__name__)


class HttpDispatcher:
    """Dispatches requests to endpoint scripts and static files.

    The dispatcher holds no per-request state: every call parses its own
    copy of the script and gets its own signaler, so concurrent dispatches
    need no locking.
    """

    def __init__(
        self,
        storage: ScriptStorageInterface,
        config: Optional[DispatcherConfig] = None,
        registry: Optional[SlotRegistry] = None,
        mime_registry: Optional[MimeTypeRegistry] = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            storage: Script storage holding endpoints, interceptors and www files
            config: Dispatcher configuration, defaults to the built in defaults
            registry: Slots available to scripts, defaults to the endpoint slots
            mime_registry: MIME type table, defaults to the process wide table
        """
        self.config = config or DispatcherConfig()
        self.storage = storage
        self.registry = registry if registry is not None else create_default_registry()
        self.mime_types = mime_registry or mime_types

        self.resolver = EndpointResolver(storage, self.config.api_roots)
        self.composer = InterceptorComposer(
            storage, interceptor_file=self.config.interceptor_file
        )
        self.binder = ArgumentBinder()
        self.reflector = EndpointReflector(
            storage, self.config.api_roots, self.config.api_prefix
        )
        self.executor = RequestExecutor(
            self.registry,
            services={
                "storage": storage,
                "resolver": self.resolver,
                "reflector": self.reflector,
                "mime_types": self.mime_types,
            },
        )
        self.file_server = StaticFileServer(
            storage,
            self.composer,
            self.binder,
            self.executor,
            www_folder=self.config.www_folder,
            mime_registry=self.mime_types,
        )

    @classmethod
    def from_config(cls, config: DispatcherConfig, **kwargs: Any) -> "HttpDispatcher":
        """Create a dispatcher using local storage rooted at the configured folder."""
        storage = get_script_storage(root_dir=config.root_folder)
        return cls(storage, config, **kwargs)

    def _api_url(self, url: str) -> Optional[str]:
        url = url.lstrip("/")
        prefix = f"{self.config.api_prefix}/"
        if url.startswith(prefix):
            return url[len(prefix) :]
        return None

    async def execute(self, request: EndpointRequest) -> EndpointResponse:
        """Dispatch a request.

        Args:
            request: Inbound request, its URL relative to the server root

        Returns:
            The endpoint's response; 401 for URLs outside of the API folders
            and 404 for missing endpoints

        Raises:
            InvalidUrlError: If the URL contains illegal characters
            UnknownArgumentError: If an argument is not declared
            ArgumentConversionError: If an argument does not match its type
            MultipleDeclarationsError: If the endpoint declares several blocks
        """
        url = self._api_url(request.url)
        if url is None:
            request = request.model_copy(update={"url": request.url.lstrip("/")})
            return await self.file_server.serve(request)

        request = request.model_copy(update={"url": url})
        try:
            path = self.resolver.resolve_api(url, request.verb)
        except UnauthorizedError as e:
            logger.debug(f"Rejected {request.verb} {url}: {e.message}")
            return EndpointResponse(status_code=e.status_code)
        if path is None:
            logger.debug(f"No endpoint for {request.verb} {url}")
            return EndpointResponse(status_code=EndpointNotFoundError.status_code)

        script = hyperlambda.parse_script(await self.storage.read_async(path), path)
        script = await self.composer.apply(script, path)
        self.binder.bind(script, request.query, request.payload)

        response = await self.executor.execute(script, request)
        logger.debug(
            f"{LogIcons.SUCCESS} {request.verb.upper()} {url} -> {response.status_code}"
        )
        return response

    async def _execute_verb(
        self,
        verb: str,
        url: str,
        query: Optional[Mapping[str, str]] = None,
        payload: Optional[Node] = None,
        headers: Optional[Mapping[str, str]] = None,
        cookies: Optional[Mapping[str, str]] = None,
        **kwargs: Any,
    ) -> EndpointResponse:
        request = EndpointRequest(
            url=url,
            verb=verb,
            query=dict(query or {}),
            headers=dict(headers or {}),
            cookies=dict(cookies or {}),
            payload=payload,
            **kwargs,
        )
        return await self.execute(request)

    async def execute_get(self, url: str, query=None, **kwargs: Any) -> EndpointResponse:
        return await self._execute_verb(HTTPVerbs.GET, url, query, **kwargs)

    async def execute_delete(self, url: str, query=None, **kwargs: Any) -> EndpointResponse:
        return await self._execute_verb(HTTPVerbs.DELETE, url, query, **kwargs)

    async def execute_post(
        self, url: str, query=None, payload: Optional[Node] = None, **kwargs: Any
    ) -> EndpointResponse:
        return await self._execute_verb(HTTPVerbs.POST, url, query, payload, **kwargs)

    async def execute_put(
        self, url: str, query=None, payload: Optional[Node] = None, **kwargs: Any
    ) -> EndpointResponse:
        return await self._execute_verb(HTTPVerbs.PUT, url, query, payload, **kwargs)

    async def execute_patch(
        self, url: str, query=None, payload: Optional[Node] = None, **kwargs: Any
    ) -> EndpointResponse:
        return await self._execute_verb(HTTPVerbs.PATCH, url, query, payload, **kwargs)

    def get_info(self) -> Dict[str, Any]:
        """Summary of the dispatcher's configuration, used by the health route."""
        return {
            "api_prefix": self.config.api_prefix,
            "api_roots": list(self.config.api_roots),
            "www_folder": self.config.www_folder,
            "slots": len(self.registry.names()),
            "storage": self.storage.get_storage_info(),
        }


__all__ = ["HttpDispatcher"]
