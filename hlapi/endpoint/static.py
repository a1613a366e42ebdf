"""Static and mixin file serving.

Requests outside of the API prefix are served from the ``www`` folder of
script storage. HTML pages may have a Hyperlambda code-behind file next to
them (``index.html`` and ``index.hl``), in which case the page is rendered
dynamically by the ``io.file.mixin`` slot; any other file is streamed as is.
"""

import logging
import re
import threading
from typing import Dict, List, Optional, Tuple

from hlapi.constants import ContentTypes, Files, NodeNames
from hlapi.core import hyperlambda
from hlapi.core.node import Node
from hlapi.storage import ScriptStorageInterface

from .arguments import ArgumentBinder
from .executor import RequestExecutor
from .interceptors import InterceptorComposer
from .models import EndpointRequest, EndpointResponse

logger = logging.getLogger(__name__)

# File segments may contain dots, but never start with one.
_FILE_SEGMENT = re.compile(r"[A-Za-z0-9_-][A-Za-z0-9_.-]*", re.ASCII)

DEFAULT_MIME_TYPES: Dict[str, str] = {
    "json": "application/json",
    "css": "text/css",
    "txt": "text/plain",
    "js": "application/javascript",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "md": "text/markdown",
    "html": "text/html",
    "ico": "image/x-icon",
    "xml": "application/xml",
    "pdf": "application/pdf",
    "woff": "font/woff",
    "woff2": "font/woff2",
}


class MimeTypeRegistry:
    """Thread safe mapping from file extension to MIME type."""

    def __init__(self, defaults: Optional[Dict[str, str]] = None) -> None:
        self._lock = threading.Lock()
        self._types: Dict[str, str] = dict(
            DEFAULT_MIME_TYPES if defaults is None else defaults
        )

    def add(self, extension: str, mime_type: str) -> None:
        """Associate a file extension with a MIME type, replacing any existing one."""
        extension = extension.lstrip(".").lower()
        with self._lock:
            self._types[extension] = mime_type
        logger.debug(f"Registered MIME type {mime_type} for .{extension}")

    def get(self, extension: str, default: str = ContentTypes.OCTET_STREAM) -> str:
        with self._lock:
            return self._types.get(extension.lstrip(".").lower(), default)

    def list(self) -> List[Tuple[str, str]]:
        """Return a snapshot of all (extension, MIME type) associations."""
        with self._lock:
            return sorted(self._types.items())

    def for_path(self, path: str) -> str:
        """Return the MIME type of a file path, based on its extension."""
        filename = path.rsplit("/", 1)[-1]
        if "." not in filename:
            return ContentTypes.OCTET_STREAM
        return self.get(filename.rsplit(".", 1)[-1])


# Process wide table shared by all dispatchers.
mime_types = MimeTypeRegistry()


def is_legal_file_request(url: str) -> bool:
    """Check if a URL may be mapped to a file below the www folder.

    A trailing slash denotes a folder, the empty URL the www root.
    """
    url = url.lstrip("/")
    if not url:
        return True
    segments = url.split("/")
    if segments[-1] == "":
        segments = segments[:-1]
    return all(_FILE_SEGMENT.fullmatch(segment) for segment in segments)


def is_html_request(url: str) -> bool:
    """Check if a URL asks for an HTML page, explicitly or implicitly.

    Folder URLs, URLs ending in ``.html`` and URLs without a file extension
    are all HTML requests.
    """
    last = url.rsplit("/", 1)[-1]
    return last == "" or last.endswith(Files.HTML_SUFFIX) or "." not in last


class StaticFileServer:
    """Serves static files and mixin pages from the www folder."""

    def __init__(
        self,
        storage: ScriptStorageInterface,
        composer: InterceptorComposer,
        binder: ArgumentBinder,
        executor: RequestExecutor,
        www_folder: str = "etc/www",
        mime_registry: Optional[MimeTypeRegistry] = None,
    ) -> None:
        """Initialize the file server.

        Args:
            storage: Script storage holding the www folder
            composer: Interceptor composer applied to code-behind files
            binder: Argument binder for dynamic pages
            executor: Executor evaluating dynamic pages
            www_folder: Folder, relative to the storage root, files are served from
            mime_registry: Extension to MIME type table, defaults to the shared one
        """
        self.storage = storage
        self.composer = composer
        self.binder = binder
        self.executor = executor
        self.www_folder = www_folder.strip("/")
        self.mime_types = mime_registry or mime_types

    def _www_path(self, url: str) -> str:
        url = url.lstrip("/")
        return f"{self.www_folder}/{url}" if self.www_folder else url

    async def serve(self, request: EndpointRequest) -> EndpointResponse:
        """Serve a file request.

        Args:
            request: Request whose URL is relative to the www folder

        Returns:
            Response with an open stream, a rendered page, or a 404
        """
        if not is_legal_file_request(request.url):
            logger.debug(f"Illegal file request: {request.url}")
            return EndpointResponse(status_code=404, content="Not found")

        if is_html_request(request.url):
            return await self._serve_html(request)

        return await self._serve_static(self._www_path(request.url))

    async def resolve_html(self, url: str) -> Optional[str]:
        """Find the HTML file answering a URL.

        Folder URLs resolve to their ``index.html``, URLs without the
        ``.html`` suffix get it appended. If no such file exists, the folder
        hierarchy is walked upwards looking for a ``default.html`` page.

        Returns:
            Relative path of the HTML file, or None if nothing matches
        """
        url = url.lstrip("/")
        if url == "" or url.endswith("/"):
            url += Files.INDEX_PAGE
        elif not url.endswith(Files.HTML_SUFFIX):
            url += Files.HTML_SUFFIX

        path = self._www_path(url)
        if await self.storage.exists_async(path):
            return path

        segments = [segment for segment in url.split("/") if segment][:-1]
        while True:
            candidate = "/".join(segments + [Files.DEFAULT_PAGE])
            path = self._www_path(candidate)
            if await self.storage.exists_async(path):
                logger.debug(f"Resolved {url} to wildcard page {path}")
                return path
            if not segments:
                return None
            segments = segments[:-1]

    async def _serve_html(self, request: EndpointRequest) -> EndpointResponse:
        html_file = await self.resolve_html(request.url)
        if html_file is None:
            return EndpointResponse(status_code=404, content="Not found")

        codebehind = html_file[: -len(Files.HTML_SUFFIX)] + Files.SCRIPT_SUFFIX
        if await self.storage.exists_async(codebehind):
            return await self._serve_dynamic(request, html_file, codebehind)

        return await self._serve_static(html_file)

    async def _serve_dynamic(
        self, request: EndpointRequest, html_file: str, codebehind_file: str
    ) -> EndpointResponse:
        logger.debug(f"Rendering {html_file} with code-behind {codebehind_file}")
        codebehind = hyperlambda.parse_script(
            await self.storage.read_async(codebehind_file), codebehind_file
        )

        lambda_node = Node()
        lambda_node.add(Node(NodeNames.MIXIN, html_file, codebehind.children))

        lambda_node = await self.composer.apply(lambda_node, codebehind_file)
        self.binder.bind(lambda_node, request.query, request.payload)

        response = EndpointResponse(headers={"Content-Type": ContentTypes.HTML})
        return await self.executor.execute(lambda_node, request, response)

    async def _serve_static(self, path: str) -> EndpointResponse:
        if not await self.storage.exists_async(path):
            return EndpointResponse(status_code=404, content="Not found")

        stream = await self.storage.open_stream(path)
        return EndpointResponse(
            headers={"Content-Type": self.mime_types.for_path(path)},
            content=stream,
        )


__all__ = [
    "DEFAULT_MIME_TYPES",
    "MimeTypeRegistry",
    "StaticFileServer",
    "is_html_request",
    "is_legal_file_request",
    "mime_types",
]
