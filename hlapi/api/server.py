"""FastAPI application and server for hlapi.

Every request that is not a built in route is handed to the
:class:`HttpDispatcher`, which either executes an endpoint script or serves
a file from the www folder.

Example:
    ```python
    from hlapi.api import EndpointServer
    from hlapi.config import get_dispatcher_config

    server = EndpointServer(get_dispatcher_config(root_folder="./files"))

    if __name__ == "__main__":
        server.run()
    ```
"""

import logging
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.background import BackgroundTasks

from hlapi.config import DispatcherConfig, get_dispatcher_config
from hlapi.constants import HTTPVerbs, LogIcons
from hlapi.dispatcher import HttpDispatcher
from hlapi.exceptions import HLAPIException

from .components.error_handler import APIErrorHandler
from .components.logging_config import configure_logging
from .request_handlers import build_endpoint_request
from .response_handlers import to_http_response

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[DispatcherConfig] = None,
    dispatcher: Optional[HttpDispatcher] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Server and dispatcher configuration, read from the
            environment if omitted
        dispatcher: Dispatcher to route requests to, built from the
            configuration if omitted

    Returns:
        Configured FastAPI application
    """
    config = config or get_dispatcher_config()
    dispatcher = dispatcher or HttpDispatcher.from_config(config)

    app = FastAPI(
        title=config.title,
        description=config.description,
        version=config.version,
        debug=config.debug,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.dispatcher = dispatcher

    if config.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_methods=config.cors_methods,
            allow_headers=config.cors_headers,
            allow_credentials=True,
        )

    app.add_exception_handler(HLAPIException, APIErrorHandler.handle_exception)
    app.add_exception_handler(Exception, APIErrorHandler.handle_exception)

    @app.get("/health", response_model=None)
    async def health_check() -> Dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": config.title,
            "version": config.version,
            "dispatcher": dispatcher.get_info(),
        }

    @app.api_route(
        "/{url:path}",
        methods=[verb.upper() for verb in HTTPVerbs.ALL],
        response_model=None,
    )
    async def dispatch(request: Request, url: str) -> Response:
        try:
            endpoint_request = await build_endpoint_request(request, url)
            response = await dispatcher.execute(endpoint_request)
        except Exception:
            await request.close()
            raise
        http_response = to_http_response(response)
        close_request_after(http_response, request)
        return http_response

    return app


def close_request_after(http_response: Response, request: Request) -> None:
    """Release the request's parsed form, and its uploaded files, once sent.

    Runs after any background task the response already carries, so streamed
    content is closed first.
    """
    tasks = BackgroundTasks()
    if http_response.background is not None:
        tasks.add_task(http_response.background)
    tasks.add_task(request.close)
    http_response.background = tasks


class EndpointServer:
    """Runs the hlapi FastAPI application with uvicorn."""

    def __init__(
        self: "EndpointServer",
        config: Optional[DispatcherConfig] = None,
        dispatcher: Optional[HttpDispatcher] = None,
    ) -> None:
        """Initialize the server.

        Args:
            config: Server configuration, read from the environment if omitted
            dispatcher: Dispatcher to use, built from the configuration if omitted
        """
        self.config = config or get_dispatcher_config()
        self.dispatcher = dispatcher
        self.app: Optional[FastAPI] = None

    def get_app(self: "EndpointServer") -> FastAPI:
        """Get the FastAPI application instance, creating it on first use."""
        if self.app is None:
            self.app = create_app(self.config, self.dispatcher)
        return self.app

    def run(
        self: "EndpointServer",
        host: Optional[str] = None,
        port: Optional[int] = None,
        **uvicorn_kwargs: Any,
    ) -> None:
        """Run the server using uvicorn.

        Args:
            host: Override host address
            port: Override port number
            **uvicorn_kwargs: Additional uvicorn parameters
        """
        configure_logging(self.config.log_level)

        run_host = host or self.config.host
        run_port = port or self.config.port

        logger.info(f"{LogIcons.START} Server starting at http://{run_host}:{run_port}")
        logger.info(
            f"{LogIcons.STORAGE} Serving scripts from {self.config.root_folder}, "
            f"API prefix /{self.config.api_prefix}"
        )

        uvicorn.run(
            self.get_app(),
            host=run_host,
            port=run_port,
            log_level=self.config.log_level,
            **uvicorn_kwargs,
        )

    async def run_async(
        self: "EndpointServer",
        host: Optional[str] = None,
        port: Optional[int] = None,
        **uvicorn_kwargs: Any,
    ) -> None:
        """Run the server inside an already running event loop."""
        configure_logging(self.config.log_level)
        config = uvicorn.Config(
            self.get_app(),
            host=host or self.config.host,
            port=port or self.config.port,
            log_level=self.config.log_level,
            **uvicorn_kwargs,
        )
        await uvicorn.Server(config).serve()


def main() -> None:
    """Console entry point: serve the configured root folder."""
    EndpointServer().run()


__all__ = ["EndpointServer", "create_app", "main"]
