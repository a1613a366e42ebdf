"""
hlapi - Script-per-endpoint API dispatcher.

hlapi maps inbound HTTP requests to Hyperlambda script files on disk. Each
``<url>.<verb>.hl`` file is one API operation: it declares the arguments it
accepts, may be wrapped by interceptors in its ancestor folders, and is
evaluated with the request, response and result accumulator in scope.

Key Features:
- Endpoint resolution with strict URL validation
- Structural interceptor composition
- Declared argument binding with type conversion
- Content negotiation (JSON, Hyperlambda, text, binary, streams)
- Endpoint meta-data reflection with a pluggable classifier chain
- Static file and mixin page serving
- FastAPI/uvicorn HTTP surface

Main Exports (Import from top level):
    - HttpDispatcher: The request pipeline
    - DispatcherConfig / get_dispatcher_config: Configuration
    - Node: Script tree node
    - EndpointRequest / EndpointResponse: Dispatch models
    - EndpointReflector: Meta-data reflection
"""

from .config import DispatcherConfig, get_dispatcher_config
from .core import Node, hyperlambda
from .dispatcher import HttpDispatcher
from .endpoint import EndpointRequest, EndpointResponse
from .exceptions import HLAPIException
from .meta import EndpointMetadata, EndpointReflector

__version__ = "0.1.0"

__all__ = [
    "DispatcherConfig",
    "EndpointMetadata",
    "EndpointReflector",
    "EndpointRequest",
    "EndpointResponse",
    "HLAPIException",
    "HttpDispatcher",
    "Node",
    "get_dispatcher_config",
    "hyperlambda",
    "__version__",
]
