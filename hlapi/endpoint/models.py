"""Request and response models exchanged with the transport layer."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from hlapi.core.node import Node


class Cookie(BaseModel):
    """Cookie an endpoint wants returned to the client."""

    name: str = Field(description="Cookie name")
    value: Optional[str] = Field(None, description="Cookie value")
    expires: Optional[datetime] = Field(None, description="Absolute expiration")
    http_only: bool = Field(False, description="Hide cookie from client scripts")
    secure: bool = Field(False, description="Only send cookie over HTTPS")
    domain: Optional[str] = None
    path: Optional[str] = None
    same_site: Optional[str] = Field(None, description="lax, strict or none")


class EndpointRequest(BaseModel):
    """A single inbound request, immutable for the duration of one dispatch.

    Attributes:
        url: Request URL without leading slash, e.g. ``magic/modules/foo``
        verb: Lower case HTTP verb
        query: Query parameters
        headers: Request headers
        cookies: Request cookies
        host: Host the request was addressed to
        scheme: URL scheme, http or https
        payload: Structured payload, or None if the request had no body
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    url: str
    verb: str = "get"
    query: Dict[str, str] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=dict)
    cookies: Dict[str, str] = Field(default_factory=dict)
    host: Optional[str] = None
    scheme: Optional[str] = None
    payload: Optional[Node] = None

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class EndpointResponse(BaseModel):
    """Response of one dispatch, mutated by the script through its ambient scope.

    Attributes:
        status_code: HTTP status code
        headers: Response headers
        cookies: Cookies to set on the client
        content: str, bytes, an open stream owned by the transport, a JSON
            compatible structure, or None for no content
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status_code: int = 200
    headers: Dict[str, str] = Field(default_factory=dict)
    cookies: List[Cookie] = Field(default_factory=list)
    content: Any = None

    def content_type(self) -> Optional[str]:
        """Case-insensitive lookup of the Content-Type header."""
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return None


__all__ = ["Cookie", "EndpointRequest", "EndpointResponse"]
