"""Pydantic models describing discovered endpoints."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ForeignKeyLookup(BaseModel):
    """Where the legal values of an input column can be looked up."""

    table: str = Field(description="Table holding the referenced rows")
    key: str = Field(description="Referenced column")
    name: str = Field(description="Column holding a human readable name")
    long: bool = Field(False, description="Referenced table is too large for a drop down")


class InputDescriptor(BaseModel):
    """A single declared argument of an endpoint."""

    name: str
    type: Optional[str] = None
    lookup: Optional[ForeignKeyLookup] = None


class EndpointMetadata(BaseModel):
    """Meta-data record for one endpoint file.

    Classifiers may contribute fields beyond the ones declared here, which
    is why extra fields are allowed.
    """

    model_config = ConfigDict(extra="allow")

    path: str = Field(description="URL of the endpoint, including the API prefix")
    verb: str
    input: Optional[List[InputDescriptor]] = None
    auth: Optional[List[str]] = None
    description: Optional[str] = None
    type: Optional[str] = None
    produces: Optional[str] = None
    consumes: Optional[str] = None
    returns: Optional[Dict[str, Any]] = None
    array: Optional[bool] = None
    error: Optional[str] = Field(None, description="Why the file could not be described")


__all__ = ["EndpointMetadata", "ForeignKeyLookup", "InputDescriptor"]
