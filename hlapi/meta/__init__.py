"""Endpoint meta-data reflection."""

from .classifiers import DEFAULT_CLASSIFIERS, Classifier
from .models import EndpointMetadata, ForeignKeyLookup, InputDescriptor
from .reflector import EndpointReflector

__all__ = [
    "Classifier",
    "DEFAULT_CLASSIFIERS",
    "EndpointMetadata",
    "EndpointReflector",
    "ForeignKeyLookup",
    "InputDescriptor",
]
