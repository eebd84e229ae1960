"""Shared type definitions for the verification core."""

from .base import CamelModel, StrictBaseModel
from .exceptions import (
    ConfigError,
    EncodingMismatch,
    GenerationError,
    MethodNotFound,
    MethodNotImplemented,
    MirrorEntityNotFound,
    SutError,
    TckError,
    TransportError,
)

__all__ = [
    # Models
    "CamelModel",
    "StrictBaseModel",
    # Exceptions
    "TckError",
    "GenerationError",
    "ConfigError",
    "EncodingMismatch",
    "MirrorEntityNotFound",
    "TransportError",
    "SutError",
    "MethodNotFound",
    "MethodNotImplemented",
]
