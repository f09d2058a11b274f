"""Core utilities for caching, logging, and errors."""

from .cache import LookupCache
from .exceptions import (
    APIError,
    AuditError,
    ClientError,
    InvalidInputError,
    NetworkError,
    ScannerError,
    ValidationError,
    VibeCheckError,
)
from .logging_config import ScanEventFormatter, configure_logging

__all__ = [
    # Cache
    "LookupCache",
    # Logging
    "configure_logging",
    "ScanEventFormatter",
    # Exceptions
    "VibeCheckError",
    "ValidationError",
    "InvalidInputError",
    "ScannerError",
    "AuditError",
    "ClientError",
    "NetworkError",
    "APIError",
]
