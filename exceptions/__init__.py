"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ExternalServiceError,

    # Text acquisition
    TextExtractionError,
    UnsupportedFileTypeError,
    ProxyNotConfiguredError,

    # Community aliases
    AliasStoreError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ExternalServiceError",

    # Text acquisition
    "TextExtractionError",
    "UnsupportedFileTypeError",
    "ProxyNotConfiguredError",

    # Community aliases
    "AliasStoreError",
]
