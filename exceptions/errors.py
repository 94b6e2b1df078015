"""
Custom exception classes for the application.

The parsing core never raises for bad input; these cover the API layer
and the collaborators (text acquisition, community alias store).
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "TEXT_EXTRACTION_FAILED")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# TEXT ACQUISITION
# ===================

class TextExtractionError(ValidationError):
    """File, PDF, image or page content could not be turned into text."""

    def __init__(
        self,
        source: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="TEXT_EXTRACTION_FAILED",
            message=message,
            details={"source": source, **(details or {})}
        )


class UnsupportedFileTypeError(ValidationError):
    """Uploaded file is neither text, PDF nor an image."""

    def __init__(self, filename: str, content_type: Optional[str] = None):
        super().__init__(
            code="UNSUPPORTED_FILE_TYPE",
            message="Upload a .txt, .pdf or image file",
            details={"filename": filename, "content_type": content_type}
        )


class ProxyNotConfiguredError(ValidationError):
    """Product page import requested without a proxy URL."""

    def __init__(self):
        super().__init__(
            code="PROXY_NOT_CONFIGURED",
            message=(
                "URL import requires a fetch proxy. Set PRODUCT_PAGE_PROXY_URL "
                "to the fetch-product-page function URL."
            )
        )


# ===================
# COMMUNITY ALIASES
# ===================

class AliasStoreError(ExternalServiceError):
    """Community alias store unavailable or rejected the request."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="alias_store",
            message=message,
            details=details
        )
