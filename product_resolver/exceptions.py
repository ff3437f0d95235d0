"""
Custom exceptions for the product resolution engine.
Provides structured error handling with rich context for debugging and monitoring.

Shape mismatches in upstream payloads are never raised; only catalog access,
configuration and incomplete cart selections surface as exceptions.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for routing and handling."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Rich context for error tracking and debugging."""
    correlation_id: Optional[str] = None
    product_id: Optional[str] = None
    slug: Optional[str] = None
    url: Optional[str] = None
    status_code: Optional[int] = None
    field_name: Optional[str] = None
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    additional_data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert context to dictionary for logging."""
        return {
            "correlation_id": self.correlation_id,
            "product_id": self.product_id,
            "slug": self.slug,
            "url": self.url,
            "status_code": self.status_code,
            "field_name": self.field_name,
            "timestamp": self.timestamp,
            **self.additional_data,
        }


class ResolverError(Exception):
    """Base exception for all product resolution errors."""

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.NETWORK,
        retryable: bool = False,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable
        self.original_exception = original_exception

    def to_dict(self) -> dict:
        """Serialize exception for logging and monitoring."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "retryable": self.retryable,
            "context": self.context.to_dict(),
            "original_exception": str(self.original_exception) if self.original_exception else None,
        }


class CatalogFetchError(ResolverError):
    """Raised when the catalog API cannot be reached or answers with a server error."""

    def __init__(
        self,
        message: str,
        url: str,
        status_code: Optional[int] = None,
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
    ):
        ctx = context or ErrorContext()
        ctx.url = url
        ctx.status_code = status_code

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.NETWORK,
            retryable=True,
            original_exception=original_exception,
        )
        self.url = url
        self.status_code = status_code


class ProductNotFoundError(ResolverError):
    """Raised when the catalog has no product for the requested id."""

    def __init__(
        self,
        message: str,
        product_id: Optional[str],
        context: Optional[ErrorContext] = None,
    ):
        ctx = context or ErrorContext()
        ctx.product_id = product_id

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.NOT_FOUND,
            retryable=False,
        )
        self.product_id = product_id


class SelectionIncompleteError(ResolverError):
    """Raised when a cart line is requested before size and color are picked."""

    def __init__(
        self,
        message: str,
        product_id: str,
        missing: list[str],
        context: Optional[ErrorContext] = None,
    ):
        ctx = context or ErrorContext()
        ctx.product_id = product_id
        ctx.additional_data["missing"] = missing

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )
        self.missing = missing


class ConfigurationError(ResolverError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        config_key: str,
        context: Optional[ErrorContext] = None,
    ):
        ctx = context or ErrorContext()
        ctx.additional_data["config_key"] = config_key

        super().__init__(
            message=message,
            context=ctx,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
        )
        self.config_key = config_key
