"""
Error handling for the widget service.

This module provides the custom exception hierarchy, error categorization,
severity-aware logging, metrics integration and the FastAPI exception
handlers that turn service errors into JSON responses.
"""

import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.services.widget_metrics import get_widget_metrics
from app.utils.logger import add_request_context, get_logger

logger = get_logger(__name__)


class ErrorSeverity(str, Enum):
    """Error severity levels for categorization and alerting"""

    LOW = "low"  # Expected client mistakes, logging only
    MEDIUM = "medium"  # Important issues, monitoring alerts
    HIGH = "high"  # Critical issues, immediate attention
    CRITICAL = "critical"  # System-threatening issues


class ErrorCategory(str, Enum):
    """Error categories for systematic handling"""

    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SYSTEM = "system"


class ErrorContext:
    """Container for error context information"""

    def __init__(
        self,
        error: Exception,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        user_message: Optional[str] = None,
        technical_details: Optional[Dict[str, Any]] = None,
        widget_slug: Optional[str] = None,
        organization_id: Optional[str] = None,
    ):
        self.error = error
        self.severity = severity
        self.category = category
        self.user_message = user_message or self._generate_user_message()
        self.technical_details = technical_details or {}
        self.widget_slug = widget_slug
        self.organization_id = organization_id
        self.timestamp = datetime.now(timezone.utc)
        self.error_id = f"err_{int(self.timestamp.timestamp())}"

    def _generate_user_message(self) -> str:
        """Generate user-friendly error message based on error type"""
        if isinstance(self.error, WidgetServiceError):
            return str(self.error)

        user_messages = {
            "OperationalError": "The data store is temporarily unavailable. Please try again.",
            "ValidationError": "The provided data is invalid. Please check your input.",
        }
        return user_messages.get(
            type(self.error).__name__,
            "An unexpected error occurred. Please try again or contact support.",
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert error context to dictionary for logging/serialization"""
        return {
            "error_id": self.error_id,
            "timestamp": self.timestamp.isoformat(),
            "error_type": type(self.error).__name__,
            "error_message": str(self.error),
            "severity": self.severity.value,
            "category": self.category.value,
            "user_message": self.user_message,
            "technical_details": self.technical_details,
            "widget_slug": self.widget_slug,
            "organization_id": self.organization_id,
            "traceback": traceback.format_exc()
            if self.severity in [ErrorSeverity.HIGH, ErrorSeverity.CRITICAL]
            else None,
        }


# === Custom Exception Classes ===


class WidgetServiceError(Exception):
    """Base exception for widget service errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        technical_details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.severity = severity
        self.category = category
        self.technical_details = technical_details or {}


class NotFoundError(WidgetServiceError):
    """Base class for lookups that produced nothing"""

    status_code = 404

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.NOT_FOUND,
            **kwargs,
        )


class OrganizationNotFoundError(NotFoundError):
    """Raised when the organization behind a widget does not exist"""

    def __init__(self, organization_id: str):
        super().__init__(
            "Organization not found",
            technical_details={"organization_id": organization_id},
        )
        self.organization_id = organization_id


class WidgetNotFoundError(NotFoundError):
    """Raised when a slug is unknown, or inactive on the public path"""

    def __init__(self, slug: str, reason: str = "missing"):
        super().__init__(
            "Widget not found",
            technical_details={"slug": slug, "reason": reason},
        )
        self.slug = slug
        self.reason = reason


class CauseNotFoundError(NotFoundError):
    """Raised when a cause id does not belong to the widget"""

    def __init__(self, cause_id: str):
        super().__init__(
            "Cause not found", technical_details={"cause_id": cause_id}
        )


class ConfigurationValidationError(WidgetServiceError):
    """Raised when an editor submits an invalid widget configuration"""

    status_code = 422

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            **kwargs,
        )


class ConflictError(WidgetServiceError):
    """Base class for writes that clash with existing state"""

    status_code = 409

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.CONFLICT,
            **kwargs,
        )


class CauseLimitExceededError(ConflictError):
    """Raised when a widget already holds the maximum number of causes"""

    def __init__(self, limit: int):
        super().__init__(
            f"A widget can hold at most {limit} causes",
            technical_details={"limit": limit},
        )


class SlugConflictError(ConflictError):
    """Raised when a slug is already taken by another widget"""

    def __init__(self, slug: str):
        super().__init__(
            f"Slug '{slug}' is already in use", technical_details={"slug": slug}
        )


class WidgetAlreadyExistsError(ConflictError):
    """Raised when an organization already owns a widget"""

    def __init__(self, organization_id: str):
        super().__init__(
            "Organization already has a widget",
            technical_details={"organization_id": organization_id},
        )


# === Error Handler ===


class ErrorHandler:
    """Categorizes, logs and counts errors"""

    def __init__(self):
        self.metrics = get_widget_metrics()

    def handle_error(
        self, error: Exception, context: Optional[Dict[str, Any]] = None
    ) -> ErrorContext:
        """
        Handle an error with appropriate categorization, logging and metrics.

        Args:
            error: The exception that occurred
            context: Additional context information

        Returns:
            ErrorContext with detailed error information
        """
        context = context or {}
        error_context = self._categorize_error(error, context)
        self._log_error(error_context)
        self.metrics.increment_error_count(
            error_type=type(error).__name__,
            category=error_context.category.value,
            severity=error_context.severity.value,
        )
        return error_context

    def _categorize_error(
        self, error: Exception, context: Dict[str, Any]
    ) -> ErrorContext:
        """Categorize error and determine severity"""
        if isinstance(error, WidgetServiceError):
            return ErrorContext(
                error=error,
                severity=error.severity,
                category=error.category,
                technical_details={**error.technical_details, **context},
                widget_slug=context.get("widget_slug"),
                organization_id=context.get("organization_id"),
            )

        error_mappings = {
            ValueError: (ErrorSeverity.LOW, ErrorCategory.VALIDATION),
            KeyError: (ErrorSeverity.LOW, ErrorCategory.VALIDATION),
            PermissionError: (ErrorSeverity.HIGH, ErrorCategory.AUTHORIZATION),
            ConnectionError: (ErrorSeverity.HIGH, ErrorCategory.DATABASE),
        }
        severity, category = error_mappings.get(
            type(error), (ErrorSeverity.HIGH, ErrorCategory.SYSTEM)
        )
        return ErrorContext(
            error=error,
            severity=severity,
            category=category,
            technical_details=context,
            widget_slug=context.get("widget_slug"),
            organization_id=context.get("organization_id"),
        )

    def _log_error(self, error_context: ErrorContext):
        """Log error with appropriate level and context"""
        log_data = {
            "error_id": error_context.error_id,
            "error_type": type(error_context.error).__name__,
            "category": error_context.category.value,
            "severity": error_context.severity.value,
            "technical_details": error_context.technical_details,
        }

        if error_context.severity == ErrorSeverity.CRITICAL:
            logger.critical(error_context.user_message, **log_data, exc_info=True)
        elif error_context.severity == ErrorSeverity.HIGH:
            logger.error(error_context.user_message, **log_data, exc_info=True)
        elif error_context.severity == ErrorSeverity.MEDIUM:
            logger.warning(error_context.user_message, **log_data)
        else:
            logger.info(error_context.user_message, **log_data)


# === Global Error Handler Instance ===

error_handler = ErrorHandler()


def create_error_response(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Create standardized error response for APIs"""
    error_context = error_handler.handle_error(error, context)
    status_code = getattr(error, "status_code", 500)

    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content={
            "error": {
                "id": error_context.error_id,
                "message": error_context.user_message,
                "category": error_context.category.value,
                "severity": error_context.severity.value,
                "timestamp": error_context.timestamp.isoformat(),
            }
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the service error handler to a FastAPI app."""

    @app.exception_handler(WidgetServiceError)
    async def _widget_service_error(
        request: Request, exc: WidgetServiceError
    ) -> JSONResponse:
        return create_error_response(exc, add_request_context(request))
