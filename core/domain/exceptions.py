"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions. Each one carries a
machine-readable code that the (external) controller layer
maps onto its transport-level response.
"""
from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class NotFoundError(DomainException):
    """Base exception for absent licenses, approvals, templates or users."""

    def __init__(self, message: str = "Resource not found", code: str = "NOT_FOUND"):
        super().__init__(message, code=code)


class LicenseNotFoundError(NotFoundError):
    """Raised when a license is not found."""

    def __init__(self, message: str = "License not found"):
        super().__init__(message, code="LICENSE_NOT_FOUND")


class ApprovalNotFoundError(NotFoundError):
    """Raised when an approval request is not found."""

    def __init__(self, message: str = "Approval request not found"):
        super().__init__(message, code="APPROVAL_NOT_FOUND")


class TemplateNotFoundError(NotFoundError):
    """Raised when a license template is missing or inactive."""

    def __init__(self, message: str = "License template not found"):
        super().__init__(message, code="TEMPLATE_NOT_FOUND")


class UserNotFoundError(NotFoundError):
    """Raised when the user directory does not know a user."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message, code="USER_NOT_FOUND")


class PermissionDeniedError(DomainException):
    """Raised when the caller lacks the named owner capability."""

    def __init__(self, permission: str, message: Optional[str] = None):
        super().__init__(
            message or f"Insufficient permissions: {permission} not allowed",
            code="PERMISSION_DENIED",
        )
        self.permission = permission


class InvalidStateError(DomainException):
    """Raised when an operation is attempted from a state that forbids it."""

    def __init__(self, message: str = "Invalid state", code: str = "INVALID_STATE"):
        super().__init__(message, code=code)


class InvalidLicenseStatusError(InvalidStateError):
    """Raised when a license operation is invalid for the current status."""

    def __init__(self, message: str = "Invalid license status"):
        super().__init__(message, code="INVALID_LICENSE_STATUS")


class ApprovalNotPendingError(InvalidStateError):
    """Raised when resolving an approval that already left pending."""

    def __init__(self, message: str = "Approval request is not pending"):
        super().__init__(message, code="APPROVAL_NOT_PENDING")


class ApprovalExpiredError(InvalidStateError):
    """Raised when resolving a pending approval past its deadline."""

    def __init__(self, message: str = "Approval request has expired"):
        super().__init__(message, code="APPROVAL_EXPIRED")


class InvalidLicenseHierarchyError(InvalidStateError):
    """Raised when a parent assignment would create a cycle."""

    def __init__(self, message: str = "License hierarchy would contain a cycle"):
        super().__init__(message, code="INVALID_LICENSE_HIERARCHY")


class ValidationFailedError(DomainException):
    """Raised when a license fails the business validity check."""

    def __init__(
        self,
        message: str = "License validation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code="VALIDATION_FAILED")
        self.details = details or {}


class ConflictError(DomainException):
    """Base exception for uniqueness and concurrent-update conflicts."""

    def __init__(self, message: str = "Conflict", code: str = "CONFLICT"):
        super().__init__(message, code=code)


class DuplicateTemplateNameError(ConflictError):
    """Raised when a template name is already taken."""

    def __init__(self, message: str = "License template name already exists"):
        super().__init__(message, code="DUPLICATE_TEMPLATE_NAME")


class LicenseKeyConflictError(ConflictError):
    """Raised when no unique license key could be generated."""

    def __init__(self, message: str = "Could not generate a unique license key"):
        super().__init__(message, code="LICENSE_KEY_CONFLICT")


class ConcurrentModificationError(ConflictError):
    """Raised when a conditional update lost against a concurrent writer."""

    def __init__(self, message: str = "Record was modified concurrently"):
        super().__init__(message, code="CONCURRENT_MODIFICATION")
