"""Custom exception classes for the application."""
import enum
from typing import Any, Dict, Optional
from fastapi import status


class ErrorCode(str, enum.Enum):
    """Stable, client-facing error codes."""

    MISSING_FIELD = "MissingField"
    FIELD_TOO_LONG = "FieldTooLong"
    INVALID_EMPLOYEE_ID = "InvalidEmployeeId"
    INVALID_EMAIL = "InvalidEmail"
    INVALID_AMOUNT = "InvalidAmount"
    INVALID_DATE = "InvalidDate"
    NO_DOCUMENTS = "NoDocuments"
    TOO_MANY_DOCUMENTS = "TooManyDocuments"
    INVALID_STATUS = "InvalidStatus"
    UNSUPPORTED_TYPE = "UnsupportedType"
    TOO_LARGE = "TooLarge"
    NOT_FOUND = "NotFound"
    INVALID_STATUS_TRANSITION = "InvalidStatusTransition"
    SUBMISSION_FAILED = "SubmissionFailed"
    STORAGE_UNAVAILABLE = "StorageUnavailable"
    DATABASE_ERROR = "DatabaseError"


class ExpenseClaimsException(Exception):
    """Base exception class for the expense claims service."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code
            code: Stable error code reported to clients
            details: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ClaimValidationException(ExpenseClaimsException):
    """Raised when submitted claim fields fail a validation rule."""

    def __init__(self, code: ErrorCode, message: str, field: Optional[str] = None):
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field

        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            code=code,
            details=details,
        )


class FileProcessingException(ExpenseClaimsException):
    """Exception raised when an uploaded document is rejected."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        filename: Optional[str] = None,
        file_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize file processing exception.

        Args:
            message: File processing error message
            code: UnsupportedType or TooLarge
            filename: Name of file that failed processing
            file_type: Content type of the file
            details: Additional error details
        """
        error_details = details or {}
        if filename:
            error_details["filename"] = filename
        if file_type:
            error_details["file_type"] = file_type

        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            code=code,
            details=error_details,
        )


class ResourceNotFoundException(ExpenseClaimsException):
    """Exception raised when a requested resource is not found."""

    def __init__(self, resource_type: str, identifier: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize resource not found exception.

        Args:
            resource_type: Type of resource (e.g., "Claim", "Document")
            identifier: Identifier that was not found
            details: Additional error details
        """
        message = f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            code=ErrorCode.NOT_FOUND,
            details=details or {"resource_type": resource_type, "identifier": identifier},
        )


class InvalidStatusTransitionException(ExpenseClaimsException):
    """Raised when a review decision is applied to a claim that is no longer pending."""

    def __init__(self, claim_id: str, current_status: str, requested_status: str):
        super().__init__(
            message=f"Claim '{claim_id}' cannot move from '{current_status}' to '{requested_status}'",
            status_code=status.HTTP_409_CONFLICT,
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            details={
                "claim_id": claim_id,
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )


class SubmissionFailedException(ExpenseClaimsException):
    """Raised when a claim submission fails after validation passed."""

    def __init__(self, message: str = "Failed to submit claim", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code=ErrorCode.SUBMISSION_FAILED,
            details=details,
        )


class StorageUnavailableException(ExpenseClaimsException):
    """Raised when the database never became reachable during startup."""

    def __init__(self, attempts: int, details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        error_details["attempts"] = attempts

        super().__init__(
            message=f"Database unavailable after {attempts} attempt(s)",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code=ErrorCode.STORAGE_UNAVAILABLE,
            details=error_details,
        )
