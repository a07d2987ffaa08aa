"""Pydantic schemas for request/response validation."""
from expense_claims.schemas.claim import (
    ClaimCreate,
    ClaimResponse,
    ClaimStatusUpdate,
    ClaimSubmissionResponse,
)
from expense_claims.schemas.document import (
    DocumentResponse,
    DocumentAvailabilityResponse,
    StoredDocumentResponse,
)

__all__ = [
    # Claim schemas
    "ClaimCreate",
    "ClaimResponse",
    "ClaimStatusUpdate",
    "ClaimSubmissionResponse",
    # Document schemas
    "DocumentResponse",
    "DocumentAvailabilityResponse",
    "StoredDocumentResponse",
]
