"""Service layer for business logic."""
from expense_claims.services.claim_service import ClaimService, DocumentUpload
from expense_claims.services.document_service import DocumentService

__all__ = [
    "ClaimService",
    "DocumentService",
    "DocumentUpload",
]
