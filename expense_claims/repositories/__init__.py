"""Repository layer for database operations."""
from expense_claims.repositories.claim_repository import ClaimRepository, generate_claim_id
from expense_claims.repositories.document_repository import DocumentRepository

__all__ = [
    "ClaimRepository",
    "DocumentRepository",
    "generate_claim_id",
]
