"""Database models."""
from expense_claims.database import Base
from expense_claims.models.claim import Claim, ClaimStatus
from expense_claims.models.document import Document

__all__ = ["Base", "Claim", "ClaimStatus", "Document"]
