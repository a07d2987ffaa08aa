"""Pydantic schemas for Claim endpoints."""
from datetime import datetime, date
from typing import Any, List
from decimal import Decimal
from pydantic import BaseModel, Field

from expense_claims.schemas.document import DocumentResponse, StoredDocumentResponse


class ClaimCreate(BaseModel):
    """Validated claim fields ready to be persisted."""

    employee_name: str = Field(..., min_length=1, max_length=255)
    employee_email: str = Field(..., min_length=1, max_length=255)
    employee_id: str = Field(..., min_length=7, max_length=7, description="ATS employee identifier")
    department: str = Field(..., min_length=1, max_length=255)
    claim_date: date = Field(..., description="Date the expense was incurred")
    amount: Decimal = Field(..., gt=0, description="Amount to be reimbursed")
    description: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1, max_length=100, description="Expense category")

    model_config = {"from_attributes": True}


class ClaimResponse(BaseModel):
    """Schema for claim response, including its documents."""

    claim_id: str
    employee_name: str
    employee_email: str
    employee_id: str
    department: str
    claim_date: date
    amount: Decimal
    description: str
    type: str
    status: str
    created_at: datetime
    updated_at: datetime
    documents: List[DocumentResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ClaimStatusUpdate(BaseModel):
    """Body of a review decision."""

    status: Any = Field(None, description="New status: approved or rejected")


class ClaimSubmissionResponse(BaseModel):
    """Schema returned after a claim was submitted."""

    message: str = "Claim submitted successfully"
    claim_id: str = Field(..., alias="claimId")
    documents: List[StoredDocumentResponse]

    model_config = {"populate_by_name": True}
