"""Pydantic schemas for Document endpoints."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class DocumentResponse(BaseModel):
    """Schema for a stored document row."""

    id: int
    claim_id: str
    file_name: str
    file_path: str
    uploaded_at: datetime

    model_config = {"from_attributes": True}


class DocumentAvailabilityResponse(DocumentResponse):
    """Document row annotated with the live state of its blob."""

    file_exists: bool
    url: Optional[str] = None


class StoredDocumentResponse(BaseModel):
    """Original name and storage location of a file accepted with a claim."""

    original_name: str = Field(..., alias="originalName")
    stored_path: str = Field(..., alias="storedPath")

    model_config = {"populate_by_name": True}
