"""Document service layer for retrieving claim documents."""
from pathlib import Path
from typing import List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession

from expense_claims.exceptions import ResourceNotFoundException
from expense_claims.repositories.claim_repository import ClaimRepository
from expense_claims.repositories.document_repository import DocumentRepository
from expense_claims.schemas.document import DocumentAvailabilityResponse
from expense_claims.utils.document_store import DocumentStore
from expense_claims.utils.logging_config import bind_claim_context, get_logger

logger = get_logger(__name__)


class DocumentService:
    """Service layer for document lookups."""

    def __init__(self, db: AsyncSession, store: DocumentStore):
        """Initialize service with a database session and document store."""
        self.db = db
        self.store = store
        self.repository = DocumentRepository(db)
        self.claims = ClaimRepository(db)

    async def list_documents(self, claim_id: str) -> List[DocumentAvailabilityResponse]:
        """
        List a claim's documents with the live state of each blob.

        Args:
            claim_id: Claim identifier

        Returns:
            Documents annotated with file_exists and, when present, a public URL

        Raises:
            ResourceNotFoundException: If the claim does not exist
        """
        bind_claim_context(claim_id)
        claim = await self.claims.get_by_claim_id(claim_id)
        if not claim:
            raise ResourceNotFoundException("Claim", claim_id)

        documents = await self.repository.get_by_claim_id(claim_id)
        responses = []
        for document in documents:
            file_exists = self.store.exists(document.file_path)
            if not file_exists:
                logger.warning(
                    f"Document file missing for document {document.id}",
                    extra={"extra_fields": {"claim_id": claim_id, "file_path": document.file_path}}
                )
            responses.append(
                DocumentAvailabilityResponse(
                    id=document.id,
                    claim_id=document.claim_id,
                    file_name=document.file_name,
                    file_path=document.file_path,
                    uploaded_at=document.uploaded_at,
                    file_exists=file_exists,
                    url=self.store.public_url(document.file_path) if file_exists else None,
                )
            )
        return responses

    async def get_document_file(self, document_id: int) -> Tuple[Path, str]:
        """
        Locate the blob behind a document row.

        Returns:
            Tuple of (on-disk path, original file name)

        Raises:
            ResourceNotFoundException: If the row or its blob is missing
        """
        document = await self.repository.get_by_id(document_id)
        if not document:
            raise ResourceNotFoundException("Document", str(document_id))
        bind_claim_context(document.claim_id)

        return self.store.resolve(document.file_path), document.file_name
