"""Document repository for database operations."""
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from expense_claims.models.document import Document


class DocumentRepository:
    """Repository for Document model database operations."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def create(self, claim_id: str, file_name: str, file_path: str) -> Document:
        """
        Link a stored file to a claim.

        Args:
            claim_id: Owning claim identifier
            file_name: Client-supplied file name
            file_path: Server-side storage location

        Returns:
            Created Document object
        """
        document = Document(
            claim_id=claim_id,
            file_name=file_name,
            file_path=file_path,
        )

        self.db.add(document)
        await self.db.flush()
        return document

    async def get_by_id(self, document_id: int) -> Optional[Document]:
        """
        Get document by ID.

        Args:
            document_id: Document ID

        Returns:
            Document object or None if not found
        """
        result = await self.db.execute(select(Document).where(Document.id == document_id))
        return result.scalar_one_or_none()

    async def get_by_claim_id(self, claim_id: str) -> List[Document]:
        """
        Get all documents of a claim in upload order.

        Args:
            claim_id: Claim identifier

        Returns:
            List of Document objects
        """
        result = await self.db.execute(
            select(Document)
            .where(Document.claim_id == claim_id)
            .order_by(Document.id)
        )
        return list(result.scalars().all())
