"""Document download endpoint."""
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from expense_claims.database import get_db
from expense_claims.services.document_service import DocumentService
from expense_claims.utils.document_store import DocumentStore, get_document_store

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("/{document_id}", response_class=FileResponse)
async def download_document(
    document_id: int,
    db: AsyncSession = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    """
    Stream a stored document.

    Raises:
        ResourceNotFoundException: If the document row or its file is missing
    """
    document_service = DocumentService(db, store)
    path, file_name = await document_service.get_document_file(document_id)
    return FileResponse(path, filename=file_name, content_disposition_type="inline")
