"""Claims API endpoints."""
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from expense_claims.config import settings
from expense_claims.database import get_db
from expense_claims.schemas.claim import ClaimResponse, ClaimStatusUpdate, ClaimSubmissionResponse
from expense_claims.schemas.document import DocumentAvailabilityResponse
from expense_claims.services.claim_service import ClaimService, DocumentUpload
from expense_claims.services.document_service import DocumentService
from expense_claims.utils.document_store import DocumentStore, get_document_store
from expense_claims.utils.logging_config import get_logger
from expense_claims.utils.rate_limit import limiter

router = APIRouter(prefix="/claims", tags=["claims"])
logger = get_logger(__name__)


async def read_uploads(files: Optional[List[UploadFile]]) -> List[DocumentUpload]:
    """Buffer uploaded parts, skipping empty parts browsers send for unused inputs."""
    uploads = []
    for upload_file in files or []:
        content = await upload_file.read()
        if not upload_file.filename and not content:
            continue
        uploads.append(
            DocumentUpload(
                filename=upload_file.filename or "document",
                content_type=upload_file.content_type,
                content=content,
            )
        )
    return uploads


@router.post(
    "",
    response_model=ClaimSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.RATE_LIMIT_SUBMIT)
async def submit_claim(
    request: Request,
    emp_name: Optional[str] = Form(None, alias="empName"),
    emp_email: Optional[str] = Form(None, alias="empEmail"),
    emp_id: Optional[str] = Form(None, alias="empId"),
    department: Optional[str] = Form(None),
    claim_date: Optional[str] = Form(None, alias="claimDate"),
    amount: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    documents: Optional[List[UploadFile]] = File(None),
    db: AsyncSession = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    """
    Submit a reimbursement claim with its supporting documents.

    Accepts multipart form data with the claim fields and up to
    MAX_DOCUMENTS_PER_CLAIM PDF, JPEG or PNG files under `documents`.

    Returns:
        Claim identifier and stored documents
    """
    uploads = await read_uploads(documents)

    logger.info(
        "Claim submission received",
        extra={"extra_fields": {"employee_id": emp_id, "document_count": len(uploads)}}
    )

    fields = {
        "employee_name": emp_name,
        "employee_email": emp_email,
        "employee_id": emp_id,
        "department": department,
        "claim_date": claim_date,
        "amount": amount,
        "description": description,
        "type": type,
    }

    claim_service = ClaimService(db, store)
    return await claim_service.submit_claim(fields, uploads)


@router.get("", response_model=List[ClaimResponse])
async def list_claims(
    employee_id: Optional[str] = Query(default=None, description="Filter by employee ID"),
    claim_id: Optional[str] = Query(default=None, description="Filter by claim ID"),
    status: Optional[str] = Query(default=None, description="Filter by status"),
    db: AsyncSession = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    """
    List claims with their documents, newest first.

    All filters are optional and combined with AND.
    """
    claim_service = ClaimService(db, store)
    return await claim_service.list_claims(
        employee_id=employee_id, claim_id=claim_id, status=status
    )


@router.get("/{claim_id}/documents", response_model=List[DocumentAvailabilityResponse])
async def list_claim_documents(
    claim_id: str,
    db: AsyncSession = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    """
    List the documents of a claim.

    Each document carries `file_exists` and, when the file is present,
    the public `url` it is served under.

    Raises:
        ResourceNotFoundException: If the claim does not exist
    """
    document_service = DocumentService(db, store)
    return await document_service.list_documents(claim_id)


@router.patch("/{claim_id}", response_model=ClaimResponse)
async def update_claim_status(
    claim_id: str,
    body: ClaimStatusUpdate,
    db: AsyncSession = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    """
    Approve or reject a pending claim.

    Raises:
        ClaimValidationException: If the status is not approved or rejected
        ResourceNotFoundException: If the claim does not exist
        InvalidStatusTransitionException: If the claim was already decided
    """
    claim_service = ClaimService(db, store)
    return await claim_service.update_status(claim_id, body.status)
