"""Claim service layer: submission workflow, listing and review decisions."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Sequence
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from expense_claims.config import settings
from expense_claims.exceptions import (
    ExpenseClaimsException,
    InvalidStatusTransitionException,
    ResourceNotFoundException,
    SubmissionFailedException,
)
from expense_claims.repositories.claim_repository import ClaimRepository, generate_claim_id
from expense_claims.repositories.document_repository import DocumentRepository
from expense_claims.schemas.claim import ClaimCreate, ClaimResponse, ClaimSubmissionResponse
from expense_claims.schemas.document import StoredDocumentResponse
from expense_claims.utils.claim_validation import validate_claim_submission, validate_status
from expense_claims.utils.document_store import DocumentStore, StoredDocument
from expense_claims.utils.logging_config import bind_claim_context, get_logger

logger = get_logger(__name__)


@dataclass
class DocumentUpload:
    """An uploaded file buffered in memory by the HTTP layer."""

    filename: str
    content_type: Optional[str]
    content: bytes


class ClaimService:
    """Service layer for claim business logic."""

    def __init__(self, db: AsyncSession, store: DocumentStore):
        """Initialize service with a database session and document store."""
        self.db = db
        self.store = store
        self.repository = ClaimRepository(db)
        self.documents = DocumentRepository(db)

    async def submit_claim(
        self,
        fields: Mapping[str, Any],
        uploads: Sequence[DocumentUpload],
        now: Optional[datetime] = None,
    ) -> ClaimSubmissionResponse:
        """
        Validate, store and persist a claim with its documents.

        Blobs are staged before any database write, the claim and its
        document rows are committed in one transaction, and the blobs are
        promoted only after the commit. Any failure removes every blob of
        the request.

        Args:
            fields: Raw claim fields keyed by model attribute name
            uploads: Files attached to the submission
            now: Submission time (defaults to current UTC time)

        Returns:
            Claim identifier and the stored documents

        Raises:
            ClaimValidationException: If a field rule fails
            FileProcessingException: If a document is rejected
            SubmissionFailedException: On any unexpected failure
        """
        now = now or datetime.now(timezone.utc)
        claim_data = validate_claim_submission(fields, len(uploads), now)

        staged: List[StoredDocument] = []
        try:
            for upload in uploads:
                staged.append(self.store.stage(upload.content, upload.filename, upload.content_type))

            claim_id = await self._persist(claim_data, staged, now)
            promoted = await self._promote(claim_id, staged)
        except ExpenseClaimsException:
            self._discard(staged)
            raise
        except Exception as e:
            logger.error(
                f"Claim submission failed: {str(e)}",
                exc_info=True,
                extra={"extra_fields": {
                    "employee_id": claim_data.employee_id,
                    "document_count": len(uploads),
                }}
            )
            await self.db.rollback()
            self._discard(staged)
            raise SubmissionFailedException() from e

        logger.info(
            f"Claim submitted: {claim_id}",
            extra={"extra_fields": {
                "claim_id": claim_id,
                "employee_id": claim_data.employee_id,
                "document_count": len(promoted),
            }}
        )
        return ClaimSubmissionResponse(
            claim_id=claim_id,
            documents=[
                StoredDocumentResponse(original_name=doc.original_name, stored_path=doc.path)
                for doc in promoted
            ],
        )

    async def _persist(
        self,
        claim_data: ClaimCreate,
        staged: Sequence[StoredDocument],
        now: datetime,
    ) -> str:
        """Insert the claim and its document rows in one transaction, retrying on id collisions."""
        max_attempts = settings.CLAIM_ID_MAX_ATTEMPTS
        for attempt in range(1, max_attempts + 1):
            claim_id = generate_claim_id(now)
            try:
                await self.repository.create(claim_id, claim_data, submitted_at=now)
                for doc in staged:
                    await self.documents.create(claim_id, doc.original_name, doc.path)
                await self.db.commit()
                bind_claim_context(claim_id)
                return claim_id
            except IntegrityError:
                await self.db.rollback()
                logger.warning(
                    f"Claim id collision on {claim_id} (attempt {attempt}/{max_attempts})",
                    extra={"extra_fields": {"claim_id": claim_id, "attempt": attempt}}
                )

        raise SubmissionFailedException(
            message="Could not allocate a unique claim id",
            details={"attempts": max_attempts},
        )

    async def _promote(self, claim_id: str, staged: Sequence[StoredDocument]) -> List[StoredDocument]:
        """Move committed blobs to their final location; undo the claim if that fails."""
        try:
            return [self.store.promote(doc) for doc in staged]
        except OSError as e:
            logger.error(
                f"Failed to promote documents of claim {claim_id}: {str(e)}",
                exc_info=True,
                extra={"extra_fields": {"claim_id": claim_id}}
            )
            await self.repository.delete(claim_id)
            await self.db.commit()
            raise SubmissionFailedException(details={"claim_id": claim_id}) from e

    def _discard(self, staged: Sequence[StoredDocument]) -> None:
        for doc in staged:
            self.store.discard(doc)

    async def list_claims(
        self,
        employee_id: Optional[str] = None,
        claim_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[ClaimResponse]:
        """
        List claims with their documents, newest first.

        Args:
            employee_id: Optional employee filter
            claim_id: Optional claim identifier filter
            status: Optional status filter

        Returns:
            List of claim responses
        """
        claims = await self.repository.list_claims(
            employee_id=employee_id, claim_id=claim_id, status=status
        )
        return [self.repository.to_response(claim) for claim in claims]

    async def update_status(self, claim_id: str, status: Any) -> ClaimResponse:
        """
        Record a review decision on a pending claim.

        Args:
            claim_id: Claim identifier
            status: Requested status (approved or rejected)

        Returns:
            Updated claim response

        Raises:
            ClaimValidationException: If the status is not approved or rejected
            ResourceNotFoundException: If the claim does not exist
            InvalidStatusTransitionException: If the claim is no longer pending
        """
        new_status = validate_status(status)
        bind_claim_context(claim_id)

        claim = await self.repository.get_by_claim_id(claim_id)
        if not claim:
            raise ResourceNotFoundException("Claim", claim_id)

        if not claim.can_transition_to(new_status):
            raise InvalidStatusTransitionException(claim_id, claim.status, new_status.value)

        previous_status = claim.status
        claim = await self.repository.update_status(claim, new_status)
        await self.db.commit()

        logger.info(
            f"Claim {claim_id} moved from {previous_status} to {new_status.value}",
            extra={"extra_fields": {
                "claim_id": claim_id,
                "previous_status": previous_status,
                "status": new_status.value,
            }}
        )
        return self.repository.to_response(claim)
