"""Claim repository for database operations."""
import random
from datetime import datetime, timezone
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from expense_claims.models.claim import Claim, ClaimStatus
from expense_claims.schemas.claim import ClaimCreate, ClaimResponse


def generate_claim_id(now: Optional[datetime] = None) -> str:
    """
    Build a candidate claim identifier: CLM-<year>-<4 random digits>.

    Uniqueness is enforced by the primary key, not here.
    """
    now = now or datetime.now(timezone.utc)
    return f"CLM-{now.year}-{random.randint(0, 9999):04d}"


class ClaimRepository:
    """Repository for Claim model database operations."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def create(
        self,
        claim_id: str,
        claim_data: ClaimCreate,
        submitted_at: Optional[datetime] = None,
    ) -> Claim:
        """
        Insert a new pending claim.

        Args:
            claim_id: Generated claim identifier
            claim_data: Validated claim fields
            submitted_at: Submission time used for both timestamps

        Returns:
            Created Claim object

        Raises:
            IntegrityError: If the claim_id is already taken
        """
        submitted_at = submitted_at or datetime.now(timezone.utc)
        claim = Claim(
            claim_id=claim_id,
            employee_name=claim_data.employee_name,
            employee_email=claim_data.employee_email,
            employee_id=claim_data.employee_id,
            department=claim_data.department,
            claim_date=claim_data.claim_date,
            amount=claim_data.amount,
            description=claim_data.description,
            type=claim_data.type,
            status=ClaimStatus.PENDING.value,
            created_at=submitted_at,
            updated_at=submitted_at,
        )

        self.db.add(claim)
        await self.db.flush()
        return claim

    async def get_by_claim_id(self, claim_id: str) -> Optional[Claim]:
        """
        Get claim by claim_id, with its documents loaded.

        Args:
            claim_id: Claim identifier

        Returns:
            Claim object or None if not found
        """
        result = await self.db.execute(select(Claim).where(Claim.claim_id == claim_id))
        return result.scalar_one_or_none()

    async def list_claims(
        self,
        employee_id: Optional[str] = None,
        claim_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Claim]:
        """
        List claims matching every given filter, newest first.

        Args:
            employee_id: Only claims of this employee
            claim_id: Only the claim with this identifier
            status: Only claims in this status

        Returns:
            List of Claim objects with documents loaded
        """
        query = select(Claim)
        if employee_id:
            query = query.where(Claim.employee_id == employee_id)
        if claim_id:
            query = query.where(Claim.claim_id == claim_id)
        if status:
            query = query.where(Claim.status == status)

        result = await self.db.execute(query.order_by(Claim.created_at.desc()))
        return list(result.scalars().all())

    async def update_status(self, claim: Claim, new_status: ClaimStatus) -> Claim:
        """
        Overwrite a claim's status and refresh updated_at.

        Transition rules are checked by the service layer.

        Args:
            claim: Claim to update
            new_status: Status to set

        Returns:
            Updated Claim object
        """
        claim.status = new_status.value
        claim.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        return claim

    async def delete(self, claim_id: str) -> bool:
        """
        Delete a claim together with its documents.

        Args:
            claim_id: Claim identifier

        Returns:
            True if deleted, False if not found
        """
        claim = await self.get_by_claim_id(claim_id)
        if not claim:
            return False

        await self.db.delete(claim)
        await self.db.flush()
        return True

    def to_response(self, claim: Claim) -> ClaimResponse:
        """
        Convert Claim model to ClaimResponse schema.

        Args:
            claim: Claim model with documents loaded

        Returns:
            ClaimResponse schema
        """
        return ClaimResponse.model_validate(claim)
