"""Claim model."""
import enum
from datetime import datetime, date, timezone
from typing import TYPE_CHECKING, List
from decimal import Decimal

from sqlalchemy import String, Text, DateTime, Date, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from expense_claims.database import Base

if TYPE_CHECKING:
    from expense_claims.models.document import Document


class ClaimStatus(str, enum.Enum):
    """Review states of an expense claim."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Allowed review decisions, keyed by current status
CLAIM_STATUS_TRANSITIONS = {
    ClaimStatus.PENDING: {ClaimStatus.APPROVED, ClaimStatus.REJECTED},
    ClaimStatus.APPROVED: set(),
    ClaimStatus.REJECTED: set(),
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Claim(Base):
    """Employee reimbursement claim."""

    __tablename__ = "claims"

    claim_id: Mapped[str] = mapped_column(String(20), primary_key=True)
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    employee_email: Mapped[str] = mapped_column(String(255), nullable=False)
    employee_id: Mapped[str] = mapped_column(String(7), nullable=False, index=True)
    department: Mapped[str] = mapped_column(String(255), nullable=False)
    claim_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ClaimStatus.PENDING.value,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    # Relationships
    documents: Mapped[List["Document"]] = relationship(
        "Document",
        back_populates="claim",
        cascade="all, delete-orphan",
        order_by="Document.id",
        lazy="selectin",
    )

    def can_transition_to(self, new_status: ClaimStatus) -> bool:
        """Return True if the claim may move from its current status to new_status."""
        return new_status in CLAIM_STATUS_TRANSITIONS.get(ClaimStatus(self.status), set())

    def __repr__(self) -> str:
        return f"<Claim(claim_id={self.claim_id}, employee_id={self.employee_id}, status={self.status})>"
