"""Tests for database models."""
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from expense_claims.models import Claim, ClaimStatus, Document


def make_claim(claim_id: str = "CLM-2026-0001", **overrides) -> Claim:
    values = {
        "claim_id": claim_id,
        "employee_name": "Priya Raman",
        "employee_email": "priya.raman@gmail.com",
        "employee_id": "ATS0123",
        "department": "Engineering",
        "claim_date": date(2026, 10, 1),
        "amount": Decimal("1250.50"),
        "description": "Client visit travel",
        "type": "Travel",
    }
    values.update(overrides)
    return Claim(**values)


async def count_documents(db_session) -> int:
    result = await db_session.execute(select(func.count()).select_from(Document))
    return result.scalar_one()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_claim_model_defaults(db_session):
    """A new claim starts pending with both timestamps set."""
    claim = make_claim()
    db_session.add(claim)
    await db_session.commit()

    assert claim.status == ClaimStatus.PENDING.value
    assert claim.created_at is not None
    assert claim.updated_at is not None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_claim_id_is_unique(db_session, session_factory):
    db_session.add(make_claim())
    await db_session.commit()

    async with session_factory() as other:
        other.add(make_claim())
        with pytest.raises(IntegrityError):
            await other.commit()
        await other.rollback()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_documents_loaded_in_upload_order(db_session, session_factory):
    claim = make_claim()
    claim.documents = [
        Document(file_name="first.pdf", file_path="/uploads/a.pdf"),
        Document(file_name="second.png", file_path="/uploads/b.png"),
    ]
    db_session.add(claim)
    await db_session.commit()

    async with session_factory() as other:
        result = await other.execute(select(Claim).where(Claim.claim_id == "CLM-2026-0001"))
        loaded = result.scalar_one()

        assert [d.file_name for d in loaded.documents] == ["first.pdf", "second.png"]
        assert all(d.uploaded_at is not None for d in loaded.documents)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_document_file_path_is_unique(db_session):
    claim = make_claim()
    claim.documents = [
        Document(file_name="a.pdf", file_path="/uploads/same.pdf"),
        Document(file_name="b.pdf", file_path="/uploads/same.pdf"),
    ]
    db_session.add(claim)

    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_document_requires_existing_claim(db_session):
    db_session.add(Document(claim_id="CLM-2026-9999", file_name="a.pdf", file_path="/uploads/a.pdf"))

    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_deleting_claim_cascades_to_documents(db_session):
    claim = make_claim()
    claim.documents = [Document(file_name="a.pdf", file_path="/uploads/a.pdf")]
    db_session.add(claim)
    await db_session.commit()

    # Bulk delete bypasses the ORM cascade, so this exercises ON DELETE CASCADE
    await db_session.execute(delete(Claim).where(Claim.claim_id == "CLM-2026-0001"))
    await db_session.commit()

    assert await count_documents(db_session) == 0


@pytest.mark.unit
@pytest.mark.parametrize(
    "current, requested, allowed",
    [
        (ClaimStatus.PENDING, ClaimStatus.APPROVED, True),
        (ClaimStatus.PENDING, ClaimStatus.REJECTED, True),
        (ClaimStatus.PENDING, ClaimStatus.PENDING, False),
        (ClaimStatus.APPROVED, ClaimStatus.REJECTED, False),
        (ClaimStatus.APPROVED, ClaimStatus.APPROVED, False),
        (ClaimStatus.REJECTED, ClaimStatus.APPROVED, False),
    ],
)
def test_can_transition_to(current, requested, allowed):
    claim = make_claim(status=current.value)
    assert claim.can_transition_to(requested) is allowed
