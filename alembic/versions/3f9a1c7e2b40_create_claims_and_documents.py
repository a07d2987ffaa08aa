"""create_claims_and_documents

Revision ID: 3f9a1c7e2b40
Revises: 
Create Date: 2026-10-17 09:12:44.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9a1c7e2b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create claims and documents tables."""

    op.create_table(
        'claims',
        sa.Column('claim_id', sa.String(length=20), primary_key=True),
        sa.Column('employee_name', sa.String(length=255), nullable=False),
        sa.Column('employee_email', sa.String(length=255), nullable=False),
        sa.Column('employee_id', sa.String(length=7), nullable=False),
        sa.Column('department', sa.String(length=255), nullable=False),
        sa.Column('claim_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # Lookups by employee and by review status; listing sorts on created_at
    op.create_index('ix_claims_employee_id', 'claims', ['employee_id'], unique=False)
    op.create_index('ix_claims_status', 'claims', ['status'], unique=False)
    op.create_index('ix_claims_created_at', 'claims', ['created_at'], unique=False)

    op.create_table(
        'documents',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('claim_id', sa.String(length=20), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['claim_id'], ['claims.claim_id'], ondelete='CASCADE'),
        sa.UniqueConstraint('file_path', name='uq_documents_file_path'),
    )
    op.create_index('ix_documents_claim_id', 'documents', ['claim_id'], unique=False)


def downgrade() -> None:
    """Drop claims and documents tables."""

    op.drop_index('ix_documents_claim_id', table_name='documents')
    op.drop_table('documents')

    op.drop_index('ix_claims_created_at', table_name='claims')
    op.drop_index('ix_claims_status', table_name='claims')
    op.drop_index('ix_claims_employee_id', table_name='claims')
    op.drop_table('claims')
