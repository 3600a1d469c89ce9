"""add_provisioning_claim_to_tenants

Add provisioning_started_at to tenants. It is set while a namespace build or
drop holds the tenant, so concurrent callers cannot start a second one.

Revision ID: 002_tenant_provisioning_claim
Revises: 001_control_plane_tenants
Create Date: 2026-10-17 15:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002_tenant_provisioning_claim'
down_revision: Union[str, None] = '001_control_plane_tenants'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA = 'control_plane'


def upgrade() -> None:
    """Apply the migration - add provisioning_started_at column."""
    op.add_column(
        'tenants',
        sa.Column('provisioning_started_at', sa.DateTime(timezone=True), nullable=True),
        schema=SCHEMA,
    )


def downgrade() -> None:
    """Reverse the migration - remove provisioning_started_at column."""
    op.drop_column('tenants', 'provisioning_started_at', schema=SCHEMA)
