"""Create control plane schema and tenant registry

Revision ID: 001_control_plane_tenants
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_control_plane_tenants'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA = 'control_plane'


def upgrade() -> None:
    """
    Create the tenant registry.

    Tenant namespaces are not created here; the schema provisioner builds
    them when a tenant is registered.
    """
    op.execute(f'CREATE SCHEMA IF NOT EXISTS "{SCHEMA}"')

    op.create_table(
        'tenants',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('subdomain', sa.String(length=63), nullable=False),
        sa.Column('company_name', sa.String(length=200), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='inactive', nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=50), nullable=True),
        sa.Column('subscription_plan', sa.String(length=50), nullable=True),
        sa.Column('stripe_customer_id', sa.String(length=100), nullable=True),
        sa.Column('stripe_subscription_id', sa.String(length=100), nullable=True),
        sa.Column('trial_ends_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('subscription_ends_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('schema_name', sa.String(length=63), nullable=False),
        sa.Column('provisioned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('schema_name'),
        schema=SCHEMA,
    )
    op.create_index(op.f('ix_control_plane_tenants_subdomain'), 'tenants', ['subdomain'], unique=True, schema=SCHEMA)


def downgrade() -> None:
    op.drop_index(op.f('ix_control_plane_tenants_subdomain'), table_name='tenants', schema=SCHEMA)
    op.drop_table('tenants', schema=SCHEMA)
