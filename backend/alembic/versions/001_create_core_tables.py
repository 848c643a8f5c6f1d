"""Create organizations, sports, orders and role tables

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    ]


def _id() -> sa.Column:
    return sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()'))


def upgrade() -> None:
    """Create the organization domain tables and seed the owner role."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    op.create_table(
        'organizations',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('state', sa.String(2), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('logo_url', sa.Text, nullable=True),
        sa.Column('title_card_url', sa.Text, nullable=True),
        sa.Column('brand_primary', sa.String(7), nullable=True),
        sa.Column('brand_secondary', sa.String(7), nullable=True),
        sa.Column('is_business', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('universal_discounts', postgresql.JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column('tags', postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        *_timestamps(),
        sa.CheckConstraint('LENGTH(name) > 0', name='organization_name_not_empty'),
    )
    op.create_index('ix_organizations_state', 'organizations', ['state'])
    # Case-insensitive uniqueness; backs the duplicate-name check on create
    op.execute('CREATE UNIQUE INDEX uq_organizations_name_lower ON organizations (LOWER(name))')

    op.create_table(
        'sports',
        _id(),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('salesperson_name', sa.String(255), nullable=True),
        sa.Column('contact_name', sa.String(255), nullable=True),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('contact_phone', sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_sports_organization_id', 'sports', ['organization_id'])

    op.create_table(
        'orders',
        _id(),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('order_number', sa.String(64), nullable=False),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending'),
        sa.Column('total_amount', sa.Integer, nullable=False, server_default='0'),
        sa.Column('items', postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('notes', sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('organization_id', 'order_number', name='uq_orders_org_order_number'),
        sa.CheckConstraint('total_amount >= 0', name='order_total_non_negative'),
        sa.CheckConstraint(
            "status IN ('pending', 'in_production', 'completed', 'cancelled')",
            name='order_status',
        ),
    )
    op.create_index('ix_orders_organization_id', 'orders', ['organization_id'])

    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('full_name', sa.String(255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'roles',
        _id(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'user_roles',
        _id(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'organization_id', name='uq_user_roles_user_org'),
    )
    op.create_index('ix_user_roles_user_id', 'user_roles', ['user_id'])
    op.create_index('ix_user_roles_organization_id', 'user_roles', ['organization_id'])

    op.execute(
        "INSERT INTO roles (name, slug, description) VALUES "
        "('Owner', 'owner', 'Full control of an organization')"
    )


def downgrade() -> None:
    """Drop the organization domain tables."""
    op.drop_table('user_roles')
    op.drop_table('roles')
    op.drop_table('users')
    op.drop_table('orders')
    op.drop_table('sports')
    op.execute('DROP INDEX IF EXISTS uq_organizations_name_lower')
    op.drop_table('organizations')
