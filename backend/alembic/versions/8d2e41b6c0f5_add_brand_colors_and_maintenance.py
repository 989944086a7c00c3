"""add brand colors and maintenance records

Revision ID: 8d2e41b6c0f5
Revises: 3f1c9a7e2b10
Create Date: 2026-10-19 15:40:07.552190

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8d2e41b6c0f5'
down_revision: Union[str, None] = '3f1c9a7e2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

maintenance_type = sa.Enum('CLEANING', 'LUBRICATION', 'REPLACEMENT', 'CALIBRATION', 'OTHER', name='maintenancetype')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'brand_colors',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('brand_id', sa.String(length=36), nullable=False),
        sa.Column('color_name', sa.String(), nullable=False),
        sa.Column('color_hex', sa.String(length=7), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['brand_id'], ['brands.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('brand_id', 'color_name', name='_brand_colors_brand_name_uc'),
    )
    op.create_index(op.f('ix_brand_colors_owner_id'), 'brand_colors', ['owner_id'], unique=False)
    op.create_index(op.f('ix_brand_colors_brand_id'), 'brand_colors', ['brand_id'], unique=False)

    op.create_table(
        'maintenance_records',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('maintenance_date', sa.Date(), nullable=False),
        sa.Column('maintenance_type', maintenance_type, nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_maintenance_records_owner_id'), 'maintenance_records', ['owner_id'], unique=False)
    op.create_index(op.f('ix_maintenance_records_maintenance_date'), 'maintenance_records', ['maintenance_date'], unique=False)


def downgrade() -> None:
    op.drop_table('maintenance_records')
    op.drop_table('brand_colors')
    maintenance_type.drop(op.get_bind(), checkfirst=True)
