"""initial inventory schema

Revision ID: 3f1c9a7e2b10
Revises:
Create Date: 2026-10-19 09:12:41.208311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c9a7e2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

consumable_status = sa.Enum('UNOPENED', 'OPENED', 'DEPLETED', name='consumablestatus')
accessory_status = sa.Enum('AVAILABLE', 'IN_USE', 'LOW_STOCK', 'DEPLETED', name='accessorystatus')
accessory_usage_type = sa.Enum('CONSUMABLE', 'DURABLE', name='accessoryusagetype')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'brands',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('website', sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'name', name='_brands_owner_name_uc'),
    )
    op.create_index(op.f('ix_brands_owner_id'), 'brands', ['owner_id'], unique=False)

    op.create_table(
        'consumable_types',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('print_temp_min', sa.Integer(), nullable=True),
        sa.Column('print_temp_max', sa.Integer(), nullable=True),
        sa.Column('bed_temp_min', sa.Integer(), nullable=True),
        sa.Column('bed_temp_max', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'name', name='_consumable_types_owner_name_uc'),
    )
    op.create_index(op.f('ix_consumable_types_owner_id'), 'consumable_types', ['owner_id'], unique=False)

    op.create_table(
        'accessory_categories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_preset', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'name', name='_accessory_categories_owner_name_uc'),
    )
    op.create_index(op.f('ix_accessory_categories_owner_id'), 'accessory_categories', ['owner_id'], unique=False)

    op.create_table(
        'consumables',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('brand_id', sa.String(length=36), nullable=False),
        sa.Column('type_id', sa.String(length=36), nullable=False),
        sa.Column('color', sa.String(), nullable=False),
        sa.Column('color_hex', sa.String(), nullable=True),
        sa.Column('weight', sa.Float(), nullable=False),
        sa.Column('remaining_weight', sa.Float(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('purchase_date', sa.Date(), nullable=False),
        sa.Column('is_opened', sa.Boolean(), nullable=False),
        sa.Column('opened_at', sa.Date(), nullable=True),
        sa.Column('status', consumable_status, nullable=False),
        sa.Column('depleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('weight > 0', name='ck_consumables_weight_positive'),
        sa.CheckConstraint('remaining_weight >= 0 AND remaining_weight <= weight', name='ck_consumables_remaining_bounds'),
        sa.CheckConstraint(
            '(is_opened AND opened_at IS NOT NULL) OR (NOT is_opened AND opened_at IS NULL)',
            name='ck_consumables_opened_at',
        ),
        sa.ForeignKeyConstraint(['brand_id'], ['brands.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['type_id'], ['consumable_types.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_consumables_owner_id'), 'consumables', ['owner_id'], unique=False)

    op.create_table(
        'usage_records',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('consumable_id', sa.String(length=36), nullable=False),
        sa.Column('amount_used', sa.Float(), nullable=False),
        sa.Column('usage_date', sa.Date(), nullable=False),
        sa.Column('project_name', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('amount_used > 0', name='ck_usage_records_amount_positive'),
        sa.ForeignKeyConstraint(['consumable_id'], ['consumables.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_usage_records_owner_id'), 'usage_records', ['owner_id'], unique=False)
    op.create_index(op.f('ix_usage_records_consumable_id'), 'usage_records', ['consumable_id'], unique=False)

    op.create_table(
        'accessories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('brand', sa.String(), nullable=True),
        sa.Column('model', sa.String(), nullable=True),
        sa.Column('price', sa.Float(), nullable=True),
        sa.Column('purchase_date', sa.Date(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('remaining_qty', sa.Integer(), nullable=False),
        sa.Column('replacement_cycle', sa.Integer(), nullable=True),
        sa.Column('last_replaced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=True),
        sa.Column('usage_type', accessory_usage_type, nullable=False),
        sa.Column('status', accessory_status, nullable=False),
        sa.Column('in_use_started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 1', name='ck_accessories_quantity_positive'),
        sa.CheckConstraint('remaining_qty >= 0 AND remaining_qty <= quantity', name='ck_accessories_remaining_bounds'),
        sa.ForeignKeyConstraint(['category_id'], ['accessory_categories.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_accessories_owner_id'), 'accessories', ['owner_id'], unique=False)

    op.create_table(
        'accessory_usage',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('accessory_id', sa.String(length=36), nullable=False),
        sa.Column('usage_date', sa.Date(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('purpose', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['accessory_id'], ['accessories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_accessory_usage_owner_id'), 'accessory_usage', ['owner_id'], unique=False)
    op.create_index(op.f('ix_accessory_usage_accessory_id'), 'accessory_usage', ['accessory_id'], unique=False)

    op.create_table(
        'stock_audit',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('resource_type', sa.String(), nullable=False),
        sa.Column('resource_id', sa.String(length=36), nullable=False),
        sa.Column('change_type', sa.String(), nullable=False),
        sa.Column('change_amount', sa.Float(), nullable=False),
        sa.Column('old_quantity', sa.Float(), nullable=False),
        sa.Column('new_quantity', sa.Float(), nullable=False),
        sa.Column('changed_by', sa.String(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=True),
        sa.Column('note', sa.String(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_stock_audit_id'), 'stock_audit', ['id'], unique=False)
    op.create_index(op.f('ix_stock_audit_owner_id'), 'stock_audit', ['owner_id'], unique=False)
    op.create_index(op.f('ix_stock_audit_resource_id'), 'stock_audit', ['resource_id'], unique=False)


def downgrade() -> None:
    op.drop_table('stock_audit')
    op.drop_table('accessory_usage')
    op.drop_table('accessories')
    op.drop_table('usage_records')
    op.drop_table('consumables')
    op.drop_table('accessory_categories')
    op.drop_table('consumable_types')
    op.drop_table('brands')
    bind = op.get_bind()
    accessory_status.drop(bind, checkfirst=True)
    accessory_usage_type.drop(bind, checkfirst=True)
    consumable_status.drop(bind, checkfirst=True)
