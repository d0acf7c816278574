"""Initial schema: users and tour catalog

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )

    op.create_table('tours',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('duration_days', sa.Integer(), nullable=False),
        sa.Column('base_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )

    op.create_table('vehicles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('seats', sa.Integer(), nullable=False),
        sa.Column('luggage_capacity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('price_per_day', sa.Numeric(12, 2), nullable=False),
        sa.Column('driver_cost_per_day', sa.Numeric(12, 2), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('hotels',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('stars', sa.Integer(), nullable=False),
        sa.Column('single_room_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('double_room_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('triple_room_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('breakfast_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('lunch_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('dinner_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('guides',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('languages', sa.JSON(), nullable=False),
        sa.Column('price_per_day', sa.Numeric(12, 2), nullable=False),
        sa.Column('experience', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('has_international_license', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('personality', sa.String(length=255), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('age', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('seasons',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('start_month', sa.Integer(), nullable=False),
        sa.Column('end_month', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('price_multiplier', sa.Numeric(5, 3), nullable=False, server_default='1'),
        sa.CheckConstraint('start_month BETWEEN 1 AND 12', name='ck_seasons_start_month'),
        sa.CheckConstraint('end_month BETWEEN 1 AND 12', name='ck_seasons_end_month'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('special_service_rates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('label', sa.String(length=255), nullable=False),
        sa.Column('surcharge', sa.Numeric(12, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )


def downgrade() -> None:
    op.drop_table('special_service_rates')
    op.drop_table('seasons')
    op.drop_table('guides')
    op.drop_table('hotels')
    op.drop_table('vehicles')
    op.drop_table('tours')
    op.drop_table('users')
