"""one live default wallet per user, unique user category names

Revision ID: 0002_unique_defaults
Revises: 0001_initial_schema
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0002_unique_defaults'
down_revision = '0001_initial_schema'
branch_labels = None
depends_on = None


def upgrade():
    op.create_index(
        'uq_wallets_user_default', 'wallets', ['user_id'],
        unique=True,
        postgresql_where=sa.text('is_default AND deleted_at IS NULL'),
        sqlite_where=sa.text('is_default AND deleted_at IS NULL'),
    )
    op.create_index(
        'uq_categories_user_name_type', 'categories', ['user_id', 'name', 'category_type'],
        unique=True,
        postgresql_where=sa.text('deleted_at IS NULL AND user_id IS NOT NULL'),
        sqlite_where=sa.text('deleted_at IS NULL AND user_id IS NOT NULL'),
    )


def downgrade():
    op.drop_index('uq_categories_user_name_type', table_name='categories')
    op.drop_index('uq_wallets_user_default', table_name='wallets')
