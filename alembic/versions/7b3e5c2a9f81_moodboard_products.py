"""moodboard products and descriptions

Revision ID: 7b3e5c2a9f81
Revises: 2f6c1a9d4b10
Create Date: 2026-10-16 15:40:03.118842

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7b3e5c2a9f81'
down_revision: Union[str, None] = '2f6c1a9d4b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('moodboards', sa.Column('description', sa.Text(), nullable=True))
    op.add_column(
        'moodboards',
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'moodboard_products',
        sa.Column('moodboard_id', sa.String(length=100), nullable=False),
        sa.Column('product_id', sa.String(length=100), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['moodboard_id'], ['moodboards.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('moodboard_id', 'product_id'),
    )
    op.create_index(op.f('ix_moodboard_products_product_id'), 'moodboard_products', ['product_id'], unique=False)

    # Catalog search filters
    op.create_index(op.f('ix_products_brand'), 'products', ['brand'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_products_brand'), table_name='products')
    op.drop_index(op.f('ix_moodboard_products_product_id'), table_name='moodboard_products')
    op.drop_table('moodboard_products')
    op.drop_column('moodboards', 'updated_at')
    op.drop_column('moodboards', 'description')
