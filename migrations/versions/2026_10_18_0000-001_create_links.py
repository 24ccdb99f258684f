"""Create links table

Revision ID: 001_links
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_links'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the links table:
    - code is the primary key, which makes insert-if-absent atomic
    - created_at is indexed for the newest-first listing
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    # Tables may already exist when the service created them on startup
    if 'links' in existing_tables:
        return

    op.create_table(
        'links',
        sa.Column('code', sa.String(length=8), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('clicks', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_clicked', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('code'),
        sa.CheckConstraint('clicks >= 0', name='ck_links_clicks_non_negative'),
    )

    op.create_index(
        'ix_links_created_at',
        'links',
        ['created_at']
    )


def downgrade() -> None:
    op.drop_index('ix_links_created_at', table_name='links')
    op.drop_table('links')
