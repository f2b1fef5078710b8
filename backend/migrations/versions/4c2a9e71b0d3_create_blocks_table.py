"""create blocks table

Revision ID: 4c2a9e71b0d3
Revises:
Create Date: 2026-10-18 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e71b0d3'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'blocks' in insp.get_table_names():
        return
    op.create_table(
        'blocks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('row_num', sa.Integer(), nullable=False),
        sa.Column('col_num', sa.Integer(), nullable=False),
        sa.Column('owner', sa.String(length=64), nullable=True),
        sa.Column('color', sa.String(length=16), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('row_num', 'col_num', name='uq_blocks_row_col'),
        sa.CheckConstraint('(owner IS NULL) = (color IS NULL)', name='ck_blocks_owner_color_pair'),
    )


def downgrade():
    op.drop_table('blocks')
