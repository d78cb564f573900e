"""Alembic migration: users and threaded messages."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '1_users_and_messages'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users and messages tables."""
    from sqlalchemy import inspect

    conn = op.get_bind()
    inspector = inspect(conn)
    existing_tables = inspector.get_table_names()

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('name', sa.String(200), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )

    if 'messages' not in existing_tables:
        op.create_table(
            'messages',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('parent_id', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.ForeignKeyConstraint(
                ['user_id'], ['users.id'],
                name='fk_messages_user_id',
                ondelete='CASCADE',
                onupdate='CASCADE',
            ),
            sa.ForeignKeyConstraint(
                ['parent_id'], ['messages.id'],
                name='fk_messages_parent_id',
                ondelete='CASCADE',
                onupdate='CASCADE',
            ),
        )

        op.create_index('ix_messages_user_id', 'messages', ['user_id'])
        op.create_index('ix_messages_parent_id', 'messages', ['parent_id'])
        op.create_index('idx_messages_user_created', 'messages', ['user_id', 'created_at'])


def downgrade() -> None:
    """Drop messages first, then users."""
    op.drop_table('messages', if_exists=True)
    op.drop_table('users', if_exists=True)
