"""create repositories and subscriptions

Revision ID: 3c8e51d0a7f2
Revises:
Create Date: 2026-10-17 10:12:44.318502

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c8e51d0a7f2'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'repositories',
        sa.Column('id', sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column('owner', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.Column('webhook_id', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_repositories_owner', 'repositories', ['owner'])

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('repository_id', sa.BigInteger(), nullable=False),
        # "{family}_{action}", stored verbatim and never renamed
        sa.Column('topic', sa.String(length=64), nullable=False),
        sa.Column('conversation_id', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['repository_id'], ['repositories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'repository_id', 'topic', 'conversation_id', name='uq_subscription_topic_conversation'
        ),
    )
    op.create_index('ix_subscriptions_repository_id', 'subscriptions', ['repository_id'])
    op.create_index('ix_subscriptions_topic', 'subscriptions', ['topic'])
    op.create_index('ix_subscriptions_conversation_id', 'subscriptions', ['conversation_id'])


def downgrade() -> None:
    op.drop_index('ix_subscriptions_conversation_id', table_name='subscriptions')
    op.drop_index('ix_subscriptions_topic', table_name='subscriptions')
    op.drop_index('ix_subscriptions_repository_id', table_name='subscriptions')
    op.drop_table('subscriptions')
    op.drop_index('ix_repositories_owner', table_name='repositories')
    op.drop_table('repositories')
