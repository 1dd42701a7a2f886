"""create lot, auction, participant and per-lot record tables

Revision ID: 5c2a9e7d1f40
Revises:
Create Date: 2026-10-18 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2a9e7d1f40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'lot',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('tier', sa.String(length=16), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('attributes', sa.Text(), nullable=True),
    )
    op.create_table(
        'auction',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('host_id', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('budget_per_participant', sa.Integer(), nullable=False),
        sa.Column('current_lot_id', sa.Integer(), sa.ForeignKey('lot.id'), nullable=True),
        sa.Column('current_bid_amount', sa.Integer(), nullable=False),
        sa.Column('current_bidder_id', sa.String(length=64), nullable=True),
        sa.Column('pass_vote_count', sa.Integer(), nullable=False),
        sa.Column('last_event_time', sa.Float(), nullable=True),
        sa.Column('paused_at', sa.Float(), nullable=True),
        sa.Column('completed_lot_count', sa.Integer(), nullable=False),
        sa.Column('skipped_lot_count', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.Float(), nullable=False),
    )
    op.create_index('ix_auction_host_id', 'auction', ['host_id'])
    op.create_table(
        'participant',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('auction_id', sa.Integer(), sa.ForeignKey('auction.id'), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('initial_budget', sa.Integer(), nullable=False),
        sa.Column('remaining_budget', sa.Integer(), nullable=False),
        sa.Column('lots_won', sa.Integer(), nullable=False),
        sa.Column('joined_at', sa.Float(), nullable=False),
        sa.UniqueConstraint('auction_id', 'user_id', name='uq_participant_auction_user'),
    )
    op.create_index('ix_participant_auction_id', 'participant', ['auction_id'])
    op.create_table(
        'auction_lot',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('auction_id', sa.Integer(), sa.ForeignKey('auction.id'), nullable=False),
        sa.Column('lot_id', sa.Integer(), sa.ForeignKey('lot.id'), nullable=False),
        sa.UniqueConstraint('auction_id', 'lot_id', name='uq_auction_lot'),
    )
    op.create_index('ix_auction_lot_auction_id', 'auction_lot', ['auction_id'])
    op.create_table(
        'host_selection',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('lot_id', sa.Integer(), sa.ForeignKey('lot.id'), nullable=False),
        sa.UniqueConstraint('user_id', 'lot_id', name='uq_host_selection'),
    )
    op.create_index('ix_host_selection_user_id', 'host_selection', ['user_id'])
    op.create_table(
        'pass_vote',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('auction_id', sa.Integer(), sa.ForeignKey('auction.id'), nullable=False),
        sa.Column('lot_id', sa.Integer(), sa.ForeignKey('lot.id'), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.UniqueConstraint('auction_id', 'lot_id', 'user_id', name='uq_pass_vote'),
    )
    op.create_index('ix_pass_vote_auction_id', 'pass_vote', ['auction_id'])
    op.create_table(
        'skip_record',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('auction_id', sa.Integer(), sa.ForeignKey('auction.id'), nullable=False),
        sa.Column('lot_id', sa.Integer(), sa.ForeignKey('lot.id'), nullable=False),
        sa.Column('skip_count', sa.Integer(), nullable=False),
        sa.UniqueConstraint('auction_id', 'lot_id', name='uq_skip_record'),
    )
    op.create_index('ix_skip_record_auction_id', 'skip_record', ['auction_id'])
    op.create_table(
        'winner_record',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('auction_id', sa.Integer(), sa.ForeignKey('auction.id'), nullable=False),
        sa.Column('lot_id', sa.Integer(), sa.ForeignKey('lot.id'), nullable=False),
        sa.Column('winner_id', sa.String(length=64), nullable=False),
        sa.Column('winning_bid', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.Float(), nullable=False),
        sa.UniqueConstraint('auction_id', 'lot_id', name='uq_winner_record'),
    )
    op.create_index('ix_winner_record_auction_id', 'winner_record', ['auction_id'])


def downgrade():
    for table in ('winner_record', 'skip_record', 'pass_vote', 'host_selection',
                  'auction_lot', 'participant', 'auction', 'lot'):
        op.drop_table(table)
