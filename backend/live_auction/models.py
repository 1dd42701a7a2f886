from live_auction import db
from live_auction.services.auctions.states import AuctionStatus
import json
import time

# Opening-bid floors keyed by tier; anything unrecognised falls back to DEFAULT_FLOOR
TIER_FLOORS = {'Elite': 60, 'Gold': 50, 'Silver': 30, 'Bronze': 10}
DEFAULT_FLOOR = 10


def tier_for_rating(rating):
    """Bracket an overall rating into a tier."""
    if rating is None:
        return 'Bronze'
    if rating >= 85:
        return 'Elite'
    if rating >= 80:
        return 'Gold'
    if rating >= 75:
        return 'Silver'
    return 'Bronze'


class Lot(db.Model):
    __tablename__ = 'lot'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    tier = db.Column(db.String(16), nullable=False)
    rating = db.Column(db.Integer, nullable=False, default=0)
    attributes = db.Column(db.Text, nullable=True)  # JSON-encoded dict

    def __init__(self, **kwargs):
        super(Lot, self).__init__(**kwargs)
        if not self.tier:
            self.tier = tier_for_rating(self.rating)

    @property
    def opening_floor(self):
        return TIER_FLOORS.get(self.tier, DEFAULT_FLOOR)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'tier': self.tier,
            'rating': self.rating,
            'attributes': json.loads(self.attributes) if self.attributes else {},
        }


class Auction(db.Model):
    __tablename__ = 'auction'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, default='Auction')
    host_id = db.Column(db.String(64), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default=AuctionStatus.PENDING.value)
    budget_per_participant = db.Column(db.Integer, nullable=False)
    current_lot_id = db.Column(db.Integer, db.ForeignKey('lot.id'), nullable=True)
    current_bid_amount = db.Column(db.Integer, nullable=False, default=0)
    current_bidder_id = db.Column(db.String(64), nullable=True)
    pass_vote_count = db.Column(db.Integer, nullable=False, default=0)
    # Countdown anchor (epoch seconds); remaining time is always derived from it
    last_event_time = db.Column(db.Float, nullable=True)
    paused_at = db.Column(db.Float, nullable=True)
    completed_lot_count = db.Column(db.Integer, nullable=False, default=0)
    skipped_lot_count = db.Column(db.Integer, nullable=False, default=0)
    version = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.Float, nullable=False, default=time.time)

    participants = db.relationship('Participant', back_populates='auction', order_by='Participant.id')
    current_lot = db.relationship('Lot', foreign_keys=[current_lot_id])

    @property
    def auction_status(self):
        return AuctionStatus(self.status)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'host_id': self.host_id,
            'status': self.status,
            'budget_per_participant': self.budget_per_participant,
            'current_lot_id': self.current_lot_id,
            'current_bid_amount': self.current_bid_amount,
            'current_bidder_id': self.current_bidder_id,
            'pass_vote_count': self.pass_vote_count,
            'last_event_time': self.last_event_time,
            'paused_at': self.paused_at,
            'completed_lot_count': self.completed_lot_count,
            'skipped_lot_count': self.skipped_lot_count,
            'version': self.version,
        }


class Participant(db.Model):
    __tablename__ = 'participant'
    __table_args__ = (db.UniqueConstraint('auction_id', 'user_id', name='uq_participant_auction_user'),)
    id = db.Column(db.Integer, primary_key=True)
    auction_id = db.Column(db.Integer, db.ForeignKey('auction.id'), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False)
    initial_budget = db.Column(db.Integer, nullable=False)
    remaining_budget = db.Column(db.Integer, nullable=False)
    lots_won = db.Column(db.Integer, nullable=False, default=0)
    joined_at = db.Column(db.Float, nullable=False, default=time.time)
    auction = db.relationship('Auction', back_populates='participants')

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'initial_budget': self.initial_budget,
            'remaining_budget': self.remaining_budget,
            'lots_won': self.lots_won,
        }


class AuctionLot(db.Model):
    """A lot selected into an auction's pool."""
    __tablename__ = 'auction_lot'
    __table_args__ = (db.UniqueConstraint('auction_id', 'lot_id', name='uq_auction_lot'),)
    id = db.Column(db.Integer, primary_key=True)
    auction_id = db.Column(db.Integer, db.ForeignKey('auction.id'), nullable=False, index=True)
    lot_id = db.Column(db.Integer, db.ForeignKey('lot.id'), nullable=False)


class HostSelection(db.Model):
    """A host's standing lot selection, used to (re)seed their auctions."""
    __tablename__ = 'host_selection'
    __table_args__ = (db.UniqueConstraint('user_id', 'lot_id', name='uq_host_selection'),)
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    lot_id = db.Column(db.Integer, db.ForeignKey('lot.id'), nullable=False)


class PassVote(db.Model):
    __tablename__ = 'pass_vote'
    __table_args__ = (db.UniqueConstraint('auction_id', 'lot_id', 'user_id', name='uq_pass_vote'),)
    id = db.Column(db.Integer, primary_key=True)
    auction_id = db.Column(db.Integer, db.ForeignKey('auction.id'), nullable=False, index=True)
    lot_id = db.Column(db.Integer, db.ForeignKey('lot.id'), nullable=False)
    user_id = db.Column(db.String(64), nullable=False)


class SkipRecord(db.Model):
    __tablename__ = 'skip_record'
    __table_args__ = (db.UniqueConstraint('auction_id', 'lot_id', name='uq_skip_record'),)
    id = db.Column(db.Integer, primary_key=True)
    auction_id = db.Column(db.Integer, db.ForeignKey('auction.id'), nullable=False, index=True)
    lot_id = db.Column(db.Integer, db.ForeignKey('lot.id'), nullable=False)
    skip_count = db.Column(db.Integer, nullable=False, default=0)


class WinnerRecord(db.Model):
    __tablename__ = 'winner_record'
    __table_args__ = (db.UniqueConstraint('auction_id', 'lot_id', name='uq_winner_record'),)
    id = db.Column(db.Integer, primary_key=True)
    auction_id = db.Column(db.Integer, db.ForeignKey('auction.id'), nullable=False, index=True)
    lot_id = db.Column(db.Integer, db.ForeignKey('lot.id'), nullable=False)
    winner_id = db.Column(db.String(64), nullable=False)
    winning_bid = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.Float, nullable=False, default=time.time)

    def to_dict(self):
        return {
            'lot_id': self.lot_id,
            'winner_id': self.winner_id,
            'winning_bid': self.winning_bid,
        }
