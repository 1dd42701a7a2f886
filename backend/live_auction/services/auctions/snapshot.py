from flask import current_app

from live_auction.models import Participant, SkipRecord, WinnerRecord
from .bidding import minimum_bid
from .consensus import count_votes
from .lot_selector import pool_stats
from .store import get_auction, pass_voter_ids
from . import timer


def get_auction_snapshot(auction_id: int) -> dict:
    """Full current state of an auction, for initial load and reconnects.

    Clients derive their countdown from ``remaining_seconds`` and
    ``server_time`` here and must not carry a cached countdown across
    reconnects.
    """
    auction = get_auction(auction_id)
    at = timer.now()
    participants = Participant.query.filter_by(auction_id=auction_id).order_by(Participant.id).all()
    member_ids = {p.user_id for p in participants}

    current_lot = None
    voters = set()
    if auction.current_lot_id is not None:
        voters = pass_voter_ids(auction_id, auction.current_lot_id)
        lot = auction.current_lot
        current_lot = lot.to_dict()
        skip = SkipRecord.query.filter_by(auction_id=auction_id, lot_id=lot.id).first()
        current_lot['skip_count'] = skip.skip_count if skip else 0

    winners = WinnerRecord.query.filter_by(auction_id=auction_id).order_by(WinnerRecord.id).all()

    payload = auction.to_dict()
    payload.update({
        'participants': [p.to_dict() for p in participants],
        'current_lot': current_lot,
        'votes': {
            'count': count_votes(voters, member_ids),
            'needed': len(member_ids),
            'voter_ids': sorted(voters),
        },
        'minimum_bid': minimum_bid(auction) if current_lot else None,
        'lot_duration': timer.lot_duration(),
        'remaining_seconds': timer.remaining_seconds(auction, at),
        'deadline': timer.deadline(auction),
        'stats': pool_stats(auction_id),
        'winners': [w.to_dict() for w in winners],
        'liveness_probe_sec': int(current_app.config.get('LIVENESS_PROBE_SEC', 30)),
        'server_time': at,
    })
    return payload
