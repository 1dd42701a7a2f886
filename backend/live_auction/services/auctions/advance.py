"""The advance-to-next-lot routine shared by skips and settlements.

Retiring a lot is a two-step write inside the caller's transaction: first
:func:`retire_lot` claims the lot with a guard on ``current_lot_id`` (only
one concurrent resolver can win it), then :func:`put_up_next_lot` assigns
the next lot or completes the auction.
"""

from flask import current_app

from live_auction import db
from live_auction.models import Auction, Lot
from .lot_selector import select_next_lot
from .notifier import publish_state_update
from .states import AuctionStatus
from .store import clear_pass_votes, compare_and_set
from . import timer


def retire_lot(auction_id: int, lot_id: int, expected=None, **values) -> bool:
    """Clear the current-lot fields if ``lot_id`` is still up. Does not commit."""
    guard = {'status': AuctionStatus.ACTIVE.value, 'current_lot_id': lot_id}
    guard.update(expected or {})
    cleared = {
        'current_lot_id': None,
        'current_bid_amount': 0,
        'current_bidder_id': None,
        'pass_vote_count': 0,
    }
    cleared.update(values)
    return compare_and_set(auction_id, guard, cleared)


def put_up_next_lot(auction_id: int, at=None):
    """Assign the next lot, or complete the auction when none remain.

    Expects the previous lot to be retired in the same transaction.
    Returns the new Lot, or None on exhaustion.
    """
    at = timer.now() if at is None else at
    lot: Lot = select_next_lot(auction_id)
    if lot is None:
        Auction.query.filter_by(id=auction_id).update(
            {'status': AuctionStatus.COMPLETED.value, 'paused_at': None, 'last_event_time': at},
            synchronize_session=False,
        )
        current_app.logger.info(f"[complete] auction={auction_id} no lots remain")
    else:
        Auction.query.filter_by(id=auction_id).update(
            {'current_lot_id': lot.id, 'last_event_time': at},
            synchronize_session=False,
        )
        current_app.logger.info(f"[next-lot] auction={auction_id} lot={lot.id} tier={lot.tier}")
    db.session.expire_all()
    return lot


def advance_past_settled_lot(auction_id: int, lot_id: int) -> bool:
    """Move on from a lot that already has a winner, without settling again."""
    if not retire_lot(auction_id, lot_id):
        db.session.rollback()
        current_app.logger.info(f"[advance-skip] auction={auction_id} lot={lot_id} already advanced")
        return False
    clear_pass_votes(auction_id, lot_id)
    put_up_next_lot(auction_id)
    db.session.commit()
    current_app.logger.info(f"[advance] auction={auction_id} lot={lot_id} was already settled")
    publish_state_update(auction_id)
    return True
