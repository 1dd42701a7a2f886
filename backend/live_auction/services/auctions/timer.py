"""Lot countdowns.

A lot's countdown is never stored. Only ``Auction.last_event_time`` (the
anchor) and the configured duration are persisted; every observer derives
the remaining time at read time so clients with drifting clocks still agree
on the deadline.
"""

import time

from flask import current_app

from live_auction import db
from live_auction.models import WinnerRecord
from .errors import UnknownLot
from .states import AuctionStatus
from .store import get_auction


def now() -> float:
    return time.time()


def lot_duration() -> int:
    return int(current_app.config.get('LOT_DURATION_SEC', 30))


def remaining_seconds(auction, at=None) -> float:
    """Seconds left on the current lot, clamped to [0, duration].

    While paused the clock is read at ``paused_at`` so the value stays frozen.
    """
    duration = lot_duration()
    if auction.current_lot_id is None or auction.last_event_time is None:
        return 0.0
    if auction.status == AuctionStatus.PAUSED and auction.paused_at is not None:
        at = auction.paused_at
    elif at is None:
        at = now()
    elapsed = max(0.0, at - auction.last_event_time)
    return max(0.0, min(float(duration), duration - elapsed))


def deadline(auction):
    if auction.status != AuctionStatus.ACTIVE or auction.last_event_time is None:
        return None
    return auction.last_event_time + lot_duration()


def is_expired(auction, at=None) -> bool:
    return (
        auction.status == AuctionStatus.ACTIVE
        and auction.current_lot_id is not None
        and remaining_seconds(auction, at) <= 0
    )


def _lot_id(value) -> int:
    if isinstance(value, bool):
        raise UnknownLot('Lot id must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise UnknownLot('Lot id must be an integer') from None


def resolve_lot(auction_id: int, lot_id=None) -> bool:
    """Resolve the current lot once its countdown has run out.

    Any client may call this when it sees the countdown reach zero; all but
    the first caller for a given lot get a no-op. Returns True when this call
    retired the lot.
    """
    # Local imports: these modules import this one
    from .advance import advance_past_settled_lot
    from .consensus import skip_lot
    from .settlement import settle

    auction = get_auction(auction_id)
    if auction.status != AuctionStatus.ACTIVE or auction.current_lot_id is None:
        current_app.logger.info(f"[resolve-skip] auction={auction_id} status={auction.status} not resolvable")
        return False

    current_lot_id = auction.current_lot_id
    if lot_id is not None and _lot_id(lot_id) != current_lot_id:
        current_app.logger.info(
            f"[resolve-skip] auction={auction_id} lot={lot_id} already advanced to lot={current_lot_id}"
        )
        return False
    if not is_expired(auction):
        current_app.logger.info(
            f"[resolve-skip] auction={auction_id} lot={current_lot_id} remaining={remaining_seconds(auction):.1f}s"
        )
        return False

    anchor = auction.last_event_time
    already_won = db.session.query(WinnerRecord.id).filter_by(
        auction_id=auction_id, lot_id=current_lot_id
    ).first() is not None
    if already_won:
        return advance_past_settled_lot(auction_id, current_lot_id)
    if auction.current_bid_amount > 0:
        return settle(
            auction_id,
            current_lot_id,
            auction.current_bidder_id,
            auction.current_bid_amount,
            expected_anchor=anchor,
        )
    return skip_lot(auction_id, current_lot_id, reason='timeout', expected_anchor=anchor)
