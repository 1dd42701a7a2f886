"""Choosing the next lot from an auction's pool."""

import random
from typing import List, Optional

from flask import current_app

from live_auction import db
from live_auction.models import AuctionLot, HostSelection, Lot, SkipRecord, WinnerRecord


def skip_limit() -> int:
    return int(current_app.config.get('LOT_SKIP_LIMIT', 2))


def _won_lot_ids(auction_id: int) -> set:
    return {r.lot_id for r in db.session.query(WinnerRecord.lot_id).filter_by(auction_id=auction_id)}


def _retired_lot_ids(auction_id: int) -> set:
    rows = db.session.query(SkipRecord.lot_id).filter(
        SkipRecord.auction_id == auction_id,
        SkipRecord.skip_count >= skip_limit(),
    )
    return {r.lot_id for r in rows}


def pool_lot_ids(auction_id: int) -> List[int]:
    return sorted(r.lot_id for r in db.session.query(AuctionLot.lot_id).filter_by(auction_id=auction_id))


def candidate_lot_ids(auction_id: int) -> List[int]:
    """Lots selected for the auction, minus won and retired (over-skipped) ones."""
    excluded = _won_lot_ids(auction_id) | _retired_lot_ids(auction_id)
    return [lot_id for lot_id in pool_lot_ids(auction_id) if lot_id not in excluded]


def select_next_lot(auction_id: int, rng=None) -> Optional[Lot]:
    """Pick the next lot uniformly at random from the remaining pool.

    Returns None when the pool is exhausted; that is the signal for the
    auction to complete, not an error. Writes nothing.
    """
    candidates = candidate_lot_ids(auction_id)
    if not candidates:
        current_app.logger.info(f"[pool-exhausted] auction={auction_id}")
        return None
    lot_id = (rng or random).choice(candidates)
    return db.session.get(Lot, lot_id)


def pool_stats(auction_id: int) -> dict:
    pool = set(pool_lot_ids(auction_id))
    won = _won_lot_ids(auction_id) & pool
    retired = (_retired_lot_ids(auction_id) & pool) - won
    return {
        'total_lots': len(pool),
        'won_lots': len(won),
        'retired_lots': len(retired),
        'available_lots': len(pool) - len(won) - len(retired),
    }


def host_selection_ids(host_id) -> List[int]:
    rows = db.session.query(HostSelection.lot_id).filter_by(user_id=str(host_id))
    return sorted(r.lot_id for r in rows)


def seed_pool(auction_id: int, lot_ids) -> int:
    """Replace the auction's pool with ``lot_ids``. Does not commit."""
    AuctionLot.query.filter_by(auction_id=auction_id).delete(synchronize_session=False)
    unique_ids = sorted(set(lot_ids))
    for lot_id in unique_ids:
        db.session.add(AuctionLot(auction_id=auction_id, lot_id=lot_id))
    return len(unique_ids)
