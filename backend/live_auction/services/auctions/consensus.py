"""Pass consensus and lot skipping.

A lot is skipped early once every participant has passed on it with no bid
in between (a bid clears the lot's pass votes). Timer expiry with no bids
and the host's manual skip go through the same :func:`skip_lot` path.
"""

from typing import Iterable

from flask import current_app

from live_auction import db
from live_auction.models import Auction, SkipRecord
from .advance import put_up_next_lot, retire_lot
from .notifier import publish_state_update
from .store import clear_pass_votes
from . import timer


def count_votes(voter_ids: Iterable, participant_ids: Iterable) -> int:
    """Distinct passes cast by current participants."""
    return len(set(voter_ids) & set(participant_ids))


def consensus_reached(voter_ids: Iterable, participant_ids: Iterable) -> bool:
    """True once every active participant has passed."""
    participants = set(participant_ids)
    if not participants:
        return False
    return count_votes(voter_ids, participants) >= len(participants)


def record_skip(auction_id: int, lot_id: int) -> int:
    """Bump the lot's skip count and return the new value. Does not commit.

    Only call while holding the lot's retire claim, so a single writer
    touches the row per skip.
    """
    record = SkipRecord.query.filter_by(auction_id=auction_id, lot_id=lot_id).first()
    if record is None:
        record = SkipRecord(auction_id=auction_id, lot_id=lot_id, skip_count=1)
        db.session.add(record)
        db.session.flush()
        return 1
    SkipRecord.query.filter_by(id=record.id).update(
        {'skip_count': SkipRecord.skip_count + 1}, synchronize_session=False
    )
    db.session.expire(record)
    return record.skip_count


def skip_in_transaction(auction_id: int, lot_id: int, expected=None) -> bool:
    """Retire ``lot_id`` as skipped and put up the next lot, without committing.

    Returns False (and writes nothing) when the lot is no longer current.
    """
    if not retire_lot(auction_id, lot_id, expected=expected, skipped_lot_count=Auction.skipped_lot_count + 1):
        return False
    skips = record_skip(auction_id, lot_id)
    clear_pass_votes(auction_id, lot_id)
    current_app.logger.info(f"[skip] auction={auction_id} lot={lot_id} skip_count={skips}")
    put_up_next_lot(auction_id, timer.now())
    return True


def skip_lot(auction_id: int, lot_id: int, reason: str = 'consensus', expected_anchor=None) -> bool:
    """Skip the lot and commit. A lot that already moved on is a silent no-op."""
    expected = {'last_event_time': expected_anchor} if expected_anchor is not None else None
    if not skip_in_transaction(auction_id, lot_id, expected=expected):
        db.session.rollback()
        current_app.logger.info(f"[skip-noop] auction={auction_id} lot={lot_id} reason={reason} already advanced")
        return False
    db.session.commit()
    current_app.logger.info(f"[skip-done] auction={auction_id} lot={lot_id} reason={reason}")
    publish_state_update(auction_id)
    return True
