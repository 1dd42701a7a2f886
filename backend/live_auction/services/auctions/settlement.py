"""Settling a won lot.

Settlement writes the WinnerRecord, debits the winner and advances to the
next lot in one transaction. The ``(auction_id, lot_id)`` unique key on
WinnerRecord makes the insert the idempotency point: a second settler hits
the constraint and only advances.
"""

from flask import current_app
from sqlalchemy.exc import IntegrityError

from live_auction import db
from live_auction.models import Auction, Participant, WinnerRecord
from .advance import advance_past_settled_lot, put_up_next_lot, retire_lot
from .errors import SettlementFailed
from .notifier import publish_state_update
from .store import clear_pass_votes
from . import timer


def debit_winner(auction_id: int, winner_id: str, amount: int) -> bool:
    """Charge ``amount`` unless it would take the budget below zero. Does not commit."""
    rowcount = Participant.query.filter(
        Participant.auction_id == auction_id,
        Participant.user_id == winner_id,
        Participant.remaining_budget >= amount,
    ).update(
        {
            'remaining_budget': Participant.remaining_budget - amount,
            'lots_won': Participant.lots_won + 1,
        },
        synchronize_session=False,
    )
    return rowcount == 1


def settle(auction_id: int, lot_id: int, winner_id: str, amount: int, expected_anchor=None) -> bool:
    """Award ``lot_id`` to ``winner_id`` for ``amount`` and move to the next lot.

    Returns True when this call settled the lot or found it already settled
    and advanced past it; False when the lot had already moved on (or the
    standing bid changed) and nothing was written.

    Raises SettlementFailed when the winner cannot be charged. The whole
    transaction is rolled back in that case and the lot stays up.
    """
    winner_id = str(winner_id)
    db.session.add(WinnerRecord(auction_id=auction_id, lot_id=lot_id, winner_id=winner_id, winning_bid=amount))
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.info(f"[settle-dup] auction={auction_id} lot={lot_id} already settled by another caller")
        return advance_past_settled_lot(auction_id, lot_id)

    expected = {'current_bid_amount': amount, 'current_bidder_id': winner_id}
    if expected_anchor is not None:
        expected['last_event_time'] = expected_anchor
    claimed = retire_lot(
        auction_id,
        lot_id,
        expected=expected,
        completed_lot_count=Auction.completed_lot_count + 1,
    )
    if not claimed:
        db.session.rollback()
        current_app.logger.info(f"[settle-noop] auction={auction_id} lot={lot_id} no longer up at {amount}")
        return False

    if not debit_winner(auction_id, winner_id, amount):
        db.session.rollback()
        current_app.logger.critical(
            f"[settle-failed] auction={auction_id} lot={lot_id} winner={winner_id} amount={amount} "
            f"budget debit refused; lot left unsettled"
        )
        raise SettlementFailed(lot_id=lot_id, winner_id=winner_id, amount=amount)

    clear_pass_votes(auction_id, lot_id)
    put_up_next_lot(auction_id, timer.now())
    db.session.commit()
    current_app.logger.info(f"[settle] auction={auction_id} lot={lot_id} winner={winner_id} amount={amount}")
    publish_state_update(auction_id)
    return True
