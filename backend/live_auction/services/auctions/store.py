"""Record access for the auction aggregate.

All writes to the ``auction`` row go through :func:`compare_and_set`, a
conditional ``UPDATE ... WHERE`` that only applies while the columns the
caller read are unchanged. Nothing here commits; callers own the transaction.
"""

from typing import Any, Dict, Optional

from live_auction import db
from live_auction.models import Auction, Participant, PassVote
from .errors import AuctionNotFound, NotHost, NotParticipant


def get_auction(auction_id: int) -> Auction:
    auction = db.session.get(Auction, auction_id)
    if auction is None:
        raise AuctionNotFound(auction_id=auction_id)
    return auction


def get_participant(auction_id: int, user_id) -> Participant:
    participant = None
    if user_id is not None:
        participant = Participant.query.filter_by(auction_id=auction_id, user_id=str(user_id)).first()
    if participant is None:
        raise NotParticipant()
    return participant


def participant_ids(auction_id: int) -> set:
    rows = db.session.query(Participant.user_id).filter_by(auction_id=auction_id).all()
    return {r.user_id for r in rows}


def require_host(auction: Auction, user_id) -> None:
    if user_id is None or str(user_id) != auction.host_id:
        raise NotHost()


def pass_voter_ids(auction_id: int, lot_id: int) -> set:
    rows = db.session.query(PassVote.user_id).filter_by(auction_id=auction_id, lot_id=lot_id).all()
    return {r.user_id for r in rows}


def clear_pass_votes(auction_id: int, lot_id: Optional[int] = None) -> int:
    query = PassVote.query.filter_by(auction_id=auction_id)
    if lot_id is not None:
        query = query.filter_by(lot_id=lot_id)
    return query.delete(synchronize_session=False)


def _guarded(auction_id: int, expected: Dict[str, Any]):
    query = Auction.query.filter(Auction.id == auction_id)
    for column, value in expected.items():
        attr = getattr(Auction, column)
        query = query.filter(attr.is_(None) if value is None else attr == value)
    return query


def lock_auction(auction_id: int, expected: Dict[str, Any]) -> bool:
    """Take the auction row's write lock while ``expected`` holds, changing nothing.

    Concurrent writers on the auction queue behind it until this transaction
    ends. Returns False when the guard no longer holds.
    """
    rowcount = _guarded(auction_id, expected).update({'version': Auction.version}, synchronize_session=False)
    return rowcount == 1


def compare_and_set(auction_id: int, expected: Dict[str, Any], values: Dict[str, Any]) -> bool:
    """Apply ``values`` to the auction only while ``expected`` still holds.

    ``expected`` maps column names to the values the caller last read (None
    matches NULL). Every successful write bumps ``version``. Returns False
    when another writer got there first.
    """
    query = _guarded(auction_id, expected)
    updates = dict(values)
    updates['version'] = Auction.version + 1
    rowcount = query.update(updates, synchronize_session=False)
    # The identity map still holds the pre-update row
    cached = db.session.get(Auction, auction_id)
    if cached is not None:
        db.session.expire(cached)
    return rowcount == 1
