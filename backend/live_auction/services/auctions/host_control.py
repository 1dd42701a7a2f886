"""Host commands and auction setup.

Every command checks the caller is the host, asks the transition table for
the target status, then writes with a guard on the status it read.
"""

from typing import Iterable, List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from live_auction import db
from live_auction.models import Auction, AuctionLot, HostSelection, Lot, Participant, PassVote, SkipRecord, WinnerRecord
from .bidding import parse_amount
from .consensus import skip_lot
from .errors import AlreadyJoined, AuctionError, InactiveAuction, InvalidAmount, NoLotsSelected, StaleState, UnknownLot
from .lot_selector import host_selection_ids, pool_lot_ids, seed_pool, select_next_lot
from .notifier import publish_state_update
from .states import AuctionStatus, Command, next_status
from .store import clear_pass_votes, compare_and_set, get_auction, require_host
from . import timer


def _lot_ids(values) -> List[int]:
    if not isinstance(values, (list, tuple)) or any(isinstance(v, bool) for v in values):
        raise UnknownLot('Lot ids must be a list of integers')
    try:
        return [int(v) for v in values]
    except (TypeError, ValueError):
        raise UnknownLot('Lot ids must be a list of integers') from None


def _replace_selection(host_id: str, lot_ids: Iterable[int]) -> List[int]:
    lot_ids = sorted(set(_lot_ids(lot_ids)))
    known = {r.id for r in db.session.query(Lot.id).filter(Lot.id.in_(lot_ids))} if lot_ids else set()
    missing = [lot_id for lot_id in lot_ids if lot_id not in known]
    if missing:
        raise UnknownLot(missing=missing)
    HostSelection.query.filter_by(user_id=host_id).delete(synchronize_session=False)
    for lot_id in lot_ids:
        db.session.add(HostSelection(user_id=host_id, lot_id=lot_id))
    return lot_ids


def select_lots(host_id, lot_ids) -> List[int]:
    """Replace the host's standing lot selection."""
    if not host_id:
        raise AuctionError('user_id is required')
    selected = _replace_selection(str(host_id), lot_ids or [])
    db.session.commit()
    current_app.logger.info(f"[select] host={host_id} lots={len(selected)}")
    return selected


def clear_selection(host_id) -> None:
    if not host_id:
        raise AuctionError('user_id is required')
    removed = HostSelection.query.filter_by(user_id=str(host_id)).delete(synchronize_session=False)
    db.session.commit()
    current_app.logger.info(f"[select-clear] host={host_id} removed={removed}")


def reset_selection_to_default(host_id) -> List[int]:
    """Select the whole catalog for the host, replacing any earlier choice."""
    if not host_id:
        raise AuctionError('user_id is required')
    catalog = [r.id for r in db.session.query(Lot.id)]
    selected = _replace_selection(str(host_id), catalog)
    db.session.commit()
    current_app.logger.info(f"[select-default] host={host_id} lots={len(selected)}")
    return selected


def create_auction(host_id, budget_per_participant, name: Optional[str] = None, lot_ids=None) -> Auction:
    if not host_id:
        raise AuctionError('host_id is required')
    try:
        budget = parse_amount(budget_per_participant)
    except InvalidAmount:
        raise InvalidAmount('Budget must be a positive whole number') from None

    host_id = str(host_id)
    if lot_ids is not None:
        _replace_selection(host_id, lot_ids)
    auction = Auction(host_id=host_id, name=name or 'Auction', budget_per_participant=budget)
    db.session.add(auction)
    db.session.flush()
    seeded = seed_pool(auction.id, host_selection_ids(host_id))
    db.session.commit()
    current_app.logger.info(f"[create] auction={auction.id} host={host_id} budget={budget} lots={seeded}")
    return auction


def join_auction(auction_id: int, user_id) -> Participant:
    auction = get_auction(auction_id)
    if not user_id:
        raise AuctionError('user_id is required')
    if auction.status == AuctionStatus.COMPLETED:
        raise InactiveAuction('Auction has already completed')
    user_id = str(user_id)
    if Participant.query.filter_by(auction_id=auction_id, user_id=user_id).first():
        raise AlreadyJoined()
    budget = auction.budget_per_participant
    participant = Participant(auction_id=auction_id, user_id=user_id, initial_budget=budget, remaining_budget=budget)
    db.session.add(participant)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise AlreadyJoined() from None
    current_app.logger.info(f"[join] auction={auction_id} user={user_id} budget={budget}")
    publish_state_update(auction_id)
    return participant


def _reset_for_restart(auction: Auction) -> None:
    selection = host_selection_ids(auction.host_id)
    if not selection:
        raise NoLotsSelected()
    for model in (WinnerRecord, SkipRecord, PassVote):
        model.query.filter_by(auction_id=auction.id).delete(synchronize_session=False)
    # Budgets carry over; money spent on earlier runs stays spent
    Participant.query.filter_by(auction_id=auction.id).update({'lots_won': 0}, synchronize_session=False)
    seed_pool(auction.id, selection)


def start_auction(auction_id: int, user_id) -> Auction:
    auction = get_auction(auction_id)
    require_host(auction, user_id)
    seen_status = auction.status
    target = next_status(seen_status, Command.START)
    restart = seen_status == AuctionStatus.COMPLETED

    values = {}
    if restart:
        _reset_for_restart(auction)
        values.update(completed_lot_count=0, skipped_lot_count=0)
    elif not pool_lot_ids(auction_id):
        selection = host_selection_ids(auction.host_id)
        if not selection:
            raise NoLotsSelected()
        seed_pool(auction_id, selection)
    db.session.flush()

    lot = select_next_lot(auction_id)
    if lot is None:
        db.session.rollback()
        raise NoLotsSelected('No lots left to auction')

    values.update(
        status=target.value,
        current_lot_id=lot.id,
        current_bid_amount=0,
        current_bidder_id=None,
        pass_vote_count=0,
        last_event_time=timer.now(),
        paused_at=None,
    )
    if not compare_and_set(auction_id, {'status': seen_status}, values):
        db.session.rollback()
        raise StaleState()
    db.session.commit()
    current_app.logger.info(
        f"[{'restart' if restart else 'start'}] auction={auction_id} first_lot={lot.id}"
    )
    publish_state_update(auction_id)
    return get_auction(auction_id)


def _host_status_change(auction_id: int, user_id, command: Command, **values) -> Auction:
    auction = get_auction(auction_id)
    require_host(auction, user_id)
    seen_status = auction.status
    target = next_status(seen_status, command)
    values['status'] = target.value
    if not compare_and_set(auction_id, {'status': seen_status}, values):
        db.session.rollback()
        raise StaleState()
    db.session.commit()
    current_app.logger.info(f"[{command.value}] auction={auction_id} {seen_status} -> {target.value}")
    publish_state_update(auction_id)
    return get_auction(auction_id)


def pause_auction(auction_id: int, user_id) -> Auction:
    # last_event_time stays put; paused_at freezes the derived countdown
    return _host_status_change(auction_id, user_id, Command.PAUSE, paused_at=timer.now())


def resume_auction(auction_id: int, user_id) -> Auction:
    return _host_status_change(auction_id, user_id, Command.RESUME, last_event_time=timer.now(), paused_at=None)


def skip_current_lot(auction_id: int, user_id) -> Auction:
    auction = get_auction(auction_id)
    require_host(auction, user_id)
    next_status(auction.status, Command.SKIP)
    if auction.current_lot_id is None:
        raise InactiveAuction('No lot is up for bidding')
    skip_lot(auction_id, auction.current_lot_id, reason='host')
    return get_auction(auction_id)


def end_auction(auction_id: int, user_id) -> Auction:
    """Force the auction to Completed, dropping whatever lot is up."""
    auction = get_auction(auction_id)
    require_host(auction, user_id)
    seen_status = auction.status
    next_status(seen_status, Command.END)
    if seen_status == AuctionStatus.COMPLETED:
        return auction
    lot_id = auction.current_lot_id
    ended = compare_and_set(
        auction_id,
        {'status': seen_status},
        {
            'status': AuctionStatus.COMPLETED.value,
            'current_lot_id': None,
            'current_bid_amount': 0,
            'current_bidder_id': None,
            'pass_vote_count': 0,
            'paused_at': None,
        },
    )
    if not ended:
        db.session.rollback()
        raise StaleState()
    if lot_id is not None:
        clear_pass_votes(auction_id, lot_id)
    db.session.commit()
    current_app.logger.info(f"[end] auction={auction_id} ended by host from {seen_status}")
    publish_state_update(auction_id)
    return get_auction(auction_id)


def list_auctions(host_id=None) -> List[Auction]:
    """Auctions newest first, optionally only those run by ``host_id``."""
    query = Auction.query
    if host_id:
        query = query.filter_by(host_id=str(host_id))
    return query.order_by(Auction.created_at.desc(), Auction.id.desc()).all()


def delete_auction(auction_id: int, user_id) -> None:
    """Remove the auction with its participants, pool and per-lot records."""
    auction = get_auction(auction_id)
    require_host(auction, user_id)
    for model in (PassVote, SkipRecord, WinnerRecord, AuctionLot, Participant):
        model.query.filter_by(auction_id=auction_id).delete(synchronize_session=False)
    db.session.expunge(auction)
    Auction.query.filter_by(id=auction_id).delete(synchronize_session=False)
    db.session.commit()
    current_app.logger.info(f"[delete] auction={auction_id} host={user_id}")
    publish_state_update(auction_id)
