"""Bids and passes on the current lot.

Both operations read the auction, validate, then write with a guard on what
they read (current lot, standing bid). A guard that no longer holds means a
concurrent bid or advance landed first.
"""

from flask import current_app
from sqlalchemy.exc import IntegrityError

from live_auction import db
from live_auction.models import DEFAULT_FLOOR, PassVote
from .consensus import consensus_reached, count_votes, skip_in_transaction
from .errors import BidTooLow, InactiveAuction, InsufficientBudget, InvalidAmount, StaleState
from .notifier import publish_state_update
from .states import AuctionStatus, Command, next_status
from .store import (
    clear_pass_votes,
    compare_and_set,
    get_auction,
    get_participant,
    lock_auction,
    participant_ids,
    pass_voter_ids,
)
from . import timer


def bid_increment() -> int:
    return int(current_app.config.get('BID_INCREMENT', 5))


def minimum_bid(auction) -> int:
    """Smallest acceptable bid on the current lot."""
    if auction.current_bid_amount > 0:
        return auction.current_bid_amount + bid_increment()
    lot = auction.current_lot
    return lot.opening_floor if lot is not None else DEFAULT_FLOOR


def parse_amount(amount) -> int:
    if isinstance(amount, bool) or (isinstance(amount, float) and not amount.is_integer()):
        raise InvalidAmount()
    try:
        value = int(amount)
    except (TypeError, ValueError):
        raise InvalidAmount() from None
    if value <= 0:
        raise InvalidAmount()
    return value


def _require_open_lot(auction, command):
    next_status(auction.status, command)
    if auction.current_lot_id is None:
        raise InactiveAuction('No lot is up for bidding')


def submit_bid(auction_id: int, user_id, amount):
    amount = parse_amount(amount)
    auction = get_auction(auction_id)
    _require_open_lot(auction, Command.BID)
    participant = get_participant(auction_id, user_id)

    lot_id = auction.current_lot_id
    seen_amount = auction.current_bid_amount
    minimum = minimum_bid(auction)
    if amount < minimum:
        raise BidTooLow(f'Bid must be at least {minimum}', minimum_bid=minimum)
    if participant.remaining_budget < amount:
        raise InsufficientBudget(remaining_budget=participant.remaining_budget)

    applied = compare_and_set(
        auction_id,
        {
            'status': AuctionStatus.ACTIVE.value,
            'current_lot_id': lot_id,
            'current_bid_amount': seen_amount,
        },
        {
            'current_bid_amount': amount,
            'current_bidder_id': participant.user_id,
            'pass_vote_count': 0,
            'last_event_time': timer.now(),
        },
    )
    if not applied:
        db.session.rollback()
        current_app.logger.info(
            f"[bid-stale] auction={auction_id} lot={lot_id} user={participant.user_id} amount={amount} seen={seen_amount}"
        )
        raise StaleState()

    clear_pass_votes(auction_id, lot_id)
    db.session.commit()
    current_app.logger.info(f"[bid] auction={auction_id} lot={lot_id} user={participant.user_id} amount={amount}")
    publish_state_update(auction_id)
    return get_auction(auction_id)


def submit_pass(auction_id: int, user_id):
    """Record the caller's pass on the current lot.

    Repeat passes are no-ops. When the pass completes consensus the lot is
    skipped; otherwise the countdown restarts and the standing bid is kept.
    """
    auction = get_auction(auction_id)
    _require_open_lot(auction, Command.PASS)
    participant = get_participant(auction_id, user_id)
    voter = participant.user_id
    lot_id = auction.current_lot_id

    if voter in pass_voter_ids(auction_id, lot_id):
        return auction

    # Lock the auction row first so concurrent passes count each other's votes
    locked = lock_auction(
        auction_id,
        {
            'status': AuctionStatus.ACTIVE.value,
            'current_lot_id': lot_id,
            'current_bid_amount': auction.current_bid_amount,
        },
    )
    if not locked:
        db.session.rollback()
        current_app.logger.info(f"[pass-noop] auction={auction_id} lot={lot_id} user={voter} lot moved on")
        return get_auction(auction_id)

    db.session.add(PassVote(auction_id=auction_id, lot_id=lot_id, user_id=voter))
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.info(f"[pass-dup] auction={auction_id} lot={lot_id} user={voter}")
        return get_auction(auction_id)

    voters = pass_voter_ids(auction_id, lot_id)
    members = participant_ids(auction_id)
    if consensus_reached(voters, members):
        skip_in_transaction(auction_id, lot_id)
        current_app.logger.info(f"[pass-consensus] auction={auction_id} lot={lot_id} voters={len(voters)}")
    else:
        votes = count_votes(voters, members)
        compare_and_set(
            auction_id,
            {'current_lot_id': lot_id},
            {'pass_vote_count': votes, 'last_event_time': timer.now()},
        )
        current_app.logger.info(f"[pass] auction={auction_id} lot={lot_id} user={voter} votes={votes}/{len(members)}")
    db.session.commit()
    publish_state_update(auction_id)
    return get_auction(auction_id)
