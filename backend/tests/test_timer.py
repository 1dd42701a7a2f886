import pytest

from live_auction.services.auctions import timer
from live_auction.services.auctions.bidding import submit_bid
from live_auction.services.auctions.errors import UnknownLot
from live_auction.services.auctions.host_control import pause_auction, resume_auction
from live_auction.services.auctions.snapshot import get_auction_snapshot
from live_auction.services.auctions.store import get_auction
from live_auction.models import WinnerRecord


def test_remaining_time_is_derived_and_clamped(started_auction, clock):
    auction_id, _ = started_auction()
    auction = get_auction(auction_id)
    assert timer.remaining_seconds(auction) == 30
    assert timer.deadline(auction) == clock.current + 30

    clock.advance(12)
    assert timer.remaining_seconds(auction) == 18
    assert not timer.is_expired(auction)

    clock.advance(100)
    assert timer.remaining_seconds(auction) == 0
    assert timer.is_expired(auction)

    # A clock that reads before the anchor never yields more than the duration
    assert timer.remaining_seconds(auction, at=auction.last_event_time - 50) == 30


def test_pause_freezes_and_resume_restarts(started_auction, clock):
    auction_id, _ = started_auction()
    clock.advance(10)
    pause_auction(auction_id, 'host')

    clock.advance(500)
    snapshot = get_auction_snapshot(auction_id)
    assert snapshot['status'] == 'paused'
    assert snapshot['remaining_seconds'] == 20
    assert snapshot['deadline'] is None
    assert not timer.is_expired(get_auction(auction_id))

    auction = resume_auction(auction_id, 'host')
    assert auction.status == 'active'
    assert auction.paused_at is None
    assert timer.remaining_seconds(auction) == 30


def test_pause_keeps_standing_bid(started_auction, clock):
    auction_id, _ = started_auction()
    submit_bid(auction_id, 'alice', 60)
    pause_auction(auction_id, 'host')
    auction = resume_auction(auction_id, 'host')
    assert auction.current_bid_amount == 60
    assert auction.current_bidder_id == 'alice'


def test_resolve_before_expiry_is_noop(started_auction, clock):
    auction_id, (lot_id,) = started_auction()
    submit_bid(auction_id, 'alice', 60)
    clock.advance(29)
    version = get_auction(auction_id).version

    assert timer.resolve_lot(auction_id, lot_id=lot_id) is False
    auction = get_auction(auction_id)
    assert auction.version == version
    assert auction.current_lot_id == lot_id
    assert WinnerRecord.query.count() == 0


def test_resolve_for_another_lot_is_noop(started_auction, clock):
    auction_id, (lot_id,) = started_auction()
    clock.advance(31)
    assert timer.resolve_lot(auction_id, lot_id=lot_id + 1000) is False
    assert get_auction(auction_id).current_lot_id == lot_id


def test_resolve_while_paused_is_noop(started_auction, clock):
    auction_id, _ = started_auction()
    pause_auction(auction_id, 'host')
    clock.advance(60)
    assert timer.resolve_lot(auction_id) is False
    assert get_auction(auction_id).status == 'paused'


def test_resolve_rejects_malformed_lot_id(started_auction, clock):
    auction_id, (lot_id,) = started_auction()
    clock.advance(30)
    for bad in ('abc', True, [lot_id]):
        with pytest.raises(UnknownLot):
            timer.resolve_lot(auction_id, lot_id=bad)
    assert get_auction(auction_id).current_lot_id == lot_id
    # Numeric strings from JSON clients still resolve
    assert timer.resolve_lot(auction_id, lot_id=str(lot_id)) is True
