from live_auction.models import SkipRecord, WinnerRecord, Participant
from live_auction.services.auctions.bidding import submit_bid, submit_pass
from live_auction.services.auctions.consensus import consensus_reached, count_votes
from live_auction.services.auctions.store import get_auction, pass_voter_ids
from live_auction.services.auctions.timer import resolve_lot


def _skip_count(auction_id, lot_id):
    record = SkipRecord.query.filter_by(auction_id=auction_id, lot_id=lot_id).first()
    return record.skip_count if record else 0


def test_votes_only_count_current_participants():
    assert count_votes({'a', 'b', 'ghost'}, {'a', 'b', 'c'}) == 2
    assert not consensus_reached({'a', 'b'}, {'a', 'b', 'c'})
    assert consensus_reached({'a', 'b', 'c'}, {'a', 'b', 'c'})
    assert not consensus_reached(set(), set())


def test_all_passing_skips_lot(started_auction):
    auction_id, (lot_id,) = started_auction(participants=('alice', 'bob', 'cara'))
    submit_pass(auction_id, 'alice')
    submit_pass(auction_id, 'bob')
    assert _skip_count(auction_id, lot_id) == 0

    auction = submit_pass(auction_id, 'cara')
    assert _skip_count(auction_id, lot_id) == 1
    assert auction.skipped_lot_count == 1
    # Skipped once, so the lot is still eligible and comes straight back
    assert auction.current_lot_id == lot_id
    assert auction.pass_vote_count == 0
    assert pass_voter_ids(auction_id, lot_id) == set()


def test_second_skip_retires_lot_and_exhausts_pool(started_auction):
    auction_id, (lot_id,) = started_auction(participants=('alice', 'bob', 'cara'))
    for _ in range(2):
        for user_id in ('alice', 'bob', 'cara'):
            submit_pass(auction_id, user_id)

    auction = get_auction(auction_id)
    assert _skip_count(auction_id, lot_id) == 2
    assert auction.status == 'completed'
    assert auction.current_lot_id is None
    assert auction.skipped_lot_count == 2


def test_consensus_with_standing_bid_still_skips(started_auction):
    auction_id, (lot_id,) = started_auction(participants=('alice', 'bob'))
    submit_bid(auction_id, 'alice', 60)
    submit_pass(auction_id, 'bob')
    auction = submit_pass(auction_id, 'alice')

    assert _skip_count(auction_id, lot_id) == 1
    assert auction.current_bid_amount == 0
    assert auction.current_bidder_id is None
    assert WinnerRecord.query.filter_by(auction_id=auction_id).count() == 0
    alice = Participant.query.filter_by(auction_id=auction_id, user_id='alice').one()
    assert alice.remaining_budget == 100


def test_timeout_without_bids_skips(started_auction, clock):
    auction_id, (lot_id,) = started_auction()
    clock.advance(30)
    assert resolve_lot(auction_id, lot_id=lot_id) is True
    assert _skip_count(auction_id, lot_id) == 1
    auction = get_auction(auction_id)
    assert auction.last_event_time == clock.current
    assert auction.skipped_lot_count == 1


def test_pass_restarts_countdown(started_auction, clock):
    auction_id, _ = started_auction(participants=('alice', 'bob', 'cara'))
    clock.advance(25)
    auction = submit_pass(auction_id, 'alice')
    assert auction.last_event_time == clock.current
