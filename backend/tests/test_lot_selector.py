from live_auction import db
from live_auction.models import SkipRecord, WinnerRecord, tier_for_rating, TIER_FLOORS, Lot
from live_auction.services.auctions.lot_selector import (
    candidate_lot_ids,
    pool_stats,
    select_next_lot,
)


def test_tier_brackets():
    assert tier_for_rating(91) == 'Elite'
    assert tier_for_rating(85) == 'Elite'
    assert tier_for_rating(84) == 'Gold'
    assert tier_for_rating(80) == 'Gold'
    assert tier_for_rating(75) == 'Silver'
    assert tier_for_rating(74) == 'Bronze'


def test_lot_floor_follows_tier(make_lots):
    (elite,) = make_lots(('Playmaker', 88))
    lot = db.session.get(Lot, elite)
    assert lot.tier == 'Elite'
    assert lot.opening_floor == TIER_FLOORS['Elite'] == 60


def test_won_and_retired_lots_are_excluded(make_auction, rng):
    auction_id, (won, skipped_once, retired, fresh) = make_auction(
        lot_specs=(('A', 90), ('B', 82), ('C', 77), ('D', 70)),
    )
    db.session.add(WinnerRecord(auction_id=auction_id, lot_id=won, winner_id='alice', winning_bid=60))
    db.session.add(SkipRecord(auction_id=auction_id, lot_id=skipped_once, skip_count=1))
    db.session.add(SkipRecord(auction_id=auction_id, lot_id=retired, skip_count=2))
    db.session.commit()

    assert candidate_lot_ids(auction_id) == [skipped_once, fresh]
    assert pool_stats(auction_id) == {
        'total_lots': 4,
        'won_lots': 1,
        'retired_lots': 1,
        'available_lots': 2,
    }
    for _ in range(10):
        lot = select_next_lot(auction_id, rng=rng)
        assert lot.id in (skipped_once, fresh)


def test_exhausted_pool_returns_none(make_auction):
    auction_id, (only,) = make_auction()
    db.session.add(WinnerRecord(auction_id=auction_id, lot_id=only, winner_id='bob', winning_bid=70))
    db.session.commit()
    assert select_next_lot(auction_id) is None


def test_select_writes_nothing(make_auction):
    auction_id, _ = make_auction(lot_specs=(('A', 90), ('B', 60)))
    before = pool_stats(auction_id)
    select_next_lot(auction_id)
    assert pool_stats(auction_id) == before
