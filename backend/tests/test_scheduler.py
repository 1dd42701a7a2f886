from live_auction import db
from live_auction.models import SkipRecord
from live_auction.services.auctions.scheduler import schedule_lot_timer
from live_auction.services.auctions.store import get_auction


def test_scheduler_is_off_in_tests_by_default(flask_app, started_auction):
    auction_id, _ = started_auction()
    version = get_auction(auction_id).version
    schedule_lot_timer(flask_app, auction_id)
    db.session.expire_all()
    assert get_auction(auction_id).version == version


def test_scheduler_resolves_lots_until_pool_exhausted(flask_app, started_auction):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    flask_app.config['LOT_DURATION_SEC'] = 0
    auction_id, lot_ids = started_auction(lot_specs=(('A', 90), ('B', 70)))

    schedule_lot_timer(flask_app, auction_id)

    db.session.expire_all()
    auction = get_auction(auction_id)
    assert auction.status == 'completed'
    # Each lot times out twice before it leaves the pool
    assert auction.skipped_lot_count == 4
    counts = {r.lot_id: r.skip_count for r in SkipRecord.query.filter_by(auction_id=auction_id)}
    assert counts == {lot_ids[0]: 2, lot_ids[1]: 2}
