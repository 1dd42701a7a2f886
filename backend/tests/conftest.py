import os
import random
import sys
import pytest

# Ensure the backend root (containing the `live_auction` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from live_auction import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOT_DURATION_SEC = 30
    BID_INCREMENT = 5
    LOT_SKIP_LIMIT = 2
    LIVENESS_PROBE_SEC = 30
    TIMER_HEARTBEAT_SEC = 0
    ENABLE_SCHEDULER_IN_TESTS = False


class FakeClock:
    """Stand-in for the wall clock so countdowns can be stepped in tests."""

    def __init__(self, start=1_000_000.0):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, seconds):
        self.current += seconds


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import live_auction.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def clock(monkeypatch):
    from live_auction.services.auctions import timer
    fake = FakeClock()
    monkeypatch.setattr(timer, 'now', fake)
    return fake


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def make_lots(flask_app):
    """Insert lots given as (name, rating) pairs; returns their ids."""
    from live_auction.models import Lot

    def _make(*specs):
        lots = [Lot(name=name, rating=rating) for name, rating in specs]
        db.session.add_all(lots)
        db.session.commit()
        return [lot.id for lot in lots]

    return _make


@pytest.fixture()
def make_auction(flask_app, make_lots):
    """Create an auction for host 'host' over the given lots, with participants joined."""
    from live_auction.services.auctions.host_control import create_auction, join_auction

    def _make(lot_specs=(('Striker', 90),), participants=('alice', 'bob'), budget=100, host_id='host'):
        lot_ids = make_lots(*lot_specs)
        auction = create_auction(host_id, budget, name='Test auction', lot_ids=lot_ids)
        for user_id in participants:
            join_auction(auction.id, user_id)
        return auction.id, lot_ids

    return _make


@pytest.fixture()
def started_auction(make_auction, clock):
    """An Active auction whose current lot is put up at the fake clock's time."""
    from live_auction.services.auctions.host_control import start_auction

    def _make(**kwargs):
        auction_id, lot_ids = make_auction(**kwargs)
        start_auction(auction_id, kwargs.get('host_id', 'host'))
        return auction_id, lot_ids

    return _make
