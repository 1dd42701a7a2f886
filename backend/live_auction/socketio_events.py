from flask import current_app
from flask_socketio import join_room, leave_room, emit
from live_auction import socketio, db
from live_auction.services.auctions.errors import AuctionError
from live_auction.services.auctions.notifier import room_for
from live_auction.services.auctions.snapshot import get_auction_snapshot
from live_auction.services.auctions import timer


def handle_connect():
    emit('connected', {'message': 'Connected to /ws', 'server_time': timer.now()})


def _auction_id(data):
    raw = (data or {}).get('auction_id')
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def handle_join_auction(data):
    auction_id = _auction_id(data)
    if auction_id is None:
        emit('error', {'message': 'auction_id is required'})
        return
    try:
        snapshot = get_auction_snapshot(auction_id)
    except AuctionError as exc:
        db.session.rollback()
        emit('error', exc.to_dict())
        return
    room = room_for(auction_id)
    join_room(room)
    emit('joined', {'room': room})
    # A (re)joining client must drop any cached countdown and start from this
    emit('snapshot', snapshot)


def handle_leave_auction(data):
    auction_id = _auction_id(data)
    if auction_id is None:
        emit('error', {'message': 'auction_id is required'})
        return
    room = room_for(auction_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    """Liveness probe; clients send this every LIVENESS_PROBE_SEC seconds."""
    payload = dict(data or {})
    payload['server_time'] = timer.now()
    payload['probe_interval'] = int(current_app.config.get('LIVENESS_PROBE_SEC', 30))
    emit('pong', payload)


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_auction', handle_join_auction, namespace=namespace)
        socketio.on_event('leave_auction', handle_leave_auction, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
