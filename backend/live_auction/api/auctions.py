from flask import Blueprint, jsonify, request, current_app
from live_auction import db
from live_auction.services.auctions.errors import AuctionError
from live_auction.services.auctions.bidding import submit_bid, submit_pass
from live_auction.services.auctions.host_control import (
    create_auction,
    delete_auction,
    end_auction,
    join_auction,
    list_auctions,
    pause_auction,
    resume_auction,
    skip_current_lot,
    start_auction,
)
from live_auction.services.auctions.scheduler import schedule_lot_timer as svc_schedule_lot_timer
from live_auction.services.auctions.snapshot import get_auction_snapshot
from live_auction.services.auctions.timer import resolve_lot


auctions = Blueprint('auctions', __name__)


@auctions.errorhandler(AuctionError)
def handle_auction_error(exc):
    db.session.rollback()
    if exc.status >= 500:
        current_app.logger.error(f"[api-error] {exc.code}: {exc.message}")
    return jsonify(exc.to_dict()), exc.status


def _schedule_lot_timer(auction_id: int) -> None:
    svc_schedule_lot_timer(current_app._get_current_object(), auction_id)


def _snapshot_response(auction_id: int, status: int = 200):
    return jsonify(get_auction_snapshot(auction_id)), status


@auctions.route('', methods=['POST'])
def create():
    data = request.get_json(silent=True) or {}
    auction = create_auction(
        data.get('host_id'),
        data.get('budget_per_participant'),
        name=data.get('name'),
        lot_ids=data.get('lot_ids'),
    )
    return _snapshot_response(auction.id, 201)


@auctions.route('', methods=['GET'])
def index():
    rows = list_auctions(request.args.get('host_id'))
    return jsonify([
        dict(auction.to_dict(), participants=[p.to_dict() for p in auction.participants])
        for auction in rows
    ])


@auctions.route('/<int:auction_id>', methods=['GET'])
def snapshot(auction_id):
    return _snapshot_response(auction_id)


@auctions.route('/<int:auction_id>', methods=['DELETE'])
def delete(auction_id):
    data = request.get_json(silent=True) or {}
    delete_auction(auction_id, data.get('user_id'))
    return jsonify({'deleted': True, 'auction_id': auction_id})


@auctions.route('/<int:auction_id>/join', methods=['POST'])
def join(auction_id):
    data = request.get_json(silent=True) or {}
    participant = join_auction(auction_id, data.get('user_id'))
    return jsonify(participant.to_dict()), 201


@auctions.route('/<int:auction_id>/start', methods=['POST'])
def start(auction_id):
    data = request.get_json(silent=True) or {}
    start_auction(auction_id, data.get('user_id'))
    _schedule_lot_timer(auction_id)
    return _snapshot_response(auction_id)


@auctions.route('/<int:auction_id>/pause', methods=['POST'])
def pause(auction_id):
    data = request.get_json(silent=True) or {}
    pause_auction(auction_id, data.get('user_id'))
    return _snapshot_response(auction_id)


@auctions.route('/<int:auction_id>/resume', methods=['POST'])
def resume(auction_id):
    data = request.get_json(silent=True) or {}
    resume_auction(auction_id, data.get('user_id'))
    _schedule_lot_timer(auction_id)
    return _snapshot_response(auction_id)


@auctions.route('/<int:auction_id>/skip', methods=['POST'])
def skip(auction_id):
    data = request.get_json(silent=True) or {}
    skip_current_lot(auction_id, data.get('user_id'))
    _schedule_lot_timer(auction_id)
    return _snapshot_response(auction_id)


@auctions.route('/<int:auction_id>/end', methods=['POST'])
def end(auction_id):
    data = request.get_json(silent=True) or {}
    end_auction(auction_id, data.get('user_id'))
    return _snapshot_response(auction_id)


@auctions.route('/<int:auction_id>/bid', methods=['POST'])
def bid(auction_id):
    data = request.get_json(silent=True) or {}
    submit_bid(auction_id, data.get('user_id'), data.get('amount'))
    _schedule_lot_timer(auction_id)
    return _snapshot_response(auction_id)


@auctions.route('/<int:auction_id>/pass', methods=['POST'])
def pass_lot(auction_id):
    data = request.get_json(silent=True) or {}
    submit_pass(auction_id, data.get('user_id'))
    _schedule_lot_timer(auction_id)
    return _snapshot_response(auction_id)


@auctions.route('/<int:auction_id>/resolve', methods=['POST'])
def resolve(auction_id):
    """Called by any client whose derived countdown reached zero."""
    data = request.get_json(silent=True) or {}
    resolved = resolve_lot(auction_id, lot_id=data.get('lot_id'))
    if resolved:
        _schedule_lot_timer(auction_id)
    payload = get_auction_snapshot(auction_id)
    payload['resolved'] = resolved
    return jsonify(payload)
