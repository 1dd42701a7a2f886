from flask import Blueprint, jsonify, request
from live_auction import db
from live_auction.models import Lot
from live_auction.services.auctions.errors import AuctionError
from live_auction.services.auctions.host_control import clear_selection, reset_selection_to_default, select_lots
from live_auction.services.auctions.lot_selector import host_selection_ids

lots = Blueprint('lots', __name__)


@lots.errorhandler(AuctionError)
def handle_auction_error(exc):
    db.session.rollback()
    return jsonify(exc.to_dict()), exc.status


@lots.route('', methods=['GET'])
def catalog():
    rows = Lot.query.order_by(Lot.rating.desc(), Lot.id).all()
    return jsonify([lot.to_dict() for lot in rows])


@lots.route('/selection', methods=['PUT'])
def replace_selection():
    """Replace the caller's lot selection used to seed their auctions."""
    data = request.get_json(silent=True) or {}
    selected = select_lots(data.get('user_id'), data.get('lot_ids'))
    return jsonify({'user_id': str(data.get('user_id')), 'lot_ids': selected})


@lots.route('/selection', methods=['DELETE'])
def deselect_all():
    data = request.get_json(silent=True) or {}
    clear_selection(data.get('user_id'))
    return jsonify({'user_id': str(data.get('user_id')), 'lot_ids': []})


@lots.route('/selection/reset', methods=['POST'])
def reset_selection():
    data = request.get_json(silent=True) or {}
    selected = reset_selection_to_default(data.get('user_id'))
    return jsonify({'user_id': str(data.get('user_id')), 'lot_ids': selected})


@lots.route('/selection/<string:user_id>', methods=['GET'])
def get_selection(user_id):
    return jsonify({'user_id': user_id, 'lot_ids': host_selection_ids(user_id)})
