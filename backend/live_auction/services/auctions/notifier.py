from live_auction import db, socketio
from live_auction.models import Auction


def room_for(auction_id: int) -> str:
    return f"auction:{auction_id}"


def publish_state_update(auction_id: int) -> None:
    """Tell everyone watching the auction to refetch its snapshot.

    Payloads are not deltas; subscribers must reload the full state.
    """
    row = db.session.query(Auction.version).filter_by(id=auction_id).first()
    socketio.emit(
        'state_update',
        {'auction_id': auction_id, 'version': row.version if row else None},
        to=room_for(auction_id),
        namespace='/ws',
    )
