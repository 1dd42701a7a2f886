import time
from typing import Set, Tuple

from live_auction import db, socketio
from live_auction.models import Auction
from .errors import AuctionError
from .states import AuctionStatus
from .timer import remaining_seconds, resolve_lot


_scheduled_lot_keys: Set[Tuple[int, int, float]] = set()


def schedule_lot_timer(app, auction_id: int) -> None:
    """Schedule auto-resolution of the auction's current lot.

    - No-ops in TESTING mode
    - Ensures a single timer per (auction_id, lot, countdown anchor)
    - On wake, resolves the lot it was scheduled for; a bid or pass that
      re-anchored the countdown in the meantime turns that into a no-op
    - After a resolution, schedules the next lot's timer
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return

    with app.app_context():
        auction = db.session.get(Auction, auction_id)
        if not auction or auction.status != AuctionStatus.ACTIVE or not auction.current_lot_id:
            return

        lot_id = auction.current_lot_id
        anchor = auction.last_event_time
        key = (auction.id, lot_id, anchor)
        if key in _scheduled_lot_keys:
            app.logger.info(f"[timer-skip] auction={auction.id} lot={lot_id} already scheduled")
            return
        _scheduled_lot_keys.add(key)

        delay = remaining_seconds(auction)
        app.logger.info(f"[timer-set] auction={auction.id} lot={lot_id} delay={delay:.1f}s anchor={anchor}")

    def _worker(aid: int, expected_lot: int, expected_anchor: float, wait: float):
        hb = int(app.config.get('TIMER_HEARTBEAT_SEC', 0))
        if hb > 0:
            slept = 0.0
            while slept < wait:
                step = min(hb, wait - slept)
                time.sleep(step)
                slept += step
                app.logger.info(
                    f"[timer-heartbeat] auction={aid} lot={expected_lot} remaining={max(0.0, wait - slept):.1f}s"
                )
        else:
            time.sleep(wait)
        with app.app_context():
            _scheduled_lot_keys.discard((aid, expected_lot, expected_anchor))
            app.logger.info(f"[timer-fire] auction={aid} lot={expected_lot}")
            try:
                resolved = resolve_lot(aid, lot_id=expected_lot)
            except AuctionError as exc:
                db.session.rollback()
                app.logger.error(f"[timer-abort] auction={aid} lot={expected_lot} {exc.code}: {exc.message}")
                return
            if resolved:
                schedule_lot_timer(app, aid)

    if app.config.get('TESTING'):
        _worker(auction_id, lot_id, anchor, delay)
    else:
        socketio.start_background_task(_worker, auction_id, lot_id, anchor, delay)
