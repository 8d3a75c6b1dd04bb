import time
from datetime import datetime, timezone
from typing import Set

from hvz import socketio
from hvz.models import Game
from hvz.services.errors import HvzError
from hvz.services.types import GamePhase
from . import lifecycle


_scheduled_games: Set[int] = set()


def utcnow() -> datetime:
    """Naive UTC wall clock, matching how times are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def schedule_auto_end(app, game_id: int) -> None:
    """End the game once its end time passes, if it is still active then.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Ensures a single timer per game
    """
    if not app.config.get('AUTO_END_GAMES', True):
        return
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return

    with app.app_context():
        game = Game.query.filter_by(id=game_id).first()
        if not game or game.phase != GamePhase.ACTIVE.value:
            return
        if game.id in _scheduled_games:
            app.logger.info(f"[timer-skip] game={game.id} already scheduled")
            return
        _scheduled_games.add(game.id)
        end_time = game.end_time
        delay = max(0.0, (game.end_time - utcnow()).total_seconds())
        app.logger.info(f"[timer-set] game={game.id} ends in {delay:.0f}s at {game.end_time.isoformat()}")

    def _worker(gid: int, wait: float, end_time):
        while True:
            time.sleep(wait)
            with app.app_context():
                g = Game.query.filter_by(id=gid).first()
                if not g or g.phase != GamePhase.ACTIVE.value:
                    _scheduled_games.discard(gid)
                    app.logger.info(f"[timer-abort] game={gid} no longer active")
                    return
                if g.end_time == end_time:
                    _scheduled_games.discard(gid)
                    break
                # The window was edited while we slept
                end_time = g.end_time
                wait = max(0.0, (end_time - utcnow()).total_seconds())
                app.logger.info(f"[timer-reset] game={gid} now ends at {end_time.isoformat()}")

        with app.app_context():
            try:
                lifecycle.advance(gid, GamePhase.ENDED, utcnow())
            except HvzError as exc:
                app.logger.warning(f"[timer-fail] game={gid} {exc.kind}: {exc.message}")
                return
            app.logger.info(f"[timer-fire] game={gid} ended")
            socketio.emit('game_over', {'game_id': gid, 'phase': GamePhase.ENDED.value}, to=f"game:{gid}", namespace='/ws')

    if app.config.get('TESTING'):
        _worker(game_id, delay, end_time)
    else:
        socketio.start_background_task(_worker, game_id, delay, end_time)
