from datetime import datetime
from typing import Optional

from flask import current_app

from hvz import db
from hvz.models import Game, Player, User
from hvz.services.errors import (
    GameNotActive,
    GameNotFound,
    GameNotInWindow,
    IllegalPhaseTransition,
    InvalidGameConfiguration,
    NoPlayersRegistered,
)
from hvz.services.types import GamePhase, NEXT_PHASE
from hvz.services.visibility.window import is_active


def get_game(game_id: int) -> Game:
    game = db.session.get(Game, game_id)
    if game is None:
        raise GameNotFound(f'Game {game_id} not found')
    return game


def create_game(title: str, admin_id: int, begin_time: datetime, end_time: datetime,
                description: Optional[str] = None) -> Game:
    """Create a game in the ``created`` phase.

    The window must be well formed and the administrator must exist.
    """
    if begin_time is None or end_time is None or not begin_time < end_time:
        raise InvalidGameConfiguration('begin_time must be before end_time')
    if admin_id is None or db.session.get(User, admin_id) is None:
        raise InvalidGameConfiguration(f'Unknown administrator {admin_id}')
    if not title:
        raise InvalidGameConfiguration('title is required')

    game = Game(
        title=title,
        description=description,
        begin_time=begin_time,
        end_time=end_time,
        phase=GamePhase.CREATED.value,
        admin_id=admin_id,
    )
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[create] game={game.id} admin={admin_id} window={begin_time}..{end_time}")
    return game


def advance(game_id: int, target, now: datetime, min_players: int = 1) -> Game:
    """Move a game one step forward: created -> registration -> active -> ended.

    Going active also needs registered players and ``now`` inside the
    game's window.
    """
    game = get_game(game_id)
    current = game.game_phase
    try:
        target = GamePhase(target)
    except ValueError:
        raise IllegalPhaseTransition(f'Unknown phase {target!r}')

    if NEXT_PHASE.get(current) != target:
        raise IllegalPhaseTransition(f'Cannot move game {game.id} from {current.value} to {target.value}')

    if target == GamePhase.ACTIVE:
        registered = Player.query.filter_by(game_id=game.id).count()
        if registered < max(1, min_players):
            raise NoPlayersRegistered(f'Game {game.id} has {registered} registered players')
        if not is_active(game.begin_time, game.end_time, now):
            raise GameNotInWindow(f'Game {game.id} runs {game.begin_time.isoformat()} to {game.end_time.isoformat()}')

    game.phase = target.value
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[advance] game={game.id} {current.value} -> {target.value}")
    return game


GAME_FIELDS = ('title', 'description', 'begin_time', 'end_time')


def update_game(game_id: int, **fields) -> Game:
    """Change a game's details or window. The phase only moves through ``advance`` and ``cancel``."""
    game = get_game(game_id)
    unknown = sorted(set(fields) - set(GAME_FIELDS))
    if unknown:
        raise InvalidGameConfiguration(f'Cannot update {", ".join(unknown)} of a game')

    values = {name: getattr(game, name) for name in GAME_FIELDS}
    values.update(fields)
    if not values['title']:
        raise InvalidGameConfiguration('title is required')
    if values['begin_time'] is None or values['end_time'] is None or not values['begin_time'] < values['end_time']:
        raise InvalidGameConfiguration('begin_time must be before end_time')

    for name, value in fields.items():
        setattr(game, name, value)
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[update] game={game.id} fields={sorted(fields)}")
    return game


def cancel(game_id: int) -> Game:
    game = get_game(game_id)
    current = game.game_phase
    if current.is_terminal:
        raise IllegalPhaseTransition(f'Game {game.id} is already {current.value}')
    game.phase = GamePhase.CANCELLED.value
    db.session.add(game)
    db.session.commit()
    current_app.logger.info(f"[cancel] game={game.id} {current.value} -> cancelled")
    return game


def require_active(game_id: int) -> Game:
    """Return the game if it is active; infection and movement go through here."""
    game = get_game(game_id)
    if game.game_phase != GamePhase.ACTIVE:
        raise GameNotActive(f'Game {game.id} is {game.phase}')
    return game


def delete_game(game_id: int) -> None:
    """Delete a game with its maps, points of interest, squads and players."""
    game = get_game(game_id)
    db.session.delete(game)
    db.session.commit()
    current_app.logger.info(f"[delete] game={game_id}")
