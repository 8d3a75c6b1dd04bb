import secrets
from datetime import datetime
from typing import Callable, List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from hvz import db
from hvz.models import Infection, Player, Squad
from hvz.services.errors import (
    DuplicateRegistration,
    GameNotActive,
    InvalidBiteCode,
    PlayerNotFound,
    SquadNotFound,
)
from hvz.services.games.lifecycle import get_game, require_active
from hvz.services.types import Faction, GamePhase

# 16 bytes = 128 bits
MIN_BITE_CODE_BYTES = 16


def generate_bite_code(nbytes: int = MIN_BITE_CODE_BYTES) -> str:
    """Generate an unguessable bite code."""
    return secrets.token_urlsafe(max(nbytes, MIN_BITE_CODE_BYTES))


def _unique_bite_code(game_id: int, code_factory: Callable[[], str]) -> str:
    while True:
        code = code_factory()
        if not Player.query.filter_by(game_id=game_id, bite_code=code).first():
            return code


def register(game_id: int, user_id: int, latitude: float = 0.0, longitude: float = 0.0,
             code_factory: Callable[[], str] = generate_bite_code) -> Player:
    """Add a human player for ``user_id`` to the game.

    Registration is open while the game is in registration or active.
    The unique constraints settle concurrent registrations: a second player
    for the same user is a duplicate, a clashing bite code is drawn again.
    """
    game = get_game(game_id)
    if game.game_phase not in (GamePhase.REGISTRATION, GamePhase.ACTIVE):
        raise GameNotActive(f'Game {game.id} is not open for registration ({game.phase})')
    game_id = game.id

    while True:
        if Player.query.filter_by(game_id=game_id, user_id=user_id).first():
            raise DuplicateRegistration(f'User {user_id} already plays in game {game_id}')
        code = _unique_bite_code(game_id, code_factory)
        player = Player(
            game_id=game_id,
            user_id=user_id,
            faction=Faction.HUMAN.value,
            latitude=latitude,
            longitude=longitude,
            bite_code=code,
        )
        db.session.add(player)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            if Player.query.filter_by(game_id=game_id, user_id=user_id).first():
                raise DuplicateRegistration(f'User {user_id} already plays in game {game_id}')
            if not Player.query.filter_by(game_id=game_id, bite_code=code).first():
                raise
            current_app.logger.info(f"[register-retry] game={game_id} bite code taken concurrently")
            continue
        current_app.logger.info(f"[register] game={game_id} user={user_id} player={player.id}")
        return player


def _claim_bite_code(player_id: int, bite_code: str) -> bool:
    """Atomically turn the code's owner into a zombie and retire the code.

    A single conditional UPDATE: of any number of callers racing on the same
    code, only one sees a changed row.
    """
    changed = (
        Player.query
        .filter_by(id=player_id, bite_code=bite_code)
        .update(
            {Player.faction: Faction.ZOMBIE.value, Player.bite_code: None},
            synchronize_session=False,
        )
    )
    return changed == 1


def infect(game_id: int, bite_code: str, now: datetime) -> Player:
    """Turn the human owning ``bite_code`` into a zombie.

    Unknown and already used codes both fail with ``InvalidBiteCode``.
    """
    game = require_active(game_id)
    if not bite_code:
        raise InvalidBiteCode('A bite code is required')

    victim = Player.query.filter_by(game_id=game.id, bite_code=bite_code).first()
    if victim is None or not _claim_bite_code(victim.id, bite_code):
        db.session.rollback()
        raise InvalidBiteCode('Bite code is unknown or has already been used')

    db.session.add(Infection(
        game_id=game.id,
        victim_id=victim.id,
        occurred_at=now,
        latitude=victim.latitude,
        longitude=victim.longitude,
    ))
    db.session.commit()
    db.session.refresh(victim)
    current_app.logger.info(f"[infect] game={game.id} player={victim.id}")
    return victim


def get_player(game_id: int, player_id: int) -> Player:
    player = Player.query.filter_by(id=player_id, game_id=game_id).first()
    if player is None:
        raise PlayerNotFound(f'Player {player_id} not found in game {game_id}')
    return player


def update_position(game_id: int, player_id: int, latitude: float, longitude: float) -> Player:
    require_active(game_id)
    player = get_player(game_id, player_id)
    player.latitude = latitude
    player.longitude = longitude
    db.session.add(player)
    db.session.commit()
    return player


def delete_player(game_id: int, player_id: int) -> None:
    player = get_player(game_id, player_id)
    db.session.delete(player)
    db.session.commit()
    current_app.logger.info(f"[delete] game={game_id} player={player_id}")


def faction_of(game_id: int, player_id: int) -> Faction:
    require_active(game_id)
    return Faction(get_player(game_id, player_id).faction)


def list_players(game_id: int, faction: Optional[Faction] = None) -> List[Player]:
    get_game(game_id)
    query = Player.query.filter_by(game_id=game_id)
    if faction is not None:
        query = query.filter_by(faction=Faction(faction).value)
    return query.order_by(Player.id).all()


def make_patient_zero(game_id: int, player_id: int) -> Player:
    """Start a player as a zombie. Only before the game goes active."""
    game = get_game(game_id)
    if game.game_phase != GamePhase.REGISTRATION:
        raise GameNotActive(f'Patient zero can only be chosen during registration ({game.phase})')
    player = get_player(game_id, player_id)
    player.faction = Faction.ZOMBIE.value
    player.is_patient_zero = True
    player.bite_code = None
    db.session.add(player)
    db.session.commit()
    current_app.logger.info(f"[patient-zero] game={game.id} player={player.id}")
    return player


def create_squad(game_id: int, name: str) -> Squad:
    get_game(game_id)
    squad = Squad(game_id=game_id, name=name)
    db.session.add(squad)
    db.session.commit()
    return squad


def list_squads(game_id: int) -> List[Squad]:
    get_game(game_id)
    return Squad.query.filter_by(game_id=game_id).order_by(Squad.id).all()


def assign_squad(game_id: int, player_id: int, squad_id: Optional[int]) -> Player:
    player = get_player(game_id, player_id)
    if squad_id is not None and not Squad.query.filter_by(id=squad_id, game_id=game_id).first():
        raise SquadNotFound(f'Squad {squad_id} not found in game {game_id}')
    player.squad_id = squad_id
    db.session.add(player)
    db.session.commit()
    return player
