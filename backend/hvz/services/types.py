from enum import Enum
from typing import NamedTuple, Optional


class Faction(str, Enum):
    HUMAN = 'human'
    ZOMBIE = 'zombie'


class GamePhase(str, Enum):
    CREATED = 'created'
    REGISTRATION = 'registration'
    ACTIVE = 'active'
    ENDED = 'ended'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in (GamePhase.ENDED, GamePhase.CANCELLED)


# Each phase may only advance to the one listed here.
NEXT_PHASE = {
    GamePhase.CREATED: GamePhase.REGISTRATION,
    GamePhase.REGISTRATION: GamePhase.ACTIVE,
    GamePhase.ACTIVE: GamePhase.ENDED,
}


class PoiKind(str, Enum):
    SUPPLY = 'supply'
    SAFEZONE = 'safezone'
    MISSION = 'mission'


class DropKind(str, Enum):
    GRENADE = 'grenade'
    NERF_GUN = 'nerf_gun'
    AMMO = 'ammo'


class Position(NamedTuple):
    latitude: float
    longitude: float


class Actor(NamedTuple):
    """Who is looking: a faction and where they stand."""
    faction: Faction
    latitude: float
    longitude: float
    player_id: Optional[int] = None

    @property
    def position(self) -> Position:
        return Position(self.latitude, self.longitude)
