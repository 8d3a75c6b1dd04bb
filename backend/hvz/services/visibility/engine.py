from datetime import datetime
from typing import Iterable, Iterator

from . import faction as faction_gate
from . import geofence
from . import window


def is_visible_to(actor, poi, now: datetime) -> bool:
    """Decide whether ``actor`` currently sees ``poi``.

    ``actor`` needs ``faction``, ``latitude`` and ``longitude`` (a Player
    row or an ``Actor`` tuple). ``poi`` is a supply, safezone or mission.
    The checks short-circuit from cheapest to most expensive: faction flag,
    then time window, then the distance computation.
    """
    return (
        faction_gate.is_candidate_for(poi, actor.faction)
        and window.is_active(poi.begin_time, poi.end_time, now)
        and geofence.is_within(
            (poi.latitude, poi.longitude),
            poi.radius,
            (actor.latitude, actor.longitude),
        )
    )


class VisiblePoints:
    """The points of interest an actor sees at one instant.

    Filtering happens while iterating; every pass uses the same ``now`` and
    yields items in input order, so the view can be walked more than once.
    """

    def __init__(self, actor, pois: Iterable, now: datetime):
        self.actor = actor
        self.now = now
        self._pois = tuple(pois)

    def __iter__(self) -> Iterator:
        for poi in self._pois:
            if is_visible_to(self.actor, poi, self.now):
                yield poi


def list_visible(actor, pois: Iterable, now: datetime) -> VisiblePoints:
    return VisiblePoints(actor, pois, now)
