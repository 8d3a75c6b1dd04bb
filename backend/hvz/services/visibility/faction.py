from hvz.services.types import Faction


def is_candidate_for(poi, faction) -> bool:
    """Whether ``poi`` is shown to ``faction`` at all, ignoring time and distance.

    A point with both flags off is hidden from everyone.
    """
    if faction == Faction.HUMAN:
        return bool(poi.human_visible)
    if faction == Faction.ZOMBIE:
        return bool(poi.zombie_visible)
    return False
