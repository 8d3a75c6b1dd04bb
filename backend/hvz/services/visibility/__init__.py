"""Pure rules deciding which points of interest an actor can see."""

from .engine import is_visible_to, list_visible, VisiblePoints
from .faction import is_candidate_for
from .geofence import distance, is_within
from .window import is_active
