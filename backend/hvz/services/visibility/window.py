from datetime import datetime
from typing import Optional


def is_active(begin: Optional[datetime], end: datetime, now: datetime) -> bool:
    """True while ``begin <= now < end``.

    A missing ``begin`` means the window has always been open. ``end`` is
    exclusive, so a window is closed at the exact instant it ends.
    """
    if begin is not None and now < begin:
        return False
    return now < end
