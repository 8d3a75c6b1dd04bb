from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from hvz.services.types import Actor, Faction
from hvz.services.visibility import (
    distance, is_active, is_candidate_for, is_visible_to, is_within, list_visible,
)
from hvz.services.visibility import geofence, window
from hvz.services.visibility.geofence import EARTH_RADIUS_M
import math


T0 = datetime(2026, 5, 1, 12, 0, 0)
ORIGIN = (0.0, 0.0)


def metres_north(metres, origin=ORIGIN):
    """A point ``metres`` due north of ``origin``."""
    return (origin[0] + math.degrees(metres / EARTH_RADIUS_M), origin[1])


def poi(**overrides):
    fields = dict(
        title='Safe', latitude=0.0, longitude=0.0, radius=10,
        human_visible=True, zombie_visible=False,
        begin_time=T0 - timedelta(hours=1), end_time=T0 + timedelta(hours=1),
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


# Temporal window

def test_window_active_between_begin_and_end():
    assert is_active(T0, T0 + timedelta(hours=2), T0 + timedelta(minutes=30))


def test_window_boundaries_begin_inclusive_end_exclusive():
    end = T0 + timedelta(hours=2)
    assert is_active(T0, end, T0)
    assert not is_active(T0, end, end)
    assert not is_active(T0, end, T0 - timedelta(microseconds=1))
    assert is_active(T0, end, end - timedelta(microseconds=1))


def test_window_without_begin_is_always_begun():
    assert is_active(None, T0, T0 - timedelta(days=365))
    assert not is_active(None, T0, T0)


@pytest.mark.parametrize('offset_min,expected', [(-61, False), (-60, True), (0, True), (59, True), (60, False), (90, False)])
def test_window_grid(offset_min, expected):
    begin, end = T0 - timedelta(hours=1), T0 + timedelta(hours=1)
    assert is_active(begin, end, T0 + timedelta(minutes=offset_min)) is expected


# Geofence

def test_identical_points_are_within_any_positive_radius():
    assert distance(ORIGIN, ORIGIN) == 0.0
    assert is_within(ORIGIN, 1, ORIGIN)
    assert is_within((59.33, 18.06), 1, (59.33, 18.06))


def test_distance_matches_known_offset():
    assert distance(ORIGIN, metres_north(10)) == pytest.approx(10.0, rel=1e-9)
    # One degree of longitude on the equator
    assert distance(ORIGIN, (0.0, 1.0)) == pytest.approx(111195.08, rel=1e-6)


def test_geofence_exact_radius_is_inside():
    point = metres_north(10)
    d = distance(ORIGIN, point)
    assert is_within(ORIGIN, d, point)
    assert is_within(ORIGIN, d + 1e-6, point)
    assert not is_within(ORIGIN, d - 1e-6, point)


def test_geofence_just_inside_and_outside():
    assert is_within(ORIGIN, 10, metres_north(9.99))
    assert not is_within(ORIGIN, 10, metres_north(10.01))
    assert not is_within(ORIGIN, 10, metres_north(20))


def test_distance_is_symmetric():
    a, b = (59.3293, 18.0686), (59.3300, 18.0700)
    assert distance(a, b) == pytest.approx(distance(b, a))


# Faction gate

def test_faction_gate_follows_flags():
    point = poi(human_visible=True, zombie_visible=False)
    assert is_candidate_for(point, Faction.HUMAN)
    assert not is_candidate_for(point, Faction.ZOMBIE)
    both = poi(human_visible=True, zombie_visible=True)
    assert is_candidate_for(both, Faction.HUMAN) and is_candidate_for(both, Faction.ZOMBIE)


def test_hidden_point_is_never_a_candidate():
    hidden = poi(human_visible=False, zombie_visible=False)
    assert not is_candidate_for(hidden, Faction.HUMAN)
    assert not is_candidate_for(hidden, Faction.ZOMBIE)


def test_faction_gate_accepts_stored_strings():
    assert is_candidate_for(poi(), 'human')
    assert not is_candidate_for(poi(), 'zombie')


# Engine

def test_safezone_scenario():
    safezone = poi(human_visible=True, zombie_visible=False, radius=10)
    human_here = Actor(Faction.HUMAN, 0.0, 0.0)
    zombie_here = Actor(Faction.ZOMBIE, 0.0, 0.0)
    human_far = Actor(Faction.HUMAN, *metres_north(20))
    assert is_visible_to(human_here, safezone, T0)
    assert not is_visible_to(zombie_here, safezone, T0)
    assert not is_visible_to(human_far, safezone, T0)


def test_not_visible_outside_window():
    point = poi()
    actor = Actor(Faction.HUMAN, 0.0, 0.0)
    assert not is_visible_to(actor, point, T0 + timedelta(hours=1))
    assert not is_visible_to(actor, point, T0 - timedelta(hours=2))


def test_checks_short_circuit_in_cost_order(monkeypatch):
    calls = []

    def fake_active(begin, end, now):
        calls.append('window')
        return False

    def fake_within(center, radius, point):
        calls.append('geofence')
        return True

    monkeypatch.setattr(window, 'is_active', fake_active)
    monkeypatch.setattr(geofence, 'is_within', fake_within)

    # Faction excludes: neither time nor distance is evaluated
    assert not is_visible_to(Actor(Faction.ZOMBIE, 0.0, 0.0), poi(), T0)
    assert calls == []

    # Time excludes: distance is not evaluated
    assert not is_visible_to(Actor(Faction.HUMAN, 0.0, 0.0), poi(), T0)
    assert calls == ['window']


def test_list_visible_preserves_order_and_filters():
    points = [
        poi(title='a'),
        poi(title='b', human_visible=False),
        poi(title='c', latitude=1.0),
        poi(title='d', begin_time=None),
        poi(title='e', end_time=T0),
    ]
    actor = Actor(Faction.HUMAN, 0.0, 0.0)
    visible = list_visible(actor, points, T0)
    titles = [p.title for p in visible]
    assert titles == ['a', 'd']
    assert all(is_visible_to(actor, p, T0) for p in visible)


def test_list_visible_is_restartable_and_lazy(monkeypatch):
    points = [poi(title=str(i)) for i in range(3)]
    actor = Actor(Faction.HUMAN, 0.0, 0.0)
    seen = []
    real = geofence.is_within

    def counting(center, radius, point):
        seen.append(center)
        return real(center, radius, point)

    monkeypatch.setattr(geofence, 'is_within', counting)
    visible = list_visible(actor, iter(points), T0)
    assert seen == []
    assert [p.title for p in visible] == ['0', '1', '2']
    assert [p.title for p in visible] == ['0', '1', '2']
    assert len(seen) == 6


def test_list_visible_uses_one_now_snapshot():
    points = [poi(end_time=T0 + timedelta(seconds=1))]
    actor = Actor(Faction.HUMAN, 0.0, 0.0)
    visible = list_visible(actor, points, T0)
    assert visible.now == T0
    assert len(list(visible)) == 1
