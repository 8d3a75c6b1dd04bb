from datetime import timedelta

import pytest

from conftest import T0
from hvz import db
from hvz.models import Map, Safezone
from hvz.services import errors
from hvz.services import maps as map_service
from hvz.services.games import lifecycle


@pytest.fixture()
def game_map(make_user):
    admin = make_user('admin')
    game = lifecycle.create_game('Campus', admin.id, T0, T0 + timedelta(hours=2))
    return map_service.create_map(game.id, name='Quad', latitude=0.0, longitude=0.0, radius=500)


def _safezone(game_map, **overrides):
    fields = dict(title='Hut', latitude=0.0, longitude=0.0, radius=10, human_visible=True,
                  begin_time=T0, end_time=T0 + timedelta(hours=1))
    fields.update(overrides)
    return map_service.create_point('safezone', game_map.id, **fields)


def test_rejected_point_update_leaves_the_row_untouched(game_map):
    zone = _safezone(game_map)
    with pytest.raises(errors.InvalidPointOfInterest):
        map_service.update_point('safezone', game_map.id, zone.id, radius=0)

    # A later unrelated commit in the same session must not write the rejected value
    map_service.create_point('mission', game_map.id, title='Run', latitude=0.0, longitude=0.0, radius=5,
                             end_time=T0 + timedelta(hours=1))
    db.session.expire_all()
    assert db.session.get(Safezone, zone.id).radius == 10


def test_rejected_map_update_leaves_the_row_untouched(game_map):
    with pytest.raises(errors.InvalidPointOfInterest):
        map_service.update_map(game_map.id, radius=0, name='Renamed')
    map_service.create_map(game_map.game_id, name='Annex', latitude=1.0, longitude=1.0, radius=100)
    db.session.expire_all()
    stored = db.session.get(Map, game_map.id)
    assert (stored.radius, stored.name) == (500, 'Quad')


def test_partial_point_update_is_checked_against_stored_values(game_map):
    zone = _safezone(game_map)
    with pytest.raises(errors.InvalidPointOfInterest):
        map_service.update_point('safezone', game_map.id, zone.id, begin_time=T0 + timedelta(hours=2))
    moved = map_service.update_point('safezone', game_map.id, zone.id, end_time=T0 + timedelta(hours=3),
                                     begin_time=T0 + timedelta(hours=2))
    assert moved.begin_time == T0 + timedelta(hours=2)


def test_point_lookups_are_scoped_to_their_map(game_map):
    zone = _safezone(game_map)
    other = map_service.create_map(game_map.game_id, name='Annex', latitude=1.0, longitude=1.0, radius=100)
    with pytest.raises(errors.PoiNotFound):
        map_service.get_point('safezone', other.id, zone.id)
    with pytest.raises(errors.MapNotFound):
        map_service.list_points('safezone', 999)
    assert [p.id for p in map_service.list_points('safezone', game_map.id)] == [zone.id]
