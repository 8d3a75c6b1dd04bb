"""Maps and the points of interest placed on them."""

from types import SimpleNamespace
from typing import List

from flask import current_app

from hvz import db
from hvz.models import Map, POI_MODELS
from hvz.services.errors import InvalidPointOfInterest, MapNotFound, PoiNotFound
from hvz.services.games.lifecycle import get_game
from hvz.services.types import DropKind, PoiKind

MAP_FIELDS = ('name', 'description', 'latitude', 'longitude', 'radius')
POI_FIELDS = (
    'title', 'description', 'latitude', 'longitude', 'radius',
    'human_visible', 'zombie_visible', 'begin_time', 'end_time',
)
SUPPLY_FIELDS = ('drop_kind', 'amount')


def get_map(map_id: int) -> Map:
    game_map = db.session.get(Map, map_id)
    if game_map is None:
        raise MapNotFound(f'Map {map_id} not found')
    return game_map


def list_maps(game_id: int) -> List[Map]:
    get_game(game_id)
    return Map.query.filter_by(game_id=game_id).order_by(Map.id).all()


def create_map(game_id: int, **fields) -> Map:
    get_game(game_id)
    game_map = Map(game_id=game_id)
    _apply(game_map, MAP_FIELDS, fields)
    _check_map(game_map)
    db.session.add(game_map)
    db.session.commit()
    current_app.logger.info(f"[map-create] game={game_id} map={game_map.id}")
    return game_map


def update_map(map_id: int, **fields) -> Map:
    game_map = get_map(map_id)
    _check_map(_merged(game_map, MAP_FIELDS, fields))
    _apply(game_map, MAP_FIELDS, fields)
    db.session.add(game_map)
    db.session.commit()
    return game_map


def delete_map(map_id: int) -> None:
    """Delete a map together with its supplies, safezones and missions."""
    game_map = get_map(map_id)
    db.session.delete(game_map)
    db.session.commit()
    current_app.logger.info(f"[map-delete] map={map_id}")


def _apply(target, allowed, fields):
    for name, value in fields.items():
        if name in allowed:
            setattr(target, name, value)


def _merged(target, allowed, fields):
    """A detached view of ``target`` with ``fields`` applied, for validating before any change."""
    values = {name: getattr(target, name) for name in allowed}
    values.update((name, value) for name, value in fields.items() if name in allowed)
    return SimpleNamespace(kind=getattr(target, 'kind', None), **values)


def _check_map(game_map):
    if not game_map.name:
        raise InvalidPointOfInterest('Map name is required')
    if game_map.latitude is None or game_map.longitude is None:
        raise InvalidPointOfInterest('Map latitude and longitude are required')
    if game_map.radius is None or game_map.radius <= 0:
        raise InvalidPointOfInterest('Map radius must be positive')


def _check_point(poi, min_radius, max_radius):
    if not poi.title:
        raise InvalidPointOfInterest('title is required')
    if poi.latitude is None or poi.longitude is None:
        raise InvalidPointOfInterest('latitude and longitude are required')
    if poi.radius is None or poi.radius <= 0 or not min_radius <= poi.radius <= max_radius:
        raise InvalidPointOfInterest(f'radius must be between {min_radius} and {max_radius}')
    if poi.end_time is None:
        raise InvalidPointOfInterest('end_time is required')
    if poi.kind == PoiKind.SAFEZONE and poi.begin_time is None:
        raise InvalidPointOfInterest('Safezones need a begin_time')
    if poi.begin_time is not None and not poi.begin_time < poi.end_time:
        raise InvalidPointOfInterest('begin_time must be before end_time')
    if poi.kind == PoiKind.SUPPLY:
        if poi.drop_kind not in {d.value for d in DropKind}:
            raise InvalidPointOfInterest('drop_kind must be grenade, nerf_gun or ammo')
        if poi.amount is None or poi.amount < 0:
            raise InvalidPointOfInterest('amount must not be negative')


def _fields_for(kind: PoiKind):
    if kind == PoiKind.SUPPLY:
        return POI_FIELDS + SUPPLY_FIELDS
    return POI_FIELDS


def get_point(kind, map_id: int, poi_id: int):
    kind = PoiKind(kind)
    model = POI_MODELS[kind]
    poi = model.query.filter_by(id=poi_id, map_id=map_id).first()
    if poi is None:
        raise PoiNotFound(f'No {kind.value} {poi_id} on map {map_id}')
    return poi


def list_points(kind, map_id: int):
    return get_map(map_id).points_of_interest(PoiKind(kind))


def create_point(kind, map_id: int, min_radius: int = 1, max_radius: int = 50, **fields):
    kind = PoiKind(kind)
    get_map(map_id)
    poi = POI_MODELS[kind](map_id=map_id)
    if kind == PoiKind.SUPPLY:
        poi.amount = 0
    poi.human_visible = False
    poi.zombie_visible = False
    _apply(poi, _fields_for(kind), fields)
    _check_point(poi, min_radius, max_radius)
    db.session.add(poi)
    db.session.commit()
    current_app.logger.info(f"[poi-create] map={map_id} {kind.value}={poi.id}")
    return poi


def update_point(kind, map_id: int, poi_id: int, min_radius: int = 1, max_radius: int = 50, **fields):
    """Apply a partial update; the result must still satisfy every invariant."""
    kind = PoiKind(kind)
    poi = get_point(kind, map_id, poi_id)
    _check_point(_merged(poi, _fields_for(kind), fields), min_radius, max_radius)
    _apply(poi, _fields_for(kind), fields)
    db.session.add(poi)
    db.session.commit()
    return poi


def delete_point(kind, map_id: int, poi_id: int) -> None:
    poi = get_point(kind, map_id, poi_id)
    db.session.delete(poi)
    db.session.commit()
    current_app.logger.info(f"[poi-delete] map={map_id} {PoiKind(kind).value}={poi_id}")
