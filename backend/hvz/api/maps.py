from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required

from hvz.api.common import (
    json_body, parse_bool, parse_float, parse_int, parse_text, parse_time, is_admin_of, emit_state_update,
)
from hvz.api.errors import BadRequest
from hvz.services import maps as map_service
from hvz.services.games.lifecycle import get_game


maps = Blueprint('maps', __name__)

KIND = '<any(supply, safezone, mission):kind>'

# field -> parser(value, field)
_MAP_PARSERS = {
    'name': lambda v, f: parse_text(v, f, 50),
    'description': lambda v, f: parse_text(v, f, 300, optional=True),
    'latitude': lambda v, f: parse_float(v, f, -90.0, 90.0),
    'longitude': lambda v, f: parse_float(v, f, -180.0, 180.0),
    'radius': lambda v, f: parse_int(v, f, low=1),
}

_POI_PARSERS = {
    'title': lambda v, f: parse_text(v, f, 20),
    'description': lambda v, f: parse_text(v, f, 300, optional=True),
    'latitude': lambda v, f: parse_float(v, f, -90.0, 90.0),
    'longitude': lambda v, f: parse_float(v, f, -180.0, 180.0),
    'radius': lambda v, f: parse_int(v, f),
    'human_visible': parse_bool,
    'zombie_visible': parse_bool,
    'begin_time': lambda v, f: parse_time(v, f, required=False),
    'end_time': lambda v, f: parse_time(v, f),
    'drop_kind': lambda v, f: parse_text(v, f, 16),
    'amount': lambda v, f: parse_int(v, f, low=0),
}


def _parse(data, parsers):
    return {name: parser(data[name], name) for name, parser in parsers.items() if name in data}


def _radius_bounds():
    cfg = current_app.config
    return {
        'min_radius': int(cfg.get('POI_MIN_RADIUS', 1)),
        'max_radius': int(cfg.get('POI_MAX_RADIUS', 50)),
    }


def _admin_only(game):
    if not is_admin_of(game):
        return jsonify({'error': 'Only the game administrator may change maps'}), 403
    return None


@maps.route('', methods=['POST'])
@login_required
def create_map():
    data = json_body()
    if data.get('game_id') is None:
        raise BadRequest('game_id is required')
    game_id = parse_int(data.get('game_id'), 'game_id')
    denied = _admin_only(get_game(game_id))
    if denied:
        return denied
    game_map = map_service.create_map(game_id, **_parse(data, _MAP_PARSERS))
    emit_state_update(game_id, map_id=game_map.id)
    return jsonify(game_map.to_dict()), 201


@maps.route('', methods=['GET'])
def list_maps():
    game_id = request.args.get('game_id')
    if game_id is None:
        raise BadRequest('game_id is required')
    return jsonify([m.to_dict() for m in map_service.list_maps(parse_int(game_id, 'game_id'))])


@maps.route('/<int:map_id>', methods=['GET'])
def get_map(map_id):
    return jsonify(map_service.get_map(map_id).to_dict())


@maps.route('/<int:map_id>', methods=['PATCH'])
@login_required
def update_map(map_id):
    denied = _admin_only(map_service.get_map(map_id).game)
    if denied:
        return denied
    game_map = map_service.update_map(map_id, **_parse(json_body(), _MAP_PARSERS))
    emit_state_update(game_map.game_id, map_id=game_map.id)
    return jsonify(game_map.to_dict())


@maps.route('/<int:map_id>', methods=['DELETE'])
@login_required
def delete_map(map_id):
    game = map_service.get_map(map_id).game
    denied = _admin_only(game)
    if denied:
        return denied
    map_service.delete_map(map_id)
    emit_state_update(game.id, map_id=map_id)
    return '', 204


@maps.route(f'/<int:map_id>/{KIND}', methods=['POST'])
@login_required
def create_point(map_id, kind):
    game = map_service.get_map(map_id).game
    denied = _admin_only(game)
    if denied:
        return denied
    poi = map_service.create_point(kind, map_id, **_radius_bounds(), **_parse(json_body(), _POI_PARSERS))
    emit_state_update(game.id, map_id=map_id)
    return jsonify(poi.to_dict()), 201


@maps.route(f'/<int:map_id>/{KIND}', methods=['GET'])
def list_points(map_id, kind):
    """Every point of one kind on the map; visibility rules are not applied here."""
    return jsonify([poi.to_dict() for poi in map_service.list_points(kind, map_id)])


@maps.route(f'/<int:map_id>/{KIND}/<int:poi_id>', methods=['GET'])
def get_point(map_id, kind, poi_id):
    return jsonify(map_service.get_point(kind, map_id, poi_id).to_dict())


@maps.route(f'/<int:map_id>/{KIND}/<int:poi_id>', methods=['PATCH'])
@login_required
def update_point(map_id, kind, poi_id):
    game = map_service.get_map(map_id).game
    denied = _admin_only(game)
    if denied:
        return denied
    poi = map_service.update_point(kind, map_id, poi_id, **_radius_bounds(), **_parse(json_body(), _POI_PARSERS))
    emit_state_update(game.id, map_id=map_id)
    return jsonify(poi.to_dict())


@maps.route(f'/<int:map_id>/{KIND}/<int:poi_id>', methods=['DELETE'])
@login_required
def delete_point(map_id, kind, poi_id):
    game = map_service.get_map(map_id).game
    denied = _admin_only(game)
    if denied:
        return denied
    map_service.delete_point(kind, map_id, poi_id)
    emit_state_update(game.id, map_id=map_id)
    return '', 204
