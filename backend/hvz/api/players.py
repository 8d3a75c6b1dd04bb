from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from hvz import socketio
from hvz.api.common import (
    json_body, parse_float, parse_int, parse_text, is_admin_of, emit_state_update,
)
from hvz.api.errors import BadRequest
from hvz.models import Map
from hvz.services.games import lifecycle
from hvz.services.games.scheduler import utcnow
from hvz.services.players import ledger
from hvz.services.types import Actor, Faction, PoiKind
from hvz.services.visibility import list_visible


players = Blueprint('players', __name__)


def _own_player_or_403(game_id, player_id):
    player = ledger.get_player(game_id, player_id)
    if player.user_id != current_user.id:
        return player, (jsonify({'error': 'You do not control this player'}), 403)
    return player, None


def _position(data):
    return (
        parse_float(data.get('latitude', 0.0), 'latitude', -90.0, 90.0),
        parse_float(data.get('longitude', 0.0), 'longitude', -180.0, 180.0),
    )


@players.route('/players', methods=['POST'])
@login_required
def register_player(game_id):
    lat, lon = _position(json_body())
    nbytes = int(current_app.config.get('BITE_CODE_BYTES', ledger.MIN_BITE_CODE_BYTES))
    player = ledger.register(
        game_id, current_user.id, lat, lon,
        code_factory=lambda: ledger.generate_bite_code(nbytes),
    )
    emit_state_update(game_id, player_id=player.id)
    return jsonify(player.to_dict(include_bite_code=True)), 201


@players.route('/players', methods=['GET'])
def list_players(game_id):
    faction = request.args.get('faction')
    if faction is not None and faction not in {f.value for f in Faction}:
        raise BadRequest('faction must be human or zombie')
    return jsonify([p.to_dict() for p in ledger.list_players(game_id, faction)])


@players.route('/players/<int:player_id>', methods=['GET'])
@login_required
def get_player(game_id, player_id):
    player = ledger.get_player(game_id, player_id)
    reveal = player.user_id == current_user.id or is_admin_of(player.game)
    return jsonify(player.to_dict(include_bite_code=reveal))


@players.route('/players/<int:player_id>', methods=['DELETE'])
@login_required
def delete_player(game_id, player_id):
    player = ledger.get_player(game_id, player_id)
    if player.user_id != current_user.id and not is_admin_of(player.game):
        return jsonify({'error': 'You may not remove this player'}), 403
    ledger.delete_player(game_id, player_id)
    emit_state_update(game_id, player_id=player_id)
    return '', 204


@players.route('/players/<int:player_id>/position', methods=['PATCH'])
@login_required
def update_position(game_id, player_id):
    _, denied = _own_player_or_403(game_id, player_id)
    if denied:
        return denied
    lat, lon = _position(json_body())
    player = ledger.update_position(game_id, player_id, lat, lon)
    return jsonify(player.to_dict())


@players.route('/players/<int:player_id>/squad', methods=['PATCH'])
@login_required
def assign_squad(game_id, player_id):
    _, denied = _own_player_or_403(game_id, player_id)
    if denied:
        return denied
    squad_id = json_body().get('squad_id')
    if squad_id is not None:
        squad_id = parse_int(squad_id, 'squad_id')
    player = ledger.assign_squad(game_id, player_id, squad_id)
    emit_state_update(game_id, player_id=player.id)
    return jsonify(player.to_dict())


@players.route('/players/<int:player_id>/patient-zero', methods=['POST'])
@login_required
def make_patient_zero(game_id, player_id):
    game = lifecycle.get_game(game_id)
    if not is_admin_of(game):
        return jsonify({'error': 'Only the game administrator may do this'}), 403
    player = ledger.make_patient_zero(game_id, player_id)
    return jsonify(player.to_dict())


@players.route('/infect', methods=['POST'])
@login_required
def infect(game_id):
    bite_code = json_body().get('bite_code')
    victim = ledger.infect(game_id, bite_code, utcnow())
    current_app.logger.info(f"[infect] reported by user={current_user.id} game={game_id}")
    socketio.emit('infection', {'game_id': game_id, 'player_id': victim.id}, to=f"game:{game_id}", namespace='/ws')
    emit_state_update(game_id, player_id=victim.id)
    return jsonify(victim.to_dict())


@players.route('/infections', methods=['GET'])
def list_infections(game_id):
    game = lifecycle.get_game(game_id)
    return jsonify([i.to_dict() for i in sorted(game.infections, key=lambda i: i.id)])


@players.route('/players/<int:player_id>/visible', methods=['GET'])
@login_required
def visible_points(game_id, player_id):
    """Points of interest the player can see right now, across the game's maps."""
    _, denied = _own_player_or_403(game_id, player_id)
    if denied:
        return denied
    kind = request.args.get('kind')
    if kind is not None and kind not in {k.value for k in PoiKind}:
        raise BadRequest('kind must be supply, safezone or mission')

    player = ledger.get_player(game_id, player_id)
    actor = Actor(ledger.faction_of(game_id, player_id), player.latitude, player.longitude, player.id)
    pois = []
    for game_map in Map.query.filter_by(game_id=game_id).order_by(Map.id).all():
        pois.extend(game_map.points_of_interest(kind))
    return jsonify([poi.to_dict() for poi in list_visible(actor, pois, utcnow())])


@players.route('/squads', methods=['POST'])
@login_required
def create_squad(game_id):
    name = parse_text(json_body().get('name'), 'name', 50)
    squad = ledger.create_squad(game_id, name)
    emit_state_update(game_id, squad_id=squad.id)
    return jsonify(squad.to_dict()), 201


@players.route('/squads', methods=['GET'])
def list_squads(game_id):
    return jsonify([s.to_dict() for s in ledger.list_squads(game_id)])


@players.route('/chat', methods=['POST'])
@login_required
def post_chat(game_id):
    """Relay a chat message to everyone in the game's room."""
    data = json_body()
    message = data.get('message')
    if not message:
        raise BadRequest('message is required')
    lifecycle.get_game(game_id)
    socketio.emit('chat_message', {'game_id': game_id, 'user_id': current_user.id, 'message': message},
                  to=f"game:{game_id}", namespace='/ws')
    return jsonify({'ok': True})
