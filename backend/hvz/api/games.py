from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user

from hvz import socketio
from hvz.api.common import json_body, parse_text, parse_time, is_admin_of, emit_state_update
from hvz.api.errors import BadRequest
from hvz.models import Game
from hvz.services.games import lifecycle
from hvz.services.games.scheduler import schedule_auto_end, utcnow
from hvz.services.types import GamePhase


games = Blueprint('games', __name__)


def _admin_game_or_403(game_id: int):
    game = lifecycle.get_game(game_id)
    if not is_admin_of(game):
        return game, (jsonify({'error': 'Only the game administrator may do this'}), 403)
    return game, None


@games.route('', methods=['POST'])
@login_required
def create_game():
    data = json_body()
    game = lifecycle.create_game(
        title=parse_text(data.get('title'), 'title', 50),
        admin_id=current_user.id,
        begin_time=parse_time(data.get('begin_time'), 'begin_time'),
        end_time=parse_time(data.get('end_time'), 'end_time'),
        description=parse_text(data.get('description'), 'description', 300, optional=True),
    )
    return jsonify(game.to_dict()), 201


@games.route('', methods=['GET'])
def list_games():
    return jsonify([g.to_dict() for g in Game.query.order_by(Game.id).all()])


@games.route('/<int:game_id>', methods=['GET'])
def get_game(game_id):
    return jsonify(lifecycle.get_game(game_id).to_dict())


# field -> parser(value, field)
_GAME_PARSERS = {
    'title': lambda v, f: parse_text(v, f, 50),
    'description': lambda v, f: parse_text(v, f, 300, optional=True),
    'begin_time': parse_time,
    'end_time': parse_time,
}


@games.route('/<int:game_id>', methods=['PATCH'])
@login_required
def update_game(game_id):
    _, denied = _admin_game_or_403(game_id)
    if denied:
        return denied
    data = json_body()
    if 'phase' in data:
        raise BadRequest('phase changes go through /advance or /cancel')
    fields = {name: parser(data[name], name) for name, parser in _GAME_PARSERS.items() if name in data}
    game = lifecycle.update_game(game_id, **fields)
    emit_state_update(game.id, phase=game.phase)
    return jsonify(game.to_dict())


@games.route('/<int:game_id>', methods=['DELETE'])
@login_required
def delete_game(game_id):
    _, denied = _admin_game_or_403(game_id)
    if denied:
        return denied
    lifecycle.delete_game(game_id)
    socketio.emit('game_over', {'game_id': game_id, 'phase': 'deleted'}, to=f"game:{game_id}", namespace='/ws')
    return '', 204


@games.route('/<int:game_id>/advance', methods=['POST'])
@login_required
def advance_game(game_id):
    _, denied = _admin_game_or_403(game_id)
    if denied:
        return denied
    target = json_body().get('phase')
    if not target:
        raise BadRequest('phase is required')
    min_players = int(current_app.config.get('MIN_PLAYERS', 1))
    game = lifecycle.advance(game_id, target, utcnow(), min_players=min_players)

    if game.phase == GamePhase.ACTIVE.value:
        schedule_auto_end(current_app._get_current_object(), game.id)
    if game.phase == GamePhase.ENDED.value:
        socketio.emit('game_over', {'game_id': game.id, 'phase': game.phase}, to=f"game:{game.id}", namespace='/ws')
    else:
        emit_state_update(game.id, phase=game.phase)
    return jsonify(lifecycle.get_game(game_id).to_dict())


@games.route('/<int:game_id>/cancel', methods=['POST'])
@login_required
def cancel_game(game_id):
    _, denied = _admin_game_or_403(game_id)
    if denied:
        return denied
    game = lifecycle.cancel(game_id)
    socketio.emit('game_over', {'game_id': game.id, 'phase': game.phase}, to=f"game:{game.id}", namespace='/ws')
    return jsonify(game.to_dict())
