from datetime import datetime, timezone

from flask import request
from flask_login import current_user

from hvz import socketio
from hvz.api.errors import BadRequest


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequest('Expected a JSON object')
    return data


def parse_time(value, field, required=True):
    """Parse an ISO-8601 timestamp into naive UTC."""
    if value is None or value == '':
        if required:
            raise BadRequest(f'{field} is required')
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise BadRequest(f'{field} must be an ISO-8601 timestamp')
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_text(value, field, max_len, optional=False):
    if value is None and optional:
        return None
    if not isinstance(value, str) or not value:
        raise BadRequest(f'{field} must be a non-empty string')
    if len(value) > max_len:
        raise BadRequest(f'{field} must be at most {max_len} characters')
    return value


def parse_float(value, field, low=None, high=None):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise BadRequest(f'{field} must be a number')
    if (low is not None and number < low) or (high is not None and number > high):
        raise BadRequest(f'{field} must be between {low} and {high}')
    return number


def parse_int(value, field, low=None, high=None):
    if isinstance(value, bool):
        raise BadRequest(f'{field} must be an integer')
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise BadRequest(f'{field} must be an integer')
    if number != value and str(number) != str(value):
        raise BadRequest(f'{field} must be an integer')
    if (low is not None and number < low) or (high is not None and number > high):
        raise BadRequest(f'{field} must be between {low} and {high}')
    return number


def parse_bool(value, field):
    if not isinstance(value, bool):
        raise BadRequest(f'{field} must be true or false')
    return value


def is_admin_of(game) -> bool:
    return current_user.is_authenticated and game.admin_id == current_user.id


def emit_state_update(game_id: int, **extra) -> None:
    payload = {'game_id': game_id}
    payload.update(extra)
    socketio.emit('state_update', payload, to=f"game:{game_id}", namespace='/ws')
