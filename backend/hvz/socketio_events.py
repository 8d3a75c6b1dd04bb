from flask_socketio import join_room, leave_room, emit
from hvz import socketio


def _room(data):
    game_id = (data or {}).get('game_id')
    try:
        return f"game:{int(game_id)}"
    except (TypeError, ValueError):
        return None


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_game(data):
    room = _room(data)
    if not room:
        emit('error', {'message': 'game_id is required'})
        return
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_game(data):
    room = _room(data)
    if not room:
        emit('error', {'message': 'game_id is required'})
        return
    leave_room(room)
    emit('left', {'room': room})


def handle_chat(data):
    """Relay a chat line to everyone else in the game's room."""
    room = _room(data)
    message = (data or {}).get('message')
    if not room or not message:
        emit('error', {'message': 'game_id and message are required'})
        return
    emit('chat_message', {'game_id': int(data['game_id']), 'message': message}, to=room, include_self=False)


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = {
        'connect': handle_connect,
        'join_game': handle_join_game,
        'leave_game': handle_leave_game,
        'chat': handle_chat,
        'ping': handle_ping,
    }
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for event, handler in handlers.items():
            socketio.on_event(event, handler, namespace=namespace)
