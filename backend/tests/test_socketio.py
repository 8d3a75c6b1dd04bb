from conftest import window_around_now
from hvz import socketio


def _names(events):
    return [e['name'] for e in events]


def _join(sio_client, game_id):
    sio_client.emit('join_game', {'game_id': game_id}, namespace='/ws')
    return sio_client.get_received('/ws')


def test_socket_connect_and_join(sio_client):
    assert sio_client.is_connected('/ws')
    received = _join(sio_client, 7)
    assert 'connected' in _names(received)
    joined = [e for e in received if e['name'] == 'joined']
    assert joined[0]['args'][0] == {'room': 'game:7'}


def test_join_without_game_id(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_game', {}, namespace='/ws')
    assert _names(sio_client.get_received('/ws')) == ['error']


def test_ping(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    pong = sio_client.get_received('/ws')[0]
    assert pong['name'] == 'pong' and pong['args'][0] == {'n': 1}


def test_chat_is_relayed_to_the_room(api_app, sio_client):
    other = socketio.test_client(api_app, namespace='/ws')
    try:
        _join(sio_client, 3)
        other.emit('join_game', {'game_id': 3}, namespace='/ws')
        other.get_received('/ws')

        other.emit('chat', {'game_id': 3, 'message': 'braaains'}, namespace='/ws')
        relayed = sio_client.get_received('/ws')
        assert relayed[0]['name'] == 'chat_message'
        assert relayed[0]['args'][0] == {'game_id': 3, 'message': 'braaains'}
        assert 'chat_message' not in _names(other.get_received('/ws'))
    finally:
        other.disconnect(namespace='/ws')


def test_leaving_stops_room_events(sio_client, make_client):
    admin = make_client('admin')
    begin, end = window_around_now()
    game_id = admin.post('/api/games', json={'title': 'Campus', 'begin_time': begin, 'end_time': end}).get_json()['id']

    _join(sio_client, game_id)
    sio_client.emit('leave_game', {'game_id': game_id}, namespace='/ws')
    assert _names(sio_client.get_received('/ws')) == ['left']
    admin.post(f'/api/games/{game_id}/advance', json={'phase': 'registration'})
    assert sio_client.get_received('/ws') == []


def test_game_events_reach_the_room(sio_client, make_client):
    admin = make_client('admin')
    begin, end = window_around_now()
    game_id = admin.post('/api/games', json={'title': 'Campus', 'begin_time': begin, 'end_time': end}).get_json()['id']
    _join(sio_client, game_id)

    admin.post(f'/api/games/{game_id}/advance', json={'phase': 'registration'})
    events = sio_client.get_received('/ws')
    assert _names(events) == ['state_update']
    assert events[0]['args'][0] == {'game_id': game_id, 'phase': 'registration'}

    alice = make_client('alice')
    bob = make_client('bob')
    code = alice.post(f'/api/games/{game_id}/players', json={}).get_json()['bite_code']
    bob.post(f'/api/games/{game_id}/players', json={})
    admin.post(f'/api/games/{game_id}/advance', json={'phase': 'active'})
    sio_client.get_received('/ws')

    bob.post(f'/api/games/{game_id}/infect', json={'bite_code': code})
    names = _names(sio_client.get_received('/ws'))
    assert names == ['infection', 'state_update']

    bob.post(f'/api/games/{game_id}/chat', json={'message': 'run'})
    chat = sio_client.get_received('/ws')
    assert chat[0]['name'] == 'chat_message'
    assert chat[0]['args'][0]['message'] == 'run'

    admin.post(f'/api/games/{game_id}/cancel')
    over = sio_client.get_received('/ws')
    assert _names(over) == ['game_over']
    assert over[0]['args'][0] == {'game_id': game_id, 'phase': 'cancelled'}
