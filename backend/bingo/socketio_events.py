from flask import current_app, request
from flask_socketio import emit
from bingo import socketio
from typing import Any, Dict


def _session():
    return current_app.extensions['bingo_session']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def socketio_sender(event_type: str, message: Dict[str, Any], sid: str, namespace: str) -> None:
    """Deliver one hub message to one Socket.IO client."""
    socketio.emit(event_type, message, to=sid, namespace=namespace)


def handle_connect():
    session = _session()
    # Register first so no event published after the snapshot is missed
    session.hub.add(_get_sid(), request.namespace)  # type: ignore
    state = session.state()
    state['type'] = 'state'
    emit('state', state)


def handle_disconnect(*args):
    _session().hub.discard(_get_sid())


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('disconnect', handle_disconnect, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')

    if testing:
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('disconnect', handle_disconnect, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
