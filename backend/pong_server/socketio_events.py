from flask_socketio import emit
from flask import current_app, request
from pong_server import socketio
from typing import Any, Optional

NAMESPACE = '/ws'


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _arena():
    return current_app.extensions['pong']


def emit_to_handle(handle: str, event: str, payload: Optional[Any] = None) -> None:
    """Broadcast primitive used by the match services.

    Uses socketio.emit since this is called from background tick tasks too.
    """
    if payload is None:
        socketio.emit(event, to=handle, namespace=NAMESPACE)
    else:
        socketio.emit(event, payload, to=handle, namespace=NAMESPACE)


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'sid': _get_sid()})


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    _arena().disconnect(sid)


def handle_find_match(data=None):
    _arena().seek(_get_sid())


def handle_cancel_match(data=None):
    _arena().cancel(_get_sid())


def handle_paddle_move(data=None):
    if not isinstance(data, dict):
        current_app.logger.debug(f"[ignored] sid={_get_sid()} paddleMove payload={data!r}")
        return
    match_id = data.get('gameId') or data.get('matchId')
    _arena().move_paddle(_get_sid(), match_id, data.get('direction'))


def handle_ping(data=None):
    emit('pong', data or {})


def handle_error(exc):
    # One bad connection must not take the others down
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} error={exc}")


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('findMatch', handle_find_match, namespace=NAMESPACE)
    socketio.on_event('cancelMatch', handle_cancel_match, namespace=NAMESPACE)
    socketio.on_event('paddleMove', handle_paddle_move, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
    socketio.on_error(NAMESPACE)(handle_error)
