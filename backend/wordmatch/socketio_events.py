from typing import Iterable

from flask import current_app, request
from flask_socketio import join_room, leave_room

from wordmatch import get_connections, get_session, protocol, socketio
from wordmatch.broadcast import (
    PUBLIC_ROOMS,
    ROOM_HOSTS,
    ROOM_PENDING,
    Audience,
    Delivery,
    HostRole,
    PlayerRole,
    ViewerRole,
    plan_host_hello,
    plan_player_hello,
    plan_player_left,
    plan_rename,
    plan_submission,
    plan_viewer_hello,
    role_name,
    room_for,
)
from wordmatch.state import new_id


def _namespace() -> str:
    return current_app.config.get('SOCKETIO_NAMESPACE', '/ws')


def deliver(plan: Iterable[Delivery], sid: str = None) -> None:
    """Send a fan-out plan in order. SENDER entries need the acting sid."""
    ns = _namespace()
    for d in plan:
        if d.audience is Audience.SENDER:
            if sid is not None:
                socketio.emit(d.event, d.payload, to=sid, namespace=ns)
        elif d.audience is Audience.EVERYONE:
            socketio.emit(d.event, d.payload, namespace=ns)
        elif d.audience is Audience.HOSTS:
            socketio.emit(d.event, d.payload, to=ROOM_HOSTS, namespace=ns)
        else:
            for room in PUBLIC_ROOMS:
                socketio.emit(d.event, d.payload, to=room, namespace=ns)


def handle_connect(auth=None):
    join_room(ROOM_PENDING)


def handle_disconnect(reason=None):
    sid = request.sid
    connections = get_connections()
    role, last_socket = connections.release_player(sid)
    if not isinstance(role, PlayerRole):
        return
    if not last_socket:
        # Another tab (or a reconnect) still holds this player id
        current_app.logger.info(
            f"[disconnect] sid={sid} player={role.player_id} kept, "
            f"sockets={connections.holders(role.player_id)}"
        )
        return
    snap = get_session().remove_player(role.player_id)
    current_app.logger.info(f"[disconnect] sid={sid} player={role.player_id}")
    if snap is not None:
        deliver(plan_player_left(snap))


def _on_hello(sid: str, message: protocol.Hello) -> None:
    connections = get_connections()
    existing = connections.role_of(sid)
    if existing is not None and role_name(existing) != message.role:
        current_app.logger.info(f"[hello-ignored] sid={sid} tagged={role_name(existing)} asked={message.role}")
        return

    if existing is not None:
        role = existing
    elif message.role == protocol.ROLE_HOST:
        role = connections.tag(sid, HostRole())
    elif message.role == protocol.ROLE_VIEWER:
        role = connections.tag(sid, ViewerRole())
    else:
        role = connections.tag(sid, PlayerRole(message.player_id or new_id()))

    if existing is None:
        leave_room(ROOM_PENDING)
        join_room(room_for(role))
        current_app.logger.info(
            f"[hello] sid={sid} role={role_name(role)} hosts={connections.count(HostRole)} "
            f"viewers={connections.count(ViewerRole)}"
        )

    session = get_session()
    if isinstance(role, HostRole):
        deliver(plan_host_hello(session.snapshot()), sid)
    elif isinstance(role, ViewerRole):
        deliver(plan_viewer_hello(session.snapshot()), sid)
    else:
        joined = session.ensure_player(role.player_id, message.desired_name)
        deliver(plan_player_hello(joined.snapshot, joined.player), sid)


def _on_rename(sid: str, message: protocol.Rename) -> None:
    role = get_connections().role_of(sid)
    if not isinstance(role, PlayerRole):
        return
    outcome = get_session().rename(role.player_id, message.name)
    deliver(plan_rename(outcome), sid)


def _on_submit(sid: str, message: protocol.Submit) -> None:
    role = get_connections().role_of(sid)
    if not isinstance(role, PlayerRole):
        return
    outcome = get_session().submit(role.player_id, message.word)
    if not outcome.accepted:
        current_app.logger.info(f"[submit-reject] player={role.player_id} code={outcome.rejection.code}")
    deliver(plan_submission(outcome), sid)


def _dispatch(event: str, data) -> None:
    message = protocol.parse_inbound(event, data)
    sid = request.sid
    if message is None:
        current_app.logger.debug(f"[ignored] sid={sid} event={event} malformed payload")
    elif isinstance(message, protocol.Hello):
        _on_hello(sid, message)
    elif isinstance(message, protocol.Rename):
        _on_rename(sid, message)
    elif isinstance(message, protocol.Submit):
        _on_submit(sid, message)
    else:
        current_app.logger.warning(f"[ignored] sid={sid} unhandled message {message!r}")


def _handler_for(event: str):
    def _handler(data=None):
        _dispatch(event, data)
    _handler.__name__ = f"handle_{event}"
    return _handler


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the live-play namespace.

    Only the inbound events of the protocol get a handler; any other event
    name is dropped by Socket.IO itself.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for event in protocol.INBOUND_EVENTS:
        socketio.on_event(event, _handler_for(event), namespace=namespace)
