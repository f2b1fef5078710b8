from flask import current_app, request
from flask_socketio import emit
from blockgame import socketio
from blockgame.services.grid import GridError, InvalidClaim, Subscription, get_grid
from typing import Dict, Tuple


NAMESPACE = '/ws'
# How long a pump blocks waiting for an event before re-checking its subscription
PUMP_POLL_SEC = 0.5

# sid -> (namespace, subscription)
_subscriptions: Dict[str, Tuple[str, Subscription]] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _pump(app, sid: str, namespace: str, subscription: Subscription) -> None:
    """Forward one observer's hub events to its socket until it disconnects."""
    while not subscription.closed:
        event = subscription.get(timeout=PUMP_POLL_SEC)
        if event is None:
            continue
        try:
            socketio.emit(event.name, event.to_dict(), to=sid, namespace=namespace)
        except Exception:
            # only this observer is affected; drop the event and keep going
            app.logger.exception(f"[ws-emit-failed] sid={sid} event={event.name}")


def handle_connect(auth=None):
    sid = _get_sid()
    namespace = request.namespace
    grid = get_grid()
    # Subscribe before reading the snapshot so no change can fall between the two
    subscription = grid.hub.subscribe()
    _subscriptions[sid] = (namespace, subscription)
    try:
        blocks = [b.to_dict() for b in grid.store.get_all()]
    except GridError as exc:
        emit('error', {'message': exc.message})
        blocks = []
    emit('snapshot', {'blocks': blocks, 'endTime': grid.timer.get_end_time()})
    socketio.start_background_task(_pump, current_app._get_current_object(), sid, namespace, subscription)
    current_app.logger.info(f"[ws-connect] sid={sid} observers={grid.hub.subscriber_count}")


def handle_disconnect(*args):
    entry = _subscriptions.pop(_get_sid(), None)
    if not entry:
        return
    _, subscription = entry
    subscription.close()
    current_app.logger.info(f"[ws-disconnect] sid={_get_sid()} observers={get_grid().hub.subscriber_count}")


def handle_claim(data=None):
    block_id = None
    try:
        if not isinstance(data, dict):
            raise InvalidClaim('claim payload must be an object with blockId, owner and color')
        block_id = data.get('blockId', data.get('id'))
        block = get_grid().claims.claim(block_id, data.get('owner'), data.get('color'))
    except GridError as exc:
        current_app.logger.info(f"[claim-rejected] block={block_id} reason={exc.message}")
        emit('error', {'message': exc.message, 'blockId': block_id})
        return {'ok': False, 'error': exc.message}
    return {'ok': True, 'block': block.to_dict()}


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('claim', handle_claim, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
