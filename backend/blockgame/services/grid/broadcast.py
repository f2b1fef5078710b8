"""Broadcast Hub: fan-out of grid events to every connected observer.

Each subscriber owns a bounded FIFO queue. ``publish`` only ever does a
non-blocking put, so a slow or stalled observer can lose its oldest events
but never delays the publisher or any other observer. Past events are not
replayed; a new observer fetches a snapshot separately.
"""

import logging
import threading
from dataclasses import dataclass
from queue import Empty, Full, Queue
from typing import List, Optional, Set

from .store import BlockState


@dataclass(frozen=True)
class BlockChanged:
    block: BlockState
    name = 'block_changed'

    def to_dict(self):
        return self.block.to_dict()


@dataclass(frozen=True)
class RoundReset:
    end_time: int
    name = 'round_reset'

    def to_dict(self):
        return {'endTime': self.end_time}


_CLOSED = object()


class Subscription:
    """Handle for one observer; read events with get() or by iterating."""

    def __init__(self, hub: 'BroadcastHub', max_queue_size: int):
        self._hub = hub
        self._queue: Queue = Queue(maxsize=max_queue_size)
        self._closed = threading.Event()
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def offer(self, event) -> Optional[bool]:
        """Enqueue without blocking.

        Returns True if queued, False if queued after dropping an older event,
        and None if the subscription is already closed.
        """
        if self.closed:
            return None
        try:
            self._queue.put_nowait(event)
            return True
        except Full:
            pass
        try:
            self._queue.get_nowait()
        except Empty:
            pass
        self.dropped += 1
        try:
            self._queue.put_nowait(event)
        except Full:
            self.dropped += 1
        return False

    def get(self, timeout: Optional[float] = None):
        """Next event, or None once closed or after ``timeout`` seconds."""
        if self.closed:
            return None
        try:
            event = self._queue.get(timeout=timeout)
        except Empty:
            return None
        if event is _CLOSED:
            return None
        return event

    def drain(self) -> List:
        events = []
        while True:
            try:
                event = self._queue.get_nowait()
            except Empty:
                return events
            if event is not _CLOSED:
                events.append(event)

    def close(self) -> None:
        if self.closed:
            return
        self._closed.set()
        self._hub.unsubscribe(self)
        # wake a reader blocked in get()
        try:
            self._queue.put_nowait(_CLOSED)
        except Full:
            pass

    def __iter__(self):
        while not self.closed:
            event = self.get()
            if event is None:
                return
            yield event


class BroadcastHub:

    def __init__(self, max_queue_size: int = 100, logger: Optional[logging.Logger] = None):
        if max_queue_size <= 0:
            raise ValueError('max_queue_size must be positive')
        self._max_queue_size = max_queue_size
        self._lock = threading.Lock()
        self._subscribers: Set[Subscription] = set()
        self.logger = logger or logging.getLogger(__name__)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, self._max_queue_size)
        with self._lock:
            self._subscribers.add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscribers.discard(subscription)
        if not subscription.closed:
            subscription.close()

    def publish(self, event) -> int:
        """Deliver ``event`` to every current subscriber. Returns how many were reached."""
        with self._lock:
            targets = list(self._subscribers)
        delivered = 0
        for subscription in targets:
            try:
                result = subscription.offer(event)
            except Exception:
                self.logger.exception(f"[hub-error] event={event.name} observer={id(subscription):x}")
                continue
            if result is None:
                # closed after the snapshot of subscribers was taken
                continue
            if result is False:
                self.logger.warning(
                    f"[hub-drop] event={event.name} observer={id(subscription):x} dropped={subscription.dropped}"
                )
            delivered += 1
        return delivered
