import logging
import threading
import time
from typing import Callable, Optional, Tuple

from blockgame import socketio
from .broadcast import BroadcastHub, RoundReset
from .exceptions import StaleReset
from .store import GridStore


DEFAULT_ROUND_DURATION_MS = 30000


def now_ms() -> int:
    return int(time.time() * 1000)


class RoundTimer:
    """Process-wide round deadline with a stale-reset guard.

    Lifecycle: the end time is set to now + duration on construction and is
    only ever replaced by an effective reset. A reset proceeds only if the
    caller's view (the generation it last observed) still matches the
    current one; otherwise another reset already won and this is a no-op.
    """

    def __init__(
        self,
        store: GridStore,
        hub: BroadcastHub,
        duration_ms: int = DEFAULT_ROUND_DURATION_MS,
        clock: Callable[[], int] = now_ms,
        logger: Optional[logging.Logger] = None,
    ):
        if duration_ms <= 0:
            raise ValueError('duration_ms must be positive')
        self.store = store
        self.hub = hub
        self.duration_ms = int(duration_ms)
        self._clock = clock
        self._lock = threading.Lock()
        self._end_time = self._clock() + self.duration_ms
        self._generation = 0
        self.logger = logger or logging.getLogger(__name__)

    def get_end_time(self) -> int:
        with self._lock:
            return self._end_time

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def time_remaining_ms(self, now: Optional[int] = None) -> int:
        if now is None:
            now = self._clock()
        return max(0, self.get_end_time() - now)

    def round_view(self) -> Tuple[int, int]:
        """The (end_time, generation) pair a caller passes back to reset()."""
        with self._lock:
            return self._end_time, self._generation

    def _check_view(self, expected_generation: int) -> None:
        # caller holds self._lock
        if expected_generation != self._generation:
            raise StaleReset(
                f'expected_generation={expected_generation} current_generation={self._generation} '
                f'current_end={self._end_time}'
            )

    def reset(self, duration_ms: Optional[int] = None, expected_generation: Optional[int] = None) -> bool:
        """Restart the round and clear the grid.

        ``expected_generation`` is the generation the caller last observed;
        if another reset has happened since, this one is stale and returns
        False. Store errors propagate after the previous round is restored.
        """
        if duration_ms is None:
            duration_ms = self.duration_ms
        if expected_generation is None:
            expected_generation = self.generation

        with self._lock:
            try:
                self._check_view(expected_generation)
            except StaleReset as exc:
                self.logger.info(f"[reset-stale] {exc.message}")
                return False

            previous = (self._end_time, self._generation)
            self._end_time = self._clock() + int(duration_ms)
            self._generation += 1
            try:
                # timer lock first, then store lock; claims only take the store lock
                with self.store.lock:
                    cleared = self.store.clear_all()
                    self.hub.publish(RoundReset(end_time=self._end_time))
            except Exception:
                self._end_time, self._generation = previous
                raise
            end_time = self._end_time
            generation = self._generation

        self.logger.info(f"[reset] generation={generation} cleared={cleared} end_time={end_time}")
        return True

    def check_expired(self, now: Optional[int] = None) -> bool:
        if now is None:
            now = self._clock()
        end_time, generation = self.round_view()
        if now < end_time:
            return False
        self.logger.info(f"[round-expired] end_time={end_time} now={now}")
        return self.reset(expected_generation=generation)


def start_round_watcher(app, timer: RoundTimer, interval_sec: float = 1.0) -> Optional[threading.Event]:
    """Poll the round deadline in a Socket.IO background task.

    No-ops in TESTING mode unless ENABLE_ROUND_WATCHER_IN_TESTS is set.
    Returns an event that stops the watcher when set.
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_ROUND_WATCHER_IN_TESTS'):
        return None

    stop = threading.Event()

    def _worker():
        app.logger.info(f"[watcher-start] interval={interval_sec}s end_time={timer.get_end_time()}")
        while not stop.is_set():
            socketio.sleep(interval_sec)
            with app.app_context():
                try:
                    timer.check_expired()
                except Exception:
                    # keep the watcher alive; the next tick retries
                    app.logger.exception('[watcher-error] round expiry check failed')
        app.logger.info('[watcher-stop]')

    socketio.start_background_task(_worker)
    return stop
