import itertools
import random
import threading
from typing import Dict, Optional, Sequence


DEFAULT_USER_COLORS = ('#6C63FF', '#4CAF50', '#2196F3', '#FF5252', '#FFB300', '#00BCD4')


class UserRegistry:
    """Hands out throwaway user identities.

    Ids carry a random suffix; colors rotate through the palette in
    registration order. The counter is lock-guarded so concurrent
    registrations never reuse a slot.
    """

    def __init__(self, colors: Sequence[str] = DEFAULT_USER_COLORS, rng: Optional[random.Random] = None):
        if not colors:
            raise ValueError('at least one user color is required')
        self.colors = tuple(colors)
        self._rng = rng or random.Random()
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def register(self) -> Dict[str, str]:
        with self._lock:
            index = next(self._counter)
            suffix = self._rng.randrange(900)
        return {
            'id': f'User-{suffix}',
            'color': self.colors[index % len(self.colors)],
        }
