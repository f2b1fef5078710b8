"""Grid domain services: store, claims, round timer and broadcast hub.

HTTP routes and socket handlers reach these through ``get_grid()`` so that
transport code never touches block state directly.
"""

from dataclasses import dataclass

from flask import current_app

from .broadcast import BlockChanged, BroadcastHub, RoundReset, Subscription
from .claims import ClaimCoordinator
from .exceptions import BlockNotFound, GridError, InvalidClaim, StaleReset, StoreUnavailable
from .round_timer import RoundTimer, now_ms, start_round_watcher
from .store import BlockState, GridStore, InMemoryGridStore, SqlGridStore


EXTENSION_KEY = 'blockgame.grid'


@dataclass
class GridServices:
    store: GridStore
    hub: BroadcastHub
    timer: RoundTimer
    claims: ClaimCoordinator


def build_grid_services(config, logger=None) -> GridServices:
    kind = (config.get('GRID_STORE') or 'sql').lower()
    if kind == 'memory':
        store = InMemoryGridStore()
    elif kind == 'sql':
        store = SqlGridStore()
    else:
        raise ValueError(f'Unknown GRID_STORE: {kind}')
    hub = BroadcastHub(max_queue_size=int(config.get('BROADCAST_QUEUE_SIZE', 100)), logger=logger)
    timer = RoundTimer(store, hub, duration_ms=int(config.get('ROUND_DURATION_MS', 30000)), logger=logger)
    claims = ClaimCoordinator(store, hub, logger=logger)
    return GridServices(store=store, hub=hub, timer=timer, claims=claims)


def get_grid() -> GridServices:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    'BlockChanged', 'BlockNotFound', 'BlockState', 'BroadcastHub', 'ClaimCoordinator',
    'EXTENSION_KEY', 'GridError', 'GridServices', 'GridStore', 'InMemoryGridStore',
    'InvalidClaim', 'RoundReset', 'RoundTimer', 'SqlGridStore', 'StaleReset',
    'StoreUnavailable', 'Subscription', 'build_grid_services', 'get_grid', 'now_ms',
    'start_round_watcher',
]
