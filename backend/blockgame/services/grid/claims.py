import logging
from typing import Optional

from .broadcast import BlockChanged, BroadcastHub
from .exceptions import InvalidClaim
from .store import BlockState, GridStore


class ClaimCoordinator:
    """Applies claims to the store and announces them on the hub.

    Claims are last-claim-wins: an owned block is overwritten without any
    check against its previous owner.
    """

    def __init__(self, store: GridStore, hub: BroadcastHub, logger: Optional[logging.Logger] = None):
        self.store = store
        self.hub = hub
        self.logger = logger or logging.getLogger(__name__)

    def claim(self, block_id, owner, color) -> BlockState:
        try:
            block_id = int(block_id)
        except (TypeError, ValueError):
            raise InvalidClaim(f'Invalid block id: {block_id!r}')
        if not isinstance(owner, str) or not owner.strip():
            raise InvalidClaim('owner is required')
        if not isinstance(color, str) or not color.strip():
            raise InvalidClaim('color is required')

        # Publishing under the store lock keeps each observer's event order
        # identical to the order the store applied the writes.
        with self.store.lock:
            previous = self.store.get_by_id(block_id)
            block = self.store.update(block_id, owner, color)
            self.hub.publish(BlockChanged(block))

        self.logger.info(f"[claim] block={block.id} owner={owner} color={color} previous_owner={previous.owner}")
        return block
