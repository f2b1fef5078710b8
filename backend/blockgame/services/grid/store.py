"""Grid Store: canonical owner/color state for every block.

Two implementations share the GridStore interface: an in-memory map used by
unit tests (and GRID_STORE=memory) and a Flask-SQLAlchemy backed store.
Every mutation runs under ``store.lock``, a single re-entrant mutex, so an
``update`` and a ``clear_all`` are applied in arrival order and a block's
owner/color pair is never observed half-written.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from blockgame import db
from blockgame.models import Block
from .exceptions import BlockNotFound, StoreUnavailable


@dataclass(frozen=True)
class BlockState:
    id: int
    row: int
    col: int
    owner: Optional[str] = None
    color: Optional[str] = None

    @property
    def claimed(self) -> bool:
        return self.owner is not None

    def to_dict(self):
        return {
            'id': self.id,
            'row': self.row,
            'col': self.col,
            # aliases used by the web frontend
            'rowNum': self.row,
            'colNum': self.col,
            'owner': self.owner,
            'color': self.color,
        }


def _check_pair(owner: Optional[str], color: Optional[str]) -> None:
    if (owner is None) != (color is None):
        raise ValueError('owner and color must both be set or both be None')


def _check_dimensions(rows: int, cols: int) -> None:
    if rows <= 0 or cols <= 0:
        raise ValueError(f'grid dimensions must be positive, got {rows}x{cols}')


def block_id_for(row: int, col: int, cols: int) -> int:
    """Row-major id, starting at 1."""
    return row * cols + col + 1


class GridStore(ABC):
    """Sole owner of block records."""

    def __init__(self):
        self.lock = threading.RLock()

    @abstractmethod
    def initialize(self, rows: int, cols: int) -> bool:
        """Create rows x cols unclaimed blocks if the store is empty.

        Returns True if blocks were created, False if the grid already existed.
        """

    @abstractmethod
    def get_all(self) -> List[BlockState]:
        """All blocks, row-major."""

    @abstractmethod
    def get_by_id(self, block_id: int) -> BlockState:
        """Raises BlockNotFound."""

    @abstractmethod
    def update(self, block_id: int, owner: Optional[str], color: Optional[str]) -> BlockState:
        """Set owner and color together. Raises BlockNotFound."""

    @abstractmethod
    def clear_all(self) -> int:
        """Unclaim every block. Returns the number of blocks touched."""

    @abstractmethod
    def count(self) -> int:
        ...


class InMemoryGridStore(GridStore):

    def __init__(self):
        super().__init__()
        self._blocks: Dict[int, BlockState] = {}

    def initialize(self, rows: int, cols: int) -> bool:
        _check_dimensions(rows, cols)
        with self.lock:
            if self._blocks:
                return False
            for r in range(rows):
                for c in range(cols):
                    block_id = block_id_for(r, c, cols)
                    self._blocks[block_id] = BlockState(id=block_id, row=r, col=c)
            return True

    def get_all(self) -> List[BlockState]:
        with self.lock:
            return sorted(self._blocks.values(), key=lambda b: (b.row, b.col))

    def get_by_id(self, block_id: int) -> BlockState:
        with self.lock:
            block = self._blocks.get(block_id)
        if block is None:
            raise BlockNotFound(block_id)
        return block

    def update(self, block_id: int, owner: Optional[str], color: Optional[str]) -> BlockState:
        _check_pair(owner, color)
        with self.lock:
            block = self._blocks.get(block_id)
            if block is None:
                raise BlockNotFound(block_id)
            block = replace(block, owner=owner, color=color)
            self._blocks[block_id] = block
            return block

    def clear_all(self) -> int:
        with self.lock:
            for block_id, block in self._blocks.items():
                self._blocks[block_id] = replace(block, owner=None, color=None)
            return len(self._blocks)

    def count(self) -> int:
        with self.lock:
            return len(self._blocks)


class SqlGridStore(GridStore):
    """Block table accessed through the Flask-SQLAlchemy session.

    Must be used inside an application context.
    """

    @contextmanager
    def _guarded(self):
        with self.lock:
            try:
                yield db.session
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise StoreUnavailable(f'Block store unavailable: {exc.__class__.__name__}') from exc
            finally:
                # release the connection while still holding the lock; results
                # are already copied into BlockState values
                db.session.close()

    @staticmethod
    def _to_state(row) -> BlockState:
        return BlockState(id=row.id, row=row.row_num, col=row.col_num, owner=row.owner, color=row.color)

    def initialize(self, rows: int, cols: int) -> bool:
        _check_dimensions(rows, cols)
        with self._guarded() as session:
            if Block.query.first() is not None:
                return False
            session.add_all([
                Block(id=block_id_for(r, c, cols), row_num=r, col_num=c)
                for r in range(rows)
                for c in range(cols)
            ])
            session.commit()
            return True

    def get_all(self) -> List[BlockState]:
        with self._guarded():
            rows = Block.query.order_by(Block.row_num, Block.col_num).all()
            return [self._to_state(r) for r in rows]

    def get_by_id(self, block_id: int) -> BlockState:
        with self._guarded() as session:
            row = session.get(Block, block_id)
            if row is None:
                raise BlockNotFound(block_id)
            return self._to_state(row)

    def update(self, block_id: int, owner: Optional[str], color: Optional[str]) -> BlockState:
        _check_pair(owner, color)
        with self._guarded() as session:
            row = session.get(Block, block_id)
            if row is None:
                raise BlockNotFound(block_id)
            row.owner = owner
            row.color = color
            session.commit()
            return self._to_state(row)

    def clear_all(self) -> int:
        with self._guarded() as session:
            touched = Block.query.update({Block.owner: None, Block.color: None}, synchronize_session=False)
            session.commit()
            return touched

    def count(self) -> int:
        with self._guarded():
            return Block.query.count()
