"""
Error kinds raised by the grid services.

Hierarchy:
- GridError (base, carries an HTTP status for the API layer)
  - BlockNotFound
  - InvalidClaim
  - StoreUnavailable
  - StaleReset
"""


class GridError(Exception):
    """Base exception for all grid errors."""
    status_code: int = 500
    message: str = 'Grid error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'error': self.message}


class BlockNotFound(GridError):
    status_code = 404
    message = 'Block not found'

    def __init__(self, block_id=None):
        self.block_id = block_id
        super().__init__(f'Block not found: {block_id}' if block_id is not None else None)


class InvalidClaim(GridError):
    status_code = 400
    message = 'Invalid claim'


class StoreUnavailable(GridError):
    # the persistence backend failed; the request fails, the server stays up
    status_code = 503
    message = 'Block store unavailable'


class StaleReset(GridError):
    """A reset that lost the race against a concurrent reset.

    RoundTimer raises it internally and reports it to callers by returning
    False; it never reaches the API layer.
    """
    status_code = 409
    message = 'Stale reset'
