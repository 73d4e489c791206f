"""In-memory trade lifecycle and notification server."""

from .errors import InvalidStateError, NotFoundError, TradeStoreError, ValidationError
from .services import TradeStore

__all__ = [
    'TradeStore',
    'TradeStoreError',
    'ValidationError',
    'NotFoundError',
    'InvalidStateError',
]
