"""
Single-slot pending buffer.
Holds one payload between a write and the next read.
"""

import logging
import threading
from enum import Enum

from uartfec.fec_utils import FECError

logger = logging.getLogger(__name__)


class BufferOverflowError(FECError):
    """Raised when a payload does not fit the buffer capacity."""
    pass


class BufferState(Enum):
    EMPTY = "empty"
    HOLDING = "holding"


class PendingBuffer:
    """
    Fixed-capacity buffer with write-overwrites, read-drains semantics.

    A drain only resets the length; stale bytes stay in the backing array
    and are never returned.
    """

    def __init__(self, capacity: int):
        """
        Initialize pending buffer

        Args:
            capacity: Size of the backing byte array
        """
        if capacity < 1:
            raise ValueError(f"Buffer capacity must be positive, got {capacity}")

        self.capacity = capacity
        self.data = bytearray(capacity)
        self.length = 0
        self.lock = threading.RLock()

        # Statistics
        self.stores = 0
        self.drains = 0
        self.overwritten = 0

    @property
    def state(self) -> BufferState:
        return BufferState.HOLDING if self.length > 0 else BufferState.EMPTY

    def store(self, payload: bytes):
        """
        Replace the pending payload.

        Args:
            payload: New payload, possibly empty
        """
        if len(payload) > self.capacity:
            raise BufferOverflowError(
                f"Payload of {len(payload)} bytes exceeds capacity {self.capacity}"
            )

        with self.lock:
            if self.length > 0:
                self.overwritten += 1
                logger.debug(f"Discarding unread payload of {self.length} bytes")

            self.data[:len(payload)] = payload
            self.length = len(payload)
            self.stores += 1

    def drain(self) -> bytes:
        """
        Take the pending payload and reset to empty.

        Returns:
            Held bytes, or b"" when empty
        """
        with self.lock:
            payload = bytes(self.data[:self.length])
            self.length = 0
            self.drains += 1
            return payload

    def peek(self) -> bytes:
        """Return the pending payload without draining it"""
        with self.lock:
            return bytes(self.data[:self.length])

    def get_stats(self) -> dict:
        """Get buffer statistics"""
        return {
            'capacity': self.capacity,
            'length': self.length,
            'state': self.state.value,
            'stores': self.stores,
            'drains': self.drains,
            'overwritten': self.overwritten
        }

    def reset_stats(self):
        """Reset statistics counters"""
        self.stores = 0
        self.drains = 0
        self.overwritten = 0
