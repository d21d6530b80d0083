"""
Codec devices
Get/set boundary through which callers push data in and pull data out
"""

import logging
import operator
import time
from dataclasses import dataclass
from typing import Optional

from uartfec.buffer import PendingBuffer
from uartfec.fec_utils import (
    DECODER_INPUT_CAPACITY,
    ENCODER_INPUT_CAPACITY,
    FRAMING_SENTINEL,
    CodecResult,
    FECError,
    RepetitionCodec,
)
from uartfec.metrics import MetricsCollector, OperationMetrics

logger = logging.getLogger(__name__)


class IOFault(FECError):
    """Raised when data cannot be copied across the device boundary."""
    pass


@dataclass
class ReadResult:
    """Bytes handed to the caller by one read."""
    data: bytes
    pending: int
    truncated: bool = False

    @property
    def length(self) -> int:
        return len(self.data)


class CodecDevice:
    """
    One direction of the link: a codec transform in front of a pending buffer.

    Subclasses pick the transform and the capacities.
    """

    DEVICE_NAME = "codec"
    CLASS_NAME = "fec"
    LABEL = "Codec"

    def __init__(self, input_capacity: int, buffer_capacity: int,
                 framing: str = FRAMING_SENTINEL, window_size: int = 100):
        """
        Initialize codec device

        Args:
            input_capacity: Maximum bytes examined per write
            buffer_capacity: Size of the pending buffer
            framing: 'sentinel' or 'length'
            window_size: Rolling window of the metrics collector
        """
        self.codec = RepetitionCodec(input_capacity=input_capacity, framing=framing)
        self._buffer = PendingBuffer(buffer_capacity)
        self.metrics = MetricsCollector(window_size=window_size)

        self.open_count = 0
        self.last_result: Optional[CodecResult] = None

        # Statistics
        self.writes = 0
        self.reads = 0
        self.bytes_written = 0
        self.bytes_read = 0
        self.faults = 0

        logger.info(f"{self.LABEL}: initialized {self.DEVICE_NAME} ({self.CLASS_NAME}), "
                    f"input capacity {input_capacity}, buffer capacity {buffer_capacity}, "
                    f"{framing} framing")

    @property
    def framing(self) -> str:
        return self.codec.framing

    @property
    def buffer(self) -> PendingBuffer:
        return self._buffer

    def _transform(self, data: bytes) -> CodecResult:
        raise NotImplementedError

    def _fault(self, message: str) -> IOFault:
        with self._buffer.lock:
            self.faults += 1
        logger.error(f"{self.LABEL}: {message}")
        return IOFault(message)

    def open(self) -> "CodecDevice":
        """Count an open of the device"""
        self.open_count += 1
        logger.info(f"{self.LABEL}: Device has been opened {self.open_count} time(s)")
        return self

    def close(self):
        """Release the device"""
        logger.info(f"{self.LABEL}: Device successfully closed")

    def write(self, buffer, length: Optional[int] = None) -> int:
        """
        Transform caller bytes and replace the pending payload

        Args:
            buffer: Bytes-like object holding the input
            length: Number of bytes to take from buffer (default: all)

        Returns:
            The requested length
        """
        try:
            view = memoryview(buffer).cast('B')
        except TypeError as e:
            raise self._fault(f"Cannot read from {type(buffer).__name__} object") from e

        if length is None:
            length = view.nbytes
        try:
            length = operator.index(length)
        except TypeError as e:
            raise self._fault(f"Length must be an integer, got {type(length).__name__}") from e
        if length < 0 or length > view.nbytes:
            raise self._fault(f"Requested {length} bytes from a {view.nbytes} byte buffer")

        data = view[:length].tobytes()

        with self._buffer.lock:
            result = self._transform(data)
            self._buffer.store(result.data)
            self.last_result = result

            self.writes += 1
            self.bytes_written += length
            self.metrics.add_operation(OperationMetrics(
                device=self.DEVICE_NAME,
                operation="write",
                timestamp_ns=time.time_ns(),
                requested=length,
                produced=result.length,
                truncated=result.truncated,
                sentinel_stop=result.sentinel_stop,
                dropped_tail=result.dropped_tail,
                corrections=result.corrections
            ))

        logger.debug(f"{self.LABEL}: prepared {result.length} bytes from {length} requested")
        return length

    def read(self, capacity: Optional[int] = None) -> ReadResult:
        """
        Drain the pending payload

        Args:
            capacity: Maximum bytes the caller accepts (default: unlimited)

        Returns:
            ReadResult, truncated when capacity was smaller than the payload
        """
        if capacity is not None:
            try:
                capacity = operator.index(capacity)
            except TypeError as e:
                raise self._fault(f"Capacity must be an integer, got {type(capacity).__name__}") from e
            if capacity < 0:
                raise self._fault(f"Invalid read capacity {capacity}")

        with self._buffer.lock:
            payload = self._buffer.drain()

            truncated = capacity is not None and len(payload) > capacity
            if truncated:
                logger.warning(f"{self.LABEL}: payload of {len(payload)} bytes truncated "
                               f"to read capacity {capacity}")
                data = payload[:capacity]
            else:
                data = payload

            requested = len(payload) if capacity is None else capacity
            self._record_read(requested, len(data), truncated)

        return ReadResult(data=data, pending=len(payload), truncated=truncated)

    def readinto(self, target) -> int:
        """
        Drain the pending payload into a caller supplied buffer

        Args:
            target: Writable bytes-like object

        Returns:
            Number of bytes copied
        """
        try:
            view = memoryview(target).cast('B')
        except TypeError as e:
            raise self._fault(f"Cannot write to {type(target).__name__} object") from e

        if view.readonly:
            raise self._fault("Target buffer is read-only")

        with self._buffer.lock:
            payload = self._buffer.drain()

            count = min(len(payload), view.nbytes)
            view[:count] = payload[:count]

            truncated = count < len(payload)
            if truncated:
                logger.warning(f"{self.LABEL}: payload of {len(payload)} bytes truncated "
                               f"to target size {view.nbytes}")

            self._record_read(view.nbytes, count, truncated)

        return count

    def _record_read(self, requested: int, count: int, truncated: bool):
        self.reads += 1
        self.bytes_read += count
        self.metrics.add_operation(OperationMetrics(
            device=self.DEVICE_NAME,
            operation="read",
            timestamp_ns=time.time_ns(),
            requested=requested,
            produced=count,
            truncated=truncated
        ))
        logger.debug(f"{self.LABEL}: Sent {count} characters to the user")

    def get_stats(self) -> dict:
        """Get device statistics"""
        return {
            'device': self.DEVICE_NAME,
            'framing': self.framing,
            'open_count': self.open_count,
            'writes': self.writes,
            'reads': self.reads,
            'bytes_written': self.bytes_written,
            'bytes_read': self.bytes_read,
            'faults': self.faults,
            'buffer': self._buffer.get_stats()
        }

    def reset_stats(self):
        """Reset statistics counters"""
        with self._buffer.lock:
            self.writes = 0
            self.reads = 0
            self.bytes_written = 0
            self.bytes_read = 0
            self.faults = 0
            self._buffer.reset_stats()
            self.metrics.reset()


class EncoderDevice(CodecDevice):
    """Triplicates caller bytes for transmission over the serial link."""

    DEVICE_NAME = "UARTWrite"
    CLASS_NAME = "enc"
    LABEL = "Encode"

    def __init__(self, input_capacity: int = ENCODER_INPUT_CAPACITY,
                 framing: str = FRAMING_SENTINEL, window_size: int = 100):
        # Room for every byte three times plus the terminator
        super().__init__(input_capacity, input_capacity * 3 + 1, framing, window_size)

    def _transform(self, data: bytes) -> CodecResult:
        return self.codec.encode(data)


class DecoderDevice(CodecDevice):
    """Recovers caller bytes from triplicated, possibly corrupted, input."""

    DEVICE_NAME = "UARTdecode"
    CLASS_NAME = "dec"
    LABEL = "Decode"

    def __init__(self, input_capacity: int = DECODER_INPUT_CAPACITY,
                 framing: str = FRAMING_SENTINEL, window_size: int = 100):
        super().__init__(input_capacity, max(input_capacity // 3, 1), framing, window_size)

    def _transform(self, data: bytes) -> CodecResult:
        return self.codec.decode(data)
