"""
(3,1) repetition code for noisy serial links.

Public API:
    - RepetitionCodec, fec_encode, fec_decode
    - EncoderDevice, DecoderDevice
    - PendingBuffer
    - BitFlipChannel, SerialLink
"""

from uartfec.fec_utils import (
    CodecConfigurationError,
    CodecResult,
    FECError,
    RepetitionCodec,
    fec_decode,
    fec_decode_with_stats,
    fec_encode,
)
from uartfec.buffer import BufferOverflowError, BufferState, PendingBuffer
from uartfec.device import CodecDevice, DecoderDevice, EncoderDevice, IOFault, ReadResult
from uartfec.channel import BitFlipChannel, LinkReport, SerialLink

__version__ = "0.1.0"

__all__ = [
    "RepetitionCodec",
    "CodecResult",
    "fec_encode",
    "fec_decode",
    "fec_decode_with_stats",
    "FECError",
    "CodecConfigurationError",
    "PendingBuffer",
    "BufferState",
    "BufferOverflowError",
    "CodecDevice",
    "EncoderDevice",
    "DecoderDevice",
    "ReadResult",
    "IOFault",
    "BitFlipChannel",
    "SerialLink",
    "LinkReport",
]
