"""
Noisy Serial Link Model
Flips bits of bytes crossing the link and wires an encoder to a decoder
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from uartfec.device import DecoderDevice, EncoderDevice
from uartfec.fec_utils import FRAMING_SENTINEL, SENTINEL
from uartfec.utils.bitops import count_bit_errors

logger = logging.getLogger(__name__)


class BitFlipChannel:
    def __init__(self, ber: float = 0.0, seed: Optional[int] = None):
        """
        Initialize channel model

        Args:
            ber: Probability that any single bit is inverted
            seed: Seed for the random generator
        """
        if not 0.0 <= ber <= 1.0:
            raise ValueError(f"BER must be in [0, 1], got {ber}")

        self.ber = ber
        self.rng = np.random.default_rng(seed)

        # Statistics
        self.bytes_processed = 0
        self.bits_flipped = 0

        logger.info(f"Channel initialized: BER = {ber}")

    def apply_channel(self, data: bytes) -> bytes:
        """
        Apply bit errors to transmitted bytes

        Args:
            data: Bytes sent over the link

        Returns:
            Bytes after channel effects
        """
        if not data:
            return b""

        bits = np.unpackbits(np.frombuffer(data, dtype=np.uint8))
        errors = (self.rng.random(bits.size) < self.ber).astype(np.uint8)
        received = np.packbits(bits ^ errors).tobytes()

        flipped = int(errors.sum())
        self.bytes_processed += len(data)
        self.bits_flipped += flipped
        logger.debug(f"Flipped {flipped} of {bits.size} bits")

        return received

    def set_ber(self, ber: float):
        """Update bit error rate"""
        if not 0.0 <= ber <= 1.0:
            raise ValueError(f"BER must be in [0, 1], got {ber}")
        self.ber = ber
        logger.info(f"BER updated to {ber}")

    def get_stats(self) -> dict:
        """Get channel statistics"""
        total_bits = self.bytes_processed * 8
        return {
            'ber': self.ber,
            'bytes_processed': self.bytes_processed,
            'bits_flipped': self.bits_flipped,
            'measured_ber': self.bits_flipped / total_bits if total_bits > 0 else 0.0
        }

    def reset_stats(self):
        """Reset statistics counters"""
        self.bytes_processed = 0
        self.bits_flipped = 0


@dataclass
class LinkReport:
    """Result of sending one payload across the link."""
    sent: bytes
    received: bytes
    line_bit_errors: int
    residual_bit_errors: int
    corrections: int

    @property
    def success(self) -> bool:
        return self.sent == self.received


class SerialLink:
    """Encoder device, noisy channel and decoder device in series."""

    def __init__(self, encoder: EncoderDevice, decoder: DecoderDevice,
                 channel: Optional[BitFlipChannel] = None):
        self.encoder = encoder
        self.decoder = decoder
        self.channel = channel if channel is not None else BitFlipChannel()

    def send(self, payload: bytes) -> LinkReport:
        """
        Push one payload through encode, channel and decode

        Args:
            payload: Caller bytes

        Returns:
            LinkReport comparing what was sent with what came out
        """
        self.encoder.write(payload)
        line = self.encoder.read().data

        corrupted = self.channel.apply_channel(line)

        self.decoder.write(corrupted)
        received = self.decoder.read().data

        # Compare against what the encoder actually accepted
        sent = bytes(payload[:self.encoder.codec.input_capacity])
        if self.encoder.framing == FRAMING_SENTINEL:
            sent = sent.split(bytes([SENTINEL]), 1)[0]

        report = LinkReport(
            sent=sent,
            received=received,
            line_bit_errors=count_bit_errors(line, corrupted),
            residual_bit_errors=count_bit_errors(sent, received) + 8 * abs(len(sent) - len(received)),
            corrections=self.decoder.last_result.corrections
        )
        logger.info(f"Link: sent {len(sent)} bytes, received {len(received)} bytes, "
                    f"{report.line_bit_errors} line bit errors, {report.corrections} corrections")
        return report
