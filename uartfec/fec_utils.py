"""
Forward Error Correction utilities.
Implements the (3,1) repetition code and bitwise majority-vote decoding.
"""
import logging
from dataclasses import dataclass

from uartfec.utils.bitops import count_disagreements, vote_triplets

logger = logging.getLogger(__name__)

REPETITION = 3
SENTINEL = 0

ENCODER_INPUT_CAPACITY = 256
DECODER_INPUT_CAPACITY = ENCODER_INPUT_CAPACITY * REPETITION + 1  # 769

FRAMING_SENTINEL = "sentinel"
FRAMING_LENGTH = "length"
FRAMINGS = (FRAMING_SENTINEL, FRAMING_LENGTH)


class FECError(Exception):
    """Base class for repetition-code errors."""
    pass


class CodecConfigurationError(FECError):
    """Raised when a codec is constructed with invalid parameters."""
    pass


@dataclass
class CodecResult:
    """Outcome of one encode or decode transform."""
    data: bytes
    consumed: int
    truncated: bool = False
    sentinel_stop: bool = False
    dropped_tail: int = 0
    corrections: int = 0
    empty: bool = False

    @property
    def length(self) -> int:
        return len(self.data)


class RepetitionCodec:
    """Forward Error Correction codec using a three-fold repetition code."""

    def __init__(self, input_capacity: int = ENCODER_INPUT_CAPACITY,
                 framing: str = FRAMING_SENTINEL):
        """
        Initialize FEC codec.

        Args:
            input_capacity: Maximum number of input bytes examined per call
            framing: 'sentinel' for zero-terminated payloads, 'length' for
                binary-safe payloads carried with an explicit length
        """
        if input_capacity < 1:
            raise CodecConfigurationError(f"Input capacity must be positive, got {input_capacity}")
        if framing not in FRAMINGS:
            raise CodecConfigurationError(f"Unknown framing: {framing}")

        self.input_capacity = input_capacity
        self.framing = framing

    def _clamp(self, data: bytes):
        """Apply the capacity limit and, for sentinel framing, the terminator scan."""
        truncated = len(data) > self.input_capacity
        if truncated:
            logger.warning(f"Input of {len(data)} bytes truncated to {self.input_capacity}")
            data = data[:self.input_capacity]

        consumed = len(data)
        sentinel_stop = False
        if self.framing == FRAMING_SENTINEL:
            end = data.find(SENTINEL)
            if end != -1:
                # Anything after the terminator is lost
                sentinel_stop = end < len(data) - 1
                if sentinel_stop:
                    logger.warning(f"Sentinel at offset {end} hides {len(data) - end - 1} trailing bytes")
                data = data[:end]

        return data, consumed, truncated, sentinel_stop

    def encode(self, data: bytes) -> CodecResult:
        """
        Encode data with the repetition code.

        Each byte is repeated three times. Sentinel framing appends a single
        terminator byte after the repeated region unless nothing was encoded.

        Args:
            data: Original data

        Returns:
            CodecResult whose data is the encoded payload
        """
        payload, consumed, truncated, sentinel_stop = self._clamp(bytes(data))

        if not payload:
            logger.debug("Nothing to encode, producing empty payload")
            return CodecResult(b"", consumed, truncated, sentinel_stop, empty=True)

        encoded = b"".join(bytes([b]) * REPETITION for b in payload)
        if self.framing == FRAMING_SENTINEL:
            encoded += bytes([SENTINEL])

        logger.debug(f"Encoded {len(payload)} bytes -> {len(encoded)} bytes")
        return CodecResult(encoded, consumed, truncated, sentinel_stop)

    def decode(self, data: bytes) -> CodecResult:
        """
        Decode data using bitwise majority voting.

        An incomplete trailing triplet is dropped rather than read past the
        end of the valid bytes.

        Args:
            data: Encoded, possibly corrupted, data

        Returns:
            CodecResult whose data is the recovered payload
        """
        payload, consumed, truncated, sentinel_stop = self._clamp(bytes(data))

        dropped_tail = len(payload) % REPETITION
        if dropped_tail:
            logger.warning(f"Dropping {dropped_tail} bytes of an incomplete triplet")
            payload = payload[:len(payload) - dropped_tail]

        if not payload:
            logger.debug("Nothing to decode, producing empty payload")
            return CodecResult(b"", consumed, truncated, sentinel_stop,
                               dropped_tail=dropped_tail, empty=True)

        voted = vote_triplets(payload)
        corrections = count_disagreements(payload, voted)
        decoded = voted.tobytes()

        logger.debug(f"Decoded {len(payload)} bytes -> {len(decoded)} bytes, "
                     f"{corrections} copies corrected")
        return CodecResult(decoded, consumed, truncated, sentinel_stop,
                           dropped_tail=dropped_tail, corrections=corrections)

    def get_overhead(self) -> float:
        """
        Calculate encoding overhead.

        Returns:
            Overhead factor (3.0 for triple repetition)
        """
        return float(REPETITION)

    def max_correctable_errors_per_byte(self) -> int:
        """
        Maximum correctable copies per triplet.

        Returns:
            Number of copies that can be wrong in the same bit
        """
        return (REPETITION - 1) // 2


def fec_encode(data: bytes, framing: str = FRAMING_SENTINEL) -> bytes:
    """
    Encode data with the repetition code.

    Args:
        data: Data to encode
        framing: Framing mode

    Returns:
        Encoded data
    """
    codec = RepetitionCodec(ENCODER_INPUT_CAPACITY, framing)
    return codec.encode(data).data


def fec_decode(data: bytes, framing: str = FRAMING_SENTINEL) -> bytes:
    """
    Decode data with majority voting.

    Args:
        data: Encoded data
        framing: Framing mode

    Returns:
        Decoded data
    """
    codec = RepetitionCodec(DECODER_INPUT_CAPACITY, framing)
    return codec.decode(data).data


def fec_decode_with_stats(data: bytes, framing: str = FRAMING_SENTINEL) -> CodecResult:
    """
    Decode data and return the full result including correction count.

    Args:
        data: Encoded data
        framing: Framing mode

    Returns:
        CodecResult
    """
    codec = RepetitionCodec(DECODER_INPUT_CAPACITY, framing)
    return codec.decode(data)
