"""
Bit-level helpers for the repetition code.
Majority vote, bit flips and bit-error counting on byte arrays.
"""

import numpy as np


def majority(a: int, b: int, c: int) -> int:
    """
    Bitwise majority of three integers of any width.

    Each output bit is set when at least two of the inputs have it set.

    Args:
        a: First copy
        b: Second copy
        c: Third copy

    Returns:
        Voted value
    """
    return (a & b) | (b & c) | (a & c)


def vote_triplets(data: bytes) -> np.ndarray:
    """
    Majority-vote consecutive byte triplets.

    Args:
        data: Byte string whose length is a multiple of 3

    Returns:
        uint8 array with one voted byte per triplet
    """
    if len(data) % 3 != 0:
        raise ValueError(f"Triplet data length {len(data)} is not a multiple of 3")

    triplets = np.frombuffer(data, dtype=np.uint8).reshape(-1, 3)
    return majority(triplets[:, 0], triplets[:, 1], triplets[:, 2])


def count_disagreements(data: bytes, voted: np.ndarray) -> int:
    """
    Count repeated copies that differ from their voted byte.

    Args:
        data: Triplet data that was voted
        voted: Output of vote_triplets()

    Returns:
        Number of corrected copies
    """
    if voted.size == 0:
        return 0
    triplets = np.frombuffer(data, dtype=np.uint8).reshape(-1, 3)
    return int(np.count_nonzero(triplets != voted[:, None]))


def flip_bit(data: bytes, byte_index: int, bit_index: int) -> bytes:
    """Return a copy of data with one bit inverted."""
    result = bytearray(data)
    result[byte_index] ^= (1 << bit_index)
    return bytes(result)


def count_bit_errors(expected: bytes, actual: bytes) -> int:
    """
    Count differing bits over the common prefix of two byte strings.

    Args:
        expected: Reference bytes
        actual: Received bytes

    Returns:
        Number of bit errors
    """
    n = min(len(expected), len(actual))
    if n == 0:
        return 0

    a = np.frombuffer(expected[:n], dtype=np.uint8)
    b = np.frombuffer(actual[:n], dtype=np.uint8)
    return int(np.unpackbits(a ^ b).sum())
