#!/usr/bin/env python3
"""
Repetition codec tests.
"""
import unittest

from uartfec.fec_utils import (
    CodecConfigurationError,
    RepetitionCodec,
    fec_decode,
    fec_decode_with_stats,
    fec_encode,
)
from uartfec.utils.bitops import (
    count_bit_errors,
    count_disagreements,
    flip_bit,
    majority,
    vote_triplets,
)


class TestBitOps(unittest.TestCase):
    """Test majority and bit helpers."""

    def test_majority_truth_table(self):
        """Output bit is set when two or more inputs are set."""
        for a in (0, 1):
            for b in (0, 1):
                for c in (0, 1):
                    expected = 1 if a + b + c >= 2 else 0
                    self.assertEqual(majority(a, b, c), expected)

    def test_majority_wider_than_a_byte(self):
        self.assertEqual(majority(0xFFFF, 0x0F0F, 0x00FF), 0x0FFF)

    def test_vote_triplets(self):
        voted = vote_triplets(b"AAABBB")
        self.assertEqual(voted.tobytes(), b"AB")

    def test_vote_triplets_rejects_partial(self):
        with self.assertRaises(ValueError):
            vote_triplets(b"AAAB")

    def test_count_disagreements(self):
        data = b"AAB" + b"CCC"
        self.assertEqual(count_disagreements(data, vote_triplets(data)), 1)

    def test_count_bit_errors(self):
        self.assertEqual(count_bit_errors(b"\x00\xff", b"\x01\xff"), 1)
        self.assertEqual(count_bit_errors(b"\x0f", b"\xf0"), 8)
        self.assertEqual(count_bit_errors(b"", b"abc"), 0)

    def test_flip_bit(self):
        self.assertEqual(flip_bit(b"\x00\x00", 1, 7), b"\x00\x80")


class TestEncode(unittest.TestCase):
    """Test the encoder transform."""

    def setUp(self):
        self.codec = RepetitionCodec(input_capacity=256)

    def test_triplicates_and_terminates(self):
        result = self.codec.encode(b"AB")

        self.assertEqual(result.data, b"AAABBB\x00")
        self.assertEqual(result.length, 7)
        self.assertFalse(result.truncated)
        self.assertFalse(result.sentinel_stop)

    def test_empty_input_produces_nothing(self):
        """No terminator is written when nothing was encoded."""
        result = self.codec.encode(b"")

        self.assertEqual(result.data, b"")
        self.assertTrue(result.empty)

    def test_leading_sentinel_produces_nothing(self):
        result = self.codec.encode(b"\x00AB")

        self.assertEqual(result.length, 0)
        self.assertTrue(result.empty)
        self.assertTrue(result.sentinel_stop)

    def test_stops_at_sentinel(self):
        result = self.codec.encode(b"A\x00B")

        self.assertEqual(result.data, b"AAA\x00")
        self.assertTrue(result.sentinel_stop)

    def test_trailing_sentinel_is_not_a_stop(self):
        result = self.codec.encode(b"AB\x00")

        self.assertEqual(result.data, b"AAABBB\x00")
        self.assertFalse(result.sentinel_stop)

    def test_truncates_to_capacity(self):
        result = self.codec.encode(b"x" * 300)

        self.assertTrue(result.truncated)
        self.assertEqual(result.consumed, 256)
        self.assertEqual(result.length, 256 * 3 + 1)
        self.assertEqual(result.data[:-1], b"x" * 768)

    def test_length_framing_is_binary_safe(self):
        codec = RepetitionCodec(input_capacity=256, framing="length")
        result = codec.encode(b"A\x00B")

        self.assertEqual(result.data, b"AAA\x00\x00\x00BBB")
        self.assertFalse(result.sentinel_stop)

    def test_overhead(self):
        self.assertEqual(self.codec.get_overhead(), 3.0)
        self.assertEqual(self.codec.max_correctable_errors_per_byte(), 1)


class TestDecode(unittest.TestCase):
    """Test the decoder transform."""

    def setUp(self):
        self.codec = RepetitionCodec(input_capacity=769)

    def test_decodes_clean_triplets(self):
        result = self.codec.decode(b"AAABBB")

        self.assertEqual(result.data, b"AB")
        self.assertEqual(result.corrections, 0)

    def test_decodes_terminated_payload(self):
        result = self.codec.decode(b"AAABBB\x00")

        self.assertEqual(result.data, b"AB")
        self.assertFalse(result.sentinel_stop)

    def test_corrects_one_flipped_bit(self):
        a = ord("A")
        result = self.codec.decode(bytes([a, a, a ^ 0x01]))

        self.assertEqual(result.data, b"A")
        self.assertEqual(result.corrections, 1)

    def test_corrects_one_bad_copy_in_every_position(self):
        codec = RepetitionCodec(input_capacity=769, framing="length")
        x = 0x5A
        for position in range(3):
            for bit in range(8):
                with self.subTest(position=position, bit=bit):
                    corrupted = flip_bit(bytes([x, x, x]), position, bit)
                    self.assertEqual(codec.decode(corrupted).data, bytes([x]))

    def test_two_bad_copies_are_not_corrected(self):
        """Known limit of the code: two copies wrong in the same bit win the vote."""
        x = ord("A")
        y = x ^ 0x04
        result = self.codec.decode(bytes([x, y, y]))

        self.assertEqual(result.data, bytes([y]))
        self.assertNotEqual(result.data, bytes([x]))

    def test_drops_incomplete_trailing_triplet(self):
        result = self.codec.decode(b"AAABB")

        self.assertEqual(result.data, b"A")
        self.assertEqual(result.dropped_tail, 2)

    def test_partial_triplet_before_sentinel_is_dropped(self):
        result = self.codec.decode(b"AAAB\x00CCC")

        self.assertEqual(result.data, b"A")
        self.assertEqual(result.dropped_tail, 1)
        self.assertTrue(result.sentinel_stop)

    def test_empty_input(self):
        result = self.codec.decode(b"")

        self.assertEqual(result.data, b"")
        self.assertTrue(result.empty)

    def test_truncates_to_capacity(self):
        result = self.codec.decode(b"z" * 800)

        self.assertTrue(result.truncated)
        self.assertEqual(result.consumed, 769)
        self.assertEqual(result.data, b"z" * 256)
        self.assertEqual(result.dropped_tail, 1)

    def test_invalid_configuration(self):
        with self.assertRaises(CodecConfigurationError):
            RepetitionCodec(input_capacity=0)
        with self.assertRaises(CodecConfigurationError):
            RepetitionCodec(framing="cobs")


class TestRoundTrip(unittest.TestCase):
    """Test encode followed by decode."""

    def test_identity_without_corruption(self):
        for length in (1, 2, 17, 255, 256):
            with self.subTest(length=length):
                message = bytes((i % 255) + 1 for i in range(length))
                self.assertEqual(fec_decode(fec_encode(message)), message)

    def test_identity_binary_payload_with_length_framing(self):
        message = bytes(range(256))
        encoded = fec_encode(message, framing="length")

        self.assertEqual(len(encoded), 768)
        self.assertEqual(fec_decode(encoded, framing="length"), message)

    def test_decode_with_stats(self):
        encoded = bytearray(fec_encode(b"ABC"))
        encoded[0] ^= 0xFF
        encoded[4] ^= 0x10
        encoded[8] ^= 0x01

        result = fec_decode_with_stats(bytes(encoded))

        self.assertEqual(result.data, b"ABC")
        self.assertEqual(result.corrections, 3)


if __name__ == '__main__':
    unittest.main()
