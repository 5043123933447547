#!/usr/bin/env python3
"""
Unit tests for block record parsing and range helpers.
"""

import unittest

from kpi.blocks import BlockRecord, SealType
from kpi.shared_utils import clamp_block_range, hex_to_int, to_quantity


class TestQuantities(unittest.TestCase):

    def test_hex_to_int(self):
        self.assertEqual(hex_to_int("0x1f"), 31)
        self.assertEqual(hex_to_int("0X10"), 16)
        self.assertEqual(hex_to_int("42"), 42)
        self.assertEqual(hex_to_int(7), 7)
        self.assertIsNone(hex_to_int("0xzz"))
        self.assertIsNone(hex_to_int(None))
        self.assertIsNone(hex_to_int(True))

    def test_to_quantity(self):
        self.assertEqual(to_quantity(0), "0x0")
        self.assertEqual(to_quantity(255), "0xff")


class TestClampBlockRange(unittest.TestCase):

    def test_default_window(self):
        self.assertEqual(clamp_block_range(500), (401, 500))
        self.assertEqual(clamp_block_range(500, window=10), (491, 500))

    def test_start_clamped_to_floor(self):
        self.assertEqual(clamp_block_range(40), (1, 40))
        self.assertEqual(clamp_block_range(40, floor=0), (0, 40))
        self.assertEqual(clamp_block_range(40, start=-5, end=10), (1, 10))

    def test_end_clamped_to_latest(self):
        self.assertEqual(clamp_block_range(40, start=30, end=99), (30, 40))

    def test_start_after_end_is_kept(self):
        self.assertEqual(clamp_block_range(40, start=35, end=20), (35, 20))
        self.assertEqual(clamp_block_range(40, start=50), (50, 40))


class TestBlockRecord(unittest.TestCase):

    RAW = {
        "number": "0x2a",
        "timestamp": "0x5c3a1b00",
        "hash": "0xABCDEF",
        "miner": "0xA00A",
        "sealType": "Pos",
        "difficulty": "0x3e8",
        "totalDifficulty": "0x100000000000000000000",
        "importTimestamp": "0x1680000000000",
        "transactions": ["0x1", "0x2"],
    }

    def test_from_rpc(self):
        block = BlockRecord.from_rpc(self.RAW)
        self.assertEqual(block.number, 42)
        self.assertEqual(block.timestamp, 0x5c3a1b00)
        self.assertEqual(block.hash, "0xabcdef")
        self.assertEqual(block.miner, "0xa00a")
        self.assertEqual(block.seal_type, SealType.POS)
        self.assertEqual(block.difficulty, 1000)
        self.assertEqual(block.total_difficulty, 2 ** 80)
        self.assertEqual(block.import_timestamp, 0x1680000000000)
        self.assertEqual(block.transaction_count, 2)

    def test_from_rpc_with_plain_integers(self):
        block = BlockRecord.from_rpc({"number": 3, "timestamp": 1000, "sealType": 0})
        self.assertEqual(block.number, 3)
        self.assertEqual(block.seal_type, SealType.POW)
        self.assertIsNone(block.import_timestamp)
        self.assertIsNone(block.transaction_count)
        self.assertEqual(block.difficulty, 0)

    def test_malformed_block_raises(self):
        with self.assertRaises(ValueError):
            BlockRecord.from_rpc({"timestamp": "0x1"})

    def test_records_are_immutable(self):
        block = BlockRecord.from_rpc(self.RAW)
        with self.assertRaises(AttributeError):
            block.number = 1

    def test_seal_type_parse(self):
        self.assertEqual(SealType.parse("pow"), SealType.POW)
        self.assertEqual(SealType.parse("Pos"), SealType.POS)
        self.assertEqual(SealType.parse("0x1"), SealType.POS)
        self.assertEqual(SealType.parse(SealType.POW), SealType.POW)
        self.assertIsNone(SealType.parse("0x7"))
        self.assertIsNone(SealType.parse(None))

    def test_is_sealed_by(self):
        block = BlockRecord(number=1, timestamp=1, hash="0x1", seal_type=SealType.POW)
        self.assertTrue(block.is_sealed_by(None))
        self.assertTrue(block.is_sealed_by(SealType.POW))
        self.assertFalse(block.is_sealed_by(SealType.POS))


if __name__ == "__main__":
    unittest.main()
