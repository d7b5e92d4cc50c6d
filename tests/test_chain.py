import unittest
import threading
import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from starchain import (
    Blockchain,
    BlockNotFoundError,
    AppendError,
    InvalidPayloadError,
    ValidationError,
    HASH_MISMATCH,
    LINKAGE_BROKEN,
)
from starchain.block import Block
from starchain.config import GENESIS_DATA, GENESIS_PREVIOUS_HASH


class FakeClock:
    def __init__(self, t):
        self.t = t

    def __call__(self):
        return self.t


def star_payload(address, story):
    return {
        "address": address,
        "message": f"{address}:1000:starRegistry",
        "signature": "00",
        "star": {"story": story},
    }


class TestBlockchain(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock(1000)
        self.chain = Blockchain(clock=self.clock)

    def _append(self, count):
        blocks = []
        for i in range(count):
            self.clock.t += 10
            blocks.append(self.chain.append(star_payload("A", f"star {i}")))
        return blocks

    def test_genesis_block(self):
        """A fresh chain holds exactly the genesis block."""
        self.assertEqual(self.chain.get_chain_height(), 0)
        self.assertEqual(len(self.chain), 1)

        genesis = self.chain.get_block_by_height(0)
        self.assertEqual(genesis.height, 0)
        self.assertEqual(genesis.previous_hash, GENESIS_PREVIOUS_HASH)
        self.assertEqual(genesis.get_body_data(), GENESIS_DATA)
        self.assertEqual(genesis.timestamp, 1000)
        self.assertEqual(self.chain.validate_chain(), [])

    def test_append_links_blocks(self):
        self._append(5)

        self.assertEqual(self.chain.get_chain_height(), 5)
        heights = [b["height"] for b in self.chain.to_dict_list()]
        self.assertEqual(heights, list(range(6)))

        for h in range(1, 6):
            block = self.chain.get_block_by_height(h)
            previous = self.chain.get_block_by_height(h - 1)
            self.assertEqual(block.previous_hash, previous.hash)
            self.assertEqual(block.timestamp, 1000 + 10 * h)

        self.assertEqual(self.chain.validate_chain(), [])
        self.assertTrue(self.chain.is_valid())

    def test_get_block_by_hash(self):
        for block in self._append(3):
            self.assertEqual(self.chain.get_block_by_hash(block.hash), block)

        with self.assertRaises(BlockNotFoundError):
            self.chain.get_block_by_hash("f" * 64)

    def test_get_block_by_height_out_of_range(self):
        self._append(1)
        self.assertIsNone(self.chain.get_block_by_height(2))
        self.assertIsNone(self.chain.get_block_by_height(-1))
        self.assertIsNotNone(self.chain.get_block_by_height(1))

    def test_get_block_by_height_rejects_bool(self):
        self._append(1)
        self.assertIsNone(self.chain.get_block_by_height(True))
        self.assertIsNone(self.chain.get_block_by_height(False))
        self.assertIsNone(self.chain.get_block_by_height("1"))

    def test_returned_blocks_are_copies(self):
        """Mutating a returned block does not touch the stored one."""
        block = self._append(1)[0]
        block.body = Block({"star": "forged"}).body

        fetched = self.chain.get_block_by_height(1)
        fetched.previous_hash = "0" * 64

        self.assertEqual(self.chain.validate_chain(), [])

    def test_stars_by_address(self):
        self.chain.append(star_payload("A", "first"))
        self.chain.append(star_payload("B", "second"))
        self.chain.append(star_payload("A", "third"))

        self.assertEqual(
            self.chain.get_stars_by_wallet_address("A"),
            [{"story": "first"}, {"story": "third"}],
        )
        self.assertEqual(self.chain.get_stars_by_wallet_address("B"), [{"story": "second"}])
        self.assertEqual(self.chain.get_stars_by_wallet_address("C"), [])
        # Genesis has no address and must never show up
        self.assertEqual(self.chain.get_stars_by_wallet_address(None), [])

    def test_forged_height_does_not_hide_star(self):
        """The address scan skips genesis by position, not by the stored height."""
        self.chain.append(star_payload("A", "first"))
        self.chain.chain[1].height = 0

        self.assertEqual(self.chain.get_stars_by_wallet_address("A"), [{"story": "first"}])

    def test_unencodable_payload_is_rejected(self):
        with self.assertRaises(InvalidPayloadError):
            self.chain.append(star_payload("A", {1: "x", "b": 2}))

        self.assertEqual(self.chain.get_chain_height(), 0)
        self.assertEqual(self.chain.validate_chain(), [])

    def test_validation_logs_findings(self):
        self._append(2)
        self.chain.chain[1].body = Block({"star": "forged"}).body

        with self.assertLogs("starchain.chain", "WARNING") as cm:
            self.chain.validate_chain()

        self.assertEqual(len(cm.output), 1)
        self.assertIn("hash mismatch at height 1", cm.output[0])

    def test_tampered_body_reports_hash_mismatch(self):
        self._append(3)
        self.chain.chain[2].body = Block({"star": "forged"}).body

        self.assertEqual(self.chain.validate_chain(), [ValidationError(HASH_MISMATCH, 2)])
        self.assertFalse(self.chain.is_valid())

    def test_tampered_hash_breaks_next_link(self):
        self._append(3)
        self.chain.chain[2].hash = "f" * 64

        errors = self.chain.validate_chain()
        self.assertIn(ValidationError(HASH_MISMATCH, 2), errors)
        self.assertIn(ValidationError(LINKAGE_BROKEN, 3), errors)
        self.assertEqual(len(errors), 2)

    def test_tampered_previous_hash_reports_linkage(self):
        self._append(3)
        self.chain.chain[2].previous_hash = "f" * 64

        errors = self.chain.validate_chain()
        self.assertIn(ValidationError(LINKAGE_BROKEN, 2), errors)
        self.assertIn(ValidationError(HASH_MISMATCH, 2), errors)

    def test_validation_collects_every_error(self):
        """Validation does not stop at the first bad block."""
        self._append(4)
        self.chain.chain[0].body = Block({"data": "Fake Genesis"}).body
        self.chain.chain[1].body = Block({"star": "forged"}).body
        self.chain.chain[3].body = Block({"star": "forged"}).body

        errors = self.chain.validate_chain()
        self.assertEqual(
            errors,
            [
                ValidationError(HASH_MISMATCH, 0),
                ValidationError(HASH_MISMATCH, 1),
                ValidationError(HASH_MISMATCH, 3),
            ],
        )
        self.assertEqual(
            errors[1].to_dict(),
            {"error": "Block validation failed at height 1"},
        )

    def test_missing_tip_raises_append_error(self):
        self._append(1)
        self.chain.chain.pop()

        with self.assertRaises(AppendError):
            self.chain.append(star_payload("A", "lost"))

    def test_concurrent_appends(self):
        """Parallel appends never produce duplicate heights or broken links."""
        chain = Blockchain()

        def worker(name):
            for i in range(25):
                chain.append(star_payload(name, f"{name}-{i}"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in "ABCD"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(chain.get_chain_height(), 100)
        self.assertEqual([b["height"] for b in chain.to_dict_list()], list(range(101)))
        self.assertEqual(chain.validate_chain(), [])
        self.assertEqual(len(chain.get_stars_by_wallet_address("C")), 25)

    def test_readers_never_see_partial_blocks(self):
        """Readers running alongside writers only ever see sealed, linked blocks."""
        chain = Blockchain()
        stop = threading.Event()
        problems = []

        def writer(name):
            for i in range(50):
                chain.append(star_payload(name, f"{name}-{i}"))

        def reader():
            while not stop.is_set():
                errors = chain.validate_chain()
                if errors:
                    problems.append(errors)

                tip = chain.get_block_by_height(chain.get_chain_height())
                if tip is None or tip.hash is None or tip.hash != tip.compute_hash():
                    problems.append(tip)

                for star in chain.get_stars_by_wallet_address("A"):
                    if not star.get("story", "").startswith("A-"):
                        problems.append(star)

        readers = [threading.Thread(target=reader) for _ in range(3)]
        writers = [threading.Thread(target=writer, args=(n,)) for n in "AB"]
        for t in readers + writers:
            t.start()
        for t in writers:
            t.join()
        stop.set()
        for t in readers:
            t.join()

        self.assertEqual(problems, [])
        self.assertEqual(chain.get_chain_height(), 100)


if __name__ == "__main__":
    unittest.main()
