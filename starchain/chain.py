from .block import Block, create_genesis_block
from .config import GENESIS_PREVIOUS_HASH
from .crypto import digest as default_digest, now
from .errors import (
    AppendError,
    BlockNotFoundError,
    ValidationError,
    HASH_MISMATCH,
    LINKAGE_BROKEN,
)
import copy
import logging
import threading

logger = logging.getLogger(__name__)


class Blockchain:
    """
    In-memory, append-only chain of hash-linked blocks.

    All mutation goes through _add_block() under a single lock. Query
    methods return copies, so stored blocks cannot be altered from outside.
    """

    def __init__(self, digest=default_digest, clock=now):
        self.chain = []
        self.height = -1
        self._digest = digest
        self._clock = clock
        self._lock = threading.RLock()
        self._initialize_chain()

    def _initialize_chain(self):
        """
        Appends the genesis block if the chain is empty.
        """
        with self._lock:
            if self.height == -1:
                self._add_block(create_genesis_block())

    def __len__(self):
        with self._lock:
            return len(self.chain)

    def _snapshot(self):
        with self._lock:
            return list(self.chain)

    def get_chain_height(self) -> int:
        with self._lock:
            return self.height

    def append(self, data) -> Block:
        """Append a new block carrying `data` and return a copy of it."""
        return self._add_block(Block(data))

    def _add_block(self, block: Block) -> Block:
        """
        Links, hashes and stores a block at the next height.
        Reading the tip, sealing and pushing happen in one critical section.
        """
        with self._lock:
            chain_height = self.height

            if chain_height == -1:
                previous_hash = GENESIS_PREVIOUS_HASH
            else:
                tip = self.chain[chain_height] if chain_height < len(self.chain) else None
                if tip is None or tip.height != chain_height:
                    logger.error("Chain tip missing at height %d", chain_height)
                    raise AppendError(f"Chain tip missing at height {chain_height}")
                previous_hash = tip.hash

            block.seal(
                height=chain_height + 1,
                timestamp=self._clock(),
                previous_hash=previous_hash,
                digest=self._digest,
            )

            self.chain.append(block)
            self.height += 1

            logger.info("Block #%d added (%s)", block.height, block.hash[:8])
            return copy.deepcopy(block)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_block_by_hash(self, block_hash: str) -> Block:
        for block in self._snapshot():
            if block.hash == block_hash:
                return copy.deepcopy(block)
        raise BlockNotFoundError(f"Can't find block with hash: {block_hash}")

    def get_block_by_height(self, height: int):
        """
        Returns the block at `height`, or None when there is no such block.
        """
        with self._lock:
            if isinstance(height, bool) or not isinstance(height, int):
                return None
            if height < 0 or height >= len(self.chain):
                return None
            return copy.deepcopy(self.chain[height])

    def get_stars_by_wallet_address(self, address: str) -> list:
        """
        Returns the stars registered by `address`, oldest first.
        The genesis block is never considered.
        """
        stars = []
        for height, block in enumerate(self._snapshot()):
            if height == 0:
                continue

            data = block.get_body_data()
            if isinstance(data, dict) and data.get("address") == address and "star" in data:
                stars.append(copy.deepcopy(data["star"]))

        return stars

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate_chain(self) -> list:
        """
        Checks every block and returns all findings.

        Checks:
        1. Each block's stored hash matches its recomputed hash
        2. Each block after genesis links to the hash of the block before it

        Returns:
            List of ValidationError, empty if the chain is valid
        """
        blocks = self._snapshot()
        errors = []

        # Position in the list is the height the block should have
        for height, block in enumerate(blocks):
            if not block.validate(self._digest):
                logger.warning("Chain validation: hash mismatch at height %d", height)
                errors.append(ValidationError(HASH_MISMATCH, height))

            if height == 0:
                continue

            previous_block = blocks[height - 1]
            if previous_block.hash != block.previous_hash:
                logger.warning("Chain validation: broken link at height %d", height)
                errors.append(ValidationError(LINKAGE_BROKEN, height))

        return errors

    def is_valid(self) -> bool:
        return not self.validate_chain()

    def to_dict_list(self) -> list:
        """Export chain as list of block dictionaries."""
        return [block.to_dict() for block in self._snapshot()]
