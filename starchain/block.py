import json
import logging
from typing import Any, Callable, Optional

from starchain.config import GENESIS_DATA
from starchain.crypto import digest as default_digest
from starchain.errors import AppendError, InvalidPayloadError

logger = logging.getLogger(__name__)


def _encode_body(data: Any) -> str:
    try:
        return json.dumps(data, sort_keys=True).encode("utf-8").hex()
    except (TypeError, ValueError) as e:
        raise InvalidPayloadError(f"Payload is not JSON-serializable: {e}") from e


def _decode_body(body: str) -> Any:
    return json.loads(bytes.fromhex(body).decode("utf-8"))


class Block:
    """
    One record in the ledger.

    The payload is kept hex-encoded in `body`. Linkage fields (height,
    timestamp, previous_hash) and the hash are filled in once by seal(),
    which the chain calls while appending.
    """

    def __init__(self, data: Any):
        self.body: str = _encode_body(data)
        self.height: Optional[int] = None
        self.timestamp: Optional[int] = None
        self.previous_hash: Optional[str] = None
        self.hash: Optional[str] = None

    # -------------------------
    # HEADER (what gets hashed)
    # -------------------------
    def to_header_dict(self):
        return {
            "body": self.body,
            "height": self.height,
            "timestamp": self.timestamp,
            "previous_hash": self.previous_hash,
        }

    # -------------------------
    # FULL BLOCK
    # -------------------------
    def to_dict(self):
        return {
            **self.to_header_dict(),
            "hash": self.hash,
        }

    # -------------------------
    # HASH CALCULATION
    # -------------------------
    def compute_hash(self, digest: Callable[[str], str] = default_digest) -> str:
        header_string = json.dumps(
            self.to_header_dict(),
            sort_keys=True
        )
        return digest(header_string)

    def seal(self, height: int, timestamp: int, previous_hash: str,
             digest: Callable[[str], str] = default_digest) -> "Block":
        """Fix the linkage fields and compute the hash. Allowed exactly once."""
        if self.hash is not None:
            raise AppendError(f"Block already sealed at height {self.height}")

        self.height = height
        self.timestamp = int(timestamp)
        self.previous_hash = previous_hash
        self.hash = self.compute_hash(digest)
        return self

    def validate(self, digest: Callable[[str], str] = default_digest) -> bool:
        """Recompute the hash over the stored fields and compare it with `hash`."""
        if self.hash is None:
            return False
        return self.compute_hash(digest) == self.hash

    def get_body_data(self) -> Any:
        """Decoded payload, or None if the body is not valid hex-encoded JSON."""
        try:
            return _decode_body(self.body)
        except (ValueError, TypeError):
            logger.debug("Undecodable body in block %s", self.height)
            return None

    def __eq__(self, other):
        if not isinstance(other, Block):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(self.hash)

    def __repr__(self):
        return f"Block(#{self.height}, hash={self.hash[:8] if self.hash else 'None'})"


def create_genesis_block() -> Block:
    """Create the (unsealed) genesis block carrying the fixed sentinel payload."""
    return Block(dict(GENESIS_DATA))
