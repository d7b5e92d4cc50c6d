"""
registry.py - Star registration with proof of address ownership.

Flow:
    1. request_message_ownership_verification(address) returns a challenge
       "<address>:<unix seconds>:starRegistry"
    2. the owner signs the challenge with the key behind `address`
    3. submit_star(address, message, signature, star) checks freshness and
       the signature, then appends a block carrying the star

No state is kept between steps 1 and 3; freshness comes from the timestamp
embedded in the message. A challenge is therefore not single-use: whoever
holds a signed challenge can replay it until the window closes.
"""

import logging
from typing import Any, Callable, Optional

from starchain.block import Block
from starchain.chain import Blockchain
from starchain.config import (
    CHALLENGE_SEPARATOR,
    CHALLENGE_SUFFIX,
    CHALLENGE_WINDOW_SECONDS,
)
from starchain.crypto import now, verify_signature
from starchain.errors import (
    ExpiredChallengeError,
    InvalidPayloadError,
    InvalidMessageError,
    InvalidSignatureError,
)

logger = logging.getLogger(__name__)


def build_challenge(address: str, timestamp: int) -> str:
    return CHALLENGE_SEPARATOR.join([address, str(int(timestamp)), CHALLENGE_SUFFIX])


def parse_challenge_time(message: str) -> int:
    """Extract the issue time (second field) from a challenge message."""
    try:
        return int(message.split(CHALLENGE_SEPARATOR)[1])
    except (AttributeError, IndexError, ValueError, TypeError):
        raise InvalidMessageError(f"Malformed challenge message: {message!r}") from None


class StarRegistry:
    """
    Ownership-proof workflow on top of a Blockchain.

    Also exposes the read side of the chain so callers only need one object.
    """

    def __init__(
        self,
        chain: Optional[Blockchain] = None,
        verifier: Callable[[str, str, str], bool] = verify_signature,
        clock: Callable[[], int] = now,
    ):
        self._clock = clock
        self._verifier = verifier
        self.chain = chain if chain is not None else Blockchain(clock=clock)

    def request_message_ownership_verification(self, address: str) -> str:
        return build_challenge(address, self._clock())

    def submit_star(self, address: str, message: str, signature: str, star: Any) -> Block:
        """
        Register `star` for `address` once the signed challenge checks out.

        Raises:
            InvalidMessageError: message has no readable timestamp
            ExpiredChallengeError: CHALLENGE_WINDOW_SECONDS or more have elapsed
            InvalidSignatureError: signature does not verify for address
            InvalidPayloadError: star cannot be encoded as JSON
        """
        message_time = parse_challenge_time(message)
        elapsed = int(self._clock()) - message_time

        # Freshness is checked before the signature
        if elapsed >= CHALLENGE_WINDOW_SECONDS:
            logger.warning("Star rejected: challenge for %s is %ds old", address, elapsed)
            raise ExpiredChallengeError(
                f"{elapsed} seconds have elapsed, can't register this new block"
            )

        if not self._verifier(message, address, signature):
            logger.warning("Star rejected: bad signature from %s", address)
            raise InvalidSignatureError(f"{message}:{address}:{signature} can't be verified")

        try:
            return self.chain.append({
                "address": address,
                "message": message,
                "signature": signature,
                "star": star,
            })
        except InvalidPayloadError:
            logger.warning("Star rejected: unencodable star from %s", address)
            raise

    # -------------------------
    # READ SIDE
    # -------------------------
    def get_chain_height(self) -> int:
        return self.chain.get_chain_height()

    def get_block_by_hash(self, block_hash: str) -> Block:
        return self.chain.get_block_by_hash(block_hash)

    def get_block_by_height(self, height: int) -> Optional[Block]:
        return self.chain.get_block_by_height(height)

    def get_stars_by_wallet_address(self, address: str) -> list:
        return self.chain.get_stars_by_wallet_address(address)

    def validate_chain(self) -> list:
        return self.chain.validate_chain()
