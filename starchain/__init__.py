# Core modules
from .block import Block, create_genesis_block
from .chain import Blockchain
from .registry import StarRegistry

# Crypto
from .crypto import digest, verify_signature, sign_message, create_wallet

# Errors
from .errors import (
    StarchainError,
    BlockNotFoundError,
    AppendError,
    InvalidPayloadError,
    ChallengeError,
    InvalidMessageError,
    ExpiredChallengeError,
    InvalidSignatureError,
    ValidationError,
    HASH_MISMATCH,
    LINKAGE_BROKEN,
)

__all__ = [
    # Core
    "Block",
    "create_genesis_block",
    "Blockchain",
    "StarRegistry",
    # Crypto
    "digest",
    "verify_signature",
    "sign_message",
    "create_wallet",
    # Errors
    "StarchainError",
    "BlockNotFoundError",
    "AppendError",
    "InvalidPayloadError",
    "ChallengeError",
    "InvalidMessageError",
    "ExpiredChallengeError",
    "InvalidSignatureError",
    "ValidationError",
    "HASH_MISMATCH",
    "LINKAGE_BROKEN",
]
