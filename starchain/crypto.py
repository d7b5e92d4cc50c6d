"""
crypto.py - Hashing, wallets and message signatures for StarChain.

Addresses are hex-encoded Ed25519 verify keys; signatures are hex-encoded
detached signatures over the UTF-8 bytes of the message.
"""

import time
from typing import Tuple, Union

from nacl.encoding import HexEncoder
from nacl.exceptions import BadSignatureError, CryptoError
from nacl.hash import sha256
from nacl.signing import SigningKey, VerifyKey


def digest(data: Union[str, bytes]) -> str:
    """SHA-256 hex digest of a string or bytes."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return sha256(data, encoder=HexEncoder).decode()


def now() -> int:
    """Current wall-clock time in whole seconds."""
    return int(time.time())


def create_wallet() -> Tuple[SigningKey, str]:
    sk = SigningKey.generate()
    address = sk.verify_key.encode(encoder=HexEncoder).decode()
    return sk, address


def sign_message(signing_key: SigningKey, message: str) -> str:
    signed = signing_key.sign(message.encode("utf-8"))
    return signed.signature.hex()


def verify_signature(message: str, address: str, signature: str) -> bool:
    """Check that `signature` over `message` was made by the key behind `address`."""
    if not signature:
        return False

    try:
        verify_key = VerifyKey(address, encoder=HexEncoder)
        verify_key.verify(message.encode("utf-8"), bytes.fromhex(signature))
        return True

    except (BadSignatureError, CryptoError, ValueError, TypeError):
        # Covers:
        # - Invalid signature
        # - Malformed address hex or wrong key length
        # - Invalid hex in signature
        return False
