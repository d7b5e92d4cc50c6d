class StarchainError(Exception):
    """Base class for all ledger errors."""


class BlockNotFoundError(StarchainError):
    """Raised when no block in the chain has the requested hash."""


class AppendError(StarchainError):
    """Raised when the append path finds the chain in an inconsistent state."""


class InvalidPayloadError(StarchainError):
    """Raised when a block payload cannot be encoded as JSON."""


class ChallengeError(StarchainError):
    """Raised when a star submission is rejected."""


class InvalidMessageError(ChallengeError):
    """Raised when a challenge message cannot be parsed."""


class ExpiredChallengeError(ChallengeError):
    """Raised when a challenge message is older than the freshness window."""


class InvalidSignatureError(ChallengeError):
    """Raised when the signature over a challenge message does not verify."""


HASH_MISMATCH = "hash_mismatch"
LINKAGE_BROKEN = "linkage_broken"


class ValidationError:
    """
    A single finding from chain validation.

    Findings are reported, not raised: validate_chain() returns a list of
    these and an empty list means the chain is intact.
    """

    _MESSAGES = {
        HASH_MISMATCH: "Block validation failed at height {height}",
        LINKAGE_BROKEN: "Previous block hash validation failed at height {height}",
    }

    def __init__(self, kind: str, height: int):
        if kind not in self._MESSAGES:
            raise ValueError(f"Unknown validation error kind: {kind}")
        self.kind = kind
        self.height = height

    @property
    def message(self) -> str:
        return self._MESSAGES[self.kind].format(height=self.height)

    def to_dict(self):
        return {"error": self.message}

    def __eq__(self, other):
        if not isinstance(other, ValidationError):
            return NotImplemented
        return (self.kind, self.height) == (other.kind, other.height)

    def __hash__(self):
        return hash((self.kind, self.height))

    def __repr__(self):
        return f"ValidationError({self.kind}, height={self.height})"
