"""
Key Spore - Ed25519 backed Spores

Each KeySpore consists of:
- Ed25519 signing keypair
- Sporeprint derived from the public key

Sporeprint format:
- "ed25519:" prefix
- 64 lower-case hex characters of the raw 32-byte public key

Because the Sporeprint carries the whole public key, any Sporeprint can be
resolved back into a PublicSpore that verifies signatures without the
private key.
"""

from ..errors import SignError, VerifyError, ResolveError
from ..platform.crypto_adapter import CryptoBackend, KEY_SIZE
from .base import Spore


SPOREPRINT_PREFIX = "ed25519:"


def encode_sporeprint(public_key):
    """Sporeprint for a raw Ed25519 public key"""
    return SPOREPRINT_PREFIX + public_key.hex()


def decode_sporeprint(sporeprint):
    """
    Raw Ed25519 public key from a Sporeprint.

    Raises:
        ResolveError: if the Sporeprint is malformed
    """
    if not isinstance(sporeprint, str) or not sporeprint.startswith(SPOREPRINT_PREFIX):
        raise ResolveError(f"Not an {SPOREPRINT_PREFIX} sporeprint: {sporeprint!r}")

    try:
        public_key = bytes.fromhex(sporeprint[len(SPOREPRINT_PREFIX):])
    except ValueError as e:
        raise ResolveError(f"Invalid hex in sporeprint: {e}") from e

    if len(public_key) != KEY_SIZE:
        raise ResolveError(f"Invalid public key length: {len(public_key)} (expected {KEY_SIZE})")

    try:
        return CryptoBackend.load_ed25519_public_key(public_key)
    except ValueError as e:
        raise ResolveError(f"Invalid Ed25519 public key: {e}") from e


class PublicSpore(Spore):
    """
    Public half of a Spore (no private key).
    Used for verifying signatures of a remote or pruned origin.
    """

    def __init__(self, public_key):
        """
        Create public Spore from a public key.

        Args:
            public_key: Ed25519 public key (32 bytes)
        """
        self.public_key = public_key
        self._sporeprint = encode_sporeprint(public_key)

    def sporeprint(self):
        return self._sporeprint

    def sign(self, data):
        raise SignError("PublicSpore holds no private key")

    def verify(self, data, signature):
        """Verify signature from this Spore"""
        if not CryptoBackend.verify(self.public_key, data, signature):
            raise VerifyError(f"signature rejected by {self._sporeprint[:24]}...")

    @classmethod
    def resolve(cls, sporeprint):
        return PublicSpore(decode_sporeprint(sporeprint))

    def __repr__(self):
        return f"PublicSpore(sporeprint={self._sporeprint[:24]}...)"


class KeySpore(PublicSpore):
    """
    Spore with signing capability.
    """

    def __init__(self, private_key=None):
        """
        Create a Spore from an existing private key or generate a new one.

        Args:
            private_key: Ed25519 private key (32 bytes), None to generate
        """
        if private_key is None:
            private_key, public_key = CryptoBackend.generate_ed25519_keypair()
        else:
            if len(private_key) != KEY_SIZE:
                raise ValueError(f"Invalid private key length: {len(private_key)} (expected {KEY_SIZE})")
            public_key = CryptoBackend.derive_ed25519_public_key(private_key)

        self.private_key = private_key
        super().__init__(public_key)

    def sign(self, data):
        """
        Sign data with this Spore.

        Args:
            data: bytes to sign

        Returns:
            bytes: Ed25519 signature (64 bytes)
        """
        if not isinstance(data, (bytes, bytearray)):
            raise SignError(f"expected bytes, got {type(data).__name__}")
        return CryptoBackend.sign(self.private_key, bytes(data))

    def can_sign(self):
        return True

    def public_spore(self):
        """Strip the private key"""
        return PublicSpore(self.public_key)

    def __repr__(self):
        return f"KeySpore(sporeprint={self.sporeprint()[:24]}...)"
