"""
Crypto Adapter - Cryptographic primitives used by Spores and Mycelium

Wraps the `cryptography` library (Ed25519) and hashlib (SHA-256) behind a
single static interface so the rest of the package never touches key
objects directly. Keys cross this boundary as raw 32-byte strings.
"""

from hashlib import sha256

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey


KEY_SIZE = 32
SIGNATURE_SIZE = 64
DIGEST_SIZE = 32


class CryptoBackend:
    """
    Unified crypto interface for Ed25519 signing and SHA-256 hashing
    """

    @staticmethod
    def generate_ed25519_keypair():
        """
        Generate Ed25519 signing keypair

        Returns:
            tuple: (private_key_bytes, public_key_bytes)
        """
        private_key = Ed25519PrivateKey.generate()

        private_bytes = private_key.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption()
        )
        return private_bytes, CryptoBackend.derive_ed25519_public_key(private_bytes)

    @staticmethod
    def derive_ed25519_public_key(private_key_bytes):
        """Raw public key bytes for a raw Ed25519 private key"""
        private_key = Ed25519PrivateKey.from_private_bytes(private_key_bytes)
        return private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw
        )

    @staticmethod
    def load_ed25519_public_key(public_key_bytes):
        """
        Check that bytes form a usable Ed25519 public key.

        Raises:
            ValueError: if the bytes are not a valid public key
        """
        Ed25519PublicKey.from_public_bytes(public_key_bytes)
        return public_key_bytes

    @staticmethod
    def sign(private_key_bytes, message):
        """Sign message with Ed25519 private key"""
        private_key = Ed25519PrivateKey.from_private_bytes(private_key_bytes)
        return private_key.sign(message)

    @staticmethod
    def verify(public_key_bytes, message, signature):
        """
        Verify Ed25519 signature

        Returns:
            bool: True if the signature is valid for message
        """
        try:
            public_key = Ed25519PublicKey.from_public_bytes(public_key_bytes)
            public_key.verify(signature, message)
            return True
        except (InvalidSignature, ValueError):
            return False

    @staticmethod
    def hash_sha256(data):
        """SHA-256 hash"""
        return sha256(data).digest()

    @staticmethod
    def sha256_hasher():
        """Incremental SHA-256 hasher (update()/digest())"""
        return sha256()
