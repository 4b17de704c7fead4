"""
Spore Base - Capability interface every Mycelium origin is checked against

A Spore is a fun way of describing a cryptographic keypair which satisfies
the needs of a Mycelium. The tree only ever talks to this interface:

- sporeprint()         stable identifier, used as the join key everywhere
- sign(data)           signature bytes, SignError on failure
- verify(data, sig)    None on success, VerifyError on rejection
- resolve(sporeprint)  verification-capable Spore from the identifier alone

A Sporeprint is a plain str. Holding one never implies holding keys.
"""


class Spore:
    """
    Abstract base class for all Spore capabilities.
    """

    def sporeprint(self):
        """
        Identifier for this Spore.

        Returns:
            str: Sporeprint
        """
        raise NotImplementedError("Subclass must implement sporeprint()")

    def sign(self, data):
        """
        Sign data.

        Args:
            data: bytes to sign

        Returns:
            bytes: signature

        Raises:
            SignError: if this Spore cannot produce a signature
        """
        raise NotImplementedError("Subclass must implement sign()")

    def verify(self, data, signature):
        """
        Verify a signature over data.

        Must work without private signing material.

        Raises:
            VerifyError: if the signature is rejected
        """
        raise NotImplementedError("Subclass must implement verify()")

    @classmethod
    def resolve(cls, sporeprint):
        """
        Rebuild a verification-capable Spore from a Sporeprint.

        Raises:
            ResolveError: if the Sporeprint cannot be decoded
        """
        raise NotImplementedError("Subclass must implement resolve()")

    def can_sign(self):
        """Whether this Spore holds private signing material"""
        return False

    def __eq__(self, other):
        if not isinstance(other, Spore):
            return NotImplemented
        return self.sporeprint() == other.sporeprint()

    def __hash__(self):
        return hash(self.sporeprint())
