"""
Errors - Failure kinds raised by the provenance tree and its Spores

MyceliumError
├── TimingError             clock unavailable or before UNIX_EPOCH
├── SignatureMissingError   verify() on a Mycelium that was never signed
├── SignatureInvalidError   the Spore rejected the signature
├── OriginMissingError      no OriginSpore to resolve a Spore from
└── SporeError              failure inside a Spore capability
    ├── SignError
    ├── VerifyError
    └── ResolveError
"""


class MyceliumError(Exception):
    """Base class for all provenance tree errors"""


class TimingError(MyceliumError):
    """The system clock could not provide a moment since UNIX_EPOCH"""


class SignatureMissingError(MyceliumError):
    """No OriginSignature attribute is present. Sign first."""


class SignatureInvalidError(MyceliumError):
    """The OriginSignature does not match the Mycelium's current hash"""


class OriginMissingError(MyceliumError):
    """The Mycelium carries no OriginSpore"""


class SporeError(MyceliumError):
    """Failure originating from a Spore capability"""


class SignError(SporeError):
    def __init__(self, reason):
        super().__init__(f"Failed to sign data: {reason}")


class VerifyError(SporeError):
    def __init__(self, reason):
        super().__init__(f"Failed to verify signature: {reason}")


class ResolveError(SporeError):
    def __init__(self, reason):
        super().__init__(f"Failed to resolve Spore: {reason}")
