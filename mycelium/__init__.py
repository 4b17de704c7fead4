"""
Mycelium Provenance Tree
A recursive, content-addressed record of who created what, and when.

Every node (Mycelium) is stamped with the Spore that created it, can be
hashed, signed and verified, searched to a bounded depth, and pruned down
to one full copy per origin.
"""

__version__ = "0.1.0"
__author__ = "Mycelium Contributors"

from .core.attributes import (
    Attribute, AttributeSet, LastUpdate, OriginMoment, OriginSignature, OriginSpore,
)
from .core.hyphae import Hypha, HyphaKind
from .core.mycelium import Mycelium, PruneReport, UNBOUNDED_DEPTH
from .errors import (
    MyceliumError, OriginMissingError, ResolveError, SignatureInvalidError,
    SignatureMissingError, SignError, SporeError, TimingError, VerifyError,
)
from .platform.clock import Clock, ManualClock, SystemClock
from .spore import KeySpore, PublicSpore, Spore
