"""
Mycelium - Recursive, content-addressed provenance tree

A Mycelium is an AttributeSet plus ordered Hyphae (children). Each child
is either an owned Mycelium or a Sporeprint reference left behind by
prune().

Hash (SHA-256, Merkle-style):
    fold, in order:
      - get_hash_for(attribute) for every attribute (signature excluded)
      - for every hypha:
          owned      -> 0x10 + child.get_hash()        (32 bytes, recursive)
          reference  -> 0x11 + 4-byte length + UTF-8 sporeprint

Every contribution starts with a distinct tag and variable-length
payloads are length-prefixed, so the byte stream parses one way only.

Any change to a descendant, or to this node's own non-signature
attributes, changes the hash. Pruning is lossy: a pruned tree does NOT
hash the same as its unpruned form.

Signature:
    OriginSignature = spore.sign(hash_hex().encode('ascii'))
"""

import logging

from ..errors import (
    OriginMissingError, SignatureInvalidError, SignatureMissingError, VerifyError,
)
from ..platform.clock import get_default_clock
from ..platform.crypto_adapter import CryptoBackend
from .attributes import (
    AttributeSet, LastUpdate, OriginMoment, OriginSignature, OriginSpore, encode_text,
    get_hash_for,
)
from .hyphae import Hypha

logger = logging.getLogger(__name__)

# scan() result for a match found without a depth limit. Not a distance.
UNBOUNDED_DEPTH = -1

# Hash contribution tags for hyphae, disjoint from attribute tags
OWNED_TAG = 0x10
REFERENCE_TAG = 0x11


class PruneReport:
    """Outcome of a prune() pass"""

    def __init__(self, dropped=0, collapsed=0):
        self.dropped = dropped
        self.collapsed = collapsed

    def __eq__(self, other):
        if not isinstance(other, PruneReport):
            return NotImplemented
        return (self.dropped, self.collapsed) == (other.dropped, other.collapsed)

    def __repr__(self):
        return f"PruneReport(dropped={self.dropped}, collapsed={self.collapsed})"


class Mycelium:
    """
    A node in the provenance tree.

    Created by a Spore, which is recorded as OriginSpore together with the
    OriginMoment of creation.
    """

    def __init__(self, spore, clock=None):
        """
        Create a new Mycelium.

        Args:
            spore: Spore which creates this Mycelium
            clock: Clock for moments (shared SystemClock if None)

        Raises:
            TimingError: if the clock cannot provide the current moment
        """
        self.clock = clock or get_default_clock()
        now = self.clock.now()

        self.attributes = AttributeSet([
            OriginSpore(spore.sporeprint()),
            OriginMoment(now),
        ])
        self.hyphae = []

    @classmethod
    def from_attributes(cls, attributes, hyphae=None, clock=None):
        """
        Build a Mycelium from parts, without stamping an origin.

        The result may lack an origin; prune() treats such children as
        garbage.

        Args:
            attributes: iterable of Attribute
            hyphae: iterable of Hypha or Mycelium (wrapped as owned)
            clock: Clock for later updates
        """
        node = cls.__new__(cls)
        node.clock = clock or get_default_clock()
        node.attributes = AttributeSet(attributes)
        node.hyphae = []
        for hypha in hyphae or ():
            if isinstance(hypha, Mycelium):
                hypha = Hypha.owned(hypha)
            node.hyphae.append(hypha)
        return node

    # Attributes

    def get_attrs(self):
        """A tuple of all attributes of the Mycelium, without duplicate kinds"""
        return self.attributes.get_attrs()

    def get_attr(self, kind):
        """Returns the attribute of the given kind if it exists"""
        return self.attributes.get_attr(kind)

    def set_attr(self, attribute):
        self.attributes.set_attr(attribute)

    def get_origin(self):
        """
        Returns the origin of the Mycelium.

        The origin is a tuple of the Sporeprint and the moment the Mycelium
        was created. Either half is None if missing.
        """
        return self.attributes.get_origin()

    def has_origin(self):
        return self.attributes.has_origin()

    def get_hyphae(self):
        """Children of the Mycelium, in insertion order"""
        return tuple(self.hyphae)

    # Hashing

    def get_hash(self):
        """
        Content hash of this Mycelium and everything below it.

        Always recomputed; never cached.

        Returns:
            bytes: 32-byte SHA-256 digest
        """
        hasher = CryptoBackend.sha256_hasher()

        for attribute in self.attributes:
            hasher.update(get_hash_for(attribute))

        for hypha in self.hyphae:
            if hypha.is_owned():
                hasher.update(bytes([OWNED_TAG]) + hypha.node.get_hash())
            else:
                hasher.update(bytes([REFERENCE_TAG]) + encode_text(hypha.sporeprint))

        return hasher.digest()

    def hash_hex(self):
        """Canonical textual encoding of get_hash()"""
        return self.get_hash().hex()

    # Signing

    def sign(self, spore):
        """
        Sign the current hash and store it as OriginSignature.

        Args:
            spore: Spore with signing capability

        Raises:
            SignError: if the Spore cannot sign
        """
        digest = self.hash_hex()
        signature = spore.sign(digest.encode("ascii"))
        self.set_attr(OriginSignature(signature))
        logger.debug("Signed %s... by %s", digest[:16], spore.sporeprint()[:24])

    def verify(self, spore):
        """
        Verify OriginSignature against a freshly computed hash.

        A verification-only Spore (e.g. from Spore.resolve) is enough.

        Raises:
            SignatureMissingError: if the Mycelium has no OriginSignature
            SignatureInvalidError: if the Spore rejects the signature
        """
        signature = self.get_attr(OriginSignature)
        if signature is None:
            raise SignatureMissingError("Mycelium has no OriginSignature")

        digest = self.hash_hex()
        try:
            spore.verify(digest.encode("ascii"), signature.value)
        except VerifyError as e:
            logger.warning("Signature rejected for %s...: %s", digest[:16], e)
            raise SignatureInvalidError(
                f"OriginSignature does not match hash {digest[:16]}..."
            ) from e

    def verify_origin(self, resolve):
        """
        Verify against the Spore named by this Mycelium's own OriginSpore.

        Args:
            resolve: callable Sporeprint -> Spore, e.g. KeySpore.resolve

        Raises:
            OriginMissingError: if there is no OriginSpore to resolve
            ResolveError: if the Sporeprint cannot be resolved
            SignatureMissingError, SignatureInvalidError: as verify()
        """
        sporeprint = self.get_origin()[0]
        if sporeprint is None:
            raise OriginMissingError("Mycelium has no OriginSpore to resolve")
        self.verify(resolve(sporeprint))

    # Search

    def scan(self, sporeprint, max_depth=None):
        """
        Look for a child (at any depth) whose origin is `sporeprint`.

        The Mycelium itself is not considered. Direct children are checked
        before descending. Owned children without an origin are skipped
        and not descended into; references match on their stored
        Sporeprint.

        Args:
            sporeprint: Sporeprint to find
            max_depth: None for unbounded, else maximum levels below this node

        Returns:
            int or None: depth of the match (1 = direct child) when bounded,
                UNBOUNDED_DEPTH (-1) when unbounded, None if not found.
                Compare against None; never test the result for truth.
        """
        return self._scan(sporeprint, max_depth, 1)

    def _scan(self, sporeprint, remaining, depth):
        if remaining is not None and remaining <= 0:
            return None

        searchable = []
        for hypha in self.hyphae:
            if hypha.is_reference():
                if hypha.sporeprint == sporeprint:
                    return depth if remaining is not None else UNBOUNDED_DEPTH
                continue

            child = hypha.node
            if not child.has_origin():
                continue
            if child.get_origin()[0] == sporeprint:
                return depth if remaining is not None else UNBOUNDED_DEPTH
            searchable.append(child)

        next_remaining = remaining - 1 if remaining is not None else None
        for child in searchable:
            found = child._scan(sporeprint, next_remaining, depth + 1)
            if found is not None:
                return found
        return None

    # Mutation

    def add(self, child):
        """
        Attach a child Mycelium.

        Any OriginSpore of this Mycelium equal to the child's origin
        Sporeprint is removed first. LastUpdate is refreshed afterwards.

        Args:
            child: Mycelium to take ownership of

        Raises:
            TimingError: if the clock cannot provide the current moment
        """
        if not isinstance(child, Mycelium):
            raise TypeError(f"expected Mycelium, got {type(child).__name__}")

        child_sporeprint = child.get_origin()[0]
        if child_sporeprint is not None:
            removed = self.attributes.remove_attr(OriginSpore(child_sporeprint))
            if removed:
                logger.debug("Dropped own OriginSpore %s... shared with new child",
                             child_sporeprint[:24])

        self.hyphae.append(Hypha.owned(child))
        self.set_attr(LastUpdate(self.clock.now()))

    def prune(self):
        """
        Garbage-collect and deduplicate direct children.

        1. Owned children without a full origin are dropped.
        2. Among owned children sharing an origin Sporeprint, only the most
           recent keeps its content; the others become references. Recency
           is OriginMoment, then LastUpdate; on a full tie the first one
           seen is kept.

        Not recursive. Does not touch LastUpdate.

        Returns:
            PruneReport: counts of dropped and collapsed children
        """
        kept = []
        dropped = 0
        for hypha in self.hyphae:
            if hypha.is_owned() and not hypha.node.has_origin():
                dropped += 1
                continue
            kept.append(hypha)

        # sporeprint -> (index, recency)
        best = {}
        collapse = set()
        for index, hypha in enumerate(kept):
            if not hypha.is_owned():
                continue

            sporeprint, moment = hypha.node.get_origin()
            recency = (moment, _last_update(hypha.node))

            if sporeprint not in best:
                best[sporeprint] = (index, recency)
            elif recency > best[sporeprint][1]:
                collapse.add(best[sporeprint][0])
                best[sporeprint] = (index, recency)
            else:
                collapse.add(index)

        for index in collapse:
            kept[index] = Hypha.reference(kept[index].node.get_origin()[0])

        self.hyphae = kept
        report = PruneReport(dropped=dropped, collapsed=len(collapse))
        logger.debug("Pruned %s", report)
        return report

    def __repr__(self):
        sporeprint, moment = self.get_origin()
        origin = sporeprint[:24] + "..." if sporeprint else None
        return f"Mycelium(origin={origin}, moment={moment}, hyphae={len(self.hyphae)})"


def _last_update(node):
    attr = node.get_attr(LastUpdate)
    return attr.value if attr is not None else -1
