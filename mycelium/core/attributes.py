"""
Attributes - Typed facts attached to a Mycelium

Attribute kinds:
- OriginSpore      Sporeprint of the Spore which created the Mycelium
- OriginMoment     creation moment (ns since UNIX_EPOCH)
- OriginSignature  signature over the Mycelium hash, made by the origin Spore
- LastUpdate       moment of the most recent mutation

An AttributeSet holds at most one attribute of each kind. Setting an
attribute whose kind is already present replaces it (the new one goes to
the end, the rest keep their order).

Hash contribution (see get_hash_for):
┌──────────────────┬──────────┬───────────────────────────────┐
│ Kind             │ Tag      │ Payload                       │
├──────────────────┼──────────┼───────────────────────────────┤
│ OriginSpore      │ 0x01     │ 4-byte length + UTF-8         │
│ OriginMoment     │ 0x02     │ 16-byte big-endian moment     │
│ OriginSignature  │ (none)   │ nothing, contributes b""      │
│ LastUpdate       │ 0x04     │ 16-byte big-endian moment     │
└──────────────────┴──────────┴───────────────────────────────┘
"""

MOMENT_SIZE = 16  # u128
LENGTH_SIZE = 4
MAX_MOMENT = 2 ** (8 * MOMENT_SIZE)


def encode_text(text):
    """Length-prefixed UTF-8 (4-byte big-endian length)"""
    data = text.encode("utf-8")
    return len(data).to_bytes(LENGTH_SIZE, "big") + data


class Attribute:
    """
    Base class for attribute kinds. Two attributes are the same kind
    when they are instances of the same class, whatever their value.
    """

    tag = None

    def __init__(self, value):
        self.value = value

    def shallow_eq(self, other):
        """Compare kinds without checking values"""
        return _kind_of(self) is _kind_of(other)

    def hash_payload(self):
        raise NotImplementedError("Subclass must implement hash_payload()")

    def __eq__(self, other):
        if not isinstance(other, Attribute):
            return NotImplemented
        return type(self) is type(other) and self.value == other.value

    def __hash__(self):
        return hash((type(self).__name__, self.value))

    def __repr__(self):
        return f"{type(self).__name__}({self.value!r})"


class OriginSpore(Attribute):
    """Sporeprint of the creating Spore"""
    tag = 0x01

    def hash_payload(self):
        return encode_text(self.value)


class _MomentAttribute(Attribute):

    def __init__(self, value):
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Moment must be an int, got {type(value).__name__}")
        if not 0 <= value < MAX_MOMENT:
            raise ValueError(f"Moment must be in [0, 2**128), got {value}")
        super().__init__(value)

    def hash_payload(self):
        return self.value.to_bytes(MOMENT_SIZE, "big")


class OriginMoment(_MomentAttribute):
    """Creation moment, ns since UNIX_EPOCH"""
    tag = 0x02


class OriginSignature(Attribute):
    """Signature over the Mycelium hash"""
    tag = 0x03

    def __init__(self, value):
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"Signature must be bytes, got {type(value).__name__}")
        super().__init__(bytes(value))

    def hash_payload(self):
        return b""

    def __repr__(self):
        return f"OriginSignature({self.value.hex()[:16]}...)"


class LastUpdate(_MomentAttribute):
    """Most recent mutation moment, ns since UNIX_EPOCH"""
    tag = 0x04


ATTRIBUTE_KINDS = (OriginSpore, OriginMoment, OriginSignature, LastUpdate)


def _kind_of(attribute):
    if isinstance(attribute, type):
        return attribute
    return type(attribute)


def get_hash_for(attribute):
    """
    Bytes an attribute contributes to its Mycelium's hash.

    The signature is excluded so that a Mycelium hashes the same before
    and after it is signed.

    Args:
        attribute: Attribute instance

    Returns:
        bytes: tag byte + canonical payload, or b"" for OriginSignature
    """
    if isinstance(attribute, OriginSignature):
        return b""
    return bytes([attribute.tag]) + attribute.hash_payload()


class AttributeSet:
    """
    Ordered collection of attributes, at most one per kind.
    """

    def __init__(self, attributes=()):
        self._attributes = []
        for attribute in attributes:
            self.set_attr(attribute)

    def get_attrs(self):
        """
        All attributes, in order.

        Returns:
            tuple: read-only view of the attributes
        """
        return tuple(self._attributes)

    def get_attr(self, kind):
        """
        Returns the attribute of the requested kind if it exists.

        Args:
            kind: Attribute class, or an instance whose value is ignored

        Returns:
            Attribute or None
        """
        wanted = _kind_of(kind)
        for attr in self._attributes:
            if type(attr) is wanted:
                return attr
        return None

    def set_attr(self, attribute):
        """Insert attribute, replacing any attribute of the same kind"""
        if not isinstance(attribute, Attribute):
            raise TypeError(f"expected Attribute, got {type(attribute).__name__}")

        self._attributes = [a for a in self._attributes if not a.shallow_eq(attribute)]
        self._attributes.append(attribute)

    def remove_attr(self, attribute):
        """
        Remove attributes equal to the given one (kind and value).

        Returns:
            int: number of attributes removed
        """
        before = len(self._attributes)
        self._attributes = [a for a in self._attributes if a != attribute]
        return before - len(self._attributes)

    def get_origin(self):
        """
        Origin of the owner.

        Returns:
            tuple: (sporeprint or None, moment or None)
        """
        sporeprint, moment = None, None
        for attr in self._attributes:
            if isinstance(attr, OriginSpore):
                sporeprint = attr.value
            elif isinstance(attr, OriginMoment):
                moment = attr.value
        return sporeprint, moment

    def has_origin(self):
        """True when both OriginSpore and OriginMoment are present"""
        found_spore = found_moment = False
        for attr in self._attributes:
            if isinstance(attr, OriginSpore):
                found_spore = True
            elif isinstance(attr, OriginMoment):
                found_moment = True
            if found_spore and found_moment:
                return True
        return False

    def get_hash_for(self, attribute):
        return get_hash_for(attribute)

    def __iter__(self):
        return iter(tuple(self._attributes))

    def __len__(self):
        return len(self._attributes)

    def __repr__(self):
        return f"AttributeSet({self._attributes!r})"
