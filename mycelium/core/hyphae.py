"""
Hyphae - Children of a Mycelium

Each Hypha is one of two kinds:
- OWNED      a fully materialized child Mycelium
- REFERENCE  only the Sporeprint of a child that was collapsed by prune()

A reference does not own, and cannot rebuild, the subtree it stands for.
"""


class HyphaKind:
    OWNED = 'owned'
    REFERENCE = 'reference'


class Hypha:
    """
    Tagged union over an owned Mycelium or a Sporeprint reference.
    Build with Hypha.owned() / Hypha.reference().
    """

    __slots__ = ('kind', 'node', 'sporeprint')

    def __init__(self, kind, node=None, sporeprint=None):
        if kind == HyphaKind.OWNED:
            if node is None:
                raise ValueError("Owned hypha requires a node")
        elif kind == HyphaKind.REFERENCE:
            if sporeprint is None:
                raise ValueError("Reference hypha requires a sporeprint")
        else:
            raise ValueError(f"Unknown hypha kind: {kind!r}")

        self.kind = kind
        self.node = node
        self.sporeprint = sporeprint

    @staticmethod
    def owned(node):
        return Hypha(HyphaKind.OWNED, node=node)

    @staticmethod
    def reference(sporeprint):
        return Hypha(HyphaKind.REFERENCE, sporeprint=sporeprint)

    def is_owned(self):
        return self.kind == HyphaKind.OWNED

    def is_reference(self):
        return self.kind == HyphaKind.REFERENCE

    def origin_sporeprint(self):
        """
        Sporeprint this hypha answers to: the stored one for a reference,
        the child's OriginSpore for an owned node (None if it has none).
        """
        if self.kind == HyphaKind.REFERENCE:
            return self.sporeprint
        return self.node.get_origin()[0]

    def __eq__(self, other):
        if not isinstance(other, Hypha):
            return NotImplemented
        return (self.kind == other.kind and self.node is other.node
                and self.sporeprint == other.sporeprint)

    def __hash__(self):
        return hash((self.kind, id(self.node), self.sporeprint))

    def __repr__(self):
        if self.kind == HyphaKind.REFERENCE:
            return f"Hypha.reference({self.sporeprint[:24]}...)"
        return f"Hypha.owned({self.node!r})"
