#!/usr/bin/env python3
"""
Test Mycelium construction, hashing, signing/verification and add()
"""

import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mycelium import (
    Hypha, KeySpore, LastUpdate, ManualClock, Mycelium, OriginMissingError, OriginMoment,
    OriginSignature, OriginSpore, PublicSpore, SignatureInvalidError,
    SignatureMissingError, SignError, Spore, SporeError, TimingError,
)


def build_tree(spore, clock, others=None):
    """root -> (child -> grandchild), second_child; children by other Spores"""
    others = others or [KeySpore(), KeySpore(), KeySpore()]
    root = Mycelium(spore, clock=clock)
    child = Mycelium(others[0], clock=clock)
    grandchild = Mycelium(others[1], clock=clock)
    child.add(grandchild)
    root.add(child)
    root.add(Mycelium(others[2], clock=clock))
    return root, child, grandchild


def test_new_mycelium():
    """A new Mycelium has an origin, no signature, and no hyphae"""
    print("\n" + "="*60)
    print("Test: New Mycelium")
    print("="*60)

    spore = KeySpore()
    node = Mycelium(spore, clock=ManualClock(start=1000))
    print(f"✓ Created: {node!r}")

    assert node.has_origin()
    assert node.get_attr(OriginSignature) is None
    assert node.get_origin() == (spore.sporeprint(), 1000)
    assert node.get_attrs() == (OriginSpore(spore.sporeprint()), OriginMoment(1000))
    assert node.get_hyphae() == ()


def test_new_mycelium_uses_system_clock_by_default():
    node = Mycelium(KeySpore())
    assert node.get_origin()[1] > 0


def test_new_mycelium_before_epoch():
    with pytest.raises(TimingError):
        Mycelium(KeySpore(), clock=ManualClock(start=-5))


def test_hash_is_deterministic():
    spore = KeySpore()
    others = [KeySpore(), KeySpore(), KeySpore()]
    first, _, _ = build_tree(spore, ManualClock(start=1), others)
    second, _, _ = build_tree(spore, ManualClock(start=1), others)

    assert len(first.get_hash()) == 32
    assert first.get_hash() == second.get_hash()
    assert first.hash_hex() == first.get_hash().hex()


def test_hash_ignores_signature():
    spore = KeySpore()
    root, _, _ = build_tree(spore, ManualClock())
    before = root.get_hash()

    root.sign(spore)
    assert root.get_attr(OriginSignature) is not None
    assert root.get_hash() == before


def test_hash_follows_descendants():
    spore = KeySpore()
    root, _, grandchild = build_tree(spore, ManualClock())
    before = root.get_hash()

    grandchild.set_attr(LastUpdate(999999))
    assert root.get_hash() != before


def test_hash_of_reference_is_sporeprint():
    spore = KeySpore()
    clock = ManualClock()
    attrs = [OriginSpore(spore.sporeprint()), OriginMoment(1)]

    with_reference = Mycelium.from_attributes(attrs, [Hypha.reference("abc")], clock=clock)
    with_owned = Mycelium.from_attributes(
        attrs, [Mycelium.from_attributes([OriginSpore("abc")])], clock=clock)

    assert with_reference.get_hash() != with_owned.get_hash()


def test_known_hash():
    """Hash encoding is fixed: same tree, same digest, in any process"""
    child = Mycelium.from_attributes([OriginSpore("child"), OriginMoment(2)])
    root = Mycelium.from_attributes(
        [OriginSpore("root"), OriginMoment(1), LastUpdate(3)],
        [child, Hypha.reference("ref")],
    )

    assert child.hash_hex() == "dd032d7e7f6fde3d9c9f2dc7e594a99f4f19537cc540930ab97e0cffccfb13ba"
    assert root.hash_hex() == "186979f01a4b60d5deec5c7dc3457bf50a469aefa6fc1455d4e44508b49f20ca"

    root.set_attr(OriginSignature(b"\x00" * 64))
    assert root.hash_hex() == "186979f01a4b60d5deec5c7dc3457bf50a469aefa6fc1455d4e44508b49f20ca"


def test_reference_cannot_stand_in_for_attribute():
    """Moving LastUpdate bytes into a reference must not keep the hash"""
    spore = KeySpore()
    sporeprint = spore.sporeprint()
    signed = Mycelium.from_attributes(
        [OriginSpore(sporeprint), OriginMoment(1), LastUpdate(5)])
    signed.sign(spore)
    signature = signed.get_attr(OriginSignature)

    lookalike = "\x04" + (5).to_bytes(16, "big").decode("ascii")
    forged = Mycelium.from_attributes(
        [OriginSpore(sporeprint), OriginMoment(1), signature],
        [Hypha.reference(lookalike)],
    )

    assert forged.get_hash() != signed.get_hash()
    with pytest.raises(SignatureInvalidError):
        forged.verify(spore)


def test_sign_then_verify():
    """Round trip on an unmutated tree"""
    print("\n" + "="*60)
    print("Test: Sign and Verify")
    print("="*60)

    spore = KeySpore()
    root, _, _ = build_tree(spore, ManualClock())

    root.sign(spore)
    root.verify(spore)
    print(f"✓ Verified {root.hash_hex()[:16]}...")

    # Verification-only Spore resolved from the sporeprint alone
    root.verify(KeySpore.resolve(spore.sporeprint()))
    root.verify_origin(KeySpore.resolve)


def test_verify_after_mutation_fails():
    spore = KeySpore()
    clock = ManualClock()
    root, child, grandchild = build_tree(spore, clock)
    root.sign(spore)

    grandchild.add(Mycelium(spore, clock=clock))

    with pytest.raises(SignatureInvalidError):
        root.verify(spore)

    # Re-signing restores trust
    root.sign(spore)
    root.verify(spore)

    child.set_attr(LastUpdate(123))
    with pytest.raises(SignatureInvalidError):
        root.verify(spore)


def test_verify_without_signature():
    """Missing signature is reported as missing, never as invalid"""
    spore = KeySpore()
    node = Mycelium(spore, clock=ManualClock())

    with pytest.raises(SignatureMissingError):
        node.verify(spore)

    try:
        node.verify(spore)
    except SignatureInvalidError:
        pytest.fail("missing signature reported as invalid")
    except SignatureMissingError:
        pass


def test_verify_with_other_spore():
    spore = KeySpore()
    node = Mycelium(spore, clock=ManualClock())
    node.sign(spore)

    with pytest.raises(SignatureInvalidError):
        node.verify(KeySpore())


class UnreachableSpore(Spore):
    """Spore whose backend fails outright"""

    def sporeprint(self):
        return "unreachable"

    def verify(self, data, signature):
        raise SporeError("key service unreachable")


def test_capability_failure_is_not_an_invalid_signature():
    spore = KeySpore()
    node = Mycelium(spore, clock=ManualClock())
    node.sign(spore)

    with pytest.raises(SporeError) as excinfo:
        node.verify(UnreachableSpore())

    assert type(excinfo.value) is SporeError
    assert "key service unreachable" in str(excinfo.value)


def test_sign_with_public_spore_fails():
    spore = KeySpore()
    node = Mycelium(spore, clock=ManualClock())

    with pytest.raises(SignError):
        node.sign(PublicSpore.resolve(spore.sporeprint()))
    assert node.get_attr(OriginSignature) is None


def test_verify_origin_without_origin_spore():
    node = Mycelium.from_attributes([OriginMoment(1), OriginSignature(b"\x00" * 64)])
    with pytest.raises(OriginMissingError):
        node.verify_origin(KeySpore.resolve)


def test_add_appends_and_updates():
    spore = KeySpore()
    other = KeySpore()
    parent = Mycelium(spore, clock=ManualClock(start=1))
    child = Mycelium(other, clock=ManualClock(start=50))

    parent.add(child)

    assert parent.get_hyphae() == (Hypha.owned(child),)
    assert parent.get_attr(OriginSpore) == OriginSpore(spore.sporeprint())
    assert parent.get_attr(LastUpdate) == LastUpdate(2)

    parent.add(Mycelium(other, clock=ManualClock(start=60)))
    assert len(parent.get_hyphae()) == 2
    assert parent.get_hyphae()[0].node is child
    assert parent.get_attr(LastUpdate) == LastUpdate(3)


def test_add_removes_own_matching_origin_spore():
    """A parent stops claiming an origin shared with its new child"""
    print("\n" + "="*60)
    print("Test: add() drops shared OriginSpore")
    print("="*60)

    spore_x = KeySpore()
    parent = Mycelium(spore_x, clock=ManualClock(start=1))
    child = Mycelium(spore_x, clock=ManualClock(start=5))
    assert parent.get_attr(OriginSpore) == OriginSpore(spore_x.sporeprint())

    parent.add(child)

    assert parent.get_attr(OriginSpore) is None
    assert parent.get_attr(OriginMoment) == OriginMoment(1)
    assert not parent.has_origin()
    assert parent.get_hyphae()[-1].node is child
    print("✓ OriginSpore removed before appending")


def test_add_rejects_non_mycelium():
    parent = Mycelium(KeySpore(), clock=ManualClock())
    with pytest.raises(TypeError):
        parent.add(Hypha.reference("abc"))


def test_add_with_broken_clock():
    clock = ManualClock(start=1)
    parent = Mycelium(KeySpore(), clock=clock)
    clock.set(-1)

    with pytest.raises(TimingError):
        parent.add(Mycelium(KeySpore(), clock=ManualClock()))


def main():
    print("=" * 60)
    print("Mycelium Test")
    print("=" * 60)

    test_new_mycelium()
    test_new_mycelium_uses_system_clock_by_default()
    test_new_mycelium_before_epoch()
    test_hash_is_deterministic()
    test_hash_ignores_signature()
    test_hash_follows_descendants()
    test_hash_of_reference_is_sporeprint()
    test_known_hash()
    test_reference_cannot_stand_in_for_attribute()
    test_sign_then_verify()
    test_verify_after_mutation_fails()
    test_verify_without_signature()
    test_verify_with_other_spore()
    test_capability_failure_is_not_an_invalid_signature()
    test_sign_with_public_spore_fails()
    test_verify_origin_without_origin_spore()
    test_add_appends_and_updates()
    test_add_removes_own_matching_origin_spore()
    test_add_rejects_non_mycelium()
    test_add_with_broken_clock()

    print("\n✓ All mycelium tests passed!")


if __name__ == "__main__":
    main()
