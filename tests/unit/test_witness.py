"""Unit tests for witness generation and verification."""

import hashlib
import logging

import pytest

from mmr_accumulator.core.errors import (
    ElementNotFoundError,
    MalformedTreeError,
    ProofTooDeepError,
)
from mmr_accumulator.core.forest import Forest
from mmr_accumulator.core.hashing import MAX_PROOF_DEPTH, leaf_hash, parent_hash
from mmr_accumulator.core.models import Node, Witness
from mmr_accumulator.core.tracker import NodeTracker
from mmr_accumulator.core.witness import WitnessEngine


@pytest.fixture
def forest() -> Forest:
    return Forest(NodeTracker())


@pytest.fixture
def engine(forest: Forest) -> WitnessEngine:
    return WitnessEngine(forest.tracker, forest)


def add_all(forest: Forest, *elements: bytes) -> None:
    for element in elements:
        forest.add(element)


def test_single_leaf_witness_is_empty(forest: Forest, engine: WitnessEngine) -> None:
    """Test that a lone leaf has a witness with no siblings."""
    forest.add(b"a")
    witness = engine.witness(b"a")
    assert witness.leaf_hash == leaf_hash(b"a")
    assert witness.siblings == []
    assert witness.path == 0
    assert engine.verify(witness)


def test_witness_for_right_child(forest: Forest, engine: WitnessEngine) -> None:
    """Test siblings and path bits for a right-hand leaf."""
    add_all(forest, b"a", b"b", b"c", b"d")
    witness = engine.witness(b"b")

    cd = parent_hash(leaf_hash(b"c"), leaf_hash(b"d"))
    assert witness.siblings == [leaf_hash(b"a"), cd]
    # "b" is a right child (bit 0 clear); a-b is a left child (bit 1 set)
    assert witness.path == 0b10
    assert engine.verify(witness)


def test_witness_for_left_child(forest: Forest, engine: WitnessEngine) -> None:
    """Test siblings and path bits for a left-hand leaf."""
    add_all(forest, b"a", b"b", b"c", b"d")
    witness = engine.witness(b"c")
    ab = parent_hash(leaf_hash(b"a"), leaf_hash(b"b"))
    assert witness.siblings == [leaf_hash(b"d"), ab]
    assert witness.path == 0b01


def test_witness_unknown_element(forest: Forest, engine: WitnessEngine) -> None:
    """Test that proving an unknown element raises."""
    forest.add(b"a")
    with pytest.raises(ElementNotFoundError):
        engine.witness(b"z")


def test_witness_is_cached_as_separate_copy(forest: Forest, engine: WitnessEngine) -> None:
    """Test that the cached witness is independent of the returned one."""
    add_all(forest, b"a", b"b")
    witness = engine.witness(b"a")
    cached = forest.tracker.cached_witness(leaf_hash(b"a"))
    assert cached == witness
    assert cached is not witness
    assert cached.siblings is not witness.siblings

    witness.siblings.append(leaf_hash(b"x"))
    assert len(forest.tracker.cached_witness(leaf_hash(b"a")).siblings) == 1


def test_fresh_witnesses_always_verify(forest: Forest, engine: WitnessEngine) -> None:
    """Test that a freshly generated witness verifies after every add."""
    elements = [f"item-{i}".encode() for i in range(40)]
    for count, element in enumerate(elements, start=1):
        forest.add(element)
        for seen in elements[:count]:
            assert engine.verify(engine.witness(seen))


def test_stale_witness_fails_after_merge(forest: Forest, engine: WitnessEngine) -> None:
    """Test that witnesses taken before a merge stop verifying."""
    forest.add(b"a")
    stale = engine.witness(b"a")
    forest.add(b"b")
    assert not engine.verify(stale)
    assert engine.verify(engine.witness(b"a"))

    depth_one = engine.witness(b"a")
    add_all(forest, b"c", b"d")
    assert not engine.verify(depth_one)
    assert engine.verify(engine.witness(b"a"))


def test_witness_survives_unrelated_adds(forest: Forest, engine: WitnessEngine) -> None:
    """Test that a witness stays valid while its root is untouched."""
    add_all(forest, b"a", b"b", b"c", b"d")
    witness = engine.witness(b"b")
    forest.add(b"e")
    assert forest.root_weights() == [4, 1]
    assert engine.verify(witness)


def test_intermediate_root_match_is_accepted(forest: Forest, engine: WitnessEngine) -> None:
    """Test that a root reached before the last sibling is accepted."""
    add_all(forest, b"a", b"b")
    padded = Witness(
        leaf_hash=leaf_hash(b"a"),
        siblings=[leaf_hash(b"b"), hashlib.sha256(b"padding").digest()],
        path=0b01,
    )
    assert engine.verify(padded)


def test_verify_does_not_mutate_state(forest: Forest, engine: WitnessEngine) -> None:
    """Test that verification leaves every node link unchanged."""
    add_all(forest, b"a", b"b", b"c")
    before = [(n.digest, n.parent, n.next) for n in forest.tracker]
    engine.verify(engine.witness(b"c"))
    assert [(n.digest, n.parent, n.next) for n in forest.tracker] == before


def test_tampering_breaks_verification(forest: Forest, engine: WitnessEngine) -> None:
    """Test that flipping any bit of a witness makes it fail."""
    add_all(forest, *[bytes([i]) * 4 for i in range(1, 9)])
    witness = engine.witness(bytes([3]) * 4)
    assert witness.depth == 3
    assert engine.verify(witness)

    for bit in range(256):
        flipped = bytearray(witness.leaf_hash)
        flipped[bit // 8] ^= 1 << (bit % 8)
        assert not engine.verify(witness.model_copy(update={"leaf_hash": bytes(flipped)}))

    for level in range(witness.depth):
        for bit in range(0, 256, 7):
            siblings = list(witness.siblings)
            flipped = bytearray(siblings[level])
            flipped[bit // 8] ^= 1 << (bit % 8)
            siblings[level] = bytes(flipped)
            assert not engine.verify(witness.model_copy(update={"siblings": siblings}))

    for bit in range(witness.depth + 2):
        assert not engine.verify(witness.model_copy(update={"path": witness.path ^ (1 << bit)}))


def test_oversized_witness_rejected_before_hashing(
    forest: Forest, engine: WitnessEngine, monkeypatch
) -> None:
    """Test that a witness deeper than the maximum is refused unhashed."""
    forest.add(b"a")

    def fail(*args):
        raise AssertionError("hashed a malformed witness")

    monkeypatch.setattr("mmr_accumulator.core.witness.parent_hash", fail)
    oversized = Witness(
        leaf_hash=leaf_hash(b"a"),
        siblings=[leaf_hash(b"a")] * (MAX_PROOF_DEPTH + 1),
        path=0,
    )
    assert not engine.verify(oversized)


def test_path_out_of_range_rejected(forest: Forest, engine: WitnessEngine) -> None:
    """Test that path bits beyond the sibling count are refused."""
    add_all(forest, b"a", b"b")
    witness = engine.witness(b"a")
    assert not engine.verify(witness.model_copy(update={"path": 1 << witness.depth}))
    assert not engine.verify(witness.model_copy(update={"path": -1}))


def test_unvalidated_field_types_rejected(forest: Forest, engine: WitnessEngine) -> None:
    """Test that copies with mutable or mistyped fields fail instead of raising."""
    add_all(forest, b"a", b"b")
    witness = engine.witness(b"a")
    assert not engine.verify(witness.model_copy(update={"leaf_hash": bytearray(witness.leaf_hash)}))
    assert not engine.verify(
        witness.model_copy(update={"siblings": [bytearray(s) for s in witness.siblings]})
    )
    assert not engine.verify(witness.model_copy(update={"siblings": tuple(witness.siblings)}))
    assert not engine.verify(witness.model_copy(update={"siblings": None}))
    assert not engine.verify(witness.model_copy(update={"path": "1"}))
    assert engine.verify(witness)


def test_verify_logs_forest_size(
    forest: Forest, engine: WitnessEngine, caplog
) -> None:
    """Test that a successful verification logs the number of leaves in the forest."""
    add_all(forest, b"a", b"b", b"c")
    witness = engine.witness(b"a")
    with caplog.at_level(logging.DEBUG, logger="mmr_accumulator.core.witness"):
        assert engine.verify(witness)
    assert "(3 leaves in forest)" in caplog.text


def test_corrupted_parent_link_is_fatal(forest: Forest, engine: WitnessEngine) -> None:
    """Test that a parent that disowns its child raises."""
    add_all(forest, b"a", b"b")
    tracker = forest.tracker
    leaf_b = tracker.lookup_by_digest(leaf_hash(b"b"))
    parent = tracker.get(leaf_b.parent)
    parent.right = parent.left

    with pytest.raises(MalformedTreeError):
        engine.witness(b"b")


def build_chain(tracker: NodeTracker, levels: int) -> None:
    """Hang a leaf for b"deep" below ``levels`` ancestors."""
    current = Node(digest=leaf_hash(b"deep"))
    tracker.insert(current)
    for level in range(levels):
        sibling = Node(digest=hashlib.sha256(b"sibling-%d" % level).digest(), weight=current.weight)
        tracker.insert(sibling)
        parent = Node(
            digest=parent_hash(current.digest, sibling.digest),
            weight=current.weight * 2,
            left=current.handle,
            right=sibling.handle,
        )
        tracker.insert(parent)
        current.parent = sibling.parent = parent.handle
        current = parent


def test_maximum_depth_witness(forest: Forest, engine: WitnessEngine) -> None:
    """Test a witness at exactly the maximum depth."""
    build_chain(forest.tracker, MAX_PROOF_DEPTH)
    witness = engine.witness(b"deep")
    assert witness.depth == MAX_PROOF_DEPTH
    assert witness.path == (1 << MAX_PROOF_DEPTH) - 1
    assert engine.verify(witness)


def test_too_deep_witness(forest: Forest, engine: WitnessEngine) -> None:
    """Test that ancestry deeper than the maximum raises."""
    build_chain(forest.tracker, MAX_PROOF_DEPTH + 1)
    with pytest.raises(ProofTooDeepError):
        engine.witness(b"deep")
