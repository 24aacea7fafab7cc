"""
Inclusion proof generation and verification.
"""

import logging

from mmr_accumulator.core.errors import (
    ElementNotFoundError,
    MalformedTreeError,
    MalformedWitnessError,
    ProofTooDeepError,
)
from mmr_accumulator.core.forest import Forest
from mmr_accumulator.core.hashing import MAX_PROOF_DEPTH, leaf_hash, parent_hash
from mmr_accumulator.core.models import Witness
from mmr_accumulator.core.tracker import NodeTracker

logger = logging.getLogger(__name__)

# Path bit for a sibling that sits to the right of the running hash.
SIBLING_RIGHT = 1
SIBLING_LEFT = 0


class WitnessEngine:
    """Builds witnesses from the node graph and checks them against the roots."""

    def __init__(self, tracker: NodeTracker, forest: Forest):
        self.tracker = tracker
        self.forest = forest

    def witness(self, element: bytes) -> Witness:
        """
        Generate an inclusion proof for an element.

        Walks from the element's leaf up to its root, collecting the sibling
        digest at every level.

        Args:
            element: The raw element bytes that were added.

        Returns:
            A witness owned by the caller. A separate copy is cached in the
            tracker, replacing any earlier one for the same leaf.

        Raises:
            InvalidArgumentError: If ``element`` is empty or not bytes.
            ElementNotFoundError: If the element was never added.
            ProofTooDeepError: If the leaf sits deeper than the maximum depth.
            MalformedTreeError: If a parent does not list the node as a child.
        """
        digest = leaf_hash(element)
        node = self.tracker.lookup_by_digest(digest, leaves_only=True)
        if node is None:
            raise ElementNotFoundError(f"Element with leaf hash {digest.hex()} not found")

        siblings = []
        path = 0
        depth = 0
        while node.parent is not None:
            if depth >= MAX_PROOF_DEPTH:
                raise ProofTooDeepError(
                    f"Proof exceeds the maximum depth of {MAX_PROOF_DEPTH}"
                )

            parent = self.tracker.get(node.parent)
            if parent.left == node.handle:
                sibling = self.tracker.get(parent.right)
                path |= SIBLING_RIGHT << depth
            elif parent.right == node.handle:
                sibling = self.tracker.get(parent.left)
            else:
                raise MalformedTreeError(
                    f"Node {node.handle} is not a child of its parent {parent.handle}"
                )

            siblings.append(sibling.digest)
            depth += 1
            node = parent

        witness = Witness(leaf_hash=digest, siblings=siblings, path=path)
        self.tracker.cache_witness(digest, witness.model_copy(deep=True))

        logger.debug("Generated witness for %s at depth %d", digest[:4].hex(), depth)
        return witness

    def verify(self, witness: Witness) -> bool:
        """
        Check that a witness leads to a current root.

        The running hash is checked against the roots after every fold, so a
        match at an intermediate level is accepted as well as one at the end
        of the path.

        Returns:
            True if the witness proves membership, False otherwise. Malformed
            witnesses are rejected before any hashing.
        """
        try:
            self._check_shape(witness)
        except MalformedWitnessError as e:
            logger.debug("Rejected witness: %s", e)
            return False

        current = witness.leaf_hash
        if not witness.siblings:
            return self._matches_root(current, 0)

        for i, sibling in enumerate(witness.siblings):
            if (witness.path >> i) & 1 == SIBLING_RIGHT:
                current = parent_hash(current, sibling)
            else:
                current = parent_hash(sibling, current)

            if self._matches_root(current, i + 1):
                return True

        return self._matches_root(current, len(witness.siblings))

    def _matches_root(self, digest: bytes, level: int) -> bool:
        if not self.tracker.is_current_root(digest):
            return False
        logger.debug(
            "Witness matched a root at level %d (%d leaves in forest)",
            level, self.forest.leaf_count,
        )
        return True

    @staticmethod
    def _check_shape(witness: Witness) -> None:
        if not isinstance(witness, Witness):
            raise MalformedWitnessError(
                f"Expected a Witness, got {type(witness).__name__}"
            )
        if not isinstance(witness.siblings, list):
            raise MalformedWitnessError("Witness has no sibling list")
        if len(witness.siblings) > MAX_PROOF_DEPTH:
            raise MalformedWitnessError(
                f"Witness has {len(witness.siblings)} siblings, "
                f"maximum is {MAX_PROOF_DEPTH}"
            )
        if not witness.is_well_formed():
            raise MalformedWitnessError("Witness path or digests out of range")
