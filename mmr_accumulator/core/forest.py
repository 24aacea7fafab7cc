"""
Root chain maintenance for the MMR forest.

Adding an element works like adding one to a binary counter: the new leaf is
carried through every root of equal weight, merging as it goes, and lands in
the first empty position.
"""

import logging
from typing import List, Optional

from mmr_accumulator.core.errors import AccumulatorError, AllocationFailureError
from mmr_accumulator.core.hashing import leaf_hash, parent_hash
from mmr_accumulator.core.models import Handle, Node
from mmr_accumulator.core.tracker import NodeTracker

logger = logging.getLogger(__name__)


class Forest:
    """The chain of current roots.

    The chain is linked from the smallest root (the head, where carries
    start) to the largest; ``roots()`` reports it largest first.
    """

    def __init__(self, tracker: NodeTracker):
        self.tracker = tracker
        self.head: Optional[Handle] = None
        self.leaf_count: int = 0

    def add(self, element: bytes) -> Handle:
        """Add an element and return the handle of the new head root.

        New nodes are staged in the tracker first and linked into the forest
        only once every merge has succeeded; on failure the staged nodes are
        discarded and the forest is left as it was.

        Raises:
            InvalidArgumentError: If ``element`` is empty or not bytes.
            AllocationFailureError: If a node cannot be registered.
        """
        digest = leaf_hash(element)

        staged: List[Handle] = []
        # (existing root, carried node, merged node) for every merge step
        merges = []
        try:
            carried = self.tracker.get(self._stage(Node(digest=digest), staged))
            cursor = self.head
            while cursor is not None:
                existing = self.tracker.get(cursor)
                if existing.weight != carried.weight:
                    break
                merged = Node(
                    digest=parent_hash(existing.digest, carried.digest),
                    weight=existing.weight + carried.weight,
                    left=existing.handle,
                    right=carried.handle,
                )
                self._stage(merged, staged)
                merges.append((existing, carried, merged))
                carried = merged
                cursor = existing.next
        except (AccumulatorError, MemoryError) as e:
            for handle in reversed(staged):
                self.tracker.discard(handle)
            logger.warning("Addition rolled back after staging %d node(s)", len(staged))
            if isinstance(e, MemoryError):
                raise AllocationFailureError(f"Cannot create node: {e}") from e
            raise

        # Publish: nothing below can fail.
        for existing, child, merged in merges:
            existing.parent = merged.handle
            existing.next = None
            child.parent = merged.handle
            child.next = None
        carried.next = cursor
        self.head = carried.handle
        self.leaf_count += 1

        logger.debug(
            "Added leaf %s with %d merge(s); head weight %d",
            digest[:4].hex(), len(merges), carried.weight,
        )
        return carried.handle

    def _stage(self, node: Node, staged: List[Handle]) -> Handle:
        handle = self.tracker.insert(node)
        staged.append(handle)
        return handle

    def chain(self) -> List[Node]:
        """Return the current roots in chain order, smallest first."""
        roots = []
        cursor = self.head
        while cursor is not None:
            node = self.tracker.get(cursor)
            roots.append(node)
            cursor = node.next
        return roots

    def roots(self) -> List[Node]:
        """Return the current roots, largest weight first."""
        return list(reversed(self.chain()))

    def root_weights(self) -> List[int]:
        return [node.weight for node in self.roots()]

    def reset(self) -> None:
        self.head = None
        self.leaf_count = 0
