"""
Node tracker for the MMR accumulator.

The tracker is the arena that owns every node the forest ever creates. Nodes
are addressed by integer handles and indexed by digest, so a witness can be
built straight from an element's leaf without walking the forest.
"""

import logging
from typing import Dict, Iterator, List, Optional

from mmr_accumulator.core.errors import (
    AllocationFailureError,
    ElementNotFoundError,
    InvalidArgumentError,
)
from mmr_accumulator.core.models import Handle, Node, Witness

logger = logging.getLogger(__name__)


class NodeTracker:
    """
    Arena and digest index for forest nodes.

    Nodes are never removed while the accumulator lives: a node that stops
    being a root stays addressable so its leaves can still be proven. Several
    nodes may share a digest (the same element added twice); each digest maps
    to a chain of handles, most recent first.
    """

    def __init__(self):
        self._nodes: List[Node] = []
        self._by_digest: Dict[bytes, List[Handle]] = {}
        self._witnesses: Dict[Handle, Witness] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, digest: object) -> bool:
        return digest in self._by_digest

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def insert(self, node: Node) -> Handle:
        """Register a newly created node and return its handle.

        Inserting the same node object twice returns the handle it already
        has.

        Raises:
            AllocationFailureError: If the arena or the index cannot grow.
        """
        if node.handle is not None:
            if node.handle < len(self._nodes) and self._nodes[node.handle] is node:
                return node.handle
            raise InvalidArgumentError("Node already belongs to another tracker")

        handle = len(self._nodes)
        try:
            self._nodes.append(node)
            try:
                self._by_digest.setdefault(node.digest, []).insert(0, handle)
            except MemoryError:
                self._nodes.pop()
                raise
        except MemoryError as e:
            raise AllocationFailureError(f"Cannot register node: {e}") from e

        node.handle = handle
        return handle

    def discard(self, handle: Handle) -> None:
        """Unregister the most recently inserted node.

        Used to roll back nodes staged by an addition that did not complete.
        """
        if handle != len(self._nodes) - 1:
            raise InvalidArgumentError("Only the newest node can be discarded")

        node = self._nodes.pop()
        chain = self._by_digest.get(node.digest, [])
        if handle in chain:
            chain.remove(handle)
        if not chain:
            self._by_digest.pop(node.digest, None)
        self._witnesses.pop(handle, None)
        node.handle = None

    def get(self, handle: Handle) -> Node:
        """Resolve a handle to its node."""
        return self._nodes[handle]

    def lookup_by_digest(self, digest: bytes, leaves_only: bool = False) -> Optional[Node]:
        """Find the most recently registered node with ``digest``."""
        for handle in self._by_digest.get(digest, ()):
            node = self._nodes[handle]
            if not leaves_only or node.is_leaf:
                return node
        return None

    def is_current_root(self, digest: bytes) -> bool:
        """Whether some node with ``digest`` currently has no parent."""
        return any(
            self._nodes[handle].parent is None
            for handle in self._by_digest.get(digest, ())
        )

    def cache_witness(self, digest: bytes, witness: Witness) -> None:
        """Replace the cached witness of the node with ``digest``."""
        node = self.lookup_by_digest(digest, leaves_only=True)
        if node is None:
            raise ElementNotFoundError(f"No node with digest {digest.hex()}")
        self._witnesses[node.handle] = witness

    def cached_witness(self, digest: bytes) -> Optional[Witness]:
        """Return the last witness computed for ``digest``.

        The cached value is not refreshed when the node's tree is merged, so
        it may no longer verify.
        """
        node = self.lookup_by_digest(digest, leaves_only=True)
        if node is None:
            return None
        return self._witnesses.get(node.handle)

    def clear(self) -> None:
        """Release every node, index entry and cached witness."""
        for node in self._nodes:
            node.handle = None
        self._nodes.clear()
        self._by_digest.clear()
        self._witnesses.clear()
        logger.debug("Node tracker cleared")
