"""
Merkle Mountain Range accumulator.

The accumulator bundles the forest, its node tracker and the witness engine
behind the public add / witness / verify operations. Recoverable failures are
reported as ``False`` or ``None``; a corrupted tree raises.
"""

import logging
from typing import List, Optional

from mmr_accumulator.core.errors import (
    AccumulatorClosedError,
    AllocationFailureError,
    ElementNotFoundError,
    InvalidArgumentError,
    ProofTooDeepError,
    UnsupportedOperationError,
)
from mmr_accumulator.core.forest import Forest
from mmr_accumulator.core.hashing import leaf_hash
from mmr_accumulator.core.models import RootInfo, Witness
from mmr_accumulator.core.tracker import NodeTracker
from mmr_accumulator.core.witness import WitnessEngine

logger = logging.getLogger(__name__)


class Accumulator:
    """
    An append-only set commitment built as a forest of perfect hash trees.

    Instances are independent of each other and are not thread-safe: callers
    must serialize ``add`` against every other call.
    """

    def __init__(self):
        """Create an empty accumulator."""
        self._tracker = NodeTracker()
        self._forest = Forest(self._tracker)
        self._engine = WitnessEngine(self._tracker, self._forest)
        self._closed = False

    def __enter__(self) -> "Accumulator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        self._ensure_open()
        return self._forest.leaf_count

    def __contains__(self, element: object) -> bool:
        self._ensure_open()
        try:
            digest = leaf_hash(element)  # type: ignore[arg-type]
        except InvalidArgumentError:
            return False
        return self._tracker.lookup_by_digest(digest, leaves_only=True) is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def leaf_count(self) -> int:
        return len(self)

    def _ensure_open(self) -> None:
        if self._closed:
            raise AccumulatorClosedError("Accumulator has been destroyed")

    def close(self) -> None:
        """Release every node, cached witness and index entry.

        The accumulator cannot be used afterwards.
        """
        if self._closed:
            return
        self._forest.reset()
        self._tracker.clear()
        self._closed = True
        logger.debug("Accumulator destroyed")

    destroy = close

    def add(self, element: bytes) -> bool:
        """Add an element.

        Returns:
            True on success. False if the element is empty or not bytes, or if
            memory ran out, in which case the accumulator is unchanged.
        """
        self._ensure_open()
        try:
            self._forest.add(element)
        except InvalidArgumentError as e:
            logger.warning("Rejected element: %s", e)
            return False
        except AllocationFailureError as e:
            logger.warning("Failed to add element: %s", e)
            return False
        return True

    def witness(self, element: bytes) -> Optional[Witness]:
        """Generate an inclusion proof for ``element``.

        Returns:
            The witness, or None if the element is invalid, was never added,
            or sits deeper than the maximum proof depth.
        """
        self._ensure_open()
        try:
            return self._engine.witness(element)
        except InvalidArgumentError as e:
            logger.warning("Rejected element: %s", e)
        except ElementNotFoundError as e:
            logger.info("%s", e)
        except ProofTooDeepError as e:
            logger.warning("%s", e)
        return None

    def verify(self, witness: Witness) -> bool:
        """Check that ``witness`` proves membership in the current state."""
        self._ensure_open()
        return self._engine.verify(witness)

    def remove(self, witness: Witness) -> bool:
        """Remove an element by its witness.

        Deletion is not supported.
        """
        self._ensure_open()
        raise UnsupportedOperationError("Removing elements is not supported")

    def cached_witness(self, element: bytes) -> Optional[Witness]:
        """Return the witness last generated for ``element``, if any."""
        self._ensure_open()
        try:
            digest = leaf_hash(element)
        except InvalidArgumentError as e:
            logger.warning("Rejected element: %s", e)
            return None
        return self._tracker.cached_witness(digest)

    def roots(self) -> List[RootInfo]:
        """List the current roots, largest weight first."""
        self._ensure_open()
        return [
            RootInfo(digest=node.digest, weight=node.weight)
            for node in self._forest.roots()
        ]

    @property
    def node_count(self) -> int:
        """Number of nodes created so far, leaves included."""
        self._ensure_open()
        return len(self._tracker)
