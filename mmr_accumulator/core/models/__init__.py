"""Data models shared by the forest, the node tracker and the witness engine."""

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBytes, field_serializer, field_validator

from mmr_accumulator.core.hashing import DIGEST_SIZE, MAX_PROOF_DEPTH

# Arena handle of a node owned by the tracker.
Handle = int


@dataclass
class Node:
    """A node in the MMR forest.

    Links are handles into the tracker's arena rather than object references,
    so merges never need to transfer ownership of a node.
    """
    digest: bytes
    weight: int = 1
    parent: Optional[Handle] = None
    left: Optional[Handle] = None
    right: Optional[Handle] = None
    # Next root in the chain; only meaningful while the node is a root.
    next: Optional[Handle] = None
    handle: Optional[Handle] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    @property
    def is_root(self) -> bool:
        return self.parent is None


class Witness(BaseModel):
    """Inclusion proof for one element.

    ``siblings`` run from the leaf's sibling up to the sibling just below the
    root. Bit ``i`` of ``path`` is 1 when the sibling at level ``i`` sits to
    the right of the running hash, 0 when it sits to the left.
    """
    model_config = ConfigDict(validate_assignment=True)

    leaf_hash: StrictBytes
    siblings: List[StrictBytes] = Field(default_factory=list)
    path: int = Field(0, ge=0)

    @field_validator("leaf_hash")
    @classmethod
    def validate_leaf_hash(cls, v: bytes) -> bytes:
        if len(v) != DIGEST_SIZE:
            raise ValueError(f"leaf_hash must be {DIGEST_SIZE} bytes")
        return v

    @field_validator("siblings")
    @classmethod
    def validate_siblings(cls, v: List[bytes]) -> List[bytes]:
        for i, sibling in enumerate(v):
            if len(sibling) != DIGEST_SIZE:
                raise ValueError(f"sibling {i} must be {DIGEST_SIZE} bytes")
        return v

    @field_serializer("leaf_hash", when_used="json")
    def serialize_leaf_hash(self, v: bytes) -> str:
        return v.hex()

    @field_serializer("siblings", when_used="json")
    def serialize_siblings(self, v: List[bytes]) -> List[str]:
        return [s.hex() for s in v]

    @property
    def depth(self) -> int:
        return len(self.siblings)

    def is_well_formed(self) -> bool:
        """Check the types, depth and path bounds a verifier requires.

        Copies made with ``model_copy`` or ``model_construct`` skip validation,
        so nothing about the field types is assumed here.
        """
        if not isinstance(self.leaf_hash, bytes) or not isinstance(self.path, int):
            return False
        if not isinstance(self.siblings, list):
            return False
        if self.depth > MAX_PROOF_DEPTH:
            return False
        if self.path < 0 or self.path >= (1 << self.depth):
            return False
        if len(self.leaf_hash) != DIGEST_SIZE:
            return False
        return all(isinstance(s, bytes) and len(s) == DIGEST_SIZE for s in self.siblings)


class RootInfo(BaseModel):
    """A current root of the forest, as reported to display code."""
    model_config = ConfigDict(frozen=True)

    digest: StrictBytes
    weight: int

    @field_serializer("digest", when_used="json")
    def serialize_digest(self, v: bytes) -> str:
        return v.hex()


__all__ = ["Handle", "Node", "Witness", "RootInfo"]
