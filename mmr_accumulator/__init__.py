"""
MMR Accumulator - append-only set commitments with inclusion proofs.

This package provides a Merkle Mountain Range accumulator: elements are added
to a forest of perfect binary SHA-256 trees, and membership is proven with
compact witnesses checked against the forest's current roots.
"""

from importlib.metadata import version

__version__ = "0.1.0"

try:
    __version__ = version("mmr-accumulator")
except Exception:
    pass

from mmr_accumulator.core import (
    Accumulator,
    AccumulatorError,
    ElementNotFoundError,
    InvalidArgumentError,
    MalformedTreeError,
    RootInfo,
    UnsupportedOperationError,
    Witness,
    leaf_hash,
    parent_hash,
)

__all__ = [
    "Accumulator",
    "Witness",
    "RootInfo",
    "leaf_hash",
    "parent_hash",
    # Errors
    "AccumulatorError",
    "ElementNotFoundError",
    "InvalidArgumentError",
    "MalformedTreeError",
    "UnsupportedOperationError",
]
