"""
Core components of the MMR accumulator.

This package contains the hash primitives, the node tracker, the forest of
root trees and the witness engine, plus the accumulator that ties them
together.
"""

from .errors import (
    AccumulatorClosedError,
    AccumulatorError,
    AllocationFailureError,
    ElementNotFoundError,
    ErrorCode,
    InvalidArgumentError,
    MalformedTreeError,
    MalformedWitnessError,
    ProofTooDeepError,
    UnsupportedOperationError,
)
from .hashing import DIGEST_SIZE, MAX_PROOF_DEPTH, digests_equal, leaf_hash, parent_hash, short_hex
from .models import Node, RootInfo, Witness
from .tracker import NodeTracker
from .forest import Forest
from .witness import WitnessEngine
from .accumulator import Accumulator

__all__ = [
    'Accumulator', 'Forest', 'NodeTracker', 'WitnessEngine',
    'Node', 'RootInfo', 'Witness',
    'DIGEST_SIZE', 'MAX_PROOF_DEPTH', 'digests_equal', 'leaf_hash', 'parent_hash', 'short_hex',
    'AccumulatorError', 'AccumulatorClosedError', 'AllocationFailureError',
    'ElementNotFoundError', 'ErrorCode', 'InvalidArgumentError', 'MalformedTreeError',
    'MalformedWitnessError', 'ProofTooDeepError', 'UnsupportedOperationError',
]
