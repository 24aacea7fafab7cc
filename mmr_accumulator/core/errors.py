"""Exceptions raised by the MMR accumulator components."""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Machine-readable failure categories."""
    INVALID_ARGUMENT = "invalid_argument"
    ALLOCATION_FAILURE = "allocation_failure"
    NOT_FOUND = "not_found"
    PROOF_TOO_DEEP = "proof_too_deep"
    MALFORMED_TREE = "malformed_tree"
    MALFORMED_WITNESS = "malformed_witness"
    UNSUPPORTED = "unsupported"
    CLOSED = "closed"


class AccumulatorError(Exception):
    """Base class for all accumulator failures."""

    default_code = ErrorCode.INVALID_ARGUMENT

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.code = code or self.default_code


class InvalidArgumentError(AccumulatorError, ValueError):
    """Raised for empty or wrongly typed elements and digests."""
    default_code = ErrorCode.INVALID_ARGUMENT


class AllocationFailureError(AccumulatorError):
    """Raised when a node or the index cannot acquire memory."""
    default_code = ErrorCode.ALLOCATION_FAILURE


class ElementNotFoundError(AccumulatorError, LookupError):
    """Raised when a witness is requested for an element never added."""
    default_code = ErrorCode.NOT_FOUND


class ProofTooDeepError(AccumulatorError):
    """Raised when an ancestry walk exceeds the maximum proof depth."""
    default_code = ErrorCode.PROOF_TOO_DEEP


class MalformedTreeError(AccumulatorError):
    """A parent does not recognise its child.

    This signals corrupted internal state and is never converted into an
    ordinary failure result.
    """
    default_code = ErrorCode.MALFORMED_TREE


class MalformedWitnessError(InvalidArgumentError):
    """Raised when a witness has an impossible shape."""
    default_code = ErrorCode.MALFORMED_WITNESS


class UnsupportedOperationError(AccumulatorError, NotImplementedError):
    """Raised by operations reserved for future extension."""
    default_code = ErrorCode.UNSUPPORTED


class AccumulatorClosedError(AccumulatorError, RuntimeError):
    """Raised when an accumulator is used after it was destroyed."""
    default_code = ErrorCode.CLOSED
