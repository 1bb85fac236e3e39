"""
Parse errors.

Every error raised while decoding a single instruction is contained by the
orchestrator: the instruction contributes zero trades and the rest of the
transaction parses normally.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Category reported in diagnostics for a skipped instruction"""
    STRUCTURAL = "structural"
    DECODE = "decode"
    AMBIGUOUS = "ambiguous"


class ParseError(Exception):
    """Base class for per-instruction parse failures"""
    kind: ErrorKind = ErrorKind.DECODE


class StructuralError(ParseError):
    """Input violates a structural invariant (bad account or instruction index)."""
    kind = ErrorKind.STRUCTURAL


class DecodeError(ParseError):
    """Discriminator matched but the payload could not be decoded."""
    kind = ErrorKind.DECODE


class UnexpectedEnd(DecodeError):
    """A read needed more bytes than remain in the buffer."""

    def __init__(self, requested: int, offset: int, length: int):
        self.requested = requested
        self.offset = offset
        self.length = length
        super().__init__(
            f"unexpected end: tried to read {requested} bytes at offset {offset} "
            f"in buffer of length {length}"
        )


class InferenceAmbiguous(ParseError):
    """Transfer inference found no usable input/output pair."""
    kind = ErrorKind.AMBIGUOUS

    def __init__(self, message: str, net_mints: Optional[int] = None):
        self.net_mints = net_mints
        super().__init__(message)
