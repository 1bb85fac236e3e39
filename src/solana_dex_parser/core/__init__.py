"""Core data model, transaction view, binary readers and dispatch table."""

from solana_dex_parser.core.dispatch import DecoderEntry, DispatchTable, ProgramEntry
from solana_dex_parser.core.errors import (
    DecodeError,
    ErrorKind,
    InferenceAmbiguous,
    ParseError,
    StructuralError,
    UnexpectedEnd,
)
from solana_dex_parser.core.transaction import TransactionContext

__all__ = [
    "DecodeError",
    "DecoderEntry",
    "DispatchTable",
    "ErrorKind",
    "InferenceAmbiguous",
    "ParseError",
    "ProgramEntry",
    "StructuralError",
    "TransactionContext",
    "UnexpectedEnd",
]
