"""
Solana DEX transaction parser.

Decodes swaps, liquidity events and token launches from confirmed Solana
transactions across Jupiter, Raydium, Orca, Meteora, pump.fun and PumpSwap,
with a transfer-based fallback for unrecognized programs.
"""

from solana_dex_parser.config import ParseConfig, load_config
from solana_dex_parser.core.errors import DecodeError, InferenceAmbiguous, ParseError, StructuralError
from solana_dex_parser.core.models import (
    BalanceChange,
    FeeInfo,
    InnerInstructionSet,
    Instruction,
    LoadedAddresses,
    MemeEvent,
    OuterInstruction,
    ParsedTrade,
    ParseResult,
    PoolEvent,
    SkippedInstruction,
    TokenAmount,
    TokenBalance,
    TradeType,
    TransactionInput,
    TransactionMeta,
    TransactionStatus,
)
from solana_dex_parser.dex_parser import DexParser, parse, parse_all
from solana_dex_parser.interfaces.core import DexFamily

__version__ = "0.1.0"

__all__ = [
    "BalanceChange",
    "DecodeError",
    "DexFamily",
    "DexParser",
    "FeeInfo",
    "InferenceAmbiguous",
    "InnerInstructionSet",
    "Instruction",
    "LoadedAddresses",
    "MemeEvent",
    "OuterInstruction",
    "ParseConfig",
    "ParseError",
    "ParseResult",
    "ParsedTrade",
    "PoolEvent",
    "SkippedInstruction",
    "StructuralError",
    "TokenAmount",
    "TokenBalance",
    "TradeType",
    "TransactionInput",
    "TransactionMeta",
    "TransactionStatus",
    "load_config",
    "parse",
    "parse_all",
]
