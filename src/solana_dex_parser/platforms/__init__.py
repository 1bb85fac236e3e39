"""
Platform registry.

Builds the process-wide dispatch table once at import time. The table is
frozen afterwards and shared read-only by every parse call.
"""

from solana_dex_parser.core.dispatch import DispatchTable
from solana_dex_parser.interfaces.core import DexFamily, InstructionDecoder

from .jupiter import JupiterPlatform
from .meteora import MeteoraPlatform
from .orca import OrcaPlatform
from .pumpfun import PumpFunPlatform
from .pumpswap import PumpSwapPlatform
from .raydium import RaydiumPlatform

PLATFORMS: tuple[InstructionDecoder, ...] = (
    JupiterPlatform(),
    RaydiumPlatform(),
    OrcaPlatform(),
    MeteoraPlatform(),
    PumpFunPlatform(),
    PumpSwapPlatform(),
)


def build_dispatch_table(platforms=PLATFORMS) -> DispatchTable:
    """Register every platform into a new table and freeze it."""
    table = DispatchTable()
    for platform in platforms:
        platform.register(table)
    return table.freeze()


DISPATCH_TABLE: DispatchTable = build_dispatch_table()

SUPPORTED_FAMILIES: frozenset[DexFamily] = frozenset(p.family for p in PLATFORMS)

__all__ = [
    "DISPATCH_TABLE",
    "PLATFORMS",
    "SUPPORTED_FAMILIES",
    "build_dispatch_table",
]
