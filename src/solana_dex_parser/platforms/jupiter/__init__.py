"""
Jupiter platform exports.

Route instructions embed no per-leg detail; each leg is reported by a
``SwapEvent``. Without events (older transactions) the route instruction
is resolved by transfer inference over its whole inner set.
"""

from solana_dex_parser.core.dispatch import DecoderEntry, DispatchTable
from solana_dex_parser.core.models import FragmentKind, FragmentSource
from solana_dex_parser.interfaces.core import DexFamily
from solana_dex_parser.platforms.amm import AmmProgram, TransferBasedPlatform, anchor_swaps

from .addresses import ORDER_PROGRAMS, ROUTE_INSTRUCTIONS, JupiterAddresses, JupiterDiscriminators
from .event_parser import JupiterEventParser


class JupiterPlatform(TransferBasedPlatform):
    """Registers the V6 aggregator and the order programs built on it."""

    PROGRAMS = (
        AmmProgram(
            program_id=JupiterAddresses.PROGRAM,
            name="Jupiter",
            pool_position=None,
            swaps=anchor_swaps(*ROUTE_INSTRUCTIONS),
            tags=("route",),
        ),
    ) + tuple(
        AmmProgram(program_id=program, name=name, pool_position=None, tags=("route",))
        for program, name in ORDER_PROGRAMS
    )

    def __init__(self):
        super().__init__()
        self.events = JupiterEventParser()

    @property
    def family(self) -> DexFamily:
        return DexFamily.JUPITER

    def register(self, table: DispatchTable) -> None:
        super().register(table)
        table.register_inner(JupiterAddresses.PROGRAM, DecoderEntry(
            self.family.value, "SwapEvent", self.events.decode_swap_event,
            FragmentKind.SWAP, FragmentSource.ROUTE_EVENT, JupiterDiscriminators.SWAP_EVENT,
        ))


__all__ = [
    "JupiterAddresses",
    "JupiterDiscriminators",
    "JupiterEventParser",
    "JupiterPlatform",
]
