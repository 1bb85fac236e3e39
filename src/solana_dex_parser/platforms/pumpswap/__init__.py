"""
PumpSwap platform exports.

Outer ``buy`` / ``sell`` identify the pool and the trader; amounts and
fees come from the ``BuyEvent`` / ``SellEvent`` logged in the same
instruction.
"""

from solana_dex_parser.core.dispatch import DecoderEntry, DispatchTable
from solana_dex_parser.core.models import FragmentKind, FragmentSource
from solana_dex_parser.interfaces.core import DexFamily
from solana_dex_parser.platforms.amm import AmmProgram, TransferBasedPlatform

from .addresses import POOL_ACCOUNT, USER_ACCOUNT, PumpSwapAddresses, PumpSwapDiscriminators
from .event_parser import PumpSwapEventParser


class PumpSwapPlatform(TransferBasedPlatform):
    """Registers PumpSwap decoders."""

    PROGRAMS = (
        AmmProgram(
            program_id=PumpSwapAddresses.PROGRAM,
            name="Pumpswap",
            pool_position=POOL_ACCOUNT,
            actor_position=USER_ACCOUNT,
            swaps={
                "buy": PumpSwapDiscriminators.BUY,
                "sell": PumpSwapDiscriminators.SELL,
            },
        ),
    )

    def __init__(self):
        super().__init__()
        self.events = PumpSwapEventParser()

    @property
    def family(self) -> DexFamily:
        return DexFamily.PUMPSWAP

    def register(self, table: DispatchTable) -> None:
        super().register(table)
        program = PumpSwapAddresses.PROGRAM
        family = self.family.value
        table.register_inner(program, DecoderEntry(
            family, "BuyEvent", self.events.decode_buy_event,
            FragmentKind.SWAP, FragmentSource.EVENT, PumpSwapDiscriminators.BUY_EVENT,
        ))
        table.register_inner(program, DecoderEntry(
            family, "SellEvent", self.events.decode_sell_event,
            FragmentKind.SWAP, FragmentSource.EVENT, PumpSwapDiscriminators.SELL_EVENT,
        ))


__all__ = [
    "PumpSwapAddresses",
    "PumpSwapDiscriminators",
    "PumpSwapEventParser",
    "PumpSwapPlatform",
]
