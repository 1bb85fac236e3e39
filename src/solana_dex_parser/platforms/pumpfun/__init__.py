"""
pump.fun platform exports.

Trades are read from the ``TradeEvent`` the program logs through a
self-CPI; the outer ``buy`` / ``sell`` instruction contributes the bonding
curve account. Launches produce a meme event.
"""

from solana_dex_parser.core.dispatch import DecoderEntry, DispatchTable
from solana_dex_parser.core.models import FragmentKind, FragmentSource
from solana_dex_parser.interfaces.core import DexFamily, InstructionDecoder

from .addresses import PumpFunAddresses, PumpFunDiscriminators
from .event_parser import PumpFunEventParser
from .instruction_parser import PumpFunInstructionParser


class PumpFunPlatform(InstructionDecoder):
    """Registers pump.fun decoders."""

    def __init__(self):
        self.events = PumpFunEventParser()
        self.instructions = PumpFunInstructionParser()

    @property
    def family(self) -> DexFamily:
        return DexFamily.PUMPFUN

    def register(self, table: DispatchTable) -> None:
        program = PumpFunAddresses.PROGRAM
        family = self.family.value
        table.register_program(program, family, "Pumpfun", ("amm",))

        table.register_outer(program, DecoderEntry(
            family, "buy", self.instructions.decode_trade,
            FragmentKind.SWAP, FragmentSource.INSTRUCTION, PumpFunDiscriminators.BUY, 7,
        ))
        table.register_outer(program, DecoderEntry(
            family, "sell", self.instructions.decode_trade,
            FragmentKind.SWAP, FragmentSource.INSTRUCTION, PumpFunDiscriminators.SELL, 7,
        ))
        table.register_outer(program, DecoderEntry(
            family, "create", self.instructions.decode_create,
            FragmentKind.OTHER, FragmentSource.INSTRUCTION, PumpFunDiscriminators.CREATE, 8,
        ))
        table.register_inner(program, DecoderEntry(
            family, "TradeEvent", self.events.decode_trade_event,
            FragmentKind.SWAP, FragmentSource.EVENT, PumpFunDiscriminators.TRADE_EVENT,
        ))
        table.register_inner(program, DecoderEntry(
            family, "CreateEvent", self.events.decode_create_event,
            FragmentKind.OTHER, FragmentSource.EVENT, PumpFunDiscriminators.CREATE_EVENT,
        ))


__all__ = [
    "PumpFunAddresses",
    "PumpFunDiscriminators",
    "PumpFunEventParser",
    "PumpFunInstructionParser",
    "PumpFunPlatform",
]
