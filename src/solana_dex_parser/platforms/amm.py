"""
Shared decoding for transfer-based AMM families.

Swap instructions of these programs embed no mints and, for the purposes of
this parser, no trusted amounts: the instruction only identifies the program,
the pool and the trader. The decoder classifies the discriminator as swap or
liquidity management and emits an unresolved fragment; amounts are filled in
later by transfer inference.
"""

from dataclasses import dataclass, field
from typing import Optional

from solders.pubkey import Pubkey

from solana_dex_parser.core.dispatch import DecoderEntry, DispatchTable
from solana_dex_parser.core.models import Fragment, FragmentKind, FragmentSource
from solana_dex_parser.interfaces.core import DecodeRequest, InstructionDecoder
from solana_dex_parser.utils.discriminators import instruction_discriminator

# Pool account is only trusted once the instruction carries more than this many accounts
MIN_ACCOUNTS_FOR_POOL = 5


@dataclass(frozen=True)
class AmmProgram:
    """One deployment of a transfer-based family."""

    program_id: Pubkey
    name: str
    pool_position: Optional[int]
    swaps: dict[str, bytes] = field(default_factory=dict)
    liquidity: dict[str, tuple[bytes, FragmentKind]] = field(default_factory=dict)
    actor_position: Optional[int] = None
    tags: tuple[str, ...] = ("amm",)


def anchor_swaps(*names: str) -> dict[str, bytes]:
    return {name: instruction_discriminator(name) for name in names}


def anchor_liquidity(kind: FragmentKind, *names: str) -> dict[str, tuple[bytes, FragmentKind]]:
    return {name: (instruction_discriminator(name), kind) for name in names}


class TransferBasedPlatform(InstructionDecoder):
    """Registers the swap and liquidity discriminators of a family."""

    PROGRAMS: tuple[AmmProgram, ...] = ()

    def __init__(self):
        self._programs = {program.program_id: program for program in self.PROGRAMS}

    def register(self, table: DispatchTable) -> None:
        family = self.family.value
        for program in self.PROGRAMS:
            table.register_program(program.program_id, family, program.name, program.tags)
            for name, discriminator in program.swaps.items():
                table.register_outer(program.program_id, DecoderEntry(
                    family, name, self.decode_instruction,
                    FragmentKind.SWAP, FragmentSource.INSTRUCTION, discriminator,
                ))
            for name, (discriminator, kind) in program.liquidity.items():
                table.register_outer(program.program_id, DecoderEntry(
                    family, name, self.decode_instruction,
                    kind, FragmentSource.INSTRUCTION, discriminator,
                ))

    def pool_address(self, request: DecodeRequest) -> Optional[Pubkey]:
        program = self._programs.get(request.program_id)
        if program is None or program.pool_position is None:
            return None
        if request.account_count <= MIN_ACCOUNTS_FOR_POOL:
            return None
        return request.account(program.pool_position)

    def actor(self, request: DecodeRequest) -> Optional[Pubkey]:
        program = self._programs.get(request.program_id)
        if program is not None and program.actor_position is not None:
            if request.account_count > program.actor_position:
                return request.account(program.actor_position)
        return request.context.swap_signer

    def _fragment(self, request: DecodeRequest, entry: DecoderEntry) -> Fragment:
        return Fragment(
            kind=entry.kind,
            source=FragmentSource.INSTRUCTION,
            family=self.family.value,
            program_id=request.program_id,
            name=entry.name,
            outer_index=request.outer_index,
            inner_index=request.inner_index,
            actor=self.actor(request),
            pool=self.pool_address(request),
        )

    def decode_instruction(self, request: DecodeRequest, entry: DecoderEntry) -> list[Fragment]:
        """Unresolved swap or liquidity fragment, kind taken from the entry."""
        return [self._fragment(request, entry)]
