"""
Unknown-program fallback.

Outer instructions of programs missing from the dispatch table are treated
like a transfer-based swap: an unresolved fragment is emitted and transfer
inference decides whether it was one. Plumbing programs (system, token,
compute budget) are never candidates.
"""

from typing import Optional

from solders.pubkey import Pubkey

from solana_dex_parser.core.dispatch import DispatchTable
from solana_dex_parser.core.models import Fragment, FragmentKind, FragmentSource
from solana_dex_parser.core.pubkeys import SYSTEM_PROGRAMS
from solana_dex_parser.core.transaction import TransactionContext
from solana_dex_parser.interfaces.core import DexFamily

UNKNOWN_VENUE = DexFamily.UNKNOWN.value


def is_fallback_candidate(table: DispatchTable, program_id: Pubkey) -> bool:
    return program_id not in SYSTEM_PROGRAMS and not table.is_known_program(program_id)


def unknown_swap_fragment(
    context: TransactionContext, program_id: Pubkey, outer_index: int
) -> Optional[Fragment]:
    """Unresolved swap candidate for an unrecognized outer instruction."""
    actor = context.swap_signer
    if actor is None:
        return None
    return Fragment(
        kind=FragmentKind.SWAP,
        source=FragmentSource.INSTRUCTION,
        family=UNKNOWN_VENUE,
        program_id=program_id,
        name=UNKNOWN_VENUE,
        outer_index=outer_index,
        actor=actor,
    )
