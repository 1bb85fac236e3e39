"""
Core interfaces shared by every platform decoder.

A decoder receives a ``DecodeRequest`` (one instruction plus the read-only
transaction view) and returns zero or more ``Fragment`` records.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from solders.pubkey import Pubkey

from solana_dex_parser.core.errors import StructuralError
from solana_dex_parser.core.models import Fragment, Instruction

if TYPE_CHECKING:
    from solana_dex_parser.core.transaction import TransactionContext


class DexFamily(Enum):
    """Supported program families plus the fallback catch-all."""

    JUPITER = "jupiter"
    RAYDIUM = "raydium"
    ORCA = "orca"
    METEORA = "meteora"
    PUMPFUN = "pumpfun"
    PUMPSWAP = "pumpswap"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: str) -> "DexFamily":
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown DEX family: {name}") from None


@dataclass(frozen=True)
class DecodeRequest:
    """Everything a decoder may look at for one instruction."""

    context: "TransactionContext"
    instruction: Instruction
    program_id: Pubkey
    outer_index: int
    inner_index: Optional[int] = None

    @property
    def data(self) -> bytes:
        return self.instruction.data

    @property
    def account_count(self) -> int:
        return len(self.instruction.account_key_indexes)

    def account(self, position: int) -> Pubkey:
        """Account at ``position`` in the instruction's account list."""
        indexes = self.instruction.account_key_indexes
        if not 0 <= position < len(indexes):
            raise StructuralError(
                f"instruction has {len(indexes)} accounts, position {position} requested"
            )
        return self.context.get_key(indexes[position])

    def account_index(self, position: int) -> int:
        indexes = self.instruction.account_key_indexes
        if not 0 <= position < len(indexes):
            raise StructuralError(
                f"instruction has {len(indexes)} accounts, position {position} requested"
            )
        return indexes[position]


class InstructionDecoder(ABC):
    """Per-family decoder for instructions and self-logged events."""

    @property
    @abstractmethod
    def family(self) -> DexFamily:
        """Family this decoder serves."""
        pass

    @abstractmethod
    def register(self, table) -> None:
        """Register program ids and discriminators in a dispatch table."""
        pass
