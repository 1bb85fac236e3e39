"""
Input, intermediate and output data model.

Inputs mirror what an RPC ``getTransaction`` / Geyser update carries once it
has been mapped to raw values. Everything is indexed (account index,
outer/inner instruction index); nothing holds a back-reference.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Optional

import base58
from solders.pubkey import Pubkey

from solana_dex_parser.utils.token_math import to_ui_amount


# =============================================================================
# Transaction input
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """Compiled instruction: program index, raw data, account indexes."""
    program_id_index: int
    data: bytes
    account_key_indexes: tuple[int, ...] = ()
    stack_height: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "data", bytes(self.data))
        object.__setattr__(self, "account_key_indexes", tuple(self.account_key_indexes))


# Top-level instructions share the compiled shape
OuterInstruction = Instruction


@dataclass(frozen=True)
class InnerInstructionSet:
    """Inner instructions emitted while executing outer instruction ``outer_index``."""
    outer_index: int
    instructions: tuple[Instruction, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "instructions", tuple(self.instructions))


@dataclass(frozen=True)
class InnerInstruction:
    """Flattened inner instruction with its coordinates."""
    outer_index: int
    inner_index: int
    instruction: Instruction


@dataclass(frozen=True)
class TokenBalance:
    """Token account balance snapshot (pre or post execution)."""
    account_index: int
    mint: Pubkey
    amount: int
    decimals: int
    owner: Optional[Pubkey] = None


@dataclass(frozen=True)
class LoadedAddresses:
    """Accounts loaded from address lookup tables (writable first)."""
    writable: tuple[Pubkey, ...] = ()
    readonly: tuple[Pubkey, ...] = ()


@dataclass(frozen=True)
class TransactionMeta:
    fee: int = 0
    pre_balances: tuple[int, ...] = ()
    post_balances: tuple[int, ...] = ()
    pre_token_balances: tuple[TokenBalance, ...] = ()
    post_token_balances: tuple[TokenBalance, ...] = ()
    loaded_addresses: Optional[LoadedAddresses] = None
    compute_units: Optional[int] = None
    err: Optional[Any] = None


@dataclass(frozen=True)
class TransactionInput:
    """Immutable snapshot of one transaction."""
    slot: int
    account_keys: tuple[Pubkey, ...]
    instructions: tuple[Instruction, ...]
    signatures: tuple[bytes, ...] = ()
    inner_instructions: Optional[tuple[InnerInstructionSet, ...]] = None
    meta: Optional[TransactionMeta] = None
    block_time: Optional[int] = None
    version: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "account_keys", tuple(self.account_keys))
        object.__setattr__(self, "instructions", tuple(self.instructions))
        object.__setattr__(self, "signatures", tuple(bytes(s) for s in self.signatures))
        if self.inner_instructions is not None:
            object.__setattr__(self, "inner_instructions", tuple(self.inner_instructions))

    @property
    def signature(self) -> str:
        if not self.signatures:
            return ""
        return base58.b58encode(self.signatures[0]).decode()


# =============================================================================
# Intermediate fragments
# =============================================================================

class FragmentKind(Enum):
    SWAP = "swap"
    LIQUIDITY_ADD = "liquidity_add"
    LIQUIDITY_REMOVE = "liquidity_remove"
    OTHER = "other"


class FragmentSource(Enum):
    """Where a fragment's amounts come from."""
    ROUTE_EVENT = "route_event"   # aggregator self-logged per-leg event
    EVENT = "event"               # AMM self-logged event
    INSTRUCTION = "instruction"   # instruction only, amounts via transfer inference


class TradeType(Enum):
    BUY = "BUY"
    SELL = "SELL"


class TransactionStatus(Enum):
    UNKNOWN = "UNKNOWN"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


@dataclass(frozen=True)
class FeeInfo:
    mint: Pubkey
    amount: int
    decimals: int
    recipient: Optional[Pubkey] = None
    fee_type: Optional[str] = None


@dataclass(frozen=True)
class MemeEvent:
    """Token launch on a bonding-curve platform."""
    mint: Pubkey
    name: str
    symbol: str
    uri: str
    user: Optional[Pubkey] = None
    bonding_curve: Optional[Pubkey] = None
    creator: Optional[Pubkey] = None
    timestamp: Optional[int] = None
    protocol: str = ""

    def to_dict(self) -> dict:
        return {
            "mint": str(self.mint),
            "name": self.name,
            "symbol": self.symbol,
            "uri": self.uri,
            "user": str(self.user) if self.user else None,
            "bonding_curve": str(self.bonding_curve) if self.bonding_curve else None,
            "creator": str(self.creator) if self.creator else None,
            "timestamp": self.timestamp,
            "protocol": self.protocol,
        }


@dataclass(frozen=True)
class Fragment:
    """Decoded protocol record for one instruction.

    Swap fragments from ``FragmentSource.INSTRUCTION`` start unresolved
    (no mints/amounts) and are filled in by transfer inference.
    """
    kind: FragmentKind
    source: FragmentSource
    family: str
    program_id: Pubkey
    name: str
    outer_index: int
    inner_index: Optional[int] = None
    actor: Optional[Pubkey] = None
    pool: Optional[Pubkey] = None
    input_mint: Optional[Pubkey] = None
    input_amount: Optional[int] = None
    input_decimals: Optional[int] = None
    output_mint: Optional[Pubkey] = None
    output_amount: Optional[int] = None
    output_decimals: Optional[int] = None
    fee: Optional[FeeInfo] = None
    meme: Optional[MemeEvent] = None
    amm_program: Optional[Pubkey] = None
    deltas: tuple[tuple[Pubkey, int], ...] = ()

    @property
    def is_resolved(self) -> bool:
        return self.input_mint is not None and self.output_mint is not None

    @property
    def is_swap(self) -> bool:
        return self.kind is FragmentKind.SWAP

    @property
    def is_liquidity(self) -> bool:
        return self.kind in (FragmentKind.LIQUIDITY_ADD, FragmentKind.LIQUIDITY_REMOVE)

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.outer_index, -1 if self.inner_index is None else self.inner_index)

    def with_(self, **changes) -> "Fragment":
        return replace(self, **changes)


# =============================================================================
# Output
# =============================================================================

@dataclass(frozen=True)
class TokenAmount:
    mint: Pubkey
    amount: int
    decimals: int

    @property
    def ui_amount(self) -> float:
        return to_ui_amount(self.amount, self.decimals)

    def to_dict(self) -> dict:
        return {
            "mint": str(self.mint),
            "amount_raw": str(self.amount),
            "amount": self.ui_amount,
            "decimals": self.decimals,
        }


@dataclass(frozen=True)
class ParsedTrade:
    """One logical trade."""
    user: Pubkey
    trade_type: TradeType
    input_token: TokenAmount
    output_token: TokenAmount
    dex: str
    program_id: Pubkey
    amm: str
    pool: Optional[Pubkey]
    outer_index: int
    inner_range: Optional[tuple[int, int]]
    slot: int
    block_time: Optional[int]
    signature: str
    pools: tuple[Pubkey, ...] = ()
    amms: tuple[str, ...] = ()
    route: Optional[str] = None
    fee: Optional[FeeInfo] = None

    @property
    def idx(self) -> str:
        """``outer-inner`` coordinate of the first leg."""
        inner = self.inner_range[0] if self.inner_range else 0
        return f"{self.outer_index}-{inner}"

    def to_dict(self) -> dict:
        data = {
            "user": str(self.user),
            "type": self.trade_type.value,
            "input_token": self.input_token.to_dict(),
            "output_token": self.output_token.to_dict(),
            "dex": self.dex,
            "program_id": str(self.program_id),
            "amm": self.amm,
            "pool": str(self.pool) if self.pool else None,
            "pools": [str(p) for p in self.pools],
            "amms": list(self.amms),
            "route": self.route,
            "idx": self.idx,
            "inner_range": list(self.inner_range) if self.inner_range else None,
            "slot": self.slot,
            "block_time": self.block_time,
            "signature": self.signature,
        }
        if self.fee:
            data["fee"] = {
                "mint": str(self.fee.mint),
                "amount_raw": str(self.fee.amount),
                "decimals": self.fee.decimals,
                "recipient": str(self.fee.recipient) if self.fee.recipient else None,
                "type": self.fee.fee_type,
            }
        return data


@dataclass(frozen=True)
class PoolEvent:
    """Liquidity add/remove; reported apart from trades."""
    user: Optional[Pubkey]
    kind: FragmentKind
    dex: str
    program_id: Pubkey
    amm: str
    pool: Optional[Pubkey]
    outer_index: int
    inner_index: Optional[int]
    slot: int
    block_time: Optional[int]
    signature: str
    token_changes: tuple[tuple[Pubkey, int], ...] = ()

    def to_dict(self) -> dict:
        return {
            "user": str(self.user) if self.user else None,
            "type": self.kind.value,
            "dex": self.dex,
            "program_id": str(self.program_id),
            "amm": self.amm,
            "pool": str(self.pool) if self.pool else None,
            "idx": f"{self.outer_index}-{0 if self.inner_index is None else self.inner_index}",
            "slot": self.slot,
            "block_time": self.block_time,
            "signature": self.signature,
            "token_changes": {str(mint): str(change) for mint, change in self.token_changes},
        }


@dataclass(frozen=True)
class SkippedInstruction:
    outer_index: int
    inner_index: Optional[int]
    kind: str
    reason: str


@dataclass(frozen=True)
class BalanceChange:
    pre: int
    post: int
    decimals: int

    @property
    def change(self) -> int:
        return self.post - self.pre

    def to_dict(self) -> dict:
        return {
            "pre": str(self.pre),
            "post": str(self.post),
            "change": str(self.change),
            "decimals": self.decimals,
        }


@dataclass
class ParseResult:
    """Full parse output with diagnostics."""
    state: bool = True
    signature: str = ""
    slot: int = 0
    block_time: Optional[int] = None
    signer: Optional[Pubkey] = None
    fee: int = 0
    compute_units: int = 0
    tx_status: TransactionStatus = TransactionStatus.UNKNOWN
    trades: list[ParsedTrade] = field(default_factory=list)
    liquidities: list[PoolEvent] = field(default_factory=list)
    meme_events: list[MemeEvent] = field(default_factory=list)
    skipped: list[SkippedInstruction] = field(default_factory=list)
    sol_balance_change: Optional[BalanceChange] = None
    token_balance_change: dict[Pubkey, BalanceChange] = field(default_factory=dict)
    msg: Optional[str] = None

    def to_dict(self) -> dict:
        """JSON-ready view; raw amounts are strings to keep u64 precision."""
        return {
            "state": self.state,
            "signature": self.signature,
            "slot": self.slot,
            "block_time": self.block_time,
            "signer": str(self.signer) if self.signer else None,
            "fee": self.fee,
            "compute_units": self.compute_units,
            "tx_status": self.tx_status.value,
            "trades": [trade.to_dict() for trade in self.trades],
            "liquidities": [event.to_dict() for event in self.liquidities],
            "meme_events": [meme.to_dict() for meme in self.meme_events],
            "skipped": [asdict(skip) for skip in self.skipped],
            "sol_balance_change": (
                self.sol_balance_change.to_dict() if self.sol_balance_change else None
            ),
            "token_balance_change": {
                str(mint): change.to_dict() for mint, change in self.token_balance_change.items()
            },
            "msg": self.msg,
        }
