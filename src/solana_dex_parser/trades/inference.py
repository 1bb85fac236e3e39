"""
Transfer inference.

Reconstructs a swap leg from the token movements of an instruction's scope
when the program does not log amounts. The actor side of every SPL Token /
Token-2022 transfer in scope is netted per mint; exactly one outgoing and
one incoming mint make a leg. Transfers into known fee wallets are kept out
of the net and reported as the leg fee. Pre/post token balance snapshots of
the referenced accounts are used only when the transaction carries no inner
instruction metadata at all.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from solders.pubkey import Pubkey

from solana_dex_parser.core.errors import InferenceAmbiguous
from solana_dex_parser.core.layout import BinaryReader
from solana_dex_parser.core.models import FeeInfo, Fragment, InnerInstruction, Instruction
from solana_dex_parser.core.pubkeys import FEE_ACCOUNTS, SOL_DECIMALS, TOKEN_PROGRAMS, Tokens
from solana_dex_parser.core.transaction import TransactionContext
from solana_dex_parser.utils.logger import get_logger
from solana_dex_parser.utils.token_math import checked_u64

logger = get_logger(__name__)

# SPL Token instruction tags
TRANSFER = 3
TRANSFER_CHECKED = 12


@dataclass(frozen=True)
class TokenTransfer:
    """Decoded SPL Token transfer; accounts are transaction account indexes."""

    mint: Pubkey
    amount: int
    source: int
    destination: int
    authority: Optional[int]
    decimals: Optional[int] = None
    inner_index: Optional[int] = None


@dataclass(frozen=True)
class NetChange:
    mint: Pubkey
    amount: int
    decimals: Optional[int]


def decode_token_transfer(
    context: TransactionContext, ix: Instruction, inner_index: Optional[int] = None
) -> Optional[TokenTransfer]:
    """Decode ``Transfer`` / ``TransferChecked``; anything else yields None."""
    if context.find_program_id(ix) not in TOKEN_PROGRAMS or not ix.data:
        return None
    accounts = ix.account_key_indexes
    reader = BinaryReader(ix.data)
    tag = reader.read_u8()

    if tag == TRANSFER:
        if reader.remaining < 8 or len(accounts) < 3:
            return None
        amount = reader.read_u64()
        source, destination, authority = accounts[0], accounts[1], accounts[2]
        mint = context.mint_of(source)
        if mint is None:
            mint = context.mint_of(destination)
        decimals = None
    elif tag == TRANSFER_CHECKED:
        if reader.remaining < 9 or len(accounts) < 4:
            return None
        amount = reader.read_u64()
        decimals = reader.read_u8()
        source, destination, authority = accounts[0], accounts[2], accounts[3]
        mint = context.find_key(accounts[1])
    else:
        return None

    if mint is None:
        return None
    return TokenTransfer(
        mint=mint,
        amount=amount,
        source=source,
        destination=destination,
        authority=authority,
        decimals=decimals,
        inner_index=inner_index,
    )


def leg_scope(
    context: TransactionContext, group: Sequence[InnerInstruction], inner_index: Optional[int]
) -> List[InnerInstruction]:
    """Inner instructions executed on behalf of one leg.

    Outer-level legs own the whole inner set. A nested leg owns the
    instructions that follow it at a deeper stack height; without stack
    heights it owns the contiguous run of token-program instructions after it.
    """
    if inner_index is None:
        return list(group)

    position = next((i for i, item in enumerate(group) if item.inner_index == inner_index), None)
    if position is None:
        return []
    height = group[position].instruction.stack_height
    scope: List[InnerInstruction] = []
    for item in group[position + 1:]:
        if height is not None and item.instruction.stack_height is not None:
            if item.instruction.stack_height <= height:
                break
        elif context.find_program_id(item.instruction) not in TOKEN_PROGRAMS:
            break
        scope.append(item)
    return scope


class TransferInference:
    """Nets actor-side token movements of an instruction scope."""

    def __init__(self, context: TransactionContext):
        self.context = context

    def transfers(self, scope: Iterable[InnerInstruction]) -> List[TokenTransfer]:
        found = []
        for item in scope:
            transfer = decode_token_transfer(self.context, item.instruction, item.inner_index)
            if transfer is not None:
                found.append(transfer)
        return found

    def _decimals(self, mint: Pubkey, *account_indexes: int, hint: Optional[int] = None) -> Optional[int]:
        decimals = hint
        for index in account_indexes:
            account_decimals = self.context.account_decimals(index)
            if decimals is None:
                decimals = account_decimals
        if decimals is None:
            decimals = self.context.decimals_of(mint)
        return decimals

    def fee_recipient(self, transfer: TokenTransfer) -> Optional[Pubkey]:
        """Fee wallet receiving ``transfer``, if any."""
        destination = self.context.find_key(transfer.destination)
        if destination in FEE_ACCOUNTS:
            return destination
        owner = self.context.owner_of(transfer.destination)
        if owner in FEE_ACCOUNTS:
            return owner
        return None

    def _is_outgoing(self, actor: Pubkey, transfer: TokenTransfer) -> bool:
        context = self.context
        return (
            context.owner_of(transfer.source) == actor
            or (transfer.authority is not None and context.find_key(transfer.authority) == actor)
        )

    def fee_paid(self, actor: Pubkey, scope: Iterable[InnerInstruction]) -> Optional[FeeInfo]:
        """Actor transfers into fee wallets, summed in the mint of the first one."""
        fees = [
            t for t in self.transfers(scope)
            if self.fee_recipient(t) is not None and self._is_outgoing(actor, t)
        ]
        if not fees:
            return None
        first = fees[0]
        decimals = self._decimals(first.mint, first.source, hint=first.decimals)
        if decimals is None:
            return None
        return FeeInfo(
            mint=first.mint,
            amount=checked_u64(sum(t.amount for t in fees if t.mint == first.mint), "fee amount"),
            decimals=decimals,
            recipient=self.fee_recipient(first),
            fee_type="platform",
        )

    def _net_from_transfers(self, actor: Pubkey, transfers: List[TokenTransfer]) -> Dict[Pubkey, NetChange]:
        context = self.context
        net: Dict[Pubkey, int] = {}
        decimals: Dict[Pubkey, Optional[int]] = {}
        for t in transfers:
            if self.fee_recipient(t) is not None:
                continue
            outgoing = self._is_outgoing(actor, t)
            incoming = context.owner_of(t.destination) == actor
            if outgoing == incoming:
                continue
            net[t.mint] = net.get(t.mint, 0) + (t.amount if incoming else -t.amount)
            decimals[t.mint] = self._decimals(t.mint, t.source, t.destination, hint=t.decimals)
        return self._finish(net, decimals)

    def _net_from_snapshots(self, actor: Pubkey, account_indexes: Iterable[int]) -> Dict[Pubkey, NetChange]:
        context = self.context
        net: Dict[Pubkey, int] = {}
        decimals: Dict[Pubkey, Optional[int]] = {}
        for index in sorted(set(account_indexes)):
            balance = context.token_balance(index)
            if balance is None or balance.owner != actor:
                continue
            delta = context.token_delta(index)
            net[balance.mint] = net.get(balance.mint, 0) + delta
            decimals[balance.mint] = context.account_decimals(index)
        return self._finish(net, decimals)

    @staticmethod
    def _finish(net: Dict[Pubkey, int], decimals: Dict[Pubkey, Optional[int]]) -> Dict[Pubkey, NetChange]:
        return {
            mint: NetChange(mint=mint, amount=amount, decimals=decimals[mint])
            for mint, amount in net.items()
            if amount != 0
        }

    def _native_supplement(self, actor: Pubkey, net: Dict[Pubkey, NetChange]) -> None:
        """Add the fee payer's lamport change when only one token mint moved."""
        context = self.context
        if len(net) != 1 or actor != context.signer or Tokens.SOL in net:
            return
        change = context.native_balance_change(0)
        if change is None:
            return
        lamports = change.change + context.fee
        token_change = next(iter(net.values()))
        if lamports == 0 or (lamports > 0) == (token_change.amount > 0):
            return
        net[Tokens.SOL] = NetChange(mint=Tokens.SOL, amount=lamports, decimals=SOL_DECIMALS)

    def net_changes(
        self,
        actor: Pubkey,
        instruction: Instruction,
        scope: Sequence[InnerInstruction],
    ) -> Dict[Pubkey, NetChange]:
        """Per-mint actor delta over ``instruction`` and its scope.

        Balance snapshots are transaction wide, so they stand in for transfers
        only when inner instructions were not recorded. With inner instruction
        metadata present, a scope without transfers moved nothing.
        """
        transfers = self.transfers(scope)
        if transfers:
            net = self._net_from_transfers(actor, transfers)
        elif self.context.tx.inner_instructions is None:
            referenced = list(instruction.account_key_indexes)
            for item in scope:
                referenced.extend(item.instruction.account_key_indexes)
            net = self._net_from_snapshots(actor, referenced)
        else:
            net = {}
        self._native_supplement(actor, net)
        return net

    def resolve_swap(
        self,
        fragment: Fragment,
        instruction: Instruction,
        group: Sequence[InnerInstruction],
    ) -> Fragment:
        """Fill in mints and amounts of an unresolved swap fragment."""
        actor = fragment.actor or self.context.swap_signer
        if actor is None:
            raise InferenceAmbiguous("no actor for inference", net_mints=0)
        scope = leg_scope(self.context, group, fragment.inner_index)
        net = self.net_changes(actor, instruction, scope)

        spent = [change for change in net.values() if change.amount < 0]
        received = [change for change in net.values() if change.amount > 0]
        if len(net) != 2 or len(spent) != 1 or len(received) != 1:
            raise InferenceAmbiguous(
                f"{len(net)} net mints for {fragment.name}", net_mints=len(net)
            )
        source, target = spent[0], received[0]
        logger.debug(
            f"[INFERENCE] {fragment.family}.{fragment.name} at {fragment.outer_index}-"
            f"{fragment.inner_index}: {source.mint} -> {target.mint}"
        )
        return fragment.with_(
            actor=actor,
            input_mint=source.mint,
            input_amount=checked_u64(-source.amount, "input amount"),
            input_decimals=source.decimals,
            output_mint=target.mint,
            output_amount=checked_u64(target.amount, "output amount"),
            output_decimals=target.decimals,
            fee=self.fee_paid(actor, scope) or fragment.fee,
        )

    def resolve_liquidity(
        self,
        fragment: Fragment,
        instruction: Instruction,
        group: Sequence[InnerInstruction],
    ) -> Fragment:
        """Attach the actor's per-mint deltas to a liquidity fragment."""
        actor = fragment.actor or self.context.swap_signer
        if actor is None:
            return fragment
        scope = leg_scope(self.context, group, fragment.inner_index)
        net = self.net_changes(actor, instruction, scope)
        deltas = tuple((change.mint, change.amount) for change in net.values())
        return fragment.with_(actor=actor, deltas=deltas)
