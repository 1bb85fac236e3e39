"""
Trade aggregation.

Works on the fragments of one outer instruction group:

1. ``select_fragments`` drops records that describe the same movement twice:
   aggregator route events win over everything, otherwise a family's own
   events win over its instruction-level fragments.
2. ``prefer_inner_legs`` (after inference) drops the outer-level inferred
   swap when nested legs were resolved on their own.
3. ``chain_legs`` folds the ordered legs into trades: a leg joins the
   current chain when the actor matches and its input mint is the chain's
   output mint. Consecutive legs with identical mints (split routes) are
   summed into one step. A leg that would return to the chain's input mint
   starts a new chain.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from solders.pubkey import Pubkey

from solana_dex_parser.core.dispatch import DispatchTable
from solana_dex_parser.core.errors import DecodeError
from solana_dex_parser.core.models import (
    Fragment,
    FragmentSource,
    ParsedTrade,
    TokenAmount,
    TradeType,
)
from solana_dex_parser.core.pubkeys import STABLECOINS, Tokens
from solana_dex_parser.core.transaction import TransactionContext
from solana_dex_parser.interfaces.core import DexFamily
from solana_dex_parser.utils.token_math import checked_u64

# One step of a chain: parallel legs with identical mints
Step = List[Fragment]
Chain = List[Step]


def trade_type_for(input_mint: Pubkey, output_mint: Pubkey) -> TradeType:
    """Spending SOL or a stablecoin is a buy; everything else is a sell."""
    if input_mint == Tokens.SOL:
        return TradeType.BUY
    if output_mint == Tokens.SOL:
        return TradeType.SELL
    if input_mint in STABLECOINS:
        return TradeType.BUY
    return TradeType.SELL


def _carry_pools(kept: Sequence[Fragment], replaced: Sequence[Fragment]) -> List[Fragment]:
    """Give kept fragments the pool of the record they replace."""
    available = [f for f in replaced if f.pool is not None]
    result = []
    for fragment in kept:
        if fragment.pool is None:
            program = fragment.amm_program or fragment.program_id
            match = next((f for f in available if f.program_id == program), None)
            if match is not None:
                available.remove(match)
                fragment = fragment.with_(pool=match.pool)
        result.append(fragment)
    return result


def select_fragments(fragments: Iterable[Fragment]) -> List[Fragment]:
    """Drop swap fragments superseded by self-logged events."""
    fragments = list(fragments)
    swaps = [f for f in fragments if f.is_swap]
    others = [f for f in fragments if not f.is_swap]

    route_events = [f for f in swaps if f.source is FragmentSource.ROUTE_EVENT]
    if route_events:
        rest = [f for f in swaps if f.source is not FragmentSource.ROUTE_EVENT]
        kept = _carry_pools(route_events, rest)
    else:
        events = [f for f in swaps if f.source is FragmentSource.EVENT]
        event_families = {f.family for f in events}
        instructions = [f for f in swaps if f.source is FragmentSource.INSTRUCTION]
        replaced = [f for f in instructions if f.family in event_families]
        kept = _carry_pools(events, replaced)
        kept += [f for f in instructions if f.family not in event_families]

    return sorted(kept + others, key=lambda f: f.sort_key)


def prefer_inner_legs(swaps: Iterable[Fragment]) -> List[Fragment]:
    """Drop the outer-level inferred swap once nested legs are resolved."""
    swaps = list(swaps)
    if not any(f.inner_index is not None for f in swaps):
        return swaps
    return [
        f for f in swaps
        if f.inner_index is not None or f.source is not FragmentSource.INSTRUCTION
    ]


def _is_parallel(step: Step, leg: Fragment) -> bool:
    head = step[0]
    return (
        head.actor == leg.actor
        and head.input_mint == leg.input_mint
        and head.output_mint == leg.output_mint
    )


def _extends(chain: Chain, leg: Fragment) -> bool:
    first, last = chain[0][0], chain[-1][0]
    return (
        last.actor == leg.actor
        and last.output_mint == leg.input_mint
        and leg.output_mint != first.input_mint
    )


def chain_legs(legs: Iterable[Fragment], aggregate: bool = True) -> List[Chain]:
    """Fold ordered resolved legs into chains (one chain per trade)."""
    ordered = sorted(legs, key=lambda f: f.sort_key)
    if not aggregate:
        return [[[leg]] for leg in ordered]

    chains: List[Chain] = []
    for leg in ordered:
        if chains:
            chain = chains[-1]
            if _is_parallel(chain[-1], leg):
                chain[-1].append(leg)
                continue
            if _extends(chain, leg):
                chain.append([leg])
                continue
        chains.append([[leg]])
    return chains


class TradeAggregator:
    """Builds ``ParsedTrade`` records from chains of one outer instruction."""

    def __init__(self, context: TransactionContext, table: DispatchTable):
        self.context = context
        self.table = table

    def _amm_name(self, fragment: Fragment) -> str:
        if fragment.family == DexFamily.UNKNOWN.value:
            return DexFamily.UNKNOWN.value
        return self.table.program_name(fragment.amm_program or fragment.program_id)

    def _decimals(self, mint: Pubkey, decimals: Optional[int]) -> int:
        if decimals is None:
            decimals = self.context.decimals_of(mint)
        if decimals is None:
            raise DecodeError(f"no decimals known for mint {mint}")
        return decimals

    def _route_name(self, head: Fragment, outer_program: Optional[Pubkey]) -> Optional[str]:
        entry = self.table.program(outer_program) if outer_program is not None else None
        if entry is not None and "route" in entry.tags:
            return entry.name
        if head.source is FragmentSource.ROUTE_EVENT:
            return self.table.program_name(head.program_id)
        return None

    def build_trade(self, chain: Chain, outer_program: Optional[Pubkey] = None) -> ParsedTrade:
        first, last = chain[0], chain[-1]
        legs = [leg for step in chain for leg in step]
        head = legs[0]
        if head.actor is None:
            raise DecodeError("trade without actor")

        input_mint = first[0].input_mint
        output_mint = last[0].output_mint
        if input_mint is None or output_mint is None:
            raise DecodeError("unresolved leg reached aggregation")
        if input_mint == output_mint:
            raise DecodeError("trade input and output mint are identical")

        input_amount = checked_u64(sum(leg.input_amount or 0 for leg in first), "input amount")
        output_amount = checked_u64(sum(leg.output_amount or 0 for leg in last), "output amount")

        pools: List[Pubkey] = []
        amms: List[str] = []
        for leg in legs:
            if leg.pool is not None and leg.pool not in pools:
                pools.append(leg.pool)
            name = self._amm_name(leg)
            if name not in amms:
                amms.append(name)

        inner = [leg.inner_index for leg in legs if leg.inner_index is not None]
        tx = self.context.tx
        return ParsedTrade(
            user=head.actor,
            trade_type=trade_type_for(input_mint, output_mint),
            input_token=TokenAmount(
                mint=input_mint,
                amount=input_amount,
                decimals=self._decimals(input_mint, first[0].input_decimals),
            ),
            output_token=TokenAmount(
                mint=output_mint,
                amount=output_amount,
                decimals=self._decimals(output_mint, last[0].output_decimals),
            ),
            dex=head.family,
            program_id=head.program_id,
            amm=amms[0],
            pool=pools[0] if pools else None,
            outer_index=head.outer_index,
            inner_range=(min(inner), max(inner)) if inner else None,
            slot=tx.slot,
            block_time=tx.block_time,
            signature=tx.signature,
            pools=tuple(pools),
            amms=tuple(amms),
            route=self._route_name(head, outer_program),
            fee=next((leg.fee for leg in legs if leg.fee is not None), None),
        )
