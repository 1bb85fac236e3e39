"""
Parse orchestrator.

Walks the outer instructions of a transaction in order, dispatches each one
and its inner instructions to the platform decoders (or the unknown-program
fallback), resolves instruction-only fragments through transfer inference,
aggregates the legs of every outer instruction and assembles the result.

Every failure caused by the input is contained at the instruction that
raised it: the instruction contributes nothing and is listed in
``ParseResult.skipped``. Only programming errors propagate.
"""

from typing import Dict, List, Optional, Sequence

from solders.pubkey import Pubkey

from solana_dex_parser.config import ParseConfig
from solana_dex_parser.core.dispatch import DecoderEntry, DispatchTable
from solana_dex_parser.core.errors import ParseError, StructuralError
from solana_dex_parser.core.models import (
    Fragment,
    FragmentSource,
    InnerInstruction,
    Instruction,
    MemeEvent,
    ParsedTrade,
    ParseResult,
    PoolEvent,
    SkippedInstruction,
    TransactionInput,
)
from solana_dex_parser.core.transaction import TransactionContext
from solana_dex_parser.interfaces.core import DecodeRequest
from solana_dex_parser.platforms import DISPATCH_TABLE
from solana_dex_parser.trades.aggregator import (
    TradeAggregator,
    chain_legs,
    prefer_inner_legs,
    select_fragments,
)
from solana_dex_parser.trades.fallback import is_fallback_candidate, unknown_swap_fragment
from solana_dex_parser.trades.inference import TransferInference
from solana_dex_parser.utils.logger import get_logger, signature_context

logger = get_logger(__name__)


def _trade_order(trade: ParsedTrade) -> tuple[int, int]:
    return (trade.outer_index, trade.inner_range[0] if trade.inner_range else -1)


class _ParseRun:
    """State of one parse call; discarded when the call returns."""

    def __init__(self, table: DispatchTable, tx: TransactionInput, config: ParseConfig):
        self.table = table
        self.tx = tx
        self.config = config
        self.context = TransactionContext(tx)
        self.inference = TransferInference(self.context)
        self.aggregator = TradeAggregator(self.context, table)
        self.result = ParseResult(
            signature=tx.signature,
            slot=tx.slot,
            block_time=tx.block_time,
            signer=self.context.signer,
            fee=self.context.fee,
            compute_units=self.context.compute_units,
            tx_status=self.context.tx_status,
        )
        self._memes: Dict[Pubkey, tuple[FragmentSource, MemeEvent]] = {}

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def skip(self, outer_index: int, inner_index: Optional[int], error: ParseError) -> None:
        self.result.skipped.append(SkippedInstruction(
            outer_index=outer_index,
            inner_index=inner_index,
            kind=error.kind.value,
            reason=str(error),
        ))
        logger.debug(
            f"[DEX_PARSER] Skipped {outer_index}-{'' if inner_index is None else inner_index} "
            f"({error.kind.value}): {error}"
        )

    # ------------------------------------------------------------------
    # Inner instruction correlation
    # ------------------------------------------------------------------

    def group_inner(self) -> Dict[int, List[InnerInstruction]]:
        groups: Dict[int, List[InnerInstruction]] = {}
        outer_count = len(self.tx.instructions)
        for inner_set in self.tx.inner_instructions or ():
            if not 0 <= inner_set.outer_index < outer_count:
                self.skip(inner_set.outer_index, None, StructuralError(
                    f"inner instructions reference missing outer instruction {inner_set.outer_index}"
                ))
                continue
            items = groups.setdefault(inner_set.outer_index, [])
            for ix in inner_set.instructions:
                items.append(InnerInstruction(inner_set.outer_index, len(items), ix))
        return groups

    def touches_requested_program(self, groups: Dict[int, List[InnerInstruction]]) -> bool:
        requested = self.config.program_ids or frozenset()
        instructions = list(self.tx.instructions)
        for items in groups.values():
            instructions.extend(item.instruction for item in items)
        return any(self.context.find_program_id(ix) in requested for ix in instructions)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _decode(self, entry: DecoderEntry, request: DecodeRequest) -> List[Fragment]:
        if not self.config.is_family_enabled(entry.family):
            return []
        if request.account_count < entry.min_accounts:
            raise StructuralError(
                f"{entry.family}.{entry.name} expects {entry.min_accounts} accounts, "
                f"got {request.account_count}"
            )
        return entry.decoder(request, entry)

    def collect(self, outer_index: int, ix: Instruction, group: Sequence[InnerInstruction]) -> List[Fragment]:
        context = self.context
        fragments: List[Fragment] = []

        program_id = context.program_id(ix)
        if self.config.is_program_allowed(program_id):
            entry = self.table.lookup_outer(program_id, ix.data)
            if entry is not None:
                request = DecodeRequest(context, ix, program_id, outer_index)
                try:
                    fragments.extend(self._decode(entry, request))
                except ParseError as e:
                    self.skip(outer_index, None, e)
            elif self.config.try_unknown_dex and is_fallback_candidate(self.table, program_id):
                fragment = unknown_swap_fragment(context, program_id, outer_index)
                if fragment is not None:
                    fragments.append(fragment)

        for item in group:
            try:
                context.validate(item.instruction)
            except StructuralError as e:
                self.skip(outer_index, item.inner_index, e)
                continue
            inner_program = context.program_id(item.instruction)
            if not self.config.is_program_allowed(inner_program):
                continue
            entry = self.table.lookup_inner(inner_program, item.instruction.data)
            if entry is None:
                continue
            request = DecodeRequest(context, item.instruction, inner_program, outer_index, item.inner_index)
            try:
                fragments.extend(self._decode(entry, request))
            except ParseError as e:
                self.skip(outer_index, item.inner_index, e)
        return fragments

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _record_meme(self, fragment: Fragment) -> None:
        meme = fragment.meme
        current = self._memes.get(meme.mint)
        if current is None or (
            current[0] is not FragmentSource.EVENT and fragment.source is FragmentSource.EVENT
        ):
            self._memes[meme.mint] = (fragment.source, meme)

    def _pool_event(self, fragment: Fragment) -> PoolEvent:
        return PoolEvent(
            user=fragment.actor,
            kind=fragment.kind,
            dex=fragment.family,
            program_id=fragment.program_id,
            amm=self.table.program_name(fragment.program_id),
            pool=fragment.pool,
            outer_index=fragment.outer_index,
            inner_index=fragment.inner_index,
            slot=self.tx.slot,
            block_time=self.tx.block_time,
            signature=self.result.signature,
            token_changes=fragment.deltas,
        )

    def assemble(
        self,
        outer_index: int,
        ix: Instruction,
        group: Sequence[InnerInstruction],
        fragments: List[Fragment],
    ) -> None:
        by_inner = {item.inner_index: item.instruction for item in group}
        legs: List[Fragment] = []

        for fragment in select_fragments(fragments):
            source_ix = ix if fragment.inner_index is None else by_inner[fragment.inner_index]
            try:
                if fragment.meme is not None:
                    self._record_meme(fragment)
                if fragment.is_swap:
                    if not fragment.is_resolved:
                        fragment = self.inference.resolve_swap(fragment, source_ix, group)
                    legs.append(fragment)
                elif fragment.is_liquidity:
                    fragment = self.inference.resolve_liquidity(fragment, source_ix, group)
                    self.result.liquidities.append(self._pool_event(fragment))
            except ParseError as e:
                self.skip(outer_index, fragment.inner_index, e)

        outer_program = self.context.find_program_id(ix)
        for chain in chain_legs(prefer_inner_legs(legs), self.config.aggregate_trades):
            try:
                self.result.trades.append(self.aggregator.build_trade(chain, outer_program))
            except ParseError as e:
                self.skip(outer_index, chain[0][0].inner_index, e)

    def run(self) -> ParseResult:
        result = self.result
        groups = self.group_inner()

        if self.config.program_ids is not None and not self.touches_requested_program(groups):
            result.state = False
            result.msg = "transaction does not invoke any requested program"
            return result

        for outer_index, ix in enumerate(self.tx.instructions):
            group = groups.get(outer_index, [])
            try:
                self.context.validate(ix)
            except StructuralError as e:
                self.skip(outer_index, None, e)
                continue
            fragments = self.collect(outer_index, ix, group)
            self.assemble(outer_index, ix, group, fragments)

        result.trades.sort(key=_trade_order)
        result.meme_events = [meme for _, meme in self._memes.values()]
        result.sol_balance_change = self.context.native_balance_change(0)
        if result.signer is not None:
            result.token_balance_change = self.context.token_balance_changes(result.signer)
        return result


class DexParser:
    """Decodes DEX trades, liquidity events and launches from transactions."""

    def __init__(self, table: Optional[DispatchTable] = None):
        self.table = DISPATCH_TABLE if table is None else table

    def parse_all(self, tx: TransactionInput, config: Optional[ParseConfig] = None) -> ParseResult:
        """Full result: trades, liquidity events, launches and skip diagnostics."""
        config = config if config is not None else ParseConfig()
        with signature_context(tx.signature):
            result = _ParseRun(self.table, tx, config).run()
        if result.trades or result.liquidities:
            logger.debug(
                f"[DEX_PARSER] {len(result.trades)} trades, "
                f"{len(result.liquidities)} liquidity events, {len(result.skipped)} skipped"
            )
        return result

    def parse_trades(self, tx: TransactionInput, config: Optional[ParseConfig] = None) -> List[ParsedTrade]:
        return self.parse_all(tx, config).trades

    def parse_liquidity(self, tx: TransactionInput, config: Optional[ParseConfig] = None) -> List[PoolEvent]:
        return self.parse_all(tx, config).liquidities

    def classify(self, tx: TransactionInput) -> Dict[Pubkey, List[tuple[int, Optional[int]]]]:
        """Instruction coordinates per invoked program.

        Works without execution metadata (e.g. transactions read from shreds):
        unresolvable program indexes are left out.
        """
        context = TransactionContext(tx)
        classified: Dict[Pubkey, List[tuple[int, Optional[int]]]] = {}
        for outer_index, ix in enumerate(tx.instructions):
            program_id = context.find_program_id(ix)
            if program_id is not None:
                classified.setdefault(program_id, []).append((outer_index, None))
        for inner_set in tx.inner_instructions or ():
            for inner_index, ix in enumerate(inner_set.instructions):
                program_id = context.find_program_id(ix)
                if program_id is not None:
                    classified.setdefault(program_id, []).append((inner_set.outer_index, inner_index))
        return classified

    def known_programs(self, tx: TransactionInput) -> List[str]:
        """Names of registered programs invoked by ``tx``."""
        return sorted({
            self.table.program_name(program_id)
            for program_id in self.classify(tx)
            if self.table.is_known_program(program_id)
        })


_default_parser = DexParser()


def parse(transaction: TransactionInput, config: Optional[ParseConfig] = None) -> List[ParsedTrade]:
    """Decode the trades of one transaction."""
    return _default_parser.parse_trades(transaction, config)


def parse_all(transaction: TransactionInput, config: Optional[ParseConfig] = None) -> ParseResult:
    """Decode everything, with per-instruction skip diagnostics."""
    return _default_parser.parse_all(transaction, config)
