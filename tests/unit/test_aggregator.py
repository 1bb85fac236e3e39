"""Tests for fragment selection and trade aggregation"""
import pytest
from solders.pubkey import Pubkey

from solana_dex_parser.core.errors import DecodeError
from solana_dex_parser.core.models import Fragment, FragmentKind, FragmentSource, TradeType
from solana_dex_parser.core.pubkeys import Tokens
from solana_dex_parser.core.transaction import TransactionContext
from solana_dex_parser.platforms import DISPATCH_TABLE
from solana_dex_parser.platforms.jupiter.addresses import JupiterAddresses
from solana_dex_parser.platforms.raydium.addresses import RaydiumAddresses
from solana_dex_parser.trades.aggregator import (
    TradeAggregator,
    chain_legs,
    prefer_inner_legs,
    select_fragments,
    trade_type_for,
)

USER = Pubkey.new_unique()
MINT_A = Pubkey.new_unique()
MINT_B = Pubkey.new_unique()
MINT_C = Pubkey.new_unique()
RAYDIUM = RaydiumAddresses.AMM_V4_PROGRAM


def leg(input_mint, output_mint, input_amount=100, output_amount=50, inner_index=0,
        source=FragmentSource.EVENT, family="raydium", program_id=RAYDIUM, actor=USER, **kwargs):
    return Fragment(
        kind=FragmentKind.SWAP,
        source=source,
        family=family,
        program_id=program_id,
        name="swap",
        outer_index=0,
        inner_index=inner_index,
        actor=actor,
        input_mint=input_mint,
        input_amount=input_amount,
        input_decimals=6,
        output_mint=output_mint,
        output_amount=output_amount,
        output_decimals=6,
        **kwargs,
    )


def unresolved(inner_index=None, family="raydium", program_id=RAYDIUM, pool=None):
    return Fragment(
        kind=FragmentKind.SWAP,
        source=FragmentSource.INSTRUCTION,
        family=family,
        program_id=program_id,
        name="swap",
        outer_index=0,
        inner_index=inner_index,
        actor=USER,
        pool=pool,
    )


@pytest.mark.parametrize("input_mint,output_mint,expected", [
    (Tokens.SOL, MINT_A, TradeType.BUY),
    (MINT_A, Tokens.SOL, TradeType.SELL),
    (Tokens.USDC, MINT_A, TradeType.BUY),
    (MINT_A, Tokens.USDT, TradeType.SELL),
    (MINT_A, MINT_B, TradeType.SELL),
    (Tokens.SOL, Tokens.USDC, TradeType.BUY),
])
def test_trade_type(input_mint, output_mint, expected):
    assert trade_type_for(input_mint, output_mint) is expected


def test_route_events_supersede_everything():
    pool = Pubkey.new_unique()
    fragments = [
        unresolved(None, family="jupiter", program_id=JupiterAddresses.PROGRAM),
        unresolved(0, pool=pool),
        leg(MINT_A, MINT_B, inner_index=1, source=FragmentSource.ROUTE_EVENT, family="jupiter",
            program_id=JupiterAddresses.PROGRAM, amm_program=RAYDIUM),
    ]

    selected = select_fragments(fragments)

    assert len(selected) == 1
    assert selected[0].source is FragmentSource.ROUTE_EVENT
    assert selected[0].pool == pool


def test_family_event_replaces_its_instruction_only():
    other = Pubkey.new_unique()
    fragments = [
        unresolved(None, family="pumpfun", program_id=other, pool=Pubkey.new_unique()),
        leg(Tokens.SOL, MINT_A, inner_index=0, family="pumpfun", program_id=other),
        unresolved(1),
    ]

    selected = select_fragments(fragments)

    assert [(f.family, f.source) for f in selected] == [
        ("pumpfun", FragmentSource.EVENT),
        ("raydium", FragmentSource.INSTRUCTION),
    ]
    assert selected[0].pool is not None


def test_non_swap_fragments_pass_through():
    liquidity = unresolved(None).with_(kind=FragmentKind.LIQUIDITY_ADD)
    assert select_fragments([liquidity]) == [liquidity]


def test_outer_inferred_swap_dropped_when_inner_legs_exist():
    outer = leg(MINT_A, MINT_C, inner_index=None, source=FragmentSource.INSTRUCTION)
    inner = leg(MINT_A, MINT_B, inner_index=0, source=FragmentSource.INSTRUCTION)

    assert prefer_inner_legs([outer, inner]) == [inner]
    assert prefer_inner_legs([outer]) == [outer]


def test_chain_a_b_c():
    chains = chain_legs([leg(MINT_A, MINT_B, inner_index=0), leg(MINT_B, MINT_C, inner_index=3)])
    assert len(chains) == 1
    assert [step[0].output_mint for step in chains[0]] == [MINT_B, MINT_C]


def test_split_route_is_one_step():
    chains = chain_legs([
        leg(MINT_A, MINT_B, 60, 30, inner_index=0),
        leg(MINT_A, MINT_B, 40, 20, inner_index=2),
        leg(MINT_B, MINT_C, 50, 7, inner_index=4),
    ])
    assert len(chains) == 1
    assert len(chains[0][0]) == 2


def test_cycle_starts_new_chain():
    chains = chain_legs([leg(MINT_A, MINT_B, inner_index=0), leg(MINT_B, MINT_A, inner_index=1)])
    assert len(chains) == 2


def test_unrelated_legs_stay_separate():
    chains = chain_legs([
        leg(MINT_A, MINT_B, inner_index=0),
        leg(MINT_C, Tokens.SOL, inner_index=1),
        leg(Tokens.SOL, MINT_C, inner_index=2, actor=Pubkey.new_unique()),
    ])
    assert len(chains) == 3


def test_no_aggregation_keeps_legs():
    chains = chain_legs([leg(MINT_B, MINT_C, inner_index=3), leg(MINT_A, MINT_B, inner_index=0)],
                        aggregate=False)
    assert [c[0][0].inner_index for c in chains] == [0, 3]


def test_build_trade_sums_parallel_legs(builder):
    aggregator = TradeAggregator(TransactionContext(builder.build()), DISPATCH_TABLE)
    chain = chain_legs([
        leg(MINT_A, MINT_B, 60, 30, inner_index=0, pool=Pubkey.new_unique()),
        leg(MINT_A, MINT_B, 40, 20, inner_index=2),
        leg(MINT_B, MINT_C, 50, 7, inner_index=4),
    ])[0]

    trade = aggregator.build_trade(chain)

    assert trade.input_token.amount == 100
    assert trade.output_token.amount == 7
    assert trade.inner_range == (0, 4)
    assert trade.amms == ("RaydiumV4",)
    assert len(trade.pools) == 1
    assert trade.route is None
    assert trade.signature == builder.build().signature


def test_build_trade_rejects_same_mint(builder):
    aggregator = TradeAggregator(TransactionContext(builder.build()), DISPATCH_TABLE)
    with pytest.raises(DecodeError):
        aggregator.build_trade([[leg(MINT_A, MINT_A)]])


def test_build_trade_rejects_u64_overflow(builder):
    aggregator = TradeAggregator(TransactionContext(builder.build()), DISPATCH_TABLE)
    big = 2**64 - 1
    chain = [[leg(MINT_A, MINT_B, big, 1, inner_index=0), leg(MINT_A, MINT_B, big, 1, inner_index=1)]]
    with pytest.raises(DecodeError):
        aggregator.build_trade(chain)
