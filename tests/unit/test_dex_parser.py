"""End-to-end tests for the parse orchestrator"""
import json
import struct

import pytest
from solders.pubkey import Pubkey

from solana_dex_parser import DexParser, ParseConfig, parse, parse_all
from solana_dex_parser.core.models import FragmentKind, TransactionStatus
from solana_dex_parser.core.pubkeys import FEE_ACCOUNTS, SystemAddresses, Tokens
from solana_dex_parser.platforms.orca.addresses import OrcaAddresses
from solana_dex_parser.platforms.pumpfun.addresses import PumpFunAddresses, PumpFunDiscriminators
from solana_dex_parser.platforms.raydium.addresses import RaydiumAddresses, RaydiumDiscriminators
from solana_dex_parser.utils.discriminators import instruction_discriminator


def _raydium_swap(builder, token_mint, amount_in=1_000, amount_out=400):
    pool_authority = Pubkey.new_unique()
    user_sol = builder.token_account(builder.signer, Tokens.SOL, amount_in, 0, decimals=9)
    user_token = builder.token_account(builder.signer, token_mint, 0, amount_out)
    vault_sol = builder.token_account(pool_authority, Tokens.SOL, 0, amount_in, decimals=9)
    vault_token = builder.token_account(pool_authority, token_mint, amount_out, 0)
    outer = builder.outer(RaydiumAddresses.AMM_V4_PROGRAM, bytes([9]) + struct.pack("<QQ", 1, 1),
                          builder.accounts(8))
    builder.transfer(outer, user_sol, vault_sol, 0, amount_in)
    builder.transfer(outer, vault_token, user_token, builder.key(pool_authority), amount_out)
    return outer


def _two_hop_via_unknown_router(builder, mint_a, mint_b, mint_c):
    """Unregistered router CPIs into Raydium (A -> B) then Orca (B -> C)."""
    pool_1 = Pubkey.new_unique()
    pool_2 = Pubkey.new_unique()
    user_a = builder.token_account(builder.signer, mint_a, 1_000, 0)
    user_b = builder.token_account(builder.signer, mint_b, 0, 0)
    user_c = builder.token_account(builder.signer, mint_c, 0, 250)
    vault_a = builder.token_account(pool_1, mint_a, 0, 1_000)
    vault_b1 = builder.token_account(pool_1, mint_b, 500, 0)
    vault_b2 = builder.token_account(pool_2, mint_b, 0, 500)
    vault_c = builder.token_account(pool_2, mint_c, 250, 0)

    router = Pubkey.new_unique()
    outer = builder.outer(router, b"\x01\x02", builder.accounts(3))
    builder.inner_ix(outer, RaydiumAddresses.AMM_V4_PROGRAM, bytes([9]) + b"\x00" * 16,
                     builder.accounts(8), stack_height=2)
    builder.transfer(outer, user_a, vault_a, 0, 1_000, stack_height=3)
    builder.transfer(outer, vault_b1, user_b, builder.key(pool_1), 500, stack_height=3)
    builder.inner_ix(outer, OrcaAddresses.WHIRLPOOL_PROGRAM, instruction_discriminator("swap"),
                     builder.accounts(8), stack_height=2)
    builder.transfer(outer, user_b, vault_b2, 0, 500, stack_height=3)
    builder.transfer(outer, vault_c, user_c, builder.key(pool_2), 250, stack_height=3)
    return router


def test_unmatched_program_yields_no_trades(builder, token_mint):
    builder.outer(SystemAddresses.COMPUTE_BUDGET_PROGRAM, bytes([2, 0, 0, 0, 0]), [])
    builder.outer(Pubkey.new_unique(), b"\x07", builder.accounts(2))

    result = parse_all(builder.build())

    assert result.trades == []
    assert result.liquidities == []
    assert parse(builder.build()) == []


def test_known_program_with_unknown_discriminator_is_silent(builder):
    builder.outer(RaydiumAddresses.AMM_V4_PROGRAM, bytes([200, 1, 2]), builder.accounts(8))

    result = parse_all(builder.build())

    assert result.trades == []
    assert result.skipped == []


def test_trade_invariants_and_idempotence(builder, token_mint):
    _raydium_swap(builder, token_mint)
    tx = builder.build()

    first = parse(tx)
    second = parse(tx)

    assert first == second
    assert first
    for trade in first:
        assert trade.input_token.mint != trade.output_token.mint
        assert trade.input_token.amount >= 0
        assert trade.output_token.amount >= 0


def test_multi_leg_aggregation(builder):
    mint_a, mint_b, mint_c = Pubkey.new_unique(), Pubkey.new_unique(), Pubkey.new_unique()
    router = _two_hop_via_unknown_router(builder, mint_a, mint_b, mint_c)

    result = parse_all(builder.build())

    assert len(result.trades) == 1
    trade = result.trades[0]
    assert trade.input_token.mint == mint_a
    assert trade.input_token.amount == 1_000
    assert trade.output_token.mint == mint_c
    assert trade.output_token.amount == 250
    assert trade.dex == "raydium"
    assert trade.amms == ("RaydiumV4", "Orca")
    assert len(trade.pools) == 2
    assert trade.inner_range == (0, 3)
    assert trade.route is None
    assert trade.program_id != router


def test_multi_leg_without_aggregation(builder):
    mint_a, mint_b, mint_c = Pubkey.new_unique(), Pubkey.new_unique(), Pubkey.new_unique()
    _two_hop_via_unknown_router(builder, mint_a, mint_b, mint_c)

    trades = parse(builder.build(), ParseConfig(aggregate_trades=False))

    assert [(t.input_token.mint, t.output_token.mint) for t in trades] == [
        (mint_a, mint_b),
        (mint_b, mint_c),
    ]
    assert [t.amm for t in trades] == ["RaydiumV4", "Orca"]


def test_unknown_program_fallback(builder, token_mint):
    pool = Pubkey.new_unique()
    user_usdc = builder.token_account(builder.signer, Tokens.USDC, 5_000, 0)
    user_token = builder.token_account(builder.signer, token_mint, 0, 9)
    vault_usdc = builder.token_account(pool, Tokens.USDC, 0, 5_000)
    vault_token = builder.token_account(pool, token_mint, 9, 0)
    outer = builder.outer(Pubkey.new_unique(), b"\x05", builder.accounts(4))
    builder.transfer(outer, user_usdc, vault_usdc, 0, 5_000)
    builder.transfer(outer, vault_token, user_token, builder.key(pool), 9)
    tx = builder.build()

    trades = parse(tx)

    assert len(trades) == 1
    assert trades[0].dex == "unknown"
    assert trades[0].amm == "unknown"
    assert trades[0].input_token.mint == Tokens.USDC
    assert parse(tx, ParseConfig(try_unknown_dex=False)) == []


def test_unknown_program_ambiguity_is_skipped(builder):
    builder.outer(Pubkey.new_unique(), b"\x05", builder.accounts(2))

    result = parse_all(builder.build())

    assert result.trades == []
    assert [s.kind for s in result.skipped] == ["ambiguous"]


@pytest.mark.parametrize("cut", range(0, 24, 3))
def test_truncated_instruction_data_is_safe(builder, cut):
    accounts = builder.accounts(12)
    data = (PumpFunDiscriminators.BUY + struct.pack("<QQ", 1, 2))[:cut]
    builder.outer(PumpFunAddresses.PROGRAM, data, accounts)
    builder.outer(RaydiumAddresses.CLMM_PROGRAM, instruction_discriminator("swap")[:cut], accounts)

    result = parse_all(builder.build())

    assert result.trades == []


def test_out_of_range_account_index_is_isolated(builder, token_mint):
    builder.outer(RaydiumAddresses.AMM_V4_PROGRAM, bytes([9]), [0, 1, 250])
    _raydium_swap(builder, token_mint)

    result = parse_all(builder.build())

    assert len(result.trades) == 1
    assert result.trades[0].outer_index == 1
    assert [(s.outer_index, s.kind) for s in result.skipped] == [(0, "structural")]


def test_out_of_range_program_index_is_isolated(builder, token_mint):
    builder.raw_outer(999, b"\x09", [])
    _raydium_swap(builder, token_mint)

    result = parse_all(builder.build())

    assert len(result.trades) == 1
    assert result.skipped[0].kind == "structural"


def test_inner_set_for_missing_outer_is_skipped(builder, token_mint):
    _raydium_swap(builder, token_mint)
    builder.inner_ix(7, SystemAddresses.TOKEN_PROGRAM, bytes([3]) + struct.pack("<Q", 1), [0, 0, 0])

    result = parse_all(builder.build())

    assert len(result.trades) == 1
    assert [(s.outer_index, s.kind) for s in result.skipped] == [(7, "structural")]


def test_trades_sorted_by_position(builder, token_mint):
    _raydium_swap(builder, token_mint, 10, 4)
    _raydium_swap(builder, Pubkey.new_unique(), 20, 8)

    trades = parse(builder.build())

    assert [t.outer_index for t in trades] == [0, 1]
    assert [t.idx for t in trades] == ["0-0", "1-0"]


def test_result_header_and_balances(builder, token_mint):
    builder.set_lamports(0, 1_000_000, 994_000)
    _raydium_swap(builder, token_mint)
    builder.err = {"InstructionError": [0, "Custom"]}

    result = parse_all(builder.build())

    assert result.state is True
    assert result.tx_status is TransactionStatus.FAILED
    assert result.signer == builder.signer
    assert result.fee == 5000
    assert result.compute_units == 150_000
    assert result.slot == 250_000_000
    assert result.sol_balance_change.change == -6_000
    assert result.token_balance_change[token_mint].change == 400
    assert result.token_balance_change[Tokens.SOL].change == -1_000
    assert len(result.trades) == 1


def test_no_meta_status_unknown(builder):
    builder.outer(Pubkey.new_unique(), b"\x01", [])

    result = parse_all(builder.build(with_meta=False))

    assert result.tx_status is TransactionStatus.UNKNOWN
    assert result.sol_balance_change is None
    assert result.trades == []


def test_program_filter(builder, token_mint):
    _raydium_swap(builder, token_mint)
    tx = builder.build()

    skipped = parse_all(tx, ParseConfig(program_ids=frozenset({Pubkey.new_unique()})))
    kept = parse_all(tx, ParseConfig(program_ids=frozenset({RaydiumAddresses.AMM_V4_PROGRAM})))
    ignored = parse_all(tx, ParseConfig(ignore_program_ids=frozenset({RaydiumAddresses.AMM_V4_PROGRAM})))

    assert skipped.state is False and skipped.trades == []
    assert skipped.msg
    assert len(kept.trades) == 1
    assert ignored.trades == []


def test_classify_groups_by_program(builder, token_mint):
    _raydium_swap(builder, token_mint)
    parser = DexParser()
    tx = builder.build()

    classified = parser.classify(tx)

    assert classified[RaydiumAddresses.AMM_V4_PROGRAM] == [(0, None)]
    assert classified[SystemAddresses.TOKEN_PROGRAM] == [(0, 0), (0, 1)]
    assert parser.known_programs(tx) == ["RaydiumV4"]


def test_programming_errors_propagate(builder, token_mint):
    from solana_dex_parser.core.dispatch import DecoderEntry, DispatchTable
    from solana_dex_parser.core.models import FragmentKind, FragmentSource

    def broken(request, entry):
        raise KeyError("bug")

    program = Pubkey.new_unique()
    table = DispatchTable()
    table.register_program(program, "raydium", "Broken")
    table.register_outer(program, DecoderEntry(
        "raydium", "swap", broken, FragmentKind.SWAP, FragmentSource.INSTRUCTION, b"\x01",
    ))
    builder.outer(program, b"\x01", [])

    with pytest.raises(KeyError):
        DexParser(table.freeze()).parse_all(builder.build())


@pytest.mark.parametrize("referenced", [(0, 1), (1,)])
def test_read_only_instruction_does_not_repeat_swap(builder, token_mint, referenced):
    builder.set_lamports(0, 10_000_000, 8_994_000)
    _raydium_swap(builder, token_mint)
    user_accounts = [b.account_index for b in builder.pre_tokens if b.owner == builder.signer]
    # e.g. a balance guard that only reads the user's token accounts
    builder.outer(Pubkey.new_unique(), b"\x01", [user_accounts[i] for i in referenced])

    result = parse_all(builder.build())

    assert len(result.trades) == 1
    assert result.trades[0].dex == "raydium"
    assert [(s.outer_index, s.kind) for s in result.skipped] == [(1, "ambiguous")]


def test_fee_wallet_transfer_reported_on_trade(builder, token_mint):
    fee_wallet = sorted(FEE_ACCOUNTS, key=str)[0]
    pool_authority = Pubkey.new_unique()
    user_sol = builder.token_account(builder.signer, Tokens.SOL, 1_010, 0, decimals=9)
    user_token = builder.token_account(builder.signer, token_mint, 0, 400)
    vault_sol = builder.token_account(pool_authority, Tokens.SOL, 0, 1_000, decimals=9)
    vault_token = builder.token_account(pool_authority, token_mint, 400, 0)
    fee_sol = builder.token_account(fee_wallet, Tokens.SOL, 0, 10, decimals=9)
    outer = builder.outer(RaydiumAddresses.AMM_V4_PROGRAM, bytes([9]) + struct.pack("<QQ", 1, 1),
                          builder.accounts(8))
    builder.transfer(outer, user_sol, fee_sol, 0, 10)
    builder.transfer(outer, user_sol, vault_sol, 0, 1_000)
    builder.transfer(outer, vault_token, user_token, builder.key(pool_authority), 400)

    trades = parse(builder.build())

    assert len(trades) == 1
    trade = trades[0]
    assert trade.input_token.amount == 1_000
    assert trade.output_token.amount == 400
    assert (trade.fee.mint, trade.fee.amount, trade.fee.recipient) == (Tokens.SOL, 10, fee_wallet)
    assert trade.to_dict()["fee"]["amount_raw"] == "10"


@pytest.mark.parametrize("length", [200, 0xFFFF_FFF0])
def test_oversized_length_prefix_is_isolated(builder, token_mint, length):
    accounts = builder.accounts(14)
    accounts[7] = 0
    data = PumpFunDiscriminators.CREATE + struct.pack("<I", length) + b"Moon Cat"
    builder.outer(PumpFunAddresses.PROGRAM, data, accounts)
    _raydium_swap(builder, token_mint)

    result = parse_all(builder.build())

    assert [(s.outer_index, s.kind) for s in result.skipped] == [(0, "decode")]
    assert result.meme_events == []
    assert len(result.trades) == 1
    assert result.trades[0].outer_index == 1


def _raydium_liquidity(builder, token_mint, discriminator, sol, tokens, deposit):
    pool_authority = Pubkey.new_unique()
    sign = -1 if deposit else 1
    user_sol = builder.token_account(builder.signer, Tokens.SOL, sol, 0, decimals=9)
    user_token = builder.token_account(builder.signer, token_mint, tokens, 0)
    vault_sol = builder.token_account(pool_authority, Tokens.SOL, 0, sol, decimals=9)
    vault_token = builder.token_account(pool_authority, token_mint, 0, tokens)
    accounts = builder.accounts(8)
    pool = builder.keys[accounts[1]]
    outer = builder.outer(RaydiumAddresses.AMM_V4_PROGRAM, discriminator, accounts)
    authority = builder.key(pool_authority)
    if deposit:
        builder.transfer(outer, user_sol, vault_sol, 0, sol)
        builder.transfer(outer, user_token, vault_token, 0, tokens)
    else:
        builder.transfer(outer, vault_sol, user_sol, authority, sol)
        builder.transfer(outer, vault_token, user_token, authority, tokens)
    return pool, {Tokens.SOL: sign * sol, token_mint: sign * tokens}


def test_parse_liquidity_add_and_remove(builder, token_mint):
    add_pool, add_changes = _raydium_liquidity(
        builder, token_mint, RaydiumDiscriminators.AMM_DEPOSIT + b"\x00" * 24, 1_000, 2_000, True,
    )
    remove_pool, remove_changes = _raydium_liquidity(
        builder, Pubkey.new_unique(), RaydiumDiscriminators.AMM_WITHDRAW + b"\x00" * 8, 300, 700, False,
    )
    tx = builder.build()

    events = DexParser().parse_liquidity(tx)

    assert [e.kind for e in events] == [FragmentKind.LIQUIDITY_ADD, FragmentKind.LIQUIDITY_REMOVE]
    assert [e.pool for e in events] == [add_pool, remove_pool]
    assert [e.amm for e in events] == ["RaydiumV4", "RaydiumV4"]
    assert dict(events[0].token_changes) == add_changes
    assert dict(events[1].token_changes) == remove_changes
    assert all(e.user == builder.signer for e in events)
    assert parse(tx) == []


def test_result_serializes_to_json(builder, token_mint):
    builder.set_lamports(0, 1_000_000, 994_000)
    _raydium_swap(builder, token_mint)
    _raydium_liquidity(
        builder, Pubkey.new_unique(), RaydiumDiscriminators.AMM_DEPOSIT, 50, 60, True,
    )
    result = parse_all(builder.build())

    data = json.loads(json.dumps(result.to_dict()))

    assert data["signature"] == result.signature
    assert data["signer"] == str(builder.signer)
    assert data["tx_status"] == "SUCCESS"
    trade = data["trades"][0]
    assert trade == result.trades[0].to_dict()
    assert trade["type"] == "BUY"
    assert trade["input_token"] == {
        "mint": str(Tokens.SOL), "amount_raw": "1000", "amount": 1e-06, "decimals": 9,
    }
    assert trade["output_token"]["mint"] == str(token_mint)
    assert trade["output_token"]["amount_raw"] == "400"
    assert trade["amm"] == "RaydiumV4"
    assert trade["idx"] == "0-0"
    assert "fee" not in trade
    liquidity = data["liquidities"][0]
    assert liquidity["type"] == "liquidity_add"
    assert liquidity["token_changes"][str(Tokens.SOL)] == "-50"
    assert data["sol_balance_change"]["change"] == "-6000"
    assert data["token_balance_change"][str(token_mint)]["change"] == "400"
    assert data["skipped"] == []
