"""
Pytest fixtures for solana-dex-parser tests
"""
import struct

import pytest
from solders.pubkey import Pubkey

from solana_dex_parser.core.models import (
    InnerInstructionSet,
    Instruction,
    TokenBalance,
    TransactionInput,
    TransactionMeta,
)
from solana_dex_parser.core.pubkeys import SystemAddresses
from solana_dex_parser.platforms.jupiter.addresses import JupiterDiscriminators
from solana_dex_parser.platforms.pumpfun.addresses import PumpFunDiscriminators
from solana_dex_parser.platforms.pumpswap.addresses import PumpSwapDiscriminators

SLOT = 250_000_000
BLOCK_TIME = 1_700_000_000
SIGNATURE = bytes(range(64))


class TxBuilder:
    """Assembles a TransactionInput account by account.

    Account 0 is the signer. Every helper returns the account index (or
    instruction index) it created so tests can wire instructions by index.
    """

    def __init__(self, signer=None, fee=5000):
        self.keys = []
        self.signer = signer if signer is not None else Pubkey.new_unique()
        self.key(self.signer)
        self.instructions = []
        self.inner = {}
        self.pre_tokens = []
        self.post_tokens = []
        self.lamports = {}
        self.fee = fee
        self.err = None

    def key(self, pubkey=None):
        if pubkey is None:
            pubkey = Pubkey.new_unique()
        if pubkey in self.keys:
            return self.keys.index(pubkey)
        self.keys.append(pubkey)
        return len(self.keys) - 1

    def accounts(self, count):
        return [self.key() for _ in range(count)]

    def token_account(self, owner, mint, pre, post, decimals=6):
        index = self.key()
        if pre is not None:
            self.pre_tokens.append(TokenBalance(index, mint, pre, decimals, owner))
        if post is not None:
            self.post_tokens.append(TokenBalance(index, mint, post, decimals, owner))
        return index

    def set_lamports(self, index, pre, post):
        self.lamports[index] = (pre, post)

    def outer(self, program, data, accounts=()):
        self.instructions.append(Instruction(self.key(program), bytes(data), tuple(accounts)))
        return len(self.instructions) - 1

    def raw_outer(self, program_index, data, accounts=()):
        self.instructions.append(Instruction(program_index, bytes(data), tuple(accounts)))
        return len(self.instructions) - 1

    def inner_ix(self, outer_index, program, data, accounts=(), stack_height=None):
        items = self.inner.setdefault(outer_index, [])
        items.append(Instruction(self.key(program), bytes(data), tuple(accounts), stack_height))
        return len(items) - 1

    def transfer(self, outer_index, source, destination, authority, amount, stack_height=None):
        return self.inner_ix(
            outer_index,
            SystemAddresses.TOKEN_PROGRAM,
            struct.pack("<BQ", 3, amount),
            (source, destination, authority),
            stack_height,
        )

    def transfer_checked(self, outer_index, source, mint, destination, authority, amount,
                         decimals, stack_height=None):
        return self.inner_ix(
            outer_index,
            SystemAddresses.TOKEN_PROGRAM,
            struct.pack("<BQB", 12, amount, decimals),
            (source, self.key(mint), destination, authority),
            stack_height,
        )

    def build(self, with_meta=True, with_inner=True):
        count = len(self.keys)
        meta = None
        if with_meta:
            meta = TransactionMeta(
                fee=self.fee,
                pre_balances=tuple(self.lamports.get(i, (0, 0))[0] for i in range(count)),
                post_balances=tuple(self.lamports.get(i, (0, 0))[1] for i in range(count)),
                pre_token_balances=tuple(self.pre_tokens),
                post_token_balances=tuple(self.post_tokens),
                compute_units=150_000,
                err=self.err,
            )
        inner_sets = None
        if with_inner:
            inner_sets = tuple(
                InnerInstructionSet(outer_index, tuple(items))
                for outer_index, items in sorted(self.inner.items())
            )
        return TransactionInput(
            slot=SLOT,
            account_keys=tuple(self.keys),
            instructions=tuple(self.instructions),
            signatures=(SIGNATURE,),
            inner_instructions=inner_sets,
            meta=meta,
            block_time=BLOCK_TIME,
        )


def borsh_string(value):
    raw = value.encode()
    return struct.pack("<I", len(raw)) + raw


class Events:
    """Encoders for the self-logged events the decoders read."""

    string = staticmethod(borsh_string)

    @staticmethod
    def pumpfun_trade(mint, sol_amount, token_amount, is_buy, user,
                      fee=None, fee_recipient=None, flag=None):
        data = PumpFunDiscriminators.TRADE_EVENT + bytes(mint)
        data += struct.pack("<QQB", sol_amount, token_amount, int(is_buy) if flag is None else flag)
        data += bytes(user)
        data += struct.pack("<qQQ", BLOCK_TIME, 30_000_000_000, 1_073_000_000_000_000)
        if fee is not None:
            data += struct.pack("<QQ", 1_000_000_000, 793_000_000_000_000)
            data += bytes(fee_recipient)
            data += struct.pack("<QQ", 95, fee)
        return data

    @staticmethod
    def pumpfun_create(name, symbol, uri, mint, bonding_curve, user, creator=None, timestamp=None):
        data = PumpFunDiscriminators.CREATE_EVENT
        data += borsh_string(name) + borsh_string(symbol) + borsh_string(uri)
        data += bytes(mint) + bytes(bonding_curve) + bytes(user)
        if creator is not None:
            data += bytes(creator)
            if timestamp is not None:
                data += struct.pack("<q", timestamp)
        return data

    @staticmethod
    def pumpswap_buy(base_amount_out, quote_amount_in_with_lp_fee, protocol_fee, pool, user,
                     user_base, user_quote, fee_recipient, fee_recipient_account,
                     creator=None, creator_fee=0):
        amounts = (
            base_amount_out,               # base_amount_out
            quote_amount_in_with_lp_fee,   # max_quote_amount_in
            0, 0,                          # user reserves
            1_000_000_000, 50_000_000_000,  # pool reserves
            quote_amount_in_with_lp_fee - 25,  # quote_amount_in
            20, 25,                        # lp fee bps, lp fee
            5, protocol_fee,               # protocol fee bps, protocol fee
            quote_amount_in_with_lp_fee,   # quote_amount_in_with_lp_fee
            quote_amount_in_with_lp_fee + protocol_fee,  # user_quote_amount_in
        )
        data = PumpSwapDiscriminators.BUY_EVENT + struct.pack("<q13Q", BLOCK_TIME, *amounts)
        for key in (pool, user, user_base, user_quote, fee_recipient, fee_recipient_account):
            data += bytes(key)
        if creator is not None:
            data += bytes(creator) + struct.pack("<QQ", 5, creator_fee)
        return data

    @staticmethod
    def pumpswap_sell(base_amount_in, user_quote_amount_out, protocol_fee, pool, user,
                      user_base, user_quote, fee_recipient, fee_recipient_account):
        amounts = (
            base_amount_in,                # base_amount_in
            user_quote_amount_out - 10,    # min_quote_amount_out
            0, 0,
            1_000_000_000, 50_000_000_000,
            user_quote_amount_out + 30,    # quote_amount_out
            20, 25,
            5, protocol_fee,
            user_quote_amount_out + 5,     # quote_amount_out_without_lp_fee
            user_quote_amount_out,         # user_quote_amount_out
        )
        data = PumpSwapDiscriminators.SELL_EVENT + struct.pack("<q13Q", BLOCK_TIME, *amounts)
        for key in (pool, user, user_base, user_quote, fee_recipient, fee_recipient_account):
            data += bytes(key)
        return data

    @staticmethod
    def jupiter_swap(amm, input_mint, input_amount, output_mint, output_amount):
        return (
            JupiterDiscriminators.SWAP_EVENT
            + bytes(amm) + bytes(input_mint) + struct.pack("<Q", input_amount)
            + bytes(output_mint) + struct.pack("<Q", output_amount)
        )


@pytest.fixture
def builder():
    """Fresh transaction builder with a random signer"""
    return TxBuilder()


@pytest.fixture
def events():
    """Event payload encoders"""
    return Events


@pytest.fixture
def token_mint():
    """Mint of a freshly launched token"""
    return Pubkey.new_unique()
