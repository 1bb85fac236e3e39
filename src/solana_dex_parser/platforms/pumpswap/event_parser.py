"""
PumpSwap BuyEvent / SellEvent decoding.

Both events start with thirteen u64 amount fields (``BuyEvent`` adds a
fourteenth, ``user_quote_amount_in``; ``SellEvent`` ends with
``user_quote_amount_out``) followed by six accounts. Newer deployments append
the coin creator, its fee rate and the creator fee.

Mints are not part of the event: they are resolved through the token
balance snapshots of the user's base and quote token accounts.
"""

from typing import Optional

from construct import Bytes, Int64sl, Int64ul, Struct
from solders.pubkey import Pubkey

from solana_dex_parser.core.dispatch import DecoderEntry
from solana_dex_parser.core.errors import DecodeError
from solana_dex_parser.core.layout import FixedSchemaReader
from solana_dex_parser.core.models import FeeInfo, Fragment, FragmentKind, FragmentSource
from solana_dex_parser.core.transaction import TransactionContext
from solana_dex_parser.interfaces.core import DecodeRequest, DexFamily
from solana_dex_parser.utils.logger import get_logger
from solana_dex_parser.utils.token_math import checked_u64

logger = get_logger(__name__)

EVENT_PREFIX_LEN = 16

_ACCOUNTS = (
    "pool" / Bytes(32),
    "user" / Bytes(32),
    "user_base_token_account" / Bytes(32),
    "user_quote_token_account" / Bytes(32),
    "protocol_fee_recipient" / Bytes(32),
    "protocol_fee_recipient_token_account" / Bytes(32),
)

BUY_EVENT = Struct(
    "timestamp" / Int64sl,
    "base_amount_out" / Int64ul,
    "max_quote_amount_in" / Int64ul,
    "user_base_token_reserves" / Int64ul,
    "user_quote_token_reserves" / Int64ul,
    "pool_base_token_reserves" / Int64ul,
    "pool_quote_token_reserves" / Int64ul,
    "quote_amount_in" / Int64ul,
    "lp_fee_basis_points" / Int64ul,
    "lp_fee" / Int64ul,
    "protocol_fee_basis_points" / Int64ul,
    "protocol_fee" / Int64ul,
    "quote_amount_in_with_lp_fee" / Int64ul,
    "user_quote_amount_in" / Int64ul,
    *_ACCOUNTS,
)

SELL_EVENT = Struct(
    "timestamp" / Int64sl,
    "base_amount_in" / Int64ul,
    "min_quote_amount_out" / Int64ul,
    "user_base_token_reserves" / Int64ul,
    "user_quote_token_reserves" / Int64ul,
    "pool_base_token_reserves" / Int64ul,
    "pool_quote_token_reserves" / Int64ul,
    "quote_amount_out" / Int64ul,
    "lp_fee_basis_points" / Int64ul,
    "lp_fee" / Int64ul,
    "protocol_fee_basis_points" / Int64ul,
    "protocol_fee" / Int64ul,
    "quote_amount_out_without_lp_fee" / Int64ul,
    "user_quote_amount_out" / Int64ul,
    *_ACCOUNTS,
)

CREATOR_FEE_EXTENSION = Struct(
    "coin_creator" / Bytes(32),
    "coin_creator_fee_basis_points" / Int64ul,
    "coin_creator_fee" / Int64ul,
)


class PumpSwapEventParser:
    """Decodes PumpSwap trade events."""

    family = DexFamily.PUMPSWAP

    @staticmethod
    def _resolve_mint(context: TransactionContext, token_account: bytes, label: str) -> Pubkey:
        mint = context.mint_of_key(Pubkey.from_bytes(token_account))
        if mint is None:
            raise DecodeError(f"cannot resolve mint of {label} token account")
        return mint

    @staticmethod
    def _creator_fee(reader: FixedSchemaReader) -> int:
        if reader.remaining < CREATOR_FEE_EXTENSION.sizeof():
            return 0
        return reader.read_struct(CREATOR_FEE_EXTENSION).coin_creator_fee

    def _fee(self, context: TransactionContext, event, creator_fee: int,
             quote_mint: Pubkey) -> Optional[FeeInfo]:
        fee_mint = context.mint_of_key(Pubkey.from_bytes(event.protocol_fee_recipient_token_account))
        if fee_mint is None:
            fee_mint = quote_mint
        decimals = context.decimals_of(fee_mint)
        if decimals is None:
            return None
        return FeeInfo(
            mint=fee_mint,
            amount=checked_u64(event.protocol_fee + creator_fee, "fee"),
            decimals=decimals,
            recipient=Pubkey.from_bytes(event.protocol_fee_recipient),
            fee_type="protocol",
        )

    def _fragment(self, request: DecodeRequest, entry: DecoderEntry, event, **sides) -> Fragment:
        return Fragment(
            kind=FragmentKind.SWAP,
            source=FragmentSource.EVENT,
            family=self.family.value,
            program_id=request.program_id,
            name=entry.name,
            outer_index=request.outer_index,
            inner_index=request.inner_index,
            actor=Pubkey.from_bytes(event.user),
            pool=Pubkey.from_bytes(event.pool),
            **sides,
        )

    def decode_buy_event(self, request: DecodeRequest, entry: DecoderEntry) -> list[Fragment]:
        context = request.context
        reader = FixedSchemaReader(request.data, EVENT_PREFIX_LEN)
        event = reader.read_struct(BUY_EVENT)
        creator_fee = self._creator_fee(reader)

        quote_mint = self._resolve_mint(context, event.user_quote_token_account, "quote")
        base_mint = self._resolve_mint(context, event.user_base_token_account, "base")
        fragment = self._fragment(
            request, entry, event,
            input_mint=quote_mint,
            input_amount=checked_u64(event.quote_amount_in_with_lp_fee, "quote_amount_in"),
            input_decimals=context.decimals_of(quote_mint),
            output_mint=base_mint,
            output_amount=checked_u64(event.base_amount_out, "base_amount_out"),
            output_decimals=context.decimals_of(base_mint),
            fee=self._fee(context, event, creator_fee, quote_mint),
        )
        logger.debug(f"[PUMPSWAP] BuyEvent pool={fragment.pool}")
        return [fragment]

    def decode_sell_event(self, request: DecodeRequest, entry: DecoderEntry) -> list[Fragment]:
        context = request.context
        reader = FixedSchemaReader(request.data, EVENT_PREFIX_LEN)
        event = reader.read_struct(SELL_EVENT)
        creator_fee = self._creator_fee(reader)

        base_mint = self._resolve_mint(context, event.user_base_token_account, "base")
        quote_mint = self._resolve_mint(context, event.user_quote_token_account, "quote")
        fragment = self._fragment(
            request, entry, event,
            input_mint=base_mint,
            input_amount=checked_u64(event.base_amount_in, "base_amount_in"),
            input_decimals=context.decimals_of(base_mint),
            output_mint=quote_mint,
            output_amount=checked_u64(event.user_quote_amount_out, "quote_amount_out"),
            output_decimals=context.decimals_of(quote_mint),
            fee=self._fee(context, event, creator_fee, quote_mint),
        )
        logger.debug(f"[PUMPSWAP] SellEvent pool={fragment.pool}")
        return [fragment]
