"""
pump.fun self-logged event decoding.

Events arrive as inner instructions of the pump.fun program whose data is
the 8-byte Anchor event tag, the 8-byte event discriminator and the Borsh
encoded event body.

TradeEvent layout:
- mint: publicKey
- sol_amount: u64
- token_amount: u64
- is_buy: bool
- user: publicKey
- timestamp: i64
- virtual_sol_reserves: u64
- virtual_token_reserves: u64
- (newer deployments) real_sol_reserves, real_token_reserves: u64,
  fee_recipient: publicKey, fee_basis_points: u64, fee: u64, ...

CreateEvent layout:
- name, symbol, uri: string
- mint, bonding_curve, user: publicKey
- (newer deployments) creator: publicKey, timestamp: i64
"""

from construct import Bytes, Int8ul, Int64sl, Int64ul, Struct
from solders.pubkey import Pubkey

from solana_dex_parser.core.dispatch import DecoderEntry
from solana_dex_parser.core.errors import DecodeError
from solana_dex_parser.core.layout import FixedSchemaReader, LengthPrefixedReader
from solana_dex_parser.core.models import (
    FeeInfo,
    Fragment,
    FragmentKind,
    FragmentSource,
    MemeEvent,
)
from solana_dex_parser.core.pubkeys import SOL_DECIMALS, Tokens
from solana_dex_parser.interfaces.core import DecodeRequest, DexFamily
from solana_dex_parser.platforms.pumpfun.addresses import TOKEN_DECIMALS
from solana_dex_parser.utils.logger import get_logger
from solana_dex_parser.utils.token_math import checked_u64

logger = get_logger(__name__)

EVENT_PREFIX_LEN = 16

TRADE_EVENT_BASE = Struct(
    "mint" / Bytes(32),
    "sol_amount" / Int64ul,
    "token_amount" / Int64ul,
    "is_buy" / Int8ul,
    "user" / Bytes(32),
    "timestamp" / Int64sl,
    "virtual_sol_reserves" / Int64ul,
    "virtual_token_reserves" / Int64ul,
)

TRADE_EVENT_FEE_EXTENSION = Struct(
    "real_sol_reserves" / Int64ul,
    "real_token_reserves" / Int64ul,
    "fee_recipient" / Bytes(32),
    "fee_basis_points" / Int64ul,
    "fee" / Int64ul,
)


class PumpFunEventParser:
    """Decodes pump.fun TradeEvent and CreateEvent records."""

    family = DexFamily.PUMPFUN

    def decode_trade_event(self, request: DecodeRequest, entry: DecoderEntry) -> list[Fragment]:
        reader = FixedSchemaReader(request.data, EVENT_PREFIX_LEN)
        event = reader.read_struct(TRADE_EVENT_BASE)
        if event.is_buy > 1:
            raise DecodeError(f"invalid is_buy flag {event.is_buy}")

        fee = None
        if reader.remaining >= TRADE_EVENT_FEE_EXTENSION.sizeof():
            extension = reader.read_struct(TRADE_EVENT_FEE_EXTENSION)
            fee = FeeInfo(
                mint=Tokens.SOL,
                amount=checked_u64(extension.fee, "fee"),
                decimals=SOL_DECIMALS,
                recipient=Pubkey.from_bytes(extension.fee_recipient),
            )

        mint = Pubkey.from_bytes(event.mint)
        sol_amount = checked_u64(event.sol_amount, "sol_amount")
        token_amount = checked_u64(event.token_amount, "token_amount")
        token_decimals = request.context.decimals_of(mint, TOKEN_DECIMALS)

        if event.is_buy:
            sides = dict(
                input_mint=Tokens.SOL, input_amount=sol_amount, input_decimals=SOL_DECIMALS,
                output_mint=mint, output_amount=token_amount, output_decimals=token_decimals,
            )
        else:
            sides = dict(
                input_mint=mint, input_amount=token_amount, input_decimals=token_decimals,
                output_mint=Tokens.SOL, output_amount=sol_amount, output_decimals=SOL_DECIMALS,
            )

        return [
            Fragment(
                kind=FragmentKind.SWAP,
                source=FragmentSource.EVENT,
                family=self.family.value,
                program_id=request.program_id,
                name=entry.name,
                outer_index=request.outer_index,
                inner_index=request.inner_index,
                actor=Pubkey.from_bytes(event.user),
                fee=fee,
                **sides,
            )
        ]

    def decode_create_event(self, request: DecodeRequest, entry: DecoderEntry) -> list[Fragment]:
        reader = LengthPrefixedReader(request.data, EVENT_PREFIX_LEN)
        name = reader.read_string()
        symbol = reader.read_string()
        uri = reader.read_string()
        mint = reader.read_pubkey()
        bonding_curve = reader.read_pubkey()
        user = reader.read_pubkey()
        creator = reader.read_pubkey() if reader.remaining >= 32 else None
        timestamp = reader.read_i64() if reader.remaining >= 8 else None
        logger.debug(f"[PUMPFUN] CreateEvent {symbol} mint={mint}")

        meme = MemeEvent(
            mint=mint,
            name=name,
            symbol=symbol,
            uri=uri,
            user=user,
            bonding_curve=bonding_curve,
            creator=creator if creator is not None else user,
            timestamp=timestamp,
            protocol=self.family.value,
        )
        return [
            Fragment(
                kind=FragmentKind.OTHER,
                source=FragmentSource.EVENT,
                family=self.family.value,
                program_id=request.program_id,
                name=entry.name,
                outer_index=request.outer_index,
                inner_index=request.inner_index,
                actor=user,
                pool=bonding_curve,
                meme=meme,
            )
        ]
