"""
pump.fun instruction decoding.

``buy`` / ``sell`` carry only the bonding curve and the trader; amounts come
from the TradeEvent logged in the same instruction (or, failing that, from
transfer inference). ``create`` carries the token metadata as Borsh strings.
"""

from solana_dex_parser.core.dispatch import DecoderEntry
from solana_dex_parser.core.layout import LengthPrefixedReader
from solana_dex_parser.core.models import Fragment, FragmentKind, FragmentSource, MemeEvent
from solana_dex_parser.interfaces.core import DecodeRequest, DexFamily
from solana_dex_parser.platforms.pumpfun.addresses import (
    BONDING_CURVE_ACCOUNT,
    CREATE_BONDING_CURVE_ACCOUNT,
    CREATE_MINT_ACCOUNT,
    CREATE_USER_ACCOUNT,
    USER_ACCOUNT,
)

DISCRIMINATOR_LEN = 8


class PumpFunInstructionParser:
    """Decodes pump.fun buy, sell and create instructions."""

    family = DexFamily.PUMPFUN

    def decode_trade(self, request: DecodeRequest, entry: DecoderEntry) -> list[Fragment]:
        return [
            Fragment(
                kind=FragmentKind.SWAP,
                source=FragmentSource.INSTRUCTION,
                family=self.family.value,
                program_id=request.program_id,
                name=entry.name,
                outer_index=request.outer_index,
                inner_index=request.inner_index,
                actor=request.account(USER_ACCOUNT),
                pool=request.account(BONDING_CURVE_ACCOUNT),
            )
        ]

    def decode_create(self, request: DecodeRequest, entry: DecoderEntry) -> list[Fragment]:
        reader = LengthPrefixedReader(request.data, DISCRIMINATOR_LEN)
        name = reader.read_string()
        symbol = reader.read_string()
        uri = reader.read_string()
        creator = reader.read_pubkey() if reader.remaining >= 32 else None

        user = request.account(CREATE_USER_ACCOUNT)
        bonding_curve = request.account(CREATE_BONDING_CURVE_ACCOUNT)
        meme = MemeEvent(
            mint=request.account(CREATE_MINT_ACCOUNT),
            name=name,
            symbol=symbol,
            uri=uri,
            user=user,
            bonding_curve=bonding_curve,
            creator=creator if creator is not None else user,
            protocol=self.family.value,
        )
        return [
            Fragment(
                kind=FragmentKind.OTHER,
                source=FragmentSource.INSTRUCTION,
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
