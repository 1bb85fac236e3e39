"""
Jupiter ``SwapEvent`` decoding.

SwapEvent layout (after the 16-byte prefix):
- amm: publicKey          program of the venue the leg executed on
- input_mint: publicKey
- input_amount: u64
- output_mint: publicKey
- output_amount: u64
"""

from construct import Bytes, Int64ul, Struct
from solders.pubkey import Pubkey

from solana_dex_parser.core.dispatch import DecoderEntry
from solana_dex_parser.core.errors import DecodeError
from solana_dex_parser.core.layout import FixedSchemaReader
from solana_dex_parser.core.models import Fragment, FragmentKind, FragmentSource
from solana_dex_parser.interfaces.core import DecodeRequest, DexFamily

EVENT_PREFIX_LEN = 16

SWAP_EVENT = Struct(
    "amm" / Bytes(32),
    "input_mint" / Bytes(32),
    "input_amount" / Int64ul,
    "output_mint" / Bytes(32),
    "output_amount" / Int64ul,
)


class JupiterEventParser:
    """Turns each route leg event into a resolved swap fragment."""

    family = DexFamily.JUPITER

    def decode_swap_event(self, request: DecodeRequest, entry: DecoderEntry) -> list[Fragment]:
        context = request.context
        event = FixedSchemaReader(request.data, EVENT_PREFIX_LEN).read_struct(SWAP_EVENT)

        input_mint = Pubkey.from_bytes(event.input_mint)
        output_mint = Pubkey.from_bytes(event.output_mint)
        if input_mint == output_mint:
            raise DecodeError("route leg with identical input and output mint")

        return [
            Fragment(
                kind=FragmentKind.SWAP,
                source=FragmentSource.ROUTE_EVENT,
                family=self.family.value,
                program_id=request.program_id,
                name=entry.name,
                outer_index=request.outer_index,
                inner_index=request.inner_index,
                actor=context.swap_signer,
                input_mint=input_mint,
                input_amount=event.input_amount,
                input_decimals=context.decimals_of(input_mint),
                output_mint=output_mint,
                output_amount=event.output_amount,
                output_decimals=context.decimals_of(output_mint),
                amm_program=Pubkey.from_bytes(event.amm),
            )
        ]
