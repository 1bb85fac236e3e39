"""
pump.fun program address and discriminators.

pump.fun is a bonding-curve launchpad:
- Program ID: 6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P
- Trades log a ``TradeEvent`` through an Anchor self-CPI
- Launches log a ``CreateEvent``
"""

from dataclasses import dataclass
from typing import Final

from solders.pubkey import Pubkey

from solana_dex_parser.utils.discriminators import ANCHOR_EVENT_TAG


@dataclass
class PumpFunAddresses:
    """pump.fun program addresses."""

    PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"
    )


class PumpFunDiscriminators:
    """Instruction and event discriminators."""

    BUY: Final[bytes] = bytes([102, 6, 61, 18, 1, 218, 235, 234])
    SELL: Final[bytes] = bytes([51, 230, 133, 164, 1, 127, 131, 173])
    CREATE: Final[bytes] = bytes([24, 30, 200, 40, 5, 28, 7, 119])

    TRADE_EVENT: Final[bytes] = ANCHOR_EVENT_TAG + bytes([189, 219, 127, 211, 78, 230, 97, 238])
    CREATE_EVENT: Final[bytes] = ANCHOR_EVENT_TAG + bytes([27, 114, 169, 77, 222, 235, 99, 118])


# Account positions in buy / sell instructions
MINT_ACCOUNT = 2
BONDING_CURVE_ACCOUNT = 3
USER_ACCOUNT = 6

# Account positions in create
CREATE_MINT_ACCOUNT = 0
CREATE_BONDING_CURVE_ACCOUNT = 2
CREATE_USER_ACCOUNT = 7

TOKEN_DECIMALS: Final[int] = 6
