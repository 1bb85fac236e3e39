"""
PumpSwap AMM program address and discriminators.

PumpSwap hosts pump.fun tokens after bonding-curve graduation:
- Program ID: pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA
- Trades log ``BuyEvent`` / ``SellEvent`` through an Anchor self-CPI
"""

from dataclasses import dataclass
from typing import Final

from solders.pubkey import Pubkey

from solana_dex_parser.utils.discriminators import ANCHOR_EVENT_TAG


@dataclass
class PumpSwapAddresses:
    """PumpSwap program addresses."""

    PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA"
    )


class PumpSwapDiscriminators:
    """Instruction and event discriminators."""

    BUY: Final[bytes] = bytes([102, 6, 61, 18, 1, 218, 235, 234])
    SELL: Final[bytes] = bytes([51, 230, 133, 164, 1, 127, 131, 173])

    BUY_EVENT: Final[bytes] = ANCHOR_EVENT_TAG + bytes([103, 244, 82, 31, 44, 245, 119, 119])
    SELL_EVENT: Final[bytes] = ANCHOR_EVENT_TAG + bytes([62, 47, 55, 10, 165, 3, 220, 42])


# Account positions in buy / sell instructions
POOL_ACCOUNT = 0
USER_ACCOUNT = 1
