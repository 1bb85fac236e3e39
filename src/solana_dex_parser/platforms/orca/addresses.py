"""
Orca Whirlpool program address and liquidity discriminators.

- Whirlpool: whirLbMiicVdio4qvUfM5KAg6Ct8VwpYzGff3uctyCc
"""

from dataclasses import dataclass
from typing import Final

from solders.pubkey import Pubkey


@dataclass
class OrcaAddresses:
    """Orca program addresses."""

    WHIRLPOOL_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "whirLbMiicVdio4qvUfM5KAg6Ct8VwpYzGff3uctyCc"
    )


class OrcaDiscriminators:
    """Position and liquidity instructions (swaps use Anchor names)."""

    CREATE: Final[bytes] = bytes([242, 29, 134, 48, 58, 110, 14, 60])
    CREATE_V2: Final[bytes] = bytes([212, 47, 95, 92, 114, 102, 131, 250])
    INCREASE_LIQUIDITY: Final[bytes] = bytes([46, 156, 243, 118, 13, 205, 251, 178])
    INCREASE_LIQUIDITY_V2: Final[bytes] = bytes([133, 29, 89, 223, 69, 238, 176, 10])
    DECREASE_LIQUIDITY: Final[bytes] = bytes([160, 38, 208, 111, 104, 91, 44, 1])


# whirlpool account in swap / swap_v2 (whirlpool_one in two-hop swaps)
WHIRLPOOL_ACCOUNT = 2
