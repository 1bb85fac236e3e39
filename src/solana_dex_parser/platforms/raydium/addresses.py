"""
Raydium program addresses and discriminators.

- AMM V4: 675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8 (1-byte instruction tags)
- AMM (stable): 5quBtoiQqxF9Jv6KYKctB59NT3gtJD2Y65kdnB1Uev3h
- CPMM: CPMMoo8L3F4NbTegBCKVNunggL7H1ZpdTHKxQB5qKP1C (Anchor)
- CLMM: CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK (Anchor)
- Route: routeUGWgWzqBWFcrCfv8tritsqukccJPu3q5GPP3xS (multi-hop router; legs are
  CPIs into the programs above)
"""

from dataclasses import dataclass
from typing import Final

from solders.pubkey import Pubkey


@dataclass
class RaydiumAddresses:
    """Raydium program addresses."""

    AMM_V4_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"
    )
    AMM_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "5quBtoiQqxF9Jv6KYKctB59NT3gtJD2Y65kdnB1Uev3h"
    )
    CPMM_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "CPMMoo8L3F4NbTegBCKVNunggL7H1ZpdTHKxQB5qKP1C"
    )
    CLMM_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK"
    )
    ROUTE_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "routeUGWgWzqBWFcrCfv8tritsqukccJPu3q5GPP3xS"
    )


class RaydiumDiscriminators:
    """Instruction tags of the non-Anchor AMM programs and CPMM liquidity."""

    AMM_INITIALIZE: Final[bytes] = bytes([1])
    AMM_DEPOSIT: Final[bytes] = bytes([3])
    AMM_WITHDRAW: Final[bytes] = bytes([4])
    AMM_SWAP_BASE_IN: Final[bytes] = bytes([9])
    AMM_SWAP_BASE_OUT: Final[bytes] = bytes([11])
    AMM_SWAP_BASE_IN_V2: Final[bytes] = bytes([16])
    AMM_SWAP_BASE_OUT_V2: Final[bytes] = bytes([17])

    CPMM_INITIALIZE: Final[bytes] = bytes([175, 175, 109, 31, 13, 152, 155, 237])
    CPMM_DEPOSIT: Final[bytes] = bytes([242, 35, 198, 137, 82, 225, 242, 182])
    CPMM_WITHDRAW: Final[bytes] = bytes([183, 18, 70, 156, 148, 109, 161, 34])


# Pool (amm / pool state) account position per program
AMM_POOL_ACCOUNT = 1
CLMM_POOL_ACCOUNT = 2
CPMM_POOL_ACCOUNT = 3
