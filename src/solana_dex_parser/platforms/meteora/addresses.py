"""
Meteora program addresses and liquidity discriminators.

- DLMM: LBUZKhRxPF3XUpBCjp4YzTKgLccjZhTSDM9YuVaPwxo
- DAMM (dynamic AMM v1): Eo7WjKq67rjJQSZxS6z3YkapzY3eMj6Xy8X5EQVn5UaB
- DAMM v2: cpamdpZCGKUy5JxQXB4dcpGPiikHawvSWAd6mEn1sGG
"""

from dataclasses import dataclass
from typing import Final

from solders.pubkey import Pubkey


@dataclass
class MeteoraAddresses:
    """Meteora program addresses."""

    DLMM_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "LBUZKhRxPF3XUpBCjp4YzTKgLccjZhTSDM9YuVaPwxo"
    )
    DAMM_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "Eo7WjKq67rjJQSZxS6z3YkapzY3eMj6Xy8X5EQVn5UaB"
    )
    DAMM_V2_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "cpamdpZCGKUy5JxQXB4dcpGPiikHawvSWAd6mEn1sGG"
    )


class MeteoraDiscriminators:
    DLMM_ADD_LIQUIDITY: Final[bytes] = bytes([181, 157, 89, 67, 143, 182, 52, 72])
    DLMM_REMOVE_LIQUIDITY: Final[bytes] = bytes([80, 85, 209, 72, 24, 206, 177, 108])

    DAMM_CREATE: Final[bytes] = bytes([7, 166, 138, 171, 206, 171, 236, 244])
    DAMM_ADD_LIQUIDITY: Final[bytes] = bytes([168, 227, 50, 62, 189, 171, 84, 176])
    DAMM_REMOVE_LIQUIDITY: Final[bytes] = bytes([133, 109, 44, 179, 56, 238, 114, 33])

    DAMM_V2_INITIALIZE: Final[bytes] = bytes([95, 180, 10, 172, 84, 174, 232, 40])
    DAMM_V2_ADD_LIQUIDITY: Final[bytes] = bytes([181, 157, 89, 67, 143, 182, 52, 72])
    DAMM_V2_REMOVE_LIQUIDITY: Final[bytes] = bytes([80, 85, 209, 72, 24, 206, 177, 108])


DLMM_POOL_ACCOUNT = 0
DAMM_POOL_ACCOUNT = 0
DAMM_V2_POOL_ACCOUNT = 1
