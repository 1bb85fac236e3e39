"""
Meteora platform exports.

DLMM, DAMM and DAMM v2 swaps are resolved from token transfers; liquidity
instructions are reported separately from trades.
"""

from solana_dex_parser.core.models import FragmentKind
from solana_dex_parser.interfaces.core import DexFamily
from solana_dex_parser.platforms.amm import AmmProgram, TransferBasedPlatform, anchor_swaps

from .addresses import (
    DAMM_POOL_ACCOUNT,
    DAMM_V2_POOL_ACCOUNT,
    DLMM_POOL_ACCOUNT,
    MeteoraAddresses,
    MeteoraDiscriminators,
)

ADD = FragmentKind.LIQUIDITY_ADD
REMOVE = FragmentKind.LIQUIDITY_REMOVE


class MeteoraPlatform(TransferBasedPlatform):
    """Registers Meteora DLMM, DAMM and DAMM v2."""

    PROGRAMS = (
        AmmProgram(
            program_id=MeteoraAddresses.DLMM_PROGRAM,
            name="MeteoraDLMM",
            pool_position=DLMM_POOL_ACCOUNT,
            swaps=anchor_swaps(
                "swap",
                "swap_exact_out",
                "swap_with_price_impact",
                "swap2",
                "swap_exact_out2",
                "swap_with_price_impact2",
            ),
            liquidity={
                "add_liquidity": (MeteoraDiscriminators.DLMM_ADD_LIQUIDITY, ADD),
                "remove_liquidity": (MeteoraDiscriminators.DLMM_REMOVE_LIQUIDITY, REMOVE),
            },
        ),
        AmmProgram(
            program_id=MeteoraAddresses.DAMM_PROGRAM,
            name="MeteoraDamm",
            pool_position=DAMM_POOL_ACCOUNT,
            swaps=anchor_swaps("swap"),
            liquidity={
                "initialize_permissionless_pool": (MeteoraDiscriminators.DAMM_CREATE, ADD),
                "add_balance_liquidity": (MeteoraDiscriminators.DAMM_ADD_LIQUIDITY, ADD),
                "remove_balance_liquidity": (MeteoraDiscriminators.DAMM_REMOVE_LIQUIDITY, REMOVE),
            },
        ),
        AmmProgram(
            program_id=MeteoraAddresses.DAMM_V2_PROGRAM,
            name="MeteoraDammV2",
            pool_position=DAMM_V2_POOL_ACCOUNT,
            swaps=anchor_swaps("swap", "swap2"),
            liquidity={
                "initialize_pool": (MeteoraDiscriminators.DAMM_V2_INITIALIZE, ADD),
                "add_liquidity": (MeteoraDiscriminators.DAMM_V2_ADD_LIQUIDITY, ADD),
                "remove_liquidity": (MeteoraDiscriminators.DAMM_V2_REMOVE_LIQUIDITY, REMOVE),
            },
        ),
    )

    @property
    def family(self) -> DexFamily:
        return DexFamily.METEORA


__all__ = ["MeteoraAddresses", "MeteoraDiscriminators", "MeteoraPlatform"]
