"""
Raydium platform exports.

All Raydium programs are transfer-based: swap amounts are recovered from
the token transfers the pool performs. Pool creation, deposits and
withdrawals are reported as liquidity events, never as trades.
"""

from solana_dex_parser.core.models import FragmentKind
from solana_dex_parser.interfaces.core import DexFamily
from solana_dex_parser.platforms.amm import (
    AmmProgram,
    TransferBasedPlatform,
    anchor_liquidity,
    anchor_swaps,
)

from .addresses import (
    AMM_POOL_ACCOUNT,
    CLMM_POOL_ACCOUNT,
    CPMM_POOL_ACCOUNT,
    RaydiumAddresses,
    RaydiumDiscriminators,
)

_AMM_SWAPS = {
    "swap_base_in": RaydiumDiscriminators.AMM_SWAP_BASE_IN,
    "swap_base_out": RaydiumDiscriminators.AMM_SWAP_BASE_OUT,
    "swap_base_in_v2": RaydiumDiscriminators.AMM_SWAP_BASE_IN_V2,
    "swap_base_out_v2": RaydiumDiscriminators.AMM_SWAP_BASE_OUT_V2,
}

_AMM_LIQUIDITY = {
    "initialize2": (RaydiumDiscriminators.AMM_INITIALIZE, FragmentKind.LIQUIDITY_ADD),
    "deposit": (RaydiumDiscriminators.AMM_DEPOSIT, FragmentKind.LIQUIDITY_ADD),
    "withdraw": (RaydiumDiscriminators.AMM_WITHDRAW, FragmentKind.LIQUIDITY_REMOVE),
}


class RaydiumPlatform(TransferBasedPlatform):
    """Registers Raydium AMM V4, AMM, CPMM, CLMM and the route program."""

    PROGRAMS = (
        AmmProgram(
            program_id=RaydiumAddresses.AMM_V4_PROGRAM,
            name="RaydiumV4",
            pool_position=AMM_POOL_ACCOUNT,
            swaps=_AMM_SWAPS,
            liquidity=_AMM_LIQUIDITY,
        ),
        AmmProgram(
            program_id=RaydiumAddresses.AMM_PROGRAM,
            name="RaydiumAMM",
            pool_position=AMM_POOL_ACCOUNT,
            swaps=_AMM_SWAPS,
            liquidity=_AMM_LIQUIDITY,
        ),
        AmmProgram(
            program_id=RaydiumAddresses.CPMM_PROGRAM,
            name="RaydiumCPMM",
            pool_position=CPMM_POOL_ACCOUNT,
            swaps=anchor_swaps("swap_base_input", "swap_base_output"),
            liquidity={
                "initialize": (RaydiumDiscriminators.CPMM_INITIALIZE, FragmentKind.LIQUIDITY_ADD),
                "deposit": (RaydiumDiscriminators.CPMM_DEPOSIT, FragmentKind.LIQUIDITY_ADD),
                "withdraw": (RaydiumDiscriminators.CPMM_WITHDRAW, FragmentKind.LIQUIDITY_REMOVE),
            },
        ),
        AmmProgram(
            program_id=RaydiumAddresses.CLMM_PROGRAM,
            name="RaydiumCL",
            pool_position=CLMM_POOL_ACCOUNT,
            swaps=anchor_swaps("swap", "swap_v2", "swap_router_base_in"),
            liquidity={
                **anchor_liquidity(
                    FragmentKind.LIQUIDITY_ADD,
                    "open_position_v2",
                    "open_position_with_token22_nft",
                    "increase_liquidity",
                    "increase_liquidity_v2",
                ),
                **anchor_liquidity(
                    FragmentKind.LIQUIDITY_REMOVE,
                    "decrease_liquidity",
                    "decrease_liquidity_v2",
                ),
            },
        ),
        # Router only: its hops are decoded from the CPIs above
        AmmProgram(
            program_id=RaydiumAddresses.ROUTE_PROGRAM,
            name="RaydiumRoute",
            pool_position=None,
            tags=("route",),
        ),
    )

    @property
    def family(self) -> DexFamily:
        return DexFamily.RAYDIUM


__all__ = [
    "RaydiumAddresses",
    "RaydiumDiscriminators",
    "RaydiumPlatform",
]
