"""Orca Whirlpool platform exports."""

from solana_dex_parser.core.models import FragmentKind
from solana_dex_parser.interfaces.core import DexFamily
from solana_dex_parser.platforms.amm import AmmProgram, TransferBasedPlatform, anchor_swaps

from .addresses import WHIRLPOOL_ACCOUNT, OrcaAddresses, OrcaDiscriminators


class OrcaPlatform(TransferBasedPlatform):
    """Registers the Whirlpool program."""

    PROGRAMS = (
        AmmProgram(
            program_id=OrcaAddresses.WHIRLPOOL_PROGRAM,
            name="Orca",
            pool_position=WHIRLPOOL_ACCOUNT,
            swaps=anchor_swaps("swap", "swap_v2", "two_hop_swap", "two_hop_swap_v2"),
            liquidity={
                "create": (OrcaDiscriminators.CREATE, FragmentKind.LIQUIDITY_ADD),
                "create_v2": (OrcaDiscriminators.CREATE_V2, FragmentKind.LIQUIDITY_ADD),
                "increase_liquidity": (
                    OrcaDiscriminators.INCREASE_LIQUIDITY, FragmentKind.LIQUIDITY_ADD,
                ),
                "increase_liquidity_v2": (
                    OrcaDiscriminators.INCREASE_LIQUIDITY_V2, FragmentKind.LIQUIDITY_ADD,
                ),
                "decrease_liquidity": (
                    OrcaDiscriminators.DECREASE_LIQUIDITY, FragmentKind.LIQUIDITY_REMOVE,
                ),
            },
        ),
    )

    @property
    def family(self) -> DexFamily:
        return DexFamily.ORCA


__all__ = ["OrcaAddresses", "OrcaDiscriminators", "OrcaPlatform"]
