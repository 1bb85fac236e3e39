"""
Jupiter aggregator addresses and discriminators.

- V6 aggregator: JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4
- Every routed leg logs a ``SwapEvent`` (amm, input mint/amount,
  output mint/amount) through an Anchor self-CPI
- DCA, limit order and value-averaging programs fill orders by calling V6
"""

from dataclasses import dataclass
from typing import Final

from solders.pubkey import Pubkey

from solana_dex_parser.core.pubkeys import JUPITER_DCA_PROGRAM
from solana_dex_parser.utils.discriminators import ANCHOR_EVENT_TAG


@dataclass
class JupiterAddresses:
    """Jupiter program addresses."""

    PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4"
    )
    DCA_PROGRAM: Final[Pubkey] = JUPITER_DCA_PROGRAM
    LIMIT_ORDER_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "jupoNjAxXgZ4rjzxzPMP4oxduvQsQtZzyknqvzYNrNu"
    )
    LIMIT_ORDER_V2_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "j1o2qRpjcyUwEvwtcfhEQefh773ZgjxcVRry7LDqg5X"
    )
    VALUE_AVERAGE_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "VALaaymxQh2mNy2trH9jUqHT1mTow76wpTcGmSWSwJe"
    )


class JupiterDiscriminators:
    SWAP_EVENT: Final[bytes] = ANCHOR_EVENT_TAG + bytes([64, 198, 205, 232, 38, 8, 113, 226])


ROUTE_INSTRUCTIONS = (
    "route",
    "route_with_token_ledger",
    "exact_out_route",
    "shared_accounts_route",
    "shared_accounts_route_with_token_ledger",
    "shared_accounts_exact_out_route",
)

# Order programs that execute through the aggregator: (program, name)
ORDER_PROGRAMS = (
    (JupiterAddresses.DCA_PROGRAM, "JupiterDCA"),
    (JupiterAddresses.LIMIT_ORDER_PROGRAM, "JupiterLimit"),
    (JupiterAddresses.LIMIT_ORDER_V2_PROGRAM, "JupiterLimitV2"),
    (JupiterAddresses.VALUE_AVERAGE_PROGRAM, "JupiterVA"),
)
