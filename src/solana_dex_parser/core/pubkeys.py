"""
System program addresses and well-known token mints.

Platform-specific program ids live next to each platform's decoder
(``platforms/<family>/addresses.py``).
"""

from dataclasses import dataclass
from typing import Final

from solders.pubkey import Pubkey

SOL_DECIMALS: Final[int] = 9


@dataclass
class SystemAddresses:
    """System-level Solana addresses."""

    SYSTEM_PROGRAM: Final[Pubkey] = Pubkey.from_string("11111111111111111111111111111111")
    TOKEN_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
    )
    TOKEN_2022_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
    )
    ASSOCIATED_TOKEN_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
    )
    COMPUTE_BUDGET_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "ComputeBudget111111111111111111111111111111"
    )
    SERUM_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "srmqPvymJeFKQ4zGQed1GFppgkRHL9kaELCbyksJtPX"
    )
    # pump.fun fee program, invoked alongside trades but never a venue itself
    PUMP_FEE_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "pfeeUxB6jkeY1Hxd7CsFCAjcbHA9rWtchMGdZ6VojVZ"
    )


class Tokens:
    """Well-known mints."""

    SOL: Final[Pubkey] = Pubkey.from_string("So11111111111111111111111111111111111111112")
    USDC: Final[Pubkey] = Pubkey.from_string("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v")
    USDT: Final[Pubkey] = Pubkey.from_string("Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB")
    USD1: Final[Pubkey] = Pubkey.from_string("USD1ttGY1N17NEEHLmELoaybftRBUSErhqYiQzvEmuB")
    USDG: Final[Pubkey] = Pubkey.from_string("2u1tszSeqZ3qBWF3uNGPFc8TzMk2tdiwknnRMWGWjGWH")
    PYUSD: Final[Pubkey] = Pubkey.from_string("2b1kV6DkPAnxd5ixfnxCpjxmKwqjjaYmCZfHsFu24GXo")
    EURC: Final[Pubkey] = Pubkey.from_string("HzwqbKZw8HxMN6bF2yFZNrht3c2iXXzpKcFu7uBEDKtr")
    USDY: Final[Pubkey] = Pubkey.from_string("A1KLoBrKBde8Ty9qtNQUtq3C2ortoC3u7twggz7sEto6")
    FDUSD: Final[Pubkey] = Pubkey.from_string("9zNQRsGLjNKwCUU5Gq5LR8beUCPzQMVMqKAi3SSZh54u")


# Quote-side stablecoins (used to decide BUY vs SELL)
STABLECOINS: frozenset[Pubkey] = frozenset({
    Tokens.USDC,
    Tokens.USDT,
    Tokens.USD1,
    Tokens.USDG,
    Tokens.PYUSD,
    Tokens.EURC,
    Tokens.USDY,
    Tokens.FDUSD,
})

KNOWN_DECIMALS: dict[Pubkey, int] = {
    Tokens.SOL: SOL_DECIMALS,
    **{mint: 6 for mint in STABLECOINS},
}

# Programs that are plumbing, never a trading venue, and never sent to the fallback
SYSTEM_PROGRAMS: frozenset[Pubkey] = frozenset({
    SystemAddresses.SYSTEM_PROGRAM,
    SystemAddresses.TOKEN_PROGRAM,
    SystemAddresses.TOKEN_2022_PROGRAM,
    SystemAddresses.ASSOCIATED_TOKEN_PROGRAM,
    SystemAddresses.COMPUTE_BUDGET_PROGRAM,
    SystemAddresses.SERUM_PROGRAM,
    SystemAddresses.PUMP_FEE_PROGRAM,
})

# Platform / referral fee wallets; transfers into them (or into accounts they own)
# are reported as the trade fee, not as swap amounts
FEE_ACCOUNTS: frozenset[Pubkey] = frozenset(Pubkey.from_string(address) for address in (
    "96gYZGLnJYVFmbjzopPSU6QiEV5fGqZNyN9nmNhvrZU5",
    "HFqU5x63VTqvQss8hp11i4wVV8bD44PvwucfZ2bU7gRe",
    "Cw8CFyM9FkoMi7K7Crf6HNQqf4uEMzpKw6QNghXLvLkY",
    "ADaUMid9yfUytqMBgopwjb2DTLSokTSzL1zt6iGPaS49",
    "DfXygSm4jCyNCybVYYK6DwvWqjKee8pbDmJGcLWNDXjh",
    "ADuUkR4vqLUMWXxW9gh6D6L8pMSawimctcNZ5pGwDcEt",
    "DttWaMuVvTiduZRnguLF7jNxTgiMBZ1hyAumKUiL2KRL",
    "3AVi9Tg9Uo68tJfuvoKvqKNWKkC5wPdSSdeBnizKZ6jT",
    "45ruCyfdRkWpRNGEqWzjCiXRHkZs8WXCLQ67Pnpye7Hp",
    "39azUYFWPz3VHgKCf3VChUwbpURdCHRxjWVowf5jUJjg",
    "FWsW1xNtWscwNmKv6wVsU1iTzRN6wmmk3MjxRP5tT7hz",
    "G5UZAVbAf46s7cKWoyKu8kYTip9DGTpbLZ2qa9Aq69dP",
    "7hTckgnGnLQR6sdH7YkqFTAA7VwTfYFaZ6EhEsU3saCX",
    "9rPYyANsfQZw3DnDmKE3YCQF5E8oD89UXoHn9JFEhJUz",
    "7VtfL8fvgNfhz17qKRMjzQEXgbdpnHHHQRh54R9jP2RJ",
    "AVmoTthdrX6tKt4nDjco2D775W2YK3sDhxPcMmzUAmTY",
    "62qc2CNXwrYqQScmEdiZFFAnJR262PxWEuNQtxfafNgV",
    "JCRGumoE9Qi5BBgULTgdgTLjSgkCMSbF62ZZfGs84JeU",
    "CebN5WGQ4jvEPvsVU4EoHEpgzq1VV7AbicfhtW4xC9iM",
    "AVUCZyuT35YSuj4RH7fwiyPu82Djn2Hfg7y2ND2XcnZH",
    "BUX7s2ef2htTGb2KKoPHWkmzxPj4nTWMWRgs5CSbQxf9",
    "CdQTNULjDiTsvyR5UKjYBMqWvYpxXj6HY4m6atm2hErk",
))

TOKEN_PROGRAMS: frozenset[Pubkey] = frozenset({
    SystemAddresses.TOKEN_PROGRAM,
    SystemAddresses.TOKEN_2022_PROGRAM,
})

# Keeper-signed programs: the user is at this account position, not the fee payer
JUPITER_DCA_PROGRAM: Final[Pubkey] = Pubkey.from_string(
    "DCA265Vj8a9CEuX1eb1LWRnDT7uK6q1xMipnNyatn23M"
)
DELEGATED_SIGNER_PROGRAMS: dict[Pubkey, int] = {
    JUPITER_DCA_PROGRAM: 2,
}
