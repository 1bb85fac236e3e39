"""Token math utilities - raw/UI amount conversion and range guards."""

U64_MAX = (1 << 64) - 1


def to_ui_amount(amount, decimals):
    if decimals <= 0:
        return float(amount)
    return amount / (10 ** decimals)


def is_u64(value):
    return isinstance(value, int) and 0 <= value <= U64_MAX


def checked_u64(value, label="amount"):
    """Return ``value`` if it fits the engine's u64 amount type."""
    from solana_dex_parser.core.errors import DecodeError

    if not is_u64(value):
        raise DecodeError(f"{label} {value!r} is not representable as u64")
    return value
