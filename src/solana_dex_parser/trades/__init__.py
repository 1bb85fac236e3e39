"""Trade reconstruction: transfer inference, aggregation and the unknown-program fallback."""

from .aggregator import TradeAggregator, chain_legs, prefer_inner_legs, select_fragments, trade_type_for
from .fallback import UNKNOWN_VENUE, is_fallback_candidate, unknown_swap_fragment
from .inference import TransferInference, decode_token_transfer, leg_scope

__all__ = [
    "TradeAggregator",
    "TransferInference",
    "UNKNOWN_VENUE",
    "chain_legs",
    "decode_token_transfer",
    "is_fallback_candidate",
    "leg_scope",
    "prefer_inner_legs",
    "select_fragments",
    "trade_type_for",
    "unknown_swap_fragment",
]
