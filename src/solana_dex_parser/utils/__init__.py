"""Utils for the DEX parser."""

from .discriminators import (
    ANCHOR_EVENT_TAG,
    cpi_event_discriminator,
    event_discriminator,
    instruction_discriminator,
)
from .logger import get_logger, setup_console_logging, setup_file_logging, signature_context
from .token_math import checked_u64, to_ui_amount

__all__ = [
    'ANCHOR_EVENT_TAG',
    'cpi_event_discriminator',
    'event_discriminator',
    'instruction_discriminator',
    'get_logger',
    'setup_console_logging',
    'setup_file_logging',
    'signature_context',
    'checked_u64',
    'to_ui_amount',
]
