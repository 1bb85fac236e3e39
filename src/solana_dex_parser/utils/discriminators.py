"""Anchor discriminator helpers."""

import hashlib

# Prefix Anchor puts in front of events logged through a self-CPI (emit_cpi!)
ANCHOR_EVENT_TAG = bytes.fromhex("e445a52e51cb9a1d")


def instruction_discriminator(instruction_name: str) -> bytes:
    """Compute instruction discriminator using Anchor convention.

    Args:
        instruction_name: Name of the instruction (snake_case)

    Returns:
        8-byte discriminator
    """
    preimage = f"global:{instruction_name}"
    return hashlib.sha256(preimage.encode()).digest()[:8]


def event_discriminator(event_name: str) -> bytes:
    """8-byte discriminator of an Anchor event struct (CamelCase name)."""
    return hashlib.sha256(f"event:{event_name}".encode()).digest()[:8]


def cpi_event_discriminator(event_name: str) -> bytes:
    """16-byte prefix of an event emitted as inner instruction data."""
    return ANCHOR_EVENT_TAG + event_discriminator(event_name)
