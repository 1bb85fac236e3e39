"""Interfaces for platform decoders."""
