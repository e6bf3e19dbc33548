"""Enrich bank OFX exports with NPP/OSKO payment references."""

__version__ = "0.1.0"
