"""Decoder for INGICS iBS beacon advertisements."""

__version__ = "0.1.0"
