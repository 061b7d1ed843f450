"""Relay engine: ledger job events -> secure training -> on-chain completion"""

__version__ = "0.1.0"
