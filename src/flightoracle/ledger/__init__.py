"""
FlightOracle Ledger Collaborator

The ledger owns policies and persists settled decisions. This package only
reads policies and hands decisions over; it never builds transactions.
"""
from __future__ import annotations

from .base import LedgerAck, LedgerClient
from .http import HttpLedgerClient
from .memory import InMemoryLedger

__all__ = [
    "HttpLedgerClient",
    "InMemoryLedger",
    "LedgerAck",
    "LedgerClient",
]
