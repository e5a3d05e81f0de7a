# src/tecra/runtime/__init__.py
"""
TecraCoin ledger runtime.

  - errors: stable error taxonomy (LedgerError + subclasses)
  - events: notification shapes (Transfer, Approval, ...)
  - context: CallContext (authenticated caller + time) and Receipt
  - core / permit / bulk / upgrade / sweep: the state transitions
  - schema: pydantic input models for relayed calls
  - token: TecraToken, the public entry point that wires them together
  - config / store / structured_logging / metrics: operator plumbing
"""

from __future__ import annotations

__all__ = [
    "errors",
    "events",
    "context",
    "core",
    "permit",
    "bulk",
    "upgrade",
    "sweep",
    "schema",
    "token",
    "config",
    "store",
    "structured_logging",
    "metrics",
]
