# src/tecra/__init__.py
"""
TecraCoin (TCR): permissioned fungible-asset ledger.

  - tecra.ledger: constants, addresses, role registry, ledger state
  - tecra.crypto: keccak / EIP-712 typed-data hashing / secp256k1 recovery
  - tecra.runtime: state transitions and the TecraToken entry point
"""

from __future__ import annotations
