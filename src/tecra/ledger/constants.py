# src/tecra/ledger/constants.py
from __future__ import annotations

"""TecraCoin monetary and signing constants.

- Fixed supply: 21,000,000 TCR, divisible to 1e-8
- Permit domain version: "1"
"""

TOKEN_NAME: str = "TecraCoin"
TOKEN_SYMBOL: str = "TCR"

# Monetary precision (1 TCR = 1e-8 units)
COIN_DECIMALS: int = 8
COIN: int = 10**COIN_DECIMALS

# Supply cap: 21,000,000 TCR
MAX_SUPPLY_TCR: int = 21_000_000
MAX_SUPPLY: int = MAX_SUPPLY_TCR * COIN

# Amounts are uint256 on the wire
UINT256_MAX: int = 2**256 - 1

ZERO_ADDRESS: str = "0x" + "0" * 40

PERMIT_VERSION: str = "1"
