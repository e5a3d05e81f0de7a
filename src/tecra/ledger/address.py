# src/tecra/ledger/address.py
from __future__ import annotations

from typing import Any

from eth_utils import is_hex_address, to_normalized_address

from tecra.ledger.constants import ZERO_ADDRESS
from tecra.runtime.errors import InvalidAddress


def normalize_address(v: Any, *, field: str = "address") -> str:
    """Return the lower-case 0x form of a 20-byte hex address.

    Raises InvalidAddress for anything that is not a hex address.
    """
    if isinstance(v, (bytes, bytearray)) and len(v) == 20:
        v = "0x" + bytes(v).hex()
    if not isinstance(v, str) or not is_hex_address(v.strip()):
        raise InvalidAddress(details={"field": field, "value": repr(v)})
    return to_normalized_address(v.strip())


def is_zero_address(addr: str) -> bool:
    return addr == ZERO_ADDRESS


def require_non_zero(addr: str, *, field: str) -> str:
    if is_zero_address(addr):
        raise InvalidAddress(f"{field} is the zero address", {"field": field})
    return addr


__all__ = ["normalize_address", "is_zero_address", "require_non_zero"]
