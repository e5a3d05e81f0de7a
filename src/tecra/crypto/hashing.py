# src/tecra/crypto/hashing.py
from __future__ import annotations

from typing import Callable

from eth_utils import keccak

from tecra.ledger.constants import UINT256_MAX

Hasher = Callable[[bytes], bytes]


def keccak256(data: bytes) -> bytes:
    """Ethereum Keccak-256 (not NIST SHA3-256)."""
    return keccak(primitive=bytes(data))


def encode_uint256(value: int) -> bytes:
    v = int(value)
    if v < 0 or v > UINT256_MAX:
        raise ValueError(f"uint256 out of range: {value}")
    return v.to_bytes(32, "big")


def encode_address(addr: str) -> bytes:
    """ABI word for an address: 20 bytes left-padded to 32."""
    raw = bytes.fromhex(addr[2:] if addr.startswith("0x") else addr)
    if len(raw) != 20:
        raise ValueError(f"address must be 20 bytes: {addr!r}")
    return raw.rjust(32, b"\x00")


def encode_bytes32(b: bytes) -> bytes:
    if len(b) != 32:
        raise ValueError("bytes32 must be exactly 32 bytes")
    return bytes(b)


__all__ = ["Hasher", "keccak256", "encode_uint256", "encode_address", "encode_bytes32"]
