# src/tecra/crypto/sig.py
from __future__ import annotations

import base64
from typing import Callable, Tuple, Union

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

# secp256k1 group order
SECP256K1_N: int = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_HALF_N: int = SECP256K1_N // 2

SignatureLike = Union[bytes, bytearray, str]

# recover(digest, signature) -> lower-case 0x address
Recoverer = Callable[[bytes, bytes], str]


def _decode_bytes(s: str) -> bytes:
    s = s.strip()
    if not s:
        raise ValueError("empty string")
    # hex (with or without 0x)
    try:
        return bytes.fromhex(s[2:] if s.lower().startswith("0x") else s)
    except ValueError:
        pass
    # base64 / base64url
    try:
        padding = "=" * (-len(s) % 4)
        s2 = (s + padding).replace("-", "+").replace("_", "/")
        return base64.b64decode(s2, validate=True)
    except Exception as e:
        raise ValueError("not hex or base64") from e


def decode_signature(sig: SignatureLike) -> bytes:
    """Return the 65-byte r || s || v form of a signature."""
    raw = bytes(sig) if isinstance(sig, (bytes, bytearray)) else _decode_bytes(str(sig))
    if len(raw) != 65:
        raise ValueError(f"signature must be 65 bytes (got {len(raw)})")
    return raw


def split_signature(sig: SignatureLike) -> Tuple[int, bytes, bytes]:
    """Split into (v, r, s) with v normalized to 27/28."""
    raw = decode_signature(sig)
    v = raw[64]
    if v in (0, 1):
        v += 27
    return v, raw[:32], raw[32:64]


def join_signature(v: int, r: Union[bytes, int], s: Union[bytes, int]) -> bytes:
    """Build r || s || v from the components an on-chain permit call receives."""
    rb = r.to_bytes(32, "big") if isinstance(r, int) else bytes(r)
    sb = s.to_bytes(32, "big") if isinstance(s, int) else bytes(s)
    if len(rb) != 32 or len(sb) != 32:
        raise ValueError("r and s must be 32 bytes")
    if not 0 <= int(v) <= 255:
        raise ValueError(f"v out of range: {v}")
    return rb + sb + bytes([int(v)])


def recover_signer(digest: bytes, signature: bytes) -> str:
    """Recover the signing address of a 32-byte digest.

    Rejects malleable signatures (s in the upper half order) and any v other
    than 27/28 (or 0/1). Raises ValueError on every malformed input.
    """
    if len(digest) != 32:
        raise ValueError("digest must be 32 bytes")
    v, r_b, s_b = split_signature(signature)
    if v not in (27, 28):
        raise ValueError(f"invalid signature 'v' value: {v}")
    r = int.from_bytes(r_b, "big")
    s = int.from_bytes(s_b, "big")
    if s > _HALF_N:
        raise ValueError("invalid signature 's' value")
    if r == 0 or s == 0:
        raise ValueError("invalid signature 'r'/'s' value")
    try:
        pub = keys.Signature(vrs=(v - 27, r, s)).recover_public_key_from_msg_hash(digest)
    except (BadSignature, ValidationError) as e:
        raise ValueError("signature recovery failed") from e
    return "0x" + pub.to_canonical_address().hex()


def address_of(privkey: bytes) -> str:
    return "0x" + keys.PrivateKey(bytes(privkey)).public_key.to_canonical_address().hex()


def sign_digest(digest: bytes, privkey: bytes) -> bytes:
    """Sign a 32-byte digest; returns r || s || v with v in {27, 28}."""
    if len(digest) != 32:
        raise ValueError("digest must be 32 bytes")
    sig = keys.PrivateKey(bytes(privkey)).sign_msg_hash(digest)
    return join_signature(sig.v + 27, sig.r, sig.s)


__all__ = [
    "SECP256K1_N",
    "Recoverer",
    "SignatureLike",
    "decode_signature",
    "split_signature",
    "join_signature",
    "recover_signer",
    "address_of",
    "sign_digest",
]
