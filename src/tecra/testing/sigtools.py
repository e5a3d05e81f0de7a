from __future__ import annotations

import hashlib
from typing import Tuple

from tecra.crypto.eip712 import PermitMessage, permit_digest
from tecra.crypto.sig import address_of, sign_digest


def _sha256(b: bytes) -> bytes:
    return hashlib.sha256(b).digest()


def deterministic_keypair(*, label: str) -> Tuple[str, bytes]:
    """Deterministically derive a secp256k1 keypair from a stable label.

    TEST ONLY.

    Returns:
      (address, private_key_bytes)
    """
    sk = _sha256(("tecra-test-secp256k1:" + (label or "")).encode("utf-8"))
    return address_of(sk), sk


def sign_permit(
    separator: bytes,
    *,
    privkey: bytes,
    owner: str,
    spender: str,
    value: int,
    nonce: int,
    deadline: int,
) -> bytes:
    """Return a 65-byte permit signature over the EIP-712 digest for `separator`."""
    msg = PermitMessage(owner=owner, spender=spender, value=int(value), nonce=int(nonce), deadline=int(deadline))
    return sign_digest(permit_digest(separator, msg), privkey)


__all__ = ["deterministic_keypair", "sign_permit"]
