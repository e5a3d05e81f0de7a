# tests/test_eip712.py
from __future__ import annotations

import hashlib

import pytest

from tecra.crypto.eip712 import (
    DOMAIN_TYPEHASH,
    PERMIT_TYPEHASH,
    PermitDomain,
    PermitMessage,
    domain_separator,
    permit_digest,
    permit_struct_hash,
    typed_data_digest,
)
from tecra.crypto.hashing import encode_address, encode_uint256, keccak256
from tecra.crypto.sig import address_of, recover_signer, sign_digest


def test_keccak_is_not_sha3() -> None:
    assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"


def test_typehashes() -> None:
    assert DOMAIN_TYPEHASH.hex() == "8b73c3c69bb8fe3d512ecc4cf759cc79239f7b179b0ffacaa9a75d522b39400f"
    assert PERMIT_TYPEHASH.hex() == "6e71edae12b1b97f4d1f60370fef10105fa2faae0126114a169c64845d6126c9"


def test_domain_separator_matches_eip712_example() -> None:
    domain = PermitDomain(
        name="Ether Mail",
        chain_id=1,
        verifying_contract="0xcccccccccccccccccccccccccccccccccccccccc",
    )
    assert domain_separator(domain).hex() == "f2cee375fa42b42143804025fc449deafd50cc031ca257e0b194a650a912090f"


def test_token_domain_separator_is_fixed(token) -> None:
    expected = domain_separator(PermitDomain(name="TecraCoin", chain_id=1, verifying_contract=token.address))
    assert token.domain_separator() == expected
    assert len(expected) == 32


def test_domain_separator_rebuilds_from_public_reads(token) -> None:
    domain = PermitDomain(name=token.name(), chain_id=token.chain_id(), verifying_contract=token.address)
    assert domain_separator(domain) == token.domain_separator()


def test_permit_digest_layout() -> None:
    sep = b"\x01" * 32
    msg = PermitMessage(owner="0x" + "aa" * 20, spender="0x" + "bb" * 20, value=5, nonce=0, deadline=10)
    struct_hash = keccak256(
        PERMIT_TYPEHASH
        + encode_address(msg.owner)
        + encode_address(msg.spender)
        + encode_uint256(5)
        + encode_uint256(0)
        + encode_uint256(10)
    )
    assert permit_struct_hash(msg) == struct_hash
    assert permit_digest(sep, msg) == keccak256(b"\x19\x01" + sep + struct_hash)
    assert typed_data_digest(sep, struct_hash) == permit_digest(sep, msg)


def test_injected_hasher_is_used() -> None:
    def sha(b: bytes) -> bytes:
        return hashlib.sha256(b).digest()

    domain = PermitDomain(name="TecraCoin", chain_id=5, verifying_contract="0x" + "11" * 20)
    assert domain_separator(domain, hasher=sha) != domain_separator(domain)


def test_encode_uint256_bounds() -> None:
    with pytest.raises(ValueError):
        encode_uint256(-1)
    with pytest.raises(ValueError):
        encode_uint256(2**256)


def test_sign_and_recover() -> None:
    pk = (1).to_bytes(32, "big")
    assert address_of(pk) == "0x7e5f4552091a69125d5dfcb7b8c2659029395bdf"

    digest = keccak256(b"tecra")
    sig = sign_digest(digest, pk)
    assert len(sig) == 65 and sig[64] in (27, 28)
    assert recover_signer(digest, sig) == address_of(pk)


def test_recover_rejects_bad_digest_length() -> None:
    with pytest.raises(ValueError):
        recover_signer(b"\x00" * 31, b"\x00" * 65)
