from __future__ import annotations

"""EIP-712 typed-data hashing for Permit.

Everything here is a pure function over immutable inputs so that digests match
what off-chain signers (eth_signTypedData_v4) produce byte for byte:

  domainSeparator = H(abi.encode(DOMAIN_TYPEHASH, H(name), H(version), chainId, verifyingContract))
  structHash      = H(abi.encode(PERMIT_TYPEHASH, owner, spender, value, nonce, deadline))
  digest          = H(0x19 0x01 || domainSeparator || structHash)

`H` defaults to keccak256 but may be injected (test doubles, alternate chains).
"""

from dataclasses import dataclass

from tecra.crypto.hashing import Hasher, encode_address, encode_bytes32, encode_uint256, keccak256
from tecra.ledger.constants import PERMIT_VERSION

EIP712_DOMAIN_TYPE = "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
PERMIT_TYPE = "Permit(address owner,address spender,uint256 value,uint256 nonce,uint256 deadline)"

DOMAIN_TYPEHASH: bytes = keccak256(EIP712_DOMAIN_TYPE.encode("utf-8"))
PERMIT_TYPEHASH: bytes = keccak256(PERMIT_TYPE.encode("utf-8"))


@dataclass(frozen=True)
class PermitDomain:
    name: str
    chain_id: int
    verifying_contract: str
    version: str = PERMIT_VERSION


@dataclass(frozen=True)
class PermitMessage:
    owner: str
    spender: str
    value: int
    nonce: int
    deadline: int


def domain_separator(domain: PermitDomain, *, hasher: Hasher = keccak256) -> bytes:
    typehash = hasher(EIP712_DOMAIN_TYPE.encode("utf-8"))
    return hasher(
        typehash
        + hasher(domain.name.encode("utf-8"))
        + hasher(domain.version.encode("utf-8"))
        + encode_uint256(domain.chain_id)
        + encode_address(domain.verifying_contract)
    )


def permit_struct_hash(msg: PermitMessage, *, hasher: Hasher = keccak256) -> bytes:
    typehash = hasher(PERMIT_TYPE.encode("utf-8"))
    return hasher(
        typehash
        + encode_address(msg.owner)
        + encode_address(msg.spender)
        + encode_uint256(msg.value)
        + encode_uint256(msg.nonce)
        + encode_uint256(msg.deadline)
    )


def typed_data_digest(separator: bytes, struct_hash: bytes, *, hasher: Hasher = keccak256) -> bytes:
    return hasher(b"\x19\x01" + encode_bytes32(separator) + encode_bytes32(struct_hash))


def permit_digest(separator: bytes, msg: PermitMessage, *, hasher: Hasher = keccak256) -> bytes:
    return typed_data_digest(separator, permit_struct_hash(msg, hasher=hasher), hasher=hasher)


__all__ = [
    "EIP712_DOMAIN_TYPE",
    "PERMIT_TYPE",
    "DOMAIN_TYPEHASH",
    "PERMIT_TYPEHASH",
    "PermitDomain",
    "PermitMessage",
    "domain_separator",
    "permit_struct_hash",
    "typed_data_digest",
    "permit_digest",
]
