from __future__ import annotations

"""Input schemas for relayed calls.

A permit arrives from an untrusted relayer, so its shape is checked before
any ledger logic runs. Semantic checks (deadline, nonce, signer) stay in
tecra.runtime.permit.
"""

from typing import Any, Dict, Union

from eth_utils import is_hex_address, to_normalized_address
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tecra.crypto.sig import decode_signature
from tecra.ledger.constants import UINT256_MAX
from tecra.runtime.errors import InvalidAddress, InvalidAmount, InvalidSignature, LedgerError

Json = Dict[str, Any]


class _StrictModel(BaseModel):
    """Strict model: reject unknown keys."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class PermitRequest(_StrictModel):
    owner: str = Field(..., description="Token holder granting the allowance")
    spender: str = Field(..., description="Account receiving the allowance")
    value: int = Field(..., ge=0, le=UINT256_MAX, strict=True)
    deadline: int = Field(..., ge=0, le=UINT256_MAX, strict=True)
    signature: bytes = Field(..., description="65-byte r || s || v")

    @field_validator("owner", "spender")
    @classmethod
    def _address(cls, v: str) -> str:
        if not is_hex_address(v):
            raise ValueError("not a 20-byte hex address")
        return to_normalized_address(v)

    @field_validator("signature", mode="before")
    @classmethod
    def _signature(cls, v: Union[bytes, bytearray, str]) -> bytes:
        if not isinstance(v, (bytes, bytearray, str)):
            raise ValueError("signature must be bytes or an encoded string")
        return decode_signature(v)


_FIELD_ERRORS = {
    "owner": InvalidAddress,
    "spender": InvalidAddress,
    "value": InvalidAmount,
    "deadline": InvalidAmount,
    "signature": InvalidSignature,
}


def _ledger_error_from(ve: ValidationError) -> LedgerError:
    errors = ve.errors()
    first = errors[0] if errors else {}
    loc = first.get("loc") or ("",)
    field = str(loc[0])
    cls = _FIELD_ERRORS.get(field, InvalidAmount)
    details: Json = {"field": field, "error": str(first.get("msg") or "")}
    return cls(details=details)


def parse_permit_request(**raw: Any) -> PermitRequest:
    """Validate permit inputs; shape errors surface as the matching LedgerError."""
    try:
        return PermitRequest.model_validate(raw)
    except ValidationError as ve:
        raise _ledger_error_from(ve) from ve


__all__ = ["PermitRequest", "parse_permit_request"]
