# src/tecra/runtime/errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

Json = Dict[str, Any]


@dataclass
class LedgerError(Exception):
    """Canonical error type for every rejected ledger call.

    `code` is a stable machine key; `reason` is the human-readable revert string
    that off-chain integrators match on. Neither may change between releases.
    """

    code: str
    reason: str
    details: Optional[Json] = None

    def __str__(self) -> str:  # pragma: no cover
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


class Unauthorized(LedgerError):
    def __init__(self, reason: str = "Unauthorized", details: Optional[Json] = None) -> None:
        super().__init__("unauthorized", reason, details)


class Paused(LedgerError):
    def __init__(self, reason: str = "Contract is paused", details: Optional[Json] = None) -> None:
        super().__init__("paused", reason, details)


class Blacklisted(LedgerError):
    def __init__(self, reason: str = "Address on blacklist", details: Optional[Json] = None) -> None:
        super().__init__("blacklisted", reason, details)


class NotBlacklisted(LedgerError):
    def __init__(self, reason: str = "Address not on blacklist", details: Optional[Json] = None) -> None:
        super().__init__("not_blacklisted", reason, details)


class InsufficientBalance(LedgerError):
    def __init__(self, reason: str = "Balance too low", details: Optional[Json] = None) -> None:
        super().__init__("insufficient_balance", reason, details)


class InsufficientAllowance(LedgerError):
    def __init__(self, reason: str = "Allowance too low", details: Optional[Json] = None) -> None:
        super().__init__("insufficient_allowance", reason, details)


class SupplyCapExceeded(LedgerError):
    def __init__(self, reason: str = "You can not mine that much", details: Optional[Json] = None) -> None:
        super().__init__("supply_cap_exceeded", reason, details)


class LengthMismatch(LedgerError):
    def __init__(self, reason: str = "Data size mismatch", details: Optional[Json] = None) -> None:
        super().__init__("length_mismatch", reason, details)


class InvalidSignature(LedgerError):
    def __init__(self, reason: str = "permit: INVALID_SIGNATURE", details: Optional[Json] = None) -> None:
        super().__init__("invalid_signature", reason, details)


class ExpiredPermit(LedgerError):
    def __init__(self, reason: str = "permit: EXPIRED", details: Optional[Json] = None) -> None:
        super().__init__("expired_permit", reason, details)


class NotPendingOwner(LedgerError):
    def __init__(self, reason: str = "Only pending owner", details: Optional[Json] = None) -> None:
        super().__init__("not_pending_owner", reason, details)


class AlreadyDeprecated(LedgerError):
    def __init__(self, reason: str = "Already upgraded", details: Optional[Json] = None) -> None:
        super().__init__("already_deprecated", reason, details)


class Deprecated(LedgerError):
    def __init__(self, reason: str = "Contract is deprecated", details: Optional[Json] = None) -> None:
        super().__init__("deprecated", reason, details)


class SuccessorUnavailable(LedgerError):
    def __init__(self, reason: str = "Successor not attached", details: Optional[Json] = None) -> None:
        super().__init__("successor_unavailable", reason, details)


class InvalidAddress(LedgerError):
    def __init__(self, reason: str = "Invalid address", details: Optional[Json] = None) -> None:
        super().__init__("invalid_address", reason, details)


class InvalidAmount(LedgerError):
    def __init__(self, reason: str = "Invalid amount", details: Optional[Json] = None) -> None:
        super().__init__("invalid_amount", reason, details)


class Reentrancy(LedgerError):
    def __init__(self, reason: str = "Reentrant call", details: Optional[Json] = None) -> None:
        super().__init__("reentrancy", reason, details)


class ForeignTransferFailed(LedgerError):
    def __init__(self, reason: str = "Foreign transfer failed", details: Optional[Json] = None) -> None:
        super().__init__("foreign_transfer_failed", reason, details)


__all__ = [
    "Json",
    "LedgerError",
    "Unauthorized",
    "Paused",
    "Blacklisted",
    "NotBlacklisted",
    "InsufficientBalance",
    "InsufficientAllowance",
    "SupplyCapExceeded",
    "LengthMismatch",
    "InvalidSignature",
    "ExpiredPermit",
    "NotPendingOwner",
    "AlreadyDeprecated",
    "Deprecated",
    "SuccessorUnavailable",
    "InvalidAddress",
    "InvalidAmount",
    "Reentrancy",
    "ForeignTransferFailed",
]
