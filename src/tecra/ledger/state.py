"""tecra.ledger.state

LedgerState: the complete mutable state of one TCR ledger instance, plus
JSON interop (for the snapshot store) and invariant validation.

Accounts are implicit: an address that was never touched reads as zero
balance, zero allowance, nonce 0 and not blacklisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Set

from tecra.ledger.constants import COIN_DECIMALS, MAX_SUPPLY, PERMIT_VERSION
from tecra.ledger.roles import RoleRegistry

Json = Dict[str, Any]

STATE_VERSION = 1


def _coerce_uint(v: Any, *, field: str) -> int:
    # bool is an int subclass; disallow it explicitly
    if isinstance(v, bool):
        raise ValueError(f"LedgerState schema error: field '{field}' must be int (got bool)")
    try:
        out = int(v)
    except Exception as e:
        raise ValueError(f"LedgerState schema error: field '{field}' must be int-coercible (got {type(v).__name__})") from e
    if out < 0:
        raise ValueError(f"LedgerState schema error: field '{field}' must be >= 0 (got {out})")
    return out


def _uint_map(v: Any, *, field: str) -> Dict[str, int]:
    if v is None:
        return {}
    if not isinstance(v, dict):
        raise ValueError(f"LedgerState schema error: field '{field}' must be dict (got {type(v).__name__})")
    return {str(k): _coerce_uint(x, field=f"{field}['{k}']") for k, x in v.items()}


@dataclass
class LedgerState:
    """Mutable ledger state. Only tecra.runtime mutates it, one call at a time."""

    address: str
    chain_id: int
    roles: RoleRegistry

    name: str = ""
    symbol: str = ""
    decimals: int = COIN_DECIMALS
    cap: int = MAX_SUPPLY
    version: str = PERMIT_VERSION

    total_supply: int = 0
    paused: bool = False

    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[str, Dict[str, int]] = field(default_factory=dict)
    nonces: Dict[str, int] = field(default_factory=dict)
    blacklisted: Set[str] = field(default_factory=set)

    deprecated: bool = False
    successor: str = ""

    # ---- reads (zero defaults) ----

    def balance_of(self, account: str) -> int:
        return int(self.balances.get(account, 0))

    def allowance_of(self, owner: str, spender: str) -> int:
        return int(self.allowances.get(owner, {}).get(spender, 0))

    def nonce_of(self, account: str) -> int:
        return int(self.nonces.get(account, 0))

    def is_blacklisted(self, account: str) -> bool:
        return account in self.blacklisted

    # ---- single mutation points ----

    def set_balance(self, account: str, value: int) -> None:
        if value < 0:
            raise ValueError(f"negative balance for {account}")
        if value == 0:
            self.balances.pop(account, None)
        else:
            self.balances[account] = int(value)

    def set_allowance(self, owner: str, spender: str, value: int) -> None:
        if value < 0:
            raise ValueError(f"negative allowance for {owner}->{spender}")
        by_spender = self.allowances.setdefault(owner, {})
        by_spender[spender] = int(value)

    def bump_nonce(self, account: str) -> int:
        """Consume the current nonce of `account`; returns the consumed value."""
        cur = self.nonce_of(account)
        self.nonces[account] = cur + 1
        return cur

    def mark_deprecated(self, successor: str) -> None:
        if self.deprecated:
            raise ValueError("ledger is already deprecated")
        if not successor:
            raise ValueError("successor must be non-empty")
        self.deprecated = True
        self.successor = successor

    # ---- invariants ----

    def check_invariants(self) -> None:
        """Raise ValueError if a supply / upgrade invariant does not hold."""
        if self.total_supply > self.cap:
            raise ValueError(f"total_supply {self.total_supply} exceeds cap {self.cap}")
        held = sum(self.balances.values())
        if held != self.total_supply:
            raise ValueError(f"sum(balances)={held} != total_supply={self.total_supply}")
        if bool(self.successor) != bool(self.deprecated):
            raise ValueError("successor must be set iff deprecated")

    # ---- JSON interop ----

    def to_dict(self) -> Json:
        return {
            "state_version": STATE_VERSION,
            "address": self.address,
            "chain_id": int(self.chain_id),
            "name": self.name,
            "symbol": self.symbol,
            "decimals": int(self.decimals),
            "cap": int(self.cap),
            "version": self.version,
            "total_supply": int(self.total_supply),
            "paused": bool(self.paused),
            "balances": dict(sorted(self.balances.items())),
            "allowances": {o: dict(sorted(s.items())) for o, s in sorted(self.allowances.items())},
            "nonces": dict(sorted(self.nonces.items())),
            "blacklisted": sorted(self.blacklisted),
            "roles": self.roles.to_dict(),
            "deprecated": bool(self.deprecated),
            "successor": self.successor,
        }

    @classmethod
    def from_dict(cls, d: Any) -> "LedgerState":
        if not isinstance(d, dict):
            raise ValueError(f"LedgerState schema error: snapshot must be dict (got {type(d).__name__})")

        v = _coerce_uint(d.get("state_version", 0), field="state_version")
        if v != STATE_VERSION:
            raise ValueError(f"LedgerState schema error: state_version={v} != {STATE_VERSION}")

        allowances_raw = d.get("allowances") or {}
        if not isinstance(allowances_raw, dict):
            raise ValueError("LedgerState schema error: field 'allowances' must be dict")

        st = cls(
            address=str(d.get("address") or ""),
            chain_id=_coerce_uint(d.get("chain_id", 0), field="chain_id"),
            roles=RoleRegistry.from_dict(d.get("roles")),
            name=str(d.get("name") or ""),
            symbol=str(d.get("symbol") or ""),
            decimals=_coerce_uint(d.get("decimals", COIN_DECIMALS), field="decimals"),
            cap=_coerce_uint(d.get("cap", MAX_SUPPLY), field="cap"),
            version=str(d.get("version") or PERMIT_VERSION),
            total_supply=_coerce_uint(d.get("total_supply", 0), field="total_supply"),
            paused=bool(d.get("paused", False)),
            balances=_uint_map(d.get("balances"), field="balances"),
            allowances={str(o): _uint_map(s, field=f"allowances['{o}']") for o, s in allowances_raw.items()},
            nonces=_uint_map(d.get("nonces"), field="nonces"),
            blacklisted={str(a) for a in (d.get("blacklisted") or [])},
            deprecated=bool(d.get("deprecated", False)),
            successor=str(d.get("successor") or ""),
        )
        st.check_invariants()
        return st


__all__ = ["LedgerState", "STATE_VERSION", "Json"]
