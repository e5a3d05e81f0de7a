from __future__ import annotations

"""
Role registry for the TCR ledger.

Roles:
- owner (single address) with a two-step handoff through pending_owner
- minters / pausers / blacklisters (membership sets, no ordering)

Role membership is independent of ownership: the owner holds no role unless it
adds itself. All checks are plain membership tests; callers pass the
authenticated caller address explicitly.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

from tecra.runtime.errors import NotPendingOwner, Unauthorized

Json = Dict[str, Any]

ROLE_MINTER = "minter"
ROLE_PAUSER = "pauser"
ROLE_BLACKLISTER = "blacklister"

ROLE_NAMES = (ROLE_MINTER, ROLE_PAUSER, ROLE_BLACKLISTER)

_DENY_REASON = {
    ROLE_MINTER: "Not a Minter",
    ROLE_PAUSER: "Not a Pauser",
    ROLE_BLACKLISTER: "Not a Blacklister",
}


def _as_set(v: Any) -> Set[str]:
    if isinstance(v, (list, tuple, set, frozenset)):
        return {str(x) for x in v if str(x).strip()}
    return set()


@dataclass
class RoleRegistry:
    owner: str
    pending_owner: str = ""
    minters: Set[str] = field(default_factory=set)
    pausers: Set[str] = field(default_factory=set)
    blacklisters: Set[str] = field(default_factory=set)

    def _members(self, role: str) -> Set[str]:
        if role == ROLE_MINTER:
            return self.minters
        if role == ROLE_PAUSER:
            return self.pausers
        if role == ROLE_BLACKLISTER:
            return self.blacklisters
        raise KeyError(f"unknown role: {role!r}")

    # ---- predicates ----

    def is_owner(self, account: str) -> bool:
        return bool(account) and account == self.owner

    def has_role(self, role: str, account: str) -> bool:
        return account in self._members(role)

    def require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            raise Unauthorized("Only owner", {"caller": caller})

    def require_role(self, role: str, caller: str) -> None:
        if not self.has_role(role, caller):
            raise Unauthorized(_DENY_REASON[role], {"caller": caller, "role": role})

    # ---- owner-managed membership ----

    def grant(self, caller: str, role: str, account: str) -> bool:
        """Add account to role. Returns False if it was already a member."""
        self.require_owner(caller)
        members = self._members(role)
        had = account in members
        members.add(account)
        return not had

    def revoke(self, caller: str, role: str, account: str) -> bool:
        """Remove account from role. Returns False if it was not a member."""
        self.require_owner(caller)
        members = self._members(role)
        had = account in members
        members.discard(account)
        return had

    # ---- two-step ownership ----

    def give_ownership(self, caller: str, candidate: str) -> None:
        self.require_owner(caller)
        self.pending_owner = candidate

    def accept_ownership(self, caller: str) -> str:
        """Promote the pending owner. Returns the previous owner."""
        if not self.pending_owner or caller != self.pending_owner:
            raise NotPendingOwner(details={"caller": caller})
        previous = self.owner
        self.owner = self.pending_owner
        self.pending_owner = ""
        return previous

    # ---- JSON interop ----

    def to_dict(self) -> Json:
        return {
            "owner": self.owner,
            "pending_owner": self.pending_owner,
            "minters": sorted(self.minters),
            "pausers": sorted(self.pausers),
            "blacklisters": sorted(self.blacklisters),
        }

    @classmethod
    def from_dict(cls, d: Any) -> "RoleRegistry":
        d = d if isinstance(d, dict) else {}
        return cls(
            owner=str(d.get("owner") or ""),
            pending_owner=str(d.get("pending_owner") or ""),
            minters=_as_set(d.get("minters")),
            pausers=_as_set(d.get("pausers")),
            blacklisters=_as_set(d.get("blacklisters")),
        )

    def members(self, role: str) -> List[str]:
        return sorted(self._members(role))


__all__ = [
    "RoleRegistry",
    "ROLE_MINTER",
    "ROLE_PAUSER",
    "ROLE_BLACKLISTER",
    "ROLE_NAMES",
]
