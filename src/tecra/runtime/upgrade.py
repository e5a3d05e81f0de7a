from __future__ import annotations

"""
Upgrade forwarder.

States: Active (initial) -> Deprecated (terminal). Once deprecated, the six
standard entry points are answered by the successor ledger and local balances,
allowances and supply are frozen.

Forwarding policy for everything else (decided here, enforced by TecraToken):
  - rejected with Deprecated: mint, burn_from, burn_black_funds, permit,
    bulk_transfer, bulk_transfer_from, pause, unpause, add_blacklist,
    remove_blacklist
  - still served locally: role-set management, ownership handoff, acquire,
    and the metadata reads (name, symbol, decimals, nonces, ...)
"""

from typing import Any, List, Protocol, runtime_checkable

from tecra.ledger.address import normalize_address, require_non_zero
from tecra.ledger.state import LedgerState
from tecra.runtime import events as ev
from tecra.runtime.context import Receipt
from tecra.runtime.errors import AlreadyDeprecated, Deprecated, InvalidAddress

FORWARDED_OPS = frozenset(
    {
        "transfer",
        "approve",
        "transfer_from",
        "balance_of",
        "allowance",
        "total_supply",
    }
)

FROZEN_OPS = frozenset(
    {
        "mint",
        "burn_from",
        "burn_black_funds",
        "permit",
        "bulk_transfer",
        "bulk_transfer_from",
        "pause",
        "unpause",
        "add_blacklist",
        "remove_blacklist",
    }
)


@runtime_checkable
class SuccessorLedger(Protocol):
    """What a successor must offer to receive legacy traffic.

    The *_by_legacy calls carry the original caller explicitly since the
    successor sees this ledger, not the end user, as its invoker.
    """

    address: str

    def transfer_by_legacy(self, sender: str, to: str, value: int) -> Receipt: ...

    def approve_by_legacy(self, sender: str, spender: str, value: int) -> Receipt: ...

    def transfer_from_by_legacy(self, sender: str, src: str, dst: str, value: int) -> Receipt: ...

    def balance_of(self, account: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def total_supply(self) -> int: ...


def successor_address(successor: Any) -> str:
    """Address of a usable successor; rejects objects that cannot take legacy calls."""
    addr = require_non_zero(normalize_address(getattr(successor, "address", None), field="successor"), field="successor")
    if not isinstance(successor, SuccessorLedger):
        raise InvalidAddress("successor does not implement SuccessorLedger", {"successor": addr})
    return addr


def upgrade(state: LedgerState, events: List[ev.Event], caller: str, successor: SuccessorLedger) -> str:
    """Deprecate in favour of `successor`. Returns its address."""
    state.roles.require_owner(caller)
    if state.deprecated:
        raise AlreadyDeprecated(details={"successor": state.successor})
    addr = successor_address(successor)
    if addr == state.address:
        raise InvalidAddress("successor is this ledger", {"successor": addr})
    state.mark_deprecated(addr)
    events.append(ev.Deprecated(addr))
    return addr


def require_active(state: LedgerState, op: str) -> None:
    if state.deprecated and op in FROZEN_OPS:
        raise Deprecated(details={"op": op, "successor": state.successor})


__all__ = ["SuccessorLedger", "FORWARDED_OPS", "FROZEN_OPS", "successor_address", "upgrade", "require_active"]
