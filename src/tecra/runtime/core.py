from __future__ import annotations

"""
Ledger core state transitions.

Every function here takes the working LedgerState plus the event list of the
current call, validates first and mutates second. None of them catches errors:
the caller (TecraToken) owns rollback, so a failure halfway through a bulk
operation discards the working copy as a whole.

Addresses passed in are already normalized.
"""

from typing import Any, List

from tecra.ledger.address import require_non_zero
from tecra.ledger.constants import UINT256_MAX, ZERO_ADDRESS
from tecra.ledger.roles import ROLE_BLACKLISTER, ROLE_MINTER, ROLE_PAUSER
from tecra.ledger.state import LedgerState
from tecra.runtime import events as ev
from tecra.runtime.errors import (
    Blacklisted,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    NotBlacklisted,
    Paused,
    SupplyCapExceeded,
)

Events = List[ev.Event]


def require_natural(value: Any, *, field: str = "amount") -> int:
    # bool is an int subclass; reject it with everything else that is not an int
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(details={"field": field, "value": repr(value)})
    if value < 0:
        raise InvalidAmount(details={"field": field, "value": value})
    return int(value)


def require_uint(value: Any, *, field: str = "amount") -> int:
    value = require_natural(value, field=field)
    if value > UINT256_MAX:
        raise InvalidAmount(details={"field": field, "value": value})
    return value


def _require_not_paused(state: LedgerState) -> None:
    if state.paused:
        raise Paused()


def _require_not_blacklisted(state: LedgerState, account: str) -> None:
    if state.is_blacklisted(account):
        raise Blacklisted(details={"account": account})


def _require_balance(state: LedgerState, account: str, amount: int) -> int:
    bal = state.balance_of(account)
    if bal < amount:
        raise InsufficientBalance(details={"account": account, "balance": bal, "amount": amount})
    return bal


def _require_allowance(state: LedgerState, owner: str, spender: str, amount: int) -> int:
    cur = state.allowance_of(owner, spender)
    if cur < amount:
        raise InsufficientAllowance(details={"owner": owner, "spender": spender, "allowance": cur, "amount": amount})
    return cur


def _move(state: LedgerState, events: Events, src: str, dst: str, amount: int) -> None:
    # caller has verified balance(src) >= amount
    state.set_balance(src, state.balance_of(src) - amount)
    state.set_balance(dst, state.balance_of(dst) + amount)
    events.append(ev.Transfer(src, dst, amount))


# ---------------------------------------------------------------------------
# Supply
# ---------------------------------------------------------------------------

def mint(state: LedgerState, events: Events, caller: str, to: str, amount: int) -> None:
    state.roles.require_role(ROLE_MINTER, caller)
    require_non_zero(to, field="to")
    amount = require_natural(amount)
    # any size above the cap is a cap violation, not a malformed amount
    if state.total_supply + amount > state.cap:
        raise SupplyCapExceeded(details={"total_supply": state.total_supply, "amount": amount, "cap": state.cap})

    state.total_supply += amount
    state.set_balance(to, state.balance_of(to) + amount)
    events.append(ev.Transfer(ZERO_ADDRESS, to, amount))


def burn_from(state: LedgerState, events: Events, spender: str, src: str, amount: int) -> None:
    amount = require_uint(amount)
    _require_not_paused(state)
    _require_not_blacklisted(state, src)
    allowance = _require_allowance(state, src, spender, amount)
    _require_balance(state, src, amount)

    state.set_allowance(src, spender, allowance - amount)
    events.append(ev.Approval(src, spender, allowance - amount))
    state.set_balance(src, state.balance_of(src) - amount)
    state.total_supply -= amount
    events.append(ev.Transfer(src, ZERO_ADDRESS, amount))


def burn_black_funds(state: LedgerState, events: Events, caller: str, account: str) -> int:
    """Destroy the entire balance of a blacklisted account. Returns the amount burned."""
    state.roles.require_owner(caller)
    if not state.is_blacklisted(account):
        raise NotBlacklisted(details={"account": account})

    amount = state.balance_of(account)
    state.set_balance(account, 0)
    state.total_supply -= amount
    events.append(ev.Transfer(account, ZERO_ADDRESS, amount))
    return amount


# ---------------------------------------------------------------------------
# Transfers / allowances
# ---------------------------------------------------------------------------

def transfer(state: LedgerState, events: Events, src: str, dst: str, amount: int) -> None:
    amount = require_uint(amount)
    require_non_zero(dst, field="to")
    _require_not_paused(state)
    _require_not_blacklisted(state, src)
    _require_balance(state, src, amount)

    _move(state, events, src, dst, amount)


def transfer_from(state: LedgerState, events: Events, spender: str, src: str, dst: str, amount: int) -> None:
    """Move `amount` from `src` to `dst`, consuming the allowance src granted to spender.

    Emits Transfer followed by an Approval carrying the remaining allowance.
    """
    amount = require_uint(amount)
    require_non_zero(dst, field="to")
    _require_not_paused(state)
    _require_not_blacklisted(state, src)
    allowance = _require_allowance(state, src, spender, amount)
    _require_balance(state, src, amount)

    _move(state, events, src, dst, amount)
    state.set_allowance(src, spender, allowance - amount)
    events.append(ev.Approval(src, spender, allowance - amount))


def approve(state: LedgerState, events: Events, owner: str, spender: str, amount: int) -> None:
    amount = require_uint(amount)
    require_non_zero(spender, field="spender")
    state.set_allowance(owner, spender, amount)
    events.append(ev.Approval(owner, spender, amount))


# ---------------------------------------------------------------------------
# Pause / blacklist
# ---------------------------------------------------------------------------

def pause(state: LedgerState, events: Events, caller: str) -> None:
    state.roles.require_role(ROLE_PAUSER, caller)
    state.paused = True
    events.append(ev.Paused(caller))


def unpause(state: LedgerState, events: Events, caller: str) -> None:
    state.roles.require_role(ROLE_PAUSER, caller)
    state.paused = False
    events.append(ev.Unpaused(caller))


def add_blacklist(state: LedgerState, events: Events, caller: str, account: str) -> None:
    state.roles.require_role(ROLE_BLACKLISTER, caller)
    state.blacklisted.add(account)
    events.append(ev.AddedToBlacklist(account))


def remove_blacklist(state: LedgerState, events: Events, caller: str, account: str) -> None:
    state.roles.require_role(ROLE_BLACKLISTER, caller)
    state.blacklisted.discard(account)
    events.append(ev.RemovedFromBlacklist(account))


__all__ = [
    "require_natural",
    "require_uint",
    "mint",
    "burn_from",
    "burn_black_funds",
    "transfer",
    "transfer_from",
    "approve",
    "pause",
    "unpause",
    "add_blacklist",
    "remove_blacklist",
]
