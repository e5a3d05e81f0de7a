from __future__ import annotations

"""Bulk transfers: the single-transfer primitives applied over a recipient list.

Each step goes through core.transfer / core.transfer_from, so every step
re-checks pause, blacklist, allowance and balance, and bulk_transfer_from emits
one Approval per recipient with the allowance shrinking step by step.
Atomicity of the batch is provided by the caller's working copy.
"""

from typing import List, Sequence, Union

from tecra.ledger.state import LedgerState
from tecra.runtime import core
from tecra.runtime import events as ev
from tecra.runtime.errors import InvalidAmount, LengthMismatch

Amounts = Union[int, Sequence[int]]


def expand_amounts(recipients: Sequence[str], amounts: Amounts) -> List[int]:
    """One amount per recipient: broadcast a single int, or require equal lengths."""
    if isinstance(amounts, int) and not isinstance(amounts, bool):
        return [amounts] * len(recipients)
    if isinstance(amounts, (str, bytes)) or not isinstance(amounts, Sequence):
        raise InvalidAmount(details={"field": "amounts", "value": repr(amounts)})
    if len(amounts) != len(recipients):
        raise LengthMismatch(details={"recipients": len(recipients), "amounts": len(amounts)})
    return list(amounts)


def bulk_transfer(
    state: LedgerState,
    events: List[ev.Event],
    caller: str,
    recipients: Sequence[str],
    amounts: Amounts,
) -> int:
    """Returns the total amount moved."""
    values = expand_amounts(recipients, amounts)
    for dst, amount in zip(recipients, values):
        core.transfer(state, events, caller, dst, amount)
    return sum(values)


def bulk_transfer_from(
    state: LedgerState,
    events: List[ev.Event],
    spender: str,
    src: str,
    recipients: Sequence[str],
    amounts: Amounts,
) -> int:
    """Returns the total amount moved."""
    values = expand_amounts(recipients, amounts)
    for dst, amount in zip(recipients, values):
        core.transfer_from(state, events, spender, src, dst, amount)
    return sum(values)


__all__ = ["Amounts", "expand_amounts", "bulk_transfer", "bulk_transfer_from"]
