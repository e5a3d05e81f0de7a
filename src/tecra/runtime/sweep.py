from __future__ import annotations

"""Foreign asset sweep (acquire).

Tokens of some other ledger sent to this ledger's own address are otherwise
stuck; the owner can pull the whole balance out to themselves. This component
owns no numeric state: both steps are external interactions with the foreign
ledger, and TecraToken's reentrancy guard keeps them from interleaving with
any other call into this ledger.
"""

from typing import Any, Protocol, runtime_checkable

from tecra.ledger.state import LedgerState
from tecra.runtime import events as ev
from tecra.runtime.context import CallContext, Receipt
from tecra.runtime.errors import ForeignTransferFailed


@runtime_checkable
class ForeignLedger(Protocol):
    def balance_of(self, account: str) -> int: ...

    def transfer(self, ctx: CallContext, to: str, value: int) -> Any: ...


def acquire(state: LedgerState, caller: str, foreign: ForeignLedger, *, timestamp: int) -> Receipt:
    state.roles.require_owner(caller)
    owner = state.roles.owner

    amount = int(foreign.balance_of(state.address))
    result = foreign.transfer(CallContext(caller=state.address, timestamp=timestamp), owner, amount)
    if result is False:
        raise ForeignTransferFailed(details={"amount": amount, "to": owner})

    if isinstance(result, Receipt) and result.events:
        return Receipt(events=tuple(result.events), value=amount)
    return Receipt(events=(ev.Transfer(state.address, owner, amount),), value=amount)


__all__ = ["ForeignLedger", "acquire"]
