# src/tecra/runtime/context.py
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from tecra.runtime.events import Event

Json = Dict[str, Any]


def _now_s() -> int:
    return int(time.time())


@dataclass(frozen=True)
class CallContext:
    """Authenticated invocation context.

    The host tells the ledger who is calling and what time it is; the ledger
    never derives either on its own.
    """

    caller: str
    timestamp: int = field(default_factory=_now_s)


@dataclass(frozen=True)
class Receipt:
    """Outcome of one committed call.

    `events` are the notifications emitted by this call in order; `value` is the
    operation's return value (reads forwarded to a successor, swept amount, ...).
    `forwarded` is True when a successor ledger produced the result.
    """

    events: Tuple[Event, ...] = ()
    value: Any = None
    forwarded: bool = False

    def to_json(self) -> Json:
        return {
            "events": [e.to_json() for e in self.events],
            "value": self.value,
            "forwarded": bool(self.forwarded),
        }


__all__ = ["CallContext", "Receipt"]
