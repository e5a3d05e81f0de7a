# src/tecra/runtime/events.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Dict, Union

Json = Dict[str, Any]


@dataclass(frozen=True)
class _Event:
    event: ClassVar[str] = ""

    def to_json(self) -> Json:
        out: Json = {"event": self.event}
        out.update(asdict(self))
        return out


@dataclass(frozen=True)
class Transfer(_Event):
    event: ClassVar[str] = "Transfer"

    src: str
    dst: str
    value: int


@dataclass(frozen=True)
class Approval(_Event):
    event: ClassVar[str] = "Approval"

    owner: str
    spender: str
    value: int


@dataclass(frozen=True)
class AddedToBlacklist(_Event):
    event: ClassVar[str] = "AddedToBlacklist"

    account: str


@dataclass(frozen=True)
class RemovedFromBlacklist(_Event):
    event: ClassVar[str] = "RemovedFromBlacklist"

    account: str


@dataclass(frozen=True)
class Paused(_Event):
    event: ClassVar[str] = "Paused"

    account: str


@dataclass(frozen=True)
class Unpaused(_Event):
    event: ClassVar[str] = "Unpaused"

    account: str


@dataclass(frozen=True)
class OwnershipTransferred(_Event):
    event: ClassVar[str] = "OwnershipTransferred"

    previous_owner: str
    new_owner: str


@dataclass(frozen=True)
class Deprecated(_Event):
    event: ClassVar[str] = "Deprecated"

    successor: str


Event = Union[
    Transfer,
    Approval,
    AddedToBlacklist,
    RemovedFromBlacklist,
    Paused,
    Unpaused,
    OwnershipTransferred,
    Deprecated,
]


__all__ = [
    "Event",
    "Transfer",
    "Approval",
    "AddedToBlacklist",
    "RemovedFromBlacklist",
    "Paused",
    "Unpaused",
    "OwnershipTransferred",
    "Deprecated",
]
