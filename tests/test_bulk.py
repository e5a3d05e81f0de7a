# tests/test_bulk.py
from __future__ import annotations

import pytest

from tecra.ledger.state import LedgerState
from tecra.runtime import events as ev
from tecra.runtime.errors import InsufficientAllowance, InsufficientBalance, InvalidAmount, LengthMismatch
from tecra.runtime.token import TecraToken


def _sum_balances(token) -> int:
    return sum(token.snapshot()["balances"].values())


def test_bulk_transfer_equals_sequential_transfers(funded, addr, ctx) -> None:
    recipients = [addr["bob"], addr["carol"], addr["dave"]]

    twin = TecraToken(LedgerState.from_dict(funded.snapshot()))
    for dst, v in zip(recipients, [10, 20, 30]):
        twin.transfer(ctx(addr["alice"]), dst, v)

    r = funded.bulk_transfer(ctx(addr["alice"]), recipients, [10, 20, 30])
    assert funded.snapshot() == twin.snapshot()

    assert r.value == 60
    assert r.events == tuple(ev.Transfer(addr["alice"], dst, v) for dst, v in zip(recipients, [10, 20, 30]))
    assert [funded.balance_of(a) for a in recipients] == [10, 20, 30]
    assert funded.balance_of(addr["alice"]) == 940
    assert _sum_balances(funded) == funded.total_supply() == 1000


def test_bulk_transfer_broadcasts_single_amount(funded, addr, ctx) -> None:
    recipients = [addr["bob"], addr["carol"]]
    r = funded.bulk_transfer(ctx(addr["alice"]), recipients, 25)
    assert r.value == 50
    assert funded.balance_of(addr["bob"]) == funded.balance_of(addr["carol"]) == 25
    assert _sum_balances(funded) == funded.total_supply() == 1000


def test_bulk_transfer_length_mismatch(funded, addr, ctx) -> None:
    with pytest.raises(LengthMismatch) as e:
        funded.bulk_transfer(ctx(addr["alice"]), [addr["bob"], addr["carol"]], [1])
    assert e.value.reason == "Data size mismatch"


def test_bulk_transfer_rejects_non_sequence_amounts(funded, addr, ctx) -> None:
    with pytest.raises(InvalidAmount):
        funded.bulk_transfer(ctx(addr["alice"]), [addr["bob"]], "10")


def test_bulk_transfer_is_all_or_nothing(funded, addr, ctx) -> None:
    before = funded.snapshot()
    n_events = len(funded.events)

    # the third step runs out of balance
    with pytest.raises(InsufficientBalance):
        funded.bulk_transfer(ctx(addr["alice"]), [addr["bob"], addr["carol"], addr["dave"]], [400, 400, 400])

    assert funded.snapshot() == before
    assert len(funded.events) == n_events
    assert funded.balance_of(addr["bob"]) == 0


def test_bulk_transfer_from_decays_allowance(funded, addr, ctx) -> None:
    funded.approve(ctx(addr["alice"]), addr["bob"], 12)
    recipients = [addr["carol"], addr["dave"], addr["relayer"]]
    r = funded.bulk_transfer_from(ctx(addr["bob"]), addr["alice"], recipients, [3, 2, 3])

    approvals = [e.value for e in r.events if isinstance(e, ev.Approval)]
    assert approvals == [9, 7, 4]
    assert funded.allowance(addr["alice"], addr["bob"]) == 4
    assert r.value == 8
    assert _sum_balances(funded) == funded.total_supply() == 1000


def test_bulk_transfer_from_rolls_back_on_allowance_exhaustion(funded, addr, ctx) -> None:
    funded.approve(ctx(addr["alice"]), addr["bob"], 5)
    with pytest.raises(InsufficientAllowance):
        funded.bulk_transfer_from(ctx(addr["bob"]), addr["alice"], [addr["carol"], addr["dave"]], 3)

    assert funded.allowance(addr["alice"], addr["bob"]) == 5
    assert funded.balance_of(addr["carol"]) == 0
