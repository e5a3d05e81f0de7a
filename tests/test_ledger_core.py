# tests/test_ledger_core.py
from __future__ import annotations

import pytest

from tecra.ledger.constants import COIN, COIN_DECIMALS, MAX_SUPPLY, UINT256_MAX, ZERO_ADDRESS
from tecra.runtime import events as ev
from tecra.runtime.errors import (
    Blacklisted,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAddress,
    InvalidAmount,
    NotBlacklisted,
    Paused,
    SupplyCapExceeded,
    Unauthorized,
)


def _sum_balances(token) -> int:
    return sum(token.snapshot()["balances"].values())


def test_metadata(token) -> None:
    assert token.name() == "TecraCoin"
    assert token.symbol() == "TCR"
    assert token.decimals() == COIN_DECIMALS == 8
    assert token.chain_id() == 1
    assert token.cap() == 21_000_000 * COIN
    assert token.total_supply() == 0


def test_unknown_accounts_read_as_zero(token, addr) -> None:
    assert token.balance_of(addr["dave"]) == 0
    assert token.allowance(addr["dave"], addr["carol"]) == 0
    assert token.nonces(addr["dave"]) == 0
    assert token.is_blacklisted(addr["dave"]) is False


def test_malformed_address_is_rejected_on_read(token) -> None:
    with pytest.raises(InvalidAddress):
        token.balance_of("0x1234")


def test_mint_emits_transfer_from_zero(token, addr, ctx) -> None:
    owner = ctx(addr["owner"])
    token.add_minter(owner, addr["owner"])
    r = token.mint(owner, addr["alice"], 100)

    assert r.events == (ev.Transfer(ZERO_ADDRESS, addr["alice"], 100),)
    assert token.balance_of(addr["alice"]) == 100
    assert token.total_supply() == 100
    assert token.events == list(r.events)


def test_mint_up_to_cap_then_reject(token, addr, ctx) -> None:
    owner = ctx(addr["owner"])
    token.add_minter(owner, addr["owner"])
    token.mint(owner, addr["alice"], MAX_SUPPLY)

    with pytest.raises(SupplyCapExceeded) as e:
        token.mint(owner, addr["alice"], 1)
    assert e.value.reason == "You can not mine that much"
    assert token.total_supply() == MAX_SUPPLY


def test_oversized_mint_is_a_cap_violation(token, addr, ctx) -> None:
    owner = ctx(addr["owner"])
    token.add_minter(owner, addr["owner"])

    for amount in (MAX_SUPPLY + 1, UINT256_MAX, UINT256_MAX + 1, 2**300):
        with pytest.raises(SupplyCapExceeded):
            token.mint(owner, addr["alice"], amount)

    # malformed amounts stay malformed
    for amount in (-1, True, "5", 1.0):
        with pytest.raises(InvalidAmount):
            token.mint(owner, addr["alice"], amount)

    assert token.total_supply() == 0
    assert token.balance_of(addr["alice"]) == 0


def test_mint_to_zero_address_fails(token, addr, ctx) -> None:
    owner = ctx(addr["owner"])
    token.add_minter(owner, addr["owner"])
    with pytest.raises(InvalidAddress):
        token.mint(owner, ZERO_ADDRESS, 1)


def test_transfer_moves_balance(funded, addr, ctx) -> None:
    r = funded.transfer(ctx(addr["alice"]), addr["bob"], 300)
    assert r.events == (ev.Transfer(addr["alice"], addr["bob"], 300),)
    assert funded.balance_of(addr["alice"]) == 700
    assert funded.balance_of(addr["bob"]) == 300
    assert _sum_balances(funded) == funded.total_supply() == 1000


def test_transfer_insufficient_balance(funded, addr, ctx) -> None:
    with pytest.raises(InsufficientBalance) as e:
        funded.transfer(ctx(addr["alice"]), addr["bob"], 1001)
    assert e.value.reason == "Balance too low"
    assert funded.balance_of(addr["alice"]) == 1000


def test_transfer_rejects_bad_amounts(funded, addr, ctx) -> None:
    for bad in (-1, True, 1.5, "10", 2**256):
        with pytest.raises(InvalidAmount):
            funded.transfer(ctx(addr["alice"]), addr["bob"], bad)


def test_transfer_to_zero_address_fails(funded, addr, ctx) -> None:
    with pytest.raises(InvalidAddress):
        funded.transfer(ctx(addr["alice"]), ZERO_ADDRESS, 1)


def test_paused_blocks_transfers(funded, addr, ctx) -> None:
    funded.add_pauser(ctx(addr["owner"]), addr["owner"])
    funded.pause(ctx(addr["owner"]))

    with pytest.raises(Paused) as e:
        funded.transfer(ctx(addr["alice"]), addr["bob"], 1)
    assert e.value.reason == "Contract is paused"

    funded.approve(ctx(addr["alice"]), addr["bob"], 10)
    with pytest.raises(Paused):
        funded.transfer_from(ctx(addr["bob"]), addr["alice"], addr["bob"], 1)

    funded.unpause(ctx(addr["owner"]))
    funded.transfer(ctx(addr["alice"]), addr["bob"], 1)
    assert funded.balance_of(addr["bob"]) == 1


def test_blacklisted_source_cannot_send(funded, addr, ctx) -> None:
    funded.add_blacklister(ctx(addr["owner"]), addr["owner"])
    funded.add_blacklist(ctx(addr["owner"]), addr["alice"])

    with pytest.raises(Blacklisted) as e:
        funded.transfer(ctx(addr["alice"]), addr["bob"], 1)
    assert e.value.reason == "Address on blacklist"

    funded.approve(ctx(addr["alice"]), addr["bob"], 10)
    with pytest.raises(Blacklisted):
        funded.transfer_from(ctx(addr["bob"]), addr["alice"], addr["carol"], 1)


def test_approve_overwrites(funded, addr, ctx) -> None:
    funded.approve(ctx(addr["alice"]), addr["bob"], 50)
    r = funded.approve(ctx(addr["alice"]), addr["bob"], 7)
    assert r.events == (ev.Approval(addr["alice"], addr["bob"], 7),)
    assert funded.allowance(addr["alice"], addr["bob"]) == 7


def test_transfer_from_consumes_allowance(funded, addr, ctx) -> None:
    funded.approve(ctx(addr["alice"]), addr["bob"], 100)
    r = funded.transfer_from(ctx(addr["bob"]), addr["alice"], addr["carol"], 40)

    assert r.events == (
        ev.Transfer(addr["alice"], addr["carol"], 40),
        ev.Approval(addr["alice"], addr["bob"], 60),
    )
    assert funded.allowance(addr["alice"], addr["bob"]) == 60
    assert funded.balance_of(addr["carol"]) == 40


def test_allowance_checked_before_balance(token, addr, ctx) -> None:
    token.approve(ctx(addr["alice"]), addr["bob"], 5)
    with pytest.raises(InsufficientAllowance) as e:
        token.transfer_from(ctx(addr["bob"]), addr["alice"], addr["carol"], 10)
    assert e.value.reason == "Allowance too low"

    token.approve(ctx(addr["alice"]), addr["bob"], 100)
    with pytest.raises(InsufficientBalance):
        token.transfer_from(ctx(addr["bob"]), addr["alice"], addr["carol"], 10)
    assert token.allowance(addr["alice"], addr["bob"]) == 100


def test_burn_from(funded, addr, ctx) -> None:
    funded.approve(ctx(addr["alice"]), addr["bob"], 300)
    r = funded.burn_from(ctx(addr["bob"]), addr["alice"], 200)

    assert r.events == (
        ev.Approval(addr["alice"], addr["bob"], 100),
        ev.Transfer(addr["alice"], ZERO_ADDRESS, 200),
    )
    assert funded.total_supply() == 800
    assert funded.balance_of(addr["alice"]) == 800
    assert _sum_balances(funded) == funded.total_supply()

    with pytest.raises(InsufficientAllowance):
        funded.burn_from(ctx(addr["bob"]), addr["alice"], 101)
    assert _sum_balances(funded) == funded.total_supply() == 800


def test_burn_black_funds(funded, addr, ctx) -> None:
    owner = ctx(addr["owner"])
    with pytest.raises(NotBlacklisted) as e:
        funded.burn_black_funds(owner, addr["alice"])
    assert e.value.reason == "Address not on blacklist"

    funded.add_blacklister(owner, addr["carol"])
    funded.add_blacklist(ctx(addr["carol"]), addr["alice"])

    with pytest.raises(Unauthorized):
        funded.burn_black_funds(ctx(addr["carol"]), addr["alice"])

    r = funded.burn_black_funds(owner, addr["alice"])
    assert r.value == 1000
    assert r.events == (ev.Transfer(addr["alice"], ZERO_ADDRESS, 1000),)
    assert funded.balance_of(addr["alice"]) == 0
    assert funded.total_supply() == 0
    assert _sum_balances(funded) == funded.total_supply()


def test_rejected_call_leaves_no_trace(funded, addr, ctx) -> None:
    before = funded.snapshot()
    n_events = len(funded.events)

    with pytest.raises(InsufficientBalance):
        funded.transfer(ctx(addr["alice"]), addr["bob"], 5000)

    assert funded.snapshot() == before
    assert len(funded.events) == n_events


def test_addresses_are_case_insensitive(funded, addr, ctx) -> None:
    upper = "0x" + addr["bob"][2:].upper()
    funded.transfer(ctx(addr["alice"]), upper, 10)
    assert funded.balance_of(addr["bob"]) == 10
    assert funded.balance_of(upper) == 10
