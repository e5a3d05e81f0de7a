# src/tecra/runtime/token.py
from __future__ import annotations

import copy
import logging
from dataclasses import replace
from typing import Any, Callable, List, Optional, Sequence

from tecra.crypto.hashing import Hasher, keccak256
from tecra.crypto.sig import Recoverer, recover_signer
from tecra.ledger.address import normalize_address, require_non_zero
from tecra.ledger.constants import TOKEN_NAME, TOKEN_SYMBOL
from tecra.ledger.roles import ROLE_BLACKLISTER, ROLE_MINTER, ROLE_PAUSER, RoleRegistry
from tecra.ledger.state import LedgerState
from tecra.runtime import bulk, core, metrics, sweep, upgrade as upgrade_mod
from tecra.runtime import events as ev
from tecra.runtime.config import TokenConfig
from tecra.runtime.context import CallContext, Receipt
from tecra.runtime.errors import LedgerError, Reentrancy, SuccessorUnavailable
from tecra.runtime.permit import PermitAuthorizer
from tecra.runtime.schema import parse_permit_request
from tecra.runtime.store import SqliteLedgerStore
from tecra.runtime.structured_logging import log_event

log = logging.getLogger("tecra.token")

# fn(working_state, events, normalized_caller) -> value
CallFn = Callable[[LedgerState, List[ev.Event], str], Any]


class TecraToken:
    """TecraCoin ledger instance.

    Every mutating entry point takes the authenticated CallContext first and
    returns a Receipt. A call runs against a deep copy of the state; the copy
    replaces the live state only when the call completes without a LedgerError,
    so a rejected call (including a half-done bulk batch) leaves no trace.

    Once deprecated, transfer/approve/transfer_from and the three balance reads
    are answered by the attached successor ledger.
    """

    def __init__(
        self,
        state: LedgerState,
        *,
        store: Optional[SqliteLedgerStore] = None,
        hasher: Hasher = keccak256,
        recover: Recoverer = recover_signer,
        successor: Optional[upgrade_mod.SuccessorLedger] = None,
    ) -> None:
        state.check_invariants()
        self._state = state
        self._store = store
        self._permits = PermitAuthorizer.for_state(state, hasher=hasher, recover=recover)
        self._successor: Optional[upgrade_mod.SuccessorLedger] = None
        self._entered = False
        self.events: List[ev.Event] = []

        if successor is not None:
            self.attach_successor(successor)
        metrics.set_gauge("total_supply", state.total_supply)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        address: str,
        owner: str,
        chain_id: int = 1,
        name: str = TOKEN_NAME,
        symbol: str = TOKEN_SYMBOL,
        store: Optional[SqliteLedgerStore] = None,
        hasher: Hasher = keccak256,
        recover: Recoverer = recover_signer,
    ) -> "TecraToken":
        """Fresh ledger: zero supply, not paused, `owner` holding no roles."""
        addr = require_non_zero(normalize_address(address, field="address"), field="address")
        own = require_non_zero(normalize_address(owner, field="owner"), field="owner")
        if int(chain_id) <= 0:
            raise ValueError(f"chain_id must be > 0; got: {chain_id}")

        state = LedgerState(
            address=addr,
            chain_id=int(chain_id),
            roles=RoleRegistry(owner=own),
            name=str(name),
            symbol=str(symbol),
        )
        token = cls(state, store=store, hasher=hasher, recover=recover)
        if store is not None:
            store.write(state.to_dict())
        return token

    @classmethod
    def from_config(cls, cfg: TokenConfig) -> "TecraToken":
        """Restore from cfg.db_path when a snapshot exists, else initialize from cfg."""
        store = SqliteLedgerStore.open(cfg.db_path) if cfg.db_path else None
        if store is not None and store.exists():
            state = LedgerState.from_dict(store.read())
            if state.address != normalize_address(cfg.address):
                raise ValueError(f"snapshot address {state.address} does not match config address {cfg.address}")
            log_event(log, "ledger_restored", address=state.address, total_supply=state.total_supply)
            return cls(state, store=store)

        return cls.create(
            address=cfg.address,
            owner=cfg.owner,
            chain_id=cfg.chain_id,
            name=cfg.name,
            symbol=cfg.symbol,
            store=store,
        )

    def attach_successor(self, successor: upgrade_mod.SuccessorLedger) -> None:
        """Wire the successor object of a deprecated ledger (after a restore)."""
        if not self._state.deprecated:
            raise ValueError("ledger is not deprecated")
        addr = upgrade_mod.successor_address(successor)
        if addr != self._state.successor:
            raise ValueError(f"successor address {addr} does not match recorded {self._state.successor}")
        self._successor = successor

    # ------------------------------------------------------------------
    # Call plumbing
    # ------------------------------------------------------------------

    def _reject(self, op: str, ctx: CallContext, e: LedgerError) -> None:
        metrics.inc_counter("calls_rejected")
        metrics.inc_counter(f"calls_rejected_{e.code}")
        log_event(
            log,
            "call_rejected",
            level=logging.WARNING,
            op=op,
            caller=str(ctx.caller),
            code=e.code,
            reason=e.reason,
            details=e.details,
        )

    def _call(self, op: str, ctx: CallContext, fn: CallFn) -> Any:
        """Run fn on a working copy; commit it only if fn returns normally."""
        try:
            if self._entered:
                raise Reentrancy(details={"op": op})
            caller = normalize_address(ctx.caller, field="caller")
            upgrade_mod.require_active(self._state, op)

            work = copy.deepcopy(self._state)
            emitted: List[ev.Event] = []
            self._entered = True
            try:
                value = fn(work, emitted, caller)
            finally:
                self._entered = False
        except LedgerError as e:
            self._reject(op, ctx, e)
            raise

        if self._store is not None:
            self._store.write(work.to_dict())
        self._state = work
        self.events.extend(emitted)

        metrics.inc_counter("calls_committed")
        metrics.set_gauge("total_supply", work.total_supply)
        log_event(log, "call_committed", op=op, caller=caller, events=[e.to_json() for e in emitted])
        return Receipt(events=tuple(emitted), value=value)

    def _require_successor(self) -> upgrade_mod.SuccessorLedger:
        if self._successor is None:
            raise SuccessorUnavailable(details={"successor": self._state.successor})
        return self._successor

    def _forward(self, op: str, ctx: CallContext, fn: Callable[[upgrade_mod.SuccessorLedger, str], Any]) -> Receipt:
        """Hand a standard call to the successor; local state is left untouched."""
        try:
            if self._entered:
                raise Reentrancy(details={"op": op})
            caller = normalize_address(ctx.caller, field="caller")
            succ = self._require_successor()
            self._entered = True
            try:
                result = fn(succ, caller)
            finally:
                self._entered = False
        except LedgerError as e:
            self._reject(op, ctx, e)
            raise

        metrics.inc_counter("calls_forwarded")
        log_event(log, "call_forwarded", op=op, caller=caller, successor=self._state.successor)
        if isinstance(result, Receipt):
            return replace(result, forwarded=True)
        return Receipt(value=result, forwarded=True)

    # ------------------------------------------------------------------
    # Standard operations (forwarded once deprecated)
    # ------------------------------------------------------------------

    def transfer(self, ctx: CallContext, to: str, value: int) -> Receipt:
        dst = normalize_address(to, field="to")
        if self._state.deprecated:
            return self._forward("transfer", ctx, lambda s, caller: s.transfer_by_legacy(caller, dst, value))
        return self._call("transfer", ctx, lambda st, evs, caller: core.transfer(st, evs, caller, dst, value))

    def approve(self, ctx: CallContext, spender: str, value: int) -> Receipt:
        sp = normalize_address(spender, field="spender")
        if self._state.deprecated:
            return self._forward("approve", ctx, lambda s, caller: s.approve_by_legacy(caller, sp, value))
        return self._call("approve", ctx, lambda st, evs, caller: core.approve(st, evs, caller, sp, value))

    def transfer_from(self, ctx: CallContext, src: str, dst: str, value: int) -> Receipt:
        a = normalize_address(src, field="from")
        b = normalize_address(dst, field="to")
        if self._state.deprecated:
            return self._forward("transfer_from", ctx, lambda s, caller: s.transfer_from_by_legacy(caller, a, b, value))
        return self._call("transfer_from", ctx, lambda st, evs, caller: core.transfer_from(st, evs, caller, a, b, value))

    def balance_of(self, account: str) -> int:
        who = normalize_address(account, field="account")
        if self._state.deprecated:
            return self._require_successor().balance_of(who)
        return self._state.balance_of(who)

    def allowance(self, owner: str, spender: str) -> int:
        o = normalize_address(owner, field="owner")
        sp = normalize_address(spender, field="spender")
        if self._state.deprecated:
            return self._require_successor().allowance(o, sp)
        return self._state.allowance_of(o, sp)

    def total_supply(self) -> int:
        if self._state.deprecated:
            return self._require_successor().total_supply()
        return self._state.total_supply

    # ------------------------------------------------------------------
    # Supply
    # ------------------------------------------------------------------

    def mint(self, ctx: CallContext, to: str, amount: int) -> Receipt:
        dst = normalize_address(to, field="to")
        return self._call("mint", ctx, lambda st, evs, caller: core.mint(st, evs, caller, dst, amount))

    def burn_from(self, ctx: CallContext, src: str, amount: int) -> Receipt:
        a = normalize_address(src, field="from")
        return self._call("burn_from", ctx, lambda st, evs, caller: core.burn_from(st, evs, caller, a, amount))

    def burn_black_funds(self, ctx: CallContext, account: str) -> Receipt:
        """Receipt.value is the amount destroyed."""
        who = normalize_address(account, field="account")
        return self._call("burn_black_funds", ctx, lambda st, evs, caller: core.burn_black_funds(st, evs, caller, who))

    # ------------------------------------------------------------------
    # Pause / blacklist
    # ------------------------------------------------------------------

    def pause(self, ctx: CallContext) -> Receipt:
        return self._call("pause", ctx, lambda st, evs, caller: core.pause(st, evs, caller))

    def unpause(self, ctx: CallContext) -> Receipt:
        return self._call("unpause", ctx, lambda st, evs, caller: core.unpause(st, evs, caller))

    def add_blacklist(self, ctx: CallContext, account: str) -> Receipt:
        who = normalize_address(account, field="account")
        return self._call("add_blacklist", ctx, lambda st, evs, caller: core.add_blacklist(st, evs, caller, who))

    def remove_blacklist(self, ctx: CallContext, account: str) -> Receipt:
        who = normalize_address(account, field="account")
        return self._call("remove_blacklist", ctx, lambda st, evs, caller: core.remove_blacklist(st, evs, caller, who))

    # ------------------------------------------------------------------
    # Roles and ownership
    # ------------------------------------------------------------------

    def _grant(self, op: str, ctx: CallContext, role: str, account: str) -> Receipt:
        who = normalize_address(account, field="account")
        return self._call(op, ctx, lambda st, evs, caller: st.roles.grant(caller, role, who))

    def _revoke(self, op: str, ctx: CallContext, role: str, account: str) -> Receipt:
        who = normalize_address(account, field="account")
        return self._call(op, ctx, lambda st, evs, caller: st.roles.revoke(caller, role, who))

    def add_minter(self, ctx: CallContext, account: str) -> Receipt:
        return self._grant("add_minter", ctx, ROLE_MINTER, account)

    def remove_minter(self, ctx: CallContext, account: str) -> Receipt:
        return self._revoke("remove_minter", ctx, ROLE_MINTER, account)

    def add_pauser(self, ctx: CallContext, account: str) -> Receipt:
        return self._grant("add_pauser", ctx, ROLE_PAUSER, account)

    def remove_pauser(self, ctx: CallContext, account: str) -> Receipt:
        return self._revoke("remove_pauser", ctx, ROLE_PAUSER, account)

    def add_blacklister(self, ctx: CallContext, account: str) -> Receipt:
        return self._grant("add_blacklister", ctx, ROLE_BLACKLISTER, account)

    def remove_blacklister(self, ctx: CallContext, account: str) -> Receipt:
        return self._revoke("remove_blacklister", ctx, ROLE_BLACKLISTER, account)

    def give_ownership(self, ctx: CallContext, candidate: str) -> Receipt:
        who = require_non_zero(normalize_address(candidate, field="candidate"), field="candidate")
        return self._call("give_ownership", ctx, lambda st, evs, caller: st.roles.give_ownership(caller, who))

    def accept_ownership(self, ctx: CallContext) -> Receipt:
        def _accept(st: LedgerState, evs: List[ev.Event], caller: str) -> None:
            previous = st.roles.accept_ownership(caller)
            evs.append(ev.OwnershipTransferred(previous, caller))

        return self._call("accept_ownership", ctx, _accept)

    # ------------------------------------------------------------------
    # Permit
    # ------------------------------------------------------------------

    def permit(self, ctx: CallContext, owner: str, spender: str, value: int, deadline: int, signature: Any) -> Receipt:
        """Relayed approval signed off-line by `owner`. Anyone may submit it.

        Receipt.value is the nonce the permit consumed.
        """

        def _permit(st: LedgerState, evs: List[ev.Event], caller: str) -> int:
            req = parse_permit_request(owner=owner, spender=spender, value=value, deadline=deadline, signature=signature)
            return self._permits.apply(st, evs, req, now=int(ctx.timestamp))

        return self._call("permit", ctx, _permit)

    # ------------------------------------------------------------------
    # Bulk
    # ------------------------------------------------------------------

    def bulk_transfer(self, ctx: CallContext, recipients: Sequence[str], amounts: bulk.Amounts) -> Receipt:
        """Receipt.value is the total moved."""
        dsts = [normalize_address(r, field="recipients") for r in recipients]
        return self._call("bulk_transfer", ctx, lambda st, evs, caller: bulk.bulk_transfer(st, evs, caller, dsts, amounts))

    def bulk_transfer_from(
        self, ctx: CallContext, src: str, recipients: Sequence[str], amounts: bulk.Amounts
    ) -> Receipt:
        a = normalize_address(src, field="from")
        dsts = [normalize_address(r, field="recipients") for r in recipients]
        return self._call(
            "bulk_transfer_from",
            ctx,
            lambda st, evs, caller: bulk.bulk_transfer_from(st, evs, caller, a, dsts, amounts),
        )

    # ------------------------------------------------------------------
    # Upgrade / sweep
    # ------------------------------------------------------------------

    def upgrade(self, ctx: CallContext, successor: upgrade_mod.SuccessorLedger) -> Receipt:
        """One-way switch to `successor`; Receipt.value is its address."""
        receipt = self._call(
            "upgrade", ctx, lambda st, evs, caller: upgrade_mod.upgrade(st, evs, caller, successor)
        )
        self._successor = successor
        return receipt

    def acquire(self, ctx: CallContext, foreign: sweep.ForeignLedger) -> Receipt:
        """Sweep this ledger's balance on `foreign` to the owner.

        The returned Receipt carries the foreign ledger's events; nothing is
        added to this ledger's audit log.
        """
        receipt = self._call(
            "acquire",
            ctx,
            lambda st, evs, caller: sweep.acquire(st, caller, foreign, timestamp=int(ctx.timestamp)),
        )
        return receipt.value

    # ------------------------------------------------------------------
    # Local reads
    # ------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self._state.address

    def name(self) -> str:
        return self._state.name

    def symbol(self) -> str:
        return self._state.symbol

    def decimals(self) -> int:
        return self._state.decimals

    def cap(self) -> int:
        return self._state.cap

    def nonces(self, account: str) -> int:
        return self._state.nonce_of(normalize_address(account, field="account"))

    def domain_separator(self) -> bytes:
        return self._permits.separator

    def owner(self) -> str:
        return self._state.roles.owner

    def chain_id(self) -> int:
        return self._state.chain_id

    def pending_owner(self) -> str:
        return self._state.roles.pending_owner

    def deprecated(self) -> bool:
        return self._state.deprecated

    def successor(self) -> str:
        return self._state.successor

    def paused(self) -> bool:
        return self._state.paused

    def is_minter(self, account: str) -> bool:
        return self._state.roles.has_role(ROLE_MINTER, normalize_address(account))

    def is_pauser(self, account: str) -> bool:
        return self._state.roles.has_role(ROLE_PAUSER, normalize_address(account))

    def is_blacklister(self, account: str) -> bool:
        return self._state.roles.has_role(ROLE_BLACKLISTER, normalize_address(account))

    def is_blacklisted(self, account: str) -> bool:
        return self._state.is_blacklisted(normalize_address(account))

    def snapshot(self) -> dict:
        """JSON-compatible copy of the live state."""
        return self._state.to_dict()


__all__ = ["TecraToken"]
