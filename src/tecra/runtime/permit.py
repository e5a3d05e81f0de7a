from __future__ import annotations

"""Permit: allowance granted by an off-line EIP-712 signature.

Nonce state machine per owner: starts at 0, +1 per accepted permit, never
decreases. Replay protection falls out of that: a consumed signature embeds a
stale nonce, hashes to a different digest and recovers a different signer.
"""

from dataclasses import dataclass, field
from typing import List

from tecra.crypto.eip712 import PermitDomain, PermitMessage, domain_separator, permit_digest
from tecra.crypto.hashing import Hasher, keccak256
from tecra.crypto.sig import Recoverer, recover_signer
from tecra.ledger.address import require_non_zero
from tecra.ledger.state import LedgerState
from tecra.runtime import core
from tecra.runtime import events as ev
from tecra.runtime.errors import ExpiredPermit, InvalidSignature
from tecra.runtime.schema import PermitRequest


@dataclass
class PermitAuthorizer:
    domain: PermitDomain
    hasher: Hasher = keccak256
    recover: Recoverer = recover_signer
    separator: bytes = field(init=False)

    def __post_init__(self) -> None:
        # Fixed for the lifetime of the ledger instance.
        self.separator = domain_separator(self.domain, hasher=self.hasher)

    @classmethod
    def for_state(cls, state: LedgerState, *, hasher: Hasher = keccak256, recover: Recoverer = recover_signer) -> "PermitAuthorizer":
        domain = PermitDomain(
            name=state.name,
            chain_id=state.chain_id,
            verifying_contract=state.address,
            version=state.version,
        )
        return cls(domain=domain, hasher=hasher, recover=recover)

    def digest_for(self, state: LedgerState, req: PermitRequest) -> bytes:
        msg = PermitMessage(
            owner=req.owner,
            spender=req.spender,
            value=req.value,
            nonce=state.nonce_of(req.owner),
            deadline=req.deadline,
        )
        return permit_digest(self.separator, msg, hasher=self.hasher)

    def verify(self, state: LedgerState, req: PermitRequest, *, now: int) -> None:
        """Raise unless `req` is unexpired and signed by its owner at the current nonce."""
        if now > req.deadline:
            raise ExpiredPermit(details={"deadline": req.deadline, "now": now})

        digest = self.digest_for(state, req)
        try:
            signer = self.recover(digest, req.signature)
        except ValueError as e:
            raise InvalidSignature(details={"owner": req.owner, "error": str(e)}) from e
        if signer.lower() != req.owner:
            raise InvalidSignature(details={"owner": req.owner, "recovered": signer})

    def apply(self, state: LedgerState, events: List[ev.Event], req: PermitRequest, *, now: int) -> int:
        """Verify and grant. Returns the nonce that was consumed."""
        self.verify(state, req, now=now)
        require_non_zero(req.spender, field="spender")
        used = state.bump_nonce(req.owner)
        core.approve(state, events, req.owner, req.spender, req.value)
        return used


__all__ = ["PermitAuthorizer"]
