"""Operator CLI.

Usage:
  python -m tecra domain-separator [--name N] [--chain-id C] [--address A]
  python -m tecra permit-digest --owner O --spender S --value V --nonce N --deadline D [domain args]
  python -m tecra state [--db-path P]
  python -m tecra metrics

Domain values not given on the command line come from the token config
(TECRA_CONFIG_PATH / TECRA_* env / .env).
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List, Optional

from tecra.crypto.eip712 import PermitDomain, PermitMessage, domain_separator, permit_digest
from tecra.ledger.address import normalize_address
from tecra.runtime import metrics
from tecra.runtime.config import load_token_config
from tecra.runtime.errors import LedgerError
from tecra.runtime.store import SqliteLedgerStore
from tecra.runtime.structured_logging import configure_structured_logging
from tecra.runtime.token import TecraToken


def _domain_from_args(args: argparse.Namespace) -> PermitDomain:
    if args.name and args.chain_id and args.address:
        name, chain_id, address = args.name, int(args.chain_id), args.address
    else:
        cfg = load_token_config()
        name = args.name or cfg.name
        chain_id = int(args.chain_id or cfg.chain_id)
        address = args.address or cfg.address
    return PermitDomain(name=name, chain_id=chain_id, verifying_contract=normalize_address(address))


def _cmd_domain_separator(args: argparse.Namespace) -> int:
    print("0x" + domain_separator(_domain_from_args(args)).hex())
    return 0


def _cmd_permit_digest(args: argparse.Namespace) -> int:
    sep = domain_separator(_domain_from_args(args))
    msg = PermitMessage(
        owner=normalize_address(args.owner, field="owner"),
        spender=normalize_address(args.spender, field="spender"),
        value=int(args.value),
        nonce=int(args.nonce),
        deadline=int(args.deadline),
    )
    print("0x" + permit_digest(sep, msg).hex())
    return 0


def _cmd_state(args: argparse.Namespace) -> int:
    db_path = args.db_path or os.environ.get("TECRA_DB_PATH") or load_token_config().db_path
    if not db_path:
        print("no db_path configured", file=sys.stderr)
        return 2
    st = SqliteLedgerStore.open(db_path).read()
    summary = {
        "address": st.get("address"),
        "name": st.get("name"),
        "symbol": st.get("symbol"),
        "chain_id": st.get("chain_id"),
        "total_supply": st.get("total_supply"),
        "cap": st.get("cap"),
        "paused": st.get("paused"),
        "deprecated": st.get("deprecated"),
        "successor": st.get("successor"),
        "owner": (st.get("roles") or {}).get("owner"),
        "accounts": len(st.get("balances") or {}),
        "blacklisted": len(st.get("blacklisted") or []),
    }
    print(json.dumps(summary, indent=2, sort_keys=True))
    return 0


def _cmd_metrics(args: argparse.Namespace) -> int:
    # Loading the ledger primes the supply gauge.
    TecraToken.from_config(load_token_config())
    sys.stdout.write(metrics.format_prometheus())
    return 0


def _add_domain_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--name", default=None)
    p.add_argument("--chain-id", default=None)
    p.add_argument("--address", default=None, help="verifying contract (this ledger's address)")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="tecra")
    ap.add_argument("--log-level", default=None)
    sub = ap.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("domain-separator", help="print the EIP-712 domain separator")
    _add_domain_args(p)
    p.set_defaults(func=_cmd_domain_separator)

    p = sub.add_parser("permit-digest", help="print the digest a permit signer must sign")
    _add_domain_args(p)
    p.add_argument("--owner", required=True)
    p.add_argument("--spender", required=True)
    p.add_argument("--value", required=True)
    p.add_argument("--nonce", required=True)
    p.add_argument("--deadline", required=True)
    p.set_defaults(func=_cmd_permit_digest)

    p = sub.add_parser("state", help="print a summary of the stored ledger snapshot")
    p.add_argument("--db-path", default=None)
    p.set_defaults(func=_cmd_state)

    p = sub.add_parser("metrics", help="print metrics in Prometheus text format")
    p.set_defaults(func=_cmd_metrics)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_structured_logging(args.log_level)
    try:
        return int(args.func(args))
    except (ValueError, FileNotFoundError, LedgerError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
