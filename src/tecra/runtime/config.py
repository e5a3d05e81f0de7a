# src/tecra/runtime/config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

from eth_utils import is_hex_address, to_normalized_address

from tecra.env import load_dotenv_if_present
from tecra.ledger.constants import TOKEN_NAME, TOKEN_SYMBOL, ZERO_ADDRESS

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


@dataclass(frozen=True)
class TokenConfig:
    name: str
    symbol: str
    chain_id: int

    # This ledger's own identity (EIP-712 verifyingContract) and its deployer.
    address: str
    owner: str

    # Snapshot store; empty string keeps the ledger in memory only.
    db_path: str

    mode: str  # "dev" | "testnet" | "prod"
    log_level: str


_ALLOWED_MODES = {"dev", "testnet", "prod"}


def _require_address(name: str, v: str) -> None:
    if not isinstance(v, str) or not is_hex_address(v.strip()):
        raise ValueError(f"{name} must be a 20-byte hex address; got: {v!r}")
    if to_normalized_address(v.strip()) == ZERO_ADDRESS:
        raise ValueError(f"{name} must not be the zero address")


def validate_token_config(cfg: TokenConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.name, str) or not cfg.name.strip():
        raise ValueError("name must be a non-empty string")

    if not isinstance(cfg.symbol, str) or not cfg.symbol.strip():
        raise ValueError("symbol must be a non-empty string")

    if int(cfg.chain_id) <= 0:
        raise ValueError(f"chain_id must be > 0; got: {cfg.chain_id}")

    _require_address("address", cfg.address)
    _require_address("owner", cfg.owner)

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")


def default_token_config() -> TokenConfig:
    # address/owner have no safe default; they must come from a file or env.
    return TokenConfig(
        name=TOKEN_NAME,
        symbol=TOKEN_SYMBOL,
        chain_id=1,
        address="",
        owner="",
        db_path="",
        mode="prod",
        log_level="INFO",
    )


def _from_mapping(raw: Json, d: TokenConfig) -> TokenConfig:
    return TokenConfig(
        name=_as_str(raw.get("name"), d.name),
        symbol=_as_str(raw.get("symbol"), d.symbol),
        chain_id=_as_int(raw.get("chain_id"), d.chain_id),
        address=_as_str(raw.get("address"), d.address),
        owner=_as_str(raw.get("owner"), d.owner),
        db_path=_as_str(raw.get("db_path"), d.db_path),
        mode=_as_str(raw.get("mode"), d.mode).strip().lower(),
        log_level=_as_str(raw.get("log_level"), d.log_level).strip().upper(),
    )


def read_token_config_file(path: str) -> TokenConfig:
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("token config must be a JSON object")
    return _from_mapping(raw, default_token_config())


def apply_env_overrides(cfg: TokenConfig) -> TokenConfig:
    """TECRA_* environment variables win over file values."""
    env: Json = {
        "name": os.environ.get("TECRA_TOKEN_NAME"),
        "symbol": os.environ.get("TECRA_TOKEN_SYMBOL"),
        "chain_id": os.environ.get("TECRA_CHAIN_ID"),
        "address": os.environ.get("TECRA_TOKEN_ADDRESS"),
        "owner": os.environ.get("TECRA_OWNER"),
        "db_path": os.environ.get("TECRA_DB_PATH"),
        "mode": os.environ.get("TECRA_MODE"),
        "log_level": os.environ.get("TECRA_LOG_LEVEL"),
    }
    return _from_mapping(env, cfg)


def load_token_config(*, config_path: Optional[str] = None) -> TokenConfig:
    load_dotenv_if_present()

    p = config_path or os.environ.get("TECRA_CONFIG_PATH")
    cfg = read_token_config_file(p) if p else default_token_config()
    cfg = apply_env_overrides(cfg)

    validate_token_config(cfg)
    return replace(
        cfg,
        address=to_normalized_address(cfg.address.strip()),
        owner=to_normalized_address(cfg.owner.strip()),
    )


__all__ = [
    "TokenConfig",
    "default_token_config",
    "validate_token_config",
    "read_token_config_file",
    "apply_env_overrides",
    "load_token_config",
]
