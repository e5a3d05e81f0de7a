from __future__ import annotations

import sys
from pathlib import Path

# Ensure local "src/" takes precedence over any globally-installed "tecra" package.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

src_str = str(SRC)
if src_str not in sys.path:
    sys.path.insert(0, src_str)

from typing import Callable, Dict, Tuple  # noqa: E402

import pytest  # noqa: E402

from tecra.runtime import metrics  # noqa: E402
from tecra.runtime.context import CallContext  # noqa: E402
from tecra.runtime.token import TecraToken  # noqa: E402
from tecra.testing.sigtools import deterministic_keypair  # noqa: E402

TOKEN_ADDRESS = "0x" + "11" * 20
NOW = 1_700_000_000

_LABELS = ("owner", "alice", "bob", "carol", "dave", "relayer")


@pytest.fixture(autouse=True)
def _fresh_metrics() -> None:
    metrics.reset()


@pytest.fixture
def keys() -> Dict[str, Tuple[str, bytes]]:
    return {label: deterministic_keypair(label=label) for label in _LABELS}


@pytest.fixture
def addr(keys: Dict[str, Tuple[str, bytes]]) -> Dict[str, str]:
    return {label: kp[0] for label, kp in keys.items()}


@pytest.fixture
def ctx() -> Callable[..., CallContext]:
    def _ctx(caller: str, timestamp: int = NOW) -> CallContext:
        return CallContext(caller=caller, timestamp=timestamp)

    return _ctx


@pytest.fixture
def token(addr: Dict[str, str]) -> TecraToken:
    return TecraToken.create(address=TOKEN_ADDRESS, owner=addr["owner"], chain_id=1)


@pytest.fixture
def funded(token: TecraToken, addr: Dict[str, str], ctx: Callable[..., CallContext]) -> TecraToken:
    """Owner is a minter; alice holds 1000 base units."""
    owner = ctx(addr["owner"])
    token.add_minter(owner, addr["owner"])
    token.mint(owner, addr["alice"], 1000)
    return token
