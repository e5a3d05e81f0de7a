# src/tecra/runtime/metrics.py
from __future__ import annotations

import threading
import time
from typing import Dict


_lock = threading.Lock()
_counters: Dict[str, int] = {}
_gauges: Dict[str, int] = {}
_started_ms = int(time.time() * 1000)


def inc_counter(name: str, value: int = 1) -> None:
    n = str(name or "").strip()
    if not n:
        return
    with _lock:
        _counters[n] = int(_counters.get(n, 0)) + int(value)


def set_gauge(name: str, value: int) -> None:
    n = str(name or "").strip()
    if not n:
        return
    with _lock:
        _gauges[n] = int(value)


def snapshot() -> dict:
    with _lock:
        return {
            "ts_ms": int(time.time() * 1000),
            "started_ms": int(_started_ms),
            "uptime_ms": int(time.time() * 1000) - int(_started_ms),
            "counters": dict(_counters),
            "gauges": dict(_gauges),
        }


def reset() -> None:
    """Clear all counters and gauges (tests)."""
    with _lock:
        _counters.clear()
        _gauges.clear()


def format_prometheus(prefix: str = "tecra_") -> str:
    """Prometheus exposition text; integer counters/gauges only."""
    pre = str(prefix or "").strip() or "tecra_"
    snap = snapshot()
    lines: list[str] = [f"{pre}uptime_ms {int(snap['uptime_ms'])}"]

    for k in sorted(snap["counters"]):
        lines.append(f"{pre}{k} {int(snap['counters'][k])}")
    for k in sorted(snap["gauges"]):
        lines.append(f"{pre}{k} {int(snap['gauges'][k])}")

    return "\n".join(lines) + "\n"


__all__ = ["inc_counter", "set_gauge", "snapshot", "reset", "format_prometheus"]
