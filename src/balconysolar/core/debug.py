"""Deterministic debug collectors for structured JSON events."""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol


class DebugCollector(Protocol):
    def emit(self, stage: str, payload: Dict[str, Any], *, day: Optional[int] = None, season: Optional[str] = None) -> None:
        ...


def _json_safe_scalar(val: Any) -> Any:
    """Convert common non-JSON types to safe representations."""
    if hasattr(val, "item") and callable(val.item):
        # numpy scalars
        try:
            val = val.item()
        except (TypeError, ValueError):
            return str(val)
    if isinstance(val, float) and not math.isfinite(val):
        return None
    return val


def _ordered(obj: Any) -> Any:
    """Recursively order mappings for deterministic JSON dumps."""
    if isinstance(obj, dict):
        return {k: _ordered(obj[k]) for k in sorted(obj)}
    if isinstance(obj, (list, tuple)):
        return [_ordered(v) for v in obj]
    return _json_safe_scalar(obj)


def _event(stage: str, payload: Dict[str, Any], day: Optional[int], season: Optional[str]) -> Dict[str, Any]:
    return {
        "stage": stage,
        "day": day,
        "season": season,
        "payload": _ordered(payload),
    }


class NullDebugCollector:
    def emit(self, stage: str, payload: Dict[str, Any], *, day: Optional[int] = None, season: Optional[str] = None) -> None:  # noqa: D401
        """Discard events (no-op)."""
        return


@dataclass
class ListDebugCollector:
    events: List[Dict[str, Any]] = field(default_factory=list)

    def emit(self, stage: str, payload: Dict[str, Any], *, day: Optional[int] = None, season: Optional[str] = None) -> None:
        self.events.append(_event(stage, payload, day, season))

    def stages(self) -> List[str]:
        return [event["stage"] for event in self.events]


class JsonlDebugWriter:
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("a", encoding="utf-8")

    def emit(self, stage: str, payload: Dict[str, Any], *, day: Optional[int] = None, season: Optional[str] = None) -> None:
        json.dump(_event(stage, payload, day, season), self._fh, sort_keys=True)
        self._fh.write("\n")
        self._fh.flush()

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()


class JsonDebugWriter:
    """Collect all events in memory then write a single JSON array.

    Used when callers pass a ``--debug`` path ending with ``.json`` so one run
    produces one self-contained trace document.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._events: List[Dict[str, Any]] = []

    def emit(self, stage: str, payload: Dict[str, Any], *, day: Optional[int] = None, season: Optional[str] = None) -> None:
        self._events.append(_event(stage, payload, day, season))

    def close(self) -> None:
        """Write collected events as a single JSON document."""
        self.path.write_text(json.dumps(self._events, indent=2, sort_keys=True))


def build_debug_collector(path: str | Path) -> JsonDebugWriter | JsonlDebugWriter:
    """Factory: .json -> JsonDebugWriter, otherwise JsonlDebugWriter."""
    if str(path).lower().endswith(".json"):
        return JsonDebugWriter(path)
    return JsonlDebugWriter(path)


class ScopedDebugCollector:
    """Wrapper that injects a fixed season label into every emit."""

    def __init__(self, inner: DebugCollector, *, season: Optional[str] = None):
        self.inner = inner
        self.season = season

    def emit(self, stage: str, payload: Dict[str, Any], *, day: Optional[int] = None, season: Optional[str] = None) -> None:
        # Prefer explicit overrides, otherwise fall back to the scoped label.
        self.inner.emit(stage, payload, day=day, season=season if season is not None else self.season)


__all__ = [
    "DebugCollector",
    "NullDebugCollector",
    "ListDebugCollector",
    "JsonlDebugWriter",
    "JsonDebugWriter",
    "ScopedDebugCollector",
    "build_debug_collector",
]
