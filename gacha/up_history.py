"""
Up-list history: which top-tier items were featured on which banner, when.

A top-tier reward on a character or weapon banner is "on-banner" when its name
matches an up-list entry of the same kind whose window contains the pull time.
Character windows exclude both bounds; weapon windows include them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple
import json

from .record_types import TIME_FORMAT


def parse_time(value: str) -> datetime:
    """Parse a record or window timestamp ("T" separator tolerated)."""
    return datetime.strptime(value.strip().replace("T", " ")[:19], TIME_FORMAT)


@dataclass(frozen=True)
class UpItem:
    """One featured item over one banner window."""
    name: str
    type: str  # "character" or "weapon"
    begin_time: str
    end_time: str
    rarity: int = 5
    version: str = ""
    pool_name: str = ""

    @property
    def window(self) -> Tuple[datetime, datetime]:
        return parse_time(self.begin_time), parse_time(self.end_time)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UpItem:
        return cls(
            name=data["name"],
            type=data["type"],
            begin_time=data["begin_time"],
            end_time=data["end_time"],
            rarity=int(data.get("rarity", 5)),
            version=str(data.get("version", "")),
            pool_name=data.get("pool_name", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "pool_name": self.pool_name,
            "type": self.type,
            "rarity": self.rarity,
            "name": self.name,
            "begin_time": self.begin_time,
            "end_time": self.end_time,
        }


class UpHistory:
    """Read-only collection of up-list windows, indexed by kind."""

    def __init__(self, items: Iterable[UpItem] = ()):
        self._windows: Dict[str, List[Tuple[datetime, datetime, str]]] = {}
        for item in items:
            begin, end = item.window
            self._windows.setdefault(item.type, []).append((begin, end, item.name))

    def __len__(self) -> int:
        return sum(len(w) for w in self._windows.values())

    def active_names(self, kind: str, time: str) -> List[str]:
        """Names featured for ``kind`` at ``time``."""
        at = parse_time(time)
        windows = self._windows.get(kind, ())
        if kind == "character":
            return [name for begin, end, name in windows if begin < at < end]
        return [name for begin, end, name in windows if begin <= at <= end]

    def is_up(self, kind: str, name: str, time: str) -> bool:
        return name in self.active_names(kind, time)

    @classmethod
    def from_list(cls, data: Iterable[Dict[str, Any]]) -> UpHistory:
        return cls(UpItem.from_dict(entry) for entry in data)


def load_up_history(path: str | Path) -> UpHistory:
    """Load up-list entries from a JSON array file."""
    with open(path, "r", encoding="utf-8") as f:
        return UpHistory.from_list(json.load(f))
