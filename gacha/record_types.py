"""
Pull Record Data Types

Canonical record model and the analysis outputs built from it.
All types are deterministic and JSON-serializable.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional
import json

from .game_schemas import BannerCategory


# Canonical timestamp layout, second precision, no timezone
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class PullRecord:
    """
    One loot-box draw in canonical shape.

    Every field is a string. Fields a game does not provide are "" so that
    comparisons and sorting are total.
    """
    uid: str
    game: str
    gacha_type: str  # banner id, game-specific
    time: str  # "YYYY-MM-DD HH:MM:SS"
    id: str  # unique within (uid, banner), lexicographically sortable
    rank_type: str = ""
    item_id: str = ""
    item_type: str = ""
    name: str = ""
    gacha_id: str = ""  # banner sub-id; "" where the game has none
    count: str = "1"
    lang: str = ""

    @property
    def sort_key(self) -> tuple:
        return (self.time, self.id)

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PullRecord:
        """Build from an already-canonical dict; unknown keys are ignored."""
        names = {f.name for f in fields(cls)}
        return cls(**{k: ("" if v is None else str(v)) for k, v in data.items() if k in names})


@dataclass
class PullEvent:
    """
    One entry of a banner summary.

    Either a top-tier reward annotated with the number of pulls since the
    previous top-tier reward (inclusive), or the trailing placeholder holding
    pulls made since the last top-tier reward.
    """
    distance: int
    record_id: str = ""
    time: str = ""
    name: str = ""
    item_type: str = ""
    rank_type: str = ""
    is_crooked: bool = False
    is_placeholder: bool = False

    @classmethod
    def placeholder(cls, distance: int) -> PullEvent:
        return cls(distance=distance, name="?", is_placeholder=True)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BannerSummary:
    """One banner's aggregated view. Events are chronological."""
    banner_id: str
    name: str
    category: BannerCategory
    total_pulls: int = 0
    events: List[PullEvent] = field(default_factory=list)

    @property
    def rewards(self) -> List[PullEvent]:
        return [e for e in self.events if not e.is_placeholder]

    @property
    def pending_pulls(self) -> int:
        """Pulls since the last top-tier reward."""
        if self.events and self.events[-1].is_placeholder:
            return self.events[-1].distance
        return 0

    def newest_first(self) -> List[PullEvent]:
        """Rewards newest first with the placeholder on top, for display."""
        ordered = sorted(self.rewards, key=lambda e: (e.time, e.record_id), reverse=True)
        if self.pending_pulls:
            ordered.insert(0, self.events[-1])
        return ordered

    def to_dict(self) -> Dict[str, Any]:
        return {
            "banner_id": self.banner_id,
            "name": self.name,
            "category": self.category.value,
            "total_pulls": self.total_pulls,
            "events": [e.to_dict() for e in self.events],
        }


@dataclass
class PullBatch:
    """A multi-pull purchase: two or more records sharing one timestamp."""
    banner_id: str
    time: str
    size: int
    top_tier_count: int = 0
    second_tier_count: int = 0
    record_ids: List[str] = field(default_factory=list)

    @property
    def is_notable(self) -> bool:
        return self.top_tier_count >= 1 or self.second_tier_count >= 2

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StreakPityAccumulator:
    """
    Transient per-run state of the pity and streak walk.

    Created fresh for every analysis; never persisted.
    """
    consecutive_non_crooked: int = 0
    max_consecutive_non_crooked: int = 0
    consecutive_pity: int = 0
    max_consecutive_pity: int = 0
    top_tier_distances: List[int] = field(default_factory=list)
    second_tier_distances: List[int] = field(default_factory=list)
    batches: List[PullBatch] = field(default_factory=list)

    def record_on_banner(self, guaranteed: bool) -> None:
        self.consecutive_non_crooked += 1
        self.max_consecutive_non_crooked = max(
            self.max_consecutive_non_crooked, self.consecutive_non_crooked
        )
        # Only an on-banner reward won without the guarantee ends a pity run
        if not guaranteed:
            self.consecutive_pity = 0

    def record_off_banner(self) -> None:
        self.consecutive_non_crooked = 0
        self.consecutive_pity += 1
        self.max_consecutive_pity = max(self.max_consecutive_pity, self.consecutive_pity)

    @property
    def max_top_tier_in_batch(self) -> int:
        return max((b.top_tier_count for b in self.batches), default=0)

    @property
    def max_second_tier_in_batch(self) -> int:
        return max((b.second_tier_count for b in self.batches), default=0)

    @property
    def average_top_tier_distance(self) -> float:
        if not self.top_tier_distances:
            return 0.0
        return sum(self.top_tier_distances) / len(self.top_tier_distances)


@dataclass
class AnalysisStats:
    """Counters and averages across every banner of one account."""
    total_pulls: int = 0
    character_banner_pulls: int = 0
    weapon_banner_pulls: int = 0
    permanent_banner_pulls: int = 0

    up_character_count: int = 0
    up_weapon_count: int = 0
    crooked_character_count: int = 0
    crooked_weapon_count: int = 0
    permanent_top_tier_count: int = 0
    second_tier_count: int = 0

    up_character_average: float = 0.0
    up_weapon_average: float = 0.0
    crooked_character_average: float = 0.0
    crooked_weapon_average: float = 0.0
    permanent_average: float = 0.0
    second_tier_average: float = 0.0

    up_character_rate: float = 0.0  # percent
    up_weapon_rate: float = 0.0  # percent
    # False when no up-list history told on-banner from off-banner rewards
    crooked_resolved: bool = True

    favorite: str = ""
    favorite_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, float):
                data[key] = round(value, 2)
        return data


@dataclass
class ChartSeries:
    """Recent on-banner top-tier pull distances for one banner, oldest first."""
    banner_id: str
    title: str
    labels: List[str] = field(default_factory=list)
    values: List[int] = field(default_factory=list)
    type: str = "line"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "banner_id": self.banner_id,
            "data": [{"label": l, "value": v} for l, v in zip(self.labels, self.values)],
        }


@dataclass
class AnalysisReport:
    """Everything the rendering layer needs for one account."""
    game: str
    uid: str
    region: str = ""
    stats: AnalysisStats = field(default_factory=AnalysisStats)
    banners: List[BannerSummary] = field(default_factory=list)
    achievements: List[str] = field(default_factory=list)
    charts: List[ChartSeries] = field(default_factory=list)
    batches: List[PullBatch] = field(default_factory=list)
    skipped_records: int = 0

    def banner(self, banner_id: str) -> Optional[BannerSummary]:
        for summary in self.banners:
            if summary.banner_id == banner_id:
                return summary
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game": self.game,
            "uid": self.uid,
            "region": self.region,
            "stats": self.stats.to_dict(),
            "achievements": list(self.achievements),
            "banners": [b.to_dict() for b in self.banners],
            "charts": [c.to_dict() for c in self.charts],
            "batches": [b.to_dict() for b in self.batches],
            "skipped_records": self.skipped_records,
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
