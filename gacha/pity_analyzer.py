"""
Pity & Streak Analyzer

Walks each banner's records in pull order and derives:
- per-banner summaries (top-tier rewards annotated with their pull distance,
  plus a trailing placeholder for pulls not yet resolved)
- the streak/pity accumulator consumed by the achievement evaluator
- account-wide counters and averages

Ordering is (time, record id): timestamps only have second precision and a
multi-pull shares one timestamp, so the record id breaks ties.

Without an up-list history there is no way to tell on-banner from off-banner
rewards. The walk then leaves that split unresolved: up and crooked counters,
rates and the streak and pity runs stay at zero, and no reward is marked
crooked.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from .banner_classifier import classify, tracks_crooked
from .game_schemas import BannerCategory, GameSchema
from .record_types import (
    AnalysisStats,
    BannerSummary,
    PullEvent,
    PullRecord,
    StreakPityAccumulator,
)
from .ten_pull import group_batches
from .up_history import UpHistory

logger = logging.getLogger(__name__)


@dataclass
class PityAnalysis:
    banners: List[BannerSummary] = field(default_factory=list)
    accumulator: StreakPityAccumulator = field(default_factory=StreakPityAccumulator)
    stats: AnalysisStats = field(default_factory=AnalysisStats)


def sort_records(records: Iterable[PullRecord]) -> List[PullRecord]:
    """Ascending by (time, id); a total order since ids are unique per banner."""
    return sorted(records, key=lambda r: r.sort_key)


def average(total: float, count: int, default: float = 0.0) -> float:
    """``total / count``, or ``default`` when undefined or non-finite."""
    if not count:
        return default
    value = total / count
    return value if math.isfinite(value) else default


def _is_on_banner(
    record: PullRecord,
    category: BannerCategory,
    up_history: Optional[UpHistory],
) -> Optional[bool]:
    """True or False for character and weapon banners; None if unresolved."""
    if category in (BannerCategory.CHARACTER, BannerCategory.WEAPON) and up_history is None:
        return None
    if category is BannerCategory.CHARACTER:
        return up_history.is_up("character", record.name, record.time)
    if category is BannerCategory.WEAPON:
        return up_history.is_up("weapon", record.name, record.time)
    # Permanent, beginner and special banners are never "crooked"
    return True


def analyze_banners(
    grouped: Mapping[str, List[PullRecord]],
    schema: GameSchema,
    up_history: Optional[UpHistory] = None,
) -> PityAnalysis:
    """
    Run the pity and streak walk over every banner.

    ``grouped`` maps statistics banner id -> records, as produced by
    ``banner_classifier.group_by_banner``; iteration order decides favorite
    tie-breaks.
    """
    if up_history is not None and not len(up_history):
        up_history = None
    analysis = PityAnalysis()
    acc = analysis.accumulator
    stats = analysis.stats
    if up_history is None and any(tracks_crooked(classify(schema, b)) for b in grouped):
        stats.crooked_resolved = False
        logger.warning(
            "%s: no up-list history, on-banner and off-banner rewards are not told apart",
            schema.game.value,
        )

    sums: Dict[str, int] = {
        "up_character": 0,
        "up_weapon": 0,
        "crooked_character": 0,
        "crooked_weapon": 0,
        "permanent": 0,
        "second": 0,
    }
    favorite_count: Optional[int] = None

    for banner_id, records in grouped.items():
        category = classify(schema, banner_id)
        tracked = category is not BannerCategory.UNKNOWN
        ordered = sort_records(records)

        summary = BannerSummary(
            banner_id=banner_id,
            name=schema.banner_name(banner_id),
            category=category,
            total_pulls=len(ordered),
        )
        analysis.banners.append(summary)
        stats.total_pulls += len(ordered)

        count = 0
        count_second = 0
        # Next top-tier reward on this banner is guaranteed on-banner
        guaranteed = False

        for record in ordered:
            count += 1
            count_second += 1

            if category is BannerCategory.CHARACTER:
                stats.character_banner_pulls += 1
            elif category is BannerCategory.WEAPON:
                stats.weapon_banner_pulls += 1
            elif category is BannerCategory.PERMANENT:
                stats.permanent_banner_pulls += 1

            if record.rank_type == schema.top_rank:
                on_banner = _is_on_banner(record, category, up_history)

                if category is BannerCategory.CHARACTER and on_banner is not None:
                    key = "up_character" if on_banner else "crooked_character"
                    if on_banner:
                        stats.up_character_count += 1
                    else:
                        stats.crooked_character_count += 1
                    sums[key] += count
                elif category is BannerCategory.WEAPON and on_banner is not None:
                    key = "up_weapon" if on_banner else "crooked_weapon"
                    if on_banner:
                        stats.up_weapon_count += 1
                    else:
                        stats.crooked_weapon_count += 1
                    sums[key] += count
                elif category is BannerCategory.PERMANENT:
                    stats.permanent_top_tier_count += 1
                    sums["permanent"] += count

                if tracked:
                    acc.top_tier_distances.append(count)
                    if tracks_crooked(category) and on_banner is not None:
                        if on_banner:
                            acc.record_on_banner(guaranteed)
                            guaranteed = False
                        else:
                            acc.record_off_banner()
                            guaranteed = True
                    if favorite_count is None or count < favorite_count:
                        favorite_count = count
                        stats.favorite = record.name
                        stats.favorite_count = count

                summary.events.append(PullEvent(
                    distance=count,
                    record_id=record.id,
                    time=record.time,
                    name=record.name,
                    item_type=record.item_type,
                    rank_type=record.rank_type,
                    is_crooked=on_banner is False,
                ))
                count = 0

            if record.rank_type == schema.second_rank and tracked:
                acc.second_tier_distances.append(count_second)
                stats.second_tier_count += 1
                sums["second"] += count_second
                count_second = 0

        if count > 0:
            summary.events.append(PullEvent.placeholder(count))

        if tracked:
            acc.batches.extend(group_batches(ordered, schema, banner_id))

    stats.up_character_average = average(sums["up_character"], stats.up_character_count)
    stats.up_weapon_average = average(sums["up_weapon"], stats.up_weapon_count)
    stats.crooked_character_average = average(sums["crooked_character"], stats.crooked_character_count)
    stats.crooked_weapon_average = average(sums["crooked_weapon"], stats.crooked_weapon_count)
    stats.permanent_average = average(sums["permanent"], stats.permanent_top_tier_count)
    stats.second_tier_average = average(sums["second"], stats.second_tier_count)

    stats.up_character_rate = average(
        stats.up_character_count * 100,
        stats.up_character_count + stats.crooked_character_count,
    )
    stats.up_weapon_rate = average(
        stats.up_weapon_count * 100,
        stats.up_weapon_count + stats.crooked_weapon_count,
    )
    return analysis
