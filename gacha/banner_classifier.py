"""
Banner Classifier

Maps banner ids to semantic categories and groups an account's records per
statistics banner. Historical ids that were migrated into another banner
(Genshin's second character banner "400" into "301") are treated as the same
banner.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from .game_schemas import BannerCategory, GameSchema
from .record_types import PullRecord


def statistics_banner(schema: GameSchema, banner_id: str) -> str:
    """Resolve a banner id to the id its statistics are kept under."""
    return schema.banner_aliases.get(banner_id, banner_id)


def classify(schema: GameSchema, banner_id: str) -> BannerCategory:
    """Category of ``banner_id`` under ``schema``; UNKNOWN if not listed."""
    target = statistics_banner(schema, banner_id)
    for candidate in (banner_id, target):
        if candidate in schema.character_banners:
            return BannerCategory.CHARACTER
        if candidate in schema.weapon_banners:
            return BannerCategory.WEAPON
        if candidate in schema.permanent_banners:
            return BannerCategory.PERMANENT
        if candidate in schema.beginner_banners:
            return BannerCategory.BEGINNER
        if candidate in schema.special_banners:
            return BannerCategory.SPECIAL
    return BannerCategory.UNKNOWN


def tracks_crooked(category: BannerCategory) -> bool:
    """Whether on-banner/off-banner statistics apply to ``category``."""
    return category in (BannerCategory.CHARACTER, BannerCategory.WEAPON)


def group_by_banner(records: Iterable[PullRecord], schema: GameSchema) -> Dict[str, List[PullRecord]]:
    """
    Group records per statistics banner.

    Aliased banners are merged and de-duplicated by record id. Known banners
    come first in the schema's display order, unknown ones after them in
    order of first appearance.
    """
    grouped: Dict[str, List[PullRecord]] = {}
    seen: Dict[str, set] = {}
    for record in records:
        banner = statistics_banner(schema, record.gacha_type)
        ids = seen.setdefault(banner, set())
        if record.id in ids:
            continue
        ids.add(record.id)
        grouped.setdefault(banner, []).append(record)

    ordered: Dict[str, List[PullRecord]] = {}
    for banner in schema.banner_order:
        if banner in grouped:
            ordered[banner] = grouped.pop(banner)
    ordered.update(grouped)
    return ordered
