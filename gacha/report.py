"""
Report Assembly

Runs the full pipeline for one account: banner grouping, pity and streak walk,
achievements and chart series, into one AnalysisReport.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .achievements import evaluate_achievements
from .banner_classifier import group_by_banner, tracks_crooked
from .config import Settings, get_settings
from .game_schemas import GameSchema, SchemaRegistry
from .pity_analyzer import analyze_banners
from .record_types import AnalysisReport, BannerSummary, ChartSeries, PullRecord
from .up_history import UpHistory

logger = logging.getLogger(__name__)


def chart_for_banner(summary: BannerSummary, size: int) -> ChartSeries:
    """The last ``size`` on-banner top-tier distances of a banner, oldest first."""
    recent = [e for e in summary.rewards if not e.is_crooked][-size:] if size > 0 else []
    return ChartSeries(
        banner_id=summary.banner_id,
        title=summary.name,
        labels=[e.name for e in recent],
        values=[e.distance for e in recent],
    )


def build_report(
    records: Iterable[PullRecord],
    schema: GameSchema,
    up_history: Optional[UpHistory] = None,
    settings: Optional[Settings] = None,
    skipped_records: int = 0,
) -> AnalysisReport:
    """Analyze one account's records of one game."""
    settings = settings or get_settings()
    records = list(records)
    uid = records[0].uid if records else ""

    analysis = analyze_banners(group_by_banner(records, schema), schema, up_history)
    achievements = evaluate_achievements(
        analysis.accumulator,
        analysis.stats.total_pulls,
        settings=settings.achievements,
    )
    charts = [
        chart_for_banner(summary, settings.chart_size)
        for summary in analysis.banners
        if tracks_crooked(summary.category)
    ]

    logger.debug("%s/%s: %d pulls across %d banners", schema.game.value, uid, len(records), len(analysis.banners))
    return AnalysisReport(
        game=schema.game.value,
        uid=uid,
        region=schema.region_for_uid(uid) if uid else "",
        stats=analysis.stats,
        banners=analysis.banners,
        achievements=achievements,
        charts=charts,
        batches=list(analysis.accumulator.batches),
        skipped_records=skipped_records,
    )


def build_reports(
    records: Iterable[PullRecord],
    registry: SchemaRegistry,
    up_histories: Optional[Dict[str, UpHistory]] = None,
    settings: Optional[Settings] = None,
) -> List[AnalysisReport]:
    """
    One report per (game, uid), in order of first appearance.

    ``up_histories`` maps game id -> up-list history for that game.
    """
    up_histories = up_histories or {}
    grouped: Dict[Tuple[str, str], List[PullRecord]] = {}
    for record in records:
        grouped.setdefault((record.game, record.uid), []).append(record)

    reports = []
    for (game, _uid), account_records in grouped.items():
        schema = registry.schema_for(game)
        reports.append(build_report(account_records, schema, up_histories.get(game), settings))
    return reports
