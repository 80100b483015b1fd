"""
Gacha pull-record analytics.

Pity and streak statistics, achievements and UIGF interchange for Genshin
Impact, Honkai: Star Rail and Zenless Zone Zero.
"""

from .errors import (
    GachaError,
    MalformedContainer,
    SchemaMismatch,
    SchemaNotFound,
    UnknownGame,
    UnsupportedVersion,
)
from .game_schemas import BannerCategory, GameSchema, GameType, SchemaRegistry, build_default_registry
from .record_types import AnalysisReport, AnalysisStats, BannerSummary, PullEvent, PullRecord
from .report import build_report, build_reports
from .uigf_codec import export_container, import_container, validate_container

__version__ = "0.1.0"

__all__ = [
    "AnalysisReport",
    "AnalysisStats",
    "BannerCategory",
    "BannerSummary",
    "GachaError",
    "GameSchema",
    "GameType",
    "MalformedContainer",
    "PullEvent",
    "PullRecord",
    "SchemaMismatch",
    "SchemaNotFound",
    "SchemaRegistry",
    "UnknownGame",
    "UnsupportedVersion",
    "build_default_registry",
    "build_report",
    "build_reports",
    "export_container",
    "import_container",
    "validate_container",
]
