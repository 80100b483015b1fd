"""
Gacha Analyzer - Configuration

Loads settings from environment variables (prefix GACHA_) and an optional
.env file with Pydantic validation. Nested achievement settings use a double
underscore, e.g. GACHA_ACHIEVEMENTS__UNLUCKY_MIN=90.
"""

from functools import lru_cache
from typing import Dict, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class AchievementSettings(BaseModel):
    """Thresholds and phrasing of the achievement rules."""

    # ─── Numerals ───
    numeral_style: Literal["arabic", "chinese"] = "arabic"

    # ─── Streaks ───
    streak_min: int = 2
    pity_streak_min: int = 2

    # ─── Single top-tier pull distance ───
    single_shot_max: int = 10
    lucky_max: int = 30
    unlucky_min: int = 80

    # ─── Multi-pull batches ───
    batch_top_tier_min: int = 2
    batch_second_tier_min: int = 2

    # ─── Ordinary player band ───
    ordinary_average_min: float = 30.0
    ordinary_average_max: float = 80.0
    ordinary_total_min: int = 30

    # ─── Labels ({count} is substituted) ───
    streak_label: str = "{count} on-banner in a row"
    pity_label: str = "{count} guarantees in a row"
    lucky_label: str = "Lucky moment"
    single_shot_label: str = "Single shot"
    unlucky_label: str = "Unlucky after all"
    batch_top_tier_label: str = "{count} top-tier in one pull"
    batch_top_tier_special_labels: Dict[int, str] = Field(default_factory=lambda: {2: "Double top-tier"})
    batch_second_tier_label: str = "{count} second-tier in one pull"
    ordinary_label: str = "Ordinary player"
    novice_label: str = "Novice"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ─── Export ───
    export_app: str = "gacha-analyzer"
    export_app_version: str = "v0.1.0"

    # ─── Records ───
    default_lang: str = "zh-cn"

    # ─── Report ───
    chart_size: int = 10

    achievements: AchievementSettings = Field(default_factory=AchievementSettings)

    model_config = {
        "env_prefix": "GACHA_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
