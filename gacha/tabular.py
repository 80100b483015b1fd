"""
Tabular import/export of canonical records via pandas.

One row per pull, one column per PullRecord field. Every cell is read back as
text so ids and uids keep their leading digits and full precision.
"""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Iterable

import pandas as pd

from .game_schemas import GameSchema
from .normalizer import NormalizationResult, normalize_records
from .record_types import PullRecord

COLUMNS = [f.name for f in fields(PullRecord)]


def records_to_frame(records: Iterable[PullRecord]) -> pd.DataFrame:
    """Records in pull order as a DataFrame with the canonical columns."""
    ordered = sorted(records, key=lambda r: (r.game, r.uid, r.sort_key))
    return pd.DataFrame([r.to_dict() for r in ordered], columns=COLUMNS)


def records_from_frame(
    frame: pd.DataFrame,
    schema: GameSchema,
    *,
    uid: str = "",
    lang: str = "",
) -> NormalizationResult:
    """
    Normalize DataFrame rows as raw records of ``schema``'s game.

    Rows of another game (a ``game`` column that disagrees) are skipped.
    """
    if "game" in frame.columns:
        frame = frame[frame["game"].isin([schema.game.value, ""]) | frame["game"].isna()]
    rows = frame.to_dict(orient="records")
    return normalize_records(rows, schema, uid=uid, lang=lang)


def write_csv(records: Iterable[PullRecord], path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    records_to_frame(records).to_csv(path, index=False, encoding="utf-8")
    return path


def read_csv(path: str | Path, schema: GameSchema, *, uid: str = "", lang: str = "") -> NormalizationResult:
    """Read a CSV written by ``write_csv`` (or any sheet with those columns)."""
    frame = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
    return records_from_frame(frame, schema, uid=uid, lang=lang)

