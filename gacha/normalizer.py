"""
Record Normalizer

Converts raw pull records (vendor API records, UIGF items, legacy items or
spreadsheet rows) into canonical PullRecords for one account.

Per-record failures are collected and returned with the records that did
normalize, so one bad row never discards an account's history.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .errors import SchemaMismatch
from .game_schemas import GameSchema
from .record_types import PullRecord, TIME_FORMAT
from .up_history import parse_time

logger = logging.getLogger(__name__)

# First synthetic id handed out for records that arrive without one
FAKE_ID_BASE = 1000000000000000000


class FakeIdSequence:
    """Monotonic string ids for records lacking a vendor id."""

    def __init__(self, start: int = FAKE_ID_BASE):
        self._next = start

    def __call__(self) -> str:
        self._next += 1
        return str(self._next)


@dataclass
class NormalizationResult:
    records: List[PullRecord] = field(default_factory=list)
    failures: List[SchemaMismatch] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def extend(self, other: NormalizationResult) -> None:
        self.records.extend(other.records)
        self.failures.extend(other.failures)


def _text(value: Any) -> str:
    """Coerce a raw field to str; missing, None and NaN become ""."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def canonical_time(value: Any) -> str:
    """Return ``value`` as "YYYY-MM-DD HH:MM:SS"; raises ValueError."""
    text = _text(value)
    if not text:
        raise ValueError("empty time")
    return parse_time(text).strftime(TIME_FORMAT)


def normalize_record(
    raw: Any,
    schema: GameSchema,
    *,
    uid: str = "",
    lang: str = "",
    next_id: Optional[Callable[[], str]] = None,
    index: Optional[int] = None,
) -> PullRecord:
    """
    Map one raw record onto the canonical shape.

    ``uid`` and ``lang`` fill in for records that carry none (interchange
    items inherit them from their account block). Raises SchemaMismatch.
    """
    if not isinstance(raw, Mapping):
        raise SchemaMismatch(f"expected a mapping, got {type(raw).__name__}", index, raw)

    values: Dict[str, str] = {}
    for name in schema.record_fields:
        values[name] = _text(raw.get(name))
    # Non-native fields still normalize to explicit placeholders
    values.setdefault("gacha_id", "")

    banner_id = values["gacha_type"] or values.get("uigf_gacha_type", "")
    if not banner_id:
        raise SchemaMismatch("missing gacha_type", index, raw)

    try:
        time = canonical_time(raw.get("time"))
    except ValueError:
        raise SchemaMismatch(f"unparseable time {raw.get('time')!r}", index, raw) from None

    if not values["item_id"] and not values["name"]:
        raise SchemaMismatch("record has neither item_id nor name", index, raw)
    for name in schema.required_fields:
        if not values[name]:
            raise SchemaMismatch(f"missing {name}", index, raw)

    record_id = values["id"]
    if not record_id:
        if next_id is None:
            raise SchemaMismatch("missing id", index, raw)
        record_id = next_id()

    return PullRecord(
        uid=values["uid"] or _text(uid),
        game=schema.game.value,
        gacha_type=banner_id,
        time=time,
        id=record_id,
        rank_type=values["rank_type"],
        item_id=values["item_id"],
        item_type=values["item_type"],
        name=values["name"],
        gacha_id=values["gacha_id"] if schema.has_sub_banner_id else "",
        count=values["count"] or "1",
        lang=values["lang"] or _text(lang),
    )


def normalize_records(
    raw_records: Iterable[Any],
    schema: GameSchema,
    *,
    uid: str = "",
    lang: str = "",
    id_source: Optional[Callable[[], str]] = None,
) -> NormalizationResult:
    """
    Normalize a batch of raw records.

    Records without an id receive one from ``id_source`` (a fresh
    FakeIdSequence by default). Duplicate ids within one (uid, banner) keep
    the first occurrence.
    """
    next_id = id_source or FakeIdSequence()
    result = NormalizationResult()
    seen = set()

    for index, raw in enumerate(raw_records):
        try:
            record = normalize_record(raw, schema, uid=uid, lang=lang, next_id=next_id, index=index)
        except SchemaMismatch as exc:
            result.failures.append(exc)
            continue
        key = (record.uid, record.gacha_type, record.id)
        if key in seen:
            continue
        seen.add(key)
        result.records.append(record)

    if result.failures:
        logger.warning(
            "%s: %d of %d records could not be normalized",
            schema.game.value,
            len(result.failures),
            len(result.records) + len(result.failures),
        )
    return result


def normalize_account_block(
    block: Mapping[str, Any],
    schema: GameSchema,
    *,
    default_lang: str = "",
    id_source: Optional[Callable[[], str]] = None,
) -> NormalizationResult:
    """Normalize the ``list`` of one interchange account block."""
    return normalize_records(
        block.get("list") or [],
        schema,
        uid=_text(block.get("uid")),
        lang=_text(block.get("lang")) or default_lang,
        id_source=id_source,
    )
