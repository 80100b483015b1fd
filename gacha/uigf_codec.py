"""
UIGF Interchange Codec

Reads, validates, migrates and writes UIGF interchange documents.

- v4.0 containers hold any number of accounts for any number of games,
  keyed by the game's UIGF key (hk4e / hkrpg / nap).
- Legacy single-account documents (UIGF v2.x/v3.x, SRGF v1.x) are migrated
  to v4.0 before import.

Validation is exhaustive: every violation is collected with its path (e.g.
``hk4e[0].list[3].id``) before MalformedContainer is raised.
"""

from __future__ import annotations

import json
import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from .errors import MalformedContainer, UnknownGame, UnsupportedVersion
from .game_schemas import GameSchema, GameType, SchemaRegistry
from .normalizer import FakeIdSequence, normalize_account_block
from .record_types import PullRecord
from .uigf_models import LegacyContainer, UIGFInfo, account_model_for

logger = logging.getLogger(__name__)

CURRENT_VERSION = "v4.0"
DEFAULT_LEGACY_VERSION = "v3.0"

# Major versions per document flavour
CURRENT_MAJORS = {4}
LEGACY_UIGF_MAJORS = {2, 3}
LEGACY_SRGF_MAJORS = {1}

# Leading UID digit -> server UTC offset (hours); anything else is UTC+8
UID_TIMEZONES = {"6": -5, "7": 1, "8": 8, "9": 8}
DEFAULT_TIMEZONE = 8

_VERSION_RE = re.compile(r"^v(\d+)\.(\d+)$")

# Canonical record fields written for every exported item, in order
_EXPORT_FIELDS = ("gacha_type", "item_id", "count", "time", "name", "item_type", "rank_type", "id")

ImportResult = Dict[str, Dict[str, List[PullRecord]]]


# =============================================================================
# VERSION DETECTION
# =============================================================================


def detect_version(data: Mapping[str, Any]) -> str:
    """
    Version string of an interchange document.

    Explicit ``info.version`` / ``info.uigf_version`` / ``info.srgf_version``
    win, in that order. Without one, a document carrying any per-game block
    is v4.0, anything else is treated as v3.0.
    """
    info = data.get("info") if isinstance(data, Mapping) else None
    if isinstance(info, Mapping):
        for key in ("version", "uigf_version", "srgf_version"):
            if info.get(key):
                return str(info[key])
    # Legacy documents keep their items under a flat "list"
    if isinstance(data, Mapping) and any(
        k not in ("info", "list") and isinstance(v, list) for k, v in data.items()
    ):
        return CURRENT_VERSION
    return DEFAULT_LEGACY_VERSION


def _is_srgf(data: Mapping[str, Any]) -> bool:
    info = data.get("info")
    return isinstance(info, Mapping) and bool(info.get("srgf_version")) and not info.get("version")


def _parse_major(version: str) -> Optional[int]:
    match = _VERSION_RE.match(version)
    return int(match.group(1)) if match else None


def is_legacy(data: Mapping[str, Any]) -> bool:
    """
    True for a supported legacy document, False for a supported v4 one.

    Raises UnsupportedVersion for a well-formed version with no migration
    path and MalformedContainer for a version string that is not ``vX.Y``.
    """
    version = detect_version(data)
    major = _parse_major(version)
    if major is None:
        raise MalformedContainer([f"info.version: {version!r} does not look like vX.Y"])
    if _is_srgf(data):
        if major in LEGACY_SRGF_MAJORS:
            return True
        raise UnsupportedVersion(version)
    if major in CURRENT_MAJORS:
        return False
    if major in LEGACY_UIGF_MAJORS:
        return True
    raise UnsupportedVersion(version)


# =============================================================================
# VALIDATION
# =============================================================================


def _format_loc(prefix: str, loc: Iterable[Any]) -> str:
    """("hk4e", (0, "list", 2, "id")) -> "hk4e[0].list[2].id"."""
    path = prefix
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def _violations(prefix: str, exc: ValidationError) -> List[str]:
    out = []
    for err in exc.errors():
        path = _format_loc(prefix, err["loc"])
        if err["type"] == "missing":
            out.append(f"{path} is missing")
        else:
            out.append(f"{path}: {err['msg']}")
    return out


def _game_blocks(data: Mapping[str, Any]) -> List[Tuple[str, Any]]:
    return [(k, v) for k, v in data.items() if k != "info"]


def validate_container(data: Any, registry: SchemaRegistry) -> List[str]:
    """
    Every structural violation of a v4.0 container, as path-prefixed messages.

    An empty list means the container is valid. Game blocks the registry
    does not know are validated against the generic item shape.
    """
    if not isinstance(data, Mapping):
        return ["container must be a JSON object"]

    violations: List[str] = []
    if "info" not in data:
        violations.append("info is missing")
    else:
        try:
            UIGFInfo.model_validate(data["info"])
        except ValidationError as exc:
            violations.extend(_violations("info", exc))

    blocks = [(k, v) for k, v in _game_blocks(data) if registry.schema_for_uigf_key(k) or isinstance(v, list)]
    if not blocks:
        violations.append("container must include at least one game's account list")

    for key, value in blocks:
        adapter = TypeAdapter(List[account_model_for(key)])
        try:
            adapter.validate_python(value)
        except ValidationError as exc:
            violations.extend(_violations(key, exc))
    return violations


def validate_legacy(data: Any) -> List[str]:
    """Every structural violation of a legacy single-account document."""
    if not isinstance(data, Mapping):
        return ["container must be a JSON object"]
    try:
        LegacyContainer.model_validate(data)
    except ValidationError as exc:
        return _violations("", exc)
    return []


# =============================================================================
# MIGRATION
# =============================================================================


def timezone_for_uid(uid: str) -> int:
    return UID_TIMEZONES.get(str(uid)[:1], DEFAULT_TIMEZONE)


def _legacy_game(data: Mapping[str, Any], game: Optional[str]) -> str:
    if game:
        return game.value if isinstance(game, GameType) else str(game)
    if _is_srgf(data):
        return GameType.STAR_RAIL.value
    return GameType.GENSHIN.value


def migrate_legacy(
    legacy: Mapping[str, Any],
    registry: SchemaRegistry,
    game: Optional[str] = None,
    export_app: Optional[str] = None,
    export_app_version: Optional[str] = None,
    id_source: Optional[Callable[[], str]] = None,
) -> Dict[str, Any]:
    """
    Lift a legacy single-account document into a v4.0 container.

    The game defaults to Star Rail for SRGF documents and Genshin otherwise.
    Items without an id receive synthetic ids. Raises MalformedContainer if
    the legacy document itself is invalid, UnknownGame if the game is not
    registered.
    """
    violations = validate_legacy(legacy)
    if violations:
        raise MalformedContainer(violations)

    game_key = _legacy_game(legacy, game)
    if game_key not in registry:
        raise UnknownGame(game_key)
    schema = registry.schema_for(game_key)
    next_id = id_source or FakeIdSequence()

    info = legacy["info"]
    uid = str(info["uid"])
    tz = info.get("region_time_zone")

    items = []
    for raw in legacy["list"]:
        item = {k: ("" if v is None else str(v)) for k, v in raw.items() if k != "uid"}
        if not item.get("id"):
            item["id"] = next_id()
        if "item_id" not in schema.required_fields:
            item.setdefault("item_id", "")
        if "uigf_gacha_type" in schema.record_fields and not item.get("uigf_gacha_type"):
            item["uigf_gacha_type"] = schema.uigf_gacha_type(item["gacha_type"])
        items.append(item)

    account = {
        "uid": uid,
        "timezone": tz if tz is not None else timezone_for_uid(uid),
        "lang": info.get("lang") or "",
        "list": items,
    }
    timestamp = info.get("export_timestamp") or int(time.time())
    return {
        "info": {
            "export_timestamp": str(timestamp),
            "export_app": export_app or info["export_app"],
            "export_app_version": export_app_version or info["export_app_version"],
            "version": CURRENT_VERSION,
        },
        schema.uigf_key: [account],
    }


# =============================================================================
# IMPORT
# =============================================================================


def _check_games(data: Mapping[str, Any], registry: SchemaRegistry) -> None:
    for key, value in _game_blocks(data):
        if isinstance(value, list) and registry.schema_for_uigf_key(key) is None:
            raise UnknownGame(key)


def import_container(
    data: Any,
    registry: SchemaRegistry,
    game: Optional[str] = None,
    default_lang: str = "zh-cn",
) -> ImportResult:
    """
    Import an interchange document into canonical records.

    Returns {game: {uid: [PullRecord, ...]}}. Legacy documents are migrated
    first; ``game`` names the game of a legacy document. Raises
    UnsupportedVersion, UnknownGame or MalformedContainer (with every
    violation).
    """
    if not isinstance(data, Mapping):
        raise MalformedContainer(["container must be a JSON object"])

    if is_legacy(data):
        logger.info("migrating %s document to %s", detect_version(data), CURRENT_VERSION)
        data = migrate_legacy(data, registry, game=game)

    _check_games(data, registry)
    violations = validate_container(data, registry)
    if violations:
        raise MalformedContainer(violations)

    result: ImportResult = {}
    failures: List[str] = []
    next_id = FakeIdSequence()
    for schema in registry:
        blocks = data.get(schema.uigf_key)
        if not blocks:
            continue
        accounts = result.setdefault(schema.game.value, {})
        for pos, block in enumerate(blocks):
            normalized = normalize_account_block(block, schema, default_lang=default_lang, id_source=next_id)
            for exc in normalized.failures:
                failures.append(f"{schema.uigf_key}[{pos}].list[{exc.index}]: {exc.reason}")
            accounts.setdefault(str(block["uid"]), []).extend(normalized.records)

    if failures:
        raise MalformedContainer(failures)

    logger.info(
        "imported %d records for %d accounts",
        sum(len(r) for accounts in result.values() for r in accounts.values()),
        sum(len(accounts) for accounts in result.values()),
    )
    return result


def flatten(imported: ImportResult) -> List[PullRecord]:
    """All records of an import result in one list."""
    return [r for accounts in imported.values() for records in accounts.values() for r in records]


# =============================================================================
# EXPORT
# =============================================================================


def _export_item(record: PullRecord, schema: GameSchema) -> Dict[str, str]:
    item: Dict[str, str] = {}
    if "uigf_gacha_type" in schema.record_fields:
        item["uigf_gacha_type"] = schema.uigf_gacha_type(record.gacha_type)
    for name in _EXPORT_FIELDS:
        item[name] = getattr(record, name)
    if schema.has_sub_banner_id:
        item["gacha_id"] = record.gacha_id
    return item


def export_container(
    records: Iterable[PullRecord],
    registry: SchemaRegistry,
    export_app: str,
    export_app_version: str,
    export_timestamp: Optional[int] = None,
    default_lang: str = "zh-cn",
) -> Dict[str, Any]:
    """
    Build a v4.0 container from canonical records.

    Records are grouped by game, then uid; each account's items are written
    in pull order. Raises UnknownGame for records of an unregistered game,
    ValueError when there is nothing to export and MalformedContainer when
    the records lack fields the interchange format requires.
    """
    grouped: Dict[str, Dict[str, List[PullRecord]]] = {}
    for record in records:
        if record.game not in registry:
            raise UnknownGame(record.game)
        grouped.setdefault(record.game, {}).setdefault(record.uid, []).append(record)
    if not grouped:
        raise ValueError("no records to export")

    container: Dict[str, Any] = {
        "info": {
            "export_timestamp": export_timestamp if export_timestamp is not None else int(time.time()),
            "export_app": export_app,
            "export_app_version": export_app_version,
            "version": CURRENT_VERSION,
        }
    }
    for schema in registry:
        accounts = grouped.get(schema.game.value)
        if not accounts:
            continue
        blocks = []
        for uid, account_records in accounts.items():
            ordered = sorted(account_records, key=lambda r: r.sort_key)
            blocks.append({
                "uid": uid,
                "timezone": timezone_for_uid(uid),
                "lang": ordered[0].lang or default_lang,
                "list": [_export_item(r, schema) for r in ordered],
            })
        container[schema.uigf_key] = blocks

    violations = validate_container(container, registry)
    if violations:
        raise MalformedContainer(violations)

    logger.info(
        "exported %d accounts across %d games",
        sum(len(a) for a in grouped.values()),
        len(grouped),
    )
    return container


# =============================================================================
# FILES
# =============================================================================


def load_container(path: str | Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def dump_container(container: Mapping[str, Any], path: str | Path) -> Path:
    """Write ``container`` as UTF-8 JSON; returns the path written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(container, f, indent=2, ensure_ascii=False)
    return path


def export_filename(container: Mapping[str, Any]) -> str:
    """UIGF-v4.0-{uid}-{YYYYMMDD-HHMMSS}.json, uid of the first account."""
    uid = ""
    for key, blocks in _game_blocks(container):
        if isinstance(blocks, list) and blocks:
            uid = str(blocks[0].get("uid", ""))
            break
    stamp = int(container["info"]["export_timestamp"])
    moment = datetime.fromtimestamp(stamp, tz=timezone.utc).strftime("%Y%m%d-%H%M%S")
    return f"UIGF-{CURRENT_VERSION}-{uid}-{moment}.json"
