"""
Game Schema Registry

Per-game constants: banner ids, rarity codes, item-type codes and region maps
for the three supported games. Schemas are plain data; the analyzer and codec
never branch on the game itself, only on what its schema says.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import SchemaNotFound


class GameType(str, Enum):
    """Supported games."""
    GENSHIN = "genshin"
    STAR_RAIL = "sr"
    ZZZ = "zzz"


class BannerCategory(str, Enum):
    """
    Semantic banner categories.

    Only CHARACTER and WEAPON banners take part in on-banner/off-banner
    ("crooked") statistics. UNKNOWN banners are kept in the per-banner list
    but excluded from every pity and streak counter.
    """
    CHARACTER = "character"
    WEAPON = "weapon"
    PERMANENT = "permanent"
    BEGINNER = "beginner"
    SPECIAL = "special"
    UNKNOWN = "unknown"


# Fields every game's vendor record may carry. Genshin records have no banner
# sub-id and instead carry the interchange gacha type.
COMMON_RECORD_FIELDS: Tuple[str, ...] = (
    "uid", "gacha_type", "item_id", "count", "time",
    "name", "lang", "item_type", "rank_type", "id",
)


@dataclass(frozen=True)
class GameSchema:
    """
    Static description of one game.

    Loaded once at startup and never mutated.
    """
    game: GameType
    name: str
    uigf_key: str  # top-level key of the game's block in a UIGF v4 container

    # banner id -> display name, in display order
    banner_names: Mapping[str, str]

    character_banners: Tuple[str, ...]
    weapon_banners: Tuple[str, ...]
    permanent_banners: Tuple[str, ...]
    beginner_banners: Tuple[str, ...]
    special_banners: Tuple[str, ...] = ()

    # Historical banner ids folded into another id for statistics
    banner_aliases: Mapping[str, str] = field(default_factory=dict)

    # Rarity codes: top tier ("5 star" / "S rank"), second tier, third tier
    top_rank: str = "5"
    second_rank: str = "4"
    third_rank: str = "3"

    # Item type display strings as they appear in records
    character_item: str = ""
    weapon_item: str = ""
    assistant_item: str = ""

    # Leading UID digits -> server region
    regions: Mapping[str, str] = field(default_factory=dict)

    record_fields: Tuple[str, ...] = COMMON_RECORD_FIELDS
    # Fields an interchange item of this game must carry non-empty
    required_fields: Tuple[str, ...] = ()

    # banner id -> interchange gacha type (Genshin only)
    uigf_gacha_types: Mapping[str, str] = field(default_factory=dict)

    @property
    def has_sub_banner_id(self) -> bool:
        return "gacha_id" in self.record_fields

    @property
    def banner_order(self) -> Tuple[str, ...]:
        return tuple(self.banner_names)

    def banner_name(self, banner_id: str) -> str:
        target = self.banner_aliases.get(banner_id, banner_id)
        return self.banner_names.get(target, banner_id)

    def uigf_gacha_type(self, banner_id: str) -> str:
        return self.uigf_gacha_types.get(banner_id, banner_id)

    def region_for_uid(self, uid: str) -> str:
        # Two-digit prefixes (ZZZ overseas, Genshin "18") win over one digit
        for prefix in (uid[:2], uid[:1]):
            if prefix and prefix in self.regions:
                return self.regions[prefix]
        return self.regions.get("cn", "")


# =============================================================================
# BUILT-IN GAME SCHEMAS
# =============================================================================

GENSHIN_SCHEMA = GameSchema(
    game=GameType.GENSHIN,
    name="Genshin Impact",
    uigf_key="hk4e",
    banner_names={
        "301": "Character Event Wish",
        "302": "Weapon Event Wish",
        "500": "Chronicled Wish",
        "200": "Standard Wish",
        "100": "Beginners' Wish",
    },
    character_banners=("301", "400"),
    weapon_banners=("302",),
    permanent_banners=("200",),
    beginner_banners=("100",),
    special_banners=("500",),
    banner_aliases={"400": "301"},
    top_rank="5",
    second_rank="4",
    third_rank="3",
    character_item="角色",
    weapon_item="武器",
    regions={
        "1": "cn_gf01",
        "2": "cn_gf01",
        "3": "cn_gf01",
        "4": "cn_gf01",
        "5": "cn_qd01",
        "6": "os_usa",
        "7": "os_euro",
        "8": "os_asia",
        "18": "os_asia",
        "9": "os_cht",
        "cn": "cn_gf01",
    },
    record_fields=COMMON_RECORD_FIELDS + ("uigf_gacha_type",),
    uigf_gacha_types={
        "100": "100",
        "200": "200",
        "301": "301",
        "302": "302",
        "400": "301",
        "500": "500",
    },
)

STAR_RAIL_SCHEMA = GameSchema(
    game=GameType.STAR_RAIL,
    name="Honkai: Star Rail",
    uigf_key="hkrpg",
    banner_names={
        "11": "Character Event Warp",
        "12": "Light Cone Event Warp",
        "21": "Collaboration Character Warp",
        "22": "Collaboration Light Cone Warp",
        "1": "Stellar Warp",
        "2": "Departure Warp",
    },
    character_banners=("11", "21"),
    weapon_banners=("12", "22"),
    permanent_banners=("1",),
    beginner_banners=("2",),
    top_rank="5",
    second_rank="4",
    third_rank="3",
    character_item="角色",
    weapon_item="光锥",
    regions={
        "1": "prod_gf_cn",
        "2": "prod_gf_cn",
        "5": "prod_gf_qd",
        "6": "prod_official_usa",
        "7": "prod_official_euro",
        "8": "prod_official_asia",
        "9": "prod_official_cht",
        "cn": "prod_gf_cn",
    },
    record_fields=COMMON_RECORD_FIELDS + ("gacha_id",),
    required_fields=("gacha_id", "item_id"),
)

ZZZ_SCHEMA = GameSchema(
    game=GameType.ZZZ,
    name="Zenless Zone Zero",
    uigf_key="nap",
    banner_names={
        "2001": "Exclusive Channel",
        "3001": "W-Engine Channel",
        "1001": "Stable Channel",
        "5001": "Bangboo Channel",
    },
    character_banners=("2001",),
    weapon_banners=("3001",),
    permanent_banners=("1001",),
    beginner_banners=("5001",),
    top_rank="4",
    second_rank="3",
    third_rank="2",
    character_item="代理人",
    weapon_item="音擎",
    assistant_item="邦布",
    regions={
        "10": "prod_gf_us",
        "13": "prod_gf_jp",
        "15": "prod_gf_eu",
        "17": "prod_gf_sg",
        "cn": "prod_gf_cn",
    },
    record_fields=COMMON_RECORD_FIELDS + ("gacha_id",),
    required_fields=("item_id",),
)


# =============================================================================
# REGISTRY
# =============================================================================


class SchemaRegistry:
    """
    Immutable lookup table of game schemas.

    Build one at startup and pass it to whatever needs it; it is safe to share
    across threads because nothing can change it after construction.
    """

    __slots__ = ("_by_game", "_by_uigf_key")

    def __init__(self, schemas: Iterable[GameSchema]):
        by_game: Dict[str, GameSchema] = {}
        by_key: Dict[str, GameSchema] = {}
        for schema in schemas:
            if schema.game.value in by_game:
                raise ValueError(f"duplicate schema for {schema.game.value}")
            by_game[schema.game.value] = schema
            by_key[schema.uigf_key] = schema
        object.__setattr__(self, "_by_game", by_game)
        object.__setattr__(self, "_by_uigf_key", by_key)

    def __setattr__(self, name, value):
        raise AttributeError("SchemaRegistry is read-only")

    def __contains__(self, game: object) -> bool:
        key = game.value if isinstance(game, GameType) else game
        return key in self._by_game

    def __iter__(self):
        return iter(self._by_game.values())

    def schema_for(self, game: GameType | str) -> GameSchema:
        key = game.value if isinstance(game, GameType) else str(game)
        try:
            return self._by_game[key]
        except KeyError:
            raise SchemaNotFound(key) from None

    def schema_for_uigf_key(self, key: str) -> Optional[GameSchema]:
        return self._by_uigf_key.get(key)

    def games(self) -> List[GameType]:
        return [schema.game for schema in self._by_game.values()]

    def uigf_keys(self) -> List[str]:
        return list(self._by_uigf_key)


def build_default_registry() -> SchemaRegistry:
    """Registry with the three built-in games."""
    return SchemaRegistry([GENSHIN_SCHEMA, STAR_RAIL_SCHEMA, ZZZ_SCHEMA])
