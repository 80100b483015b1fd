"""
UIGF interchange document models.

Pydantic models for the v4.0 multi-game container and for the legacy
single-account UIGF (v2.x/v3.x) / SRGF (v1.x) documents. They are used for
structural validation only; conversion works on plain dicts.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, StrictFloat

VERSION_PATTERN = r"^v\d+\.\d+$"


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


# ═══════════════════════════════════════════════════════════
# UIGF v4.0
# ═══════════════════════════════════════════════════════════


class UIGFInfo(_Lenient):
    export_timestamp: str = Field(min_length=1)
    export_app: str = Field(min_length=1)
    export_app_version: str = Field(min_length=1)
    version: str = Field(pattern=VERSION_PATTERN)


class GenshinItem(_Lenient):
    uigf_gacha_type: str = Field(min_length=1)
    gacha_type: str = Field(min_length=1)
    item_id: str  # may be empty, but must be present
    count: Optional[str] = None
    time: str = Field(min_length=1)
    name: Optional[str] = None
    item_type: Optional[str] = None
    rank_type: Optional[str] = None
    id: str = Field(min_length=1)


class StarRailItem(_Lenient):
    gacha_type: str = Field(min_length=1)
    gacha_id: str = Field(min_length=1)
    item_id: str = Field(min_length=1)
    count: Optional[str] = None
    time: str = Field(min_length=1)
    name: Optional[str] = None
    item_type: Optional[str] = None
    rank_type: Optional[str] = None
    id: str = Field(min_length=1)


class ZZZItem(_Lenient):
    gacha_type: str = Field(min_length=1)
    gacha_id: Optional[str] = None
    item_id: str = Field(min_length=1)
    count: Optional[str] = None
    time: str = Field(min_length=1)
    name: Optional[str] = None
    item_type: Optional[str] = None
    rank_type: Optional[str] = None
    id: str = Field(min_length=1)


class GenericItem(_Lenient):
    """Item shape for games registered beyond the built-in three."""
    gacha_type: str = Field(min_length=1)
    time: str = Field(min_length=1)
    id: str = Field(min_length=1)


class _AccountBase(_Lenient):
    uid: str = Field(min_length=1)
    timezone: StrictFloat  # any JSON number, never a string
    lang: Optional[str] = None


class GenshinAccount(_AccountBase):
    list: List[GenshinItem]


class StarRailAccount(_AccountBase):
    list: List[StarRailItem]


class ZZZAccount(_AccountBase):
    list: List[ZZZItem]


class GenericAccount(_AccountBase):
    list: List[GenericItem]


# UIGF top-level key -> account model
ACCOUNT_MODELS: Dict[str, Type[_AccountBase]] = {
    "hk4e": GenshinAccount,
    "hkrpg": StarRailAccount,
    "nap": ZZZAccount,
}


def account_model_for(uigf_key: str) -> Type[_AccountBase]:
    return ACCOUNT_MODELS.get(uigf_key, GenericAccount)


# ═══════════════════════════════════════════════════════════
# Legacy single-account documents (UIGF v2.x/v3.x, SRGF v1.x)
# ═══════════════════════════════════════════════════════════


class LegacyInfo(_Lenient):
    uid: str = Field(min_length=1)
    lang: Optional[str] = None
    region_time_zone: Optional[StrictFloat] = None
    export_timestamp: Optional[str] = None
    export_app: str = Field(min_length=1)
    export_app_version: str = Field(min_length=1)
    uigf_version: Optional[str] = Field(default=None, pattern=VERSION_PATTERN)
    srgf_version: Optional[str] = Field(default=None, pattern=VERSION_PATTERN)


class LegacyItem(_Lenient):
    gacha_type: str = Field(min_length=1)
    time: str = Field(min_length=1)
    id: Optional[str] = None  # filled with a synthetic id on migration
    gacha_id: Optional[str] = None
    uigf_gacha_type: Optional[str] = None
    item_id: Optional[str] = None
    count: Optional[str] = None
    name: Optional[str] = None
    item_type: Optional[str] = None
    rank_type: Optional[str] = None


class LegacyContainer(BaseModel):
    model_config = ConfigDict(extra="allow")

    info: LegacyInfo
    list: List[LegacyItem]
