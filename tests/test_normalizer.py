"""
Tests for the record normalizer.

Field coercion, canonical timestamps, synthetic ids, per-record failures
and de-duplication.
"""

import unittest

from gacha.errors import SchemaMismatch
from gacha.game_schemas import GENSHIN_SCHEMA, STAR_RAIL_SCHEMA, ZZZ_SCHEMA
from gacha.normalizer import (
    FAKE_ID_BASE,
    FakeIdSequence,
    canonical_time,
    normalize_account_block,
    normalize_record,
    normalize_records,
)


def _raw(**overrides):
    raw = {
        "gacha_type": "301",
        "time": "2024-01-01 10:00:00",
        "id": "1704067200000000001",
        "item_id": "10000089",
        "name": "Furina",
        "item_type": "角色",
        "rank_type": "5",
    }
    raw.update(overrides)
    return raw


class TestNormalizeRecord(unittest.TestCase):

    def test_fills_defaults(self):
        record = normalize_record(_raw(), GENSHIN_SCHEMA, uid="800000001", lang="zh-cn")
        self.assertEqual(record.uid, "800000001")
        self.assertEqual(record.game, "genshin")
        self.assertEqual(record.count, "1")
        self.assertEqual(record.lang, "zh-cn")
        self.assertEqual(record.gacha_id, "")

    def test_numbers_become_text(self):
        record = normalize_record(_raw(id=123, rank_type=5, count=1.0), GENSHIN_SCHEMA, uid="800000001")
        self.assertEqual(record.id, "123")
        self.assertEqual(record.rank_type, "5")
        self.assertEqual(record.count, "1")

    def test_nan_is_empty(self):
        record = normalize_record(_raw(item_id=float("nan")), GENSHIN_SCHEMA, uid="800000001")
        self.assertEqual(record.item_id, "")

    def test_record_uid_wins_over_block_uid(self):
        record = normalize_record(_raw(uid="812345678"), GENSHIN_SCHEMA, uid="800000001")
        self.assertEqual(record.uid, "812345678")

    def test_uigf_gacha_type_fallback(self):
        raw = _raw(uigf_gacha_type="301")
        del raw["gacha_type"]
        record = normalize_record(raw, GENSHIN_SCHEMA)
        self.assertEqual(record.gacha_type, "301")

    def test_missing_gacha_type(self):
        raw = _raw()
        del raw["gacha_type"]
        with self.assertRaises(SchemaMismatch) as ctx:
            normalize_record(raw, GENSHIN_SCHEMA, index=4)
        self.assertEqual(ctx.exception.index, 4)
        self.assertIn("gacha_type", ctx.exception.reason)

    def test_bad_time(self):
        with self.assertRaises(SchemaMismatch) as ctx:
            normalize_record(_raw(time="yesterday"), GENSHIN_SCHEMA)
        self.assertIn("time", ctx.exception.reason)

    def test_iso_time_is_canonicalized(self):
        record = normalize_record(_raw(time="2024-01-01T10:00:00"), GENSHIN_SCHEMA)
        self.assertEqual(record.time, "2024-01-01 10:00:00")
        self.assertEqual(canonical_time(" 2024-01-01 10:00:00 "), "2024-01-01 10:00:00")

    def test_needs_item_id_or_name(self):
        with self.assertRaises(SchemaMismatch):
            normalize_record(_raw(item_id="", name=""), GENSHIN_SCHEMA)
        record = normalize_record(_raw(item_id=""), GENSHIN_SCHEMA)
        self.assertEqual(record.name, "Furina")

    def test_not_a_mapping(self):
        with self.assertRaises(SchemaMismatch):
            normalize_record(["301", "2024-01-01 10:00:00"], GENSHIN_SCHEMA)

    def test_missing_id_without_source(self):
        with self.assertRaises(SchemaMismatch):
            normalize_record(_raw(id=""), GENSHIN_SCHEMA)

    def test_sub_banner_id_only_where_native(self):
        sr = normalize_record(_raw(gacha_type="11", gacha_id="2003"), STAR_RAIL_SCHEMA)
        self.assertEqual(sr.gacha_id, "2003")
        genshin = normalize_record(_raw(gacha_id="2003"), GENSHIN_SCHEMA)
        self.assertEqual(genshin.gacha_id, "")

    def test_interchange_required_fields(self):
        with self.assertRaises(SchemaMismatch) as ctx:
            normalize_record(_raw(gacha_type="11", gacha_id=""), STAR_RAIL_SCHEMA)
        self.assertEqual(ctx.exception.reason, "missing gacha_id")
        with self.assertRaises(SchemaMismatch) as ctx:
            normalize_record(_raw(gacha_type="11", gacha_id="2003", item_id=""), STAR_RAIL_SCHEMA)
        self.assertEqual(ctx.exception.reason, "missing item_id")
        with self.assertRaises(SchemaMismatch):
            normalize_record(_raw(gacha_type="2001", item_id=""), ZZZ_SCHEMA)
        zzz = normalize_record(_raw(gacha_type="2001", item_id="1021"), ZZZ_SCHEMA)
        self.assertEqual(zzz.gacha_id, "")


class TestNormalizeRecords(unittest.TestCase):

    def test_failures_are_collected(self):
        raws = [_raw(id="1"), _raw(id="2", time="bad"), _raw(id="3")]
        result = normalize_records(raws, GENSHIN_SCHEMA, uid="800000001")
        self.assertFalse(result.ok)
        self.assertEqual([r.id for r in result.records], ["1", "3"])
        self.assertEqual(len(result.failures), 1)
        self.assertEqual(result.failures[0].index, 1)

    def test_duplicates_keep_first(self):
        raws = [_raw(id="1", name="A"), _raw(id="1", name="B"), _raw(id="1", gacha_type="302", name="C")]
        result = normalize_records(raws, GENSHIN_SCHEMA, uid="800000001")
        self.assertTrue(result.ok)
        self.assertEqual([r.name for r in result.records], ["A", "C"])

    def test_synthetic_ids(self):
        raws = [_raw(id=""), _raw(id=None)]
        result = normalize_records(raws, GENSHIN_SCHEMA, uid="800000001")
        self.assertEqual(
            [r.id for r in result.records],
            [str(FAKE_ID_BASE + 1), str(FAKE_ID_BASE + 2)],
        )

    def test_shared_id_source(self):
        ids = FakeIdSequence()
        normalize_records([_raw(id="")], GENSHIN_SCHEMA, id_source=ids)
        result = normalize_records([_raw(id="")], GENSHIN_SCHEMA, id_source=ids)
        self.assertEqual(result.records[0].id, str(FAKE_ID_BASE + 2))

    def test_account_block(self):
        block = {"uid": 800000001, "timezone": 8, "list": [_raw(id="1")]}
        result = normalize_account_block(block, GENSHIN_SCHEMA, default_lang="en-us")
        record = result.records[0]
        self.assertEqual(record.uid, "800000001")
        self.assertEqual(record.lang, "en-us")

        block["lang"] = "ja-jp"
        result = normalize_account_block(block, GENSHIN_SCHEMA, default_lang="en-us")
        self.assertEqual(result.records[0].lang, "ja-jp")


if __name__ == "__main__":
    unittest.main()
