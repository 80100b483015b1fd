"""
Tests for the game schema registry.

Registry lookups, aliases, interchange gacha types and region resolution.
"""

import unittest

from gacha.errors import SchemaNotFound
from gacha.game_schemas import (
    GENSHIN_SCHEMA,
    STAR_RAIL_SCHEMA,
    ZZZ_SCHEMA,
    GameType,
    SchemaRegistry,
    build_default_registry,
)


class TestSchemaRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = build_default_registry()

    def test_lookup_by_value_and_enum(self):
        self.assertIs(self.registry.schema_for("genshin"), GENSHIN_SCHEMA)
        self.assertIs(self.registry.schema_for(GameType.STAR_RAIL), STAR_RAIL_SCHEMA)
        self.assertIs(self.registry.schema_for("zzz"), ZZZ_SCHEMA)

    def test_unknown_game_raises(self):
        with self.assertRaises(SchemaNotFound) as ctx:
            self.registry.schema_for("bh3")
        self.assertEqual(ctx.exception.game, "bh3")

    def test_lookup_by_uigf_key(self):
        self.assertIs(self.registry.schema_for_uigf_key("hk4e"), GENSHIN_SCHEMA)
        self.assertIs(self.registry.schema_for_uigf_key("nap"), ZZZ_SCHEMA)
        self.assertIsNone(self.registry.schema_for_uigf_key("bh3"))
        self.assertEqual(self.registry.uigf_keys(), ["hk4e", "hkrpg", "nap"])

    def test_membership_and_iteration(self):
        self.assertIn("sr", self.registry)
        self.assertIn(GameType.ZZZ, self.registry)
        self.assertNotIn("bh3", self.registry)
        self.assertEqual(len(list(self.registry)), 3)
        self.assertEqual(self.registry.games(), [GameType.GENSHIN, GameType.STAR_RAIL, GameType.ZZZ])

    def test_registry_is_read_only(self):
        with self.assertRaises(AttributeError):
            self.registry._by_game = {}

    def test_duplicate_schema_rejected(self):
        with self.assertRaises(ValueError):
            SchemaRegistry([GENSHIN_SCHEMA, GENSHIN_SCHEMA])

    def test_partial_registry(self):
        registry = SchemaRegistry([STAR_RAIL_SCHEMA])
        self.assertNotIn("genshin", registry)
        with self.assertRaises(SchemaNotFound):
            registry.schema_for(GameType.GENSHIN)


class TestGameSchema(unittest.TestCase):

    def test_banner_alias_shares_name(self):
        self.assertEqual(GENSHIN_SCHEMA.banner_name("400"), GENSHIN_SCHEMA.banner_name("301"))
        self.assertEqual(GENSHIN_SCHEMA.banner_name("999"), "999")

    def test_uigf_gacha_type(self):
        self.assertEqual(GENSHIN_SCHEMA.uigf_gacha_type("400"), "301")
        for banner in ("100", "200", "301", "302", "500"):
            self.assertEqual(GENSHIN_SCHEMA.uigf_gacha_type(banner), banner)

    def test_sub_banner_id(self):
        self.assertFalse(GENSHIN_SCHEMA.has_sub_banner_id)
        self.assertTrue(STAR_RAIL_SCHEMA.has_sub_banner_id)
        self.assertTrue(ZZZ_SCHEMA.has_sub_banner_id)
        self.assertIn("uigf_gacha_type", GENSHIN_SCHEMA.record_fields)

    def test_rarity_codes(self):
        self.assertEqual(GENSHIN_SCHEMA.top_rank, "5")
        self.assertEqual(STAR_RAIL_SCHEMA.second_rank, "4")
        self.assertEqual(ZZZ_SCHEMA.top_rank, "4")
        self.assertEqual(ZZZ_SCHEMA.second_rank, "3")

    def test_banner_order(self):
        self.assertEqual(GENSHIN_SCHEMA.banner_order, ("301", "302", "500", "200", "100"))
        self.assertEqual(ZZZ_SCHEMA.banner_order[0], "2001")

    def test_regions(self):
        self.assertEqual(GENSHIN_SCHEMA.region_for_uid("812345678"), "os_asia")
        self.assertEqual(GENSHIN_SCHEMA.region_for_uid("112345678"), "cn_gf01")
        self.assertEqual(GENSHIN_SCHEMA.region_for_uid("1812345678"), "os_asia")
        self.assertEqual(STAR_RAIL_SCHEMA.region_for_uid("600000001"), "prod_official_usa")
        self.assertEqual(STAR_RAIL_SCHEMA.region_for_uid("500000001"), "prod_gf_qd")
        self.assertEqual(STAR_RAIL_SCHEMA.region_for_uid("700000001"), "prod_official_euro")
        self.assertEqual(ZZZ_SCHEMA.region_for_uid("1012345678"), "prod_gf_us")
        self.assertEqual(ZZZ_SCHEMA.region_for_uid("1512345678"), "prod_gf_eu")
        self.assertEqual(ZZZ_SCHEMA.region_for_uid("12345678"), "prod_gf_cn")

    def test_schema_is_frozen(self):
        with self.assertRaises(Exception):
            GENSHIN_SCHEMA.top_rank = "4"


if __name__ == "__main__":
    unittest.main()
