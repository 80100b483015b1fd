"""Tests for multi-pull batch grouping and the batch achievements it feeds."""

import unittest

from gacha.achievements import evaluate_achievements
from gacha.banner_classifier import group_by_banner
from gacha.config import AchievementSettings
from gacha.game_schemas import GENSHIN_SCHEMA
from gacha.pity_analyzer import analyze_banners
from gacha.record_types import PullRecord
from gacha.ten_pull import group_batches


def _ten_pull(ranks, time="2024-03-01 12:00:00", banner="301", start=0):
    return [
        PullRecord(
            uid="800000001",
            game="genshin",
            gacha_type=banner,
            time=time,
            id=f"1709290800000{start + n:06d}",
            rank_type=rank,
            name=f"item{start + n}",
        )
        for n, rank in enumerate(ranks)
    ]


class TestGroupBatches(unittest.TestCase):

    def test_ten_pull_counts(self):
        records = _ten_pull(["3", "5", "3", "4", "3", "3", "5", "3", "4", "3"])
        batches = group_batches(records, GENSHIN_SCHEMA, "301")
        self.assertEqual(len(batches), 1)
        batch = batches[0]
        self.assertEqual(batch.size, 10)
        self.assertEqual(batch.top_tier_count, 2)
        self.assertEqual(batch.second_tier_count, 2)
        self.assertEqual(batch.record_ids, [r.id for r in records])

    def test_single_pulls_are_not_batches(self):
        records = _ten_pull(["5"], time="2024-03-01 12:00:00")
        records += _ten_pull(["5"], time="2024-03-01 12:00:01", start=1)
        self.assertEqual(group_batches(records, GENSHIN_SCHEMA, "301"), [])

    def test_unremarkable_batches_dropped(self):
        records = _ten_pull(["3"] * 9 + ["4"])
        self.assertEqual(group_batches(records, GENSHIN_SCHEMA, "301"), [])
        batches = group_batches(records, GENSHIN_SCHEMA, "301", notable_only=False)
        self.assertEqual(len(batches), 1)
        self.assertFalse(batches[0].is_notable)

    def test_two_second_tier_is_notable(self):
        records = _ten_pull(["3"] * 8 + ["4", "4"])
        batches = group_batches(records, GENSHIN_SCHEMA, "301")
        self.assertEqual(batches[0].second_tier_count, 2)


class TestBatchAchievements(unittest.TestCase):

    def setUp(self):
        self.settings = AchievementSettings()

    def _labels(self, records):
        analysis = analyze_banners(group_by_banner(records, GENSHIN_SCHEMA), GENSHIN_SCHEMA)
        return evaluate_achievements(
            analysis.accumulator, analysis.stats.total_pulls, settings=self.settings
        )

    def test_two_top_tier_in_one_batch(self):
        labels = self._labels(_ten_pull(["3", "5", "3", "4", "3", "3", "5", "3", "3", "3"]))
        self.assertIn("Double top-tier", labels)

    def test_one_top_tier_in_one_batch(self):
        labels = self._labels(_ten_pull(["3", "5", "3", "4", "3", "3", "4", "3", "3", "3"]))
        self.assertNotIn("Double top-tier", labels)
        self.assertFalse(any("top-tier in one pull" in label for label in labels))
        self.assertIn("2 second-tier in one pull", labels)

    def test_three_top_tier_uses_count_label(self):
        labels = self._labels(_ten_pull(["5", "5", "5", "3", "3", "3", "3", "3", "3", "4"]))
        self.assertIn("3 top-tier in one pull", labels)


if __name__ == "__main__":
    unittest.main()
