"""
Achievement Evaluator

Derives qualitative badges from the streak/pity accumulator. Rules are data:
an ordered table of (kind, thresholds, label); adding an achievement means
adding a row, not touching the analyzer's counting.

Every matching rule contributes its label. Residual rules ("ordinary player")
only match when no other rule did. With no match at all, a single novice
label is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional

from .config import AchievementSettings, get_settings
from .formatting import format_count
from .record_types import StreakPityAccumulator


class RuleKind(str, Enum):
    NON_CROOKED_STREAK = "non_crooked_streak"
    PITY_STREAK = "pity_streak"
    LUCKY_MOMENT = "lucky_moment"
    SINGLE_SHOT = "single_shot"
    UNLUCKY = "unlucky"
    BATCH_TOP_TIER = "batch_top_tier"
    BATCH_SECOND_TIER = "batch_second_tier"
    ORDINARY = "ordinary"


@dataclass(frozen=True)
class AchievementRule:
    """
    One row of the rule table.

    ``threshold`` is the main bound; ``lower`` is an exclusive lower bound for
    range rules; ``min_total`` restricts by total pull count.
    """
    kind: RuleKind
    label: str
    threshold: float = 0
    lower: float = 0
    min_total: int = 0
    special_labels: Mapping[int, str] = field(default_factory=dict)
    residual: bool = False

    def render(self, count: Optional[int], numeral_style: str = "arabic") -> str:
        if count is not None and count in self.special_labels:
            return self.special_labels[count]
        if count is None:
            return self.label
        return self.label.format(count=format_count(count, numeral_style))


@dataclass(frozen=True)
class RuleMatch:
    """A matched rule; ``count`` is rendered into the label when set."""
    count: Optional[int] = None


# A predicate returns None when the rule does not match
Predicate = Callable[[AchievementRule, StreakPityAccumulator, int], Optional[RuleMatch]]
LABEL_ONLY = RuleMatch()


def _non_crooked_streak(rule, acc, total_pulls):
    best = acc.max_consecutive_non_crooked
    if best < rule.threshold:
        return None
    # The walk also counts the guaranteed reward that follows an off-banner
    # one, so the reported streak is one less than the raw maximum.
    return RuleMatch(max(best - 1, 0))


def _pity_streak(rule, acc, total_pulls):
    best = acc.max_consecutive_pity
    return RuleMatch(best) if best >= rule.threshold else None


def _lucky_moment(rule, acc, total_pulls):
    hit = any(rule.lower < d <= rule.threshold for d in acc.top_tier_distances)
    return LABEL_ONLY if hit else None


def _single_shot(rule, acc, total_pulls):
    hit = any(d <= rule.threshold for d in acc.top_tier_distances)
    return LABEL_ONLY if hit else None


def _unlucky(rule, acc, total_pulls):
    hit = any(d >= rule.threshold for d in acc.top_tier_distances)
    return LABEL_ONLY if hit else None


def _batch_top_tier(rule, acc, total_pulls):
    best = acc.max_top_tier_in_batch
    return RuleMatch(best) if best >= rule.threshold else None


def _batch_second_tier(rule, acc, total_pulls):
    best = acc.max_second_tier_in_batch
    return RuleMatch(best) if best >= rule.threshold else None


def _ordinary(rule, acc, total_pulls):
    avg = acc.average_top_tier_distance
    if rule.lower < avg < rule.threshold and total_pulls > rule.min_total:
        return LABEL_ONLY
    return None


PREDICATES: Dict[RuleKind, Predicate] = {
    RuleKind.NON_CROOKED_STREAK: _non_crooked_streak,
    RuleKind.PITY_STREAK: _pity_streak,
    RuleKind.LUCKY_MOMENT: _lucky_moment,
    RuleKind.SINGLE_SHOT: _single_shot,
    RuleKind.UNLUCKY: _unlucky,
    RuleKind.BATCH_TOP_TIER: _batch_top_tier,
    RuleKind.BATCH_SECOND_TIER: _batch_second_tier,
    RuleKind.ORDINARY: _ordinary,
}


def default_rules(settings: Optional[AchievementSettings] = None) -> List[AchievementRule]:
    """The rule table in evaluation order, built from configuration."""
    s = settings or get_settings().achievements
    return [
        AchievementRule(RuleKind.NON_CROOKED_STREAK, s.streak_label, threshold=s.streak_min),
        AchievementRule(RuleKind.PITY_STREAK, s.pity_label, threshold=s.pity_streak_min),
        AchievementRule(RuleKind.LUCKY_MOMENT, s.lucky_label, threshold=s.lucky_max, lower=s.single_shot_max),
        AchievementRule(RuleKind.SINGLE_SHOT, s.single_shot_label, threshold=s.single_shot_max),
        AchievementRule(RuleKind.UNLUCKY, s.unlucky_label, threshold=s.unlucky_min),
        AchievementRule(
            RuleKind.BATCH_TOP_TIER,
            s.batch_top_tier_label,
            threshold=s.batch_top_tier_min,
            special_labels=dict(s.batch_top_tier_special_labels),
        ),
        AchievementRule(RuleKind.BATCH_SECOND_TIER, s.batch_second_tier_label, threshold=s.batch_second_tier_min),
        AchievementRule(
            RuleKind.ORDINARY,
            s.ordinary_label,
            threshold=s.ordinary_average_max,
            lower=s.ordinary_average_min,
            min_total=s.ordinary_total_min,
            residual=True,
        ),
    ]


def evaluate_achievements(
    acc: StreakPityAccumulator,
    total_pulls: int,
    rules: Optional[List[AchievementRule]] = None,
    settings: Optional[AchievementSettings] = None,
) -> List[str]:
    """Labels of every matching rule, in table order; novice if none."""
    s = settings or get_settings().achievements
    table = rules if rules is not None else default_rules(s)

    matched: Dict[int, str] = {}
    for pos, rule in enumerate(table):
        if rule.residual:
            continue
        match = PREDICATES[rule.kind](rule, acc, total_pulls)
        if match is not None:
            matched[pos] = rule.render(match.count, s.numeral_style)

    if not matched:
        for pos, rule in enumerate(table):
            if not rule.residual:
                continue
            match = PREDICATES[rule.kind](rule, acc, total_pulls)
            if match is not None:
                matched[pos] = rule.render(match.count, s.numeral_style)

    if not matched:
        return [s.novice_label]
    return [matched[pos] for pos in sorted(matched)]
