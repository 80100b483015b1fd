"""
Ten-Pull Grouping

Records sharing an exact timestamp within one banner were bought together as
one multi-pull. Only notable batches (at least one top-tier reward, or two or
more second-tier rewards) feed the batch-based achievements.
"""

from __future__ import annotations

from itertools import groupby
from typing import Iterable, List

from .game_schemas import GameSchema
from .record_types import PullBatch, PullRecord


def group_batches(
    sorted_records: Iterable[PullRecord],
    schema: GameSchema,
    banner_id: str,
    *,
    notable_only: bool = True,
) -> List[PullBatch]:
    """
    Group a banner's records (already sorted by time, id) into batches.

    A group counts as a batch only when it has two or more records.
    """
    batches: List[PullBatch] = []
    for time, group in groupby(sorted_records, key=lambda r: r.time):
        items = list(group)
        if len(items) < 2:
            continue
        batch = PullBatch(
            banner_id=banner_id,
            time=time,
            size=len(items),
            top_tier_count=sum(1 for r in items if r.rank_type == schema.top_rank),
            second_tier_count=sum(1 for r in items if r.rank_type == schema.second_rank),
            record_ids=[r.id for r in items],
        )
        if notable_only and not batch.is_notable:
            continue
        batches.append(batch)
    return batches
