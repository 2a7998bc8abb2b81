from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from loguru import logger

from gvg_tracker.models.enums import MatchResult
from gvg_tracker.models.match import MatchRecord
from gvg_tracker.models.stats import AttackerStats, ComboCount, QueryResult
from gvg_tracker.normalization.normalizer import (
    is_complete_team,
    normalize_team,
    team_key,
    unique,
)


class _AttackerBucket:
    """Running totals for one attacking composition."""

    def __init__(self, attackers: List[str]):
        self.attackers = attackers
        self.total = 0
        self.wins = 0
        self.notes: List[str] = []
        self.tags: List[str] = []
        self.last_at: Optional[datetime] = None
        self.attacker_combos: Counter = Counter()
        self.defender_combos: Counter = Counter()

    def add(self, record: MatchRecord) -> None:
        self.total += 1
        if record.result == MatchResult.WIN:
            self.wins += 1
        if record.notes:
            self.notes.append(record.notes)
        self.tags.extend(record.tags)
        if self.last_at is None or record.created_at > self.last_at:
            self.last_at = record.created_at
        if record.attacker_pick_key:
            self.attacker_combos[record.attacker_pick_key] += 1
        if record.defender_pick_key:
            self.defender_combos[record.defender_pick_key] += 1


def top_combo(combos: Counter) -> Optional[ComboCount]:
    """Most frequent pick-set key; ties go to the lexicographically smallest key."""
    if not combos:
        return None
    key, count = min(combos.items(), key=lambda item: (-item[1], item[0]))
    return ComboCount(key=key, count=count)


def _to_row(attacker_key: str, bucket: _AttackerBucket) -> AttackerStats:
    return AttackerStats(
        attacker_key=attacker_key,
        attackers=bucket.attackers,
        total=bucket.total,
        wins=bucket.wins,
        win_rate=bucket.wins / bucket.total if bucket.total else 0.0,
        notes=unique(bucket.notes),
        tags=unique(bucket.tags),
        last_at=bucket.last_at,
        top_attacker_combo=top_combo(bucket.attacker_combos),
        top_defender_combo=top_combo(bucket.defender_combos),
    )


def query(
    records: Iterable[MatchRecord], defending_query: Iterable[str]
) -> Optional[QueryResult]:
    """
    Summarizes how attacking compositions fared against one defending team.

    Args:
        records: The caller's snapshot of validated match records. Never mutated.
        defending_query: Free-text names of the three defending characters,
                         in any order.

    Returns:
        A QueryResult whose rows are sorted by match count, then win rate,
        then recency (all descending), or None unless the names resolve
        to exactly three distinct characters.
    """
    query_names = normalize_team(defending_query)
    if not is_complete_team(query_names):
        logger.debug(f"Incomplete defending query {query_names}, skipping search.")
        return None
    query_key = team_key(query_names)

    buckets: Dict[str, _AttackerBucket] = {}
    match_count = 0
    for record in records:
        if record.defender_key != query_key:
            continue
        match_count += 1
        attacker_key = record.attacker_key
        if attacker_key not in buckets:
            buckets[attacker_key] = _AttackerBucket(normalize_team(record.attackers))
        buckets[attacker_key].add(record)

    rows = [_to_row(key, bucket) for key, bucket in buckets.items()]
    rows.sort(key=lambda r: (r.total, r.win_rate, r.last_at), reverse=True)

    logger.debug(
        f"Query {query_key}: {match_count} match(es) across {len(rows)} attacker team(s)."
    )
    return QueryResult(query_key=query_key, match_count=match_count, rows=rows)
