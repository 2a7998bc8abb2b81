from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class ComboCount(BaseModel):
    """A pick-set key and how many times it was seen within one group."""

    key: str
    count: int


class AttackerStats(BaseModel):
    """Aggregated results of one attacking composition against the queried defense."""

    attacker_key: str
    attackers: List[str]  # Display names for the attacking team
    total: int
    wins: int
    win_rate: float  # wins / total, 0 when total is 0
    notes: List[str] = []
    tags: List[str] = []
    last_at: datetime  # Most recent match in this group
    top_attacker_combo: Optional[ComboCount] = None
    top_defender_combo: Optional[ComboCount] = None


class QueryResult(BaseModel):
    """Attacker breakdown for one defending team."""

    query_key: str
    match_count: int  # Records whose defending team matched the query
    rows: List[AttackerStats] = []
