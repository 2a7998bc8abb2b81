from datetime import datetime, timezone
from typing import List, Optional, Tuple
import uuid

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .enums import MatchResult
from gvg_tracker.normalization.normalizer import pick_set_key, team_key


def new_record_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MatchRecord(BaseModel):
    """One logged battle outcome between an attacking and a defending team."""

    model_config = ConfigDict(frozen=True)  # Records are never mutated once stored

    id: str = Field(default_factory=new_record_id)
    attackers: List[str]  # Normalized, sorted character names
    defenders: List[str]
    result: MatchResult = MatchResult.WIN
    attacker_picks: List[str] = []  # Normalized "Name:OPTION" strings
    defender_picks: List[str] = []
    notes: str = ""
    tags: List[str] = []
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are treated as UTC so records stay comparable
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        try:
            return value.astimezone(timezone.utc)
        except OverflowError as e:
            raise ValueError(f"created_at out of range: {value.isoformat()}") from e

    @computed_field  # type: ignore[misc]
    @property
    def attacker_key(self) -> str:
        return team_key(self.attackers)

    @computed_field  # type: ignore[misc]
    @property
    def defender_key(self) -> str:
        return team_key(self.defenders)

    @property
    def attacker_pick_key(self) -> str:
        return pick_set_key(self.attacker_picks)

    @property
    def defender_pick_key(self) -> str:
        return pick_set_key(self.defender_picks)

    @property
    def signature(self) -> Tuple[str, str, str, str, str, str]:
        """Identity used to spot duplicate records when merging collections."""
        return (
            self.attacker_key,
            self.defender_key,
            self.attacker_pick_key,
            self.defender_pick_key,
            self.result.value,
            self.notes,
        )


class RejectedRecord(BaseModel):
    """An input entry that failed validation during batch ingestion."""

    index: int  # Position in the submitted batch
    record_id: Optional[str] = None
    reason: str


class IngestReport(BaseModel):
    """Outcome of coercing a batch of untrusted record payloads."""

    accepted: List[MatchRecord] = []
    rejected: List[RejectedRecord] = []
