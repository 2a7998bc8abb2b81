from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from gvg_tracker.models.enums import MatchResult, Side
from gvg_tracker.models.match import (
    IngestReport,
    MatchRecord,
    RejectedRecord,
    new_record_id,
    utc_now,
)
from gvg_tracker.normalization.normalizer import (
    TEAM_SIZE,
    clean_whitespace,
    is_complete_team,
    normalize_picks,
    normalize_team,
    parse_tags,
    pick_character,
)

MAX_PICKS_PER_SIDE = 3

_datetime_adapter = TypeAdapter(datetime)


class InvalidRecordError(ValueError):
    """Raised when a match record fails validation at the ingestion boundary."""

    pass


def _check_side(side: Side, team: List[str], picks: List[str]) -> None:
    if not is_complete_team(team):
        raise InvalidRecordError(
            f"{side.value} team needs {TEAM_SIZE} distinct characters, got {team}"
        )
    if len(picks) > MAX_PICKS_PER_SIDE:
        raise InvalidRecordError(
            f"{side.value} has {len(picks)} skill picks, at most {MAX_PICKS_PER_SIDE} allowed"
        )
    for pick in picks:
        if pick_character(pick) not in team:
            raise InvalidRecordError(
                f"{side.value} pick '{pick}' does not belong to team {team}"
            )


def validate_record(record: MatchRecord) -> MatchRecord:
    """Normalizes a record and checks team size and pick membership.

    Returns a normalized copy of the record, or raises InvalidRecordError.
    """
    attackers = normalize_team(record.attackers)
    defenders = normalize_team(record.defenders)
    attacker_picks = normalize_picks(record.attacker_picks)
    defender_picks = normalize_picks(record.defender_picks)

    _check_side(Side.ATTACKER, attackers, attacker_picks)
    _check_side(Side.DEFENDER, defenders, defender_picks)

    return record.model_copy(
        update={
            "attackers": attackers,
            "defenders": defenders,
            "attacker_picks": attacker_picks,
            "defender_picks": defender_picks,
            "notes": clean_whitespace(record.notes),
            "tags": parse_tags(record.tags),
        }
    )


def create_record(
    attackers: Iterable[str],
    defenders: Iterable[str],
    result: Union[MatchResult, str] = MatchResult.WIN,
    notes: str = "",
    tags: Union[str, Iterable[str], None] = None,
    attacker_picks: Optional[Iterable[Any]] = None,
    defender_picks: Optional[Iterable[Any]] = None,
    created_at: Optional[datetime] = None,
    record_id: Optional[str] = None,
) -> MatchRecord:
    """Builds a validated record from form-style input.

    ``tags`` may be a comma-separated string or a list; picks may be
    "name:option" strings, SkillPick models or mappings.
    """
    try:
        record = MatchRecord(
            id=record_id or new_record_id(),
            attackers=normalize_team(attackers),
            defenders=normalize_team(defenders),
            result=MatchResult(result),
            attacker_picks=normalize_picks(attacker_picks),
            defender_picks=normalize_picks(defender_picks),
            notes=clean_whitespace(notes),
            tags=parse_tags(tags),
            created_at=created_at or utc_now(),
        )
    except (ValidationError, ValueError) as e:
        raise InvalidRecordError(f"Could not build match record: {e}") from e
    return validate_record(record)


def _coerce_result(value: Any) -> MatchResult:
    if isinstance(value, str) and value.strip().upper() == MatchResult.LOSS.value:
        return MatchResult.LOSS
    return MatchResult.WIN


def _coerce_created_at(value: Any) -> datetime:
    # Zero counts as missing, like an unset epoch
    if value in (None, "", 0, "0"):
        return utc_now()
    try:
        parsed = _datetime_adapter.validate_python(value)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed
    except (ValidationError, OverflowError):
        logger.debug(f"Unparsable created_at {value!r}, using current time.")
        return utc_now()


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def coerce_record(raw: Mapping[str, Any]) -> MatchRecord:
    """Turns an untrusted payload (e.g. an imported JSON object) into a record.

    Missing fields get defaults, loose types are coerced, and anything that
    still fails the record invariants raises InvalidRecordError.
    """
    if not isinstance(raw, Mapping):
        raise InvalidRecordError(f"Expected a mapping, got {type(raw).__name__}")

    raw_id = raw.get("id")
    tags = raw.get("tags")
    payload: Dict[str, Any] = {
        "id": clean_whitespace(str(raw_id) if raw_id is not None else "")
        or new_record_id(),
        "attackers": normalize_team(_as_list(raw.get("attackers"))),
        "defenders": normalize_team(_as_list(raw.get("defenders"))),
        "result": _coerce_result(raw.get("result")),
        "attacker_picks": normalize_picks(
            _as_list(_first(raw, "attacker_picks", "attackerPicks"))
        ),
        "defender_picks": normalize_picks(
            _as_list(_first(raw, "defender_picks", "defenderPicks"))
        ),
        "notes": clean_whitespace(raw.get("notes")),
        "tags": parse_tags(tags if isinstance(tags, str) else _as_list(tags)),
        "created_at": _coerce_created_at(_first(raw, "created_at", "createdAt")),
    }
    try:
        record = MatchRecord.model_validate(payload)
    except ValidationError as e:
        raise InvalidRecordError(f"Malformed match record: {e}") from e
    return validate_record(record)


def ingest_records(raw_items: Iterable[Any]) -> IngestReport:
    """Coerces a batch of payloads; one bad entry never aborts the rest."""
    report = IngestReport()
    for index, raw in enumerate(raw_items):
        try:
            report.accepted.append(coerce_record(raw))
        except InvalidRecordError as e:
            record_id = raw.get("id") if isinstance(raw, Mapping) else None
            logger.warning(f"Rejected record #{index} ({record_id or 'no id'}): {e}")
            report.rejected.append(
                RejectedRecord(
                    index=index,
                    record_id=str(record_id) if record_id is not None else None,
                    reason=str(e),
                )
            )

    logger.info(
        f"Ingested {len(report.accepted)} record(s), rejected {len(report.rejected)}."
    )
    return report


def sort_by_recency(records: Iterable[MatchRecord]) -> List[MatchRecord]:
    """Newest first."""
    return sorted(records, key=lambda r: r.created_at, reverse=True)


def merge_records(
    existing: Iterable[MatchRecord], incoming: Iterable[MatchRecord]
) -> List[MatchRecord]:
    """Combines two collections, collapsing records with the same signature.

    When signatures collide the record with the later ``created_at`` wins;
    on equal timestamps the first one seen (from ``existing``) is kept.
    """
    latest_by_signature: Dict[Tuple[str, ...], MatchRecord] = {}
    seen = 0
    for collection in (existing, incoming):
        for record in collection:
            seen += 1
            key = record.signature
            if (
                key not in latest_by_signature
                or record.created_at > latest_by_signature[key].created_at
            ):
                latest_by_signature[key] = record

    merged = sort_by_recency(latest_by_signature.values())
    logger.info(
        f"Merged {seen} record(s) into {len(merged)} unique record(s)."
    )
    return merged
