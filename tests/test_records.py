"""Tests for record creation, validation, coercion and merging."""

from datetime import datetime, timedelta, timezone

import pytest

from gvg_tracker.models.enums import MatchResult
from gvg_tracker.models.match import MatchRecord
from gvg_tracker.normalization.records import (
    InvalidRecordError,
    coerce_record,
    create_record,
    ingest_records,
    merge_records,
    sort_by_recency,
    validate_record,
)

from conftest import DEFENSE, OTHER_DEFENSE, VER_TEAM


def test_create_record_normalizes_fields(base_time):
    record = create_record(
        attackers=["rudy", " van", "EILEENE"],
        defenders=["karin", "ork", "jave"],
        result="LOSS",
        notes="  needs   C6+ ",
        tags="Reflect, Tank, Reflect",
        attacker_picks=["van:s1", "rudy:s2"],
        defender_picks=[{"character": "karin", "option": "s1"}],
        created_at=base_time,
    )

    assert record.attackers == ["Eileene", "Rudy", "Vanessa"]
    assert record.defenders == ["Jave", "Karin", "Orkah"]
    assert record.result is MatchResult.LOSS
    assert record.notes == "needs C6+"
    assert record.tags == ["Reflect", "Tank"]
    assert record.attacker_picks == ["Vanessa:S1", "Rudy:S2"]
    assert record.attacker_pick_key == "Rudy:S2 + Vanessa:S1"
    assert record.defender_pick_key == "Karin:S1"
    assert record.created_at == base_time
    assert record.id


def test_create_record_treats_naive_timestamps_as_utc():
    record = create_record(VER_TEAM, DEFENSE, created_at=datetime(2024, 1, 1, 8, 30))
    assert record.created_at == datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "attackers, defenders",
    [
        (["Vanessa", "Eileene", ""], DEFENSE),
        (VER_TEAM, ["Orkah", "Jave"]),
        (["Rudy", "rudy", "Vanessa"], DEFENSE),
        (VER_TEAM + ["Spike"], DEFENSE),
    ],
)
def test_create_record_rejects_incomplete_teams(attackers, defenders):
    with pytest.raises(InvalidRecordError):
        create_record(attackers, defenders)


def test_create_record_rejects_too_many_picks():
    with pytest.raises(InvalidRecordError, match="at most 3"):
        create_record(
            VER_TEAM,
            DEFENSE,
            attacker_picks=["Vanessa:S1", "Eileene:S1", "Rudy:S1", "Rudy:S2"],
        )


def test_create_record_rejects_pick_for_non_member():
    with pytest.raises(InvalidRecordError, match="does not belong"):
        create_record(VER_TEAM, DEFENSE, attacker_picks=["Orkah:S1"])
    with pytest.raises(InvalidRecordError, match="defender"):
        create_record(VER_TEAM, DEFENSE, defender_picks=["Rudy:S1"])


def test_create_record_rejects_unknown_result():
    with pytest.raises(InvalidRecordError):
        create_record(VER_TEAM, DEFENSE, result="DRAW")


def test_validate_record_checks_directly_built_records():
    record = MatchRecord(
        attackers=["Vanessa", "Eileene", "Rudy"],
        defenders=DEFENSE,
        attacker_picks=["Karin:S1"],
    )
    with pytest.raises(InvalidRecordError):
        validate_record(record)


def test_validate_record_returns_normalized_copy():
    record = MatchRecord(attackers=["van", "eileene", "rudy"], defenders=["ork", "jave", "karin"])
    validated = validate_record(record)
    assert validated.attackers == ["Eileene", "Rudy", "Vanessa"]
    assert validated.id == record.id
    assert record.attackers == ["van", "eileene", "rudy"]


def test_coerce_record_fills_defaults_and_coerces_types():
    record = coerce_record(
        {
            "attackers": ["van", "eileene", "rudy"],
            "defenders": ["Orkah", "Jave", "Karin"],
            "result": "loss",
            "tags": "Reflect, Tank",
            "createdAt": 1700000000000,
            "attackerPicks": ["rudy:s1"],
        }
    )

    assert record.id
    assert record.result is MatchResult.LOSS
    assert record.notes == ""
    assert record.tags == ["Reflect", "Tank"]
    assert record.attacker_picks == ["Rudy:S1"]
    assert record.created_at == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def test_coerce_record_defaults_result_to_win_and_bad_timestamp_to_now():
    before = datetime.now(timezone.utc)
    record = coerce_record(
        {
            "id": 7,
            "attackers": VER_TEAM,
            "defenders": DEFENSE,
            "result": "???",
            "notes": None,
            "created_at": "not a date",
        }
    )
    assert record.id == "7"
    assert record.result is MatchResult.WIN
    assert record.created_at >= before


def test_coerce_record_treats_zero_timestamp_as_missing():
    before = datetime.now(timezone.utc)
    record = coerce_record({"attackers": VER_TEAM, "defenders": DEFENSE, "createdAt": 0})
    assert record.created_at >= before


def test_coerce_record_falls_back_when_timestamp_overflows_utc():
    before = datetime.now(timezone.utc)
    record = coerce_record(
        {
            "attackers": VER_TEAM,
            "defenders": DEFENSE,
            "createdAt": "0001-01-01T00:00:00+05:00",
        }
    )
    assert record.created_at >= before


def test_create_record_rejects_timestamp_that_overflows_utc():
    edge = datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=5)))
    with pytest.raises(InvalidRecordError, match="out of range"):
        create_record(VER_TEAM, DEFENSE, created_at=edge)


@pytest.mark.parametrize(
    "raw",
    [
        {"attackers": VER_TEAM},
        {"attackers": "Vanessa,Eileene,Rudy", "defenders": DEFENSE},
        {"attackers": VER_TEAM, "defenders": DEFENSE, "defender_picks": ["Rudy:S1"]},
        ["not", "a", "mapping"],
    ],
)
def test_coerce_record_rejects_malformed_payloads(raw):
    with pytest.raises(InvalidRecordError):
        coerce_record(raw)


def test_ingest_records_keeps_going_after_a_bad_entry():
    report = ingest_records(
        [
            {"id": "a", "attackers": VER_TEAM, "defenders": DEFENSE},
            {"id": "b", "attackers": ["Vanessa"], "defenders": DEFENSE},
            "garbage",
            {"id": "c", "attackers": VER_TEAM, "defenders": OTHER_DEFENSE},
        ]
    )

    assert [r.id for r in report.accepted] == ["a", "c"]
    assert [(r.index, r.record_id) for r in report.rejected] == [(1, "b"), (2, None)]
    assert "attacker" in report.rejected[0].reason


def test_ingest_records_survives_out_of_range_timestamp():
    report = ingest_records(
        [
            {"id": "a", "attackers": VER_TEAM, "defenders": DEFENSE},
            {
                "id": "b",
                "attackers": VER_TEAM,
                "defenders": DEFENSE,
                "createdAt": "0001-01-01T00:00:00+05:00",
            },
            {"id": "c", "attackers": VER_TEAM, "defenders": OTHER_DEFENSE},
        ]
    )

    assert [r.id for r in report.accepted] == ["a", "b", "c"]
    assert report.rejected == []


def test_sort_by_recency(make_record):
    old, new = make_record(minutes=0), make_record(minutes=5)
    assert sort_by_recency([old, new]) == [new, old]


def test_merge_with_itself_does_not_duplicate(sample_records):
    merged = merge_records(sample_records, sample_records)
    assert len(merged) == len(sample_records)


def test_merge_keeps_newer_duplicate(make_record):
    older = make_record(minutes=0, notes="same")
    newer = make_record(minutes=10, notes="same")

    merged = merge_records([older], [newer])

    assert merged == [newer]


def test_merge_keeps_existing_record_on_equal_timestamps(make_record):
    existing = make_record(record_id="existing")
    incoming = make_record(record_id="incoming")

    merged = merge_records([existing], [incoming])

    assert [r.id for r in merged] == ["existing"]


def test_merge_treats_different_picks_or_notes_as_distinct(make_record):
    base = make_record(minutes=0)
    with_picks = make_record(minutes=1, attacker_picks=["Rudy:S1"])
    with_notes = make_record(minutes=2, notes="different")

    merged = merge_records([base], [with_picks, with_notes])

    assert [r.id for r in merged] == [with_notes.id, with_picks.id, base.id]


def test_merge_output_is_newest_first(make_record):
    records = [make_record(minutes=m, notes=str(m)) for m in (3, 1, 2)]
    merged = merge_records(records, [])
    assert [r.created_at for r in merged] == sorted(
        (r.created_at for r in records), reverse=True
    )
    assert merged[0].created_at - merged[-1].created_at == timedelta(minutes=2)
