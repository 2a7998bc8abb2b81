"""Shared fixtures for the tracker tests."""

from datetime import datetime, timedelta, timezone

import pytest

from gvg_tracker.normalization.records import create_record

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

DEFENSE = ["Orkah", "Jave", "Karin"]
OTHER_DEFENSE = ["Kris", "Dellons", "Aris"]
VER_TEAM = ["Vanessa", "Eileene", "Rudy"]
SRR_TEAM = ["Spike", "Rin", "Rudy"]


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def make_record():
    """Factory building validated records with minute-offset timestamps."""

    def _make(attackers=VER_TEAM, defenders=DEFENSE, result="WIN", minutes=0, **kwargs):
        return create_record(
            attackers=attackers,
            defenders=defenders,
            result=result,
            created_at=BASE_TIME + timedelta(minutes=minutes),
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_records(make_record):
    return [
        make_record(result="WIN", minutes=0, notes="Needs C6+", tags=["Reflect", "Tank"]),
        make_record(result="LOSS", minutes=1, notes="Countered", tags=["Reflect"]),
        make_record(defenders=OTHER_DEFENSE, result="WIN", minutes=2),
    ]
