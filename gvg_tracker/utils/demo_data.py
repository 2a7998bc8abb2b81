# gvg_tracker/utils/demo_data.py
from datetime import datetime, timedelta
from typing import List, Optional

from gvg_tracker.models.match import MatchRecord, utc_now
from gvg_tracker.normalization.records import create_record

DEMO_MATCHES = [
    {
        "attackers": ["Vanessa", "Eileene", "Rudy"],
        "defenders": ["Orkah", "Jave", "Karin"],
        "result": "WIN",
        "notes": "Needs C6+ with a 100% resist set",
        "tags": ["Archetype:Tank", "Reflect"],
    },
    {
        "attackers": ["Vanessa", "Eileene", "Rudy"],
        "defenders": ["Orkah", "Jave", "Karin"],
        "result": "LOSS",
        "notes": "Got countered hard",
        "tags": ["Reflect"],
    },
    {
        "attackers": ["Vanessa", "Eileene", "Rudy"],
        "defenders": ["Kris", "Dellons", "Aris"],
        "result": "WIN",
        "notes": "",
        "tags": ["Archetype:Fast Damage"],
    },
    {
        "attackers": ["Spike", "Rin", "Rudy"],
        "defenders": ["Kris", "Dellons", "Aris"],
        "result": "LOSS",
        "notes": "Lacked status resist",
        "tags": ["Needs Resist"],
    },
]


def seed_demo_records(now: Optional[datetime] = None) -> List[MatchRecord]:
    """Builds the sample data set, newest first, one minute apart."""
    now = now or utc_now()
    return [
        create_record(created_at=now - timedelta(minutes=i), **match)
        for i, match in enumerate(DEMO_MATCHES)
    ]
