import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Needed so backend.db can be imported during test collection.
os.environ.setdefault("DATABASE_URL", "sqlite://")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def day(n, hour=0):
    return datetime(2026, 3, n, hour, tzinfo=timezone.utc)


@pytest.fixture
def make_record():
    from backend.schemas import HackathonRecord

    def factory(id="h1", **overrides):
        fields = dict(
            id=id,
            title=f"Hackathon {id}",
            description="",
            organizer="Acme Labs",
            location="Virtual",
            category="Other",
            status="upcoming",
            difficulty=None,
            mode=None,
            tags=[],
            prize_amount=None,
            start_date=day(1),
            end_date=day(3),
            registrations=None,
        )
        fields.update(overrides)
        return HackathonRecord(**fields)

    return factory
