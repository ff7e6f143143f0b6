"""Seed fixtures for local development and tests.

Provides stable fixture IDs and a small kiosk layout:
- Two root bubbles ("Explore", "Sponsors") with leaves under Explore
- A venue map image and a website entry
- A non-overlapping speaker schedule

scripts/seed_dev.py uses seed_fixtures() as its single source of truth.
"""

from uuid import UUID

import pytest
from sqlalchemy.orm import Session

from kiosk.db.models import Bubble, Media, Speaker

# =============================================================================
# Stable Fixture IDs (binding)
# =============================================================================

FIXTURE_MAP_MEDIA_ID = UUID("00000000-0000-0000-0000-000000000101")
FIXTURE_WEBSITE_MEDIA_ID = UUID("00000000-0000-0000-0000-000000000102")

FIXTURE_EXPLORE_BUBBLE_ID = UUID("00000000-0000-0000-0000-000000000201")
FIXTURE_SPONSORS_BUBBLE_ID = UUID("00000000-0000-0000-0000-000000000202")
FIXTURE_MAP_BUBBLE_ID = UUID("00000000-0000-0000-0000-000000000203")
FIXTURE_WEBSITE_BUBBLE_ID = UUID("00000000-0000-0000-0000-000000000204")

FIXTURE_SPEAKER_IDS = (
    UUID("00000000-0000-0000-0000-000000000301"),
    UUID("00000000-0000-0000-0000-000000000302"),
    UUID("00000000-0000-0000-0000-000000000303"),
)

FIXTURE_SCHEDULE = (
    ("Ada Lovelace", "Opening Keynote", "09:00", "10:00"),
    ("Grace Hopper", "Compilers Then and Now", "10:00", "11:00"),
    ("Katherine Johnson", "Closing Panel", "14:00", "15:30"),
)

FIXTURE_IMAGE_URL = "https://fake-assets.test/image/upload/kiosk/image/venue-map"


def build_fixture_rows() -> list[Media | Bubble | Speaker]:
    """Build fixture rows in insertion order (parents before children)."""
    rows: list[Media | Bubble | Speaker] = [
        Media(
            id=FIXTURE_MAP_MEDIA_ID,
            title="Venue Map",
            kind="image",
            url=FIXTURE_IMAGE_URL,
            content_type="image/png",
        ),
        Media(
            id=FIXTURE_WEBSITE_MEDIA_ID,
            title="Event Website",
            kind="website",
            website_url="https://example.com",
        ),
        Bubble(id=FIXTURE_EXPLORE_BUBBLE_ID, title="Explore"),
        Bubble(id=FIXTURE_SPONSORS_BUBBLE_ID, title="Sponsors"),
        Bubble(
            id=FIXTURE_MAP_BUBBLE_ID,
            title="Venue Map",
            parent_bubble_id=FIXTURE_EXPLORE_BUBBLE_ID,
            media_id=FIXTURE_MAP_MEDIA_ID,
        ),
        Bubble(
            id=FIXTURE_WEBSITE_BUBBLE_ID,
            title="Website",
            parent_bubble_id=FIXTURE_EXPLORE_BUBBLE_ID,
            media_id=FIXTURE_WEBSITE_MEDIA_ID,
        ),
    ]
    for order, (speaker_id, (name, designation, start, end)) in enumerate(
        zip(FIXTURE_SPEAKER_IDS, FIXTURE_SCHEDULE, strict=True)
    ):
        rows.append(
            Speaker(
                id=speaker_id,
                name=name,
                designation=designation,
                image_url=FIXTURE_IMAGE_URL,
                popup_image_url=FIXTURE_IMAGE_URL,
                start_time=start,
                end_time=end,
                order=order,
            )
        )
    return rows


def seed_fixtures(session: Session) -> list[tuple[str, UUID, bool]]:
    """Insert fixture rows that do not exist yet. Idempotent.

    Returns:
        (table, id, created) for every fixture row.
    """
    report = []
    for row in build_fixture_rows():
        exists = session.get(type(row), row.id) is not None
        if not exists:
            session.add(row)
            session.flush()
        report.append((row.__tablename__, row.id, not exists))
    session.commit()
    return report


@pytest.fixture
def seeded(db_session: Session) -> list[tuple[str, UUID, bool]]:
    """Seed the fixture layout into the test database."""
    return seed_fixtures(db_session)
