"""Tests for the speaker schedule.

Tests cover:
- Create with image upload and overlap rejection (409)
- Touching windows allowed, enclosure rejected
- Update re-checks the merged window excluding itself
- Live resolution via GET /speakers/live
"""

from datetime import datetime
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from kiosk.db.models import Speaker
from kiosk.services import speakers as speakers_service
from kiosk.storage import FakeAssetHost
from tests.factories import create_test_speaker
from tests.helpers import PDF_BYTES, assert_error, upload_payload


def speaker_body(name: str = "Ada", start: str = "09:00", end: str = "10:00", **extra) -> dict:
    body = {
        "name": name,
        "designation": "Keynote",
        "thumbnail": upload_payload(),
        "start_time": start,
        "end_time": end,
    }
    body.update(extra)
    return body


class TestCreateSpeaker:
    """Tests for POST /speakers"""

    def test_create_uploads_thumbnail_and_reuses_for_popup(
        self, admin_client: TestClient, asset_host: FakeAssetHost
    ):
        response = admin_client.post("/speakers", json=speaker_body(start="9:00"))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Ada"
        assert data["start_time"] == "09:00"
        assert data["end_time"] == "10:00"
        assert data["image_url"].startswith("https://fake-assets.test/image/upload/")
        assert data["popup_image_url"] == data["image_url"]
        assert data["order"] == 0
        assert asset_host.asset_count() == 1

    def test_create_with_separate_popup(
        self, admin_client: TestClient, asset_host: FakeAssetHost
    ):
        response = admin_client.post(
            "/speakers", json=speaker_body(popup=upload_payload(content_type="image/webp"))
        )

        data = response.json()["data"]
        assert data["popup_image_url"] != data["image_url"]
        assert asset_host.asset_count() == 2

    def test_identical_window_conflicts(self, admin_client: TestClient, db_session: Session):
        create_test_speaker(db_session, name="A", start_time="09:00", end_time="10:00")

        response = admin_client.post("/speakers", json=speaker_body("B", "09:00", "10:00"))

        assert_error(response, 409, "E_SCHEDULE_CONFLICT")

    def test_enclosed_window_conflict_names_existing_speaker(
        self, admin_client: TestClient, db_session: Session
    ):
        create_test_speaker(db_session, name="A", start_time="09:00", end_time="10:00")

        response = admin_client.post("/speakers", json=speaker_body("B", "09:30", "09:45"))

        error = assert_error(response, 409, "E_SCHEDULE_CONFLICT")
        assert error["message"] == (
            "Time slot overlaps with A (09:00 - 10:00). Only one speaker can be live at a time."
        )

    def test_enclosing_window_conflicts(self, admin_client: TestClient, db_session: Session):
        create_test_speaker(db_session, name="A", start_time="09:00", end_time="10:00")

        response = admin_client.post("/speakers", json=speaker_body("B", "08:00", "11:00"))

        assert_error(response, 409, "E_SCHEDULE_CONFLICT")

    def test_touching_windows_allowed(self, admin_client: TestClient, db_session: Session):
        create_test_speaker(db_session, name="A", start_time="09:00", end_time="10:00")

        before = admin_client.post("/speakers", json=speaker_body("B", "08:00", "09:00"))
        after = admin_client.post("/speakers", json=speaker_body("C", "10:00", "11:00"))

        assert before.status_code == 201
        assert after.status_code == 201

    def test_conflict_uploads_nothing(
        self, admin_client: TestClient, db_session: Session, asset_host: FakeAssetHost
    ):
        create_test_speaker(db_session, name="A")

        admin_client.post("/speakers", json=speaker_body("B"))

        assert asset_host.asset_count() == 0

    @pytest.mark.parametrize(
        ("start", "end", "code"),
        [
            ("10:00", "09:00", "E_INVALID_TIME_WINDOW"),
            ("10:00", "10:00", "E_INVALID_TIME_WINDOW"),
            ("25:00", "26:00", "E_INVALID_TIME"),
            ("nine", "10:00", "E_INVALID_TIME"),
        ],
    )
    def test_invalid_times_rejected(
        self, admin_client: TestClient, start: str, end: str, code: str
    ):
        response = admin_client.post("/speakers", json=speaker_body(start=start, end=end))

        assert_error(response, 400, code)

    def test_blank_name_rejected(self, admin_client: TestClient):
        response = admin_client.post("/speakers", json=speaker_body(name="  "))

        assert_error(response, 400, "E_INVALID_REQUEST")

    def test_thumbnail_must_be_an_image(self, admin_client: TestClient):
        body = speaker_body(thumbnail=upload_payload(PDF_BYTES, "application/pdf"))

        response = admin_client.post("/speakers", json=body)

        assert_error(response, 400, "E_INVALID_CONTENT_TYPE")

    def test_upload_failure_returns_500(
        self, admin_client: TestClient, asset_host: FakeAssetHost, db_session: Session
    ):
        asset_host.fail_uploads = True

        response = admin_client.post("/speakers", json=speaker_body())

        assert_error(response, 500, "E_UPLOAD_FAILED")
        assert db_session.query(Speaker).count() == 0


class TestUpdateSpeaker:
    """Tests for PUT /speakers/{id}"""

    def test_update_own_window_does_not_self_conflict(
        self, admin_client: TestClient, db_session: Session
    ):
        speaker = create_test_speaker(db_session, name="A", start_time="09:00", end_time="10:00")

        response = admin_client.put(f"/speakers/{speaker.id}", json={"end_time": "10:30"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["start_time"] == "09:00"
        assert data["end_time"] == "10:30"

    def test_update_into_other_window_conflicts(
        self, admin_client: TestClient, db_session: Session
    ):
        create_test_speaker(db_session, name="A", start_time="09:00", end_time="10:00")
        b = create_test_speaker(db_session, name="B", start_time="10:00", end_time="11:00")

        response = admin_client.put(f"/speakers/{b.id}", json={"start_time": "09:30"})

        error = assert_error(response, 409, "E_SCHEDULE_CONFLICT")
        assert "A (09:00 - 10:00)" in error["message"]
        db_session.expire_all()
        assert db_session.get(Speaker, b.id).start_time == "10:00"

    def test_merged_window_validated(self, admin_client: TestClient, db_session: Session):
        speaker = create_test_speaker(db_session, start_time="09:00", end_time="10:00")

        response = admin_client.put(f"/speakers/{speaker.id}", json={"start_time": "11:00"})

        assert_error(response, 400, "E_INVALID_TIME_WINDOW")

    def test_omitted_images_keep_urls(self, admin_client: TestClient, db_session: Session):
        speaker = create_test_speaker(db_session)

        response = admin_client.put(
            f"/speakers/{speaker.id}", json={"name": "Renamed", "order": 3}
        )

        data = response.json()["data"]
        assert data["name"] == "Renamed"
        assert data["order"] == 3
        assert data["image_url"] == speaker.image_url
        assert data["popup_image_url"] == speaker.popup_image_url

    def test_new_thumbnail_uploaded(
        self, admin_client: TestClient, db_session: Session, asset_host: FakeAssetHost
    ):
        speaker = create_test_speaker(db_session)

        response = admin_client.put(
            f"/speakers/{speaker.id}", json={"thumbnail": upload_payload()}
        )

        assert response.json()["data"]["image_url"] != speaker.image_url
        assert asset_host.asset_count() == 1

    def test_update_missing_returns_404(self, admin_client: TestClient):
        response = admin_client.put(f"/speakers/{uuid4()}", json={"name": "X"})

        assert_error(response, 404, "E_SPEAKER_NOT_FOUND")


class TestReadAndDeleteSpeakers:
    def test_list_ordered_by_order_then_start(self, client: TestClient, db_session: Session):
        create_test_speaker(db_session, name="Late", start_time="14:00", end_time="15:00")
        create_test_speaker(db_session, name="Early", start_time="09:00", end_time="10:00")
        create_test_speaker(
            db_session, name="Pinned", start_time="16:00", end_time="17:00", order=-1
        )

        names = [s["name"] for s in client.get("/speakers").json()["data"]]

        assert names == ["Pinned", "Early", "Late"]

    def test_get_speaker(self, client: TestClient, db_session: Session):
        speaker = create_test_speaker(db_session, name="Ada")

        response = client.get(f"/speakers/{speaker.id}")

        assert response.json()["data"]["name"] == "Ada"

    def test_delete_speaker(self, admin_client: TestClient, db_session: Session):
        speaker = create_test_speaker(db_session)

        response = admin_client.delete(f"/speakers/{speaker.id}")

        assert response.status_code == 204
        assert_error(admin_client.get(f"/speakers/{speaker.id}"), 404, "E_SPEAKER_NOT_FOUND")

    def test_delete_requires_admin(self, client: TestClient, db_session: Session):
        speaker = create_test_speaker(db_session)

        assert_error(client.delete(f"/speakers/{speaker.id}"), 401, "E_UNAUTHENTICATED")


class TestLiveSpeaker:
    """Tests for GET /speakers/live"""

    def test_live_at_end_minute(self, client: TestClient, db_session: Session):
        create_test_speaker(db_session, name="A", start_time="09:00", end_time="10:00")

        data = client.get("/speakers/live", params={"at": "10:00"}).json()["data"]

        assert data["at"] == "10:00"
        assert data["speaker"]["name"] == "A"

    def test_nobody_live(self, client: TestClient, db_session: Session):
        create_test_speaker(db_session, name="A", start_time="09:00", end_time="10:00")

        data = client.get("/speakers/live", params={"at": "10:01"}).json()["data"]

        assert data["speaker"] is None

    def test_touching_boundary_resolves_to_incoming(
        self, client: TestClient, db_session: Session
    ):
        create_test_speaker(db_session, name="A", start_time="09:00", end_time="10:00")
        create_test_speaker(db_session, name="B", start_time="10:00", end_time="11:00")

        data = client.get("/speakers/live", params={"at": "10:00"}).json()["data"]

        assert data["speaker"]["name"] == "B"

    def test_invalid_at_rejected(self, client: TestClient):
        assert_error(client.get("/speakers/live", params={"at": "noon"}), 400, "E_INVALID_TIME")

    def test_defaults_to_venue_clock(self, db_session: Session, monkeypatch):
        create_test_speaker(db_session, name="A", start_time="09:00", end_time="10:00")
        monkeypatch.setattr(speakers_service, "current_venue_minutes", lambda: 9 * 60 + 30)

        result = speakers_service.get_live_speaker(db_session)

        assert result.at == "09:30"
        assert result.speaker.name == "A"

    def test_current_venue_minutes_uses_configured_zone(self, monkeypatch):
        monkeypatch.setenv("KIOSK_VENUE_TIMEZONE", "Asia/Kolkata")
        now = datetime.now(ZoneInfo("Asia/Kolkata"))

        minutes = speakers_service.current_venue_minutes()

        expected = now.hour * 60 + now.minute
        assert (minutes - expected) % (24 * 60) in (0, 1)
