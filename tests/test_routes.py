"""Tests for API routes."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from meeting_series.models import Meeting
from meeting_series.series.index import as_utc

MONDAY_9AM = datetime(2030, 1, 7, 9, 0, tzinfo=UTC)
WEEK = timedelta(days=7)


def parse_date(value: str) -> datetime:
    return as_utc(datetime.fromisoformat(value))


def attendee_for(meeting: Meeting, user_id):
    return next(a for a in meeting.attendees if a.user_id == user_id)


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check(self, client: TestClient):
        """Test the health endpoint returns OK."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"


class TestGroupRoutes:
    """Tests for listing and scheduling a group's meetings."""

    def test_schedule_series(self, client: TestClient, group_id, leader_id, user_a):
        response = client.post(
            f"/groups/{group_id}/meetings",
            headers={"X-User-Id": str(leader_id)},
            json={
                "title": "Bible Study",
                "date": MONDAY_9AM.isoformat(),
                "recurrence": "weekly",
                "occurrences": 4,
                "invitee_ids": [str(user_a)],
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert len(data) == 4
        assert [m["series_index"] for m in data] == [1, 2, 3, 4]
        assert {m["series_id"] for m in data} == {data[0]["series_id"]}
        assert all(m["created_by"] == str(leader_id) for m in data)
        assert all(m["attendees"][0]["status"] == "invited" for m in data)

    def test_schedule_standalone(self, client: TestClient, group_id, leader_id):
        response = client.post(
            f"/groups/{group_id}/meetings",
            headers={"X-User-Id": str(leader_id)},
            json={"title": "Planning", "date": MONDAY_9AM.isoformat()},
        )
        assert response.status_code == 201
        (meeting,) = response.json()
        assert meeting["series_id"] is None
        assert meeting["version"] == 1

    def test_schedule_with_timezone(self, client: TestClient, group_id, leader_id):
        response = client.post(
            f"/groups/{group_id}/meetings",
            headers={"X-User-Id": str(leader_id)},
            json={
                "title": "Morning Prayer",
                "date": "2030-03-04T09:00:00",
                "recurrence": "weekly",
                "occurrences": 2,
                "timezone": "America/New_York",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert [parse_date(m["date"]).hour for m in data] == [14, 13]
        assert data[0]["timezone"] == "America/New_York"

    def test_schedule_in_own_group(self, client: TestClient, group_id, leader_id):
        response = client.post(
            f"/groups/{group_id}/meetings",
            headers={"X-User-Id": str(leader_id), "X-Group-Id": str(group_id)},
            json={"title": "Planning", "date": MONDAY_9AM.isoformat()},
        )
        assert response.status_code == 201

    def test_schedule_in_other_group_forbidden(
        self, client: TestClient, session: Session, group_id, leader_id
    ):
        """A caller acting in one group cannot schedule meetings in another."""
        response = client.post(
            f"/groups/{group_id}/meetings",
            headers={"X-User-Id": str(leader_id), "X-Group-Id": str(uuid4())},
            json={"title": "Planning", "date": MONDAY_9AM.isoformat()},
        )
        assert response.status_code == 403
        assert response.json()["error"] == "ForbiddenError"
        assert session.exec(select(Meeting)).all() == []

    def test_schedule_requires_user_header(self, client: TestClient, group_id):
        response = client.post(
            f"/groups/{group_id}/meetings",
            json={"title": "Planning", "date": MONDAY_9AM.isoformat()},
        )
        assert response.status_code == 422

    def test_schedule_blank_title(self, client: TestClient, group_id, leader_id):
        response = client.post(
            f"/groups/{group_id}/meetings",
            headers={"X-User-Id": str(leader_id)},
            json={"title": "  ", "date": MONDAY_9AM.isoformat()},
        )
        assert response.status_code == 422
        assert response.json()["error"] == "ValidationError"

    def test_listing_collapses_series(
        self, client: TestClient, group_id, weekly_series, standalone_meeting
    ):
        """The display list shows one entry per series plus standalone meetings."""
        response = client.get(f"/groups/{group_id}/meetings")
        assert response.status_code == 200
        data = response.json()
        assert len(data["meetings"]) == 4
        display_ids = {m["id"] for m in data["display"]}
        assert display_ids == {str(weekly_series[0].id), str(standalone_meeting.id)}

    def test_listing_other_group_is_empty(self, client: TestClient, weekly_series):
        response = client.get(f"/groups/{uuid4()}/meetings")
        assert response.status_code == 200
        assert response.json() == {"display": [], "meetings": []}


class TestMeetingRoutes:
    """Tests for single-meeting routes."""

    def test_meeting_detail(self, client: TestClient, weekly_series):
        second = weekly_series[1]
        response = client.get(f"/meetings/{second.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Bible Study"
        assert data["series_index"] == 2
        assert parse_date(data["date"]) == MONDAY_9AM + WEEK
        assert len(data["attendees"]) == 2

    def test_meeting_detail_not_found(self, client: TestClient):
        """Test 404 for non-existent meeting."""
        response = client.get(f"/meetings/{uuid4()}")
        assert response.status_code == 404
        assert response.json()["error"] == "NotFoundError"

    def test_edit_description(self, client: TestClient, weekly_series, session: Session):
        first, second, _ = weekly_series
        response = client.patch(
            f"/meetings/{second.id}", json={"description": "Chapter 2"}
        )
        assert response.status_code == 200
        assert response.json()["description"] == "Chapter 2"

        session.refresh(first)
        assert first.description == "Week one notes"

    def test_edit_unknown_field_ignored_by_schema(self, client: TestClient, weekly_series):
        """Fields outside the update body never reach the meeting."""
        first = weekly_series[0]
        response = client.patch(
            f"/meetings/{first.id}",
            json={"date": (MONDAY_9AM + WEEK).isoformat()},
        )
        assert response.status_code == 200
        assert parse_date(response.json()["date"]) == MONDAY_9AM

    def test_delete_meeting(self, client: TestClient, weekly_series, session: Session):
        meeting_id = weekly_series[1].id
        response = client.delete(f"/meetings/{meeting_id}")
        assert response.status_code == 204
        assert session.get(Meeting, meeting_id) is None

    def test_delete_meeting_not_found(self, client: TestClient):
        response = client.delete(f"/meetings/{uuid4()}")
        assert response.status_code == 404

    def test_rsvp(self, client: TestClient, weekly_series, user_b):
        first = weekly_series[0]
        attendee = attendee_for(first, user_b)
        response = client.post(
            f"/meetings/{first.id}/attendees/{attendee.id}/rsvp",
            json={"status": "declined"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "declined"
        assert data["is_series_rsvp"] is False
        assert data["responded_at"] is not None

    def test_rsvp_unknown_status(self, client: TestClient, weekly_series, user_b):
        first = weekly_series[0]
        attendee = attendee_for(first, user_b)
        response = client.post(
            f"/meetings/{first.id}/attendees/{attendee.id}/rsvp",
            json={"status": "going"},
        )
        assert response.status_code == 422

    def test_rsvp_unknown_attendee(self, client: TestClient, weekly_series):
        response = client.post(
            f"/meetings/{weekly_series[0].id}/attendees/{uuid4()}/rsvp",
            json={"status": "accepted"},
        )
        assert response.status_code == 404


class TestSkipRoute:
    """Tests for skipping a meeting over HTTP."""

    def test_skip(self, client: TestClient, weekly_series, session: Session):
        response = client.post(f"/meetings/{weekly_series[0].id}/skip")
        assert response.status_code == 200
        data = response.json()
        assert data["shifted"] == 3
        assert data["interval_seconds"] == int(WEEK.total_seconds())

        session.expire_all()
        assert as_utc(weekly_series[0].date) == MONDAY_9AM + WEEK

    def test_skip_standalone(self, client: TestClient, standalone_meeting):
        response = client.post(f"/meetings/{standalone_meeting.id}/skip")
        assert response.status_code == 400
        assert response.json()["error"] == "NotInSeriesError"

    def test_skip_not_found(self, client: TestClient):
        response = client.post(f"/meetings/{uuid4()}/skip")
        assert response.status_code == 404

    def test_retried_skip_conflicts(self, client: TestClient, weekly_series, session: Session):
        """A retried skip with the old version answers 409 and does not shift again."""
        first = weekly_series[0]
        url = f"/meetings/{first.id}/skip"

        assert client.post(url, json={"expected_version": 1}).status_code == 200
        response = client.post(url, json={"expected_version": 1})

        assert response.status_code == 409
        assert response.json()["error"] == "ConflictError"
        session.expire_all()
        assert as_utc(first.date) == MONDAY_9AM + WEEK


class TestSeriesRoutes:
    """Tests for whole-series routes."""

    def test_series_instances(self, client: TestClient, weekly_series):
        series_id = weekly_series[0].series_id
        response = client.get(f"/series/{series_id}")
        assert response.status_code == 200
        assert [m["series_index"] for m in response.json()] == [1, 2, 3]

    def test_unknown_series_is_empty(self, client: TestClient):
        response = client.get(f"/series/{uuid4()}")
        assert response.status_code == 200
        assert response.json() == []

    def test_series_rsvp(self, client: TestClient, weekly_series, user_a, session: Session):
        series_id = weekly_series[0].series_id
        response = client.post(
            f"/series/{series_id}/rsvp",
            headers={"X-User-Id": str(user_a)},
            json={"status": "accepted"},
        )
        assert response.status_code == 200
        assert response.json() == {"updated": 3}

        for meeting in weekly_series:
            session.refresh(meeting)
            row = attendee_for(meeting, user_a)
            assert (row.status, row.is_series_rsvp) == ("accepted", True)

    def test_series_rsvp_not_invited(self, client: TestClient, weekly_series):
        response = client.post(
            f"/series/{weekly_series[0].series_id}/rsvp",
            headers={"X-User-Id": str(uuid4())},
            json={"status": "accepted"},
        )
        assert response.status_code == 404

    def test_delete_series(self, client: TestClient, weekly_series):
        series_id = weekly_series[0].series_id
        response = client.delete(f"/series/{series_id}")
        assert response.status_code == 200
        assert response.json() == {"deleted": 3}
        assert client.get(f"/series/{series_id}").json() == []

    def test_delete_unknown_series(self, client: TestClient):
        response = client.delete(f"/series/{uuid4()}")
        assert response.status_code == 404
