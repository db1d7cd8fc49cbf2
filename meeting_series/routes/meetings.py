"""Meeting routes for single instances: read, edit, RSVP, skip, delete."""
from uuid import UUID

from fastapi import APIRouter, Depends, Response

from meeting_series.core.database import get_store
from meeting_series.core.exceptions import NotFoundError
from meeting_series.schemas import (
    AttendeeRead,
    MeetingRead,
    MeetingUpdate,
    RsvpRequest,
    SkipRequest,
    SkipResult,
)
from meeting_series.series.lifecycle import delete_instance, update_instance
from meeting_series.series.reconciler import rsvp_to_instance
from meeting_series.series.skip import skip_instance
from meeting_series.store import MeetingStore

router = APIRouter(prefix="/meetings", tags=["meetings"])


@router.get("/{meeting_id}", response_model=MeetingRead)
def meeting_detail(meeting_id: UUID, store: MeetingStore = Depends(get_store)):
    """Return one meeting with its attendees."""
    meeting = store.get_instance(meeting_id)
    if meeting is None:
        raise NotFoundError("Meeting not found", {"meeting_id": str(meeting_id)})
    return meeting


@router.patch("/{meeting_id}", response_model=MeetingRead)
def edit_meeting(
    meeting_id: UUID,
    body: MeetingUpdate,
    store: MeetingStore = Depends(get_store),
):
    """
    Edit title, description or location of a single meeting.

    Only the fields present in the body are changed. Other instances of
    the series are not affected.
    """
    return update_instance(store, meeting_id, **body.model_dump(exclude_unset=True))


@router.delete("/{meeting_id}", status_code=204)
def remove_meeting(meeting_id: UUID, store: MeetingStore = Depends(get_store)):
    """Delete one meeting. Remaining series instances keep their numbering."""
    delete_instance(store, meeting_id)
    return Response(status_code=204)


@router.post("/{meeting_id}/attendees/{attendee_id}/rsvp", response_model=AttendeeRead)
def rsvp_meeting(
    meeting_id: UUID,
    attendee_id: UUID,
    body: RsvpRequest,
    store: MeetingStore = Depends(get_store),
):
    """RSVP to this meeting only. The response becomes an override."""
    return rsvp_to_instance(store, meeting_id, attendee_id, body.status)


@router.post("/{meeting_id}/skip", response_model=SkipResult)
def skip_meeting(
    meeting_id: UUID,
    body: SkipRequest | None = None,
    store: MeetingStore = Depends(get_store),
):
    """
    Skip this meeting.

    The meeting and every later instance move back by the series interval.
    Send the meeting's current version as expected_version to make a retry
    safe: a skip that already landed answers 409 instead of shifting again.
    """
    expected_version = body.expected_version if body else None
    return skip_instance(store, meeting_id, expected_version=expected_version)
