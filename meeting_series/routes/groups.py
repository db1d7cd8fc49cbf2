"""Group routes for listing and scheduling meetings."""
from uuid import UUID

from fastapi import APIRouter, Depends

from meeting_series.core.database import get_store
from meeting_series.core.identity import Identity, get_identity
from meeting_series.schemas import MeetingCreate, MeetingListRead, MeetingRead
from meeting_series.series.index import group_instances
from meeting_series.series.lifecycle import create_meetings, list_group_meetings
from meeting_series.store import MeetingStore

router = APIRouter(prefix="/groups/{group_id}/meetings", tags=["groups"])


@router.get("", response_model=MeetingListRead)
def group_meetings(
    group_id: UUID,
    include_past: bool = False,
    store: MeetingStore = Depends(get_store),
):
    """
    List a group's meetings.

    ``display`` is what the meeting list shows: standalone meetings plus the
    next upcoming instance of each series. Past meetings are left out unless
    include_past is set.
    """
    meetings = list_group_meetings(store, group_id, include_past=include_past)
    listing = group_instances(meetings)
    return {"display": listing.display_list(), "meetings": meetings}


@router.post("", response_model=list[MeetingRead], status_code=201)
def schedule_meetings(
    group_id: UUID,
    body: MeetingCreate,
    identity: Identity = Depends(get_identity),
    store: MeetingStore = Depends(get_store),
):
    """
    Schedule a meeting, or a recurring series when recurrence is not "none".

    The caller becomes created_by. Every invitee gets an "invited" row on
    each created meeting. When X-Group-Id is sent it must match the group
    in the path.
    """
    identity.check_group(group_id)
    return create_meetings(
        store,
        group_id=group_id,
        created_by=identity.user_id,
        title=body.title,
        date=body.date,
        end_date=body.end_date,
        description=body.description,
        location=body.location,
        recurrence=body.recurrence,
        occurrences=body.occurrences,
        invitee_ids=body.invitee_ids,
        timezone=body.timezone,
    )
