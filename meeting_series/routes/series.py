"""Series routes for whole-series reads, RSVPs and deletion."""
from uuid import UUID

from fastapi import APIRouter, Depends

from meeting_series.core.database import get_store
from meeting_series.core.identity import Identity, get_identity
from meeting_series.schemas import MeetingRead, RsvpRequest
from meeting_series.series.lifecycle import delete_series, get_series_instances
from meeting_series.series.reconciler import rsvp_to_series
from meeting_series.store import MeetingStore

router = APIRouter(prefix="/series", tags=["series"])


@router.get("/{series_id}", response_model=list[MeetingRead])
def series_instances(series_id: UUID, store: MeetingStore = Depends(get_store)):
    """Instances of a series in series order; empty if none exist."""
    return get_series_instances(store, series_id)


@router.post("/{series_id}/rsvp")
def rsvp_series(
    series_id: UUID,
    body: RsvpRequest,
    identity: Identity = Depends(get_identity),
    store: MeetingStore = Depends(get_store),
):
    """RSVP the caller to every instance of the series."""
    updated = rsvp_to_series(store, series_id, identity.user_id, body.status)
    return {"updated": updated}


@router.delete("/{series_id}")
def remove_series(series_id: UUID, store: MeetingStore = Depends(get_store)):
    """Delete every meeting in the series."""
    deleted = delete_series(store, series_id)
    return {"deleted": deleted}
