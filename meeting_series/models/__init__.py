from meeting_series.models.attendee import ATTENDEE_STATUSES, Attendee
from meeting_series.models.meeting import Meeting

__all__ = ["Meeting", "Attendee", "ATTENDEE_STATUSES"]
