"""Identity of the caller, as passed in by the gateway in front of the API."""
from uuid import UUID

from fastapi import Header
from sqlmodel import SQLModel

from meeting_series.core.exceptions import ForbiddenError


class Identity(SQLModel):
    """The current user and, when known, the group they are acting in."""
    user_id: UUID
    group_id: UUID | None = None

    def check_group(self, group_id: UUID) -> None:
        """Reject a request for another group than the one in X-Group-Id."""
        if self.group_id is not None and self.group_id != group_id:
            raise ForbiddenError(
                "Not allowed to act on this group",
                {"group_id": str(group_id)},
            )


def get_identity(
    x_user_id: UUID = Header(...),
    x_group_id: UUID | None = Header(None),
) -> Identity:
    """Dependency reading the X-User-Id and X-Group-Id headers."""
    return Identity(user_id=x_user_id, group_id=x_group_id)
