from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr


class CurrentUser(BaseModel):
    """Authenticated caller resolved from the access token."""

    id: UUID
    name: str
    email: EmailStr
    role: str
    team_id: Optional[UUID] = None
