import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Uuid

from crm_attendance.db.session import Base


class Team(Base):
    """Team directory entry. Users belong to at most one team."""

    __tablename__ = "teams"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    team_name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
