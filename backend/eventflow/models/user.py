"""User ORM model."""
import enum
import uuid

from sqlalchemy import Column, DateTime, Enum as SAEnum, String

from eventflow.database import Base
from eventflow.datetimes import utcnow


class UserRole(str, enum.Enum):
    venue_manager = "venue_manager"
    reviewer = "reviewer"
    central_planner = "central_planner"
    executive = "executive"


REVIEWER_ROLES = frozenset({UserRole.reviewer, UserRole.central_planner})


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, unique=True)
    full_name = Column(String(150), nullable=True)
    role = Column(SAEnum(UserRole), nullable=False, default=UserRole.venue_manager)
    venue_id = Column(String(36), nullable=True)  # home venue for venue managers
    # Python-side default: reviewer fallback orders by creation time
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    @property
    def can_review(self) -> bool:
        return self.role in REVIEWER_ROLES
