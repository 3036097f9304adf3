from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, UniqueConstraint
from datetime import datetime
from app.database.session import Base

# Columns holding values that must be unique across all registrations,
# keyed by their wire (camelCase) name
UNIQUE_FIELDS = {
    "registrationId": "registration_id",
    "teamName": "team_name",
    "email": "email",
    "mobile": "mobile",
    "aadhar": "aadhar",
}


class Registration(Base):
    __tablename__ = "registrations"
    __table_args__ = (
        # Informational: team_name is already globally unique
        UniqueConstraint("event", "team_name", name="uq_registrations_event_team_name"),
        CheckConstraint("team_size BETWEEN 1 AND 4", name="ck_registrations_team_size"),
    )

    id = Column(Integer, primary_key=True, index=True)
    registration_id = Column(String, unique=True, nullable=False, index=True)
    event = Column(String, nullable=False)
    team_name = Column(String, unique=True, nullable=False, index=True)
    team_leader_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    mobile = Column(String, unique=True, nullable=False, index=True)
    gender = Column(String, nullable=False)
    college = Column(String, nullable=False)
    course = Column(String, nullable=False)
    year = Column(String, nullable=False)
    rollno = Column(String, nullable=False)
    aadhar = Column(String, unique=True, nullable=False, index=True)
    team_size = Column(Integer, nullable=False)
    aadhar_image = Column(String, nullable=False)
    aadhar_image_hash = Column(String, nullable=False, index=True)
    college_id = Column(String, nullable=False)
    college_id_hash = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    is_confirmed = Column(Boolean, default=False, nullable=False)
