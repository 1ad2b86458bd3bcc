from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, Enum as SQLEnum, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database import Base
import enum
import uuid


def _uuid() -> str:
    return str(uuid.uuid4())


class ProfileRole(enum.Enum):
    ADMIN = "admin"
    EXECUTIVE = "executive"
    MEMBER = "member"

    @property
    def is_elevated(self) -> bool:
        return self in ELEVATED_ROLES


ELEVATED_ROLES = frozenset({ProfileRole.ADMIN, ProfileRole.EXECUTIVE})


class RegistrationStatus(enum.Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    REJECTED = "Rejected"


class ResourceStatus(enum.Enum):
    PENDING = "Pending"
    PUBLISHED = "Published"


class EventMode(enum.Enum):
    OFFLINE = "Offline"
    ONLINE = "Online"
    HYBRID = "Hybrid"


class Identity(Base):
    __tablename__ = "auth_identities"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    user_metadata = Column(JSON, nullable=True)  # {"name": ..., "batch": ...} captured at signup
    last_sign_in_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Profile(Base):
    __tablename__ = "user_profiles"

    id = Column(String(36), ForeignKey("auth_identities.id", ondelete="CASCADE"), primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False, default="")
    role = Column(SQLEnum(ProfileRole), default=ProfileRole.MEMBER, nullable=False)
    batch = Column(String(50), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    venue = Column(String(255), nullable=True)
    event_mode = Column(SQLEnum(EventMode), default=EventMode.OFFLINE, nullable=False)
    event_type = Column(String(100), nullable=True)
    registration_deadline = Column(DateTime(timezone=True), nullable=True)
    poster_url = Column(String(500), nullable=True)
    tags = Column(JSON, nullable=True)  # ["Olympiad", "Workshop"]
    is_published = Column(Boolean, default=False, nullable=False)
    created_by = Column(String(36), ForeignKey("auth_identities.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    competitions = relationship(
        "Competition",
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Competition.display_order",
    )


class Competition(Base):
    __tablename__ = "competitions"

    id = Column(String(36), primary_key=True, default=_uuid)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    fee = Column(Float, default=0, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)  # dense, zero-based per event
    is_published = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    event = relationship("Event", back_populates="competitions")


class Participant(Base):
    __tablename__ = "participants"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    institution = Column(String(255), nullable=False)
    level = Column(String(50), nullable=True)  # School / College / University
    class_level = Column(Integer, nullable=True)
    id_at_institution = Column(String(100), nullable=False)
    email = Column(String(255), index=True, nullable=True)
    phone = Column(String(20), nullable=True)
    note = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    registrations = relationship("Registration", back_populates="participant", passive_deletes=True)


class Registration(Base):
    __tablename__ = "competition_registrations"

    id = Column(String(36), primary_key=True, default=_uuid)
    participant_id = Column(String(36), ForeignKey("participants.id", ondelete="CASCADE"), index=True, nullable=False)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), index=True, nullable=False)
    competition_id = Column(String(36), ForeignKey("competitions.id", ondelete="CASCADE"), index=True, nullable=False)
    status = Column(SQLEnum(RegistrationStatus), default=RegistrationStatus.PENDING, nullable=False)
    transaction_id = Column(String(100), nullable=True)
    payment_provider = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    participant = relationship("Participant", back_populates="registrations")
    competition = relationship("Competition")


class Member(Base):
    __tablename__ = "members"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    designation = Column(String(120), nullable=False)
    position = Column(String(120), nullable=True)
    session = Column(String(20), nullable=True)  # "2024-25"
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    bio = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    facebook_url = Column(String(500), nullable=True)
    instagram_url = Column(String(500), nullable=True)
    linkedin_url = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Resource(Base):
    __tablename__ = "resources"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    resource_type = Column(String(50), nullable=False)
    resource_url = Column(String(800), nullable=True)
    author = Column(String(255), nullable=True)
    status = Column(SQLEnum(ResourceStatus), default=ResourceStatus.PENDING, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)
    levels = Column(JSON, nullable=True)  # ["Beginner", "Advanced"]
    tags = Column(JSON, nullable=True)
    view_count = Column(Integer, default=0, nullable=False)
    created_by = Column(String(36), ForeignKey("auth_identities.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class SystemConfig(Base):
    __tablename__ = "system_config"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False)
    value = Column(String(500), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
