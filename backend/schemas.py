from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum
from urllib.parse import urlparse


class ProfileRoleEnum(str, Enum):
    ADMIN = "admin"
    EXECUTIVE = "executive"
    MEMBER = "member"


class RegistrationStatusEnum(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    REJECTED = "Rejected"


class ResourceStatusEnum(str, Enum):
    PENDING = "Pending"
    PUBLISHED = "Published"


class EventModeEnum(str, Enum):
    OFFLINE = "Offline"
    ONLINE = "Online"
    HYBRID = "Hybrid"


class ExportFormatEnum(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"


def _enum_value(value):
    # ORM rows carry the models.py enums; the response mirrors validate by value.
    return getattr(value, "value", value)


def _normalize_optional_http_url(value: Optional[str], field_name: str, max_length: int = 800) -> Optional[str]:
    raw = str(value or "").strip()
    if not raw:
        return None
    if len(raw) > max_length:
        raise ValueError(f"{field_name} must be at most {max_length} characters")
    parsed = urlparse(raw)
    if parsed.scheme.lower() not in {"http", "https"} or not parsed.netloc:
        raise ValueError(f"{field_name} must be a valid http/https URL")
    return raw


def _clean_tags(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    cleaned = []
    for item in values:
        value = str(item or "").strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


# Auth Schemas
class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=2, max_length=255)
    batch: Optional[str] = Field(default=None, max_length=50)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: ProfileRoleEnum
    batch: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("role", mode="before")
    @classmethod
    def unwrap_role(cls, v):
        return _enum_value(v)


class IdentityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    last_sign_in_at: Optional[datetime] = None


class MeResponse(BaseModel):
    identity: IdentityResponse
    profile: Optional[ProfileResponse] = None


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    profile: Optional[ProfileResponse] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    batch: Optional[str] = Field(default=None, max_length=50)
    avatar_url: Optional[str] = None

    @field_validator("avatar_url")
    @classmethod
    def validate_avatar_url(cls, v):
        return _normalize_optional_http_url(v, "avatar_url", max_length=500)


# Event Schemas
class EventCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    event_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    venue: Optional[str] = Field(default=None, max_length=255)
    event_mode: EventModeEnum = EventModeEnum.OFFLINE
    event_type: Optional[str] = Field(default=None, max_length=100)
    registration_deadline: Optional[datetime] = None
    poster_url: Optional[str] = None
    tags: Optional[List[str]] = None
    is_published: bool = False

    @field_validator("poster_url")
    @classmethod
    def validate_poster_url(cls, v):
        return _normalize_optional_http_url(v, "poster_url", max_length=500)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v):
        return _clean_tags(v)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.event_date and self.end_date and self.end_date < self.event_date:
            raise ValueError("end_date must be after event_date")
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=2, max_length=255)
    description: Optional[str] = None
    event_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    venue: Optional[str] = Field(default=None, max_length=255)
    event_mode: Optional[EventModeEnum] = None
    event_type: Optional[str] = Field(default=None, max_length=100)
    registration_deadline: Optional[datetime] = None
    poster_url: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("poster_url")
    @classmethod
    def validate_poster_url(cls, v):
        return _normalize_optional_http_url(v, "poster_url", max_length=500)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v):
        return _clean_tags(v)


class PublishUpdate(BaseModel):
    is_published: bool


class CompetitionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    event_id: str
    title: str
    description: Optional[str] = None
    fee: float = 0
    display_order: int
    is_published: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    event_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    venue: Optional[str] = None
    event_mode: EventModeEnum
    event_type: Optional[str] = None
    registration_deadline: Optional[datetime] = None
    poster_url: Optional[str] = None
    tags: List[str] = []
    is_published: bool
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("event_mode", mode="before")
    @classmethod
    def unwrap_mode(cls, v):
        return _enum_value(v)

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, v):
        return v or []


class EventDetailResponse(EventResponse):
    competitions: List[CompetitionResponse] = []


class EventListResponse(BaseModel):
    upcoming: List[EventResponse]
    past: List[EventResponse]


# Competition Schemas
class CompetitionCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    fee: float = Field(default=0, ge=0)
    is_published: bool = False


class CompetitionUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=2, max_length=255)
    description: Optional[str] = None
    fee: Optional[float] = Field(default=None, ge=0)


class CompetitionOrderItem(BaseModel):
    id: str
    display_order: int


class CompetitionOrderUpdate(BaseModel):
    competitions: List[CompetitionOrderItem] = Field(..., min_length=1)


# Registration Schemas
class RegistrationRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    institution: str = Field(..., min_length=2, max_length=255)
    level: Optional[str] = Field(default=None, max_length=50)
    class_level: Optional[int] = Field(default=None, ge=1, le=20)
    id_at_institution: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=6, max_length=20)
    note: Optional[str] = None
    competitions: List[str] = Field(..., min_length=1)
    transaction_id: Optional[str] = Field(default=None, max_length=100)
    payment_provider: Optional[str] = Field(default=None, max_length=50)

    @field_validator("name", "institution", "id_at_institution", "phone")
    @classmethod
    def strip_required(cls, v):
        value = str(v or "").strip()
        if not value:
            raise ValueError("Field cannot be blank")
        return value

    @field_validator("note", "transaction_id", "payment_provider", "level")
    @classmethod
    def strip_optional(cls, v):
        if v is None:
            return None
        value = str(v).strip()
        return value or None


class StatusUpdate(BaseModel):
    status: str


class FlagUpdate(BaseModel):
    enabled: bool


class ParticipantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    institution: str
    level: Optional[str] = None
    class_level: Optional[int] = None
    id_at_institution: str
    email: Optional[str] = None
    phone: Optional[str] = None
    note: str = ""
    created_at: Optional[datetime] = None


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    participant_id: str
    event_id: str
    competition_id: str
    status: RegistrationStatusEnum
    transaction_id: Optional[str] = None
    payment_provider: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def unwrap_status(cls, v):
        return _enum_value(v)


class RegistrationDetailResponse(RegistrationResponse):
    competition: Optional[CompetitionResponse] = None


class RegistrationResultResponse(BaseModel):
    participant: ParticipantResponse
    registrations: List[RegistrationResponse]


class RegistrationStatusResponse(BaseModel):
    """Self-service status check; carries no contact details."""

    id: str
    event_id: str
    competition_title: Optional[str] = None
    status: RegistrationStatusEnum
    created_at: Optional[datetime] = None


class ParticipantGroupResponse(BaseModel):
    participant: ParticipantResponse
    registrations: List[RegistrationDetailResponse]


class ParticipantStatsResponse(BaseModel):
    total_participants: int = 0
    confirmed: int = 0
    pending: int = 0
    rejected: int = 0
    total_registrations: int = 0


class ParticipantListResponse(BaseModel):
    participants: List[ParticipantGroupResponse]
    stats: ParticipantStatsResponse


# Member Schemas
class MemberCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    designation: str = Field(..., min_length=2, max_length=120)
    position: Optional[str] = Field(default=None, max_length=120)
    session: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    bio: Optional[str] = None
    image_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    linkedin_url: Optional[str] = None

    @field_validator("image_url", "facebook_url", "instagram_url", "linkedin_url")
    @classmethod
    def validate_urls(cls, v, info):
        return _normalize_optional_http_url(v, info.field_name, max_length=500)


class MemberUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    designation: Optional[str] = Field(default=None, min_length=2, max_length=120)
    position: Optional[str] = Field(default=None, max_length=120)
    session: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    bio: Optional[str] = None
    image_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    linkedin_url: Optional[str] = None

    @field_validator("image_url", "facebook_url", "instagram_url", "linkedin_url")
    @classmethod
    def validate_urls(cls, v, info):
        return _normalize_optional_http_url(v, info.field_name, max_length=500)


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    designation: str
    position: Optional[str] = None
    session: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    image_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    created_at: Optional[datetime] = None


class SessionGroupResponse(BaseModel):
    session: str
    members: List[MemberResponse]


# Resource Schemas
class ResourceCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=100)
    resource_type: str = Field(..., min_length=1, max_length=50)
    resource_url: str
    author: Optional[str] = Field(default=None, max_length=255)
    status: ResourceStatusEnum = ResourceStatusEnum.PENDING
    is_featured: bool = False
    levels: List[str] = []
    tags: Optional[List[str]] = None

    @field_validator("resource_url")
    @classmethod
    def validate_resource_url(cls, v):
        value = _normalize_optional_http_url(v, "resource_url")
        if not value:
            raise ValueError("resource_url is required")
        return value

    @field_validator("levels", "tags")
    @classmethod
    def normalize_lists(cls, v):
        return _clean_tags(v)


class ResourceUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=2, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    resource_type: Optional[str] = Field(default=None, min_length=1, max_length=50)
    resource_url: Optional[str] = None
    author: Optional[str] = Field(default=None, max_length=255)
    status: Optional[ResourceStatusEnum] = None
    is_featured: Optional[bool] = None
    levels: Optional[List[str]] = None
    tags: Optional[List[str]] = None

    @field_validator("resource_url")
    @classmethod
    def validate_resource_url(cls, v):
        return _normalize_optional_http_url(v, "resource_url")

    @field_validator("levels", "tags")
    @classmethod
    def normalize_lists(cls, v):
        return _clean_tags(v)


class ResourceStatusUpdate(BaseModel):
    status: ResourceStatusEnum


class FeaturedUpdate(BaseModel):
    is_featured: bool


class ResourceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    resource_type: str
    resource_url: Optional[str] = None
    author: Optional[str] = None
    status: ResourceStatusEnum
    is_featured: bool
    levels: List[str] = []
    tags: List[str] = []
    view_count: int = 0
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def unwrap_status(cls, v):
        return _enum_value(v)

    @field_validator("levels", "tags", mode="before")
    @classmethod
    def default_lists(cls, v):
        return v or []


class DuplicateCheckResponse(BaseModel):
    enabled: bool
