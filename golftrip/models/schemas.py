"""
Pydantic models for API request/response validation.

Request models forbid unknown fields so malformed payloads are rejected
before they reach the service layer.
"""

import re
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from golftrip.utils.constants import MIN_PASSWORD_LENGTH, MIN_CABIN, MAX_CABIN

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")


def _blank_to_none(value):
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _check_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please enter a valid email address")
    return value


def _check_phone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not PHONE_PATTERN.match(re.sub(r"[\s\-()]", "", value)):
        raise ValueError("Please enter a valid phone number")
    return value.strip()


def _check_cabin(value: Optional[int]) -> Optional[int]:
    if value is not None and not MIN_CABIN <= value <= MAX_CABIN:
        raise ValueError(f"Cabin must be a number between {MIN_CABIN} and {MAX_CABIN}")
    return value


class FormModel(BaseModel):
    """Base for request bodies: unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


# ============================================================================
# Auth
# ============================================================================


class RegisterRequest(FormModel):
    """Self-registration. Also creates a linked golfer."""

    email: str
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    confirm_password: Optional[str] = None
    name: str = Field(min_length=1, max_length=100)
    phone: Optional[str] = None

    normalize_blanks = field_validator("phone", "confirm_password", mode="before")(_blank_to_none)
    validate_email = field_validator("email")(_check_email)
    validate_phone = field_validator("phone")(_check_phone)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords don't match")
        return self


class LoginRequest(FormModel):
    """Request to login with email and password."""

    email: str
    password: str = Field(min_length=1)

    validate_email = field_validator("email")(_check_email)


class ForgotPasswordRequest(FormModel):
    email: str

    validate_email = field_validator("email")(_check_email)


class ResetPasswordRequest(FormModel):
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    confirm_password: str = Field(min_length=MIN_PASSWORD_LENGTH)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class UpdateProfileRequest(FormModel):
    """Current user's profile edit."""

    name: str = Field(min_length=1, max_length=100)
    phone: Optional[str] = None
    avatar: Optional[str] = None

    normalize_blanks = field_validator("phone", "avatar", mode="before")(_blank_to_none)
    validate_phone = field_validator("phone")(_check_phone)

    @field_validator("avatar")
    @classmethod
    def avatar_is_url(cls, value):
        if value is not None and not value.startswith(("http://", "https://")):
            raise ValueError("Please enter a valid URL")
        return value


class UserResponse(BaseModel):
    """User information response (never includes the password hash)."""

    id: int
    email: str
    name: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    is_admin: bool
    golfer_id: Optional[int] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ============================================================================
# Admin user management
# ============================================================================


class UserCreate(FormModel):
    name: str = Field(min_length=1, max_length=100)
    email: str
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    is_admin: bool = False

    validate_email = field_validator("email")(_check_email)


class UserUpdate(FormModel):
    """
    Admin edit of a user.

    Golfer association: ``create_new_golfer`` creates and links a golfer named
    ``new_golfer_name``; otherwise ``golfer_id`` links an existing golfer, and
    a null ``golfer_id`` removes the link.
    """

    name: str = Field(min_length=1, max_length=100)
    email: str
    phone: Optional[str] = None
    is_admin: bool = False
    golfer_id: Optional[int] = None
    create_new_golfer: bool = False
    new_golfer_name: Optional[str] = None
    new_golfer_phone: Optional[str] = None

    normalize_blanks = field_validator(
        "phone", "golfer_id", "new_golfer_name", "new_golfer_phone", mode="before"
    )(_blank_to_none)
    validate_email = field_validator("email")(_check_email)
    validate_phone = field_validator("phone", "new_golfer_phone")(_check_phone)

    @model_validator(mode="after")
    def new_golfer_needs_name(self):
        if self.create_new_golfer and not self.new_golfer_name:
            raise ValueError("Golfer name is required when creating a new golfer")
        return self


# ============================================================================
# Golfers
# ============================================================================


class GolferCreate(FormModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    cabin: Optional[int] = None
    year: Optional[int] = None

    normalize_blanks = field_validator("email", "phone", "cabin", "year", mode="before")(_blank_to_none)
    validate_email = field_validator("email")(_check_email)
    validate_cabin = field_validator("cabin")(_check_cabin)


class GolferUpdate(GolferCreate):
    pass


class GolferResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None
    cabin: Optional[int] = None


class GolferStatusToggle(FormModel):
    """Flip a golfer's active flag for a year (``current_status`` is the value being replaced)."""

    golfer_id: int
    year: int
    current_status: bool


class CabinUpdate(FormModel):
    golfer_id: int
    year: int
    cabin: Optional[int] = None

    normalize_blanks = field_validator("cabin", mode="before")(_blank_to_none)
    validate_cabin = field_validator("cabin")(_check_cabin)


class GolferYearEnrollment(FormModel):
    golfer_id: int
    year: int
    is_active: bool = True
    cabin: Optional[int] = None

    normalize_blanks = field_validator("cabin", mode="before")(_blank_to_none)
    validate_cabin = field_validator("cabin")(_check_cabin)


class GolferStatusResponse(BaseModel):
    id: int
    golfer_id: int
    year: int
    is_active: bool
    cabin: Optional[int] = None


class GolferStandingResponse(BaseModel):
    golfer_id: int
    name: str
    total_score: Optional[int] = None
    rounds_played: int
    is_active: bool
    cabin: Optional[int] = None


class StandingsResponse(BaseModel):
    year: int
    sort: str
    order: str
    standings: List[GolferStandingResponse]


# ============================================================================
# Foursomes
# ============================================================================


class FoursomeRequest(FormModel):
    """
    Create/edit foursome form.

    Values stay loosely typed here; ``foursome_service.validate_foursome``
    applies the scheduling rules and reports them as field errors.
    """

    round: str
    course: str
    tee_time: str
    golfer1_id: Optional[int] = None
    golfer2_id: Optional[int] = None
    golfer3_id: Optional[int] = None
    golfer4_id: Optional[int] = None
    score: Optional[str] = None
    year: Optional[int] = None

    normalize_blanks = field_validator(
        "golfer1_id", "golfer2_id", "golfer3_id", "golfer4_id", "year", mode="before"
    )(_blank_to_none)

    @field_validator("score", mode="before")
    @classmethod
    def score_as_text(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def golfer_slots(self) -> List[Optional[int]]:
        return [self.golfer1_id, self.golfer2_id, self.golfer3_id, self.golfer4_id]


class FoursomeGolfer(BaseModel):
    id: int
    name: str


class FoursomeResponse(BaseModel):
    id: int
    round: str
    round_label: str
    course: str
    tee_time: str  # ISO 8601 UTC
    tee_time_local: str  # Eastern Time, datetime-local format
    tee_time_display: str
    year: int
    score: int
    golfer1_id: Optional[int] = None
    golfer2_id: Optional[int] = None
    golfer3_id: Optional[int] = None
    golfer4_id: Optional[int] = None
    golfers: List[FoursomeGolfer] = []


# ============================================================================
# Champions & gallery
# ============================================================================


class ChampionResponse(BaseModel):
    id: int
    year: int
    golfer_id: int
    golfer_name: Optional[str] = None
    display_name: Optional[str] = None
    motivation: Optional[str] = None
    meaning: Optional[str] = None
    life_change: Optional[str] = None
    favorite_quote: Optional[str] = None
    photo_url: Optional[str] = None
    created_by: int


class PhotoResponse(BaseModel):
    id: int
    url: str
    caption: Optional[str] = None
    category: Optional[str] = None
    created_by: int
    created_at: Optional[str] = None


class PhotoPage(BaseModel):
    photos: List[PhotoResponse]
    page: int
    total_pages: int
    total: int
    categories: List[str]


# ============================================================================
# Misc
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    message: str
