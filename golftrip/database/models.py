"""
SQLAlchemy ORM models for the golf trip application.
"""

import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from golftrip.database.db import Base


class Round(str, enum.Enum):
    """Tournament round (time slot)."""

    FRIDAY_MORNING = "FRIDAY_MORNING"
    FRIDAY_AFTERNOON = "FRIDAY_AFTERNOON"
    SATURDAY_MORNING = "SATURDAY_MORNING"
    SATURDAY_AFTERNOON = "SATURDAY_AFTERNOON"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class Course(str, enum.Enum):
    """Course a foursome plays."""

    BLACK = "BLACK"
    SILVER = "SILVER"


class User(Base):
    """User accounts with email/password authentication."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    avatar = Column(String, nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    golfer_id = Column(
        Integer, ForeignKey("golfers.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    golfer = relationship("Golfer", back_populates="user")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    password_reset_tokens = relationship(
        "PasswordResetToken", back_populates="user", cascade="all, delete-orphan"
    )
    champions = relationship("Champion", back_populates="creator")
    photos = relationship("Photo", back_populates="creator")

    __table_args__ = (Index("idx_users_email", "email"),)


class UserSession(Base):
    """Opaque login session tokens (stored in the ``session`` cookie)."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String, nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index("idx_sessions_user", "user_id"),
        Index("idx_sessions_expires", "expires_at"),
    )


class PasswordResetToken(Base):
    """Single-use tokens emailed for password reset."""

    __tablename__ = "password_reset_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String, nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="password_reset_tokens")

    __table_args__ = (Index("idx_password_reset_tokens_user", "user_id"),)


class Golfer(Base):
    """Tournament participants. Independent of user accounts."""

    __tablename__ = "golfers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="golfer", uselist=False)
    statuses = relationship(
        "GolferStatus", back_populates="golfer", cascade="all, delete-orphan", passive_deletes=True
    )
    championships = relationship("Champion", back_populates="golfer")

    __table_args__ = (Index("idx_golfers_name", "name"),)


class GolferStatus(Base):
    """Per-year participation flag and cabin assignment for a golfer."""

    __tablename__ = "golfer_statuses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    golfer_id = Column(Integer, ForeignKey("golfers.id", ondelete="CASCADE"), nullable=False)
    year = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    cabin = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    golfer = relationship("Golfer", back_populates="statuses")

    __table_args__ = (
        UniqueConstraint("golfer_id", "year", name="uq_golfer_statuses_golfer_year"),
        CheckConstraint(
            "cabin IS NULL OR (cabin >= 1 AND cabin <= 4)", name="ck_golfer_statuses_cabin"
        ),
        Index("idx_golfer_statuses_year", "year"),
    )


class Foursome(Base):
    """One scheduled group of up to four golfers playing a round."""

    __tablename__ = "foursomes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    round = Column(Enum(Round), nullable=False)
    course = Column(Enum(Course), nullable=False)
    tee_time = Column(DateTime(timezone=True), nullable=False)  # UTC
    year = Column(Integer, nullable=False)
    score = Column(Integer, default=0, nullable=False)  # Strokes relative to par
    golfer1_id = Column(Integer, ForeignKey("golfers.id"), nullable=True)
    golfer2_id = Column(Integer, ForeignKey("golfers.id"), nullable=True)
    golfer3_id = Column(Integer, ForeignKey("golfers.id"), nullable=True)
    golfer4_id = Column(Integer, ForeignKey("golfers.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    golfer1 = relationship("Golfer", foreign_keys=[golfer1_id])
    golfer2 = relationship("Golfer", foreign_keys=[golfer2_id])
    golfer3 = relationship("Golfer", foreign_keys=[golfer3_id])
    golfer4 = relationship("Golfer", foreign_keys=[golfer4_id])

    __table_args__ = (
        CheckConstraint(
            "golfer1_id IS NOT NULL OR golfer2_id IS NOT NULL "
            "OR golfer3_id IS NOT NULL OR golfer4_id IS NOT NULL",
            name="ck_foursomes_has_golfer",
        ),
        Index("idx_foursomes_year", "year"),
        Index("idx_foursomes_tee_time", "tee_time"),
    )

    @property
    def golfer_ids(self):
        """Filled slots, in slot order."""
        return [
            gid
            for gid in (self.golfer1_id, self.golfer2_id, self.golfer3_id, self.golfer4_id)
            if gid is not None
        ]


class Champion(Base):
    """Recorded winner of a tournament year."""

    __tablename__ = "champions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    year = Column(Integer, nullable=False, unique=True)
    golfer_id = Column(Integer, ForeignKey("golfers.id"), nullable=False)
    display_name = Column(String, nullable=True)
    motivation = Column(Text, nullable=True)
    meaning = Column(Text, nullable=True)
    life_change = Column(Text, nullable=True)
    favorite_quote = Column(Text, nullable=True)
    photo_url = Column(String, nullable=True)
    image_id = Column(String, nullable=True)  # Image store key
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    golfer = relationship("Golfer", back_populates="championships")
    creator = relationship("User", back_populates="champions")


class Photo(Base):
    """Gallery photos."""

    __tablename__ = "photos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    image_id = Column(String, nullable=False)  # Image store key
    url = Column(String, nullable=False)
    caption = Column(String, nullable=True)
    category = Column(String, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    creator = relationship("User", back_populates="photos")

    __table_args__ = (Index("idx_photos_category", "category"),)
