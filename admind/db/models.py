from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Date, DateTime, Enum, Integer, Numeric, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from admind.db.base import Base
from admind.db.enums import AdPlatformEnum, AdStatusEnum, MeetingStatusEnum, MeetingTypeEnum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class Ad(Base):
    __tablename__ = "ads"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    platform: Mapped[AdPlatformEnum] = mapped_column(
        Enum(AdPlatformEnum, name="ad_platform", values_callable=_enum_values), nullable=False
    )
    status: Mapped[AdStatusEnum] = mapped_column(
        Enum(AdStatusEnum, name="ad_status", values_callable=_enum_values),
        nullable=False,
        default=AdStatusEnum.draft,
    )
    budget: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    spent: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    impressions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    clicks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    conversions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ctr: Mapped[float] = mapped_column(Numeric(7, 2, asdecimal=False), nullable=False, default=0)
    cpc: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class Meeting(Base):
    __tablename__ = "meetings"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    # Null for bookings made from the public site without a session.
    user_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    meeting_type: Mapped[MeetingTypeEnum] = mapped_column(
        Enum(MeetingTypeEnum, name="meeting_type", values_callable=_enum_values),
        nullable=False,
        default=MeetingTypeEnum.consultation,
    )
    status: Mapped[MeetingStatusEnum] = mapped_column(
        Enum(MeetingStatusEnum, name="meeting_status", values_callable=_enum_values),
        nullable=False,
        default=MeetingStatusEnum.scheduled,
    )
    room_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    attendee_name: Mapped[str] = mapped_column(Text, nullable=False)
    attendee_email: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    invite_code: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class Profile(Base):
    __tablename__ = "profiles"

    # Same value as the auth provider's user id.
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    full_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    company: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    position: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class GrowthMetric(Base):
    __tablename__ = "growth_metrics"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    # "revenue", "conversions", ...; read by both the stats and analytics views.
    metric_name: Mapped[str] = mapped_column(Text, nullable=False)
    metric_value: Mapped[float] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=False, default=0)
    metric_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
