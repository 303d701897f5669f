from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from admind.db.enums import AdPlatformEnum, AdStatusEnum


class AdCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    platform: AdPlatformEnum
    status: AdStatusEnum = AdStatusEnum.draft
    budget: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _check_dates(self) -> "AdCreate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class AdUpdate(AdCreate):
    """Full edit of an ad's user-managed fields; performance counters are untouched."""


class AdStatusUpdate(BaseModel):
    status: AdStatusEnum
