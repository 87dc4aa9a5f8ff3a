"""
Lead Activity Models
Behavioral events and scoring insights
"""
from pydantic import BaseModel, field_validator
from typing import Dict
from datetime import datetime
from enum import Enum

from leadflow.utils.time_utils import ensure_utc


# Points per behavioral event type (before decay)
BEHAVIORAL_EVENT_WEIGHTS: Dict[str, int] = {
    "PAGE_VIEW": 2,
    "FORM_INTERACTION": 10,
    "EMAIL_OPEN": 5,
    "EMAIL_CLICK": 15,
    "PRICING_VIEW": 25,
    "DOWNLOAD": 20,
}


class BehavioralEvent(BaseModel):
    """Tracked behavioral event (page view, email click...)"""
    type: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _normalize_created_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class InsightType(str, Enum):
    """Tone of a scoring insight"""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class ScoringInsight(BaseModel):
    """Human-readable explanation shown next to a lead score"""
    label: str
    icon: str
    type: InsightType
