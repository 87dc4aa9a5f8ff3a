"""
Touchpoint and Attribution Models
Marketing interactions recorded against a lead
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum

from leadflow.utils.time_utils import ensure_utc

# Label used when a touchpoint carries no source
DIRECT_SOURCE = "Direct"


class AttributionModel(str, Enum):
    """How conversion credit is split across touchpoints"""
    FIRST_TOUCH = "FIRST_TOUCH"
    LAST_TOUCH = "LAST_TOUCH"
    LINEAR = "LINEAR"
    U_SHAPED = "U_SHAPED"


class Touchpoint(BaseModel):
    """Marketing-attribution fact. Never mutated after creation."""
    type: str
    source: Optional[str] = None
    medium: Optional[str] = None
    campaign: Optional[str] = None
    content: Optional[str] = None
    term: Optional[str] = None
    referrer: Optional[str] = None
    page_url: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    model_config = {"frozen": True}

    @field_validator("created_at")
    @classmethod
    def _normalize_created_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @property
    def source_label(self) -> str:
        """Source name used for attribution (empty sources count as Direct)."""
        return self.source or DIRECT_SOURCE


class SourceWeight(BaseModel):
    """Aggregated attribution credit for one source"""
    source: str
    weight: float
