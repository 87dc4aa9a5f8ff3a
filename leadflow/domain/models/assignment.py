"""
Assignment Models
Ephemeral inputs to lead-assignment candidate selection
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class DistributionMode(str, Enum):
    """Lead distribution strategy configured per team"""
    LOAD_BALANCED = "LOAD_BALANCED"
    ROUND_ROBIN = "ROUND_ROBIN"
    SKILL_BASED = "SKILL_BASED"


class Candidate(BaseModel):
    """
    A user eligible to receive a lead.

    Not persisted. `load_score` is computed by the caller: active-lead count
    for LOAD_BALANCED, today's assignment count for ROUND_ROBIN.
    """
    user_id: str
    load_score: float = Field(default=0.0, description="Caller-supplied load metric")
    last_assigned_at: Optional[datetime] = None
