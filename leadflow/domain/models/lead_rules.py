"""
Lead Engine Rules
Tenant-configurable thresholds and allow-lists for scoring, queues and calling
"""
from pydantic import BaseModel, Field, field_validator
from typing import FrozenSet, List, Optional

from leadflow.core.config import ConfigManager
from leadflow.domain.models.lead import LeadStatus, CallOutcome


# Situations professionnelles eligible for training financing (CPF, OPCO...)
FINANCING_JOB_STATUSES: FrozenSet[str] = frozenset({
    "salarie", "cdi", "cdd", "independant", "chomage",
})

# Acquisition channels with the best historical conversion
PRIORITY_SOURCES: FrozenSet[str] = frozenset({
    "facebook_ads", "google_ads", "landing_page", "recommandation", "meta",
})

# Statuses still worth calling from the priority queue
PRIORITY_ELIGIBLE_STATUSES: FrozenSet[LeadStatus] = frozenset({
    LeadStatus.PROSPECT,
    LeadStatus.PROSPECTION,
    LeadStatus.ATTEMPTED,
})

# Statuses that never surface in the callback queue
CALLBACK_EXCLUDED_STATUSES: FrozenSet[LeadStatus] = frozenset({
    LeadStatus.DISQUALIFIED,
    LeadStatus.QUALIFIED,
    LeadStatus.RDV_FIXE,
    LeadStatus.ARCHIVED,
})

# Outcomes where nobody actually spoke to the lead
NO_ANSWER_OUTCOMES: FrozenSet[CallOutcome] = frozenset({
    CallOutcome.NO_ANSWER,
    CallOutcome.BUSY,
    CallOutcome.VOICEMAIL,
})


class ScoringRules(BaseModel):
    """Additive point model used to score new leads."""

    base_score: int = Field(default=30, ge=0, le=100)
    max_score: int = Field(default=100, ge=1, le=100)

    # Freshness
    fresh_window_minutes: int = Field(
        default=15,
        ge=1,
        description="Leads younger than this get fresh_bonus"
    )
    fresh_bonus: int = Field(default=30, ge=0)
    warm_window_minutes: int = Field(
        default=120,
        ge=1,
        description="Leads younger than this (but not fresh) get warm_bonus"
    )
    warm_bonus: int = Field(default=10, ge=0)

    # Profile signals
    completeness_bonus: int = Field(default=20, ge=0, description="Both email and phone present")
    financing_bonus: int = Field(default=20, ge=0, description="job_status in the financing allow-list")
    source_bonus: int = Field(default=10, ge=0, description="source in the priority allow-list")
    project_bonus: int = Field(default=10, ge=0, description="exam_id set")

    financing_job_statuses: List[str] = Field(
        default_factory=lambda: sorted(FINANCING_JOB_STATUSES)
    )
    priority_sources: List[str] = Field(
        default_factory=lambda: sorted(PRIORITY_SOURCES)
    )

    @field_validator("financing_job_statuses", "priority_sources")
    @classmethod
    def _normalize_allow_list(cls, values: List[str]) -> List[str]:
        return sorted({v.strip().lower() for v in values})

    @classmethod
    def default(cls) -> "ScoringRules":
        return cls()


class QueueRules(BaseModel):
    """Smart queue thresholds."""

    priority_score_threshold: int = Field(
        default=75,
        ge=0,
        le=100,
        description="Leads scoring strictly above this are 'hot'"
    )
    callback_horizon_minutes: int = Field(
        default=120,
        ge=0,
        description="Callbacks due within this horizon (or overdue) are surfaced"
    )

    @classmethod
    def default(cls) -> "QueueRules":
        return cls()


class InteractionRules(BaseModel):
    """Call-outcome state machine settings."""

    nrp_attempt_threshold: int = Field(
        default=6,
        ge=1,
        description="Unanswered leads reaching this many attempts become NRP"
    )
    crm_freshness_days: int = Field(
        default=30,
        ge=1,
        description="Leads who responded within this window go straight to the CRM"
    )

    @classmethod
    def default(cls) -> "InteractionRules":
        return cls()


class LeadEngineRules(BaseModel):
    """
    All lead-engine rules for a tenant.

    Stored under the `lead_engine` section of the YAML configuration.
    """

    scoring: ScoringRules = Field(default_factory=ScoringRules)
    queues: QueueRules = Field(default_factory=QueueRules)
    interactions: InteractionRules = Field(default_factory=InteractionRules)

    @classmethod
    def default(cls) -> "LeadEngineRules":
        """Create default rules."""
        return cls()

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "LeadEngineRules":
        """Create from dictionary (config or database load)."""
        if data is None:
            return cls.default()
        return cls(**data)

    @classmethod
    def from_config(cls, config: Optional[ConfigManager] = None) -> "LeadEngineRules":
        """Load rules from the `lead_engine` configuration section."""
        config = config or ConfigManager.from_settings()
        return cls.from_dict(config.get_section("lead_engine"))
