"""Domain models"""

# Lead models
from .lead import (
    LeadStatus,
    SalesStage,
    CallOutcome,
    RefusalReason,
    HistoryEntryType,
    SmartQueueType,
    LeadHistoryEntry,
    InteractionData,
    LeadDraft,
    LeadSnapshot,
    Lead,
)

# Marketing attribution
from .touchpoint import (
    DIRECT_SOURCE,
    AttributionModel,
    Touchpoint,
    SourceWeight,
)

# Assignment
from .assignment import (
    DistributionMode,
    Candidate,
)

# Activity and insights
from .lead_activity import (
    BEHAVIORAL_EVENT_WEIGHTS,
    BehavioralEvent,
    InsightType,
    ScoringInsight,
)

# Rules
from .lead_rules import (
    FINANCING_JOB_STATUSES,
    PRIORITY_SOURCES,
    PRIORITY_ELIGIBLE_STATUSES,
    CALLBACK_EXCLUDED_STATUSES,
    NO_ANSWER_OUTCOMES,
    ScoringRules,
    QueueRules,
    InteractionRules,
    LeadEngineRules,
)

__all__ = [
    # Lead models
    "LeadStatus",
    "SalesStage",
    "CallOutcome",
    "RefusalReason",
    "HistoryEntryType",
    "SmartQueueType",
    "LeadHistoryEntry",
    "InteractionData",
    "LeadDraft",
    "LeadSnapshot",
    "Lead",
    # Attribution
    "DIRECT_SOURCE",
    "AttributionModel",
    "Touchpoint",
    "SourceWeight",
    # Assignment
    "DistributionMode",
    "Candidate",
    # Activity
    "BEHAVIORAL_EVENT_WEIGHTS",
    "BehavioralEvent",
    "InsightType",
    "ScoringInsight",
    # Rules
    "FINANCING_JOB_STATUSES",
    "PRIORITY_SOURCES",
    "PRIORITY_ELIGIBLE_STATUSES",
    "CALLBACK_EXCLUDED_STATUSES",
    "NO_ANSWER_OUTCOMES",
    "ScoringRules",
    "QueueRules",
    "InteractionRules",
    "LeadEngineRules",
]
