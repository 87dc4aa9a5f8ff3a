"""
Lead Domain Models
"""
from pydantic import BaseModel, Field, field_serializer, field_validator
from typing import Optional, Dict, Any, List, Mapping
from datetime import datetime
from enum import Enum
from types import MappingProxyType

from leadflow.domain.models.touchpoint import Touchpoint
from leadflow.utils.time_utils import ensure_utc, resolve_now


class LeadStatus(str, Enum):
    """Calling-pipeline status of a lead"""
    PROSPECT = "PROSPECT"            # Newly injected
    PROSPECTION = "PROSPECTION"      # In the calling loop
    ATTEMPTED = "ATTEMPTED"          # Called, nobody picked up
    CONTACTED = "CONTACTED"          # Spoken to, decision pending
    RDV_FIXE = "RDV_FIXE"            # Appointment set, handed to CRM
    QUALIFIED = "QUALIFIED"          # Legacy, kept for stored data
    DISQUALIFIED = "DISQUALIFIED"
    ARCHIVED = "ARCHIVED"
    NRP = "NRP"                      # "Ne Repond Pas" after repeated attempts


class SalesStage(str, Enum):
    """CRM closing-pipeline stage"""
    NOUVEAU = "NOUVEAU"              # Fresh inbound (< 30 days), owned by the CRM
    FRESH = "FRESH"
    RDV_FIXE = "RDV_FIXE"
    RDV_NON_HONORE = "RDV_NON_HONORE"
    DECISION_EN_ATTENTE = "DECISION_EN_ATTENTE"
    PERDU_NON_INTERESSE = "PERDU_NON_INTERESSE"
    CHOIX_FINANCEMENT = "CHOIX_FINANCEMENT"
    VERIFICATION_IDENTITE = "VERIFICATION_IDENTITE"
    IDENTITE_NUMERIQUE = "IDENTITE_NUMERIQUE"
    VERIFICATION_COMPTE_CPF = "VERIFICATION_COMPTE_CPF"
    OUVERTURE_COMPTE_CPF = "OUVERTURE_COMPTE_CPF"
    TEST_POSITIONNEMENT = "TEST_POSITIONNEMENT"
    EN_ATTENTE_VALIDATION_CDC = "EN_ATTENTE_VALIDATION_CDC"
    INSCRIT_CPF = "INSCRIT_CPF"
    COURRIERS_ENVOYES = "COURRIERS_ENVOYES"
    COURRIERS_RECUS = "COURRIERS_RECUS"
    OFFRE_COMMERCIALE = "OFFRE_COMMERCIALE"
    FACTURATION = "FACTURATION"
    PAIEMENT = "PAIEMENT"
    INSCRIT_PERSO = "INSCRIT_PERSO"
    DIAGNOSTIC_AGENCE = "DIAGNOSTIC_AGENCE"
    GENERATION_PACK = "GENERATION_PACK"
    SIGNATURE_CONTRAT = "SIGNATURE_CONTRAT"
    VALIDATION_DOSSIER = "VALIDATION_DOSSIER"
    PROBLEME_SAV = "PROBLEME_SAV"
    PERDU_HORS_LIGNE = "PERDU_HORS_LIGNE"
    INSCRIPTION = "INSCRIPTION"
    TRANSFORMATION_APPRENANT = "TRANSFORMATION_APPRENANT"


class CallOutcome(str, Enum):
    """Outcome an agent records after calling a lead"""
    APPOINTMENT_SET = "APPOINTMENT_SET"
    CALLBACK_SCHEDULED = "CALLBACK_SCHEDULED"
    ANSWERED = "ANSWERED"
    NO_ANSWER = "NO_ANSWER"
    BUSY = "BUSY"
    VOICEMAIL = "VOICEMAIL"
    REFUSAL = "REFUSAL"
    WRONG_NUMBER = "WRONG_NUMBER"


class RefusalReason(str, Enum):
    """Why a lead refused"""
    PRICE = "PRICE"
    COMPETITION = "COMPETITION"
    NO_PROJECT = "NO_PROJECT"
    OTHER = "OTHER"


class HistoryEntryType(str, Enum):
    """Kind of lead history entry"""
    CALL_LOG = "CALL_LOG"
    STATUS_CHANGE = "STATUS_CHANGE"
    NOTE = "NOTE"


class SmartQueueType(str, Enum):
    """Operational queue a lead is surfaced in"""
    PROVISIONED = "provisioned"
    PRIORITY = "priority"
    CALLBACK = "callback"
    OTHER = "other"


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


class LeadHistoryEntry(BaseModel):
    """
    Immutable fact in a lead's history log.

    `details` is stored as a read-only mapping (nested dicts and lists
    included) and dumps back to plain dicts.
    """
    type: HistoryEntryType
    timestamp: datetime
    user_id: str
    details: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    model_config = {"frozen": True}

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("details")
    @classmethod
    def _freeze_details(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return _freeze(value)

    @field_serializer("details")
    def _dump_details(self, value: Mapping[str, Any]) -> Dict[str, Any]:
        return _thaw(value)

    def __deepcopy__(self, memo: Optional[Dict[int, Any]] = None) -> "LeadHistoryEntry":
        # Nothing inside an entry can change, so copies share it
        return self


class InteractionData(BaseModel):
    """Optional data captured alongside a call outcome"""
    next_callback: Optional[datetime] = None
    refusal_reason: Optional[RefusalReason] = None
    note: Optional[str] = None

    @field_validator("next_callback")
    @classmethod
    def _normalize_callback(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class LeadDraft(BaseModel):
    """
    Partial lead, as received at ingestion.

    Every field is optional; the scoring engine treats missing fields as
    contributing nothing.
    """
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    source: Optional[str] = None
    job_status: Optional[str] = None
    exam_id: Optional[str] = None
    consent_date: Optional[datetime] = None
    response_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("consent_date", "response_date", "created_at")
    @classmethod
    def _normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class LeadSnapshot(LeadDraft):
    """
    Lead fields the scoring engine reads, built from a plain record.

    Accepts dicts and arbitrary objects (read by attribute); ISO date
    strings are parsed and numbers are read as strings where a string is
    expected.
    """
    id: Optional[str] = None
    score: Optional[int] = None
    call_attempts: Optional[int] = None

    model_config = {"from_attributes": True, "coerce_numbers_to_str": True}


class Lead(BaseModel):
    """
    Prospective customer tracked through the calling and CRM pipelines.

    Invariants enforced on construction and on assignment:
    - score is clamped to [0, 100]
    - call_attempts is never negative
    - all timestamps are aware UTC
    """
    id: str
    organization_id: Optional[str] = None

    # Contact
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None

    # Pipeline
    status: LeadStatus = LeadStatus.PROSPECT
    sales_stage: Optional[SalesStage] = None
    score: int = 0

    # Calling KPIs
    call_attempts: int = Field(default=0, ge=0)
    last_call_date: Optional[datetime] = None
    next_callback_at: Optional[datetime] = None

    # Context
    source: Optional[str] = None
    job_status: Optional[str] = None
    exam_id: Optional[str] = None
    assigned_user_id: Optional[str] = None
    consent_date: Optional[datetime] = None
    response_date: Optional[datetime] = None
    refusal_reason: Optional[RefusalReason] = None
    notes: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    history: List[LeadHistoryEntry] = Field(default_factory=list)
    touchpoints: List[Touchpoint] = Field(default_factory=list)

    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"validate_assignment": True}

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        if value is None:
            return 0
        return max(0, min(100, int(value)))

    @field_validator(
        "last_call_date", "next_callback_at", "consent_date",
        "response_date", "created_at", "updated_at"
    )
    @classmethod
    def _normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @classmethod
    def from_draft(
        cls,
        lead_id: str,
        draft: LeadDraft,
        now: Optional[datetime] = None,
        **overrides: Any
    ) -> "Lead":
        """Create a lead from a validated ingestion draft."""
        data = draft.model_dump(exclude_none=True)
        data.setdefault("created_at", resolve_now(now))
        data.update(overrides)
        return cls(id=lead_id, **data)

    def with_updates(self, **updates: Any) -> "Lead":
        """
        Return a validated copy with `updates` applied.

        Unlike `model_copy(update=...)`, the result goes through every
        validator, so score clamping and date normalization still hold.
        """
        return type(self).model_validate({**self.model_dump(), **updates})

    def __repr__(self) -> str:
        return (
            f"Lead(id={self.id}, status={self.status.value}, "
            f"score={self.score}, attempts={self.call_attempts})"
        )
