"""
Lead Scoring Engine
Additive point model for new leads, plus predictive rescoring helpers
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Iterable, List, Mapping, Optional

from leadflow.domain.models.lead import Lead, LeadDraft, LeadSnapshot
from leadflow.domain.models.lead_activity import (
    BEHAVIORAL_EVENT_WEIGHTS,
    BehavioralEvent,
    InsightType,
    ScoringInsight,
)
from leadflow.domain.models.lead_rules import LeadEngineRules, ScoringRules
from leadflow.utils.time_utils import ensure_utc, resolve_now

logger = logging.getLogger(__name__)

# Predictive model constants
PREDICTIVE_BASE_SCORE = 50
PREDICTIVE_FRESHNESS_BONUS = 20
PREDICTIVE_DECAY_DAYS = 30
HARD_TO_REACH_ATTEMPTS = 3
HARD_TO_REACH_PENALTY = 10

# Source multiplier bounds (conversion-rate driven)
MIN_SOURCE_MULTIPLIER = 0.6
MAX_SOURCE_MULTIPLIER = 1.4
MIN_LEADS_FOR_MULTIPLIER = 10


def _has_value(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _as_scorable(lead: Any) -> Any:
    """Read dicts and foreign objects through LeadSnapshot; models pass through."""
    if isinstance(lead, (Lead, LeadDraft)):
        return lead
    if isinstance(lead, Mapping):
        lead = dict(lead)
    return LeadSnapshot.model_validate(lead)


class LeadScoringEngine:
    """
    Scores leads on a 0-100 scale.

    Scores are snapshots: freshness is measured against `now` at call time,
    so callers recompute when time-sensitive accuracy matters.

    Usage:
        engine = LeadScoringEngine()
        lead.score = engine.calculate_score(lead)
    """

    def __init__(self, rules: Optional[ScoringRules] = None):
        self.rules = rules or ScoringRules.default()

    def calculate_score(self, lead: Any, now: Optional[datetime] = None) -> int:
        """
        Compute the initial score of a (possibly partial) lead.

        Missing attributes simply contribute nothing, so the result is at
        least the base score. Values that cannot be read as lead fields
        raise pydantic.ValidationError.

        Args:
            lead: Lead, LeadDraft, a dict or any object exposing the lead
                attributes (ISO date strings are accepted)
            now: Reference time for freshness (default: now)

        Returns:
            Integer score capped at rules.max_score
        """
        lead = _as_scorable(lead)
        rules = self.rules
        now = resolve_now(now)
        score = rules.base_score

        # Freshness
        created_at = ensure_utc(getattr(lead, "created_at", None))
        if created_at is not None:
            age = now - created_at
            if age < timedelta(minutes=rules.fresh_window_minutes):
                score += rules.fresh_bonus
            elif age < timedelta(minutes=rules.warm_window_minutes):
                score += rules.warm_bonus

        # Completeness
        if _has_value(getattr(lead, "email", None)) and _has_value(getattr(lead, "phone", None)):
            score += rules.completeness_bonus

        # Financing eligibility
        job_status = getattr(lead, "job_status", None)
        if _has_value(job_status) and str(job_status).strip().lower() in rules.financing_job_statuses:
            score += rules.financing_bonus

        # Source weight
        source = getattr(lead, "source", None)
        if _has_value(source) and str(source).strip().lower() in rules.priority_sources:
            score += rules.source_bonus

        # Project definition
        if _has_value(getattr(lead, "exam_id", None)):
            score += rules.project_bonus

        final = min(rules.max_score, score)
        logger.debug(
            f"Scored lead {getattr(lead, 'id', None) or '<draft>'}: {final} (raw {score})",
            extra={"lead_id": getattr(lead, "id", None), "score": final}
        )
        return final

    def get_scoring_insights(self, lead: Any, now: Optional[datetime] = None) -> List[ScoringInsight]:
        """
        Explain a lead's score for display next to it.

        Args:
            lead: Lead to describe
            now: Reference time (default: now)

        Returns:
            Ordered list of insights (freshness, intent, activity, source)
        """
        lead = _as_scorable(lead)
        now = resolve_now(now)
        insights: List[ScoringInsight] = []

        created_at = ensure_utc(getattr(lead, "created_at", None))
        if created_at is not None and now - created_at < timedelta(hours=24):
            insights.append(ScoringInsight(
                label="Lead très récent (< 24h)", icon="🔥", type=InsightType.POSITIVE
            ))

        score = getattr(lead, "score", 0) or 0
        if score >= 80:
            insights.append(ScoringInsight(
                label="Intention d'achat élevée", icon="🎯", type=InsightType.POSITIVE
            ))
        elif score >= 50:
            insights.append(ScoringInsight(
                label="Intérêt modéré à confirmer", icon="⚖️", type=InsightType.NEUTRAL
            ))

        attempts = getattr(lead, "call_attempts", 0) or 0
        if attempts == 0:
            insights.append(ScoringInsight(
                label="Premier contact à établir", icon="📞", type=InsightType.POSITIVE
            ))
        elif attempts > HARD_TO_REACH_ATTEMPTS:
            insights.append(ScoringInsight(
                label="Lead difficile à joindre", icon="⚠️", type=InsightType.NEGATIVE
            ))

        source = (getattr(lead, "source", None) or "").lower()
        if "recommend" in source or "recommand" in source:
            insights.append(ScoringInsight(
                label="Source Recommandation (Haute Confiance)", icon="🤝", type=InsightType.POSITIVE
            ))

        return insights

    @staticmethod
    def source_multiplier(total_leads: int, converted_leads: int) -> float:
        """
        Multiplier derived from a source's historical conversion rate.

        0% conversion -> 0.6x, 10% -> 1.0x, 20%+ -> 1.4x. Sources with fewer
        than 10 leads are neutral (1.0x).
        """
        if total_leads < MIN_LEADS_FOR_MULTIPLIER:
            return 1.0

        conversion_rate = (converted_leads / total_leads) * 100
        multiplier = MIN_SOURCE_MULTIPLIER + conversion_rate / 25
        return min(MAX_SOURCE_MULTIPLIER, max(MIN_SOURCE_MULTIPLIER, multiplier))

    def calculate_predictive_score(
        self,
        lead: Any,
        events: Iterable[BehavioralEvent],
        source_multiplier: float = 1.0,
        now: Optional[datetime] = None
    ) -> int:
        """
        Rescore a lead from its behavioral events.

        Each event contributes its type weight, decayed linearly to zero over
        30 days. Recent leads get a freshness bonus, leads already called more
        than 3 times a penalty, and the total is scaled by the source
        multiplier.

        Returns:
            Integer score in [0, 100]
        """
        lead = _as_scorable(lead)
        now = resolve_now(now)
        score: float = PREDICTIVE_BASE_SCORE

        for event in events:
            weight = BEHAVIORAL_EVENT_WEIGHTS.get(event.type, 0)
            days_ago = (now - event.created_at).total_seconds() / 86400
            decay = max(0.0, 1 - days_ago / PREDICTIVE_DECAY_DAYS)
            score += weight * decay

        created_at = ensure_utc(getattr(lead, "created_at", None))
        if created_at is not None and now - created_at < timedelta(hours=24):
            score += PREDICTIVE_FRESHNESS_BONUS

        if (getattr(lead, "call_attempts", 0) or 0) > HARD_TO_REACH_ATTEMPTS:
            score -= HARD_TO_REACH_PENALTY

        score *= source_multiplier
        return min(100, max(0, _round_half_up(score)))


# Global singleton instance
_engine: Optional[LeadScoringEngine] = None


def get_scoring_engine() -> LeadScoringEngine:
    """Get the global scoring engine, built from the configured rules."""
    global _engine
    if _engine is None:
        _engine = LeadScoringEngine(LeadEngineRules.from_config().scoring)
    return _engine
