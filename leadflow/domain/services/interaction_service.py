"""
Interaction State Machine
Applies call outcomes to leads: status transitions, counters and history
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Union

from leadflow.domain.models.lead import (
    CallOutcome,
    HistoryEntryType,
    InteractionData,
    Lead,
    LeadHistoryEntry,
    LeadStatus,
    SalesStage,
)
from leadflow.domain.models.lead_rules import (
    NO_ANSWER_OUTCOMES,
    InteractionRules,
    LeadEngineRules,
)
from leadflow.domain.models.touchpoint import Touchpoint
from leadflow.domain.services.scoring_engine import LeadScoringEngine
from leadflow.utils.time_utils import resolve_now

logger = logging.getLogger(__name__)


# Target status per outcome. NO_ANSWER-family outcomes may escalate to NRP.
OUTCOME_TRANSITIONS: Dict[CallOutcome, LeadStatus] = {
    CallOutcome.APPOINTMENT_SET: LeadStatus.RDV_FIXE,
    CallOutcome.CALLBACK_SCHEDULED: LeadStatus.PROSPECTION,
    CallOutcome.ANSWERED: LeadStatus.CONTACTED,
    CallOutcome.NO_ANSWER: LeadStatus.ATTEMPTED,
    CallOutcome.BUSY: LeadStatus.ATTEMPTED,
    CallOutcome.VOICEMAIL: LeadStatus.ATTEMPTED,
    CallOutcome.REFUSAL: LeadStatus.DISQUALIFIED,
    CallOutcome.WRONG_NUMBER: LeadStatus.ARCHIVED,
}


class InteractionStateMachine:
    """
    Deterministic lead transitions driven by call outcomes.

    All operations are pure: they return a new Lead and leave the input
    untouched. Persisting the result is the caller's job.

    Leads in RDV_FIXE, DISQUALIFIED, ARCHIVED or NRP are not guarded against
    further interactions; agents stop calling them by convention.
    """

    def __init__(
        self,
        rules: Optional[InteractionRules] = None,
        scoring_engine: Optional[LeadScoringEngine] = None
    ):
        self.rules = rules or InteractionRules.default()
        self.scoring_engine = scoring_engine or LeadScoringEngine()

    def resolve_status(self, outcome: CallOutcome, call_attempts: int) -> LeadStatus:
        """
        Target status for an outcome.

        Args:
            outcome: Call outcome
            call_attempts: Attempt count after this call was counted

        Returns:
            New status
        """
        status = OUTCOME_TRANSITIONS[outcome]
        if outcome in NO_ANSWER_OUTCOMES and call_attempts >= self.rules.nrp_attempt_threshold:
            # Auto-NRP after repeated unanswered calls
            status = LeadStatus.NRP
        return status

    def register_interaction(
        self,
        lead: Lead,
        user_id: str,
        outcome: Union[CallOutcome, str],
        data: Optional[Union[InteractionData, Mapping[str, Any]]] = None,
        now: Optional[datetime] = None
    ) -> Lead:
        """
        Register a call outcome and derive the updated lead.

        Always increments call_attempts, stamps last_call_date and appends a
        CALL_LOG entry. A STATUS_CHANGE entry is appended only when the status
        changes, a NOTE entry only when a note is given.

        Args:
            lead: Current lead
            user_id: Agent who made the call
            outcome: Call outcome
            data: Optional callback date, refusal reason and note
            now: Interaction time (default: now)

        Returns:
            New Lead value
        """
        outcome = CallOutcome(outcome)
        if data is not None and not isinstance(data, InteractionData):
            data = InteractionData(**data)
        now = resolve_now(now)

        call_attempts = lead.call_attempts + 1
        updates: Dict[str, Any] = {
            "call_attempts": call_attempts,
            "last_call_date": now,
            "updated_at": now,
        }

        if outcome == CallOutcome.APPOINTMENT_SET:
            updates["sales_stage"] = SalesStage.RDV_FIXE
        if outcome in (CallOutcome.APPOINTMENT_SET, CallOutcome.CALLBACK_SCHEDULED):
            if data is not None and data.next_callback is not None:
                updates["next_callback_at"] = data.next_callback
        if outcome == CallOutcome.REFUSAL and data is not None and data.refusal_reason is not None:
            updates["refusal_reason"] = data.refusal_reason

        new_status = self.resolve_status(outcome, call_attempts)
        entries: List[LeadHistoryEntry] = []

        if new_status != lead.status:
            updates["status"] = new_status
            entries.append(LeadHistoryEntry(
                type=HistoryEntryType.STATUS_CHANGE,
                timestamp=now,
                user_id=user_id,
                details={"old_status": lead.status.value, "new_status": new_status.value}
            ))

        if data is not None and data.note:
            entries.append(LeadHistoryEntry(
                type=HistoryEntryType.NOTE,
                timestamp=now,
                user_id=user_id,
                details={"note": data.note}
            ))

        entries.append(LeadHistoryEntry(
            type=HistoryEntryType.CALL_LOG,
            timestamp=now,
            user_id=user_id,
            details={
                "outcome": outcome.value,
                "data": data.model_dump(mode="json", exclude_none=True) if data is not None else None,
            }
        ))
        updates["history"] = [*lead.history, *entries]

        logger.info(
            f"Lead {lead.id}: {outcome.value} by {user_id} -> "
            f"{lead.status.value} => {new_status.value} (attempt {call_attempts})",
            extra={
                "lead_id": lead.id,
                "user_id": user_id,
                "outcome": outcome.value,
                "old_status": lead.status.value,
                "new_status": new_status.value,
                "call_attempts": call_attempts,
            }
        )

        return lead.with_updates(**updates)

    def inject_lead(self, lead: Lead, now: Optional[datetime] = None) -> Lead:
        """
        Route a newly ingested lead.

        Every lead starts as PROSPECT with a fresh score. Leads who responded
        within the CRM freshness window go straight to the CRM (NOUVEAU) with
        a boosted score; older responses stay in prospection.

        Args:
            lead: Lead as ingested
            now: Ingestion time (default: now)

        Returns:
            New Lead value
        """
        now = resolve_now(now)
        updates: Dict[str, Any] = {
            "status": LeadStatus.PROSPECT,
            "score": self.scoring_engine.calculate_score(lead, now),
            "updated_at": now,
        }

        freshness_limit = now - timedelta(days=self.rules.crm_freshness_days)
        if lead.response_date is not None and lead.response_date > freshness_limit:
            updates["sales_stage"] = SalesStage.NOUVEAU
            updates["score"] = 100
            logger.info(
                f"Lead {lead.id} routed to CRM (responded {lead.response_date.isoformat()})",
                extra={"lead_id": lead.id, "route": "crm"}
            )
        else:
            logger.info(
                f"Lead {lead.id} routed to prospection (score {updates['score']})",
                extra={"lead_id": lead.id, "route": "prospection"}
            )

        return lead.with_updates(**updates)

    def add_touchpoint(
        self,
        lead: Lead,
        touchpoint: Touchpoint,
        now: Optional[datetime] = None
    ) -> Lead:
        """Append a marketing touchpoint to a lead (append-only)."""
        if touchpoint.created_at is None:
            touchpoint = touchpoint.model_copy(update={"created_at": resolve_now(now)})
        return lead.with_updates(
            touchpoints=[*lead.touchpoints, touchpoint],
            updated_at=resolve_now(now)
        )


# Global singleton instance
_state_machine: Optional[InteractionStateMachine] = None


def get_interaction_state_machine() -> InteractionStateMachine:
    """Get the global interaction state machine, built from the configured rules."""
    global _state_machine
    if _state_machine is None:
        rules = LeadEngineRules.from_config()
        _state_machine = InteractionStateMachine(
            rules.interactions,
            scoring_engine=LeadScoringEngine(rules.scoring)
        )
    return _state_machine
