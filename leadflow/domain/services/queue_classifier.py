"""
Smart Queue Classifier
Partitions leads into the operational queues surfaced to sales agents
"""
import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence, TypeVar

from leadflow.domain.models.lead import Lead, LeadStatus, SalesStage, SmartQueueType
from leadflow.domain.models.lead_rules import (
    CALLBACK_EXCLUDED_STATUSES,
    PRIORITY_ELIGIBLE_STATUSES,
    LeadEngineRules,
    QueueRules,
)
from leadflow.utils.time_utils import resolve_now, timestamp_or_epoch

logger = logging.getLogger(__name__)

L = TypeVar("L", bound=Lead)


class SmartQueueClassifier:
    """
    Classifies leads into Callback, Priority and Provisioned queues.

    Precedence when a lead matches several queues:
    Callback > Priority > Provisioned > Other.

    The list functions and get_smart_queue_type share the same predicates
    and precedence, so a lead is in a queue list exactly when
    get_smart_queue_type returns that queue.
    """

    def __init__(self, rules: Optional[QueueRules] = None):
        self.rules = rules or QueueRules.default()

    # --- Raw predicates (no precedence) ---

    def matches_callback(self, lead: Lead, now: Optional[datetime] = None) -> bool:
        """Callback due within the horizon (or overdue) on a still-open lead."""
        if lead.next_callback_at is None:
            return False
        horizon = resolve_now(now) + timedelta(minutes=self.rules.callback_horizon_minutes)
        return (
            lead.next_callback_at <= horizon
            and lead.status not in CALLBACK_EXCLUDED_STATUSES
        )

    def matches_priority(self, lead: Lead) -> bool:
        """High score, still callable, and not owned by the CRM."""
        return (
            lead.score > self.rules.priority_score_threshold
            and lead.status in PRIORITY_ELIGIBLE_STATUSES
            and lead.sales_stage != SalesStage.NOUVEAU
        )

    def matches_provisioned(self, lead: Lead) -> bool:
        """Untouched lead waiting in the pipe, with no callback planned."""
        in_pipe = (
            (lead.status == LeadStatus.PROSPECT and lead.sales_stage != SalesStage.NOUVEAU)
            or (lead.status == LeadStatus.PROSPECTION and lead.call_attempts == 0)
        )
        return in_pipe and lead.next_callback_at is None

    # --- Classification ---

    def get_smart_queue_type(self, lead: Lead, now: Optional[datetime] = None) -> SmartQueueType:
        """
        Identify which smart queue a lead belongs to.

        Args:
            lead: Lead to classify
            now: Reference time for callback due-ness (default: now)

        Returns:
            SmartQueueType (first match in precedence order)
        """
        if self.matches_callback(lead, now):
            return SmartQueueType.CALLBACK
        if self.matches_priority(lead):
            return SmartQueueType.PRIORITY
        if self.matches_provisioned(lead):
            return SmartQueueType.PROVISIONED
        return SmartQueueType.OTHER

    def _members(
        self,
        leads: Iterable[L],
        queue: SmartQueueType,
        now: Optional[datetime]
    ) -> List[L]:
        now = resolve_now(now)
        return [l for l in leads if self.get_smart_queue_type(l, now) == queue]

    def get_provisioned_queue(self, leads: Iterable[L], now: Optional[datetime] = None) -> List[L]:
        """'Into the pipe' leads, most recent response first."""
        members = self._members(leads, SmartQueueType.PROVISIONED, now)
        return sorted(members, key=lambda l: timestamp_or_epoch(l.response_date), reverse=True)

    def get_priority_queue(self, leads: Iterable[L], now: Optional[datetime] = None) -> List[L]:
        """Hot leads (score above threshold), most recent response first."""
        members = self._members(leads, SmartQueueType.PRIORITY, now)
        return sorted(members, key=lambda l: timestamp_or_epoch(l.response_date), reverse=True)

    def get_callback_queue(self, leads: Iterable[L], now: Optional[datetime] = None) -> List[L]:
        """Due and overdue callbacks, most urgent first."""
        members = self._members(leads, SmartQueueType.CALLBACK, now)
        return sorted(members, key=lambda l: l.next_callback_at)

    def summarize(self, leads: Sequence[Lead], now: Optional[datetime] = None) -> dict:
        """Count leads per queue (dashboard badges)."""
        now = resolve_now(now)
        counts = {queue.value: 0 for queue in SmartQueueType}
        for lead in leads:
            counts[self.get_smart_queue_type(lead, now).value] += 1
        logger.debug(f"Smart queue counts: {counts}", extra={"queue_counts": counts})
        return counts


# Global singleton instance
_classifier: Optional[SmartQueueClassifier] = None


def get_queue_classifier() -> SmartQueueClassifier:
    """Get the global queue classifier, built from the configured rules."""
    global _classifier
    if _classifier is None:
        _classifier = SmartQueueClassifier(LeadEngineRules.from_config().queues)
    return _classifier
