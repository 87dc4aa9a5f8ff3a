"""
Shared test fixtures
Fixed clock, lead factory and a seeded in-memory lead store
"""
import pytest
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import pytz

from leadflow.domain.models.lead import Lead, LeadStatus, SalesStage


NOW = datetime(2026, 3, 2, 10, 0, 0, tzinfo=pytz.UTC)


def build_lead(lead_id: str = "lead-1", **overrides) -> Lead:
    """Lead with sensible defaults, created a week before NOW."""
    data = {
        "id": lead_id,
        "first_name": "Camille",
        "last_name": "Martin",
        "email": "camille.martin@example.fr",
        "phone": "0612345678",
        "status": LeadStatus.PROSPECT,
        "score": 50,
        "created_at": NOW - timedelta(days=7),
    }
    data.update(overrides)
    return Lead(**data)


class MockLeadStore:
    """
    In-memory lead repository seeded with one lead per smart queue.

    Test-only stand-in for the persistence layer; each test gets its own
    instance through the `lead_store` fixture.
    """

    def __init__(self, now: datetime = NOW):
        self._leads: Dict[str, Lead] = {}
        self.seed(now)

    def seed(self, now: datetime) -> None:
        self.save(build_lead(
            "callback-overdue",
            status=LeadStatus.PROSPECTION,
            score=90,
            call_attempts=2,
            next_callback_at=now - timedelta(minutes=30),
        ))
        self.save(build_lead(
            "priority-hot",
            status=LeadStatus.ATTEMPTED,
            score=85,
            call_attempts=1,
            response_date=now - timedelta(days=40),
        ))
        self.save(build_lead(
            "provisioned-new",
            status=LeadStatus.PROSPECTION,
            score=40,
            call_attempts=0,
            response_date=now - timedelta(days=45),
        ))
        self.save(build_lead(
            "crm-nouveau",
            status=LeadStatus.PROSPECT,
            sales_stage=SalesStage.NOUVEAU,
            score=100,
        ))
        self.save(build_lead(
            "archived",
            status=LeadStatus.ARCHIVED,
            score=95,
            next_callback_at=now - timedelta(hours=1),
        ))

    def save(self, lead: Lead) -> Lead:
        self._leads[lead.id] = lead
        return lead

    def get(self, lead_id: str) -> Optional[Lead]:
        return self._leads.get(lead_id)

    def all(self) -> List[Lead]:
        return list(self._leads.values())


@pytest.fixture
def now():
    """Fixed reference time"""
    return NOW


@pytest.fixture
def make_lead():
    """Factory for leads with overridable fields"""
    return build_lead


@pytest.fixture
def lead_store():
    """Fresh seeded in-memory store per test"""
    return MockLeadStore()
