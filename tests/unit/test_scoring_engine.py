"""
Unit Tests for the Lead Scoring Engine
Tests the additive point model, insights and predictive rescoring
"""
import pytest
from datetime import timedelta
from types import SimpleNamespace

from pydantic import ValidationError

from leadflow.domain.models.lead import LeadDraft
from leadflow.domain.models.lead_activity import BehavioralEvent, InsightType
from leadflow.domain.models.lead_rules import ScoringRules
from leadflow.domain.services.scoring_engine import LeadScoringEngine


@pytest.fixture
def engine():
    return LeadScoringEngine()


class TestCalculateScore:
    """Tests for the additive point model"""

    def test_empty_draft_scores_base(self, engine, now):
        """Missing fields contribute nothing: base score only"""
        assert engine.calculate_score(LeadDraft(), now=now) == 30

    def test_fresh_lead_under_15_minutes(self, engine, now):
        draft = LeadDraft(created_at=now - timedelta(minutes=5))
        assert engine.calculate_score(draft, now=now) == 60

    def test_warm_lead_under_2_hours(self, engine, now):
        draft = LeadDraft(created_at=now - timedelta(minutes=90))
        assert engine.calculate_score(draft, now=now) == 40

    def test_old_lead_gets_no_freshness(self, engine, now):
        draft = LeadDraft(created_at=now - timedelta(hours=3))
        assert engine.calculate_score(draft, now=now) == 30

    def test_completeness_requires_both_email_and_phone(self, engine, now):
        assert engine.calculate_score(LeadDraft(email="a@b.fr"), now=now) == 30
        assert engine.calculate_score(LeadDraft(email="a@b.fr", phone=""), now=now) == 30
        assert engine.calculate_score(LeadDraft(email="a@b.fr", phone="0600000000"), now=now) == 50

    @pytest.mark.parametrize("job_status", ["CDI", "salarie", "Chomage", "independant", "cdd"])
    def test_financing_job_status_is_case_insensitive(self, engine, now, job_status):
        assert engine.calculate_score(LeadDraft(job_status=job_status), now=now) == 50

    def test_unlisted_job_status_scores_nothing(self, engine, now):
        assert engine.calculate_score(LeadDraft(job_status="RETRAITE"), now=now) == 30

    @pytest.mark.parametrize("source", ["facebook_ads", "GOOGLE_ADS", "Meta", "landing_page", "recommandation"])
    def test_priority_source(self, engine, now, source):
        assert engine.calculate_score(LeadDraft(source=source), now=now) == 40

    def test_exam_id_adds_project_points(self, engine, now):
        assert engine.calculate_score(LeadDraft(exam_id="exam-1"), now=now) == 40

    def test_full_lead_is_capped_at_100(self, engine, now):
        """30+30+20+20+10+10 = 120, clamped to 100"""
        draft = LeadDraft(
            created_at=now,
            email="lea@example.fr",
            phone="0612345678",
            job_status="CDI",
            source="facebook_ads",
            exam_id="exam-1",
        )
        assert engine.calculate_score(draft, now=now) == 100

    def test_adding_a_qualifying_field_never_lowers_score(self, engine, now):
        base = LeadDraft(email="lea@example.fr", source="meta")
        richer = base.model_copy(update={"exam_id": "exam-1"})
        assert engine.calculate_score(richer, now=now) >= engine.calculate_score(base, now=now)

    def test_accepts_full_lead(self, engine, now, make_lead):
        lead = make_lead(created_at=now - timedelta(days=2), source="website")
        assert engine.calculate_score(lead, now=now) == 50

    def test_custom_rules(self, now):
        engine = LeadScoringEngine(ScoringRules(base_score=10, priority_sources=["TikTok"]))
        assert engine.calculate_score(LeadDraft(source="tiktok"), now=now) == 20


class TestPlainRecords:
    """Tests for scoring dicts and foreign objects"""

    RECORD = {
        "created_at": "2026-03-02T09:55:00Z",
        "email": "lea@example.fr",
        "phone": "0612345678",
        "job_status": "CDI",
        "source": "facebook_ads",
        "exam_id": "exam-1",
    }

    def test_dict_scores_like_draft(self, engine, now):
        draft_score = engine.calculate_score(LeadDraft(**self.RECORD), now=now)

        assert draft_score == 100
        assert engine.calculate_score(dict(self.RECORD), now=now) == draft_score

    def test_dict_with_partial_fields(self, engine, now):
        assert engine.calculate_score({"exam_id": 42, "unknown": "ignored"}, now=now) == 40

    def test_object_with_string_dates(self, engine, now):
        record = SimpleNamespace(created_at="2026-03-02T09:00:00+00:00", email=None, phone=None)
        # 60 minutes old: warm bonus only
        assert engine.calculate_score(record, now=now) == 40

    def test_malformed_date_raises_validation_error(self, engine, now):
        with pytest.raises(ValidationError):
            engine.calculate_score({"created_at": "yesterday-ish"}, now=now)

    def test_insights_from_dict(self, engine, now):
        record = {"created_at": "2026-03-02T08:00:00Z", "score": 85, "call_attempts": 4,
                  "source": "Recommandation"}
        labels = [i.label for i in engine.get_scoring_insights(record, now=now)]

        assert labels == [
            "Lead très récent (< 24h)",
            "Intention d'achat élevée",
            "Lead difficile à joindre",
            "Source Recommandation (Haute Confiance)",
        ]

    def test_predictive_score_from_dict(self, engine, now):
        record = {"created_at": "2026-03-02T09:00:00Z", "call_attempts": 5}
        # 50 + 20 - 10 = 60
        assert engine.calculate_predictive_score(record, [], now=now) == 60


class TestScoringInsights:
    """Tests for score explanations"""

    def test_new_hot_lead(self, engine, now, make_lead):
        lead = make_lead(created_at=now - timedelta(hours=2), score=85, call_attempts=0)
        labels = [i.label for i in engine.get_scoring_insights(lead, now=now)]

        assert labels == [
            "Lead très récent (< 24h)",
            "Intention d'achat élevée",
            "Premier contact à établir",
        ]

    def test_hard_to_reach_recommendation(self, engine, now, make_lead):
        lead = make_lead(score=60, call_attempts=4, source="recommandation")
        insights = engine.get_scoring_insights(lead, now=now)

        assert [i.type for i in insights] == [
            InsightType.NEUTRAL,
            InsightType.NEGATIVE,
            InsightType.POSITIVE,
        ]

    def test_low_score_without_signals(self, engine, now, make_lead):
        lead = make_lead(score=20, call_attempts=2)
        assert engine.get_scoring_insights(lead, now=now) == []


class TestPredictiveScore:
    """Tests for behavioral rescoring"""

    def test_source_multiplier_needs_enough_leads(self):
        assert LeadScoringEngine.source_multiplier(9, 9) == 1.0

    def test_source_multiplier_bounds(self):
        assert LeadScoringEngine.source_multiplier(100, 0) == pytest.approx(0.6)
        assert LeadScoringEngine.source_multiplier(100, 10) == pytest.approx(1.0)
        assert LeadScoringEngine.source_multiplier(100, 50) == pytest.approx(1.4)

    def test_events_decay_over_30_days(self, engine, now, make_lead):
        lead = make_lead(created_at=now - timedelta(days=60), call_attempts=0)
        events = [
            BehavioralEvent(type="PRICING_VIEW", created_at=now),
            BehavioralEvent(type="EMAIL_CLICK", created_at=now - timedelta(days=15)),
            BehavioralEvent(type="DOWNLOAD", created_at=now - timedelta(days=45)),
            BehavioralEvent(type="UNKNOWN", created_at=now),
        ]
        # 50 + 25 + 15 * 0.5 + 0 + 0 = 82.5 -> 83
        assert engine.calculate_predictive_score(lead, events, now=now) == 83

    def test_freshness_penalty_and_multiplier(self, engine, now, make_lead):
        lead = make_lead(created_at=now - timedelta(hours=1), call_attempts=5)
        # (50 + 20 - 10) * 0.6 = 36
        assert engine.calculate_predictive_score(lead, [], source_multiplier=0.6, now=now) == 36

    def test_predictive_score_is_clamped(self, engine, now, make_lead):
        lead = make_lead(created_at=now)
        events = [BehavioralEvent(type="PRICING_VIEW", created_at=now)] * 5
        assert engine.calculate_predictive_score(lead, events, source_multiplier=1.4, now=now) == 100
