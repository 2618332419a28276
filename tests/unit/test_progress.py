"""Tests for progress tracking and dashboard counters."""

from skportal.core.approval.progress import (
    PROGRESS_PERCENT,
    StepState,
    dashboard_stats,
    progress_percent,
    step_states,
)
from skportal.core.approval.states import RequestStatus


class TestProgressPercent:
    def test_every_status_has_a_percentage(self):
        assert set(PROGRESS_PERCENT) == set(RequestStatus)

    def test_values(self):
        assert progress_percent(RequestStatus.DRAFT) == 10
        assert progress_percent(RequestStatus.SUBMITTED) == 25
        assert progress_percent(RequestStatus.VERIFICATION_REJECTED) == 25
        assert progress_percent(RequestStatus.TIER2_APPROVED) == 90
        assert progress_percent(RequestStatus.DECREE_ISSUED) == 100


class TestStepStates:
    def test_draft(self):
        steps = step_states(RequestStatus.DRAFT)
        assert set(steps.values()) == {StepState.PENDING}
        assert list(steps) == ["upload", "verification", "tier1", "tier2", "issued"]

    def test_submitted(self):
        steps = step_states(RequestStatus.SUBMITTED)
        assert steps["upload"] == StepState.CURRENT
        assert steps["verification"] == StepState.PENDING

    def test_tier1_rejected(self):
        steps = step_states(RequestStatus.TIER1_REJECTED)
        assert steps["upload"] == StepState.COMPLETED
        assert steps["verification"] == StepState.COMPLETED
        assert steps["tier1"] == StepState.REJECTED
        assert steps["tier2"] == StepState.PENDING
        assert steps["issued"] == StepState.PENDING

    def test_decree_issued(self):
        steps = step_states(RequestStatus.DECREE_ISSUED)
        assert set(steps.values()) == {StepState.COMPLETED}


class TestDashboardStats:
    def test_counts(self):
        stats = dashboard_stats([
            RequestStatus.DRAFT,
            RequestStatus.SUBMITTED,
            RequestStatus.SUBMITTED,
            RequestStatus.VERIFIED,
            RequestStatus.TIER1_APPROVED,
            RequestStatus.TIER2_REJECTED,
            RequestStatus.DECREE_ISSUED,
        ])
        assert stats == {
            "total": 7,
            "awaiting_verification": 2,
            "in_progress": 2,
            "completed": 1,
        }

    def test_empty(self):
        assert dashboard_stats([])["total"] == 0
