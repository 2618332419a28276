"""Tests for the SK request approval state machine."""

import itertools

import pytest
from uuid import uuid4
from datetime import datetime

from skportal.core.approval.states import (
    ActorRole, Decision, RequestStatus,
    TRANSITION_TABLE, TERMINAL_STATES, REJECTED_STATES, EDITABLE_STATES,
    can_transition, get_target_state, get_transition_rule,
    can_decide, can_issue_decree, can_submit, available_decisions,
)
from skportal.core.approval.machine import (
    ApprovalStateMachine, InvalidTransitionError, PermissionDeniedError, next_status,
)
from skportal.core.errors import AuthorizationError, ValidationError


ALL_TRIPLES = list(itertools.product(ActorRole, RequestStatus, Decision))


class TestRequestStates:
    """Test request state definitions."""

    def test_all_states_defined(self):
        """Test that all expected states exist."""
        expected_states = [
            "draft", "submitted", "verified", "verification_rejected",
            "tier1_approved", "tier1_rejected", "tier2_approved",
            "tier2_rejected", "decree_issued",
        ]
        assert [s.value for s in RequestStatus] == expected_states

    def test_terminal_states(self):
        """Only an issued decree is terminal."""
        assert TERMINAL_STATES == {RequestStatus.DECREE_ISSUED}

    def test_editable_states(self):
        """Draft and every rejected state are editable by the filer."""
        assert RequestStatus.DRAFT in EDITABLE_STATES
        assert REJECTED_STATES <= EDITABLE_STATES
        assert RequestStatus.SUBMITTED not in EDITABLE_STATES
        assert RequestStatus.TIER2_APPROVED not in EDITABLE_STATES


class TestTransitionTable:
    """Test the legal (role, status, decision) triples."""

    @pytest.mark.parametrize("role,status,decision,target", [
        (ActorRole.VERIFIER, RequestStatus.SUBMITTED, Decision.APPROVE, RequestStatus.VERIFIED),
        (ActorRole.VERIFIER, RequestStatus.SUBMITTED, Decision.REJECT, RequestStatus.VERIFICATION_REJECTED),
        (ActorRole.TIER1_APPROVER, RequestStatus.VERIFIED, Decision.APPROVE, RequestStatus.TIER1_APPROVED),
        (ActorRole.TIER1_APPROVER, RequestStatus.VERIFIED, Decision.REJECT, RequestStatus.TIER1_REJECTED),
        (ActorRole.TIER2_APPROVER, RequestStatus.TIER1_APPROVED, Decision.APPROVE, RequestStatus.TIER2_APPROVED),
        (ActorRole.TIER2_APPROVER, RequestStatus.TIER1_APPROVED, Decision.REJECT, RequestStatus.TIER2_REJECTED),
        (ActorRole.TIER2_APPROVER, RequestStatus.TIER2_APPROVED, Decision.ISSUE, RequestStatus.DECREE_ISSUED),
        (ActorRole.REGIONAL_FILER, RequestStatus.DRAFT, Decision.SUBMIT, RequestStatus.SUBMITTED),
        (ActorRole.REGIONAL_FILER, RequestStatus.VERIFICATION_REJECTED, Decision.SUBMIT, RequestStatus.SUBMITTED),
        (ActorRole.REGIONAL_FILER, RequestStatus.TIER1_REJECTED, Decision.SUBMIT, RequestStatus.SUBMITTED),
        (ActorRole.REGIONAL_FILER, RequestStatus.TIER2_REJECTED, Decision.SUBMIT, RequestStatus.SUBMITTED),
    ])
    def test_legal_triples(self, role, status, decision, target):
        assert get_target_state(role, status, decision) == target
        assert next_status(status, role, decision) == target

    def test_table_size(self):
        assert len(TRANSITION_TABLE) == 11

    def test_rejections_require_note(self):
        for (role, status, decision), rule in TRANSITION_TABLE.items():
            assert rule.requires_note == (decision == Decision.REJECT)

    def test_can_transition_ignores_role(self):
        assert can_transition(RequestStatus.SUBMITTED, Decision.APPROVE)
        assert not can_transition(RequestStatus.DRAFT, Decision.APPROVE)
        assert not can_transition(RequestStatus.DECREE_ISSUED, Decision.ISSUE)

    def test_unknown_triple_has_no_rule(self):
        assert get_transition_rule(ActorRole.VERIFIER, RequestStatus.VERIFIED, Decision.APPROVE) is None
        assert get_target_state(ActorRole.VERIFIER, RequestStatus.VERIFIED, Decision.APPROVE) is None


class TestNextStatus:
    """Test the pure transition function."""

    @pytest.mark.parametrize("role,status,decision", [
        t for t in ALL_TRIPLES if t not in TRANSITION_TABLE
    ])
    def test_every_illegal_triple_fails(self, role, status, decision):
        """Anything outside the table is an authorization error."""
        with pytest.raises(AuthorizationError):
            next_status(status, role, decision)

    def test_wrong_role_is_permission_denied(self):
        with pytest.raises(PermissionDeniedError) as exc_info:
            next_status(RequestStatus.SUBMITTED, ActorRole.TIER1_APPROVER, Decision.APPROVE)
        assert exc_info.value.role == ActorRole.TIER1_APPROVER
        assert exc_info.value.details["from_state"] == "submitted"

    def test_no_rule_is_invalid_transition(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            next_status(RequestStatus.DRAFT, ActorRole.VERIFIER, Decision.APPROVE)
        assert exc_info.value.from_state == RequestStatus.DRAFT
        assert exc_info.value.code == "invalid_transition"

    def test_is_deterministic(self):
        results = {
            next_status(RequestStatus.VERIFIED, ActorRole.TIER1_APPROVER, Decision.APPROVE)
            for _ in range(5)
        }
        assert results == {RequestStatus.TIER1_APPROVED}


class TestVisibilityPredicates:
    """Test predicates derived from the transition table."""

    def test_can_decide_pairs(self):
        pairs = {
            (role, status)
            for role, status, _ in ALL_TRIPLES
            if can_decide(role, status)
        }
        assert pairs == {
            (ActorRole.VERIFIER, RequestStatus.SUBMITTED),
            (ActorRole.TIER1_APPROVER, RequestStatus.VERIFIED),
            (ActorRole.TIER2_APPROVER, RequestStatus.TIER1_APPROVED),
        }

    def test_can_issue_decree(self):
        assert can_issue_decree(ActorRole.TIER2_APPROVER, RequestStatus.TIER2_APPROVED)
        assert not can_issue_decree(ActorRole.TIER2_APPROVER, RequestStatus.TIER1_APPROVED)
        assert not can_issue_decree(ActorRole.TIER1_APPROVER, RequestStatus.TIER2_APPROVED)

    def test_can_submit(self):
        for status in RequestStatus:
            expected = status in EDITABLE_STATES
            assert can_submit(ActorRole.REGIONAL_FILER, status) == expected
            assert not can_submit(ActorRole.VERIFIER, status)

    def test_predicates_agree_with_next_status(self):
        """A predicate is true exactly when the transition succeeds."""
        for role, status, decision in ALL_TRIPLES:
            allowed = decision in available_decisions(role, status)
            try:
                next_status(status, role, decision)
                succeeded = True
            except AuthorizationError:
                succeeded = False
            assert allowed == succeeded

    def test_terminal_state_has_no_decisions(self):
        for role in ActorRole:
            assert available_decisions(role, RequestStatus.DECREE_ISSUED) == []


class TestApprovalStateMachine:
    """Test the state machine."""

    def test_create_machine(self):
        entity_id = uuid4()
        machine = ApprovalStateMachine(
            entity_id=entity_id,
            current_state=RequestStatus.SUBMITTED,
            role=ActorRole.VERIFIER,
        )
        assert machine.entity_id == entity_id
        assert machine.state == RequestStatus.SUBMITTED
        assert not machine.is_terminal

    def test_verifier_approve_stamps_verifier(self):
        """Submitted + verifier approve -> verified with verifier id and time."""
        actor_id = uuid4()
        now = datetime(2026, 10, 1, 9, 30)
        machine = ApprovalStateMachine(uuid4(), RequestStatus.SUBMITTED, ActorRole.VERIFIER)

        record = machine.transition(Decision.APPROVE, actor_id=actor_id, now=now)

        assert machine.state == RequestStatus.VERIFIED
        assert record.updates() == {
            "status": "verified",
            "revision_note": None,
            "verified_by": actor_id,
            "verified_at": now,
        }

    def test_tier_approvals_stamp_their_fields(self):
        actor_id = uuid4()
        now = datetime(2026, 10, 2)
        tier1 = ApprovalStateMachine(uuid4(), RequestStatus.VERIFIED, ActorRole.TIER1_APPROVER)
        tier2 = ApprovalStateMachine(uuid4(), RequestStatus.TIER1_APPROVED, ActorRole.TIER2_APPROVER)

        updates1 = tier1.transition(Decision.APPROVE, actor_id=actor_id, now=now).updates()
        updates2 = tier2.transition(Decision.APPROVE, actor_id=actor_id, now=now).updates()

        assert updates1["tier1_approved_by"] == actor_id
        assert updates1["tier1_approved_at"] == now
        assert updates2["tier2_approved_by"] == actor_id
        assert updates2["tier2_approved_at"] == now

    def test_issue_is_terminal(self):
        """Tier2_approved + issue -> decree_issued; further transitions fail."""
        now = datetime(2026, 10, 3)
        machine = ApprovalStateMachine(uuid4(), RequestStatus.TIER2_APPROVED, ActorRole.TIER2_APPROVER)

        record = machine.transition(Decision.ISSUE, actor_id=uuid4(), now=now)

        assert machine.state == RequestStatus.DECREE_ISSUED
        assert machine.is_terminal
        assert record.updates()["decree_issued_at"] == now
        for decision in Decision:
            with pytest.raises(AuthorizationError):
                machine.transition(decision, note="again")

    def test_reject_requires_note(self):
        machine = ApprovalStateMachine(uuid4(), RequestStatus.SUBMITTED, ActorRole.VERIFIER)

        with pytest.raises(ValidationError):
            machine.transition(Decision.REJECT)
        with pytest.raises(ValidationError):
            machine.transition(Decision.REJECT, note="   ")

        assert machine.state == RequestStatus.SUBMITTED
        assert machine.get_history() == []

    def test_reject_records_note(self):
        machine = ApprovalStateMachine(uuid4(), RequestStatus.VERIFIED, ActorRole.TIER1_APPROVER)

        record = machine.transition(Decision.REJECT, note="  Lampirkan KTP ketua  ")

        assert machine.state == RequestStatus.TIER1_REJECTED
        assert record.note == "Lampirkan KTP ketua"
        assert record.updates() == {
            "status": "tier1_rejected",
            "revision_note": "Lampirkan KTP ketua",
        }

    def test_note_ignored_on_approval(self):
        machine = ApprovalStateMachine(uuid4(), RequestStatus.SUBMITTED, ActorRole.VERIFIER)
        record = machine.transition(Decision.APPROVE, note="looks fine")
        assert record.note is None
        assert record.updates()["revision_note"] is None

    def test_resubmission_clears_note_and_stamps_submission(self):
        now = datetime(2026, 10, 4)
        machine = ApprovalStateMachine(uuid4(), RequestStatus.TIER2_REJECTED, ActorRole.REGIONAL_FILER)

        updates = machine.transition(Decision.SUBMIT, now=now).updates()

        assert updates == {"status": "submitted", "revision_note": None, "submitted_at": now}

    def test_failed_transition_leaves_state(self):
        machine = ApprovalStateMachine(uuid4(), RequestStatus.SUBMITTED, ActorRole.TIER2_APPROVER)
        with pytest.raises(PermissionDeniedError):
            machine.transition(Decision.APPROVE)
        assert machine.state == RequestStatus.SUBMITTED

    def test_available_decisions(self):
        machine = ApprovalStateMachine(uuid4(), RequestStatus.SUBMITTED, ActorRole.VERIFIER)
        assert machine.get_available_decisions() == [Decision.APPROVE, Decision.REJECT]
        assert machine.can_perform(Decision.REJECT)
        assert not machine.can_perform(Decision.ISSUE)

    def test_full_chain_history(self):
        entity_id = uuid4()
        steps = [
            (ActorRole.REGIONAL_FILER, Decision.SUBMIT),
            (ActorRole.VERIFIER, Decision.APPROVE),
            (ActorRole.TIER1_APPROVER, Decision.APPROVE),
            (ActorRole.TIER2_APPROVER, Decision.APPROVE),
            (ActorRole.TIER2_APPROVER, Decision.ISSUE),
        ]
        state = RequestStatus.DRAFT
        for role, decision in steps:
            machine = ApprovalStateMachine(entity_id, state, role)
            machine.transition(decision)
            assert len(machine.get_history()) == 1
            state = machine.state
        assert state == RequestStatus.DECREE_ISSUED
