"""Approval state machine implementation.

Validates a transition against the transition table and computes the
field updates (status, stamps, revision note) it implies. Nothing is
written until every check has passed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any
from uuid import UUID

from skportal.core.errors import AuthorizationError, ValidationError

from .states import (
    ActorRole,
    Decision,
    RequestStatus,
    Stamp,
    TERMINAL_STATES,
    available_decisions,
    can_transition,
    get_transition_rule,
)


class InvalidTransitionError(AuthorizationError):
    """Raised when no rule allows the decision from the current state."""

    code = "invalid_transition"

    def __init__(self, message: str, from_state: RequestStatus, decision: Decision):
        super().__init__(message, from_state=from_state.value, decision=decision.value)
        self.from_state = from_state
        self.decision = decision


class PermissionDeniedError(AuthorizationError):
    """Raised when a rule exists for the state and decision but not for this role."""

    code = "permission_denied"

    def __init__(self, role: ActorRole, from_state: RequestStatus, decision: Decision):
        super().__init__(
            f"Role {role.value} cannot {decision.value} a request in state {from_state.value}",
            role=role.value,
            from_state=from_state.value,
            decision=decision.value,
        )
        self.role = role
        self.from_state = from_state
        self.decision = decision


# Request columns written by each stamp kind: (actor column, time column)
STAMP_FIELDS: Dict[Stamp, tuple[Optional[str], str]] = {
    Stamp.SUBMITTED: (None, "submitted_at"),
    Stamp.VERIFIED: ("verified_by", "verified_at"),
    Stamp.TIER1: ("tier1_approved_by", "tier1_approved_at"),
    Stamp.TIER2: ("tier2_approved_by", "tier2_approved_at"),
    Stamp.DECREE: (None, "decree_issued_at"),
}


@dataclass
class TransitionRecord:
    """Outcome of a validated transition."""
    entity_id: UUID
    from_state: RequestStatus
    to_state: RequestStatus
    decision: Decision
    actor_id: Optional[UUID]
    note: Optional[str]
    timestamp: datetime
    stamp: Optional[Stamp] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def updates(self) -> Dict[str, Any]:
        """Field updates to apply to the request row in one write."""
        values: Dict[str, Any] = {
            "status": self.to_state.value,
            # Set on rejection, cleared by every other decision
            "revision_note": self.note if self.decision == Decision.REJECT else None,
        }
        if self.stamp is not None:
            actor_field, time_field = STAMP_FIELDS[self.stamp]
            if actor_field:
                values[actor_field] = self.actor_id
            values[time_field] = self.timestamp
        return values


def next_status(status: RequestStatus, role: ActorRole, decision: Decision) -> RequestStatus:
    """Pure transition function: (status, role, decision) -> next status.

    Raises:
        InvalidTransitionError: no role may take the decision from this status
        PermissionDeniedError: the decision is legal here, but not for this role
    """
    rule = get_transition_rule(role, status, decision)
    if rule is not None:
        return rule.to_state
    if can_transition(status, decision):
        raise PermissionDeniedError(role, status, decision)
    raise InvalidTransitionError(
        f"Cannot {decision.value} a request in state {status.value}",
        status,
        decision,
    )


class ApprovalStateMachine:
    """
    State machine for one SK request, seen from one actor's role.

    Manages transitions with:
    - Validation against the transition table
    - Role checking
    - Mandatory notes on rejection
    - In-memory history of applied transitions
    """

    def __init__(
        self,
        entity_id: UUID,
        current_state: RequestStatus,
        role: ActorRole,
    ):
        """
        Initialize the state machine.

        Args:
            entity_id: ID of the SK request
            current_state: Current request status
            role: Role of the acting user
        """
        self.entity_id = entity_id
        self._state = current_state
        self.role = role
        self._transition_history: list[TransitionRecord] = []

    @property
    def state(self) -> RequestStatus:
        """Current state of the request."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal (no further transitions)."""
        return self._state in TERMINAL_STATES

    def can_perform(self, decision: Decision) -> bool:
        """Check if the role may take a decision from the current state."""
        return get_transition_rule(self.role, self._state, decision) is not None

    def get_available_decisions(self) -> list[Decision]:
        """Get decisions available to the role from the current state."""
        return available_decisions(self.role, self._state)

    def transition(
        self,
        decision: Decision,
        *,
        note: Optional[str] = None,
        actor_id: Optional[UUID] = None,
        now: Optional[datetime] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> TransitionRecord:
        """
        Perform a state transition.

        Args:
            decision: The decision to apply
            note: Revision note (required for rejections, ignored otherwise)
            actor_id: ID of the user taking the decision
            now: Timestamp to stamp, defaults to the current UTC time
            metadata: Additional metadata to record

        Returns:
            The transition record, including the field updates to persist

        Raises:
            InvalidTransitionError: If the decision is not legal from this state
            PermissionDeniedError: If the role may not take the decision
            ValidationError: If a rejection has no note
        """
        to_state = next_status(self._state, self.role, decision)
        rule = get_transition_rule(self.role, self._state, decision)

        cleaned_note = note.strip() if note else None
        if rule.requires_note and not cleaned_note:
            raise ValidationError(
                f"A revision note is required to {decision.value} a request",
                field="note",
            )

        record = TransitionRecord(
            entity_id=self.entity_id,
            from_state=self._state,
            to_state=to_state,
            decision=decision,
            actor_id=actor_id,
            note=cleaned_note if rule.requires_note else None,
            timestamp=now or datetime.utcnow(),
            stamp=rule.stamp,
            metadata=metadata or {},
        )
        self._transition_history.append(record)
        self._state = to_state

        return record

    def get_history(self) -> list[TransitionRecord]:
        """Get the transitions applied through this machine."""
        return self._transition_history.copy()
