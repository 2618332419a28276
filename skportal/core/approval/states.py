"""SK request workflow states, roles, decisions and the transition table.

State Machine Diagram:

    ┌──────────┐
    │  DRAFT   │ ← Initial state (meeting report being prepared)
    └────┬─────┘
         │ submit (filer)
    ┌────▼──────┐  reject   ┌───────────────────────┐
    │ SUBMITTED │──────────►│ VERIFICATION_REJECTED │
    └────┬──────┘ (verifier)└───────────────────────┘
         │ approve
    ┌────▼─────┐  reject    ┌────────────────┐
    │ VERIFIED │───────────►│ TIER1_REJECTED │
    └────┬─────┘ (tier1)    └────────────────┘
         │ approve
    ┌────▼───────────┐ reject ┌────────────────┐
    │ TIER1_APPROVED │───────►│ TIER2_REJECTED │
    └────┬───────────┘(tier2) └────────────────┘
         │ approve
    ┌────▼───────────┐
    │ TIER2_APPROVED │
    └────┬───────────┘
         │ issue (tier2)
    ┌────▼──────────┐
    │ DECREE_ISSUED │ (terminal)
    └───────────────┘

Every *_REJECTED state is editable by the filer and goes back to
SUBMITTED on the next submit.
"""

from enum import Enum
from typing import Set, Dict, Optional, NamedTuple


class RequestStatus(str, Enum):
    """States of an SK request."""

    DRAFT = "draft"
    SUBMITTED = "submitted"

    VERIFIED = "verified"
    VERIFICATION_REJECTED = "verification_rejected"

    TIER1_APPROVED = "tier1_approved"
    TIER1_REJECTED = "tier1_rejected"

    TIER2_APPROVED = "tier2_approved"
    TIER2_REJECTED = "tier2_rejected"

    DECREE_ISSUED = "decree_issued"


class ActorRole(str, Enum):
    """Roles of the people acting on a request."""

    REGIONAL_FILER = "regional_filer"   # DPD chapter account
    VERIFIER = "verifier"               # Organization/cadre desk
    TIER1_APPROVER = "tier1_approver"   # Secretary-general
    TIER2_APPROVER = "tier2_approver"   # Chair


class Decision(str, Enum):
    """Actions that trigger state transitions."""

    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    ISSUE = "issue"


class Stamp(str, Enum):
    """Which audit fields a transition writes."""

    SUBMITTED = "submitted"
    VERIFIED = "verified"
    TIER1 = "tier1"
    TIER2 = "tier2"
    DECREE = "decree"


class TransitionRule(NamedTuple):
    """Defines a legal (role, status, decision) triple."""
    role: ActorRole
    from_state: RequestStatus
    decision: Decision
    to_state: RequestStatus
    requires_note: bool = False
    stamp: Optional[Stamp] = None


TRANSITION_RULES: list[TransitionRule] = [
    # Filer submission, first time and after any rejection
    TransitionRule(ActorRole.REGIONAL_FILER, RequestStatus.DRAFT, Decision.SUBMIT,
                   RequestStatus.SUBMITTED, stamp=Stamp.SUBMITTED),
    TransitionRule(ActorRole.REGIONAL_FILER, RequestStatus.VERIFICATION_REJECTED, Decision.SUBMIT,
                   RequestStatus.SUBMITTED, stamp=Stamp.SUBMITTED),
    TransitionRule(ActorRole.REGIONAL_FILER, RequestStatus.TIER1_REJECTED, Decision.SUBMIT,
                   RequestStatus.SUBMITTED, stamp=Stamp.SUBMITTED),
    TransitionRule(ActorRole.REGIONAL_FILER, RequestStatus.TIER2_REJECTED, Decision.SUBMIT,
                   RequestStatus.SUBMITTED, stamp=Stamp.SUBMITTED),

    # Verification
    TransitionRule(ActorRole.VERIFIER, RequestStatus.SUBMITTED, Decision.APPROVE,
                   RequestStatus.VERIFIED, stamp=Stamp.VERIFIED),
    TransitionRule(ActorRole.VERIFIER, RequestStatus.SUBMITTED, Decision.REJECT,
                   RequestStatus.VERIFICATION_REJECTED, requires_note=True),

    # Tier-1 sign-off
    TransitionRule(ActorRole.TIER1_APPROVER, RequestStatus.VERIFIED, Decision.APPROVE,
                   RequestStatus.TIER1_APPROVED, stamp=Stamp.TIER1),
    TransitionRule(ActorRole.TIER1_APPROVER, RequestStatus.VERIFIED, Decision.REJECT,
                   RequestStatus.TIER1_REJECTED, requires_note=True),

    # Tier-2 sign-off and issuance
    TransitionRule(ActorRole.TIER2_APPROVER, RequestStatus.TIER1_APPROVED, Decision.APPROVE,
                   RequestStatus.TIER2_APPROVED, stamp=Stamp.TIER2),
    TransitionRule(ActorRole.TIER2_APPROVER, RequestStatus.TIER1_APPROVED, Decision.REJECT,
                   RequestStatus.TIER2_REJECTED, requires_note=True),
    TransitionRule(ActorRole.TIER2_APPROVER, RequestStatus.TIER2_APPROVED, Decision.ISSUE,
                   RequestStatus.DECREE_ISSUED, stamp=Stamp.DECREE),
]

# Lookup tables
TRANSITION_TABLE: Dict[tuple[ActorRole, RequestStatus, Decision], TransitionRule] = {}
VALID_DECISIONS: Dict[RequestStatus, Set[Decision]] = {}

for rule in TRANSITION_RULES:
    TRANSITION_TABLE[(rule.role, rule.from_state, rule.decision)] = rule
    VALID_DECISIONS.setdefault(rule.from_state, set()).add(rule.decision)


TERMINAL_STATES: Set[RequestStatus] = {
    RequestStatus.DECREE_ISSUED,
}

REJECTED_STATES: Set[RequestStatus] = {
    RequestStatus.VERIFICATION_REJECTED,
    RequestStatus.TIER1_REJECTED,
    RequestStatus.TIER2_REJECTED,
}

# Meeting report and roster may only change in these states
EDITABLE_STATES: Set[RequestStatus] = {RequestStatus.DRAFT} | REJECTED_STATES

# Waiting on a reviewer decision
IN_REVIEW_STATES: Set[RequestStatus] = {
    RequestStatus.VERIFIED,
    RequestStatus.TIER1_APPROVED,
    RequestStatus.TIER2_APPROVED,
}

ACTIVE_STATES: Set[RequestStatus] = set(RequestStatus) - TERMINAL_STATES


def get_transition_rule(
    role: ActorRole, from_state: RequestStatus, decision: Decision
) -> Optional[TransitionRule]:
    """Get the rule for a (role, status, decision) triple."""
    return TRANSITION_TABLE.get((role, from_state, decision))


def can_transition(from_state: RequestStatus, decision: Decision) -> bool:
    """Check if any role may apply the decision from the given state."""
    return decision in VALID_DECISIONS.get(from_state, set())


def get_target_state(
    role: ActorRole, from_state: RequestStatus, decision: Decision
) -> Optional[RequestStatus]:
    """Get the target state for a triple, or None if it is not legal."""
    rule = get_transition_rule(role, from_state, decision)
    return rule.to_state if rule else None


def can_decide(role: ActorRole, status: RequestStatus) -> bool:
    """True when the role may approve or reject a request in this status."""
    return (
        (role, status, Decision.APPROVE) in TRANSITION_TABLE
        or (role, status, Decision.REJECT) in TRANSITION_TABLE
    )


def can_issue_decree(role: ActorRole, status: RequestStatus) -> bool:
    """True when the role may issue the decree for a request in this status."""
    return (role, status, Decision.ISSUE) in TRANSITION_TABLE


def can_submit(role: ActorRole, status: RequestStatus) -> bool:
    """True when the role may (re)submit a request in this status."""
    return (role, status, Decision.SUBMIT) in TRANSITION_TABLE


def available_decisions(role: ActorRole, status: RequestStatus) -> list[Decision]:
    """Decisions the role may take on a request in this status."""
    return [d for d in Decision if (role, status, d) in TRANSITION_TABLE]
