"""Progress derivation for the filer's tracking view and the reviewer dashboard."""

from collections import Counter
from enum import Enum
from typing import Dict, Iterable

from .states import RequestStatus, IN_REVIEW_STATES


class StepState(str, Enum):
    COMPLETED = "completed"
    CURRENT = "current"
    PENDING = "pending"
    REJECTED = "rejected"


PROGRESS_PERCENT: Dict[RequestStatus, int] = {
    RequestStatus.DRAFT: 10,
    RequestStatus.SUBMITTED: 25,
    RequestStatus.VERIFIED: 50,
    RequestStatus.VERIFICATION_REJECTED: 25,
    RequestStatus.TIER1_APPROVED: 75,
    RequestStatus.TIER1_REJECTED: 50,
    RequestStatus.TIER2_APPROVED: 90,
    RequestStatus.TIER2_REJECTED: 75,
    RequestStatus.DECREE_ISSUED: 100,
}

# (step, status that makes it current, status that marks it rejected,
#  statuses in which it has not been reached yet)
_STEPS = [
    (
        "upload",
        RequestStatus.SUBMITTED,
        None,
        {RequestStatus.DRAFT},
    ),
    (
        "verification",
        RequestStatus.VERIFIED,
        RequestStatus.VERIFICATION_REJECTED,
        {RequestStatus.DRAFT, RequestStatus.SUBMITTED},
    ),
    (
        "tier1",
        RequestStatus.TIER1_APPROVED,
        RequestStatus.TIER1_REJECTED,
        {
            RequestStatus.DRAFT,
            RequestStatus.SUBMITTED,
            RequestStatus.VERIFIED,
            RequestStatus.VERIFICATION_REJECTED,
        },
    ),
    (
        "tier2",
        RequestStatus.TIER2_APPROVED,
        RequestStatus.TIER2_REJECTED,
        {
            RequestStatus.DRAFT,
            RequestStatus.SUBMITTED,
            RequestStatus.VERIFIED,
            RequestStatus.VERIFICATION_REJECTED,
            RequestStatus.TIER1_APPROVED,
            RequestStatus.TIER1_REJECTED,
        },
    ),
]


def progress_percent(status: RequestStatus) -> int:
    return PROGRESS_PERCENT[status]


def step_states(status: RequestStatus) -> Dict[str, StepState]:
    """Per-step state for the five tracking steps."""
    steps: Dict[str, StepState] = {}
    for name, current, rejected, pending in _STEPS:
        if status in pending:
            steps[name] = StepState.PENDING
        elif rejected is not None and status == rejected:
            steps[name] = StepState.REJECTED
        elif status == current:
            steps[name] = StepState.CURRENT
        else:
            steps[name] = StepState.COMPLETED
    steps["issued"] = (
        StepState.COMPLETED if status == RequestStatus.DECREE_ISSUED else StepState.PENDING
    )
    return steps


def dashboard_stats(statuses: Iterable[RequestStatus]) -> Dict[str, int]:
    """Counters shown on the reviewer dashboard."""
    counts = Counter(statuses)
    return {
        "total": sum(counts.values()),
        "awaiting_verification": counts[RequestStatus.SUBMITTED],
        "in_progress": sum(counts[s] for s in IN_REVIEW_STATES),
        "completed": counts[RequestStatus.DECREE_ISSUED],
    }
