"""Approval workflow module for SK Portal.

Implements the SK request state machine and its persistence.
"""

from .states import (
    ActorRole,
    Decision,
    RequestStatus,
    TRANSITION_TABLE,
    can_decide,
    can_issue_decree,
    can_submit,
)
from .machine import (
    ApprovalStateMachine,
    InvalidTransitionError,
    PermissionDeniedError,
    next_status,
)
from .service import ApprovalService

__all__ = [
    "ActorRole",
    "Decision",
    "RequestStatus",
    "TRANSITION_TABLE",
    "can_decide",
    "can_issue_decree",
    "can_submit",
    "ApprovalStateMachine",
    "InvalidTransitionError",
    "PermissionDeniedError",
    "next_status",
    "ApprovalService",
]
