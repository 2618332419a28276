"""Approval service for SK requests.

Runs the approval state machine against persisted requests: loads the
request, validates the transition, writes status + stamps + history in
one flush, and turns store failures into portal errors.
"""

import logging
from datetime import datetime
from typing import Optional, Dict, Any, List
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from skportal.core.errors import ConflictError, NotFoundError, UpstreamError

from .states import (
    ActorRole,
    Decision,
    RequestStatus,
    TRANSITION_RULES,
)
from .machine import ApprovalStateMachine, TransitionRecord

logger = logging.getLogger(__name__)


def get_request_for_actor(db: Session, request_id: UUID, actor, *, for_update: bool = False):
    """
    Load a request the actor is allowed to see.

    Filers only see their own chapter's requests; a foreign request is
    reported as missing.

    Raises:
        NotFoundError: If the request does not exist or is not visible
    """
    from skportal.db.models import SKRequest

    query = db.query(SKRequest).filter(SKRequest.id == request_id)
    if actor.actor_role == ActorRole.REGIONAL_FILER:
        query = query.filter(SKRequest.chapter_id == actor.id)
    if for_update:
        query = query.with_for_update()

    request = query.first()
    if request is None:
        raise NotFoundError(f"SK request {request_id} not found", request_id=str(request_id))
    return request


def check_version(request, expected_version: Optional[int]) -> None:
    """Raise ConflictError when the caller acted on an outdated read."""
    if expected_version is not None and request.version != expected_version:
        raise ConflictError(
            f"SK request {request.id} was modified by someone else "
            f"(version {request.version}, expected {expected_version})",
            current_version=request.version,
        )


class ApprovalService:
    """
    High-level service for SK request approvals.

    Handles:
    - Performing transitions with persistence
    - Recording transition history
    - Optimistic concurrency on the request row
    - Review queues per role
    """

    def __init__(self, db: Session):
        self.db = db

    def transition(
        self,
        request_id: UUID,
        decision: Decision,
        *,
        actor,
        note: Optional[str] = None,
        expected_version: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ):
        """
        Apply a decision to an SK request.

        Args:
            request_id: ID of the SK request
            decision: Decision to apply
            actor: Profile of the acting user
            note: Revision note (required for rejections)
            expected_version: Version the actor based the decision on
            metadata: Additional metadata for the history row
            now: Timestamp to stamp

        Returns:
            The updated SKRequest

        Raises:
            NotFoundError: If the request is missing or not visible
            ConflictError: If the request changed since the actor read it
            InvalidTransitionError / PermissionDeniedError: If the triple is not legal
            ValidationError: If a rejection has no note
            UpstreamError: If the database write fails
        """
        from skportal.db.models import RequestHistory

        request = get_request_for_actor(self.db, request_id, actor, for_update=True)
        check_version(request, expected_version)

        machine = ApprovalStateMachine(
            entity_id=request.id,
            current_state=RequestStatus(request.status),
            role=actor.actor_role,
        )
        record = machine.transition(
            decision,
            note=note,
            actor_id=actor.id,
            now=now,
            metadata=metadata,
        )

        self._apply(request, record)

        self.db.add(RequestHistory(
            request_id=request.id,
            from_status=record.from_state.value,
            to_status=record.to_state.value,
            decision=record.decision.value,
            actor_id=actor.id,
            note=record.note,
            extra_data=record.metadata,
            created_at=record.timestamp,
        ))

        try:
            self.db.flush()
        except StaleDataError as e:
            raise ConflictError(
                f"SK request {request_id} was modified concurrently"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to persist transition for {request_id}: {e}")
            raise UpstreamError("Could not save the decision", cause=e) from e

        logger.info(
            f"SK request {request_id}: {record.from_state.value} -> {record.to_state.value} "
            f"({record.decision.value} by {actor.actor_role.value} {actor.id})"
        )
        return request

    def approve(self, request_id: UUID, *, actor, expected_version: Optional[int] = None):
        return self.transition(
            request_id, Decision.APPROVE, actor=actor, expected_version=expected_version
        )

    def reject(self, request_id: UUID, *, actor, note: Optional[str], expected_version: Optional[int] = None):
        return self.transition(
            request_id, Decision.REJECT, actor=actor, note=note, expected_version=expected_version
        )

    def issue_decree(self, request_id: UUID, *, actor, expected_version: Optional[int] = None):
        return self.transition(
            request_id, Decision.ISSUE, actor=actor, expected_version=expected_version
        )

    def get_history(self, request_id: UUID, *, actor) -> List:
        """Get the transition history of a request, oldest first."""
        from skportal.db.models import RequestHistory

        get_request_for_actor(self.db, request_id, actor)
        return self.db.query(RequestHistory).filter(
            RequestHistory.request_id == request_id
        ).order_by(RequestHistory.created_at.asc()).all()

    def list_awaiting(
        self,
        role: ActorRole,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> List:
        """Requests on which the role has a decision to take, oldest first."""
        from skportal.db.models import SKRequest

        statuses = sorted({
            rule.from_state.value
            for rule in TRANSITION_RULES
            if rule.role == role and rule.decision != Decision.SUBMIT
        })
        if not statuses:
            return []

        query = self.db.query(SKRequest).filter(SKRequest.status.in_(statuses))
        query = query.order_by(SKRequest.updated_at.asc())
        return query.offset(offset).limit(limit).all()

    @staticmethod
    def _apply(request, record: TransitionRecord) -> None:
        for field_name, value in record.updates().items():
            setattr(request, field_name, value)
