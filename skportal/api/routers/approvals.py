"""Reviewer decision endpoints and transition history."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from skportal.api.deps import get_current_profile, get_db
from skportal.api.schemas.requests import (
    DecisionRequest,
    RequestDetailResponse,
    RequestHistoryResponse,
    RequestResponse,
    to_detail,
    to_response,
)
from skportal.core.approval import ApprovalService, Decision
from skportal.core.rbac import require_permission
from skportal.db.models import Profile

router = APIRouter(prefix="/requests", tags=["approvals"])


async def _decide(
    request_id: UUID,
    decision: Decision,
    body: Optional[DecisionRequest],
    db: Session,
    current_profile: Profile,
) -> RequestDetailResponse:
    body = body or DecisionRequest()
    request = ApprovalService(db).transition(
        request_id,
        decision,
        actor=current_profile,
        note=body.note,
        expected_version=body.expected_version,
    )
    db.commit()
    return to_detail(request, current_profile)


@router.get("/awaiting", response_model=List[RequestResponse])
@require_permission("requests:list")
async def list_awaiting(
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
):
    """Requests waiting on a decision by the caller's role, oldest first."""
    requests = ApprovalService(db).list_awaiting(
        current_profile.actor_role, limit=per_page, offset=(page - 1) * per_page
    )
    return [to_response(r) for r in requests]


@router.post("/{request_id}/approve", response_model=RequestDetailResponse)
@require_permission("requests:read")
async def approve_request(
    request_id: UUID,
    body: Optional[DecisionRequest] = None,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Approve the request at the caller's stage."""
    return await _decide(request_id, Decision.APPROVE, body, db, current_profile)


@router.post("/{request_id}/reject", response_model=RequestDetailResponse)
@require_permission("requests:read")
async def reject_request(
    request_id: UUID,
    body: DecisionRequest,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Reject the request at the caller's stage; a revision note is required."""
    return await _decide(request_id, Decision.REJECT, body, db, current_profile)


@router.post("/{request_id}/issue", response_model=RequestDetailResponse)
@require_permission("requests:read")
async def issue_decree(
    request_id: UUID,
    body: Optional[DecisionRequest] = None,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Issue the decree for a tier-2 approved request."""
    return await _decide(request_id, Decision.ISSUE, body, db, current_profile)


@router.get("/{request_id}/history", response_model=List[RequestHistoryResponse])
@require_permission("requests:read")
async def get_history(
    request_id: UUID,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """State transition history of a request."""
    history = ApprovalService(db).get_history(request_id, actor=current_profile)
    return [RequestHistoryResponse.model_validate(h) for h in history]
