"""SK request schemas."""

from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from skportal.core.approval.progress import progress_percent, step_states
from skportal.core.approval.states import (
    RequestStatus,
    available_decisions,
    can_decide,
    can_issue_decree,
    can_submit,
)


class RequestCreate(BaseModel):
    meeting_date: date
    meeting_location: str = Field(..., min_length=1, max_length=255)


class RequestUpdate(BaseModel):
    meeting_date: Optional[date] = None
    meeting_location: Optional[str] = Field(None, min_length=1, max_length=255)
    expected_version: Optional[int] = None


class DecisionRequest(BaseModel):
    """Body of submit/approve/reject/issue calls."""
    note: Optional[str] = None
    expected_version: Optional[int] = None


class Capabilities(BaseModel):
    """What the caller may do with the request, from the transition table."""
    can_submit: bool
    can_decide: bool
    can_issue_decree: bool
    decisions: List[str]


class Progress(BaseModel):
    percent: int
    steps: Dict[str, str]


class RequestResponse(BaseModel):
    id: UUID
    chapter_id: UUID
    chapter_name: Optional[str] = None
    region: Optional[str] = None
    meeting_date: date
    meeting_location: str
    has_meeting_report: bool
    status: RequestStatus
    revision_note: Optional[str]
    submitted_at: Optional[datetime]
    verified_by: Optional[UUID]
    verified_at: Optional[datetime]
    tier1_approved_by: Optional[UUID]
    tier1_approved_at: Optional[datetime]
    tier2_approved_by: Optional[UUID]
    tier2_approved_at: Optional[datetime]
    decree_issued_at: Optional[datetime]
    officer_count: int
    version: int
    created_at: datetime
    updated_at: datetime


class RequestDetailResponse(RequestResponse):
    capabilities: Capabilities
    progress: Progress


class RequestHistoryResponse(BaseModel):
    id: UUID
    from_status: str
    to_status: str
    decision: str
    actor_id: Optional[UUID]
    note: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class StatsResponse(BaseModel):
    total: int
    awaiting_verification: int
    in_progress: int
    completed: int


def request_fields(request) -> dict:
    chapter = request.chapter
    return dict(
        id=request.id,
        chapter_id=request.chapter_id,
        chapter_name=chapter.full_name if chapter else None,
        region=chapter.region if chapter else None,
        meeting_date=request.meeting_date,
        meeting_location=request.meeting_location,
        has_meeting_report=bool(request.meeting_report_key),
        status=request.status,
        revision_note=request.revision_note,
        submitted_at=request.submitted_at,
        verified_by=request.verified_by,
        verified_at=request.verified_at,
        tier1_approved_by=request.tier1_approved_by,
        tier1_approved_at=request.tier1_approved_at,
        tier2_approved_by=request.tier2_approved_by,
        tier2_approved_at=request.tier2_approved_at,
        decree_issued_at=request.decree_issued_at,
        officer_count=len(request.officers),
        version=request.version,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


def to_response(request) -> RequestResponse:
    return RequestResponse(**request_fields(request))


def to_detail(request, actor) -> RequestDetailResponse:
    """Request with the caller's capabilities and tracking progress."""
    status = RequestStatus(request.status)
    role = actor.actor_role
    return RequestDetailResponse(
        **request_fields(request),
        capabilities=Capabilities(
            can_submit=can_submit(role, status),
            can_decide=can_decide(role, status),
            can_issue_decree=can_issue_decree(role, status),
            decisions=[d.value for d in available_decisions(role, status)],
        ),
        progress=Progress(
            percent=progress_percent(status),
            steps={name: state.value for name, state in step_states(status).items()},
        ),
    )
