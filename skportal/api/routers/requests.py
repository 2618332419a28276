"""SK request endpoints: creation, meeting report, submission, listing."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from skportal.api.deps import get_blob_store, get_current_profile, get_db
from skportal.api.schemas.common import PaginatedResponse, SignedUrlResponse
from skportal.api.schemas.requests import (
    DecisionRequest,
    RequestCreate,
    RequestDetailResponse,
    RequestResponse,
    RequestUpdate,
    StatsResponse,
    to_detail,
    to_response,
)
from skportal.core.approval.states import RequestStatus
from skportal.core.config import get_settings
from skportal.core.rbac import require_permission
from skportal.db.models import Profile
from skportal.services.requests import SubmissionService
from skportal.services.storage import BlobStore

router = APIRouter(prefix="/requests", tags=["requests"])
settings = get_settings()


def _service(db: Session, store: BlobStore) -> SubmissionService:
    return SubmissionService(
        db,
        store,
        quota_percent=settings.female_quota_percent,
        max_report_bytes=settings.max_report_bytes,
    )


@router.get("", response_model=PaginatedResponse[RequestResponse])
@require_permission("requests:read")
async def list_requests(
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_profile: Profile = Depends(get_current_profile),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    status_filter: Optional[RequestStatus] = Query(None, alias="status"),
    region: Optional[str] = None,
    search: Optional[str] = None,
):
    """List requests; filers see their own chapter only."""
    items, total = _service(db, store).list_requests(
        current_profile,
        status=status_filter,
        region=region,
        search=search,
        page=page,
        per_page=per_page,
    )
    return PaginatedResponse.create(
        items=[to_response(r) for r in items], total=total, page=page, per_page=per_page
    )


@router.get("/stats", response_model=StatsResponse)
@require_permission("requests:read")
async def request_stats(
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_profile: Profile = Depends(get_current_profile),
):
    """Dashboard counters over the requests visible to the caller."""
    return StatsResponse(**_service(db, store).stats(current_profile))


@router.post("", response_model=RequestDetailResponse, status_code=status.HTTP_201_CREATED)
@require_permission("requests:create")
async def create_request(
    body: RequestCreate,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_profile: Profile = Depends(get_current_profile),
):
    """Create a draft request for the caller's chapter."""
    request = _service(db, store).create_request(
        current_profile, body.meeting_date, body.meeting_location
    )
    db.commit()
    return to_detail(request, current_profile)


@router.get("/current", response_model=RequestDetailResponse)
@require_permission("requests:create")
async def current_request(
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_profile: Profile = Depends(get_current_profile),
):
    """The caller's most recent request."""
    request = _service(db, store).current_request(current_profile)
    return to_detail(request, current_profile)


@router.get("/{request_id}", response_model=RequestDetailResponse)
@require_permission("requests:read")
async def get_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_profile: Profile = Depends(get_current_profile),
):
    """Request detail with the caller's capabilities and progress."""
    request = _service(db, store).get_request(request_id, current_profile)
    return to_detail(request, current_profile)


@router.patch("/{request_id}", response_model=RequestDetailResponse)
@require_permission("requests:update")
async def update_request(
    request_id: UUID,
    body: RequestUpdate,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_profile: Profile = Depends(get_current_profile),
):
    """Update meeting date or location while the request is editable."""
    request = _service(db, store).update_meeting(
        request_id,
        current_profile,
        meeting_date=body.meeting_date,
        meeting_location=body.meeting_location,
        expected_version=body.expected_version,
    )
    db.commit()
    return to_detail(request, current_profile)


@router.put("/{request_id}/report", response_model=RequestDetailResponse)
@require_permission("requests:update")
async def upload_report(
    request_id: UUID,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_profile: Profile = Depends(get_current_profile),
):
    """Upload or replace the meeting report (PDF)."""
    data = await file.read()
    request = _service(db, store).upload_report(request_id, current_profile, data, file.content_type)
    db.commit()
    return to_detail(request, current_profile)


@router.delete("/{request_id}/report", response_model=RequestDetailResponse)
@require_permission("requests:update")
async def delete_report(
    request_id: UUID,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_profile: Profile = Depends(get_current_profile),
):
    """Remove the meeting report."""
    request = _service(db, store).delete_report(request_id, current_profile)
    db.commit()
    return to_detail(request, current_profile)


@router.get("/{request_id}/report-url", response_model=SignedUrlResponse)
@require_permission("requests:read")
async def report_url(
    request_id: UUID,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_profile: Profile = Depends(get_current_profile),
):
    """Time-limited download URL of the meeting report."""
    url = _service(db, store).report_url(request_id, current_profile)
    return SignedUrlResponse(url=url, expires_in=settings.signed_url_expire_seconds)


@router.post("/{request_id}/submit", response_model=RequestDetailResponse)
@require_permission("requests:update")
async def submit_request(
    request_id: UUID,
    body: Optional[DecisionRequest] = None,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_profile: Profile = Depends(get_current_profile),
):
    """Submit the request for verification."""
    request = _service(db, store).submit(
        request_id,
        current_profile,
        expected_version=body.expected_version if body else None,
    )
    db.commit()
    return to_detail(request, current_profile)
