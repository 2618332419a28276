"""Officer roster endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from skportal.api.deps import get_blob_store, get_catalog, get_current_profile, get_db
from skportal.api.schemas.common import SignedUrlResponse
from skportal.api.schemas.roster import (
    DocumentUploadResponse,
    OfficerResponse,
    QuotaResponse,
    RosterIn,
    RosterResponse,
)
from skportal.core.config import get_settings
from skportal.core.quota import quota_summary
from skportal.core.rbac import require_permission
from skportal.core.structure import StructureCatalog
from skportal.db.models import Profile
from skportal.services.roster import RosterService
from skportal.services.storage import BlobStore

router = APIRouter(prefix="/requests", tags=["roster"])
settings = get_settings()


def _service(db: Session, store: BlobStore, catalog: StructureCatalog) -> RosterService:
    return RosterService(
        db,
        store,
        catalog,
        quota_percent=settings.female_quota_percent,
        max_id_document_bytes=settings.max_id_document_bytes,
    )


def _roster_response(request) -> RosterResponse:
    officers = list(request.officers)
    return RosterResponse(
        request_id=request.id,
        version=request.version,
        officers=[OfficerResponse.model_validate(o) for o in officers],
        quota=QuotaResponse.from_summary(quota_summary(officers, settings.female_quota_percent)),
    )


@router.get("/{request_id}/roster", response_model=RosterResponse)
@require_permission("roster:read")
async def get_roster(
    request_id: UUID,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    catalog: StructureCatalog = Depends(get_catalog),
    current_profile: Profile = Depends(get_current_profile),
):
    """Stored roster in position order, with its quota summary."""
    request = _service(db, store, catalog).get_roster(request_id, current_profile)
    return _roster_response(request)


@router.post("/{request_id}/roster/preview", response_model=QuotaResponse)
@require_permission("roster:read")
async def preview_roster(
    request_id: UUID,
    body: RosterIn,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    catalog: StructureCatalog = Depends(get_catalog),
    current_profile: Profile = Depends(get_current_profile),
):
    """Quota summary of a staged roster, without saving it."""
    _service(db, store, catalog).get_roster(request_id, current_profile)
    buffer = body.to_buffer()
    return QuotaResponse.from_summary(buffer.quota(settings.female_quota_percent))


@router.put("/{request_id}/roster", response_model=RosterResponse)
@require_permission("roster:update")
async def commit_roster(
    request_id: UUID,
    body: RosterIn,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    catalog: StructureCatalog = Depends(get_catalog),
    current_profile: Profile = Depends(get_current_profile),
):
    """Replace the stored roster with the staged one."""
    request = _service(db, store, catalog).commit(
        request_id,
        current_profile,
        body.to_buffer(),
        expected_version=body.expected_version,
    )
    db.commit()
    return _roster_response(request)


@router.post(
    "/{request_id}/documents",
    response_model=DocumentUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
@require_permission("roster:update")
async def upload_document(
    request_id: UUID,
    file: UploadFile = File(...),
    label: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    catalog: StructureCatalog = Depends(get_catalog),
    current_profile: Profile = Depends(get_current_profile),
):
    """Upload an officer identity document (JPG, PNG or PDF)."""
    data = await file.read()
    key = _service(db, store, catalog).upload_id_document(
        request_id, current_profile, data, file.content_type, label
    )
    return DocumentUploadResponse(id_document_key=key)


@router.get(
    "/{request_id}/officers/{officer_id}/document-url",
    response_model=SignedUrlResponse,
)
@require_permission("roster:read")
async def document_url(
    request_id: UUID,
    officer_id: UUID,
    db: Session = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    catalog: StructureCatalog = Depends(get_catalog),
    current_profile: Profile = Depends(get_current_profile),
):
    """Time-limited download URL of an officer's identity document."""
    url = _service(db, store, catalog).document_url(request_id, officer_id, current_profile)
    return SignedUrlResponse(url=url, expires_in=settings.signed_url_expire_seconds)
