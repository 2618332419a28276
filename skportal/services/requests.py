"""Submission service: request creation, meeting report and filer submission."""

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from skportal.core.approval.machine import next_status
from skportal.core.approval.progress import dashboard_stats
from skportal.core.approval.service import ApprovalService, check_version, get_request_for_actor
from skportal.core.approval.states import (
    ACTIVE_STATES,
    ActorRole,
    Decision,
    EDITABLE_STATES,
    RequestStatus,
)
from skportal.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    QuotaNotMetError,
    UpstreamError,
    ValidationError,
)
from skportal.core.quota import quota_summary
from skportal.db.models import Profile, SKRequest
from skportal.services.storage import (
    BlobStore,
    MEETING_REPORTS_BUCKET,
    REPORT_CONTENT_TYPES,
    build_object_key,
    validate_upload,
)

logger = logging.getLogger(__name__)


def ensure_editable(request: SKRequest) -> None:
    """Meeting report and roster only change in draft or after a rejection."""
    if RequestStatus(request.status) not in EDITABLE_STATES:
        raise AuthorizationError(
            f"SK request {request.id} cannot be edited in state {request.status}",
            status=request.status,
        )


def flush_or_raise(db: Session, what: str) -> None:
    """Flush pending changes, mapping store failures to portal errors."""
    try:
        db.flush()
    except StaleDataError as e:
        raise ConflictError(f"{what}: the request was modified concurrently") from e
    except IntegrityError as e:
        logger.warning(f"{what}: {e.orig}")
        raise ConflictError(f"{what}: it clashes with an existing record") from e
    except SQLAlchemyError as e:
        logger.error(f"{what}: {e}")
        raise UpstreamError(what, cause=e) from e


class SubmissionService:
    """
    Filer-side lifecycle of an SK request.

    Handles:
    - Creating the request (one active request per chapter)
    - Meeting details and meeting report upload/removal
    - Submission for review, gated on report, roster and quota
    - Listing and dashboard counters
    """

    def __init__(self, db: Session, store: BlobStore, *, quota_percent: int = 30,
                 max_report_bytes: int = 10 * 1024 * 1024):
        self.db = db
        self.store = store
        self.quota_percent = quota_percent
        self.max_report_bytes = max_report_bytes

    def create_request(self, actor: Profile, meeting_date: date, meeting_location: str) -> SKRequest:
        """
        Create a draft request for the actor's chapter.

        Raises:
            ValidationError: If the meeting location is blank
            ConflictError: If the chapter already has an active request
        """
        location = (meeting_location or "").strip()
        if not location:
            raise ValidationError("Meeting location is required", field="meeting_location")

        active = self.db.query(SKRequest).filter(
            SKRequest.chapter_id == actor.id,
            SKRequest.status.in_([s.value for s in ACTIVE_STATES]),
        ).first()
        if active is not None:
            raise ConflictError(
                f"Chapter already has an active SK request ({active.status})",
                request_id=str(active.id),
            )

        request = SKRequest(
            chapter_id=actor.id,
            meeting_date=meeting_date,
            meeting_location=location,
            status=RequestStatus.DRAFT.value,
        )
        self.db.add(request)
        flush_or_raise(self.db, "Could not create the SK request")

        logger.info(f"Created SK request {request.id} for chapter {actor.id}")
        return request

    def get_request(self, request_id: UUID, actor: Profile) -> SKRequest:
        return get_request_for_actor(self.db, request_id, actor)

    def current_request(self, actor: Profile) -> SKRequest:
        """The chapter's most recent request."""
        request = self.db.query(SKRequest).filter(
            SKRequest.chapter_id == actor.id
        ).order_by(SKRequest.created_at.desc()).first()
        if request is None:
            raise NotFoundError("No SK request yet; upload the meeting report first")
        return request

    def update_meeting(
        self,
        request_id: UUID,
        actor: Profile,
        *,
        meeting_date: Optional[date] = None,
        meeting_location: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> SKRequest:
        request = get_request_for_actor(self.db, request_id, actor, for_update=True)
        check_version(request, expected_version)
        ensure_editable(request)

        if meeting_location is not None:
            location = meeting_location.strip()
            if not location:
                raise ValidationError("Meeting location is required", field="meeting_location")
            request.meeting_location = location
        if meeting_date is not None:
            request.meeting_date = meeting_date

        flush_or_raise(self.db, "Could not update the meeting details")
        return request

    def upload_report(
        self,
        request_id: UUID,
        actor: Profile,
        data: bytes,
        content_type: Optional[str],
    ) -> SKRequest:
        """
        Store the meeting report PDF and attach it to the request.

        A previous report is deleted once the new one is recorded.

        Raises:
            ValidationError: If the file is not a PDF or is too large
            UpstreamError: If the blob store or database write fails
        """
        request = get_request_for_actor(self.db, request_id, actor, for_update=True)
        ensure_editable(request)
        extension = validate_upload(data, content_type, REPORT_CONTENT_TYPES, self.max_report_bytes)

        key = build_object_key(request.chapter_id, extension)
        self.store.put(MEETING_REPORTS_BUCKET, key, data, content_type)

        previous_key = request.meeting_report_key
        request.meeting_report_key = key
        try:
            flush_or_raise(self.db, "Could not attach the meeting report")
        except (ConflictError, UpstreamError):
            self.store.delete(MEETING_REPORTS_BUCKET, key)
            raise

        if previous_key and previous_key != key:
            self.store.delete(MEETING_REPORTS_BUCKET, previous_key)

        logger.info(f"Attached meeting report {key} to SK request {request.id}")
        return request

    def delete_report(self, request_id: UUID, actor: Profile) -> SKRequest:
        """
        Remove the meeting report from the request and the blob store.

        Raises:
            ValidationError: If the request has no report
            UpstreamError: If the blob store delete fails (the caller must not commit)
        """
        request = get_request_for_actor(self.db, request_id, actor, for_update=True)
        ensure_editable(request)
        if not request.meeting_report_key:
            raise ValidationError("There is no meeting report to delete", field="file")

        key = request.meeting_report_key
        request.meeting_report_key = None
        flush_or_raise(self.db, "Could not detach the meeting report")
        self.store.delete(MEETING_REPORTS_BUCKET, key)
        return request

    def report_url(self, request_id: UUID, actor: Profile) -> str:
        request = get_request_for_actor(self.db, request_id, actor)
        if not request.meeting_report_key:
            raise NotFoundError("The request has no meeting report")
        return self.store.signed_url(MEETING_REPORTS_BUCKET, request.meeting_report_key)

    def submit(
        self,
        request_id: UUID,
        actor: Profile,
        *,
        expected_version: Optional[int] = None,
    ) -> SKRequest:
        """
        Submit the request for verification.

        Raises:
            InvalidTransitionError / PermissionDeniedError: If the request cannot be submitted now
            ValidationError: If the report or roster is missing
            QuotaNotMetError: If the persisted roster misses the quota
        """
        request = get_request_for_actor(self.db, request_id, actor)
        check_version(request, expected_version)

        # Legality first, so a locked request reports the real reason
        next_status(RequestStatus(request.status), actor.actor_role, Decision.SUBMIT)

        if not request.meeting_report_key or not self.store.exists(
            MEETING_REPORTS_BUCKET, request.meeting_report_key
        ):
            raise ValidationError("Upload the meeting report before submitting", field="meeting_report")
        if not request.officers:
            raise ValidationError("Add at least one officer before submitting", field="officers")

        summary = quota_summary(request.officers, self.quota_percent)
        if not summary.met:
            raise QuotaNotMetError(summary.needed, summary.percentage, summary.threshold)

        return ApprovalService(self.db).transition(
            request_id, Decision.SUBMIT, actor=actor, expected_version=expected_version
        )

    def list_requests(
        self,
        actor: Profile,
        *,
        status: Optional[RequestStatus] = None,
        region: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[SKRequest], int]:
        """Requests visible to the actor, newest first, with the total count."""
        query = self._visible(actor).join(Profile, SKRequest.chapter_id == Profile.id)

        if status is not None:
            query = query.filter(SKRequest.status == status.value)
        if region:
            query = query.filter(Profile.region == region)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Profile.full_name.ilike(pattern),
                    Profile.region.ilike(pattern),
                    SKRequest.meeting_location.ilike(pattern),
                )
            )

        total = query.count()
        items = query.order_by(SKRequest.created_at.desc()).offset(
            (page - 1) * per_page
        ).limit(per_page).all()
        return items, total

    def stats(self, actor: Profile) -> Dict[str, int]:
        statuses = [RequestStatus(s) for (s,) in self._visible(actor).with_entities(SKRequest.status)]
        return dashboard_stats(statuses)

    def _visible(self, actor: Profile):
        query = self.db.query(SKRequest)
        if actor.actor_role == ActorRole.REGIONAL_FILER:
            query = query.filter(SKRequest.chapter_id == actor.id)
        return query
