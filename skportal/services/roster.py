"""Officer roster staging and commit.

Edits are staged in a ``RosterBuffer`` owned by the caller; nothing is
persisted until ``RosterService.commit``, which reconciles the stored
roster with the buffer inside one savepoint.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from skportal.core.approval.service import check_version, get_request_for_actor
from skportal.core.errors import (
    ConflictError,
    NotFoundError,
    QuotaNotMetError,
    UpstreamError,
    ValidationError,
)
from skportal.core.quota import DEFAULT_THRESHOLD_PERCENT, Gender, QuotaSummary, quota_summary
from skportal.core.structure import StructureCatalog, StructureCategory
from skportal.db.models import Officer, Profile, SKRequest
from skportal.services.custom_titles import CustomTitleService
from skportal.services.requests import ensure_editable
from skportal.services.storage import (
    BlobStore,
    ID_DOCUMENT_CONTENT_TYPES,
    ID_DOCUMENTS_BUCKET,
    build_object_key,
    chapter_owns_key,
    validate_upload,
)

logger = logging.getLogger(__name__)


@dataclass
class OfficerEntry:
    """One staged roster row. ``id`` is set for rows already stored."""

    structure_category: StructureCategory
    role_title: str
    full_name: str
    gender: Gender
    id_document_key: str
    division: Optional[str] = None
    id: Optional[UUID] = None
    position: int = 0

    @classmethod
    def from_officer(cls, officer: Officer) -> "OfficerEntry":
        return cls(
            structure_category=StructureCategory(officer.structure_category),
            role_title=officer.role_title,
            full_name=officer.full_name,
            gender=Gender(officer.gender),
            id_document_key=officer.id_document_key,
            division=officer.division,
            id=officer.id,
            position=officer.position,
        )


class RosterBuffer:
    """
    Ordered list of staged officer entries.

    Positions always form the range 0..n-1 in list order.
    """

    def __init__(self, entries: Optional[Iterable[OfficerEntry]] = None):
        self._entries: List[OfficerEntry] = list(entries or [])
        self._renumber()

    @classmethod
    def from_positions(cls, entries: Sequence[OfficerEntry]) -> "RosterBuffer":
        """
        Build a buffer ordered by the entries' own positions.

        Raises:
            ValidationError: If two entries share a position
        """
        positions = [e.position for e in entries]
        if len(set(positions)) != len(positions):
            raise ValidationError("Officer positions must be unique", field="position")
        return cls(sorted(entries, key=lambda e: e.position))

    @classmethod
    def from_officers(cls, officers: Iterable[Officer]) -> "RosterBuffer":
        return cls.from_positions([OfficerEntry.from_officer(o) for o in officers])

    def _renumber(self) -> None:
        self._entries = [replace(e, position=i) for i, e in enumerate(self._entries)]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._entries):
            raise IndexError(f"No staged officer at position {index}")

    def add(self, entry: OfficerEntry) -> OfficerEntry:
        self._entries.append(entry)
        self._renumber()
        return self._entries[-1]

    def replace(self, index: int, entry: OfficerEntry) -> OfficerEntry:
        """Replace the entry at ``index``, keeping the stored row identity."""
        self._check_index(index)
        self._entries[index] = replace(entry, id=entry.id or self._entries[index].id)
        self._renumber()
        return self._entries[index]

    def remove(self, index: int) -> OfficerEntry:
        self._check_index(index)
        removed = self._entries.pop(index)
        self._renumber()
        return removed

    def move(self, index: int, new_index: int) -> None:
        self._check_index(index)
        self._check_index(new_index)
        self._entries.insert(new_index, self._entries.pop(index))
        self._renumber()

    @property
    def entries(self) -> Tuple[OfficerEntry, ...]:
        return tuple(self._entries)

    def quota(self, threshold: int = DEFAULT_THRESHOLD_PERCENT) -> QuotaSummary:
        return quota_summary(self._entries, threshold)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[OfficerEntry]:
        return iter(self._entries)


def validate_entry(
    entry: OfficerEntry,
    catalog: StructureCatalog,
    custom_titles: Optional[Iterable[str]] = None,
) -> None:
    """
    Check one staged entry against the structure catalog.

    Raises:
        ValidationError: On a missing field, a bad division or an unknown title
    """
    where = f"officer #{entry.position + 1}"

    for field_name in ("full_name", "role_title", "id_document_key"):
        value = getattr(entry, field_name)
        if not value or not str(value).strip():
            raise ValidationError(f"{where}: {field_name} is required", field=field_name, position=entry.position)

    try:
        Gender(entry.gender)
    except ValueError:
        raise ValidationError(
            f"{where}: gender must be male or female", field="gender", position=entry.position
        )

    category = entry.structure_category
    if catalog.requires_division(category):
        if entry.division not in catalog.divisions_for(category):
            raise ValidationError(
                f"{where}: choose a division of {category.value}",
                field="division",
                position=entry.position,
            )
    elif entry.division:
        raise ValidationError(
            f"{where}: {category.value} has no divisions",
            field="division",
            position=entry.position,
        )

    if entry.role_title not in catalog.titles_for(category, custom_titles):
        raise ValidationError(
            f"{where}: '{entry.role_title}' is not a title of {category.value}",
            field="role_title",
            position=entry.position,
        )


class RosterService:
    """Reads, validates and commits officer rosters."""

    def __init__(
        self,
        db: Session,
        store: BlobStore,
        catalog: StructureCatalog,
        *,
        quota_percent: int = DEFAULT_THRESHOLD_PERCENT,
        max_id_document_bytes: int = 5 * 1024 * 1024,
    ):
        self.db = db
        self.store = store
        self.catalog = catalog
        self.quota_percent = quota_percent
        self.max_id_document_bytes = max_id_document_bytes

    def get_roster(self, request_id: UUID, actor: Profile) -> SKRequest:
        """Request visible to the actor; its roster is ``request.officers``."""
        return get_request_for_actor(self.db, request_id, actor)

    def load_buffer(self, request_id: UUID, actor: Profile) -> RosterBuffer:
        """Stage the stored roster for editing."""
        return RosterBuffer.from_officers(self.get_roster(request_id, actor).officers)

    def upload_id_document(
        self,
        request_id: UUID,
        actor: Profile,
        data: bytes,
        content_type: Optional[str],
        label: Optional[str] = None,
    ) -> str:
        """
        Store an officer identity document and return its key.

        The key is referenced by a staged entry and checked on commit.
        """
        request = get_request_for_actor(self.db, request_id, actor)
        ensure_editable(request)
        extension = validate_upload(
            data, content_type, ID_DOCUMENT_CONTENT_TYPES, self.max_id_document_bytes
        )
        key = build_object_key(request.chapter_id, extension, label)
        self.store.put(ID_DOCUMENTS_BUCKET, key, data, content_type)
        return key

    def document_url(self, request_id: UUID, officer_id: UUID, actor: Profile) -> str:
        request = get_request_for_actor(self.db, request_id, actor)
        officer = next((o for o in request.officers if o.id == officer_id), None)
        if officer is None:
            raise NotFoundError(f"Officer {officer_id} not found", officer_id=str(officer_id))
        return self.store.signed_url(ID_DOCUMENTS_BUCKET, officer.id_document_key)

    def validate(self, request: SKRequest, buffer: RosterBuffer) -> QuotaSummary:
        """
        Validate a staged roster for a request without persisting it.

        Raises:
            ValidationError: If the roster is empty or an entry is invalid
            QuotaNotMetError: If the quota is not met
        """
        if len(buffer) == 0:
            raise ValidationError("The roster needs at least one officer", field="officers")

        custom = CustomTitleService(self.db, self.catalog).titles_by_category(request.chapter_id)
        stored_ids = {o.id for o in request.officers}
        seen_ids = set()

        for entry in buffer:
            validate_entry(entry, self.catalog, custom.get(entry.structure_category))
            if entry.id is not None and entry.id not in stored_ids:
                raise ValidationError(
                    f"Officer {entry.id} does not belong to this request",
                    field="id",
                    position=entry.position,
                )
            if entry.id is not None and entry.id in seen_ids:
                raise ValidationError(
                    f"officer #{entry.position + 1}: officer {entry.id} is listed twice",
                    field="id",
                    position=entry.position,
                )
            seen_ids.add(entry.id)
            if not chapter_owns_key(request.chapter_id, entry.id_document_key) or not self.store.exists(
                ID_DOCUMENTS_BUCKET, entry.id_document_key
            ):
                raise ValidationError(
                    f"officer #{entry.position + 1}: identity document not found; upload it first",
                    field="id_document_key",
                    position=entry.position,
                )

        summary = buffer.quota(self.quota_percent)
        if not summary.met:
            raise QuotaNotMetError(summary.needed, summary.percentage, summary.threshold)
        return summary

    def commit(
        self,
        request_id: UUID,
        actor: Profile,
        buffer: RosterBuffer,
        *,
        expected_version: Optional[int] = None,
    ) -> SKRequest:
        """
        Replace the stored roster with the staged one.

        Stored rows are matched by id: kept rows are updated, new entries
        inserted and missing rows deleted, all inside one savepoint.

        Raises:
            AuthorizationError: If the request is not editable
            ConflictError: If the request changed since the actor read it
            ValidationError / QuotaNotMetError: If the staged roster is invalid
            UpstreamError: If the database write fails
        """
        request = get_request_for_actor(self.db, request_id, actor, for_update=True)
        check_version(request, expected_version)
        ensure_editable(request)
        summary = self.validate(request, buffer)

        try:
            with self.db.begin_nested():
                self._reconcile(request, buffer)
        except StaleDataError as e:
            raise ConflictError(f"SK request {request_id} was modified concurrently") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to commit roster for {request_id}: {e}")
            raise UpstreamError("Could not save the roster", cause=e) from e

        logger.info(
            f"Committed roster of {summary.total} officers for SK request {request_id} "
            f"({summary.percentage:.1f}% female)"
        )
        return request

    def _reconcile(self, request: SKRequest, buffer: RosterBuffer) -> None:
        stored: Dict[UUID, Officer] = {o.id: o for o in request.officers}
        keep = {e.id for e in buffer if e.id is not None}

        for officer in list(request.officers):
            if officer.id not in keep:
                request.officers.remove(officer)

        # Park kept rows out of the 0..n-1 range so reordering never
        # collides with the unique position constraint
        for i, officer_id in enumerate(keep):
            stored[officer_id].position = -(i + 1)
        self.db.flush()

        for entry in buffer:
            officer = stored[entry.id] if entry.id is not None else Officer()
            officer.structure_category = entry.structure_category.value
            officer.division = entry.division or None
            officer.role_title = entry.role_title.strip()
            officer.full_name = entry.full_name.strip()
            officer.gender = Gender(entry.gender).value
            officer.id_document_key = entry.id_document_key
            officer.position = entry.position
            if entry.id is None:
                request.officers.append(officer)

        request.officers.sort(key=lambda o: o.position)
        request.updated_at = datetime.utcnow()
        self.db.flush()
