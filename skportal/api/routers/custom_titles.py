"""Custom role title endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from skportal.api.deps import get_catalog, get_current_profile, get_db
from skportal.api.schemas.structure import CustomTitleCreate, CustomTitleResponse
from skportal.core.approval.states import ActorRole
from skportal.core.rbac import require_permission
from skportal.core.structure import StructureCatalog, StructureCategory
from skportal.db.models import Profile
from skportal.services.custom_titles import CustomTitleService

router = APIRouter(prefix="/custom-titles", tags=["custom-titles"])


def chapter_for(profile: Profile, chapter_id: Optional[UUID]) -> Optional[UUID]:
    """Filers always act on their own chapter; reviewers pick one."""
    if profile.actor_role == ActorRole.REGIONAL_FILER:
        return profile.id
    return chapter_id


@router.get("", response_model=List[CustomTitleResponse])
@require_permission("custom_titles:read")
async def list_custom_titles(
    db: Session = Depends(get_db),
    catalog: StructureCatalog = Depends(get_catalog),
    current_profile: Profile = Depends(get_current_profile),
    category: Optional[StructureCategory] = None,
    chapter_id: Optional[UUID] = None,
):
    """List a chapter's custom titles, optionally for one category."""
    chapter = chapter_for(current_profile, chapter_id)
    if chapter is None:
        return []
    titles = CustomTitleService(db, catalog).list_titles(chapter, category)
    return [CustomTitleResponse.model_validate(t) for t in titles]


@router.post("", response_model=CustomTitleResponse, status_code=status.HTTP_201_CREATED)
@require_permission("custom_titles:create")
async def add_custom_title(
    body: CustomTitleCreate,
    db: Session = Depends(get_db),
    catalog: StructureCatalog = Depends(get_catalog),
    current_profile: Profile = Depends(get_current_profile),
):
    """Add a custom title to one of the caller's structure categories."""
    title = CustomTitleService(db, catalog).add_title(
        current_profile.id, body.structure_category, body.title
    )
    db.commit()
    return CustomTitleResponse.model_validate(title)
