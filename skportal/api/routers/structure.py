"""Structure catalog endpoint."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from skportal.api.deps import get_catalog, get_current_profile, get_db
from skportal.api.routers.custom_titles import chapter_for
from skportal.api.schemas.structure import CategoryResponse, StructureResponse
from skportal.core.config import get_settings
from skportal.core.structure import StructureCatalog, StructureCategory
from skportal.db.models import Profile
from skportal.services.custom_titles import CustomTitleService

router = APIRouter(prefix="/structure", tags=["structure"])
settings = get_settings()


@router.get("", response_model=StructureResponse)
async def get_structure(
    db: Session = Depends(get_db),
    catalog: StructureCatalog = Depends(get_catalog),
    current_profile: Profile = Depends(get_current_profile),
    chapter_id: Optional[UUID] = None,
):
    """Categories, divisions and titles, including the chapter's custom titles."""
    chapter = chapter_for(current_profile, chapter_id)
    custom = CustomTitleService(db, catalog).titles_by_category(chapter) if chapter else {}

    categories = []
    for category in StructureCategory:
        extra = custom.get(category, [])
        categories.append(CategoryResponse(
            category=category,
            titles=catalog.titles_for(category, extra),
            custom_titles=extra,
            divisions=catalog.divisions_for(category),
            requires_division=catalog.requires_division(category),
        ))

    return StructureResponse(
        categories=categories,
        female_quota_percent=settings.female_quota_percent,
    )
