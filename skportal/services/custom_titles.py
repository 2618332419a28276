"""Chapter-specific role titles added on top of the structure catalog."""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from skportal.core.errors import ValidationError
from skportal.core.structure import StructureCatalog, StructureCategory
from skportal.db.models import CustomRoleTitle
from skportal.services.requests import flush_or_raise

logger = logging.getLogger(__name__)


class CustomTitleService:
    """Lists and creates custom role titles of a chapter."""

    def __init__(self, db: Session, catalog: StructureCatalog):
        self.db = db
        self.catalog = catalog

    def list_titles(
        self,
        chapter_id: UUID,
        category: Optional[StructureCategory] = None,
    ) -> List[CustomRoleTitle]:
        query = self.db.query(CustomRoleTitle).filter(CustomRoleTitle.chapter_id == chapter_id)
        if category is not None:
            query = query.filter(CustomRoleTitle.structure_category == category.value)
        return query.order_by(CustomRoleTitle.created_at.asc(), CustomRoleTitle.title.asc()).all()

    def titles_by_category(self, chapter_id: UUID) -> Dict[StructureCategory, List[str]]:
        grouped: Dict[StructureCategory, List[str]] = {}
        for row in self.list_titles(chapter_id):
            grouped.setdefault(StructureCategory(row.structure_category), []).append(row.title)
        return grouped

    def add_title(self, chapter_id: UUID, category: StructureCategory, title: str) -> CustomRoleTitle:
        """
        Add a custom title to a category.

        Adding a title the chapter already has returns the existing row.

        Raises:
            ValidationError: If the title is blank or already a standard title
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required", field="title")
        if title in self.catalog.titles_for(category):
            raise ValidationError(
                f"'{title}' is already a standard title of {category.value}", field="title"
            )

        existing = self.db.query(CustomRoleTitle).filter(
            CustomRoleTitle.chapter_id == chapter_id,
            CustomRoleTitle.structure_category == category.value,
            CustomRoleTitle.title == title,
        ).first()
        if existing is not None:
            return existing

        row = CustomRoleTitle(chapter_id=chapter_id, structure_category=category.value, title=title)
        self.db.add(row)
        flush_or_raise(self.db, "Could not save the custom title")

        logger.info(f"Chapter {chapter_id} added custom title '{title}' to {category.value}")
        return row
