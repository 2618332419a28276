"""Structure catalog and custom title schemas."""

from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, Field

from skportal.core.structure import StructureCategory


class CategoryResponse(BaseModel):
    category: StructureCategory
    titles: List[str]
    custom_titles: List[str]
    divisions: List[str]
    requires_division: bool


class StructureResponse(BaseModel):
    categories: List[CategoryResponse]
    female_quota_percent: int


class CustomTitleCreate(BaseModel):
    structure_category: StructureCategory
    title: str = Field(..., min_length=1, max_length=255)


class CustomTitleResponse(BaseModel):
    id: UUID
    structure_category: StructureCategory
    title: str
    created_at: datetime

    class Config:
        from_attributes = True
