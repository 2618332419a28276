"""Database models for SK Portal."""

from skportal.db.models.profile import Profile
from skportal.db.models.request import SKRequest, RequestHistory
from skportal.db.models.officer import Officer
from skportal.db.models.custom_title import CustomRoleTitle

__all__ = [
    "Profile",
    "SKRequest",
    "RequestHistory",
    "Officer",
    "CustomRoleTitle",
]
