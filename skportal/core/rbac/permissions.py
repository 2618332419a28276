"""Permission model for SK Portal RBAC.

A permission is written ``resource:action``:

  requests:create       open a request for the caller's chapter
  requests:read         read requests visible to the caller
  requests:update       edit meeting details and the report, submit
  requests:list         see every chapter's requests and review queues
  roster:read           read officer rosters and identity documents
  roster:update         stage, commit and upload for the roster
  custom_titles:read    read a chapter's custom role titles
  custom_titles:create  add custom role titles

Approval decisions are not permissions: they are authorized by the
transition table in ``skportal.core.approval.states``.
"""

from enum import Enum
from typing import Dict, NamedTuple


class Resource(str, Enum):
    REQUESTS = "requests"
    ROSTER = "roster"
    CUSTOM_TITLES = "custom_titles"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    LIST = "list"


class Permission(NamedTuple):
    resource: Resource
    action: Action

    def __str__(self) -> str:
        return f"{self.resource.value}:{self.action.value}"

    @classmethod
    def from_string(cls, value: str) -> "Permission":
        """Parse ``resource:action``.

        Raises:
            ValueError: On a malformed string or an unknown resource or action
        """
        resource, sep, action = value.partition(":")
        if not sep or ":" in action:
            raise ValueError(f"Invalid permission format: {value}")
        return cls(Resource(resource), Action(action))


PERMISSION_DEFINITIONS: Dict[str, Permission] = {
    str(p): p
    for p in (
        Permission(Resource.REQUESTS, Action.CREATE),
        Permission(Resource.REQUESTS, Action.READ),
        Permission(Resource.REQUESTS, Action.UPDATE),
        Permission(Resource.REQUESTS, Action.LIST),
        Permission(Resource.ROSTER, Action.READ),
        Permission(Resource.ROSTER, Action.UPDATE),
        Permission(Resource.CUSTOM_TITLES, Action.READ),
        Permission(Resource.CUSTOM_TITLES, Action.CREATE),
    )
}


def is_valid_permission(value: str) -> bool:
    return value in PERMISSION_DEFINITIONS
