"""Role permission sets for SK Portal.

1. Regional filer - prepares and submits its own chapter's request
2. Verifier, tier-1 approver, tier-2 approver - review every chapter's
   requests; which decision each may take comes from the transition table
"""

from typing import Dict, List

from skportal.core.approval.states import ActorRole
from .permissions import Resource, Action, Permission


def _build_permissions(*perms: tuple) -> List[str]:
    """Build permission strings from (Resource, Action) tuples."""
    return [str(Permission(r, a)) for r, a in perms]


FILER_PERMISSIONS = _build_permissions(
    (Resource.REQUESTS, Action.CREATE),
    (Resource.REQUESTS, Action.READ),
    (Resource.REQUESTS, Action.UPDATE),
    (Resource.ROSTER, Action.READ),
    (Resource.ROSTER, Action.UPDATE),
    (Resource.CUSTOM_TITLES, Action.CREATE),
    (Resource.CUSTOM_TITLES, Action.READ),
)

REVIEWER_PERMISSIONS = _build_permissions(
    (Resource.REQUESTS, Action.READ),
    (Resource.REQUESTS, Action.LIST),
    (Resource.ROSTER, Action.READ),
    (Resource.CUSTOM_TITLES, Action.READ),
)


ROLE_PERMISSIONS: Dict[ActorRole, List[str]] = {
    ActorRole.REGIONAL_FILER: FILER_PERMISSIONS,
    ActorRole.VERIFIER: REVIEWER_PERMISSIONS,
    ActorRole.TIER1_APPROVER: REVIEWER_PERMISSIONS,
    ActorRole.TIER2_APPROVER: REVIEWER_PERMISSIONS,
}


def get_role_permissions(role: ActorRole) -> List[str]:
    """Get permissions list for a role."""
    try:
        return ROLE_PERMISSIONS[ActorRole(role)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown role: {role}")
