"""
Role permissions configuration - single source of truth for role -> team label mapping
"""

from typing import Any, Dict, List, Optional

from case_review.models.enums import Role

# Assignee label used while no team owns the case (intake, decided cases)
SYSTEM_LABEL = "System"

ROLE_PERMISSIONS: Dict[Role, Dict[str, Any]] = {
    Role.CLIENT: {
        "team_label": "Client",
        "visibility": "own",     # only cases carrying the caller's account id
        "reviewer": False,
        "description": "Submits account-change cases and follows their progress"
    },
    Role.OKW: {
        "team_label": "OKW Team",
        "visibility": "all",     # triages the whole queue
        "reviewer": True,
        "description": "Operational team - first review and intake"
    },
    Role.CDD: {
        "team_label": "CDD Team",
        "visibility": "all",
        "reviewer": True,
        "description": "Compliance team - final approval or rejection"
    },
}

def parse_role(value: Any) -> Optional[Role]:
    """Coerce a caller-supplied label into a Role, or None if unknown"""
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        return None

def get_role_permissions(role: Role) -> Dict[str, Any]:
    """
    Get permissions for a specific role

    Args:
        role: The acting role

    Returns:
        Dict containing the role entry or empty dict if role not found
    """
    return ROLE_PERMISSIONS.get(role, {})

def is_valid_role(value: Any) -> bool:
    """Check if a caller-supplied label names a configured role"""
    return parse_role(value) is not None

def team_label_for(role: Role) -> str:
    """Team label compared against a case's current assignee"""
    return get_role_permissions(role)["team_label"]

def can_see_all_cases(role: Role) -> bool:
    """Check if role has visibility over the full case queue"""
    return get_role_permissions(role).get("visibility") == "all"

def get_available_roles() -> List[Role]:
    """Get list of all configured roles"""
    return list(ROLE_PERMISSIONS.keys())

def get_reviewer_roles() -> List[Role]:
    """Get list of roles that belong to a review team"""
    return [role for role, permissions in ROLE_PERMISSIONS.items() if permissions.get("reviewer")]
