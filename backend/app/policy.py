# backend/app/policy.py
"""
Authorization policy for every (resource, action) the application exposes.

A required role of None means any authenticated session is enough. Pairs not
listed here are denied.
"""
import logging
from typing import Dict, Optional, Tuple

from backend.app.models.user_model import Role

logger = logging.getLogger(__name__)

POLICY: Dict[Tuple[str, str], Optional[Role]] = {
    ("transactions", "list"): None,
    ("transactions", "create"): Role.ADMIN,
    ("users", "list"): Role.ADMIN,
    ("users", "update"): Role.ADMIN,
    ("profile", "read"): None,
    ("profile", "update"): None,
    ("reports", "read"): Role.ADMIN,
}


def required_role(resource: str, action: str) -> Optional[Role]:
    if (resource, action) not in POLICY:
        raise KeyError(f"No policy for {resource}:{action}")
    return POLICY[(resource, action)]


def is_allowed(role, resource: str, action: str) -> bool:
    try:
        needed = required_role(resource, action)
    except KeyError:
        logger.error("Denied unknown permission %s:%s", resource, action)
        return False
    if needed is None:
        return True
    try:
        return Role(role) == needed
    except ValueError:
        return False
