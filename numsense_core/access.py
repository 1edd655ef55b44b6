from __future__ import annotations
from .types import Identity, UserProfile

STAFF_ROLES = ("teacher", "admin")


def can_access(identity: Identity, target: UserProfile) -> bool:
    """Whether ``identity`` may read the profile or results of ``target``.

    Self is always allowed, staff may read anyone, a parent only a child whose
    stored guardian link points back at them.
    """
    if str(target.id) == str(identity.user_id):
        return True
    if identity.role in STAFF_ROLES:
        return True
    if identity.role == "parent":
        return target.guardian_id is not None and str(target.guardian_id) == str(identity.user_id)
    return False
