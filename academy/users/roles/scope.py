"""
Helpers resolving which department and groups a user belongs to.

Every list endpoint narrows its queryset with these, so the lookups live in
one place.
"""

from typing import Optional, Set

from ..models import Profile


def department_id_of(user) -> Optional[int]:
    try:
        return user.profile.department_id
    except Profile.DoesNotExist:
        return None


def group_ids_of(user) -> Set[int]:
    """Ids of the active groups the user is a member of."""
    return set(
        user.study_groups.filter(is_active=True).values_list("id", flat=True)
    )


def taught_group_ids_of(user) -> Set[int]:
    """Ids of the active groups the user teaches."""
    return set(
        user.taught_groups.filter(is_active=True).values_list("id", flat=True)
    )
