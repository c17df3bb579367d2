from .permissions import (
    PERMISSIONS,
    ROLE_PERMISSIONS,
    HasRolePermission,
    IsAdminRole,
    has_permission,
    permissions_for,
    require_permission,
    role_of,
)
from .scope import (
    department_id_of,
    group_ids_of,
    taught_group_ids_of,
)
