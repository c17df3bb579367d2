"""
Academy Organization Views Package

Department and study group endpoints.

Author: Academy Development Team
Version: 1.0.0
"""

from .department_views import DepartmentViewSet
from .group_views import StudyGroupViewSet
