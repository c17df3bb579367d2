"""
Academy Application Models Registry

This module serves as the central models registry for the academy application.
It imports and exposes all models from the logical submodules so they are
registered with Django's ORM under the single ``academy`` app label.

Architecture:
- users/: Profiles and roles
- organization/: Departments and study groups
- modules/: Modules, questions and notes
- assessments/: Assessments, submissions and performance metrics
- notices/: Notices and read tracking

Author: Academy Development Team
Version: 1.0.0
"""

# Import all user-related models for registration with Django ORM
from .users.models import *

# Import all organization models for registration with Django ORM
from .organization.models import *

# Import all module-related models for registration with Django ORM
from .modules.models import *

# Import all assessment-related models for registration with Django ORM
from .assessments.models import *

# Import all notice-related models for registration with Django ORM
from .notices.models import *
