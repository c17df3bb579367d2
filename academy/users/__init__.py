"""
Academy Users Package

This package contains everything around accounts in the academy platform:
profiles with roles, role based permissions, authentication and the
administrative user management.

Features:
- Profiles with role (Admin, HOD, Teacher, Student) and department
- Role to permission mapping used by every other area
- JWT authentication stored in HTTP-only cookies
- Automatic profile creation through Django signals
- Management command for cleaning up never-activated accounts

Structure:
- models.py: Role, Profile and signal handlers
- roles/: permission map, DRF permission classes and scope helpers
- serializers.py: API serialization for user data
- views/: authentication and CRUD views
- management/: Django management commands

Author: Academy Development Team
Version: 1.0.0
"""
