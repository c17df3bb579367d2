"""
Academy Users Views Package

Views for authentication, the user's own account and administrative user
management.

Features:
- Email based JWT login with tokens in HTTP-only cookies
- Token refresh and logout with token blacklisting
- Self registration, profile editing and password changes
- User CRUD operations for administrators

Author: Academy Development Team
Version: 1.0.0
"""

from .auth_views import (
    ChangePasswordView,
    CustomTokenObtainPairView,
    CustomTokenRefreshView,
    LogoutView,
    ProfileView,
    RegistrationView,
    SetInitialPasswordView,
)
from .user_crud_view import UserCrudViewSet
