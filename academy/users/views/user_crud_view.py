"""
Academy User Management CRUD Views

This module provides user management for administrators.

Views:
- UserCrudViewSet: Complete CRUD operations for user management

Features:
- Filtering by role, department, activity and free text search
- Soft delete through ``is_active``
- Password requirement management and user statistics

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from typing import Optional

from django.contrib.auth.models import User
from django.db.models import Count, Q, QuerySet
from django.utils.translation import gettext_lazy as _
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from ...responses import success_response
from ...utils import parse_bool, parse_id
from ..models import Role
from ..roles import require_permission
from ..serializers import UserSerializer

logger = logging.getLogger(__name__)


class UserCrudViewSet(viewsets.ModelViewSet):
    """
    User management ViewSet for administrative operations.

    Query Parameters (list):
    - role: Admin, HOD, Teacher or Student
    - department: Department id
    - isActive: true/false
    - search: Matches username, email, first or last name

    Permissions:
    - Requires the ``manage_users`` role permission
    """

    serializer_class = UserSerializer
    permission_classes = [require_permission("manage_users")]

    def get_queryset(self) -> QuerySet[User]:
        queryset = User.objects.select_related("profile", "profile__department").order_by("id")
        if self.action != "list":
            return queryset

        params = self.request.query_params
        if params.get("role"):
            queryset = queryset.filter(profile__role=params["role"])
        if params.get("department"):
            queryset = queryset.filter(
                profile__department_id=parse_id(params["department"], "department")
            )
        is_active = parse_bool(params.get("isActive"))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        search = params.get("search", "").strip()
        if search:
            queryset = queryset.filter(
                Q(username__icontains=search)
                | Q(email__icontains=search)
                | Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
            )
        return queryset

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s created by %s", user.pk, request.user.pk)
        return success_response(
            data=self.get_serializer(user).data,
            message=_("User created successfully"),
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request: Request, *args, **kwargs) -> Response:
        return success_response(data=self.get_serializer(self.get_object()).data)

    def update(self, request: Request, *args, **kwargs) -> Response:
        partial = kwargs.pop("partial", False)
        serializer = self.get_serializer(
            self.get_object(), data=request.data, partial=partial
        )
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return success_response(
            data=self.get_serializer(user).data, message=_("User updated successfully")
        )

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        """Deactivate the user instead of deleting the account."""
        user = self.get_object()
        user.is_active = False
        user.save(update_fields=["is_active"])
        logger.info("User %s deactivated by %s", user.pk, request.user.pk)
        return success_response(message=_("User deactivated successfully"))

    @action(detail=True, methods=["post"], url_path="force-password-change")
    def force_password_change(
        self, request: Request, pk: Optional[str] = None
    ) -> Response:
        user = self.get_object()
        user.profile.force_password_change = True
        user.profile.save(update_fields=["force_password_change", "updated_at"])
        return success_response(
            message=_("User will be required to change password on next login.")
        )

    @action(detail=True, methods=["post"], url_path="reset-password-requirement")
    def reset_password_requirement(
        self, request: Request, pk: Optional[str] = None
    ) -> Response:
        user = self.get_object()
        user.profile.mark_password_changed()
        return success_response(
            message=_("Password change requirement removed for user.")
        )

    @action(detail=False, methods=["get"], url_path="statistics")
    def user_statistics(self, request: Request) -> Response:
        """
        Get user statistics for administrative overview.

        Returns:
            Totals, active users, per role counts and pending password changes
        """
        queryset = User.objects.all()
        role_counts = dict(
            queryset.values("profile__role")
            .annotate(count=Count("id"))
            .values_list("profile__role", "count")
        )
        statistics = {
            "total_users": queryset.count(),
            "active_users": queryset.filter(is_active=True).count(),
            "users_by_role": {role: role_counts.get(role, 0) for role in Role.values},
            "users_requiring_password_change": queryset.filter(
                profile__force_password_change=True
            ).count(),
        }
        return success_response(data=statistics)
