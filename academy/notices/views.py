"""
Academy Notice Views

Views:
- NoticeViewSet: Notice listing with audience targeting, CRUD, read
  tracking, department and group feeds, statistics and cleanup

Audience of the list endpoint:
- Admin: every notice
- HOD: notices for all users, for the HOD role or for their department
- Teacher: notices for all users, for the Teacher role or for their groups
- Student: notices for all users, for the Student role, their department
  or their groups

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from typing import Optional, Set

from django.db.models import Count, Q, QuerySet
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from ..exceptions import AccessDenied, ResourceNotFound
from ..organization.models import Department, StudyGroup
from ..responses import success_response
from ..users.models import Role
from ..users.roles import department_id_of, group_ids_of, role_of, taught_group_ids_of
from ..utils import parse_bool, parse_id
from ..viewsets import AcademyModelViewSet
from .models import (
    Notice,
    NoticeRead,
    Priority,
    TargetType,
    deactivate_expired_notices,
)
from .serializers import NoticeDetailSerializer, NoticeSerializer, NoticeUpdateSerializer

logger = logging.getLogger(__name__)


def _role_target(role: str) -> Q:
    # target_roles is a JSON list; match the quoted role name
    return Q(target_type=TargetType.ROLE, target_roles__icontains=f'"{role}"')


def audience_filter(user) -> Optional[Q]:
    """
    Build the filter selecting notices addressed to ``user``.

    Returns:
        None for admins (no restriction), a Q object otherwise
    """
    role = role_of(user)
    if role == Role.ADMIN:
        return None

    audience = Q(target_type=TargetType.ALL) | _role_target(role)
    department_id = department_id_of(user)
    if role == Role.HOD:
        departments = Q(department__hod=user)
        if department_id is not None:
            departments |= Q(department_id=department_id)
        audience |= Q(target_type=TargetType.DEPARTMENT) & departments
    elif role == Role.TEACHER:
        groups = group_ids_of(user) | taught_group_ids_of(user)
        audience |= Q(target_type=TargetType.GROUP, groups__in=groups)
    else:
        if department_id is not None:
            audience |= Q(target_type=TargetType.DEPARTMENT, department_id=department_id)
        audience |= Q(target_type=TargetType.GROUP, groups__in=group_ids_of(user))
    return audience


def scope_notices(queryset: QuerySet, user) -> QuerySet:
    audience = audience_filter(user)
    if audience is None:
        return queryset
    return queryset.filter(audience).distinct()


def read_notice_ids(user, notices) -> Set[int]:
    return set(
        NoticeRead.objects.filter(
            user=user, notice_id__in=[notice.pk for notice in notices]
        ).values_list("notice_id", flat=True)
    )


def _choice_param(value: Optional[str], choices, field: str) -> Optional[str]:
    if not value:
        return None
    if value not in choices:
        raise serializers.ValidationError({field: [f"Invalid {field}"]})
    return value


class NoticeViewSet(AcademyModelViewSet):
    """
    Notice board.

    Query Parameters (list):
    - search: Matches title or content
    - department, group, postedBy: Id filters
    - targetType: all, department, group or role
    - priority: low, medium or high
    - isActive: true/false (admins only, defaults to true)
    - unread: true to only list notices the user has not read
    """

    resource_name = "Notice"
    serializer_class = NoticeSerializer
    action_permissions = {
        "create": "post_notices",
        "update": "post_notices",
        "partial_update": "post_notices",
        "destroy": "post_notices",
        "stats": "manage_analytics",
        "cleanup_expired": "manage_analytics",
    }

    def get_serializer_class(self):
        if self.action == "retrieve":
            return NoticeDetailSerializer
        if self.action in ("update", "partial_update"):
            return NoticeUpdateSerializer
        return NoticeSerializer

    def get_queryset(self) -> QuerySet[Notice]:
        user = self.request.user
        queryset = Notice.objects.select_related(
            "posted_by__profile", "department"
        ).prefetch_related("groups")

        if self.action == "list":
            return self.filter_list(queryset, self.request.query_params)
        if self.action in ("update", "partial_update", "destroy"):
            return self.scope_managed(queryset, user)
        return queryset

    def scope_managed(self, queryset: QuerySet, user) -> QuerySet:
        """Notices ``user`` may edit or delete."""
        role = role_of(user)
        if role == Role.ADMIN:
            return queryset
        if role == Role.HOD and self.action != "destroy":
            return queryset.filter(
                Q(posted_by=user) | Q(target_type=TargetType.ALL) | _role_target(Role.HOD)
            )
        return queryset.filter(posted_by=user)

    def filter_list(self, queryset: QuerySet, params) -> QuerySet:
        user = self.request.user
        queryset = scope_notices(queryset.unexpired(), user)

        is_active = parse_bool(params.get("isActive"))
        if role_of(user) != Role.ADMIN or is_active is None:
            is_active = True
        queryset = queryset.filter(is_active=is_active)

        search = params.get("search", "").strip()
        if search:
            queryset = queryset.filter(Q(title__icontains=search) | Q(content__icontains=search))
        if params.get("department"):
            queryset = queryset.filter(department_id=parse_id(params["department"], "department"))
        if params.get("group"):
            queryset = queryset.filter(groups__id=parse_id(params["group"], "group"))
        if params.get("postedBy"):
            queryset = queryset.filter(posted_by_id=parse_id(params["postedBy"], "postedBy"))
        target_type = _choice_param(params.get("targetType"), TargetType.values, "targetType")
        if target_type:
            queryset = queryset.filter(target_type=target_type)
        priority = _choice_param(params.get("priority"), Priority.values, "priority")
        if priority:
            queryset = queryset.filter(priority=priority)
        if parse_bool(params.get("unread")):
            queryset = queryset.exclude(reads__user=user)
        return queryset.by_priority()

    def _paginated_notices(self, queryset: QuerySet) -> Response:
        page = self.paginate_queryset(queryset)
        context = self.get_serializer_context()
        context["read_ids"] = read_notice_ids(self.request.user, page)
        data = NoticeSerializer(page, many=True, context=context).data
        return self.get_paginated_response(data)

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self._paginated_notices(self.get_queryset())

    def retrieve(self, request: Request, *args, **kwargs) -> Response:
        notice = self.get_object()
        if notice.is_expired:
            raise ResourceNotFound(_("Notice has expired"))
        if not notice.has_access(request.user):
            raise AccessDenied(_("Access denied to this notice"))
        return success_response(data=self.get_serializer(notice).data)

    def perform_create(self, serializer: NoticeSerializer) -> None:
        notice = serializer.save(posted_by=self.request.user)
        logger.info(
            "Notice %s (%s) posted by user %s",
            notice.pk,
            notice.target_type,
            self.request.user.pk,
        )

    def update(self, request: Request, *args, **kwargs) -> Response:
        partial = kwargs.pop("partial", False)
        notice = self.get_object()
        serializer = NoticeUpdateSerializer(notice, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return success_response(
            data=NoticeSerializer(notice, context=self.get_serializer_context()).data,
            message=_("Notice updated successfully"),
        )

    @action(detail=True, methods=["post"], url_path="mark-read")
    def mark_read(self, request: Request, pk: Optional[str] = None) -> Response:
        notice = self.get_object()
        if not notice.has_access(request.user):
            raise AccessDenied(_("Access denied to this notice"))
        notice.mark_as_read(request.user)
        return success_response(
            data={"readCount": notice.read_count, "isRead": True},
            message=_("Notice marked as read"),
        )

    @action(detail=False, methods=["post"], url_path="mark-all-read")
    def mark_all_read(self, request: Request) -> Response:
        user = request.user
        unread = scope_notices(Notice.objects.visible(), user).exclude(reads__user=user)
        marked = sum(1 for notice in unread if notice.mark_as_read(user))
        return success_response(
            data={"markedCount": marked},
            message=f"Marked {marked} notices as read",
        )

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request: Request) -> Response:
        user = request.user
        count = scope_notices(Notice.objects.visible(), user).exclude(reads__user=user).count()
        return success_response(data={"unreadCount": count})

    @action(
        detail=False,
        methods=["get"],
        url_path=r"department/(?P<department_id>[^/.]+)",
    )
    def department(self, request: Request, department_id: Optional[str] = None) -> Response:
        """Notices addressed to everyone or to one department."""
        department_id = parse_id(department_id, "department")
        department = Department.objects.filter(pk=department_id).first()
        if department is None:
            raise ResourceNotFound(_("Department not found"))

        user = request.user
        role = role_of(user)
        allowed = role == Role.ADMIN or (
            role == Role.HOD
            and (department.hod_id == user.pk or department_id_of(user) == department.pk)
        )
        if not allowed:
            raise AccessDenied(_("Access denied to department notices"))

        queryset = Notice.objects.visible().filter(
            Q(target_type=TargetType.ALL)
            | Q(target_type=TargetType.DEPARTMENT, department=department)
        )
        return self._paginated_notices(
            queryset.select_related("posted_by__profile", "department")
            .prefetch_related("groups")
            .by_priority()
        )

    @action(
        detail=False,
        methods=["get"],
        url_path=r"group/(?P<group_id>[^/.]+)",
    )
    def group(self, request: Request, group_id: Optional[str] = None) -> Response:
        """Notices addressed to everyone or to one group."""
        group_id = parse_id(group_id, "group")
        group = StudyGroup.objects.select_related("department").filter(pk=group_id).first()
        if group is None:
            raise ResourceNotFound(_("Group not found"))

        user = request.user
        role = role_of(user)
        if role == Role.ADMIN:
            allowed = True
        elif role == Role.HOD:
            allowed = group.department.hod_id == user.pk or department_id_of(user) == group.department_id
        elif role == Role.TEACHER:
            allowed = group.teacher_id == user.pk
        else:
            allowed = group.students.filter(pk=user.pk).exists()
        if not allowed:
            raise AccessDenied(_("Access denied to group notices"))

        queryset = Notice.objects.visible().filter(
            Q(target_type=TargetType.ALL) | Q(target_type=TargetType.GROUP, groups=group)
        ).distinct()
        return self._paginated_notices(
            queryset.select_related("posted_by__profile", "department")
            .prefetch_related("groups")
            .by_priority()
        )

    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request: Request) -> Response:
        active = Notice.objects.filter(is_active=True)
        total = active.count()
        expired = active.expired().count()

        def breakdown(field: str) -> list:
            rows = active.values(field).annotate(count=Count("id")).order_by("-count", field)
            return [{field: row[field], "count": row["count"]} for row in rows]

        def summary(notice: Notice) -> dict:
            return {
                "id": notice.pk,
                "title": notice.title,
                "priority": notice.priority,
                "readCount": notice.read_count,
                "createdAt": notice.created_at,
            }

        recent = active.order_by("-created_at")[:10]
        most_read = active.order_by("-read_count", "-created_at")[:10]
        return success_response(
            data={
                "overview": {
                    "totalNotices": total,
                    "activeNotices": total - expired,
                    "expiredNotices": expired,
                },
                "priorityBreakdown": breakdown("priority"),
                "targetTypeBreakdown": breakdown("target_type"),
                "recentNotices": [summary(notice) for notice in recent],
                "mostReadNotices": [summary(notice) for notice in most_read],
            }
        )

    @action(detail=False, methods=["post"], url_path="cleanup-expired")
    def cleanup_expired(self, request: Request) -> Response:
        count = deactivate_expired_notices()
        logger.info("Deactivated %s expired notices", count)
        return success_response(
            data={"deactivatedCount": count},
            message=_("Expired notices cleaned up successfully"),
        )
