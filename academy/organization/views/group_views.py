"""
Academy Study Group Views

Views:
- StudyGroupViewSet: Group CRUD and student membership management

Scope:
- Admin: every group
- HOD: groups of the department they lead
- Teacher: groups they teach or belong to
- Student: groups they belong to

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from typing import Optional

from django.contrib.auth.models import User
from django.db.models import Q, QuerySet
from django.utils.translation import gettext_lazy as _
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from ...exceptions import AccessDenied, BusinessRuleViolation
from ...responses import success_response
from ...users.models import Role
from ...users.roles import role_of
from ...utils import parse_bool, parse_id, parse_id_list
from ...viewsets import AcademyModelViewSet
from ..models import Department, StudyGroup
from ..serializers import StudyGroupSerializer

logger = logging.getLogger(__name__)


def scope_groups(queryset: QuerySet, user) -> QuerySet:
    role = role_of(user)
    if role == Role.ADMIN:
        return queryset
    if role == Role.HOD:
        return queryset.filter(department__hod=user)
    if role == Role.TEACHER:
        return queryset.filter(Q(teacher=user) | Q(students=user)).distinct()
    return queryset.filter(students=user).distinct()


class StudyGroupViewSet(AcademyModelViewSet):
    """
    Study group management.

    Query Parameters (list):
    - department: Department id
    - search: Matches name, code or description
    - isActive: true/false, defaults to true
    """

    resource_name = "Group"
    serializer_class = StudyGroupSerializer
    action_permissions = {
        "create": "manage_groups",
        "update": "manage_groups",
        "partial_update": "manage_groups",
        "destroy": "manage_groups",
        "add_students": "manage_groups",
        "remove_student": "manage_groups",
    }

    def get_queryset(self) -> QuerySet[StudyGroup]:
        queryset = scope_groups(
            StudyGroup.objects.select_related("department", "teacher__profile").prefetch_related(
                "students"
            ),
            self.request.user,
        )
        if self.action == "list":
            params = self.request.query_params
            if params.get("department"):
                queryset = queryset.filter(
                    department_id=parse_id(params["department"], "department")
                )
            search = params.get("search", "").strip()
            if search:
                queryset = queryset.filter(
                    Q(name__icontains=search)
                    | Q(code__icontains=search)
                    | Q(description__icontains=search)
                )
            is_active = parse_bool(params.get("isActive"))
            queryset = queryset.filter(is_active=True if is_active is None else is_active)
        return queryset.order_by("name")

    def _check_department_access(self, department_id: int) -> None:
        user = self.request.user
        if role_of(user) == Role.HOD and not Department.objects.filter(
            pk=department_id, hod=user
        ).exists():
            raise AccessDenied(_("You can only manage groups in your department"))

    def perform_create(self, serializer: StudyGroupSerializer) -> None:
        self._check_department_access(serializer.validated_data["department"].pk)
        group = serializer.save()
        logger.info("Group %s created by user %s", group.pk, self.request.user.pk)

    def perform_update(self, serializer: StudyGroupSerializer) -> None:
        department = serializer.validated_data.get("department", serializer.instance.department)
        self._check_department_access(department.pk)
        serializer.save()

    def perform_destroy(self, instance: StudyGroup) -> None:
        has_modules = instance.modules.filter(is_active=True).exists()
        has_assessments = instance.assessments.filter(is_active=True).exists()
        if has_modules or has_assessments:
            raise BusinessRuleViolation(
                _("Cannot delete group with active modules or assessments")
            )
        super().perform_destroy(instance)

    @action(detail=True, methods=["post"], url_path="students")
    def add_students(self, request: Request, pk: Optional[str] = None) -> Response:
        """
        Add students to the group.

        Request Body:
            studentIds: Ids of active Student users of the group's department
        """
        group = self.get_object()
        student_ids = parse_id_list(request.data.get("studentIds"), "studentIds")
        students = list(
            User.objects.filter(
                pk__in=student_ids,
                is_active=True,
                profile__role=Role.STUDENT,
                profile__department=group.department,
            )
        )
        if len(students) != len(student_ids):
            raise BusinessRuleViolation(
                _("All students must be active Student users of the group's department")
            )
        group.students.add(*students)
        logger.info("Added %s students to group %s", len(students), group.pk)
        return success_response(
            data=self.get_serializer(group).data,
            message=_("Students added successfully"),
        )

    @action(
        detail=True,
        methods=["delete"],
        url_path=r"students/(?P<student_id>[^/.]+)",
    )
    def remove_student(
        self, request: Request, pk: Optional[str] = None, student_id: Optional[str] = None
    ) -> Response:
        group = self.get_object()
        student_id = parse_id(student_id, "studentId")
        if not group.students.filter(pk=student_id).exists():
            raise BusinessRuleViolation(_("Student is not a member of this group"))
        group.students.remove(student_id)
        return success_response(message=_("Student removed successfully"))
