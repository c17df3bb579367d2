"""
Academy Department Views

Views:
- DepartmentViewSet: Department CRUD, groups listing, HOD assignment and
  statistics

Scope:
- Admin: every department
- HOD: departments they lead
- Teacher/Student: their own department

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from typing import Optional

from django.contrib.auth.models import User
from django.db import transaction
from django.db.models import Count, Q, QuerySet
from django.utils.translation import gettext_lazy as _
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from ...exceptions import AccessDenied, BusinessRuleViolation
from ...responses import success_response
from ...users.models import Role
from ...users.roles import department_id_of, role_of
from ...utils import parse_bool, parse_id
from ...viewsets import AcademyModelViewSet
from ..models import Department
from ..serializers import DepartmentDetailSerializer, DepartmentSerializer

logger = logging.getLogger(__name__)


def annotate_department_counts(queryset: QuerySet) -> QuerySet:
    active_member = Q(members__user__is_active=True)
    return queryset.annotate(
        teacher_count=Count(
            "members", filter=active_member & Q(members__role=Role.TEACHER), distinct=True
        ),
        student_count=Count(
            "members", filter=active_member & Q(members__role=Role.STUDENT), distinct=True
        ),
        group_count=Count("groups", filter=Q(groups__is_active=True), distinct=True),
    )


def scope_departments(queryset: QuerySet, user) -> QuerySet:
    role = role_of(user)
    if role == Role.ADMIN:
        return queryset
    if role == Role.HOD:
        return queryset.filter(hod=user)
    return queryset.filter(pk=department_id_of(user))


def set_department_hod(
    department: Department, hod: Optional[User], previous: Optional[User] = None
) -> None:
    """
    Make ``hod`` the head of ``department``.

    The new HOD's profile points at the department and their group
    memberships are cleared; a replaced HOD loses the department reference.
    """
    if previous is not None and previous != hod:
        if previous.profile.department_id == department.pk:
            previous.profile.department = None
            previous.profile.save(update_fields=["department", "updated_at"])
    if hod is None:
        return
    hod.profile.department = department
    hod.profile.save(update_fields=["department", "updated_at"])
    hod.study_groups.clear()
    logger.info("User %s assigned as HOD of department %s", hod.pk, department.pk)


class DepartmentViewSet(AcademyModelViewSet):
    """
    Department management.

    Query Parameters (list):
    - search: Matches name, code or description
    - isActive: true/false
    """

    resource_name = "Department"
    serializer_class = DepartmentSerializer
    action_permissions = {
        "create": "manage_departments",
        "destroy": "manage_departments",
        "assign_hod": "manage_departments",
        "stats_overview": "manage_analytics",
    }

    def get_queryset(self) -> QuerySet[Department]:
        queryset = scope_departments(
            Department.objects.select_related("hod__profile"), self.request.user
        )
        if self.action == "list":
            params = self.request.query_params
            search = params.get("search", "").strip()
            if search:
                queryset = queryset.filter(
                    Q(name__icontains=search)
                    | Q(code__icontains=search)
                    | Q(description__icontains=search)
                )
            is_active = parse_bool(params.get("isActive"))
            if is_active is not None:
                queryset = queryset.filter(is_active=is_active)
            queryset = annotate_department_counts(queryset)
        return queryset.order_by("name")

    def get_serializer_class(self):
        if self.action == "retrieve":
            return DepartmentDetailSerializer
        return DepartmentSerializer

    @transaction.atomic
    def perform_create(self, serializer: DepartmentSerializer) -> None:
        department = serializer.save()
        set_department_hod(department, department.hod)
        logger.info("Department %s created by user %s", department.pk, self.request.user.pk)

    def update(self, request: Request, *args, **kwargs) -> Response:
        department = self.get_object()
        role = role_of(request.user)
        if role == Role.HOD:
            if department.hod_id != request.user.pk:
                raise AccessDenied(_("You can only update your own department"))
            if "hod" in request.data or "is_active" in request.data:
                raise AccessDenied(_("Only administrators can change the head or status"))
        elif role != Role.ADMIN:
            raise AccessDenied(_("Insufficient permissions"))
        return super().update(request, *args, **kwargs)

    @transaction.atomic
    def perform_update(self, serializer: DepartmentSerializer) -> None:
        previous = serializer.instance.hod
        department = serializer.save()
        if department.hod != previous:
            set_department_hod(department, department.hod, previous)

    def perform_destroy(self, instance: Department) -> None:
        has_groups = instance.groups.filter(is_active=True).exists()
        has_modules = instance.modules.filter(is_active=True).exists()
        if has_groups or has_modules:
            raise BusinessRuleViolation(
                _("Cannot delete department with active groups or modules")
            )
        super().perform_destroy(instance)

    @action(detail=True, methods=["get"], url_path="groups")
    def groups(self, request: Request, pk: Optional[str] = None) -> Response:
        """Active groups of the department with student and module counts."""
        department = self.get_object()
        groups = (
            department.groups.filter(is_active=True)
            .select_related("teacher")
            .annotate(
                student_count=Count("students", distinct=True),
                module_count=Count("modules", filter=Q(modules__is_active=True), distinct=True),
            )
            .order_by("name")
        )
        data = [
            {
                "id": group.id,
                "name": group.name,
                "code": group.code,
                "description": group.description,
                "teacher": (
                    {"id": group.teacher.id, "email": group.teacher.email}
                    if group.teacher
                    else None
                ),
                "studentCount": group.student_count,
                "moduleCount": group.module_count,
            }
            for group in groups
        ]
        return success_response(data=data)

    @action(detail=True, methods=["post"], url_path="hod")
    def assign_hod(self, request: Request, pk: Optional[str] = None) -> Response:
        department = self.get_object()
        hod_id = parse_id(request.data.get("hodId"), "hodId")
        hod = User.objects.filter(pk=hod_id, is_active=True).select_related("profile").first()
        if hod is None or role_of(hod) != Role.HOD:
            raise BusinessRuleViolation(_("HOD must be a user with HOD role"))

        with transaction.atomic():
            previous = department.hod
            department.hod = hod
            department.save(update_fields=["hod", "updated_at"])
            set_department_hod(department, hod, previous)

        return success_response(
            data=DepartmentSerializer(department).data,
            message=_("HOD assigned successfully"),
        )

    @action(detail=False, methods=["get"], url_path="stats/overview")
    def stats_overview(self, request: Request) -> Response:
        departments = Department.objects.all()
        total = departments.count()
        active = departments.filter(is_active=True).count()
        with_hod = departments.filter(is_active=True, hod__isnull=False).count()

        per_department = []
        for dept in annotate_department_counts(departments.filter(is_active=True)):
            per_department.append(
                {
                    "id": dept.id,
                    "name": dept.name,
                    "code": dept.code,
                    "teacherCount": dept.teacher_count,
                    "studentCount": dept.student_count,
                    "groupCount": dept.group_count,
                    "totalUsers": dept.teacher_count + dept.student_count,
                }
            )
        per_department.sort(key=lambda item: item["totalUsers"], reverse=True)

        return success_response(
            data={
                "overview": {
                    "totalDepartments": total,
                    "activeDepartments": active,
                    "departmentsWithHOD": with_hod,
                    "departmentsWithoutHOD": active - with_hod,
                },
                "departments": per_department,
            }
        )
