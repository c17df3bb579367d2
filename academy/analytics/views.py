"""
Academy Analytics Views

Views:
- DashboardView: System overview (manage_analytics)
- DepartmentAnalyticsView: One department (Admin, HOD or Teacher of it)
- GroupAnalyticsView: One group (Admin, HOD of its department, its teacher)
- StudentAnalyticsView: One student (Admin, HOD, teacher of one of the
  student's groups, the student)
- AssessmentAnalyticsView: One assessment (Admin, HOD, creator, teacher of
  an assigned group)
- AnalyticsExportView: JSON or CSV export (manage_analytics)

Author: Academy Development Team
Version: 1.0.0
"""

import logging

from django.contrib.auth import get_user_model
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import permissions
from rest_framework.renderers import BaseRenderer, JSONRenderer
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ..assessments.models import Assessment
from ..exceptions import AccessDenied, BusinessRuleViolation, ResourceNotFound
from ..organization.models import Department, StudyGroup
from ..responses import success_response
from ..users.models import Role
from ..users.roles import department_id_of, require_permission, role_of
from ..utils import parse_id
from .services import (
    EXPORT_TYPES,
    assessment_report,
    dashboard_report,
    department_report,
    export_rows,
    group_report,
    rows_to_csv,
    student_report,
)

User = get_user_model()

logger = logging.getLogger(__name__)


def _get_or_404(queryset, pk, label: str):
    obj = queryset.filter(pk=parse_id(pk, "id")).first()
    if obj is None:
        raise ResourceNotFound(f"{label} not found")
    return obj


def _heads_department(user, department_id: int) -> bool:
    return (
        Department.objects.filter(pk=department_id, hod=user).exists()
        or department_id_of(user) == department_id
    )


class DashboardView(APIView):
    permission_classes = [permissions.IsAuthenticated, require_permission("manage_analytics")]

    def get(self, request: Request) -> Response:
        return success_response(data=dashboard_report())


class DepartmentAnalyticsView(APIView):
    def get(self, request: Request, pk: str) -> Response:
        department = _get_or_404(Department.objects.all(), pk, "Department")
        user = request.user
        role = role_of(user)
        allowed = (
            role == Role.ADMIN
            or (role == Role.HOD and _heads_department(user, department.pk))
            or (role == Role.TEACHER and department_id_of(user) == department.pk)
        )
        if not allowed:
            raise AccessDenied(_("Access denied to department analytics"))
        return success_response(data=department_report(department))


class GroupAnalyticsView(APIView):
    def get(self, request: Request, pk: str) -> Response:
        group = _get_or_404(StudyGroup.objects.select_related("department"), pk, "Group")
        user = request.user
        role = role_of(user)
        allowed = (
            role == Role.ADMIN
            or (role == Role.HOD and _heads_department(user, group.department_id))
            or (role == Role.TEACHER and group.teacher_id == user.pk)
        )
        if not allowed:
            raise AccessDenied(_("Access denied to group analytics"))
        return success_response(data=group_report(group))


class StudentAnalyticsView(APIView):
    def get(self, request: Request, pk: str) -> Response:
        student = _get_or_404(User.objects.select_related("profile__department"), pk, "Student")
        user = request.user
        role = role_of(user)
        if role == Role.ADMIN:
            allowed = True
        elif role == Role.HOD:
            student_department = department_id_of(student)
            allowed = student_department is not None and _heads_department(
                user, student_department
            )
        elif role == Role.TEACHER:
            allowed = student.study_groups.filter(teacher=user).exists()
        else:
            allowed = student.pk == user.pk
        if not allowed:
            raise AccessDenied(_("Access denied to student analytics"))
        return success_response(data=student_report(student))


class AssessmentAnalyticsView(APIView):
    def get(self, request: Request, pk: str) -> Response:
        assessment = _get_or_404(Assessment.objects.select_related("department"), pk, "Assessment")
        user = request.user
        role = role_of(user)
        if role == Role.ADMIN:
            allowed = True
        elif role == Role.HOD:
            allowed = _heads_department(user, assessment.department_id)
        elif role == Role.TEACHER:
            allowed = (
                assessment.created_by_id == user.pk
                or assessment.groups.filter(teacher=user).exists()
            )
        else:
            allowed = False
        if not allowed:
            raise AccessDenied(_("Access denied to assessment analytics"))
        return success_response(data=assessment_report(assessment))


class CSVRenderer(BaseRenderer):
    """Renders a list of flat dict rows, selected with ``?format=csv``."""

    media_type = "text/csv"
    format = "csv"
    charset = "utf-8"

    def render(self, data, accepted_media_type=None, renderer_context=None):
        if isinstance(data, dict):
            data = [data]
        return rows_to_csv(data or [])


class AnalyticsExportView(APIView):
    """
    Export data as a file download.

    Path Parameters:
    - export_type: users, departments, groups, assessments or performance

    Query Parameters:
    - format: json (default) or csv
    """

    permission_classes = [permissions.IsAuthenticated, require_permission("manage_analytics")]
    renderer_classes = [JSONRenderer, CSVRenderer]

    def get(self, request: Request, export_type: str) -> Response:
        if export_type not in EXPORT_TYPES:
            raise BusinessRuleViolation(_("Invalid export type"))

        rows = export_rows(export_type)
        extension = request.accepted_renderer.format
        filename = f"{export_type}_export_{timezone.localdate().isoformat()}.{extension}"
        logger.info(
            "User %s exported %s rows of %s as %s",
            request.user.pk,
            len(rows),
            export_type,
            extension,
        )

        if extension == "csv":
            response = Response(rows)
        else:
            response = Response(
                {
                    "success": True,
                    "exportedAt": timezone.now(),
                    "recordCount": len(rows),
                    "data": rows,
                }
            )
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response
