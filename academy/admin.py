"""
Academy Django Admin Configuration

Admin interface (themed by jazzmin) for all academy models.

Sections:
- User Management: User admin with the role profile inline
- Organization: Departments and study groups
- Learning Content: Modules, questions and notes
- Assessments: Assessments with their questions, submissions, metrics
- Notices: Notices and read receipts

Author: Academy Development Team
Version: 1.0.0
"""

from typing import Optional

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from django.db.models import Count, QuerySet
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

from .models import (
    Assessment,
    AssessmentQuestion,
    AssessmentSubmission,
    CodingSubmission,
    Department,
    McqAnswer,
    Module,
    Note,
    Notice,
    NoticeRead,
    PerformanceMetric,
    Profile,
    Question,
    StudyGroup,
)

# --- User Management Administration ---


class ProfileInline(admin.StackedInline):
    """Role, department and password state edited inside the user admin."""

    model = Profile
    can_delete = False
    verbose_name_plural = "Profile Information"
    fk_name = "user"
    fields = ("role", "department", "force_password_change")

    def get_extra(self, request: HttpRequest, obj: Optional[User] = None, **kwargs) -> int:
        return 0


class UserAdmin(BaseUserAdmin):
    inlines = (ProfileInline,)
    list_display = (
        "username",
        "email",
        "first_name",
        "last_name",
        "get_role",
        "is_active",
        "get_force_password_change",
    )
    list_select_related = ("profile",)
    list_filter = (
        "is_staff",
        "is_active",
        "profile__role",
        "profile__department",
        "profile__force_password_change",
    )
    search_fields = ("username", "first_name", "last_name", "email")
    ordering = ("username",)

    @admin.display(description=_("Role"))
    def get_role(self, instance: User) -> Optional[str]:
        try:
            return instance.profile.role
        except Profile.DoesNotExist:
            return None

    @admin.display(boolean=True, description=_("Force Password Change"))
    def get_force_password_change(self, instance: User) -> Optional[bool]:
        try:
            return instance.profile.force_password_change
        except Profile.DoesNotExist:
            return None


admin.site.unregister(User)
admin.site.register(User, UserAdmin)

# --- Organization Administration ---


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "hod", "is_active", "group_count")
    list_filter = ("is_active",)
    search_fields = ("name", "code", "description")
    list_select_related = ("hod",)

    @admin.display(description=_("Groups"))
    def group_count(self, obj: Department) -> int:
        return obj.group_total

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).annotate(group_total=Count("groups"))


@admin.register(StudyGroup)
class StudyGroupAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "department", "teacher", "is_active")
    list_filter = ("department", "is_active")
    search_fields = ("name", "code")
    filter_horizontal = ("students",)
    list_select_related = ("department", "teacher")


# --- Learning Content Administration ---


@admin.register(Module)
class ModuleAdmin(admin.ModelAdmin):
    """Modules with their groups, prerequisites and content."""

    list_display = ("title", "department", "difficulty", "sort_order", "is_active")
    list_filter = ("department", "difficulty", "is_active")
    search_fields = ("title", "description")
    filter_horizontal = ("groups", "prerequisites", "questions", "notes")
    list_select_related = ("department",)

    fieldsets = (
        (_("Basic Information"), {"fields": ("title", "description", "department", "created_by")}),
        (
            _("Learning Path"),
            {"fields": ("difficulty", "estimated_hours", "tags", "sort_order", "prerequisites")},
        ),
        (_("Content"), {"fields": ("groups", "questions", "notes", "is_active")}),
    )


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "difficulty", "department", "points", "is_active")
    list_filter = ("type", "difficulty", "department", "is_active")
    search_fields = ("title", "text")


@admin.register(Note)
class NoteAdmin(admin.ModelAdmin):
    list_display = ("title", "department", "is_active", "created_at")
    list_filter = ("department", "is_active")
    search_fields = ("title", "content")


# --- Assessment Administration ---


class AssessmentQuestionInline(admin.TabularInline):
    model = AssessmentQuestion
    extra = 1
    fields = ("question", "points", "order")
    ordering = ("order",)


@admin.register(Assessment)
class AssessmentAdmin(admin.ModelAdmin):
    list_display = ("title", "department", "start_time", "duration", "passing_score", "is_active")
    list_filter = ("department", "is_active")
    search_fields = ("title", "description")
    filter_horizontal = ("groups", "modules")
    inlines = [AssessmentQuestionInline]


class McqAnswerInline(admin.TabularInline):
    model = McqAnswer
    extra = 0
    readonly_fields = ("question", "selected_option", "is_correct")


class CodingSubmissionInline(admin.TabularInline):
    model = CodingSubmission
    extra = 0
    readonly_fields = ("question", "attempts", "best_score", "is_completed")


@admin.register(AssessmentSubmission)
class AssessmentSubmissionAdmin(admin.ModelAdmin):
    list_display = ("assessment", "student", "status", "total_score", "submitted_at")
    list_filter = ("status", "department")
    search_fields = ("assessment__title", "student__email")
    list_select_related = ("assessment", "student")
    inlines = [McqAnswerInline, CodingSubmissionInline]


@admin.register(PerformanceMetric)
class PerformanceMetricAdmin(admin.ModelAdmin):
    list_display = (
        "student",
        "department",
        "module",
        "assessment",
        "accepted_submissions",
        "completed_assessments",
        "average_assessment_score",
    )
    list_filter = ("department",)
    search_fields = ("student__email",)
    list_select_related = ("student", "department", "module", "assessment")


# --- Notice Administration ---


@admin.register(Notice)
class NoticeAdmin(admin.ModelAdmin):
    list_display = ("title", "target_type", "priority", "expires_at", "read_count", "is_active")
    list_filter = ("target_type", "priority", "is_active")
    search_fields = ("title", "content")
    filter_horizontal = ("groups",)
    readonly_fields = ("read_count",)


@admin.register(NoticeRead)
class NoticeReadAdmin(admin.ModelAdmin):
    list_display = ("notice", "user", "read_at")
    search_fields = ("notice__title", "user__email")
    list_select_related = ("notice", "user")
