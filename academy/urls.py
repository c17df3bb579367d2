"""
Academy Application URL Configuration

URL routing of the academy API. Every functional area has its own list of
URL patterns; resource endpoints are provided by DRF routers.

URL Structure (below /api/):
- auth/: Login, registration, token refresh, logout and own account
- users/: User administration
- departments/, groups/: Organization structure
- modules/, questions/, notes/: Learning content
- assessments/: Assessments, attempts and submissions
- notices/: Notice board
- analytics/: Reports and data export

Author: Academy Development Team
Version: 1.0.0
"""

from typing import List

from django.urls import URLPattern, include, path
from rest_framework.routers import DefaultRouter

from .analytics import views as analytics_views
from .assessments.views import AssessmentViewSet
from .modules.views import ModuleViewSet, NoteViewSet, QuestionViewSet
from .notices.views import NoticeViewSet
from .organization.views import DepartmentViewSet, StudyGroupViewSet
from .users import views as user_views

app_name = "academy"


def _create_router() -> DefaultRouter:
    """
    Create and configure the router for the resource endpoints.

    Returns:
        Configured DefaultRouter with every academy ViewSet registered
    """
    router = DefaultRouter()
    router.register(r"users", user_views.UserCrudViewSet, basename="users")
    router.register(r"departments", DepartmentViewSet, basename="departments")
    router.register(r"groups", StudyGroupViewSet, basename="groups")
    router.register(r"modules", ModuleViewSet, basename="modules")
    router.register(r"questions", QuestionViewSet, basename="questions")
    router.register(r"notes", NoteViewSet, basename="notes")
    router.register(r"assessments", AssessmentViewSet, basename="assessments")
    router.register(r"notices", NoticeViewSet, basename="notices")
    return router


router = _create_router()

# --- Authentication and own account ---

auth_urlpatterns: List[URLPattern] = [
    path("login/", user_views.CustomTokenObtainPairView.as_view(), name="login"),
    path("register/", user_views.RegistrationView.as_view(), name="register"),
    path("refresh/", user_views.CustomTokenRefreshView.as_view(), name="token_refresh"),
    path("logout/", user_views.LogoutView.as_view(), name="logout"),
    path("profile/", user_views.ProfileView.as_view(), name="profile"),
    path(
        "change-password/",
        user_views.ChangePasswordView.as_view(),
        name="change_password",
    ),
    path(
        "set-initial-password/",
        user_views.SetInitialPasswordView.as_view(),
        name="set_initial_password",
    ),
]

# --- Analytics ---

analytics_urlpatterns: List[URLPattern] = [
    path("dashboard/", analytics_views.DashboardView.as_view(), name="dashboard"),
    path(
        "department/<str:pk>/",
        analytics_views.DepartmentAnalyticsView.as_view(),
        name="department",
    ),
    path("group/<str:pk>/", analytics_views.GroupAnalyticsView.as_view(), name="group"),
    path("student/<str:pk>/", analytics_views.StudentAnalyticsView.as_view(), name="student"),
    path(
        "assessment/<str:pk>/",
        analytics_views.AssessmentAnalyticsView.as_view(),
        name="assessment",
    ),
    path(
        "export/<str:export_type>/",
        analytics_views.AnalyticsExportView.as_view(),
        name="export",
    ),
]

# --- Main URL Configuration ---

urlpatterns: List[URLPattern] = [
    path("auth/", include((auth_urlpatterns, "auth"))),
    path("analytics/", include((analytics_urlpatterns, "analytics"))),
    path("", include(router.urls)),
]
