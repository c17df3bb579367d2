"""
Root URL configuration for the academy backend.

All REST endpoints live below /api/ and are provided by the academy app.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("academy.urls")),
]
