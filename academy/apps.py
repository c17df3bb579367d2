"""
Academy Application Configuration

This module contains the Django application configuration for the academy
learning platform. It defines the application's metadata and default field
configuration.

Author: Academy Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class AcademyConfig(AppConfig):
    """
    Configuration class for the academy Django application.

    Attributes:
        default_auto_field: Default primary key field type for models
        name: Application name for Django registration
        verbose_name: Human-readable application name for admin interface
    """

    default_auto_field: str = "django.db.models.BigAutoField"
    name: str = "academy"
    verbose_name: str = "Academy"
