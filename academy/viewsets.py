"""
Academy Base ViewSet

Common behaviour of the academy resource endpoints:

- role permissions per action (``action_permissions``)
- 404 "<resource> not found or access denied" for objects outside the
  caller's scope
- success envelopes for retrieve, create, update and destroy
- soft delete through ``is_active``

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from typing import Dict, List

from django.http import Http404
from rest_framework import permissions, status, viewsets
from rest_framework.request import Request
from rest_framework.response import Response

from .exceptions import ResourceNotFound
from .responses import success_response
from .users.roles import require_permission

logger = logging.getLogger(__name__)


class AcademyModelViewSet(viewsets.ModelViewSet):
    """
    ModelViewSet answering in the API envelope.

    Attributes:
        resource_name: Human readable name used in messages
        action_permissions: Action name to required role permission
    """

    resource_name: str = "Resource"
    action_permissions: Dict[str, str] = {}

    def get_permissions(self) -> List[permissions.BasePermission]:
        required = self.action_permissions.get(self.action)
        if required:
            return [permissions.IsAuthenticated(), require_permission(required)()]
        return super().get_permissions()

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise ResourceNotFound(f"{self.resource_name} not found or access denied")

    def retrieve(self, request: Request, *args, **kwargs) -> Response:
        instance = self.get_object()
        return success_response(data=self.get_serializer(instance).data)

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return success_response(
            data=self.get_serializer(serializer.instance).data,
            message=f"{self.resource_name} created successfully",
            status=status.HTTP_201_CREATED,
        )

    def update(self, request: Request, *args, **kwargs) -> Response:
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        if getattr(instance, "_prefetched_objects_cache", None):
            instance._prefetched_objects_cache = {}
        return success_response(
            data=self.get_serializer(serializer.instance).data,
            message=f"{self.resource_name} updated successfully",
        )

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        instance = self.get_object()
        self.perform_destroy(instance)
        return success_response(message=f"{self.resource_name} deleted successfully")

    def perform_destroy(self, instance) -> None:
        """Soft delete: the row stays, ``is_active`` is cleared."""
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])
        logger.info(
            "%s %s deactivated by user %s",
            self.resource_name,
            instance.pk,
            self.request.user.pk,
        )
