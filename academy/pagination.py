"""
Academy API Pagination

Page/limit pagination that renders the list envelope used by every
paginated endpoint:

    {"success": true, "data": [...],
     "pagination": {"current": 1, "pages": 3, "total": 27, "limit": 10}}

Author: Academy Development Team
Version: 1.0.0
"""

import math
from typing import Any, List, Optional, Sequence

from django.conf import settings
from django.db.models import QuerySet
from rest_framework import serializers
from rest_framework.pagination import BasePagination
from rest_framework.request import Request
from rest_framework.response import Response


def _positive_int(raw: Optional[str], name: str, default: int) -> int:
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise serializers.ValidationError({name: [f"{name} must be a positive integer"]})
    if value < 1:
        raise serializers.ValidationError({name: [f"{name} must be a positive integer"]})
    return value


class EnvelopePagination(BasePagination):
    """
    Offset pagination driven by ``page`` and ``limit`` query parameters.

    Pages past the end yield an empty ``data`` list instead of a 404.
    """

    page_query_param = "page"
    limit_query_param = "limit"

    def __init__(self) -> None:
        self.page = 1
        self.limit = settings.REST_FRAMEWORK.get("PAGE_SIZE", 10)
        self.total = 0

    def paginate_queryset(
        self, queryset: Sequence[Any], request: Request, view: Any = None
    ) -> List[Any]:
        max_limit = getattr(settings, "ACADEMY_MAX_PAGE_SIZE", 100)
        self.page = _positive_int(
            request.query_params.get(self.page_query_param), "page", 1
        )
        self.limit = min(
            _positive_int(
                request.query_params.get(self.limit_query_param), "limit", self.limit
            ),
            max_limit,
        )
        if isinstance(queryset, QuerySet):
            self.total = queryset.count()
        else:
            self.total = len(queryset)

        offset = (self.page - 1) * self.limit
        return list(queryset[offset : offset + self.limit])

    def get_pagination_info(self) -> dict:
        return {
            "current": self.page,
            "pages": math.ceil(self.total / self.limit) if self.limit else 0,
            "total": self.total,
            "limit": self.limit,
        }

    def get_paginated_response(self, data: Any) -> Response:
        return Response(
            {
                "success": True,
                "data": data,
                "pagination": self.get_pagination_info(),
            }
        )
