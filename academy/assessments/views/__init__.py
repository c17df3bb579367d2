"""
Academy Assessments Views Package

Author: Academy Development Team
Version: 1.0.0
"""

from .assessment_views import AssessmentViewSet
