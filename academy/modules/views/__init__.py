"""
Academy Modules Views Package

Module, question and note endpoints.

Author: Academy Development Team
Version: 1.0.0
"""

from .module_views import ModuleViewSet
from .question_views import NoteViewSet, QuestionViewSet
