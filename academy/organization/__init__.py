"""
Academy Organization Package

Departments and the study groups inside them.

Structure:
- models.py: Department and StudyGroup
- serializers.py: API serialization with validation rules
- views/: department and group endpoints

Author: Academy Development Team
Version: 1.0.0
"""
