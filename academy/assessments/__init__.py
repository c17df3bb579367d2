"""
Academy Assessments Package

Timed assessments, student submissions with grading, and the performance
metrics that analytics are computed from.

Structure:
- models.py: Assessment, submissions, answers and PerformanceMetric
- serializers.py: API serialization and validation
- services/: grading and performance metric bookkeeping
- views/: assessment endpoints

Author: Academy Development Team
Version: 1.0.0
"""
