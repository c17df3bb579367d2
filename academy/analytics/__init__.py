"""
Academy Analytics Package

Read-only reports over users, content, submissions and performance
metrics, plus data export.

Structure:
- services/statistics.py: pure helpers (streaks, medians, distributions, CSV)
- services/reports.py: report builders working on the ORM
- views.py: analytics endpoints

Author: Academy Development Team
Version: 1.0.0
"""
