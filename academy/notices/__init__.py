"""
Academy Notices Package

Targeted announcements with per user read tracking.

Structure:
- models.py: Notice and NoticeRead, including the access rule
- serializers.py: API serialization and targeting validation
- views.py: notice endpoints

Author: Academy Development Team
Version: 1.0.0
"""
