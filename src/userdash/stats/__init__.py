"""Statistics module for the admin users page.

- Reads counts through the users API client and publishes MetricViews
- Forbidden: database access, table rendering
"""
