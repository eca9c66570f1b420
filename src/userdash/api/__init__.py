"""API module for userdash.

- routes/users.py: users service (count, paginated listing)
- routes/admin.py: admin users dashboard
"""
