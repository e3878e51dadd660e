"""Users app package.

Defines the platform user model (email login, role based access) and the
authentication endpoints. ``apps.users.models.User`` is the
AUTH_USER_MODEL throughout the project.
"""
