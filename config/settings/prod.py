"""Production settings for the Stayhub project.

Sensitive values must be provided via environment variables.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = get_env("DJANGO_SECRET_KEY", required=True)  # noqa: F405

ALLOWED_HOSTS = get_env_list("DJANGO_ALLOWED_HOSTS", "")  # noqa: F405

CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"
EMAIL_HOST = get_env("EMAIL_HOST", "localhost")  # noqa: F405
EMAIL_PORT = int(get_env("EMAIL_PORT", 25))  # noqa: F405
EMAIL_USE_TLS = get_env_bool("EMAIL_USE_TLS", False)  # noqa: F405
EMAIL_HOST_USER = get_env("EMAIL_HOST_USER", "")  # noqa: F405
EMAIL_HOST_PASSWORD = get_env("EMAIL_HOST_PASSWORD", "")  # noqa: F405
