"""Development settings for the Stayhub project.

Enables debug, allows all hosts, prints emails to the console and
switches logs to the human readable renderer. Do not use in production!
"""

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ["*"]

EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

LOGGING["handlers"]["console"]["formatter"] = "console"  # noqa: F405
