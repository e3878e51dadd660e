"""Top-level package for Django configuration.

Holds the settings modules for each environment and the WSGI/ASGI entry
points of the Stayhub booking platform.
"""

# Import the Celery application as soon as Django starts so that shared
# tasks are bound to it.
from .celery import app as celery_app  # noqa: F401
