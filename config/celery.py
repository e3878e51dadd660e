import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("stayhub")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (periodic tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Check-in reminders for tomorrow's arrivals, every hour
    "send-check-in-reminders": {
        "task": "bookings.send_check_in_reminders",
        "schedule": crontab(minute=0),
    },
}
