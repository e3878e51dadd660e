"""Notifications app package.

In-app notifications with email delivery through Celery. Booking and
payment domain events are turned into guest and owner notifications by
the subscribers in ``handlers.py``, which are attached to the message bus
when the app is ready.
"""
