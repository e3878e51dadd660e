"""Properties app package.

Properties are lodging establishments owned by an owner user. Each
property is made of rentable units, carries its booking policies
(cancellation, payment, modification) and an optional staff roster.
Unit availability blocks live here too: both manual blocks and the
blocks created for bookings.
"""
