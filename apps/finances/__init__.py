"""Finances app package.

Payments recorded against bookings, the payment gateways that charge and
refund them, and the balance queries used by the booking workflow
(deposit checks on confirmation, "nothing paid" on cancellation).
"""
