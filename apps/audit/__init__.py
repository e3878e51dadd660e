"""Audit app package.

Keeps an append-only trail of business actions (who did what to which
entity, with before/after values). Every booking and payment command
handler writes one or more audit rows.
"""
