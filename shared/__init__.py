"""Shared kernel: domain building blocks and application plumbing used by every app."""
