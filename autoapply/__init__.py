"""Automated job applications: search, authenticate, apply under quota."""

__version__ = "0.1.0"
