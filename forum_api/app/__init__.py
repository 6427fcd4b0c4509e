"""
Application package initializer.

The application is split into ``core`` (configuration, logging,
storage, security, errors), ``repositories`` (post persistence),
``services`` (query and mutation logic), ``schemas`` (API models) and
``api`` (versioned HTTP routes).
"""

from .main import app  # noqa: F401
