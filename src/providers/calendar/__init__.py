"""External calendar / task service adapters."""

from src.providers.calendar.google_provider import GoogleWorkspaceProvider

__all__ = ["GoogleWorkspaceProvider"]
