"""Backoffice: site settings, change history and audit trail service."""

__version__ = "1.0.0"
