"""Adapters for external services."""

from .reports_api import ApiError, ReportsApiClient

__all__ = ["ApiError", "ReportsApiClient"]
