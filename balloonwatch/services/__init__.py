"""Service-layer helpers for BalloonWatch."""

from .dashboard import DashboardService

__all__ = ["DashboardService"]
