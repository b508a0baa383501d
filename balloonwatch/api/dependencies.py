"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from fastapi import Depends, Request

from balloonwatch.ingestors import BalloonFeedIngestor
from balloonwatch.services import DashboardService


def get_dashboard(request: Request) -> DashboardService:
    """Return the dashboard service owned by the running application."""

    service = getattr(request.app.state, "dashboard", None)
    if service is None:
        service = DashboardService()
        request.app.state.dashboard = service
    return service


def get_feed(dashboard: DashboardService = Depends(get_dashboard)) -> BalloonFeedIngestor:
    return dashboard.feed
