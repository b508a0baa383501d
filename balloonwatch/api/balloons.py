"""Balloon positions, history and flight path endpoints."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from balloonwatch.api.dependencies import get_dashboard, get_feed
from balloonwatch.ingestors import BalloonFeedIngestor
from balloonwatch.models import DashboardState, FlightPath, PredictionStrategy
from balloonwatch.services import DashboardService

router = APIRouter(prefix="/api/v1", tags=["balloons"])

logger = logging.getLogger("balloonwatch.api.balloons")


@router.get(
    "/balloons",
    response_model=DashboardState,
    summary="Current balloons with weather and danger assessment",
)
async def list_balloons(
    refresh: bool = Query(default=False, description="Force a refresh cycle"),
    dashboard: DashboardService = Depends(get_dashboard),
) -> DashboardState:
    """Return the latest refresh cycle, refreshing when stale or requested."""

    if refresh:
        return await dashboard.refresh()
    return await dashboard.current_state()


@router.get(
    "/balloons/{balloon_id}/flight-path",
    response_model=FlightPath,
    summary="Past and predicted path for one balloon",
)
async def get_flight_path(
    balloon_id: str,
    strategy: PredictionStrategy = Query(
        default=PredictionStrategy.WIND_DRIFT, description="Extrapolation strategy"
    ),
    steps: Optional[int] = Query(
        default=None, ge=1, le=500, description="Number of predicted points"
    ),
    dashboard: DashboardService = Depends(get_dashboard),
) -> FlightPath:
    """Thread the balloon's history across snapshots and extrapolate it."""

    flight_path = await dashboard.flight_path(balloon_id, strategy=strategy, steps=steps)
    if flight_path is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown balloon {balloon_id}",
        )

    logger.info(
        "Flight path computed: balloon=%s strategy=%s past=%s predicted=%s",
        balloon_id,
        strategy.value,
        len(flight_path.past),
        len(flight_path.predicted),
    )
    return flight_path


@router.get(
    "/history/{hour}",
    summary="Validated raw triples for one historical hour",
)
async def get_history_hour(
    hour: int = Path(..., ge=0, le=23, description="Hours before now"),
    feed: BalloonFeedIngestor = Depends(get_feed),
) -> list[list[Any]]:
    """Proxy one hour of the feed with invalid entries removed."""

    snapshot = await feed.fetch_hour(hour)
    return snapshot.entries
