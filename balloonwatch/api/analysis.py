"""Stateless danger classification and trajectory prediction endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query

from balloonwatch.core import classify, location_danger, predict
from balloonwatch.models import ClassifyRequest, DangerVerdict, PredictRequest, Prediction

router = APIRouter(prefix="/api/v1", tags=["analysis"])

logger = logging.getLogger("balloonwatch.api.analysis")


@router.post(
    "/danger/classify",
    response_model=DangerVerdict,
    summary="Classify weather danger",
)
async def classify_weather(request: ClassifyRequest) -> DangerVerdict:
    """Evaluate a weather sample against the danger thresholds."""

    return classify(request.weather, request.position)


@router.get(
    "/danger/location",
    response_model=DangerVerdict,
    summary="Classify location danger",
)
async def classify_location(
    lat: float = Query(..., ge=-90, le=90, description="Latitude in decimal degrees"),
    lon: float = Query(..., ge=-180, le=180, description="Longitude in decimal degrees"),
    alt: float = Query(default=0.0, description="Altitude in kilometers"),
) -> DangerVerdict:
    """Check the polar geofence, independent of weather."""

    return location_danger(lat, lon, alt)


@router.post(
    "/trajectory/predict",
    response_model=Prediction,
    summary="Extrapolate a trajectory",
)
async def predict_trajectory(request: PredictRequest) -> Prediction:
    """Run the requested strategy; unmet preconditions yield a reason, not an error."""

    prediction = predict(
        request.strategy,
        path=request.path,
        position=request.position,
        weather=request.weather,
        steps=request.steps,
    )
    if prediction.unavailable_reason:
        logger.info(
            "Prediction unavailable: strategy=%s reason=%s",
            request.strategy.value,
            prediction.unavailable_reason,
        )
    return prediction
