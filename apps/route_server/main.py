"""FastAPI route server exposing bin route optimisation."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from binroute.routing import (
    RoutePlanningError,
    RoutingSettings,
    Stop,
    screen_points,
    format_reason,
    plan_route,
)
from binroute.tools import ConfigLoader

from .schemas.models import (
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    RoutePathPoint,
    RouteStop,
    RouteWidgetStop,
)
from .tools.points import PointStoreError, StoreSettings, load_points

logger = logging.getLogger(__name__)

NO_BINS_MESSAGE = "No bins found for the specified area"
NO_VALID_BINS_MESSAGE = "No bins with valid coordinates found"

app = FastAPI(title="Bin Route Server", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> Dict[str, str]:
    return {"status": "ok"}


def _load_settings() -> Tuple[RoutingSettings, StoreSettings]:
    try:
        profile = ConfigLoader.load_default_or_env_profile()
        return RoutingSettings.from_profile(profile), StoreSettings.from_profile(profile)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Invalid routing profile: %s", exc)
        raise HTTPException(status_code=500, detail=f"Invalid routing profile: {exc}") from exc


def _route_center(stops: List[Stop]) -> Optional[Dict[str, float]]:
    if not stops:
        return None
    lat = sum(stop.latitude for stop in stops) / len(stops)
    lng = sum(stop.longitude for stop in stops) / len(stops)
    return {"lat": lat, "lng": lng}


def _route_widget(stops: List[Stop]) -> Dict[str, Any]:
    total = len(stops)
    return {
        "widget": "geo.routePlayback",
        "props": {
            "center": _route_center(stops),
            "path": [RoutePathPoint(lat=s.latitude, lng=s.longitude).model_dump() for s in stops],
            "stops": [
                RouteWidgetStop(
                    order=s.order,
                    id=s.id,
                    lat=s.latitude,
                    lng=s.longitude,
                    label=format_reason(s, total),
                    category=s.category,
                ).model_dump(exclude_none=True)
                for s in stops
            ],
        },
        "assetsBaseUrl": "/assets",
    }


def _payload(response: OptimizeRouteResponse, stops: List[Stop]) -> Dict[str, Any]:
    payload = response.model_dump(by_alias=True)
    for stop in payload["optimizedRoute"]:
        if stop["groupId"] is None:
            del stop["groupId"]
    if payload["message"] is None:
        del payload["message"]
    payload["_meta"] = {"openai": {"outputTemplate": _route_widget(stops)}}
    return payload


@app.post("/routes/optimize")
async def optimize_routes_action(request: OptimizeRouteRequest) -> Dict[str, Any]:
    routing_settings, store_settings = _load_settings()
    area_label = request.area_id or "all"

    try:
        records = await load_points(request.area_id, store_settings)
    except PointStoreError as exc:
        logger.error("Error loading bins for area %s: %s", area_label, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    if not records:
        return _payload(OptimizeRouteResponse(area_id=area_label, message=NO_BINS_MESSAGE), [])

    eligible, report = await run_in_threadpool(screen_points, records)
    if not eligible:
        return _payload(OptimizeRouteResponse(area_id=area_label, message=NO_VALID_BINS_MESSAGE), [])

    # Tour construction is CPU-bound; keep it off the event loop.
    try:
        result = await run_in_threadpool(plan_route, eligible, routing_settings)
    except RoutePlanningError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    warnings = report.messages("bin") + result.warnings

    response = OptimizeRouteResponse(
        optimized_route=[RouteStop.from_stop(stop) for stop in result.stops],
        total_bins=result.num_stops,
        area_id=area_label,
        total_distance=result.total_distance,
        sequence_method=result.sequence_method,
        warnings=warnings,
    )
    return _payload(response, result.stops)


__all__ = ["app"]
