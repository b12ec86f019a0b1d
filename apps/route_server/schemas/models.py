"""Pydantic models for the bin route server."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from binroute.routing import Stop


class LatLng(BaseModel):
    """Simple latitude/longitude container."""

    lat: float = Field(..., description="Latitude in decimal degrees")
    lng: float = Field(..., description="Longitude in decimal degrees")


class OptimizeRouteRequest(BaseModel):
    area_id: Optional[str] = Field(
        default=None,
        alias="areaId",
        description="Only route bins in this area; all bins when omitted",
    )

    model_config = {"populate_by_name": True}

    @field_validator("area_id")
    @classmethod
    def _blank_means_all(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class RouteStop(BaseModel):
    """One numbered stop as exposed to clients."""

    order: int = Field(..., ge=1)
    id: str
    location: Optional[str] = None
    category: Optional[str] = None
    latitude: float
    longitude: float
    group_id: Optional[str] = Field(default=None, alias="groupId")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_stop(cls, stop: Stop) -> "RouteStop":
        return cls(
            order=stop.order,
            id=stop.id,
            location=stop.location,
            category=stop.category,
            latitude=stop.latitude,
            longitude=stop.longitude,
            group_id=stop.group_id,
        )


class OptimizeRouteResponse(BaseModel):
    optimized_route: List[RouteStop] = Field(default_factory=list, alias="optimizedRoute")
    total_bins: int = Field(0, alias="totalBins")
    area_id: str = Field("all", alias="areaId")
    total_distance: float = Field(0.0, alias="totalDistance")
    sequence_method: Optional[str] = Field(default=None, alias="sequenceMethod")
    message: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class RoutePathPoint(BaseModel):
    lat: float
    lng: float


class RouteWidgetStop(BaseModel):
    order: int
    id: str
    lat: float
    lng: float
    label: str
    category: Optional[str] = None
