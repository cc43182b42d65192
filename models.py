"""Pydantic models for API requests and responses."""

from __future__ import annotations

from typing import List, Optional

from pydantic import AwareDatetime, BaseModel, Field


class ZenithQueryParams(BaseModel):
    """Validated query parameters for the ``/zenith`` endpoint."""

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    instant: AwareDatetime = Field(..., description="Instant (ISO-8601 with offset)")
    refraction: bool = Field(True, description="Apply atmospheric refraction")


class ZenithResponse(BaseModel):
    """Solar zenith angle and the solar state it was derived from."""

    ok: bool = True
    instant_utc: str = Field(..., description="Requested instant in UTC (ISO-8601)")
    latitude: float
    longitude: float
    refraction: bool
    zenith: float = Field(..., description="Solar zenith angle in degrees")
    solar_time: float = Field(..., description="Solar time in degrees")
    equation_of_time: float = Field(..., description="Equation of time in minutes")
    declination: float = Field(..., description="Solar declination in degrees")


class LightSampleModel(BaseModel):
    date: AwareDatetime = Field(..., description="Sample time")
    obs: float = Field(..., description="Recorded light level")


class TwilightRequest(BaseModel):
    """Body of the ``/twilights`` endpoint."""

    light: List[LightSampleModel] = Field(..., min_length=2)
    threshold: float = Field(
        ..., allow_inf_nan=False, description="Light level that defines twilight"
    )
    include: List[AwareDatetime] = Field(..., description="Times known to fall in nights")
    exclude: List[AwareDatetime] = Field(default_factory=list)
    extend: float = Field(0.0, ge=0.0, description="Tolerance on 24h spacing, minutes")
    dark_min: float = Field(0.0, ge=0.0, description="Minimum darkness, minutes")


class TwilightModel(BaseModel):
    twilight: str = Field(..., description="Twilight time in UTC (ISO-8601)")
    rise: bool = Field(..., description="True for sunrise")


class TwilightResponse(BaseModel):
    ok: bool = True
    count: int
    twilights: List[TwilightModel]


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    version: str
    max_samples: int


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
    details: Optional[List[str]] = None
