"""FastAPI application exposing twilight search and solar zenith angles."""

from __future__ import annotations

import json
import logging
import math
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from geolight import __version__
from geolight.config import load_settings
from geolight.solar import solar_state, solar_zenith
from geolight.twilights import LightSample, find_twilights
from models import (
    ErrorResponse,
    HealthResponse,
    TwilightModel,
    TwilightRequest,
    TwilightResponse,
    ZenithQueryParams,
    ZenithResponse,
)

SETTINGS = load_settings()

logging.basicConfig(level=SETTINGS.log_level, format="%(message)s")
LOGGER = logging.getLogger("geolight-api")

APP_DESCRIPTION = (
    "Twilight extraction from geolocator light records and NOAA solar geometry"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    LOGGER.info(
        json.dumps(
            {
                "event": "startup",
                "version": __version__,
                "max_samples": SETTINGS.max_samples,
                "cors_origins": list(SETTINGS.cors_origins),
            }
        )
    )
    yield


app = FastAPI(
    title="Geolight API",
    description=APP_DESCRIPTION,
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _format_utc(dt: datetime) -> str:
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message, details=details)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    return _error_response(422, "validation_error", ", ".join(messages), messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, version=__version__, max_samples=SETTINGS.max_samples)


@app.get(
    "/zenith",
    response_model=ZenithResponse,
    responses={422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def zenith_endpoint(params: Annotated[ZenithQueryParams, Query()]) -> ZenithResponse:
    state = solar_state(params.instant)
    zenith = solar_zenith(state, params.lon, params.lat, params.refraction)

    return ZenithResponse(
        instant_utc=_format_utc(params.instant),
        latitude=params.lat,
        longitude=params.lon,
        refraction=params.refraction,
        zenith=zenith,
        solar_time=state.solar_time,
        equation_of_time=state.equation_of_time,
        declination=math.degrees(math.atan2(state.sin_declination, state.cos_declination)),
    )


@app.post(
    "/twilights",
    response_model=TwilightResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def twilights_endpoint(body: TwilightRequest) -> TwilightResponse:
    if len(body.light) > SETTINGS.max_samples:
        raise HTTPException(
            status_code=413,
            detail=f"light record exceeds {SETTINGS.max_samples} samples",
        )

    start_time = time.perf_counter()
    try:
        events = find_twilights(
            [LightSample(sample.date, sample.obs) for sample in body.light],
            threshold=body.threshold,
            include=body.include,
            exclude=body.exclude,
            extend=body.extend,
            dark_min=body.dark_min,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    duration_ms = (time.perf_counter() - start_time) * 1000.0

    response = TwilightResponse(
        count=len(events),
        twilights=[
            TwilightModel(twilight=_format_utc(event.instant), rise=event.is_sunrise)
            for event in events
        ],
    )

    LOGGER.info(
        json.dumps(
            {
                "event": "twilights",
                "samples": len(body.light),
                "threshold": body.threshold,
                "include": len(body.include),
                "exclude": len(body.exclude),
                "twilights": response.count,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response
