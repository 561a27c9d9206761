"""
Service Router API

Exposes the service catalog and a dry-run matching endpoint that reports
which configured service would handle a request, without invoking it.
"""

import os
import uuid
import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, Field, field_validator

from errors import HttpError
from pipeline import DataServiceRouter
from shared_schema import RequestContext, RequestDescriptor
from validation import validate_bounding_rectangle


# Configure structured logging
class StructuredFormatter(logging.Formatter):
    """
    Structured JSON logging formatter for infrastructure integration.
    """

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": "service-router",
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        # Add request ID if available
        if hasattr(record, 'request_id'):
            log_entry["request_id"] = record.request_id

        if hasattr(record, 'service_name'):
            log_entry["service_name"] = record.service_name

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

if not logger.handlers:  # Avoid duplicate handlers
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)


def generate_request_id() -> str:
    """Generate unique request ID for tracing across systems"""
    return f"req_{uuid.uuid4().hex[:12]}"


def get_request_id_from_headers(request: Request) -> str:
    """Get or generate request ID for tracking"""
    return request.headers.get("x-request-id") or request.headers.get("x-trace-id") or generate_request_id()


def parse_accept_header(value: Optional[str]) -> List[str]:
    """Split an Accept header into media types, highest q-value first, header order kept for ties"""
    if not value:
        return []

    entries = []
    for position, part in enumerate(value.split(",")):
        media_type, *params = [piece.strip() for piece in part.split(";")]
        if not media_type:
            continue
        quality = 1.0
        for param in params:
            key, _, raw = param.partition("=")
            if key.strip() == "q":
                try:
                    quality = float(raw)
                except ValueError:
                    quality = 0.0
        if quality > 0:
            entries.append((-quality, position, media_type))

    return [media_type for _, _, media_type in sorted(entries)]


# Request / Response Models
class SourceModel(BaseModel):
    collection: str = Field(..., min_length=1, description="CMR collection concept ID", example="C1233800302-EEDTEST")
    variables: List[str] = Field(default_factory=list, description="Variables to subset", example=["red_var"])


class MatchRequest(BaseModel):
    """Request model for dry-run service matching"""

    sources: List[SourceModel] = Field(..., min_length=1, description="Collections referenced by the request")
    bounding_rectangle: Optional[List[float]] = Field(
        default=None,
        description="Spatial subset as [west, south, east, north]",
        example=[-130, -45, 130, 45]
    )
    geojson: Optional[Dict[str, Any]] = Field(default=None, description="Shapefile subset as GeoJSON")
    crs: Optional[str] = Field(default=None, description="Target coordinate reference system", example="EPSG:4326")
    output_format: Optional[str] = Field(default=None, description="Requested output media type", example="image/png")
    max_results: Optional[int] = Field(default=None, ge=0, description="Maximum granules to process")
    cmr_hits: int = Field(default=0, ge=0, description="Granules identified by the CMR query")

    @field_validator('bounding_rectangle')
    @classmethod
    def validate_bbox(cls, v):
        """Bounding rectangle validation"""
        if v is not None:
            validation = validate_bounding_rectangle(v)
            if not validation["valid"]:
                raise ValueError("; ".join(validation["errors"]))
        return v

    def to_descriptor(self, request_id: str) -> RequestDescriptor:
        descriptor = RequestDescriptor(
            bounding_rectangle=self.bounding_rectangle,
            geojson=self.geojson,
            crs=self.crs,
            output_format=self.output_format,
            max_results=self.max_results,
            cmr_hits=self.cmr_hits,
            request_id=request_id,
        )
        for source in self.sources:
            descriptor.add_source(source.collection, source.variables)
        return descriptor


class MatchResponse(BaseModel):
    """Service chosen for a request"""
    request_id: str = Field(description="Unique request identifier for tracing", example="req_a1b2c3d4e5f6")
    service: str = Field(description="Name of the chosen service", example="harmony/gdal")
    service_type: str = Field(description="Invocation strategy of the chosen service", example="argo")
    output_format: Optional[str] = Field(default=None, description="Format that will be requested", example="image/png")
    message: Optional[str] = Field(default=None, description="Explanation shown to the user")
    warning: Optional[str] = Field(default=None, description="Granule limit or collection warnings")
    synchronous: bool = Field(description="Whether the request can be processed synchronously")


class HealthResponse(BaseModel):
    """Health check response model"""
    request_id: str
    status: str
    service: str
    timestamp: str
    version: str


app = FastAPI(
    title="Data Service Router",
    description="Chooses the backend service that will transform a data request.",
    version="1.0.0",
)

_router: Optional[DataServiceRouter] = None


def get_router() -> DataServiceRouter:
    """Router built from the configured catalog, created on first use"""
    global _router
    if _router is None:
        _router = DataServiceRouter()
    return _router


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Returns the current health status of the router."""
    return {
        "request_id": get_request_id_from_headers(request),
        "status": "healthy",
        "service": "service-router",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": app.version
    }


@app.get("/services", tags=["Catalog"])
async def list_services(router: DataServiceRouter = Depends(get_router)):
    """Lists the configured services in priority order."""
    return {"services": [service.to_dict() for service in router.services]}


@app.post("/match", response_model=MatchResponse, tags=["Matching"])
async def match_service(match_request: MatchRequest, request: Request, router: DataServiceRouter = Depends(get_router)):
    """
    **Dry-run Service Matching**

    Reports which configured service would perform the request. Accepted
    output types are taken from the ``Accept`` header when no explicit
    ``output_format`` is given.
    """
    request_id = get_request_id_from_headers(request)
    descriptor = match_request.to_descriptor(request_id)
    context = RequestContext(
        requested_mime_types=parse_accept_header(request.headers.get("accept")),
        request_id=request_id,
    )

    try:
        result, service = router.route(descriptor, context)
    except HttpError as e:
        logger.warning(f"Match request rejected: {e.message}", extra={"request_id": request_id})
        raise HTTPException(status_code=e.code, detail=e.message)

    logger.info(
        f"Matched request to {result.service.name}",
        extra={"request_id": request_id, "service_name": result.service.name}
    )

    return {
        "request_id": request_id,
        "service": result.service.name,
        "service_type": result.service.type.name,
        "output_format": result.output_format,
        "message": service.message,
        "warning": service.warning_message,
        "synchronous": service.is_synchronous
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
