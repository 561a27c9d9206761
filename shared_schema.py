"""
Shared Data Schema for the Data Service Router

This module defines the data structures passed between the catalog loader,
the matching engine, and the service strategies. Service descriptors are
loaded once at startup and never modified in place; requests are built per
client call and may be annotated with the negotiated output format.
"""

import copy
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class SubsettingCapabilities:
    """Subsetting modes a service can perform"""
    variable: bool = False
    bbox: bool = False
    shape: bool = False


@dataclass(frozen=True)
class ServiceCapabilities:
    """Capabilities advertised by a configured service"""
    output_formats: Tuple[str, ...] = ()
    subsetting: SubsettingCapabilities = field(default_factory=SubsettingCapabilities)
    reprojection: bool = False


@dataclass(frozen=True)
class ServiceType:
    """Invocation strategy tag plus the strategy's own parameters"""
    name: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ServiceDescriptor:
    """A single entry of the service catalog"""

    name: str
    type: ServiceType
    collections: Tuple[str, ...] = ()
    capabilities: ServiceCapabilities = field(default_factory=ServiceCapabilities)
    maximum_sync_granules: Optional[int] = None
    maximum_async_granules: Optional[int] = None
    batch_size: Optional[int] = None
    message: Optional[str] = None

    def with_message(self, message: str) -> "ServiceDescriptor":
        """Return an independent copy of this descriptor carrying ``message``"""
        return replace(copy.deepcopy(self), message=message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "name": self.name,
            "type": {"name": self.type.name},
            "collections": list(self.collections),
            "capabilities": {
                "output_formats": list(self.capabilities.output_formats),
                "subsetting": {
                    "variable": self.capabilities.subsetting.variable,
                    "bbox": self.capabilities.subsetting.bbox,
                    "shape": self.capabilities.subsetting.shape,
                },
                "reprojection": self.capabilities.reprojection,
            },
            "maximum_sync_granules": self.maximum_sync_granules,
            "maximum_async_granules": self.maximum_async_granules,
        }


NO_OP_SERVICE_NAME = "noOpService"

# Placeholder returned when no configured service can handle a request
NO_OP_SERVICE = ServiceDescriptor(
    name=NO_OP_SERVICE_NAME,
    type=ServiceType(name="noOp"),
    capabilities=ServiceCapabilities(output_formats=("application/json",)),
)


def is_no_op(service: ServiceDescriptor) -> bool:
    return service.name == NO_OP_SERVICE_NAME


@dataclass
class Granule:
    """A single file belonging to a source collection"""
    id: str
    name: str
    url: str


@dataclass
class Source:
    """A collection referenced by a request, with optional variable selectors"""
    collection: str
    variables: List[Any] = field(default_factory=list)
    granules: List[Granule] = field(default_factory=list)


@dataclass
class RequestDescriptor:
    """
    A fully resolved data-transformation request.

    ``output_format`` is the client's explicit override. ``resolved_output_format``
    is filled in by the matching engine once a format has been negotiated.
    ``cmr_hits`` and ``max_results`` only feed warning messages.
    """

    sources: List[Source] = field(default_factory=list)
    bounding_rectangle: Optional[List[float]] = None  # [west, south, east, north]
    geojson: Optional[Any] = None
    crs: Optional[str] = None
    output_format: Optional[str] = None
    resolved_output_format: Optional[str] = None

    cmr_hits: int = 0
    max_results: Optional[int] = None

    request_id: Optional[str] = None
    user: Optional[str] = None
    callback: Optional[str] = None
    selected_collection_concept_id: Optional[str] = None
    num_collections_matching_short_name: int = 0

    def add_source(self, collection: str, variables: Optional[List[Any]] = None) -> Source:
        source = Source(collection=collection, variables=list(variables or []))
        self.sources.append(source)
        return source

    @property
    def collection_ids(self) -> List[str]:
        return [source.collection for source in self.sources]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for handing the operation to a backend service"""
        return {
            "request_id": self.request_id,
            "user": self.user,
            "callback": self.callback,
            "sources": [
                {
                    "collection": source.collection,
                    "variables": source.variables,
                    "granules": [asdict(granule) for granule in source.granules],
                }
                for source in self.sources
            ],
            "subset": {
                "bbox": self.bounding_rectangle,
                "shape": self.geojson,
            },
            "format": {
                "crs": self.crs,
                "mime": self.resolved_output_format or self.output_format,
            },
        }


@dataclass
class RequestContext:
    """Per-request information that is not part of the operation itself"""
    requested_mime_types: List[str] = field(default_factory=list)  # highest preference first
    request_id: Optional[str] = None


@dataclass(frozen=True)
class UnsupportedMatchSignal:
    """
    Produced when a filter step eliminates every candidate.

    Carries the request and the requirement descriptions applied so far,
    including the one that eliminated the last candidate.
    """
    request: RequestDescriptor
    requested_operations: Tuple[str, ...] = ()


@dataclass
class MatchResult:
    """The service chosen for a request"""
    service: ServiceDescriptor
    output_format: Optional[str] = None

    @property
    def message(self) -> Optional[str]:
        return self.service.message

    @property
    def is_no_op(self) -> bool:
        return is_no_op(self.service)
