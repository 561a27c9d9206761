"""
Filter Chain Executor

Narrows a list of candidate services down to the ones able to perform a
request. Each filter step receives the survivors of the previous step and
either returns a non-empty subset or an UnsupportedMatchSignal describing
every requirement applied so far, including the one that failed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from shared_schema import (
    RequestContext,
    RequestDescriptor,
    ServiceDescriptor,
    UnsupportedMatchSignal,
)
from matching import capabilities
from matching.content_negotiation import resolve_format, services_for_format
from matching.messages import OR, list_to_text

logger = logging.getLogger(__name__)


@dataclass
class FilterOutcome:
    """Result of a filter step or of a whole chain"""
    candidates: List[ServiceDescriptor] = field(default_factory=list)
    signal: Optional[UnsupportedMatchSignal] = None
    output_format: Optional[str] = None

    @property
    def eliminated(self) -> bool:
        return self.signal is not None


FilterStep = Callable[
    [RequestDescriptor, RequestContext, List[ServiceDescriptor], List[str]], FilterOutcome
]


def _outcome(
    request: RequestDescriptor,
    matches: List[ServiceDescriptor],
    requested_operations: List[str],
) -> FilterOutcome:
    if not matches:
        return FilterOutcome(signal=UnsupportedMatchSignal(request, tuple(requested_operations)))
    return FilterOutcome(candidates=matches)


def select_format(
    request: RequestDescriptor, context: RequestContext, services: Sequence[ServiceDescriptor]
) -> Optional[str]:
    """
    The output format to request: the explicit override if given, otherwise
    the negotiated format for the client's accepted types.
    """
    if request.output_format:
        return request.output_format
    mime_types = context.requested_mime_types if context else None
    if not mime_types:
        return None
    output_format, _ = resolve_format(mime_types, services)
    return output_format


def filter_collection_matches(request, context, services, requested_operations):
    matches = [service for service in services if capabilities.supports_collections(service, request)]
    return _outcome(request, matches, requested_operations)


def filter_variable_subsetting_matches(request, context, services, requested_operations):
    matches = services
    if capabilities.needs_variable_subsetting(request):
        requested_operations.append("variable subsetting")
        matches = [service for service in services if capabilities.supports_variable_subsetting(service)]
    return _outcome(request, matches, requested_operations)


def filter_spatial_subsetting_matches(request, context, services, requested_operations):
    matches = services
    if capabilities.needs_spatial_subsetting(request):
        requested_operations.append("spatial subsetting")
        matches = [service for service in services if capabilities.supports_spatial_subsetting(service)]
    return _outcome(request, matches, requested_operations)


def filter_shapefile_subsetting_matches(request, context, services, requested_operations):
    matches = services
    if capabilities.needs_shapefile_subsetting(request):
        requested_operations.append("shapefile subsetting")
        matches = [service for service in services if capabilities.supports_shapefile_subsetting(service)]
    return _outcome(request, matches, requested_operations)


def filter_reprojection_matches(request, context, services, requested_operations):
    matches = services
    if capabilities.needs_reprojection(request):
        requested_operations.append("reprojection")
        matches = [service for service in services if capabilities.supports_reprojection(service)]
    return _outcome(request, matches, requested_operations)


def filter_output_format_matches(request, context, services, requested_operations):
    if not capabilities.needs_reformatting(request, context):
        return _outcome(request, services, requested_operations)

    formats = [request.output_format] if request.output_format else context.requested_mime_types
    requested_operations.append(f"reformatting to {list_to_text(formats, OR)}")

    matches = []
    output_format = select_format(request, context, services)
    if output_format:
        matches = services_for_format(output_format, services)
    return _outcome(request, matches, requested_operations)


ALL_FILTERS: List[FilterStep] = [
    filter_collection_matches,
    filter_variable_subsetting_matches,
    filter_spatial_subsetting_matches,
    filter_shapefile_subsetting_matches,
    filter_reprojection_matches,
    # Must run last: it picks a format from the services still standing, so
    # running it earlier could drop a service another accepted type would allow
    filter_output_format_matches,
]

# Spatial and shapefile subsetting are left out for best-effort matching
REQUIRED_FILTERS: List[FilterStep] = [
    filter_collection_matches,
    filter_variable_subsetting_matches,
    filter_reprojection_matches,
    filter_output_format_matches,
]


def run_filter_chain(
    request: RequestDescriptor,
    context: RequestContext,
    services: Sequence[ServiceDescriptor],
    filters: Sequence[FilterStep] = ALL_FILTERS,
) -> FilterOutcome:
    """
    Apply ``filters`` in order to ``services``.

    On success the resolved output format is recorded on
    ``request.resolved_output_format`` and the candidates are narrowed to the
    services producing it; the first candidate is the preferred match.
    """
    context = context or RequestContext()
    requested_operations: List[str] = []
    matches = list(services)

    for filter_step in filters:
        outcome = filter_step(request, context, matches, requested_operations)
        if outcome.eliminated:
            logger.debug(
                f"{filter_step.__name__} eliminated all services for {request.collection_ids}"
            )
            return outcome
        matches = outcome.candidates

    output_format = select_format(request, context, matches)
    if output_format:
        request.resolved_output_format = output_format
        matches = services_for_format(output_format, matches)
        if not matches:
            return _outcome(request, matches, requested_operations)

    return FilterOutcome(candidates=matches, output_format=output_format)
