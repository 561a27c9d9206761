"""
Service Selection

Chooses the configured service for a request. A strict pass enforces every
capability the request needs. When that fails for a request mixing spatial
constraints with other operations, a best-effort pass ignores the spatial
constraints and the chosen service is annotated with a warning.
"""

import logging
from typing import Optional, Sequence

from shared_schema import (
    NO_OP_SERVICE,
    MatchResult,
    RequestContext,
    RequestDescriptor,
    ServiceDescriptor,
)
from matching.capabilities import needs_hard_axis, needs_soft_axis
from matching.filter_chain import ALL_FILTERS, REQUIRED_FILTERS, FilterStep, run_filter_chain
from matching.messages import BEST_EFFORT_MESSAGE, unsupported_combination_message

logger = logging.getLogger(__name__)


def permits_degraded_match(request: RequestDescriptor, context: RequestContext) -> bool:
    """
    True if a best-effort match may be used: the request needs spatial or
    shapefile subsetting together with at least one other operation.
    """
    return needs_soft_axis(request) and needs_hard_axis(request, context)


def filter_service_configs(
    request: RequestDescriptor,
    context: RequestContext,
    services: Sequence[ServiceDescriptor],
    filters: Sequence[FilterStep],
) -> MatchResult:
    """Run one pass of the filter chain and turn its outcome into a MatchResult"""
    outcome = run_filter_chain(request, context, services, filters)
    if outcome.eliminated:
        message = unsupported_combination_message(outcome.signal)
        logger.info(f"Returning download links because {message}.")
        return MatchResult(service=NO_OP_SERVICE.with_message(message))
    return MatchResult(service=outcome.candidates[0], output_format=outcome.output_format)


def choose_service_config(
    request: RequestDescriptor,
    context: Optional[RequestContext],
    services: Sequence[ServiceDescriptor],
) -> MatchResult:
    """
    Return the service to use for a request.

    Args:
        request: The operation to perform. ``resolved_output_format`` is set
            when a format is negotiated.
        context: Accepted media types for the request
        services: The service catalog, in priority order

    Returns:
        MatchResult for the first service able to perform the request, or for
        the no-op service with a message explaining why none could
    """
    context = context or RequestContext()

    result = filter_service_configs(request, context, services, ALL_FILTERS)
    if not result.is_no_op or not permits_degraded_match(request, context):
        return result

    best_effort = filter_service_configs(request, context, services, REQUIRED_FILTERS)
    if best_effort.is_no_op:
        return result

    logger.info(
        f"Using {best_effort.service.name} as a best-effort match; spatial constraints will not be applied"
    )
    return MatchResult(
        service=best_effort.service.with_message(BEST_EFFORT_MESSAGE),
        output_format=best_effort.output_format,
    )


def is_collection_supported(collection_id: str, services: Sequence[ServiceDescriptor]) -> bool:
    """True if any configured service can operate on the collection"""
    return any(collection_id in service.collections for service in services)
