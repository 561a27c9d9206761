"""
Capability Predicates

Pairs of predicates per axis: what a request needs, and what a configured
service supports. Spatial and shapefile subsetting are the "soft" axes that
may be dropped for a best-effort match; the others are "hard".
"""

from shared_schema import RequestContext, RequestDescriptor, ServiceDescriptor
from matching.content_negotiation import allows_any


def needs_variable_subsetting(request: RequestDescriptor) -> bool:
    return any(source.variables for source in request.sources)


def needs_spatial_subsetting(request: RequestDescriptor) -> bool:
    return request.bounding_rectangle is not None


def needs_shapefile_subsetting(request: RequestDescriptor) -> bool:
    return request.geojson is not None


def needs_reprojection(request: RequestDescriptor) -> bool:
    return bool(request.crs)


def needs_reformatting(request: RequestDescriptor, context: RequestContext) -> bool:
    """
    True if the request names an output format, or the client sent accepted
    types without any '*/*' among them.
    """
    if request.output_format:
        return True

    mime_types = context.requested_mime_types if context else None
    if mime_types:
        return not any(allows_any(mime_type) for mime_type in mime_types)

    return False


def needs_soft_axis(request: RequestDescriptor) -> bool:
    return needs_spatial_subsetting(request) or needs_shapefile_subsetting(request)


def needs_hard_axis(request: RequestDescriptor, context: RequestContext) -> bool:
    return (
        needs_variable_subsetting(request)
        or needs_reprojection(request)
        or needs_reformatting(request, context)
    )


def supports_variable_subsetting(service: ServiceDescriptor) -> bool:
    return service.capabilities.subsetting.variable


def supports_spatial_subsetting(service: ServiceDescriptor) -> bool:
    return service.capabilities.subsetting.bbox


def supports_shapefile_subsetting(service: ServiceDescriptor) -> bool:
    return service.capabilities.subsetting.shape


def supports_reprojection(service: ServiceDescriptor) -> bool:
    return service.capabilities.reprojection


def supports_collections(service: ServiceDescriptor, request: RequestDescriptor) -> bool:
    """True if the service is configured for every collection in the request"""
    return all(source.collection in service.collections for source in request.sources)
