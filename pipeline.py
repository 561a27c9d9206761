"""
Data Service Router

Routes data-transformation requests to the configured backend service best
able to perform them. The catalog is loaded and validated once; each call
to ``route`` validates the request, chooses a service, and builds the
strategy used to invoke it.
"""

import logging
from typing import List, Optional, Tuple

from catalog import get_service_configs
from config import LOG_LEVEL
from errors import RequestValidationError
from matching import choose_service_config, is_collection_supported
from services import BaseService, build_service
from shared_schema import MatchResult, RequestContext, RequestDescriptor, ServiceDescriptor
from validation import validate_catalog, validate_request_descriptor

# Initialize logging system
logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)


class DataServiceRouter:
    """
    Service router

    Holds the read-only service catalog and matches requests against it.
    Requests are never shared between calls; the catalog always is.
    """

    def __init__(self, services: Optional[List[ServiceDescriptor]] = None):
        """
        Initialize the router with a service catalog.

        Args:
            services: Catalog to use (loads the configured catalog file if None)
        """
        if services is None:
            services = get_service_configs()
        else:
            validate_catalog(services)

        self.services = tuple(services)
        logger.info(f"Router initialized - {len(self.services)} services: {', '.join(s.name for s in self.services)}")

    def supports_collection(self, collection_id: str) -> bool:
        return is_collection_supported(collection_id, self.services)

    def match(self, request: RequestDescriptor, context: Optional[RequestContext] = None) -> MatchResult:
        """
        Choose the service for a request without invoking it

        Raises:
            RequestValidationError: If the request is malformed
        """
        validation = validate_request_descriptor(request)
        if not validation["valid"]:
            raise RequestValidationError("; ".join(validation["errors"]))

        result = choose_service_config(request, context, self.services)
        logger.info(
            f"Matched request {request.request_id} for {', '.join(request.collection_ids)} "
            f"to {result.service.name} (format: {result.output_format})"
        )
        return result

    def route(
        self, request: RequestDescriptor, context: Optional[RequestContext] = None
    ) -> Tuple[MatchResult, BaseService]:
        """
        Choose the service for a request and build its invocation strategy.

        Example:
            router = DataServiceRouter()
            request = RequestDescriptor()
            request.add_source('C1233800302-EEDTEST')
            request.output_format = 'image/png'
            result, service = router.route(request)
        """
        result = self.match(request, context)
        return result, build_service(result.service, request)
