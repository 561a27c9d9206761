"""
Services package for the data service router

Contains one invocation strategy per service type:
- argo: Argo workflow submission
- http: direct HTTP call
- noOp: direct download links when no service matches
"""

from errors import NotFoundError
from shared_schema import RequestDescriptor, ServiceDescriptor

from .argo_service import ArgoService
from .base_service import BaseService, get_max_synchronous_granules
from .http_service import HttpService
from .no_op_service import NoOpService

SERVICE_TYPES = {
    'argo': ArgoService,
    'http': HttpService,
    'noOp': NoOpService,
}


def build_service(config: ServiceDescriptor, operation: RequestDescriptor) -> BaseService:
    """
    Build the strategy object for invoking ``config`` on ``operation``.

    Raises:
        NotFoundError: If the service type has no strategy
    """
    service_class = SERVICE_TYPES.get(config.type.name)
    if service_class is None:
        raise NotFoundError(f'Could not find an appropriate service class for type "{config.type.name}"')
    return service_class(config, operation)


__all__ = [
    'ArgoService',
    'BaseService',
    'HttpService',
    'NoOpService',
    'SERVICE_TYPES',
    'build_service',
    'get_max_synchronous_granules'
]
