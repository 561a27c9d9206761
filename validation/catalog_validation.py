"""
Catalog Validation Module

Validates service descriptors once, when the catalog is loaded. Problems
that make the catalog unusable raise ConfigurationError; questionable but
workable settings are logged as warnings.
"""

import logging
from typing import Any, Dict, List

from config import MAX_GRANULE_LIMIT
from errors import ConfigurationError
from shared_schema import ServiceDescriptor

logger = logging.getLogger(__name__)


def validate_service_config(service: ServiceDescriptor) -> Dict[str, Any]:
    """
    Check a single service descriptor.

    Args:
        service: Descriptor loaded from the catalog

    Returns:
        Dictionary with validation results and any warnings
    """
    warnings = []

    value = service.maximum_async_granules or 0
    if value > MAX_GRANULE_LIMIT:
        warning = (
            f"Service {service.name} attempting to allow more than the max allowed granules in a request. "
            f"Configured to use {service.maximum_async_granules}, but will be limited to {MAX_GRANULE_LIMIT}"
        )
        logger.warning(warning)
        warnings.append(warning)

    if not service.collections:
        warnings.append(f"Service {service.name} is not configured for any collections")

    return {
        "valid": True,
        "warnings": warnings,
        "service": service.name
    }


def validate_catalog(services: List[ServiceDescriptor]) -> List[Dict[str, Any]]:
    """
    Validate the whole catalog.

    Raises:
        ConfigurationError: If the catalog is empty or service names repeat
    """
    if not services:
        raise ConfigurationError("The service catalog does not contain any enabled services")

    seen = set()
    for service in services:
        if service.name in seen:
            raise ConfigurationError(f"Duplicate service name in catalog: {service.name}")
        seen.add(service.name)

    return [validate_service_config(service) for service in services]
