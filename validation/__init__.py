"""
Validation

Catalog validation at load time and request validation before matching.
"""

from .catalog_validation import validate_catalog, validate_service_config
from .input_validation import validate_bounding_rectangle, validate_request_descriptor

__all__ = [
    'validate_catalog',
    'validate_service_config',
    'validate_bounding_rectangle',
    'validate_request_descriptor'
]
