"""
Matching package for the data service router

Decides which configured service handles a request:
- Capability predicates per operation axis
- Content negotiation for output formats
- Ordered filter chain with best-effort fallback
- Diagnostic messages when no service matches
"""

from .selection import choose_service_config, is_collection_supported, permits_degraded_match
from .messages import BEST_EFFORT_MESSAGE, list_to_text, unsupported_combination_message

__all__ = [
    'choose_service_config',
    'is_collection_supported',
    'permits_degraded_match',
    'BEST_EFFORT_MESSAGE',
    'list_to_text',
    'unsupported_combination_message'
]
