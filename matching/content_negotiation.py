"""
Content Negotiation

Media-type wildcard matching between the types a client accepts and the
output formats a service can produce.
"""

from typing import List, Optional, Sequence, Tuple

from shared_schema import ServiceDescriptor

WILDCARD = "*"


def parse_mime_type(value: str) -> Tuple[str, str]:
    """
    Split a media type into (type, subtype), dropping parameters.

    'image/PNG; q=0.8' -> ('image', 'png'); a bare '*' is treated as '*/*'.
    """
    base = (value or "").split(";", 1)[0].strip().lower()
    if base == WILDCARD:
        return WILDCARD, WILDCARD
    main_type, _, subtype = base.partition("/")
    return main_type.strip(), subtype.strip()


def allows_any(pattern: str) -> bool:
    """True if the pattern accepts every media type"""
    return parse_mime_type(pattern) == (WILDCARD, WILDCARD)


def accepts(pattern: str, media_type: str) -> bool:
    """True if ``media_type`` satisfies the (possibly wildcarded) ``pattern``"""
    pattern_type, pattern_subtype = parse_mime_type(pattern)
    main_type, subtype = parse_mime_type(media_type)

    if pattern_type == WILDCARD:
        return True
    if pattern_type != main_type:
        return False
    return pattern_subtype == WILDCARD or pattern_subtype == subtype


def is_mime_type_accepted(media_type: str, pattern: str) -> bool:
    return accepts(pattern, media_type)


def services_for_format(pattern: str, services: Sequence[ServiceDescriptor]) -> List[ServiceDescriptor]:
    """Services able to produce at least one format matching ``pattern``, in catalog order"""
    return [
        service for service in services
        if any(is_mime_type_accepted(fmt, pattern) for fmt in service.capabilities.output_formats)
    ]


def first_accepted_format(pattern: str, service: ServiceDescriptor) -> Optional[str]:
    for fmt in service.capabilities.output_formats:
        if is_mime_type_accepted(fmt, pattern):
            return fmt
    return None


def resolve_format(
    patterns: Sequence[str], services: Sequence[ServiceDescriptor]
) -> Tuple[Optional[str], List[ServiceDescriptor]]:
    """
    Pick a concrete output format for the client's accepted patterns.

    Client preference order decides which pattern is used. Within that pattern
    the first matching service in catalog order decides the concrete format,
    which is how wildcards like 'image/*' become a real format to request.

    Returns:
        (format, services matching the winning pattern), or (None, []) if no
        pattern is satisfied by any service
    """
    for pattern in patterns or []:
        matching = services_for_format(pattern, services)
        if matching:
            return first_accepted_format(pattern, matching[0]), matching
    return None, []
