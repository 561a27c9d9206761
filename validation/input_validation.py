"""
Input Validation Module

Validates request descriptors before they reach the matching engine.
"""

from numbers import Number

from shared_schema import RequestDescriptor


def validate_bounding_rectangle(bbox) -> dict:
    """
    Validate a bounding rectangle given as [west, south, east, north].

    Args:
        bbox: Sequence of four numbers in decimal degrees

    Returns:
        Dictionary with validation results and any errors
    """
    errors = []

    if not isinstance(bbox, (list, tuple)) or len(bbox) != 4:
        errors.append("Bounding rectangle must contain exactly four values")
    elif not all(isinstance(value, Number) and not isinstance(value, bool) for value in bbox):
        errors.append("Bounding rectangle values must be numeric")
    else:
        west, south, east, north = bbox
        if not (-180 <= west <= 180 and -180 <= east <= 180):
            errors.append("Bounding rectangle longitudes must be between -180 and 180 degrees")
        if not (-90 <= south <= 90 and -90 <= north <= 90):
            errors.append("Bounding rectangle latitudes must be between -90 and 90 degrees")
        elif south > north:
            errors.append("Bounding rectangle south edge must not be north of the north edge")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "bounding_rectangle": bbox
    }


def validate_request_descriptor(request: RequestDescriptor) -> dict:
    """
    Validate the parts of a request the matching engine relies on.

    Args:
        request: Request descriptor built from the client's parameters

    Returns:
        Dictionary with validation results and any errors
    """
    errors = []

    if not request.sources:
        errors.append("Request must reference at least one collection")

    for source in request.sources:
        if not isinstance(source.collection, str) or not source.collection.strip():
            errors.append("Collection identifiers must be non-empty strings")
            break

    if request.bounding_rectangle is not None:
        errors.extend(validate_bounding_rectangle(request.bounding_rectangle)["errors"])

    if request.max_results is not None and request.max_results < 0:
        errors.append("maxResults must not be negative")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "collections": request.collection_ids
    }
