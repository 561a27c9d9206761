"""
Diagnostic message construction for unmatched requests.
"""

from typing import Sequence

from shared_schema import UnsupportedMatchSignal

AND = "and"
OR = "or"

BEST_EFFORT_MESSAGE = "Data in output files may extend outside the spatial bounds you requested."


def list_to_text(items: Sequence[str], conjunction: str = AND) -> str:
    """
    Join items into natural language.

    Examples:
        list_to_text(['a']) -> 'a'
        list_to_text(['a', 'b']) -> 'a and b'
        list_to_text(['a', 'b', 'c'], OR) -> 'a, b, or c'
    """
    items = [str(item) for item in items or []]
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} {conjunction} {items[1]}"
    return f"{', '.join(items[:-1])}, {conjunction} {items[-1]}"


def unsupported_combination_message(signal: UnsupportedMatchSignal) -> str:
    """Describe why no service could satisfy the request"""
    collections = list_to_text(signal.request.collection_ids)
    if not signal.requested_operations:
        return f"no operations can be performed on {collections}"
    return (
        f"the requested combination of operations: {list_to_text(signal.requested_operations)}"
        f" on {collections} is unsupported"
    )
