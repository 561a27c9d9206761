"""
Base Service

Common behaviour for the strategies that carry out a matched request:
granule limits, user-facing warnings, and invocation logging.
"""

import logging
from typing import Any, Dict, Optional

from config import MAX_GRANULE_LIMIT, MAX_SYNCHRONOUS_GRANULES
from shared_schema import RequestDescriptor, ServiceDescriptor

logger = logging.getLogger(__name__)


def get_max_synchronous_granules(config: ServiceDescriptor) -> int:
    """
    The most granules a service may process synchronously.

    Uses the service's own ``maximum_sync_granules`` when configured (zero is
    a valid setting), otherwise the system default, never exceeding the
    system-wide granule limit.
    """
    limit = config.maximum_sync_granules
    if limit is None:
        limit = MAX_SYNCHRONOUS_GRANULES
    return min(MAX_GRANULE_LIMIT, limit)


class BaseService:
    """
    Strategy for invoking a configured service on a request

    Subclasses implement ``_run``.
    """

    def __init__(self, config: ServiceDescriptor, operation: RequestDescriptor):
        self.config = config
        self.operation = operation
        self.params: Dict[str, Any] = dict(config.type.params)

    @property
    def message(self) -> Optional[str]:
        return self.config.message

    @property
    def num_granules(self) -> int:
        """Granules that will actually be processed"""
        limit = MAX_GRANULE_LIMIT
        if self.operation.max_results is not None:
            limit = min(limit, self.operation.max_results)
        return min(self.operation.cmr_hits, limit)

    @property
    def is_synchronous(self) -> bool:
        return self.num_granules <= get_max_synchronous_granules(self.config)

    def _short_name_warning(self) -> Optional[str]:
        count = self.operation.num_collections_matching_short_name
        if count <= 1:
            return None
        return (
            f"There were {count} collections that matched the provided short name. "
            f"{self.operation.selected_collection_concept_id} was selected. To use a different collection "
            "submit a new request specifying the desired CMR concept ID instead of the collection short name."
        )

    def _granule_limit_warning(self) -> Optional[str]:
        hits = self.operation.cmr_hits
        max_results = self.operation.max_results
        num_granules = self.num_granules
        if hits <= num_granules:
            return None

        if max_results is not None and max_results < MAX_GRANULE_LIMIT:
            reason = f"you requested {max_results} maxResults"
        else:
            reason = "of system constraints"
        return (
            f"CMR query identified {hits} granules, but the request has been limited "
            f"to process only the first {num_granules} granules because {reason}."
        )

    @property
    def warning_message(self) -> Optional[str]:
        """Warnings to show the user alongside the results, or None"""
        warnings = [w for w in (self._short_name_warning(), self._granule_limit_warning()) if w]
        return " ".join(warnings) if warnings else None

    def invoke(self) -> Dict[str, Any]:
        """
        Carry out the operation with this service.

        Returns:
            Dictionary describing the invocation outcome
        """
        logger.info(
            f"Invoking {self.config.name} ({self.config.type.name}) for request {self.operation.request_id}"
        )
        result = self._run()
        if self.warning_message:
            logger.info(f"Request {self.operation.request_id}: {self.warning_message}")
        return result

    def _run(self) -> Dict[str, Any]:
        raise NotImplementedError
