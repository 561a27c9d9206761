"""
No-op Service

Used when no configured service can perform a request: the source granule
links are returned unmodified together with the reason.
"""

import logging
from typing import Any, Dict, Optional

from services.base_service import BaseService

logger = logging.getLogger(__name__)


class NoOpService(BaseService):
    """Returns direct download links instead of transforming data"""

    @property
    def message(self) -> Optional[str]:
        reason = self.config.message
        if not reason:
            return "Returning direct download links"
        return f"Returning direct download links because {reason}."

    def _run(self) -> Dict[str, Any]:
        links = [
            {"href": granule.url, "title": granule.name, "collection": source.collection}
            for source in self.operation.sources
            for granule in source.granules
        ]
        logger.info(f"Returning {len(links)} direct download links")
        return {
            "service": self.config.name,
            "message": self.message,
            "warning": self.warning_message,
            "links": links
        }
