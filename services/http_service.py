"""
HTTP Service

Invokes a backend service by POSTing the serialized operation to its URL.
"""

import logging
from typing import Any, Dict

import requests

from config import SERVICE_REQUEST_TIMEOUT
from errors import ServiceError
from services.base_service import BaseService

logger = logging.getLogger(__name__)


class HttpService(BaseService):
    """Service reached through a direct HTTP call"""

    def _run(self) -> Dict[str, Any]:
        url = self.params.get("url")
        if not url:
            raise ServiceError(500, f"Service {self.config.name} has no url configured")

        headers = {"Content-Type": "application/json"}
        if self.operation.request_id:
            headers["X-Request-ID"] = self.operation.request_id

        try:
            response = requests.post(
                url, json=self.operation.to_dict(), headers=headers, timeout=SERVICE_REQUEST_TIMEOUT
            )
        except requests.RequestException as e:
            logger.error(f"Request to {self.config.name} at {url} failed: {e}")
            raise ServiceError(503, f"Service {self.config.name} is unavailable") from e

        if response.status_code >= 400:
            logger.error(f"{self.config.name} returned status {response.status_code}: {response.text}")
            raise ServiceError(response.status_code, response.text or f"Service {self.config.name} failed")

        return {
            "service": self.config.name,
            "status_code": response.status_code,
            "content_type": response.headers.get("Content-Type"),
            "data": response.content,
            "message": self.message,
            "warning": self.warning_message
        }
