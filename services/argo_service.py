"""
Argo Service

Submits a request as an Argo workflow. Granules are split into batches and
each batch becomes one step of the workflow; an exit handler reports the
final status back to the request's callback URL.
"""

import copy
import logging
from typing import Any, Dict, List

import requests

from config import (
    DEFAULT_ARGO_POD_TIMEOUT_SECS,
    DEFAULT_BATCH_SIZE,
    DEFAULT_IMAGE_PULL_POLICY,
    DEFAULT_PARALLELISM,
    MAX_GRANULE_LIMIT,
    SERVICE_REQUEST_TIMEOUT,
)
from errors import ServiceError
from services.base_service import BaseService
from shared_schema import RequestDescriptor

logger = logging.getLogger(__name__)

# Credentials that must never be passed to workflow containers
SECRET_ENV_VARIABLES = {"EDL_USERNAME", "EDL_PASSWORD"}

EXIT_HANDLER_SCRIPT = """
echo '{{workflow.failures}}' > /tmp/failures
error="{{workflow.status}}"
timeout_count=$(grep -c 'Pod was active on the node longer than the specified deadline' /tmp/failures)
if [ "$timeout_count" != "0" ]
then
error="Request%20timed%20out"
fi
if [ "{{workflow.status}}" == "Succeeded" ]
then
curl -XPOST "{{inputs.parameters.callback}}/response?status=successful&argo=true"
else
curl -XPOST "{{inputs.parameters.callback}}/response?status=failed&argo=true&error=$error"
fi
""".strip()


def batch_operations(operation: RequestDescriptor, batch_size: int) -> List[Dict[str, Any]]:
    """
    Split an operation into serialized operations of at most ``batch_size`` granules each.

    Granule order is preserved; an operation without granules yields a single batch.
    """
    pairs = [(index, granule) for index, source in enumerate(operation.sources) for granule in source.granules]
    if not pairs:
        return [operation.to_dict()]

    batches = []
    for start in range(0, len(pairs), batch_size):
        chunk = pairs[start:start + batch_size]
        batch = copy.deepcopy(operation)
        for source in batch.sources:
            source.granules = []
        for index, granule in chunk:
            batch.sources[index].granules.append(copy.deepcopy(granule))
        batch.sources = [source for source in batch.sources if source.granules]
        batches.append(batch.to_dict())
    return batches


class ArgoService(BaseService):
    """Service run as an Argo workflow"""

    def choose_batch_size(self) -> int:
        """Granules per workflow step for this request"""
        batch_size = self.config.batch_size if self.config.batch_size is not None else DEFAULT_BATCH_SIZE

        if batch_size <= 0 or batch_size > MAX_GRANULE_LIMIT:
            batch_size = MAX_GRANULE_LIMIT

        if self.operation.max_results:
            batch_size = min(batch_size, self.operation.max_results)

        return batch_size

    def _workflow_parameters(self) -> List[Dict[str, Any]]:
        params = [
            {"name": "callback", "value": self.operation.callback},
            {"name": "image", "value": self.params.get("image")},
            {"name": "image-pull-policy", "value": self.params.get("image_pull_policy") or DEFAULT_IMAGE_PULL_POLICY},
            {"name": "timeout", "value": str(DEFAULT_ARGO_POD_TIMEOUT_SECS)},
        ]
        for variable, value in (self.params.get("env") or {}).items():
            if variable not in SECRET_ENV_VARIABLES:
                params.append({"name": variable, "value": value})
        return params

    def build_workflow(self) -> Dict[str, Any]:
        """The workflow submission body for this request"""
        namespace = self.params.get("namespace")
        template = self.params.get("template")
        params = self._workflow_parameters()
        ops = batch_operations(self.operation, self.choose_batch_size())

        return {
            "namespace": namespace,
            "serverDryRun": False,
            "workflow": {
                "metadata": {
                    "generateName": f"{template}-",
                    "namespace": namespace,
                    "labels": {
                        "user": self.operation.user,
                        "request_id": self.operation.request_id,
                    },
                },
                "spec": {
                    "entryPoint": "service",
                    "onExit": "exit-handler",
                    "templates": [
                        {
                            "name": "service",
                            "parallelism": self.params.get("parallelism") or DEFAULT_PARALLELISM,
                            "steps": [[{
                                "name": "service",
                                "templateRef": {"name": template, "template": template},
                                "arguments": {
                                    "parameters": params + [{"name": "operation", "value": "{{item}}"}],
                                },
                                "withItems": ops,
                            }]],
                        },
                        {
                            "name": "exit-handler",
                            "inputs": {"parameters": params},
                            "script": {
                                "image": "curlimages/curl",
                                "imagePullPolicy": "IfNotPresent",
                                "command": ["sh"],
                                "source": EXIT_HANDLER_SCRIPT,
                            },
                        },
                    ],
                },
            },
        }

    def _run(self) -> Dict[str, Any]:
        url = f"{self.params.get('argo_url')}/api/v1/workflows/{self.params.get('namespace')}"
        body = self.build_workflow()

        try:
            response = requests.post(url, json=body, timeout=SERVICE_REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Argo workflow creation failed: {e}")
            logger.error(f"Argo url: {url}")
            raise ServiceError(500, f"Unable to submit workflow for {self.config.name}") from e

        workflow_name = response.json().get("metadata", {}).get("name")
        logger.info(f"Submitted workflow {workflow_name} for request {self.operation.request_id}")
        return {
            "service": self.config.name,
            "workflow": workflow_name,
            "batches": len(body["workflow"]["spec"]["templates"][0]["steps"][0][0]["withItems"]),
            "message": self.message,
            "warning": self.warning_message
        }
