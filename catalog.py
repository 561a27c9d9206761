"""
Service Catalog Loader

Loads the service catalog from a YAML file keyed by CMR endpoint. Scalars
tagged ``!Env`` have ``${NAME}`` substrings replaced by environment variables,
so secrets and hostnames stay out of the file:

    https://cmr.uat.earthdata.nasa.gov:
      - name: example-subsetter
        type:
          name: argo
          params:
            argo_url: !Env ${ARGO_URL}
        collections: [C1234-PROV]
        capabilities:
          output_formats: [image/tiff]
          subsetting: {bbox: true}

The catalog is loaded once per process and shared read-only.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from config import CMR_ENDPOINT, SERVICES_CONFIG_PATH
from errors import ConfigurationError
from shared_schema import (
    ServiceCapabilities,
    ServiceDescriptor,
    ServiceType,
    SubsettingCapabilities,
)
from validation.catalog_validation import validate_catalog

logger = logging.getLogger(__name__)

ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


class SubsettingEntry(BaseModel):
    variable: bool = False
    bbox: bool = False
    shape: bool = False


class CapabilitiesEntry(BaseModel):
    output_formats: List[str] = Field(default_factory=list)
    subsetting: SubsettingEntry = Field(default_factory=SubsettingEntry)
    reprojection: bool = False


class ServiceTypeEntry(BaseModel):
    name: str
    params: Dict[str, Any] = Field(default_factory=dict)


class ServiceEntry(BaseModel):
    """Raw catalog entry as written in the YAML file"""
    name: str = Field(min_length=1)
    type: ServiceTypeEntry
    collections: List[str] = Field(default_factory=list)
    capabilities: CapabilitiesEntry = Field(default_factory=CapabilitiesEntry)
    maximum_sync_granules: Optional[int] = Field(default=None, ge=0)
    maximum_async_granules: Optional[int] = Field(default=None, ge=0)
    batch_size: Optional[int] = None
    enabled: Any = True

    def to_descriptor(self) -> ServiceDescriptor:
        capabilities = self.capabilities
        return ServiceDescriptor(
            name=self.name,
            type=ServiceType(name=self.type.name, params=dict(self.type.params)),
            collections=tuple(self.collections),
            capabilities=ServiceCapabilities(
                output_formats=tuple(capabilities.output_formats),
                subsetting=SubsettingCapabilities(
                    variable=capabilities.subsetting.variable,
                    bbox=capabilities.subsetting.bbox,
                    shape=capabilities.subsetting.shape,
                ),
                reprojection=capabilities.reprojection,
            ),
            maximum_sync_granules=self.maximum_sync_granules,
            maximum_async_granules=self.maximum_async_granules,
            batch_size=self.batch_size,
        )


def _substitute_env(value: str) -> str:
    return ENV_PATTERN.sub(lambda match: os.environ.get(match.group(1), ""), value)


class CatalogLoader(yaml.SafeLoader):
    """SafeLoader that understands the ``!Env`` tag"""


def _construct_env(loader: yaml.SafeLoader, node: yaml.Node) -> str:
    return _substitute_env(loader.construct_scalar(node))


CatalogLoader.add_constructor("!Env", _construct_env)


def is_enabled(entry: Dict[str, Any]) -> bool:
    enabled = entry.get("enabled", True)
    return enabled is not False and str(enabled).lower() != "false"


def parse_service_configs(raw: Dict[str, Any], cmr_endpoint: str) -> List[ServiceDescriptor]:
    """
    Build service descriptors for one CMR endpoint from a parsed catalog document.

    Raises:
        ConfigurationError: If the endpoint is missing or an entry is malformed
    """
    if not isinstance(raw, dict) or cmr_endpoint not in raw:
        raise ConfigurationError(f"No services configured for CMR endpoint {cmr_endpoint}")

    services = []
    for entry in raw[cmr_endpoint] or []:
        if not is_enabled(entry):
            logger.info(f"Skipping disabled service {entry.get('name')}")
            continue
        try:
            services.append(ServiceEntry(**entry).to_descriptor())
        except ValidationError as e:
            raise ConfigurationError(f"Invalid service configuration {entry.get('name')}: {e}") from e

    validate_catalog(services)
    return services


def load_service_configs(
    config_path: str = SERVICES_CONFIG_PATH, cmr_endpoint: str = CMR_ENDPOINT
) -> List[ServiceDescriptor]:
    """
    Load and validate the service catalog.

    Args:
        config_path: Path to the YAML catalog
        cmr_endpoint: Top-level key selecting the services for this deployment

    Returns:
        Enabled service descriptors in file order (file order is priority order)
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.load(f, Loader=CatalogLoader)
    except OSError as e:
        raise ConfigurationError(f"Unable to read service catalog {config_path}: {e}") from e

    services = parse_service_configs(raw, cmr_endpoint)
    logger.info(f"Loaded {len(services)} services for {cmr_endpoint} from {config_path}")
    return services


_service_configs: Optional[List[ServiceDescriptor]] = None


def get_service_configs() -> List[ServiceDescriptor]:
    """The process-wide catalog, loaded on first use"""
    global _service_configs

    if _service_configs is None:
        _service_configs = load_service_configs()

    return _service_configs
