"""
Data Service Router Configuration

This file contains all configuration settings for the service router.
Values are read from the environment (or a .env file) at import time.
"""

import os
from dotenv import load_dotenv

# Load environment variables from a .env file if present (project root or parents)
# This enables local development without exporting variables globally.
load_dotenv()

# Service Catalog
# The catalog file holds one list of services per CMR endpoint
CMR_ENDPOINT = os.getenv("CMR_ENDPOINT", "https://cmr.uat.earthdata.nasa.gov")
SERVICES_CONFIG_PATH = os.getenv(
    "SERVICES_CONFIG_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "services.yml"),
)

# Granule Limits
MAX_GRANULE_LIMIT = int(os.getenv("MAX_GRANULE_LIMIT", "350"))          # Hard ceiling for any request
MAX_SYNCHRONOUS_GRANULES = int(os.getenv("MAX_SYNCHRONOUS_GRANULES", "1"))  # Default sync ceiling

# Workflow Submission Defaults
DEFAULT_BATCH_SIZE = int(os.getenv("DEFAULT_BATCH_SIZE", "2000"))
DEFAULT_PARALLELISM = int(os.getenv("DEFAULT_PARALLELISM", "2"))
DEFAULT_IMAGE_PULL_POLICY = os.getenv("DEFAULT_IMAGE_PULL_POLICY", "Always")
DEFAULT_ARGO_POD_TIMEOUT_SECS = int(os.getenv("DEFAULT_ARGO_POD_TIMEOUT_SECS", "14400"))

# Outbound HTTP
SERVICE_REQUEST_TIMEOUT = int(os.getenv("SERVICE_REQUEST_TIMEOUT", "60"))  # seconds

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
