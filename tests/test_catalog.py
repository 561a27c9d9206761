"""Catalog loading and validation."""

import logging
from unittest.mock import patch

import pytest
from conftest import make_service

from catalog import load_service_configs, parse_service_configs
from errors import ConfigurationError
from shared_schema import RequestDescriptor
from validation import validate_catalog, validate_request_descriptor, validate_service_config

CATALOG_YAML = """
https://cmr.example.gov:
  - name: gdal
    type:
      name: argo
      params:
        argo_url: !Env http://${ARGO_HOST}:2746
        image: !Env ${UNSET_TEST_VARIABLE}
    collections: [C1-PROV]
    maximum_sync_granules: 0
    capabilities:
      output_formats: [image/tiff, image/png]
      subsetting: {bbox: true, variable: true}
      reprojection: true
  - name: disabled-bool
    enabled: false
    type: {name: http}
    collections: [C1-PROV]
  - name: disabled-string
    enabled: 'false'
    type: {name: http}
    collections: [C1-PROV]
  - name: zarr
    type:
      name: http
      params: {url: http://zarr:3000}
    collections: [C1-PROV, C2-PROV]
    capabilities:
      output_formats: [application/x-zarr]
"""


@pytest.fixture
def catalog_file(tmp_path, monkeypatch):
    monkeypatch.setenv("ARGO_HOST", "argo-server")
    monkeypatch.delenv("UNSET_TEST_VARIABLE", raising=False)
    path = tmp_path / "services.yml"
    path.write_text(CATALOG_YAML)
    return str(path)


class TestLoadServiceConfigs:
    def test_loads_enabled_services_in_file_order(self, catalog_file):
        services = load_service_configs(catalog_file, "https://cmr.example.gov")
        assert [s.name for s in services] == ["gdal", "zarr"]

    def test_substitutes_environment_variables(self, catalog_file):
        gdal = load_service_configs(catalog_file, "https://cmr.example.gov")[0]
        assert gdal.type.params["argo_url"] == "http://argo-server:2746"
        assert gdal.type.params["image"] == ""

    def test_parses_capabilities(self, catalog_file):
        gdal, zarr = load_service_configs(catalog_file, "https://cmr.example.gov")
        assert gdal.capabilities.output_formats == ("image/tiff", "image/png")
        assert gdal.capabilities.subsetting.bbox
        assert gdal.capabilities.subsetting.variable
        assert not gdal.capabilities.subsetting.shape
        assert gdal.capabilities.reprojection
        assert gdal.maximum_sync_granules == 0
        assert zarr.collections == ("C1-PROV", "C2-PROV")
        assert not zarr.capabilities.reprojection

    def test_unknown_endpoint_is_a_configuration_error(self, catalog_file):
        with pytest.raises(ConfigurationError):
            load_service_configs(catalog_file, "https://cmr.other.gov")

    def test_missing_file_is_a_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_service_configs(str(tmp_path / "missing.yml"), "https://cmr.example.gov")

    def test_malformed_entry_is_a_configuration_error(self):
        raw = {"https://cmr.example.gov": [{"name": "no-type", "collections": ["C1-PROV"]}]}
        with pytest.raises(ConfigurationError):
            parse_service_configs(raw, "https://cmr.example.gov")

    def test_all_disabled_is_a_configuration_error(self):
        raw = {"https://cmr.example.gov": [{"name": "off", "enabled": False, "type": {"name": "http"}}]}
        with pytest.raises(ConfigurationError):
            parse_service_configs(raw, "https://cmr.example.gov")


class TestCatalogValidation:
    def test_empty_catalog(self):
        with pytest.raises(ConfigurationError):
            validate_catalog([])

    def test_duplicate_names(self):
        with pytest.raises(ConfigurationError):
            validate_catalog([make_service("dup"), make_service("dup")])

    def test_granule_ceiling_above_limit_only_warns(self, caplog):
        service = make_service("greedy", maximum_async_granules=500)
        with patch("validation.catalog_validation.MAX_GRANULE_LIMIT", 350):
            with caplog.at_level(logging.WARNING):
                result = validate_service_config(service)
        assert result["valid"]
        assert "will be limited to 350" in result["warnings"][0]
        assert "Service greedy attempting to allow more than the max allowed granules" in caplog.text

    def test_granule_ceiling_within_limit(self):
        with patch("validation.catalog_validation.MAX_GRANULE_LIMIT", 350):
            assert validate_service_config(make_service("ok", maximum_async_granules=350))["warnings"] == []


class TestRequestValidation:
    def test_valid_request(self, operation):
        operation.bounding_rectangle = [-10, -5, 10, 5]
        assert validate_request_descriptor(operation)["valid"]

    def test_request_without_sources(self):
        result = validate_request_descriptor(RequestDescriptor())
        assert not result["valid"]
        assert "at least one collection" in result["errors"][0]

    def test_empty_collection_id(self):
        request = RequestDescriptor()
        request.add_source("  ")
        assert not validate_request_descriptor(request)["valid"]

    @pytest.mark.parametrize("bbox", [[0, 0, 10], [0, 0, 10, "x"], [0, -95, 10, 10], [0, 20, 10, 10]])
    def test_invalid_bounding_rectangles(self, operation, bbox):
        operation.bounding_rectangle = bbox
        assert not validate_request_descriptor(operation)["valid"]
