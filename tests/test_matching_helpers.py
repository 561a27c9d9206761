"""Content negotiation, capability predicates, filter chain steps and messages."""

import pytest
from conftest import make_service

from matching import capabilities
from matching.content_negotiation import accepts, allows_any, parse_mime_type, resolve_format
from matching.filter_chain import REQUIRED_FILTERS, filter_output_format_matches, run_filter_chain
from matching.messages import OR, list_to_text, unsupported_combination_message
from shared_schema import RequestContext, RequestDescriptor, UnsupportedMatchSignal


class TestContentNegotiation:
    @pytest.mark.parametrize("pattern,media_type,expected", [
        ("*/*", "application/x-netcdf4", True),
        ("image/*", "image/png", True),
        ("image/*", "application/json", False),
        ("image/png", "image/png", True),
        ("image/png", "image/tiff", False),
        ("IMAGE/PNG", "image/png", True),
        ("image/png;q=0.9", "image/png", True),
    ])
    def test_accepts(self, pattern, media_type, expected):
        assert accepts(pattern, media_type) is expected

    def test_parse_mime_type_drops_parameters(self):
        assert parse_mime_type(" text/HTML ; charset=utf-8") == ("text", "html")

    def test_allows_any(self):
        assert allows_any("*/*")
        assert allows_any("*")
        assert not allows_any("image/*")

    def test_resolve_format_uses_first_service_for_wildcards(self):
        services = [
            make_service("a", output_formats=("application/json", "image/gif")),
            make_service("b", output_formats=("image/png",)),
        ]
        output_format, matching = resolve_format(["image/*"], services)
        assert output_format == "image/gif"
        assert [s.name for s in matching] == ["a", "b"]

    def test_resolve_format_without_match(self):
        services = [make_service("a", output_formats=("image/png",))]
        assert resolve_format(["text/csv"], services) == (None, [])
        assert resolve_format([], services) == (None, [])


class TestCapabilityPredicates:
    def test_variable_subsetting_needs_a_non_empty_variable_list(self):
        request = RequestDescriptor()
        request.add_source("C1-A")
        assert not capabilities.needs_variable_subsetting(request)
        request.add_source("C2-A", ["sst"])
        assert capabilities.needs_variable_subsetting(request)

    def test_empty_shapefile_payload_still_needs_shapefile_subsetting(self):
        request = RequestDescriptor()
        assert not capabilities.needs_shapefile_subsetting(request)
        request.geojson = {}
        assert capabilities.needs_shapefile_subsetting(request)

    def test_reformatting_without_preferences(self):
        assert not capabilities.needs_reformatting(RequestDescriptor(), RequestContext())
        assert not capabilities.needs_reformatting(RequestDescriptor(), None)

    def test_reformatting_with_explicit_format(self):
        request = RequestDescriptor(output_format="image/png")
        assert capabilities.needs_reformatting(request, RequestContext(requested_mime_types=["*/*"]))

    def test_supports_predicates_read_capabilities(self):
        service = make_service("s", variable=True, shape=True)
        assert capabilities.supports_variable_subsetting(service)
        assert capabilities.supports_shapefile_subsetting(service)
        assert not capabilities.supports_spatial_subsetting(service)
        assert not capabilities.supports_reprojection(service)


class TestFilterChain:
    def test_output_format_step_logs_accepted_types(self, operation):
        context = RequestContext(requested_mime_types=["image/png", "image/gif"])
        requested_operations = []
        outcome = filter_output_format_matches(
            operation, context, [make_service("a", output_formats=("image/tiff",))], requested_operations
        )
        assert outcome.eliminated
        assert requested_operations == ["reformatting to image/png or image/gif"]
        assert outcome.signal.requested_operations == ("reformatting to image/png or image/gif",)

    def test_required_filters_ignore_spatial_constraints(self, operation, three_services):
        operation.bounding_rectangle = [0, 0, 10, 10]
        operation.crs = "EPSG:4326"
        outcome = run_filter_chain(operation, RequestContext(), three_services, REQUIRED_FILTERS)
        assert not outcome.eliminated
        assert [s.name for s in outcome.candidates] == ["third-service"]

    def test_chain_stops_at_first_elimination(self, operation, three_services):
        operation.crs = "EPSG:4326"
        operation.output_format = "image/gif"
        outcome = run_filter_chain(operation, RequestContext(), three_services)
        assert outcome.eliminated
        assert outcome.signal.requested_operations == ("reprojection", "reformatting to image/gif")
        assert operation.resolved_output_format is None


class TestMessages:
    @pytest.mark.parametrize("items,expected", [
        ([], ""),
        (["a"], "a"),
        (["a", "b"], "a and b"),
        (["a", "b", "c"], "a, b, and c"),
    ])
    def test_list_to_text(self, items, expected):
        assert list_to_text(items) == expected

    def test_list_to_text_with_or(self):
        assert list_to_text(["image/png", "image/gif"], OR) == "image/png or image/gif"

    def test_combination_message_with_multiple_collections(self):
        request = RequestDescriptor()
        request.add_source("C1-A")
        request.add_source("C2-B")
        signal = UnsupportedMatchSignal(request, ("variable subsetting",))
        assert unsupported_combination_message(signal) == (
            "the requested combination of operations: variable subsetting on C1-A and C2-B is unsupported"
        )
