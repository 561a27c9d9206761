"""Shared fixtures for the service router test suite."""

import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shared_schema import (  # noqa: E402
    RequestContext,
    RequestDescriptor,
    ServiceCapabilities,
    ServiceDescriptor,
    ServiceType,
    SubsettingCapabilities,
)

COLLECTION_ID = "C123-TEST"


def make_service(name, type_name="argo", collections=(COLLECTION_ID,), output_formats=(),
                 variable=False, bbox=False, shape=False, reprojection=False, **kwargs):
    return ServiceDescriptor(
        name=name,
        type=ServiceType(name=type_name, params=kwargs.pop("params", {})),
        collections=tuple(collections),
        capabilities=ServiceCapabilities(
            output_formats=tuple(output_formats),
            subsetting=SubsettingCapabilities(variable=variable, bbox=bbox, shape=shape),
            reprojection=reprojection,
        ),
        **kwargs,
    )


@pytest.fixture
def three_services():
    """Three services for one collection with overlapping formats and distinct capabilities"""
    return [
        make_service("first-service", "argo", output_formats=("image/tiff", "application/x-netcdf4"), shape=True),
        make_service("second-service", "http", output_formats=("image/tiff", "image/png"), bbox=True),
        make_service("third-service", "argo", output_formats=("image/tiff", "image/png"), reprojection=True),
    ]


@pytest.fixture
def operation():
    request = RequestDescriptor()
    request.add_source(COLLECTION_ID)
    return request


@pytest.fixture
def no_context():
    return RequestContext()
