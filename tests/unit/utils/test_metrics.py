"""Tests for the exported Prometheus metrics."""

import pytest
from prometheus_client import REGISTRY
from prometheus_client.metrics import MetricWrapperBase

import relay.utils.metrics as metrics


@pytest.mark.parametrize("name", metrics.__all__)
def test_exports_are_registered_collectors(name):
    """Test the package exports only metrics registered with Prometheus."""
    metric = getattr(metrics, name)

    assert isinstance(metric, MetricWrapperBase)
    assert REGISTRY._names_to_collectors[metric._name] is metric
