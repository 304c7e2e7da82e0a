"""Root test configuration."""

import copy
import logging

import pytest

from mystrom_exporter.config_loader import DEFAULT_CONFIG
from tests.fakes import FakeClient


def pytest_configure(config):
    """Suppress debug/info output from the exporter during tests."""
    logging.basicConfig(level=logging.WARNING, force=True)


@pytest.fixture
def config():
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    cfg["web"]["listen_address"] = "10.0.0.1:9452"
    return cfg


@pytest.fixture
def fake_client():
    return FakeClient()
