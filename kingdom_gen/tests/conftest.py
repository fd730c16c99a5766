"""Pytest configuration and sys.path adjustments for local runs."""

# Ensure package imports resolve when running tests directly
import importlib
import os
import sys

import pytest

# Get the repository root (two levels up from this file)
ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from kingdom_gen.services import catalogue_loader  # noqa: E402
from kingdom_gen.tests.generator_test_utils import FakeGenerator  # noqa: E402
from kingdom_gen.web.services import tasks  # noqa: E402


@pytest.fixture(autouse=True)
def ensure_test_environment():
    """Run every test without a configured Generator backend and with fresh state."""
    original_env = os.environ.copy()
    os.environ.pop('KINGDOM_GENERATOR', None)
    os.environ.pop('GENERATOR_URL', None)
    catalogue_loader.reset_catalogue_state()
    tasks.clear_sessions()

    yield

    catalogue_loader.reset_catalogue_state()
    tasks.clear_sessions()
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def catalogue_state(fake_generator):
    return catalogue_loader.initialize(fake_generator, force=True)


@pytest.fixture
def client(catalogue_state):
    from starlette.testclient import TestClient

    app_module = importlib.import_module('kingdom_gen.web.app')
    return TestClient(app_module.app)
