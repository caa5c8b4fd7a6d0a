"""Shared fixtures for tern tests."""

import pytest

from tern.testing import make_request


@pytest.fixture
def request_factory():
    return make_request
