"""Shared fixtures for the test-suite."""

import pytest

from fake_site import build_site


@pytest.fixture
def linear_site():
    return build_site("linear")


@pytest.fixture
def branching_site():
    return build_site("branching")


@pytest.fixture
def two_level_site():
    return build_site("two_level")
