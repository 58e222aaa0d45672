"""Pytest configuration and fixtures for tagweave tests."""

import pytest

import tagweave
from tagweave import Environment, TemplateCache


@pytest.fixture
def cache():
    """Create an empty, isolated TemplateCache."""
    return TemplateCache()


@pytest.fixture
def env(cache):
    """Create an Environment backed by its own cache."""
    return Environment(cache=cache)


@pytest.fixture(autouse=True)
def _clear_default_cache():
    """Keep the process-wide cache from leaking between tests."""
    tagweave.clear_cache()
    yield
    tagweave.clear_cache()


def assert_contains(result: str, *expected_parts: str) -> None:
    """Assert rendered output contains all expected parts.

    Args:
        result: The actual rendering result.
        expected_parts: Strings that should all be present in the result.
    """
    for part in expected_parts:
        assert part in result, (
            f"Template output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {result!r}"
        )
