"""Pytest configuration and shared fixtures."""

from collections.abc import Iterator

import pytest

# The timemachine plugin is registered via a ``pytest11`` entry point
# (pyproject.toml) for external consumers.  In our own test suite we
# disable it (``-p no:timemachine``) and load it explicitly here instead,
# so the timemachine import chain is measured by ``pytest-cov``.
pytest_plugins = ["timemachine.testing._plugin"]


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests across modules"
    )


@pytest.fixture(autouse=True)
def _reset_default_clock() -> Iterator[None]:
    """Keep the process-wide default clock live and untouched between tests."""
    import timemachine

    original = timemachine.get_default()
    original.reset()
    yield
    timemachine.set_default(original)
    original.reset()
