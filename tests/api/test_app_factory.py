"""
Tests for create_app wiring of process-wide settings.
"""

import pytest

from csv_splitter.api.main import create_app
from csv_splitter.configs import get_settings


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_debug_disabled_by_default(monkeypatch, fresh_settings):
    monkeypatch.delenv("DEBUG", raising=False)

    assert create_app().debug is False


def test_debug_from_environment(monkeypatch, fresh_settings):
    monkeypatch.setenv("DEBUG", "true")

    assert create_app().debug is True
