"""
Shared fixtures for the ContactGraph test suite.
"""

import sys
from pathlib import Path

import pytest

# Add the src directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from contactgraph.services.graph_view import (
    GraphSession, ImmediateAnimator, LayoutConfig, ScreenGeometry, ViewportConfig
)
from contactgraph.shared import ContactCache, Settings, get_metrics, get_settings
from contactgraph.shared.models import Contact


@pytest.fixture(autouse=True)
def isolated_state():
    """Drop cached settings, metrics and the process-wide cache between tests."""
    get_settings.cache_clear()
    get_metrics().reset()
    ContactCache.reset_instance()
    yield
    get_settings.cache_clear()
    ContactCache.reset_instance()


@pytest.fixture
def settings(tmp_path):
    """Settings built explicitly so the environment and .env files do not leak in."""
    return Settings(
        _env_file=None,
        screen_width=400,
        screen_height=600,
        chrome_height=0,
        animator="immediate",
        cache_path=tmp_path / "contact_cache.db",
    )


@pytest.fixture
def screen():
    return ScreenGeometry(width=400, height=600, chrome_height=0)


@pytest.fixture
def layout_config(settings):
    return LayoutConfig.from_settings(settings)


@pytest.fixture
def viewport_config():
    return ViewportConfig(min_scale=0.5, max_scale=3.0, animator="immediate", seed=7)


@pytest.fixture
def alice():
    return Contact(id="a", name="Alice", hashtags=["sf", "pm"])


@pytest.fixture
def bob():
    return Contact(id="b", name="Bob", hashtags=["sf"])


@pytest.fixture
def contacts(alice, bob):
    return [alice, bob]


@pytest.fixture
def session(settings, screen):
    return GraphSession(settings=settings, screen=screen, animator=ImmediateAnimator())


@pytest.fixture
def cache(tmp_path):
    contact_cache = ContactCache(tmp_path / "cache" / "contacts.db")
    contact_cache.init()
    return contact_cache
