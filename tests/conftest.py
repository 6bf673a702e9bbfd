"""Shared test fixtures."""

import pytest

from postseason.config import Settings
from postseason.core.event_bus import EventBus


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(
        postseason_env="test",
        postseason_api_base_url="http://campaign.test",
        postseason_api_token="test-token",
    )


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()
