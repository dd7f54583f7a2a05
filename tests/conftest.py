"""Shared pytest fixtures."""

import pytest

from amhub.core import geocoder
from amhub.core.config import Config

from fakes import RecordingSurface


@pytest.fixture
def config() -> Config:
    return Config(
        api_url="https://fh.example.com/openapi/v0.1/workflow",
        user_token="token-123",
        project_uuid="project-1",
        workflow_uuid="workflow-1",
        creator_id="creator-1",
        default_latitude=25.0,
        default_longitude=55.0,
    )


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture(autouse=True)
def fresh_geocoder(monkeypatch):
    geocoder.clear_cache()
    monkeypatch.setattr(geocoder, "_last_request_time", 0.0)
    yield
    geocoder.clear_cache()
