"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import Mock, MagicMock, patch
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-maps-key")
os.environ.setdefault("STORAGE_BUCKET", "listing-media")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from tests.utils.helpers import make_data_url  # noqa: E402


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for testing."""
    client = Mock()
    client.table = Mock(return_value=Mock())
    return client


@pytest.fixture
def mock_query():
    """Chainable PostgREST query mock: every builder call returns itself."""
    query = MagicMock()
    for method in ("select", "eq", "gte", "lte", "limit", "insert", "update"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=[])
    return query


@pytest.fixture
def patched_supabase(mock_query):
    """Patch the SupabaseClient context manager used by the table helpers."""
    client = MagicMock()
    client.table.return_value = mock_query

    with patch("src.services.supabase_client.SupabaseClient") as mock_client_class:
        mock_client_class.return_value.__aenter__.return_value = client
        mock_client_class.return_value.__aexit__.return_value = None
        yield client


@pytest.fixture
def image_data_url():
    """Small PNG data URL."""
    return make_data_url("image/png", b"\x89PNG\r\n\x1a\nfake")


@pytest.fixture
def pdf_data_url():
    """Small PDF data URL."""
    return make_data_url("application/pdf", b"%PDF-1.4 fake")


@pytest.fixture
def sample_project_payload():
    """Minimal valid project create payload."""
    return {
        "name": "Test",
        "description": "D",
        "builderId": "b1",
        "locationAddress": "Mumbai, India",
    }


@pytest.fixture
def sample_property_payload():
    """Minimal valid property create payload."""
    return {
        "title": "2BHK in Gachibowli",
        "description": "East facing apartment",
        "builderId": "b1",
        "locationAddress": "Gachibowli, Hyderabad",
        "price": 8500000,
        "propertySize": 1200,
        "propertySizeUnit": "sq_ft",
    }


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time
