"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from booking_agent.config import Settings
from booking_agent.context import TurnContext
from booking_agent.store import InMemoryStore, Reservation, ReservedPassenger


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment and any local .env file."""
    return Settings(
        _env_file=None,
        model_provider="gemini",
        google_api_key="test-key",
        public_base_url="https://app.example",
        store_backend="memory",
        auth_backend="hmac",
        auth_shared_secret="test-secret",
        blob_store_backend="local",
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def url_settings(settings):
    """Settings for a provider that consumes attachments by URL."""
    return settings.model_copy(update={"model_provider": "openai", "openai_api_key": "test-key"})


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def turn_context(settings, store):
    return TurnContext(conversation_id="chat-123", user_id="user-123", settings=settings, store=store)


@pytest.fixture
def sample_reservation(store):
    """A reservation owned by user-123, already in the store."""
    reservation = Reservation(
        id="res-1",
        userId="user-123",
        flightNumber="UA123",
        date="2025-06-01",
        passengers=[
            ReservedPassenger(name="Ada Lovelace", email="ada@example.com", seat="12A"),
            ReservedPassenger(name="Charles Babbage", seat="12B"),
        ],
        price=800,
    )
    store.create_reservation(reservation)
    return reservation
