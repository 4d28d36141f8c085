"""Shared fixtures for the test suite."""

import pytest

from trip_assistant.config.settings import Settings
from trip_assistant.repositories.memory import InMemoryTripRepository
from trip_assistant.services.conversation import ConversationController


@pytest.fixture
def settings():
    return Settings(thinking_delay=0)


@pytest.fixture
def strict_settings():
    return Settings(thinking_delay=0, validation_mode="strict")


@pytest.fixture
def repository(settings):
    return InMemoryTripRepository(settings)


@pytest.fixture
def strict_repository(strict_settings):
    return InMemoryTripRepository(strict_settings)


@pytest.fixture
def controller(repository, settings):
    return ConversationController(repository, settings=settings)
