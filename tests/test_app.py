"""Test the wired application facade."""

from datetime import date

import pytest

from trip_assistant.app import create_app
from trip_assistant.config.settings import Settings, ValidationMode
from trip_assistant.data.demo import seed_demo_trips
from trip_assistant.domain.models import DateRange, Identity, MessageRole, TripStatus
from trip_assistant.metrics import render_metrics
from trip_assistant.repositories.base import TripEventKind


@pytest.mark.asyncio
async def test_session_flow():
    """Test create, date selection and a turn through the facade."""
    app = create_app(Settings(thinking_delay=0), identity=Identity(id="u1", name="Sam"))
    events = []
    app.subscribe(events.append)

    trip = app.new_trip()
    app.select_dates(DateRange(start=date(2026, 7, 1), end=date(2026, 7, 14)))
    turn = await app.send("Tropical islands")

    stored = app.repository.get_trip(trip.id)
    assert stored.start_date == date(2026, 7, 1)
    assert "(Jul 1 - Jul 14)" in turn.assistant_message.content
    assert stored.title == "Tropical islands"
    assert TripEventKind.MESSAGE_ADDED in {e.kind for e in events}
    assert app.greeting() == "Welcome back, Sam!"
    await app.shutdown()


@pytest.mark.asyncio
async def test_send_without_trip():
    """Test sending with nothing selected does nothing."""
    app = create_app(Settings(thinking_delay=0))
    assert await app.send("beach") is None
    assert app.repository.trips == []
    await app.shutdown()


def test_demo_seed():
    """Test demo trips are seeded when configured."""
    app = create_app(Settings(thinking_delay=0, seed_demo_trips=True))

    trips = app.repository.trips
    assert [t.id for t in trips] == ["demo-1", "demo-2"]
    assert app.repository.current_trip is None
    paris = app.repository.get_trip("demo-1")
    assert paris.status == TripStatus.CONFIRMED
    assert [m.role for m in paris.messages] == [MessageRole.USER, MessageRole.ASSISTANT]
    assert paris.date_label() == "Feb 14 - Feb 16, 2026"

    assert seed_demo_trips(app.repository) == []


@pytest.mark.asyncio
async def test_continue_demo_conversation():
    """Test a seeded trip keeps its metadata on further turns."""
    app = create_app(Settings(thinking_delay=0, seed_demo_trips=True))
    app.open_trip(app.repository.get_trip("demo-1"))
    assert app.date_sync.selection == DateRange(start=date(2026, 2, 14), end=date(2026, 2, 16))

    turn = await app.send("Any city tips?")

    paris = app.repository.get_trip("demo-1")
    assert not turn.first_turn
    assert paris.title == "Weekend in Paris"
    assert len(paris.messages) == 4
    assert paris.messages[-1].timestamp >= paris.messages[1].timestamp
    await app.shutdown()


def test_settings_from_environment(monkeypatch):
    """Test settings are read from prefixed environment variables."""
    monkeypatch.setenv("TRIP_ASSISTANT_VALIDATION_MODE", "strict")
    monkeypatch.setenv("TRIP_ASSISTANT_THINKING_DELAY", "0.25")
    settings = Settings()
    assert settings.validation_mode == ValidationMode.STRICT
    assert settings.strict
    assert settings.thinking_delay == 0.25


@pytest.mark.asyncio
async def test_metrics_exposed(repository, controller):
    """Test turn metrics are rendered."""
    trip = repository.create_trip()
    await controller.send_message(trip.id, "hiking")
    await controller.send_message(trip.id, "  ")

    output = render_metrics().decode()
    assert "turns_completed_total" in output
    assert 'messages_added_total{role="assistant"}' in output
    assert 'sends_ignored_total{reason="blank"}' in output


@pytest.mark.asyncio
async def test_empty_picker_sends_no_date_clause():
    """Test stored dates are not used when the picker is empty."""
    app = create_app(Settings(thinking_delay=0))
    trip = app.new_trip()
    app.repository.update_trip(trip.id, start_date=date(2026, 9, 1))
    assert app.date_sync.selection is None

    turn = await app.send("Somewhere quiet")
    assert turn.assistant_message.content.startswith(
        "Great! I'd love to help you plan your trip."
    )

    app.select_dates(DateRange(start=date(2026, 9, 3), end=date(2026, 9, 5)))
    app.select_dates(None)
    turn = await app.send("beach again")
    assert "Based on your dates," in turn.assistant_message.content
    await app.shutdown()
