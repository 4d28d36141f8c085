"""Test the date picker projection onto the current trip."""

from datetime import date

import pytest

from trip_assistant.domain.errors import ValidationError
from trip_assistant.domain.models import DateRange
from trip_assistant.services.date_sync import DateSync, initial_selection


def test_selection_updates_current_trip(repository):
    """Test a selection is written to the current trip."""
    trip = repository.create_trip()
    sync = DateSync(repository)

    sync.select(DateRange(start=date(2026, 5, 1), end=date(2026, 5, 8)))

    stored = repository.get_trip(trip.id)
    assert stored.start_date == date(2026, 5, 1)
    assert stored.end_date == date(2026, 5, 8)
    assert repository.current_trip.end_date == date(2026, 5, 8)


def test_open_range_clears_end_date(repository):
    """Test a selection with only a start writes an empty end."""
    trip = repository.create_trip()
    repository.update_trip(trip.id, start_date=date(2026, 5, 1), end_date=date(2026, 5, 8))
    sync = DateSync(repository)

    sync.select(DateRange(start=date(2026, 6, 1)))

    stored = repository.get_trip(trip.id)
    assert stored.start_date == date(2026, 6, 1)
    assert stored.end_date is None


def test_cleared_selection_leaves_trip_untouched(repository):
    """Test a None selection does not touch the trip."""
    trip = repository.create_trip()
    repository.update_trip(trip.id, start_date=date(2026, 5, 1), end_date=date(2026, 5, 8))
    sync = DateSync(repository)

    assert sync.select(None) is None
    assert repository.get_trip(trip.id).start_date == date(2026, 5, 1)


def test_selection_without_current_trip(repository):
    """Test selecting dates with no current trip is a no-op."""
    sync = DateSync(repository)
    assert sync.select(DateRange(start=date(2026, 5, 1))) is None
    assert sync.selection == DateRange(start=date(2026, 5, 1))


def test_selection_seeded_when_trip_becomes_current(repository):
    """Test the selection is seeded once from the newly current trip."""
    first = repository.create_trip()
    repository.update_trip(first.id, start_date=date(2026, 5, 1), end_date=date(2026, 5, 8))
    sync = DateSync(repository)
    assert sync.selection == DateRange(start=date(2026, 5, 1), end=date(2026, 5, 8))

    repository.create_trip()
    assert sync.selection is None

    repository.set_current_trip(first)
    assert sync.selection == DateRange(start=date(2026, 5, 1), end=date(2026, 5, 8))

    # later updates do not reseed the selection
    repository.update_trip(first.id, end_date=date(2026, 5, 20))
    assert sync.selection.end == date(2026, 5, 8)
    sync.close()


def test_initial_selection_needs_both_dates(repository):
    """Test partially dated trips produce no initial selection."""
    trip = repository.create_trip()
    assert initial_selection(trip) is None
    updated = repository.update_trip(trip.id, start_date=date(2026, 5, 1))
    assert initial_selection(updated) is None
    assert initial_selection(None) is None


def test_strict_mode_rejects_inverted_selection(strict_repository):
    """Test strict mode keeps the previous dates and selection."""
    trip = strict_repository.create_trip()
    sync = DateSync(strict_repository)
    good = DateRange(start=date(2026, 5, 1), end=date(2026, 5, 8))
    sync.select(good)

    with pytest.raises(ValidationError):
        sync.select(DateRange(start=date(2026, 5, 10), end=date(2026, 5, 2)))

    assert sync.selection == good
    assert strict_repository.get_trip(trip.id).start_date == date(2026, 5, 1)
