"""Pytest configuration and shared fixtures."""

from datetime import timezone

import pytest

from shuttle_dispatch.domain.value_objects.day_window import DayWindow
from tests.factories import BOARD_DATE, FakeFeed, FakeMutationApi


@pytest.fixture
def day() -> DayWindow:
    return DayWindow.for_date(BOARD_DATE, timezone.utc)


@pytest.fixture
def mutation_api() -> FakeMutationApi:
    return FakeMutationApi()


@pytest.fixture
def feed() -> FakeFeed:
    return FakeFeed()
