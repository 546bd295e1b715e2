"""Pytest fixtures shared across the test suite."""

from __future__ import annotations

from collections.abc import Sequence

import pytest
from django.contrib.auth import get_user_model

from analysis.dto import DataMapping, Dataset, Field, FieldType


@pytest.fixture
def user(db):
    """Return a user that can log in."""

    user_model = get_user_model()
    return user_model.objects.create_user(username="alice", password="password")


@pytest.fixture
def auth_client(client, user):
    """Return a Django test client authenticated as the default test user."""

    client.force_login(user)
    return client


@pytest.fixture
def sales_dataset() -> Dataset:
    """Return a small Month/Region/Sales/Units dataset with repeated months."""

    return Dataset(
        id="ds_sales",
        name="sales.csv",
        size="1.0 KB",
        uploaded_at="2024-01-01 00:00",
        fields=[
            Field("Month", FieldType.TEXT),
            Field("Region", FieldType.TEXT),
            Field("Sales", FieldType.NUMERIC),
            Field("Units", FieldType.NUMERIC),
        ],
        data=[
            ["Feb", "East", 200.0, 4.0],
            ["Jan", "East", 100.0, 2.0],
            ["Feb", "West", 50.0, 1.0],
            ["Jan", "West", 25.0, 3.0],
        ],
    )


@pytest.fixture
def sales_mapping() -> DataMapping:
    """Return a Month -> Sales mapping."""

    return DataMapping(x_axis="Month", y_axis=["Sales"])


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, fast tests with no database access.
    - `integration`: tests touching Django, database, views, commands, or IO.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
