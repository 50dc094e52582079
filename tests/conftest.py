"""Pytest configuration and fixtures."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from contractor_invoicing.config.settings import get_settings
from contractor_invoicing.invoicing import DailyWorkRecord, RateCard
from contractor_invoicing.schedule import build_schedule
from contractor_invoicing.service import ContractorProfile


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def rates():
    """Rate card used in the product's worked example."""
    return RateCard(
        day_rate=Decimal("450"),
        truck_day_rate=Decimal("150"),
        rate_per_km=Decimal("0.68"),
        subsistence_rate=Decimal("75"),
    )


@pytest.fixture
def schedule():
    """Schedule for a Monday 2024-01-08 start."""
    return build_schedule(date(2024, 1, 8), 26)


@pytest.fixture
def full_period(schedule):
    """Period 2: Friday 2024-01-12 through Thursday 2024-01-25."""
    return schedule.periods[1]


@pytest.fixture
def worked_records(full_period):
    """Ten weekdays worked, two with the truck, 100 km, three subsistence days."""
    weekdays = [
        full_period.start_date + timedelta(days=offset)
        for offset in range(full_period.days_in_period)
        if (full_period.start_date + timedelta(days=offset)).weekday() < 5
    ]
    assert len(weekdays) == 10
    return [
        DailyWorkRecord(
            date=day,
            days_worked=Decimal("1"),
            truck_used=idx < 2,
            travel_distance_km=Decimal("10"),
            subsistence_claimed=idx < 3,
        )
        for idx, day in enumerate(weekdays)
    ]


@pytest.fixture
def profile(rates):
    return ContractorProfile(
        contractor_id="contractor-1",
        name="Dana Field",
        contract_start=date(2024, 1, 8),
        rates=rates,
        invoice_sequence="INV-1001",
    )
