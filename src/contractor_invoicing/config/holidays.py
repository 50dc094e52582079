"""Statutory holiday calendar loader."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

MONTH_NAME_TO_INDEX = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}

DEFAULT_HOLIDAYS_PATH = Path(__file__).resolve().parent / "holidays.yaml"


@dataclass(frozen=True)
class StatutoryHoliday:
    """A holiday that recurs on the same month and day every year."""

    name: str
    month: int
    day: int

    def matches(self, target_date: date) -> bool:
        """Return True if the holiday falls on the target date."""
        return self.month == target_date.month and self.day == target_date.day


def _parse_month(value: Any) -> int | None:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip().lower()
        if stripped.isdigit():
            return int(stripped)
        return MONTH_NAME_TO_INDEX.get(stripped)
    return None


def _parse_month_day(value: Any) -> tuple[int, int] | None:
    if isinstance(value, str):
        parts = value.strip().split("-")
        if len(parts) == 2 and all(part.isdigit() for part in parts):
            return int(parts[0]), int(parts[1])
    return None


def _parse_rule(item: dict[str, Any]) -> tuple[int, int]:
    rule_value = item.get("date_rule")
    if not rule_value:
        raise ValueError("holiday missing date_rule")
    if not isinstance(rule_value, str):
        raise ValueError("holiday date_rule must be a string")

    normalized = rule_value.strip().lower()
    if normalized == "fixed":
        month = _parse_month(item.get("month"))
        day = item.get("day")
        if month is None or not isinstance(day, int):
            raise ValueError("fixed date_rule requires month (1-12) and day (1-31)")
    else:
        month_day = _parse_month_day(normalized)
        if month_day is None:
            raise ValueError(f"Invalid date_rule {rule_value!r}")
        month, day = month_day

    if not (1 <= month <= 12) or not (1 <= day <= 31):
        raise ValueError("fixed date_rule month/day out of range")
    return month, day


def parse_holiday_calendar(data: Any) -> list[StatutoryHoliday]:
    """Build holiday definitions from parsed YAML data."""
    if data is None:
        return []

    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        items = data.get("holidays") or []
    else:
        raise ValueError("holidays.yaml must be a list or mapping with 'holidays'")

    if not isinstance(items, list):
        raise ValueError("holidays must be a list")

    results: list[StatutoryHoliday] = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValueError(f"holidays[{idx}] must be a mapping")
        name = item.get("name")
        if not name:
            raise ValueError(f"holidays[{idx}] missing name")
        try:
            month, day = _parse_rule(item)
        except ValueError as exc:
            raise ValueError(f"holidays[{idx}] {exc}") from exc
        results.append(StatutoryHoliday(name=str(name), month=month, day=day))

    return results


@lru_cache
def load_holiday_calendar(path: Path = DEFAULT_HOLIDAYS_PATH) -> tuple[StatutoryHoliday, ...]:
    """Load statutory holiday definitions from YAML."""
    if not path.exists():
        return ()

    raw = path.read_text(encoding="utf-8")
    return tuple(parse_holiday_calendar(yaml.safe_load(raw)))
