"""Logbook cell formatting. Data cells suppress zero hours; footer totals never do."""
from __future__ import annotations

from typing import Any

from models import parse_flight_date, parse_hours

MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_date(value: Any) -> str:
    d = parse_flight_date(value)
    if d is None:
        return ""
    return f"{MONTH_ABBREVIATIONS[d.month - 1]}-{d.day:02d}"


def format_year(value: Any) -> str:
    d = parse_flight_date(value)
    if d is None:
        return ""
    return str(d.year)


def format_hours_footer(hours: Any) -> str:
    value = parse_hours(hours)
    if not value:
        return "0.0"
    return f"{value:.1f}"


def format_hours_cell(hours: Any) -> str:
    value = parse_hours(hours)
    if not value:
        return ""
    return f"{value:.1f}"


def truncate(text: Any, max_len: int) -> str:
    value = "" if text is None else str(text)
    if len(value) <= max_len:
        return value
    return value[: max(0, max_len - 3)] + "..."
