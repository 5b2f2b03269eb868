"""
Duplicate emergency detection.

The same incident often reaches the dashboard more than once: client retries,
double submits from the crisis button, or several witnesses reporting the
same scene. `deduplicate` collapses those copies into one representative,
keeping the most recently created report of each cluster.

Two reports are duplicates when they were created less than the time window
apart and either

- their content signature (type, reporter, location text, description) is
  identical, or
- both carry coordinates, the coordinates round to the same cell, and the
  emergency type is the same.

The detector is pure: it never mutates its input and never raises on
missing or malformed optional fields.
"""

import logging
import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(minutes=2)
DEFAULT_PRECISION = 3  # decimal places, ~111 m

_EPOCH = datetime.fromtimestamp(0, tz=UTC)

R = TypeVar("R")


def _field(report: Any, name: str) -> Any:
    if isinstance(report, dict):
        return report.get(name)
    return getattr(report, name, None)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def report_timestamp(report: Any) -> datetime:
    """
    Return the report's creation time as an aware UTC datetime.

    Missing or unparseable values map to the epoch so they sort as oldest.
    Naive datetimes are read as UTC.
    """
    value = _field(report, "created_at")
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return _EPOCH
    if not isinstance(value, datetime):
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def coordinates(report: Any) -> tuple[float, float] | None:
    """Return (latitude, longitude) when both are present and finite."""
    lat = _field(report, "latitude")
    lng = _field(report, "longitude")
    if lat is None or lng is None:
        return None
    try:
        lat, lng = float(lat), float(lng)
    except (TypeError, ValueError, OverflowError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    return lat, lng


def content_signature(report: Any) -> str:
    """Composite key of type, reporter, location text and description."""
    return "|".join(
        _text(_field(report, name))
        for name in ("emergency_type", "reporter_name", "location", "description")
    )


def location_signature(report: Any, precision: int = DEFAULT_PRECISION) -> str | None:
    """Coordinates rounded to `precision` decimals, or None without coordinates."""
    coords = coordinates(report)
    if coords is None:
        return None
    lat, lng = coords
    # + 0.0 folds -0.0 into 0.0
    return f"{round(lat, precision) + 0.0}|{round(lng, precision) + 0.0}"


def deduplicate(
    reports: Iterable[R],
    window: timedelta = DEFAULT_WINDOW,
    precision: int = DEFAULT_PRECISION,
) -> list[R]:
    """
    Collapse duplicate emergency reports, most recent representative first.

    Args:
        reports: Emergency reports (ORM rows, schema objects or dicts)
        window: Reports further apart than this are never merged
        precision: Decimal places used for the location signature

    Returns:
        Subset of `reports` with at most one report per duplicate cluster,
        ordered by `created_at` descending
    """
    ordered: Sequence[R] = sorted(reports, key=report_timestamp, reverse=True)

    # Each signature can hold several representatives created far apart.
    by_content: dict[str, list[R]] = defaultdict(list)
    by_location: dict[str, list[R]] = defaultdict(list)
    representatives: list[R] = []

    for report in ordered:
        created = report_timestamp(report)
        content_key = content_signature(report)
        location_key = location_signature(report, precision)

        def within_window(existing: R) -> bool:
            return abs(created - report_timestamp(existing)) < window

        duplicate = any(within_window(e) for e in by_content.get(content_key, ()))
        if not duplicate and location_key is not None:
            report_type = _field(report, "emergency_type")
            duplicate = any(
                within_window(e) and _field(e, "emergency_type") == report_type
                for e in by_location.get(location_key, ())
            )

        if duplicate:
            continue

        representatives.append(report)
        by_content[content_key].append(report)
        if location_key is not None:
            by_location[location_key].append(report)

    if len(representatives) < len(ordered):
        logger.debug(
            f"Collapsed {len(ordered) - len(representatives)} duplicate emergencies "
            f"({len(representatives)} kept)"
        )

    return representatives
