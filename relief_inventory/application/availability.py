"""
Availability resolution.

Answers whether an entry's stock may be claimed right now given its
availability mode. Read-only: listing and search collaborators consult it,
the core's own writes never do.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from relief_inventory.domain.enums import AvailabilityMode, StockStatus


@dataclass(frozen=True)
class AvailabilityView:
    offerable: bool
    mode: AvailabilityMode
    # Advisory response SLA for ON_REQUEST entries, never enforced
    response_hours: Optional[int] = None


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_offerable_now(entry, now: Optional[datetime] = None) -> bool:
    now = as_utc(now) or datetime.now(timezone.utc)
    mode = AvailabilityMode(entry.availability_mode or AvailabilityMode.IMMEDIATE)

    if mode == AvailabilityMode.IMMEDIATE:
        return entry.status != StockStatus.OUT_OF_STOCK

    if mode == AvailabilityMode.SCHEDULED:
        start = as_utc(entry.available_from)
        end = as_utc(entry.available_until)
        if start is None or end is None:
            return False
        return start <= now <= end

    if mode == AvailabilityMode.ON_REQUEST:
        return True

    # LIMITED_TIME: open-ended start
    end = as_utc(entry.available_until)
    if end is None:
        return False
    return now <= end


def describe_availability(entry, now: Optional[datetime] = None) -> AvailabilityView:
    mode = AvailabilityMode(entry.availability_mode or AvailabilityMode.IMMEDIATE)
    return AvailabilityView(
        offerable=is_offerable_now(entry, now),
        mode=mode,
        response_hours=entry.response_hours if mode == AvailabilityMode.ON_REQUEST else None,
    )
