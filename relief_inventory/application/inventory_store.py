"""
InventoryEntry store.

Owns creation, partial updates, deletion and listing of inventory entries and
enforces the quantity invariant 0 <= available <= total on every write. The
store never commits and never locks: the coordination façade wraps each call
in the entry's critical section and transaction.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from relief_inventory.domain.enums import (
    AvailabilityMode,
    DonationStatus,
    ResupplyStatus,
)
from relief_inventory.domain.errors import ConflictError, InvalidQuantityError, NotFoundError
from relief_inventory.domain.models import DonationOffer, InventoryEntry, ItemType, ResupplyRequest
from .availability import as_utc
from .catalog import ItemCatalog, LocationDirectory
from .schemas import InventoryEntryCreate, InventoryEntryUpdate, InventoryFilter
from .status import StockThresholds, apply_status, is_low_stock

RESPONSE_HOURS_MIN = 1
RESPONSE_HOURS_MAX = 72

ACTIVE_RESUPPLY_STATES = (ResupplyStatus.PENDING, ResupplyStatus.APPROVED)
ACTIVE_DONATION_STATES = (DonationStatus.OFFERED, DonationStatus.ACCEPTED)

# Fields a direct edit may change; identity and location are fixed at creation
UPDATABLE_FIELDS = (
    "quantity_total", "quantity_available", "condition", "availability_mode",
    "available_from", "available_until", "response_hours", "batch_number",
    "expiry_date", "storage_location", "notes", "evidence_urls", "visibility",
    "is_verified",
)

# Non-nullable columns where an explicit null in a partial update is ignored
NULL_MEANS_UNCHANGED = ("condition", "availability_mode", "visibility", "is_verified", "evidence_urls")


def validate_entry_state(values: Dict[str, Any]) -> None:
    """
    Check quantities and availability-mode fields of a complete entry state.

    Collects every problem before raising so callers get field-level messages.
    """
    errors = []
    total = values.get("quantity_total")
    available = values.get("quantity_available")

    if total is None:
        errors.append({"field": "quantity_total", "message": "Total quantity is required"})
    elif total < 0:
        errors.append({"field": "quantity_total", "message": "Total quantity cannot be negative"})
    if available is None:
        errors.append({"field": "quantity_available", "message": "Available quantity is required"})
    elif available < 0:
        errors.append({"field": "quantity_available", "message": "Available quantity cannot be negative"})
    if total is not None and available is not None and available > total:
        errors.append({
            "field": "quantity_available",
            "message": "Available quantity cannot exceed total quantity",
        })

    mode = AvailabilityMode(values.get("availability_mode") or AvailabilityMode.IMMEDIATE)
    start = as_utc(values.get("available_from"))
    end = as_utc(values.get("available_until"))
    if mode == AvailabilityMode.SCHEDULED:
        if start is None or end is None:
            errors.append({
                "field": "available_from" if start is None else "available_until",
                "message": "Date range is required for scheduled availability",
            })
        elif start > end:
            errors.append({"field": "available_until", "message": "Availability window ends before it starts"})
    elif mode == AvailabilityMode.LIMITED_TIME and end is None:
        errors.append({"field": "available_until", "message": "End date is required for limited-time availability"})

    # Range applies whenever a value is stored, whatever the mode
    hours = values.get("response_hours")
    if (hours is None and mode == AvailabilityMode.ON_REQUEST) or (
            hours is not None and not RESPONSE_HOURS_MIN <= hours <= RESPONSE_HOURS_MAX):
        errors.append({
            "field": "response_hours",
            "message": f"Response time must be between {RESPONSE_HOURS_MIN} and {RESPONSE_HOURS_MAX} hours",
        })

    if errors:
        raise InvalidQuantityError(errors[0]["message"], errors)


def entry_state(entry: InventoryEntry) -> Dict[str, Any]:
    return {name: getattr(entry, name) for name in UPDATABLE_FIELDS}


class InventoryStore:
    def __init__(self, db: Session, catalog: ItemCatalog, locations: LocationDirectory,
                 thresholds: StockThresholds, default_response_hours: int = 24):
        self.db = db
        self.catalog = catalog
        self.locations = locations
        self.thresholds = thresholds
        self.default_response_hours = default_response_hours

    def create(self, provider_id: str, data: InventoryEntryCreate) -> InventoryEntry:
        values = data.model_dump(exclude={"provider_id", "status"})
        if values["quantity_available"] is None:
            values["quantity_available"] = values["quantity_total"]
        if values["availability_mode"] == AvailabilityMode.ON_REQUEST and values["response_hours"] is None:
            values["response_hours"] = self.default_response_hours

        if values["quantity_total"] is not None and values["quantity_total"] <= 0:
            raise InvalidQuantityError.for_field("quantity_total", "Valid quantity is required")
        validate_entry_state(values)

        self.catalog.resolve_item_type(data.item_type_id)
        self.locations.resolve_location(data.district_code, data.tehsil_code, data.village_code)

        entry = InventoryEntry(provider_id=provider_id, **values)
        apply_status(entry, data.status, self.thresholds)
        self.db.add(entry)
        self.db.flush()
        return entry

    def get(self, entry_id: int) -> InventoryEntry:
        entry = self.db.get(InventoryEntry, entry_id)
        if entry is None:
            raise NotFoundError("Inventory entry", entry_id)
        return entry

    def update(self, entry: InventoryEntry, data: InventoryEntryUpdate) -> InventoryEntry:
        changes = data.model_dump(exclude_unset=True)
        requested_status = changes.pop("status", None)
        for name in NULL_MEANS_UNCHANGED:
            if name in changes and changes[name] is None:
                changes.pop(name)

        merged = entry_state(entry)
        merged.update(changes)
        if merged["availability_mode"] == AvailabilityMode.ON_REQUEST and merged["response_hours"] is None:
            merged["response_hours"] = self.default_response_hours
            changes["response_hours"] = self.default_response_hours
        validate_entry_state(merged)

        for name, value in changes.items():
            setattr(entry, name, value)
        apply_status(entry, requested_status, self.thresholds)
        self.db.flush()
        return entry

    def add_stock(self, entry: InventoryEntry, quantity: int, grow_total: bool) -> InventoryEntry:
        """
        Add incoming stock to an entry.

        With grow_total the capacity grows by the same amount (a pledged
        restock); otherwise total is only raised when available would exceed it.
        """
        entry.quantity_available += quantity
        if grow_total:
            entry.quantity_total += quantity
        elif entry.quantity_available > entry.quantity_total:
            entry.quantity_total = entry.quantity_available
        apply_status(entry, None, self.thresholds)
        self.db.flush()
        return entry

    def active_dependents(self, entry_id: int) -> Dict[str, int]:
        requests = self.db.scalar(
            select(func.count(ResupplyRequest.id)).where(
                ResupplyRequest.entry_id == entry_id,
                ResupplyRequest.status.in_(ACTIVE_RESUPPLY_STATES),
            )
        )
        offers = self.db.scalar(
            select(func.count(DonationOffer.id)).where(
                DonationOffer.entry_id == entry_id,
                DonationOffer.status.in_(ACTIVE_DONATION_STATES),
            )
        )
        return {"resupply_requests": requests or 0, "donation_offers": offers or 0}

    def delete(self, entry: InventoryEntry, force: bool = False) -> None:
        """Delete an entry together with its requests and offers."""
        if not force:
            active = self.active_dependents(entry.id)
            if active["resupply_requests"] or active["donation_offers"]:
                raise ConflictError(
                    "Cannot delete inventory entry with active requests or offers: "
                    f"{active['resupply_requests']} active resupply requests, "
                    f"{active['donation_offers']} active donation offers"
                )
        self.db.delete(entry)
        self.db.flush()

    def list(self, filters: Optional[InventoryFilter] = None) -> List[InventoryEntry]:
        filters = filters or InventoryFilter()
        query = select(InventoryEntry)
        if filters.provider_id is not None:
            query = query.where(InventoryEntry.provider_id == filters.provider_id)
        if filters.location_code is not None:
            code = filters.location_code
            query = query.where(or_(
                InventoryEntry.district_code == code,
                InventoryEntry.tehsil_code == code,
                InventoryEntry.village_code == code,
            ))
        if filters.category is not None:
            query = query.join(ItemType, InventoryEntry.item_type_id == ItemType.id).where(
                ItemType.category == filters.category
            )
        if filters.status is not None:
            query = query.where(InventoryEntry.status == filters.status)
        query = query.order_by(InventoryEntry.updated_at.desc(), InventoryEntry.id.desc())

        entries = list(self.db.scalars(query))
        if filters.low_stock_only:
            entries = [e for e in entries if is_low_stock(e, self.thresholds)]
        return entries
