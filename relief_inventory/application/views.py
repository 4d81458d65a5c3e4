"""Read models: entries, requests and offers joined with catalog and location names."""

from datetime import datetime
from typing import Callable, Dict, Iterable, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from relief_inventory.domain.enums import DonationStatus, ResupplyStatus, StockStatus
from relief_inventory.domain.models import DonationOffer, InventoryEntry, ResupplyRequest
from .availability import describe_availability
from .catalog import ItemCatalog, LocationDirectory
from .schemas import (
    DonationOfferRead,
    InventoryEntryRead,
    InventorySummaryRead,
    ResupplyRequestRead,
)
from .status import StockThresholds, is_low_stock


class EntryPresenter:
    def __init__(self, db: Session, catalog: ItemCatalog, locations: LocationDirectory,
                 thresholds: StockThresholds, clock: Callable[[], datetime]):
        self.db = db
        self.catalog = catalog
        self.locations = locations
        self.thresholds = thresholds
        self.clock = clock

    def _open_counts(self, entry_ids: List[int]) -> Tuple[Dict[int, int], Dict[int, int]]:
        if not entry_ids:
            return {}, {}
        pending = dict(self.db.execute(
            select(ResupplyRequest.entry_id, func.count(ResupplyRequest.id))
            .where(ResupplyRequest.entry_id.in_(entry_ids), ResupplyRequest.status == ResupplyStatus.PENDING)
            .group_by(ResupplyRequest.entry_id)
        ).all())
        offered = dict(self.db.execute(
            select(DonationOffer.entry_id, func.count(DonationOffer.id))
            .where(DonationOffer.entry_id.in_(entry_ids), DonationOffer.status == DonationStatus.OFFERED)
            .group_by(DonationOffer.entry_id)
        ).all())
        return pending, offered

    def entries(self, entries: Iterable[InventoryEntry]) -> List[InventoryEntryRead]:
        entries = list(entries)
        pending, offered = self._open_counts([e.id for e in entries])
        names = self.locations.names(
            code for e in entries for code in (e.district_code, e.tehsil_code, e.village_code)
        )
        now = self.clock()
        result = []
        for entry in entries:
            item = self.catalog.summary(entry.item_type_id)
            availability = describe_availability(entry, now)
            read = InventoryEntryRead.model_validate(entry)
            read = read.model_copy(update={
                "item_type_name": item.name if item else None,
                "item_unit": item.unit if item else None,
                "item_category": item.category if item else None,
                "district_name": names.get(entry.district_code),
                "tehsil_name": names.get(entry.tehsil_code),
                "village_name": names.get(entry.village_code) if entry.village_code else None,
                "is_offerable_now": availability.offerable,
                "response_hours": availability.response_hours,
                "pending_resupply_count": pending.get(entry.id, 0),
                "open_donation_count": offered.get(entry.id, 0),
            })
            result.append(read)
        return result

    def entry(self, entry: InventoryEntry) -> InventoryEntryRead:
        return self.entries([entry])[0]

    def request(self, request: ResupplyRequest) -> ResupplyRequestRead:
        return self.requests([request])[0]

    def requests(self, requests: Iterable[ResupplyRequest]) -> List[ResupplyRequestRead]:
        result = []
        for request in requests:
            item = self.catalog.summary(request.entry.item_type_id) if request.entry else None
            result.append(ResupplyRequestRead.model_validate(request).model_copy(update={
                "item_type_name": item.name if item else None,
                "item_unit": item.unit if item else None,
            }))
        return result

    def offer(self, offer: DonationOffer) -> DonationOfferRead:
        return self.offers([offer])[0]

    def offers(self, offers: Iterable[DonationOffer]) -> List[DonationOfferRead]:
        result = []
        for offer in offers:
            item = self.catalog.summary(offer.entry.item_type_id) if offer.entry else None
            result.append(DonationOfferRead.model_validate(offer).model_copy(update={
                "item_type_name": item.name if item else None,
                "item_unit": item.unit if item else None,
            }))
        return result

    def summary(self, entries: Iterable[InventoryEntry]) -> InventorySummaryRead:
        entries = list(entries)
        by_status = {status: 0 for status in StockStatus}
        for entry in entries:
            by_status[StockStatus(entry.status)] += 1
        pending, offered = self._open_counts([e.id for e in entries])
        return InventorySummaryRead(
            total_entries=len(entries),
            by_status=by_status,
            low_stock_entries=sum(1 for e in entries if is_low_stock(e, self.thresholds)),
            pending_resupply_requests=sum(pending.values()),
            open_donation_offers=sum(offered.values()),
        )
