"""
Coordination façade.

The only entry point collaborators call. Every mutation that touches an
inventory entry, directly or through one of its resupply requests or donation
offers, runs inside `_locked_entry`: the per-entry in-process lock, a row lock
on the entry, one transaction, commit or rollback. The transition and its
quantity effect therefore land together or not at all.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from shared.core import get_logger
from relief_inventory.core_settings import Settings, get_settings
from relief_inventory.domain.enums import DonationStatus, ItemCategory, ResupplyStatus
from relief_inventory.domain.errors import ConflictError, ForbiddenError, NotFoundError
from relief_inventory.domain.models import DonationOffer, InventoryEntry, ResupplyRequest, utcnow
from relief_inventory.infrastructure.locking import EntryLockRegistry, entry_locks
from .actor import Actor
from .catalog import ItemCatalog, LocationDirectory
from .donations import DonationWorkflow
from .inventory_store import InventoryStore
from .resupply import ResupplyWorkflow
from .schemas import (
    DonationOfferCreate,
    DonationOfferRead,
    InventoryEntryCreate,
    InventoryEntryRead,
    InventoryEntryUpdate,
    InventoryFilter,
    InventorySummaryRead,
    ItemTypeRead,
    ResupplyRequestCreate,
    ResupplyRequestRead,
    ResupplyReview,
)
from .status import StockThresholds
from .views import EntryPresenter

logger = get_logger(__name__)


class CoordinationService:
    def __init__(self, db: Session, settings: Optional[Settings] = None,
                 locks: EntryLockRegistry = entry_locks,
                 clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.settings = settings or get_settings()
        self.locks = locks
        self.clock = clock
        self.thresholds = StockThresholds.from_settings(self.settings)
        self.catalog = ItemCatalog(db)
        self.locations = LocationDirectory(db)
        self.store = InventoryStore(db, self.catalog, self.locations, self.thresholds,
                                    default_response_hours=self.settings.DEFAULT_RESPONSE_HOURS)
        self.resupply = ResupplyWorkflow(db, self.store, clock)
        self.donations = DonationWorkflow(db, self.store, clock)
        self.presenter = EntryPresenter(db, self.catalog, self.locations, self.thresholds, clock)

    # Critical section

    @contextmanager
    def _locked_entry(self, entry_id: int, vanished: str = "not_found") -> Iterator[InventoryEntry]:
        """
        Hold the entry's lock and transaction for the duration of the block.

        `vanished` selects the error when the entry no longer exists:
        "not_found" for direct addressing, "conflict" when a dependent record
        pointed at it (it was deleted concurrently).
        """
        with self.locks.hold(entry_id):
            try:
                entry = self.db.scalars(
                    select(InventoryEntry)
                    .where(InventoryEntry.id == entry_id)
                    .with_for_update(of=InventoryEntry)
                    .execution_options(populate_existing=True)
                ).first()
                if entry is None:
                    if vanished == "conflict":
                        raise ConflictError(f"Inventory entry {entry_id} was deleted; refetch and retry")
                    raise NotFoundError("Inventory entry", entry_id)
                yield entry
                self.db.commit()
            except StaleDataError as exc:
                self.db.rollback()
                logger.warning(f"Concurrent modification of inventory entry {entry_id}")
                raise ConflictError(f"Inventory entry {entry_id} was modified concurrently; refetch and retry") from exc
            except Exception:
                self.db.rollback()
                raise

    def _reload(self, model, record_id: int):
        """Re-read a dependent record inside the critical section."""
        record = self.db.scalars(
            select(model).where(model.id == record_id).execution_options(populate_existing=True)
        ).first()
        if record is None:
            raise ConflictError(f"{model.__name__} {record_id} was removed concurrently; refetch and retry")
        return record

    def _require_manager(self, actor: Actor, entry: InventoryEntry) -> None:
        if not actor.can_manage(entry.provider_id):
            raise ForbiddenError("Only the owning provider or an administrator can modify this inventory entry")

    # Inventory entries

    def list_inventory(self, filters: Optional[InventoryFilter] = None) -> List[InventoryEntryRead]:
        return self.presenter.entries(self.store.list(filters))

    def inventory_summary(self, filters: Optional[InventoryFilter] = None) -> InventorySummaryRead:
        return self.presenter.summary(self.store.list(filters))

    def get_entry(self, entry_id: int) -> InventoryEntryRead:
        return self.presenter.entry(self.store.get(entry_id))

    def create_entry(self, actor: Actor, data: InventoryEntryCreate) -> InventoryEntryRead:
        provider_id = data.provider_id or actor.user_id
        if not actor.can_manage(provider_id):
            raise ForbiddenError("Cannot declare inventory on behalf of another provider")
        try:
            entry = self.store.create(provider_id, data)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(
            f"Inventory entry {entry.id} created",
            extra={'extra_fields': {
                'entry_id': entry.id,
                'provider_id': provider_id,
                'item_type_id': entry.item_type_id,
                'quantity_total': entry.quantity_total,
                'quantity_available': entry.quantity_available,
                'status': entry.status.value,
            }}
        )
        return self.presenter.entry(entry)

    def update_entry(self, actor: Actor, entry_id: int, data: InventoryEntryUpdate) -> InventoryEntryRead:
        with self._locked_entry(entry_id) as entry:
            self._require_manager(actor, entry)
            self.store.update(entry, data)
        logger.info(
            f"Inventory entry {entry_id} updated",
            extra={'extra_fields': {
                'entry_id': entry_id,
                'fields': sorted(data.model_dump(exclude_unset=True)),
                'status': entry.status.value,
            }}
        )
        return self.presenter.entry(entry)

    def delete_entry(self, actor: Actor, entry_id: int, force: bool = False) -> None:
        with self._locked_entry(entry_id) as entry:
            self._require_manager(actor, entry)
            self.store.delete(entry, force=force)
        self.locks.forget(entry_id)
        logger.info(f"Inventory entry {entry_id} deleted",
                    extra={'extra_fields': {'entry_id': entry_id, 'force': force}})

    # Resupply requests

    def list_resupply_requests(self, entry_id: int,
                               status: Optional[ResupplyStatus] = None) -> List[ResupplyRequestRead]:
        self.store.get(entry_id)
        return self.presenter.requests(self.resupply.list(entry_id, status))

    def get_resupply_request(self, request_id: int, entry_id: Optional[int] = None) -> ResupplyRequestRead:
        return self.presenter.request(self.resupply.get(request_id, entry_id))

    def create_resupply_request(self, actor: Actor, entry_id: int,
                                data: ResupplyRequestCreate) -> ResupplyRequestRead:
        with self._locked_entry(entry_id) as entry:
            request = self.resupply.create(entry, actor.user_id, data)
        return self.presenter.request(request)

    def review_resupply_request(self, actor: Actor, request_id: int, review: ResupplyReview,
                                entry_id: Optional[int] = None) -> ResupplyRequestRead:
        request = self.resupply.get(request_id, entry_id)
        with self._locked_entry(request.entry_id, vanished="conflict"):
            request = self._reload(ResupplyRequest, request_id)
            self.resupply.review(request, actor.user_id, review.decision, review.notes)
        return self.presenter.request(request)

    def fulfill_resupply_request(self, actor: Actor, request_id: int,
                                 entry_id: Optional[int] = None) -> ResupplyRequestRead:
        request = self.resupply.get(request_id, entry_id)
        with self._locked_entry(request.entry_id, vanished="conflict") as entry:
            request = self._reload(ResupplyRequest, request_id)
            self.resupply.fulfill(request, entry, actor.user_id)
        return self.presenter.request(request)

    def cancel_resupply_request(self, actor: Actor, request_id: int,
                                entry_id: Optional[int] = None) -> ResupplyRequestRead:
        request = self.resupply.get(request_id, entry_id)
        with self._locked_entry(request.entry_id, vanished="conflict"):
            request = self._reload(ResupplyRequest, request_id)
            self.resupply.cancel(request, actor.user_id)
        return self.presenter.request(request)

    # Donation offers

    def list_donation_offers(self, entry_id: int,
                             status: Optional[DonationStatus] = None) -> List[DonationOfferRead]:
        self.store.get(entry_id)
        return self.presenter.offers(self.donations.list(entry_id, status))

    def get_donation_offer(self, offer_id: int, entry_id: Optional[int] = None) -> DonationOfferRead:
        return self.presenter.offer(self.donations.get(offer_id, entry_id))

    def create_donation_offer(self, actor: Actor, entry_id: int,
                              data: DonationOfferCreate) -> DonationOfferRead:
        with self._locked_entry(entry_id) as entry:
            offer = self.donations.create(entry, actor.user_id, data)
        return self.presenter.offer(offer)

    def accept_donation_offer(self, actor: Actor, offer_id: int,
                              entry_id: Optional[int] = None) -> DonationOfferRead:
        offer = self.donations.get(offer_id, entry_id)
        with self._locked_entry(offer.entry_id, vanished="conflict"):
            offer = self._reload(DonationOffer, offer_id)
            self.donations.accept(offer, actor.user_id)
        return self.presenter.offer(offer)

    def decline_donation_offer(self, actor: Actor, offer_id: int,
                               entry_id: Optional[int] = None) -> DonationOfferRead:
        offer = self.donations.get(offer_id, entry_id)
        with self._locked_entry(offer.entry_id, vanished="conflict"):
            offer = self._reload(DonationOffer, offer_id)
            self.donations.decline(offer, actor.user_id)
        return self.presenter.offer(offer)

    def withdraw_donation_offer(self, actor: Actor, offer_id: int,
                                entry_id: Optional[int] = None) -> DonationOfferRead:
        offer = self.donations.get(offer_id, entry_id)
        with self._locked_entry(offer.entry_id, vanished="conflict"):
            offer = self._reload(DonationOffer, offer_id)
            self.donations.withdraw(offer, actor.user_id)
        return self.presenter.offer(offer)

    def mark_donation_delivered(self, actor: Actor, offer_id: int,
                                entry_id: Optional[int] = None) -> DonationOfferRead:
        offer = self.donations.get(offer_id, entry_id)
        with self._locked_entry(offer.entry_id, vanished="conflict") as entry:
            offer = self._reload(DonationOffer, offer_id)
            self.donations.mark_delivered(offer, entry, actor.user_id)
        return self.presenter.offer(offer)

    # Catalog

    def list_item_types(self, category: Optional[ItemCategory] = None,
                        include_inactive: bool = False) -> List[ItemTypeRead]:
        return [ItemTypeRead.model_validate(t) for t in self.catalog.list(category, include_inactive)]
