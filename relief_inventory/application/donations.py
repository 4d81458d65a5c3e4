"""
Donation workflow: supply-side offers filed against one inventory entry.

OFFERED -> ACCEPTED -> DELIVERED; OFFERED -> CANCELLED either by the donor
(withdraw) or by a reviewer (decline, recorded through reviewed_by).
Delivery adds the offered quantity to the entry.
"""

from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.core import get_logger
from relief_inventory.domain.enums import DonationAction, DonationStatus
from relief_inventory.domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from relief_inventory.domain.models import DonationOffer, InventoryEntry
from .inventory_store import InventoryStore
from .schemas import DonationOfferCreate
from .transitions import DONATION_TRANSITIONS

logger = get_logger(__name__)


class DonationWorkflow:
    def __init__(self, db: Session, store: InventoryStore, clock: Callable[[], datetime]):
        self.db = db
        self.store = store
        self.clock = clock

    def get(self, offer_id: int, entry_id: Optional[int] = None) -> DonationOffer:
        offer = self.db.get(DonationOffer, offer_id)
        if offer is None or (entry_id is not None and offer.entry_id != entry_id):
            raise NotFoundError("Donation offer", offer_id)
        return offer

    def list(self, entry_id: int, status: Optional[DonationStatus] = None) -> List[DonationOffer]:
        query = select(DonationOffer).where(DonationOffer.entry_id == entry_id)
        if status is not None:
            query = query.where(DonationOffer.status == status)
        query = query.order_by(DonationOffer.created_at.desc(), DonationOffer.id.desc())
        return list(self.db.scalars(query))

    def create(self, entry: InventoryEntry, donor_id: str, data: DonationOfferCreate) -> DonationOffer:
        errors = []
        if data.quantity_offered <= 0:
            errors.append({"field": "quantity_offered", "message": "Valid quantity offered is required"})
        if not data.donor_name.strip():
            errors.append({"field": "donor_name", "message": "Donor name is required"})
        if not data.donor_contact.strip():
            errors.append({"field": "donor_contact", "message": "Donor contact information is required"})
        if errors:
            raise ValidationError(errors[0]["message"], errors)

        existing = self.db.scalars(
            select(DonationOffer).where(
                DonationOffer.entry_id == entry.id,
                DonationOffer.offered_by == donor_id,
                DonationOffer.status == DonationStatus.OFFERED,
            )
        ).first()
        if existing is not None:
            raise ConflictError(f"You already have a pending donation offer ({existing.id}) for this item")

        offer = DonationOffer(
            entry_id=entry.id,
            offered_by=donor_id,
            donor_name=data.donor_name.strip(),
            donor_contact=data.donor_contact.strip(),
            quantity_offered=data.quantity_offered,
            condition=data.condition,
            available_date=data.available_date,
            delivery_method=data.delivery_method,
            notes=data.notes,
            status=DonationStatus.OFFERED,
        )
        self.db.add(offer)
        self.db.flush()
        logger.info(
            "Donation offer created",
            extra={'extra_fields': {
                'offer_id': offer.id,
                'entry_id': entry.id,
                'quantity': offer.quantity_offered,
            }}
        )
        return offer

    def _review(self, offer: DonationOffer, reviewer_id: str, action: DonationAction) -> DonationStatus:
        target = DONATION_TRANSITIONS.target(offer.status, action)
        if reviewer_id == offer.offered_by:
            raise ForbiddenError("Donors cannot review their own donation offer")
        offer.reviewed_by = reviewer_id
        offer.reviewed_at = self.clock()
        return target

    def accept(self, offer: DonationOffer, reviewer_id: str) -> DonationOffer:
        offer.status = self._review(offer, reviewer_id, DonationAction.ACCEPT)
        self.db.flush()
        self._log_transition(offer, reviewer_id)
        return offer

    def decline(self, offer: DonationOffer, reviewer_id: str) -> DonationOffer:
        if offer.status == DonationStatus.CANCELLED:
            return offer
        offer.status = self._review(offer, reviewer_id, DonationAction.DECLINE)
        self.db.flush()
        self._log_transition(offer, reviewer_id)
        return offer

    def withdraw(self, offer: DonationOffer, donor_id: str) -> DonationOffer:
        if donor_id != offer.offered_by:
            raise ForbiddenError("Only the donor can withdraw a donation offer")
        if offer.status == DonationStatus.CANCELLED:
            return offer
        offer.status = DONATION_TRANSITIONS.target(offer.status, DonationAction.WITHDRAW)
        self.db.flush()
        self._log_transition(offer, donor_id)
        return offer

    def mark_delivered(self, offer: DonationOffer, entry: InventoryEntry, reviewer_id: str) -> DonationOffer:
        target = DONATION_TRANSITIONS.target(offer.status, DonationAction.DELIVER)
        if reviewer_id == offer.offered_by:
            raise ForbiddenError("Donors cannot confirm delivery of their own donation offer")
        self.store.add_stock(entry, offer.quantity_offered, grow_total=False)
        offer.status = target
        offer.delivered_at = self.clock()
        self.db.flush()
        self._log_transition(offer, reviewer_id, quantity_available=entry.quantity_available,
                             quantity_total=entry.quantity_total)
        return offer

    def _log_transition(self, offer: DonationOffer, actor_id: str, **extra) -> None:
        fields = {
            'offer_id': offer.id,
            'entry_id': offer.entry_id,
            'status': offer.status.value,
            'declined': offer.declined,
            'actor_id': actor_id,
        }
        fields.update(extra)
        logger.info(f"Donation offer {offer.id} moved to {offer.status.value}",
                    extra={'extra_fields': fields})
