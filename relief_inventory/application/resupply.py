"""
Resupply workflow: demand-side requests filed against one inventory entry.

PENDING -> APPROVED -> FULFILLED, PENDING -> REJECTED, and
PENDING/APPROVED -> CANCELLED by the requester. Only fulfilment touches
quantities: the pledged restock is added to the entry's available and total.
"""

from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.core import get_logger
from relief_inventory.domain.enums import ResupplyAction, ResupplyStatus, ReviewDecision
from relief_inventory.domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from relief_inventory.domain.models import InventoryEntry, ResupplyRequest
from .inventory_store import InventoryStore
from .schemas import ResupplyRequestCreate
from .transitions import RESUPPLY_TRANSITIONS

logger = get_logger(__name__)

_DECISION_ACTIONS = {
    ReviewDecision.APPROVE: ResupplyAction.APPROVE,
    ReviewDecision.REJECT: ResupplyAction.REJECT,
}


class ResupplyWorkflow:
    def __init__(self, db: Session, store: InventoryStore, clock: Callable[[], datetime]):
        self.db = db
        self.store = store
        self.clock = clock

    def get(self, request_id: int, entry_id: Optional[int] = None) -> ResupplyRequest:
        request = self.db.get(ResupplyRequest, request_id)
        # Addressing a request under another entry is treated as absent
        if request is None or (entry_id is not None and request.entry_id != entry_id):
            raise NotFoundError("Resupply request", request_id)
        return request

    def list(self, entry_id: int, status: Optional[ResupplyStatus] = None) -> List[ResupplyRequest]:
        query = select(ResupplyRequest).where(ResupplyRequest.entry_id == entry_id)
        if status is not None:
            query = query.where(ResupplyRequest.status == status)
        query = query.order_by(ResupplyRequest.created_at.desc(), ResupplyRequest.id.desc())
        return list(self.db.scalars(query))

    def create(self, entry: InventoryEntry, requester_id: str, data: ResupplyRequestCreate) -> ResupplyRequest:
        if data.quantity_requested <= 0:
            raise ValidationError.for_field("quantity_requested", "Valid quantity requested is required")

        existing = self.db.scalars(
            select(ResupplyRequest).where(
                ResupplyRequest.entry_id == entry.id,
                ResupplyRequest.requested_by == requester_id,
                ResupplyRequest.status == ResupplyStatus.PENDING,
            )
        ).first()
        if existing is not None:
            raise ConflictError(
                f"You already have a pending resupply request ({existing.id}) for this item"
            )

        request = ResupplyRequest(
            entry_id=entry.id,
            requested_by=requester_id,
            quantity_requested=data.quantity_requested,
            urgency=data.urgency,
            reason=data.reason,
            preferred_delivery_date=data.preferred_delivery_date,
            status=ResupplyStatus.PENDING,
        )
        self.db.add(request)
        self.db.flush()
        logger.info(
            "Resupply request created",
            extra={'extra_fields': {
                'request_id': request.id,
                'entry_id': entry.id,
                'quantity': request.quantity_requested,
                'urgency': request.urgency.value,
            }}
        )
        return request

    def _ensure_not_requester(self, request: ResupplyRequest, reviewer_id: str) -> None:
        if reviewer_id == request.requested_by:
            raise ForbiddenError("Requesters cannot review their own resupply request")

    def review(self, request: ResupplyRequest, reviewer_id: str, decision: ReviewDecision,
               notes: Optional[str] = None) -> ResupplyRequest:
        target = RESUPPLY_TRANSITIONS.target(request.status, _DECISION_ACTIONS[ReviewDecision(decision)])
        self._ensure_not_requester(request, reviewer_id)
        request.status = target
        request.reviewed_by = reviewer_id
        request.reviewed_at = self.clock()
        request.review_notes = notes
        self.db.flush()
        self._log_transition(request, reviewer_id)
        return request

    def fulfill(self, request: ResupplyRequest, entry: InventoryEntry, reviewer_id: str) -> ResupplyRequest:
        target = RESUPPLY_TRANSITIONS.target(request.status, ResupplyAction.FULFILL)
        self._ensure_not_requester(request, reviewer_id)
        # Fulfilment is additive and does not depend on what is currently on hand
        self.store.add_stock(entry, request.quantity_requested, grow_total=True)
        request.status = target
        request.fulfilled_at = self.clock()
        if request.reviewed_by is None:
            request.reviewed_by = reviewer_id
        self.db.flush()
        self._log_transition(request, reviewer_id, quantity_available=entry.quantity_available,
                             quantity_total=entry.quantity_total)
        return request

    def cancel(self, request: ResupplyRequest, requester_id: str) -> ResupplyRequest:
        if requester_id != request.requested_by:
            raise ForbiddenError("Only the requester can cancel a resupply request")
        if request.status == ResupplyStatus.CANCELLED:
            # Repeat cancellations are tolerated for at-least-once callers
            return request
        request.status = RESUPPLY_TRANSITIONS.target(request.status, ResupplyAction.CANCEL)
        request.cancelled_at = self.clock()
        self.db.flush()
        self._log_transition(request, requester_id)
        return request

    def _log_transition(self, request: ResupplyRequest, actor_id: str, **extra) -> None:
        fields = {
            'request_id': request.id,
            'entry_id': request.entry_id,
            'status': request.status.value,
            'actor_id': actor_id,
        }
        fields.update(extra)
        logger.info(f"Resupply request {request.id} moved to {request.status.value}",
                    extra={'extra_fields': fields})
