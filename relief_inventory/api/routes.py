from fastapi import APIRouter, Depends, Response
from typing import Optional
from relief_inventory.api.deps import get_current_actor, get_service
from relief_inventory.application.actor import Actor
from relief_inventory.application.service import CoordinationService
from relief_inventory.application.schemas import (
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
from relief_inventory.domain.enums import DonationStatus, ItemCategory, ResupplyStatus, StockStatus

router = APIRouter(prefix="/inventory", tags=["inventory"])
catalog_router = APIRouter(prefix="/item-types", tags=["catalog"])

def inventory_filter(
    provider_id: Optional[str] = None,
    location_code: Optional[str] = None,
    category: Optional[ItemCategory] = None,
    status: Optional[StockStatus] = None,
    low_stock_only: bool = False,
) -> InventoryFilter:
    return InventoryFilter(
        provider_id=provider_id,
        location_code=location_code,
        category=category,
        status=status,
        low_stock_only=low_stock_only,
    )

# Inventory entries

@router.get("/", response_model=list[InventoryEntryRead])
def list_inventory(filters: InventoryFilter = Depends(inventory_filter),
                   service: CoordinationService = Depends(get_service)):
    return service.list_inventory(filters)

@router.get("/summary", response_model=InventorySummaryRead)
def inventory_summary(filters: InventoryFilter = Depends(inventory_filter),
                      service: CoordinationService = Depends(get_service)):
    """Counts per stock status plus open requests and offers, for dashboards."""
    return service.inventory_summary(filters)

@router.get("/{entry_id}", response_model=InventoryEntryRead)
def get_inventory_entry(entry_id: int, service: CoordinationService = Depends(get_service)):
    return service.get_entry(entry_id)

@router.post("/", response_model=InventoryEntryRead, status_code=201)
def create_inventory_entry(payload: InventoryEntryCreate,
                           actor: Actor = Depends(get_current_actor),
                           service: CoordinationService = Depends(get_service)):
    return service.create_entry(actor, payload)

@router.patch("/{entry_id}", response_model=InventoryEntryRead)
def update_inventory_entry(entry_id: int, payload: InventoryEntryUpdate,
                           actor: Actor = Depends(get_current_actor),
                           service: CoordinationService = Depends(get_service)):
    return service.update_entry(actor, entry_id, payload)

@router.delete("/{entry_id}", status_code=204)
def delete_inventory_entry(entry_id: int, force: bool = False,
                           actor: Actor = Depends(get_current_actor),
                           service: CoordinationService = Depends(get_service)):
    """Delete an entry and its requests/offers; active ones block unless force=true."""
    service.delete_entry(actor, entry_id, force=force)
    return Response(status_code=204)

# Resupply requests

@router.get("/{entry_id}/resupply", response_model=list[ResupplyRequestRead])
def list_resupply_requests(entry_id: int, status: Optional[ResupplyStatus] = None,
                           service: CoordinationService = Depends(get_service)):
    return service.list_resupply_requests(entry_id, status)

@router.post("/{entry_id}/resupply", response_model=ResupplyRequestRead, status_code=201)
def create_resupply_request(entry_id: int, payload: ResupplyRequestCreate,
                            actor: Actor = Depends(get_current_actor),
                            service: CoordinationService = Depends(get_service)):
    return service.create_resupply_request(actor, entry_id, payload)

@router.get("/{entry_id}/resupply/{request_id}", response_model=ResupplyRequestRead)
def get_resupply_request(entry_id: int, request_id: int,
                         service: CoordinationService = Depends(get_service)):
    return service.get_resupply_request(request_id, entry_id=entry_id)

@router.post("/{entry_id}/resupply/{request_id}/review", response_model=ResupplyRequestRead)
def review_resupply_request(entry_id: int, request_id: int, payload: ResupplyReview,
                            actor: Actor = Depends(get_current_actor),
                            service: CoordinationService = Depends(get_service)):
    return service.review_resupply_request(actor, request_id, payload, entry_id=entry_id)

@router.post("/{entry_id}/resupply/{request_id}/fulfill", response_model=ResupplyRequestRead)
def fulfill_resupply_request(entry_id: int, request_id: int,
                             actor: Actor = Depends(get_current_actor),
                             service: CoordinationService = Depends(get_service)):
    return service.fulfill_resupply_request(actor, request_id, entry_id=entry_id)

@router.post("/{entry_id}/resupply/{request_id}/cancel", response_model=ResupplyRequestRead)
def cancel_resupply_request(entry_id: int, request_id: int,
                            actor: Actor = Depends(get_current_actor),
                            service: CoordinationService = Depends(get_service)):
    return service.cancel_resupply_request(actor, request_id, entry_id=entry_id)

# Donation offers

@router.get("/{entry_id}/donations", response_model=list[DonationOfferRead])
def list_donation_offers(entry_id: int, status: Optional[DonationStatus] = None,
                         service: CoordinationService = Depends(get_service)):
    return service.list_donation_offers(entry_id, status)

@router.post("/{entry_id}/donations", response_model=DonationOfferRead, status_code=201)
def create_donation_offer(entry_id: int, payload: DonationOfferCreate,
                          actor: Actor = Depends(get_current_actor),
                          service: CoordinationService = Depends(get_service)):
    return service.create_donation_offer(actor, entry_id, payload)

@router.get("/{entry_id}/donations/{offer_id}", response_model=DonationOfferRead)
def get_donation_offer(entry_id: int, offer_id: int,
                       service: CoordinationService = Depends(get_service)):
    return service.get_donation_offer(offer_id, entry_id=entry_id)

@router.post("/{entry_id}/donations/{offer_id}/accept", response_model=DonationOfferRead)
def accept_donation_offer(entry_id: int, offer_id: int,
                          actor: Actor = Depends(get_current_actor),
                          service: CoordinationService = Depends(get_service)):
    return service.accept_donation_offer(actor, offer_id, entry_id=entry_id)

@router.post("/{entry_id}/donations/{offer_id}/decline", response_model=DonationOfferRead)
def decline_donation_offer(entry_id: int, offer_id: int,
                           actor: Actor = Depends(get_current_actor),
                           service: CoordinationService = Depends(get_service)):
    return service.decline_donation_offer(actor, offer_id, entry_id=entry_id)

@router.post("/{entry_id}/donations/{offer_id}/withdraw", response_model=DonationOfferRead)
def withdraw_donation_offer(entry_id: int, offer_id: int,
                            actor: Actor = Depends(get_current_actor),
                            service: CoordinationService = Depends(get_service)):
    return service.withdraw_donation_offer(actor, offer_id, entry_id=entry_id)

@router.post("/{entry_id}/donations/{offer_id}/deliver", response_model=DonationOfferRead)
def mark_donation_delivered(entry_id: int, offer_id: int,
                            actor: Actor = Depends(get_current_actor),
                            service: CoordinationService = Depends(get_service)):
    return service.mark_donation_delivered(actor, offer_id, entry_id=entry_id)

# Catalog

@catalog_router.get("/", response_model=list[ItemTypeRead])
def list_item_types(category: Optional[ItemCategory] = None, include_inactive: bool = False,
                    service: CoordinationService = Depends(get_service)):
    return service.list_item_types(category, include_inactive)
