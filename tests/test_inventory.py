from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from relief_inventory.application.actor import Actor
from relief_inventory.application.schemas import (
    DonationOfferCreate,
    InventoryEntryCreate,
    InventoryEntryUpdate,
    InventoryFilter,
    ResupplyRequestCreate,
)
from relief_inventory.domain.enums import AvailabilityMode, ItemCategory, StockStatus
from relief_inventory.domain.errors import (
    ConflictError,
    ForbiddenError,
    InvalidQuantityError,
    NotFoundError,
    ValidationError,
)
from relief_inventory.domain.models import DonationOffer, InventoryEntry, ResupplyRequest

def test_create_defaults_available_to_total(make_entry):
    entry = make_entry(quantity_total=40)
    assert entry.quantity_available == 40
    assert entry.status == StockStatus.AVAILABLE
    assert entry.version == 1
    assert entry.item_type_name == "Blankets"
    assert entry.item_unit == "pieces"
    assert entry.district_name == "Ludhiana"
    assert entry.tehsil_name == "Ludhiana East"
    assert entry.is_offerable_now

def test_low_stock_then_out_of_stock(service, provider, make_entry):
    entry = make_entry(quantity_total=100, quantity_available=10)
    assert entry.status == StockStatus.LOW_STOCK

    updated = service.update_entry(provider, entry.id, InventoryEntryUpdate(quantity_available=0))
    assert updated.status == StockStatus.OUT_OF_STOCK
    assert updated.quantity_total == 100
    assert not updated.is_offerable_now
    assert updated.version == entry.version + 1

def test_available_above_total_is_rejected_before_persisting(service, make_entry):
    with pytest.raises(ValidationError) as exc:
        make_entry(quantity_total=20, quantity_available=50)
    assert exc.value.errors[0]["field"] == "quantity_available"
    assert service.list_inventory() == []

@pytest.mark.parametrize("total,available", [(0, None), (-1, None), (10, -1)])
def test_invalid_quantities(make_entry, total, available):
    with pytest.raises(InvalidQuantityError):
        make_entry(quantity_total=total, quantity_available=available)

def test_village_must_belong_to_tehsil(make_entry):
    with pytest.raises(ValidationError) as exc:
        make_entry(village_code="AMR001001")
    assert exc.value.errors[0]["field"] == "village_code"

def test_tehsil_must_belong_to_district(make_entry):
    with pytest.raises(ValidationError):
        make_entry(tehsil_code="AMR001")

def test_unknown_location_and_item_type(make_entry, service, provider):
    with pytest.raises(NotFoundError):
        make_entry(district_code="XXX")
    with pytest.raises(NotFoundError):
        service.create_entry(provider, InventoryEntryCreate(
            item_type_id=9999, district_code="LDH", tehsil_code="LDH001", quantity_total=5,
        ))

def test_village_level_entry_has_village_name(make_entry):
    entry = make_entry(village_code="LDH001002")
    assert entry.village_name == "Model Town"

def test_on_request_defaults_response_hours(make_entry):
    entry = make_entry(availability_mode=AvailabilityMode.ON_REQUEST)
    assert entry.response_hours == 24

def test_on_request_response_hours_bounds(make_entry):
    with pytest.raises(InvalidQuantityError) as exc:
        make_entry(availability_mode=AvailabilityMode.ON_REQUEST, response_hours=100)
    assert exc.value.errors[0]["field"] == "response_hours"

def test_response_hours_range_applies_to_every_mode(make_entry):
    with pytest.raises(InvalidQuantityError) as exc:
        make_entry(availability_mode=AvailabilityMode.IMMEDIATE, response_hours=500)
    assert exc.value.errors[0]["field"] == "response_hours"

def test_response_hours_only_shown_for_on_request(service, provider, make_entry):
    entry = make_entry(availability_mode=AvailabilityMode.IMMEDIATE, response_hours=12)
    assert entry.response_hours is None
    updated = service.update_entry(provider, entry.id, InventoryEntryUpdate(availability_mode=AvailabilityMode.ON_REQUEST))
    assert updated.response_hours == 12

def test_scheduled_requires_ordered_window(make_entry):
    now = datetime.now(timezone.utc)
    with pytest.raises(InvalidQuantityError):
        make_entry(availability_mode=AvailabilityMode.SCHEDULED)
    with pytest.raises(InvalidQuantityError):
        make_entry(availability_mode=AvailabilityMode.SCHEDULED,
                   available_from=now + timedelta(days=2), available_until=now)
    entry = make_entry(availability_mode=AvailabilityMode.SCHEDULED,
                       available_from=now - timedelta(days=1), available_until=now + timedelta(days=1))
    assert entry.is_offerable_now

def test_limited_time_requires_end(make_entry):
    with pytest.raises(InvalidQuantityError):
        make_entry(availability_mode=AvailabilityMode.LIMITED_TIME)

def test_update_validates_merged_state(service, provider, make_entry):
    entry = make_entry(quantity_total=100, quantity_available=80)
    with pytest.raises(InvalidQuantityError):
        service.update_entry(provider, entry.id, InventoryEntryUpdate(quantity_total=50))
    unchanged = service.get_entry(entry.id)
    assert (unchanged.quantity_total, unchanged.quantity_available) == (100, 80)

def test_override_status_persists_until_cleared(service, provider, make_entry):
    entry = make_entry(quantity_total=100)
    damaged = service.update_entry(provider, entry.id, InventoryEntryUpdate(status=StockStatus.DAMAGED))
    assert damaged.status == StockStatus.DAMAGED

    still_damaged = service.update_entry(provider, entry.id, InventoryEntryUpdate(quantity_available=0))
    assert still_damaged.status == StockStatus.DAMAGED

    cleared = service.update_entry(provider, entry.id, InventoryEntryUpdate(status=StockStatus.AVAILABLE))
    assert cleared.status == StockStatus.OUT_OF_STOCK

def test_explicit_null_on_required_field_is_ignored(service, provider, make_entry):
    entry = make_entry()
    updated = service.update_entry(provider, entry.id, InventoryEntryUpdate(condition=None, notes="dry store"))
    assert updated.condition == entry.condition
    assert updated.notes == "dry store"

def test_only_owner_or_admin_may_edit(service, coordinator, make_entry):
    entry = make_entry()
    with pytest.raises(ForbiddenError):
        service.update_entry(Actor("someone-else"), entry.id, InventoryEntryUpdate(notes="x"))
    with pytest.raises(ForbiddenError):
        service.delete_entry(Actor("someone-else"), entry.id)
    assert service.update_entry(coordinator, entry.id, InventoryEntryUpdate(is_verified=True)).is_verified

def test_cannot_create_for_another_provider_unless_admin(service, item_type_id, coordinator):
    payload = InventoryEntryCreate(
        provider_id="provider-2", item_type_id=item_type_id(), district_code="LDH",
        tehsil_code="LDH001", quantity_total=5,
    )
    with pytest.raises(ForbiddenError):
        service.create_entry(Actor("provider-1"), payload)
    assert service.create_entry(coordinator, payload).provider_id == "provider-2"

def test_get_missing_entry(service):
    with pytest.raises(NotFoundError):
        service.get_entry(12345)

def test_delete_with_active_dependents_needs_force(service, db, provider, requester, donor, make_entry):
    entry = make_entry()
    service.create_resupply_request(requester, entry.id, ResupplyRequestCreate(quantity_requested=10))
    service.create_donation_offer(donor, entry.id, DonationOfferCreate(
        donor_name="Sikh Relief", donor_contact="+91 98140 00000", quantity_offered=5,
    ))

    with pytest.raises(ConflictError):
        service.delete_entry(provider, entry.id)
    assert service.get_entry(entry.id).pending_resupply_count == 1

    service.delete_entry(provider, entry.id, force=True)
    with pytest.raises(NotFoundError):
        service.get_entry(entry.id)
    assert db.scalar(select(func.count(ResupplyRequest.id))) == 0
    assert db.scalar(select(func.count(DonationOffer.id))) == 0

def test_delete_without_dependents(service, db, provider, make_entry):
    entry = make_entry()
    service.delete_entry(provider, entry.id)
    assert db.scalar(select(func.count(InventoryEntry.id))) == 0

def test_list_filters(service, make_entry, item_type_id, coordinator):
    blankets = make_entry(quantity_total=100)
    water = make_entry(quantity_total=100, quantity_available=3, item_name="Drinking Water",
                       village_code="LDH001001")
    elsewhere = service.create_entry(coordinator, InventoryEntryCreate(
        provider_id="provider-2", item_type_id=item_type_id("Tents"),
        district_code="AMR", tehsil_code="AMR001", quantity_total=10, quantity_available=0,
    ))

    ids = lambda entries: {e.id for e in entries}
    assert ids(service.list_inventory()) == {blankets.id, water.id, elsewhere.id}
    assert ids(service.list_inventory(InventoryFilter(location_code="LDH001"))) == {blankets.id, water.id}
    assert ids(service.list_inventory(InventoryFilter(location_code="LDH001001"))) == {water.id}
    assert ids(service.list_inventory(InventoryFilter(category=ItemCategory.WATER_SANITATION))) == {water.id}
    assert ids(service.list_inventory(InventoryFilter(provider_id="provider-2"))) == {elsewhere.id}
    assert ids(service.list_inventory(InventoryFilter(low_stock_only=True))) == {water.id, elsewhere.id}
    assert ids(service.list_inventory(InventoryFilter(status=StockStatus.OUT_OF_STOCK))) == {elsewhere.id}

def test_summary_counts(service, requester, make_entry):
    entry = make_entry(quantity_total=100)
    make_entry(quantity_total=100, quantity_available=0, item_name="Tents")
    service.create_resupply_request(requester, entry.id, ResupplyRequestCreate(quantity_requested=10))

    summary = service.inventory_summary()
    assert summary.total_entries == 2
    assert summary.by_status[StockStatus.AVAILABLE] == 1
    assert summary.by_status[StockStatus.OUT_OF_STOCK] == 1
    assert summary.low_stock_entries == 1
    assert summary.pending_resupply_requests == 1
    assert summary.open_donation_offers == 0

def test_list_item_types(service):
    food = service.list_item_types(ItemCategory.FOOD)
    assert [t.name for t in food][:2] == ["Cooked Meals", "Ready-to-Eat Food Packs"]
    assert all(t.category == ItemCategory.FOOD for t in food)
    assert len(service.list_item_types()) == 23
