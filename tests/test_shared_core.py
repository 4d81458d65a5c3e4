import json
import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from seed.seed import read_rows, seed_item_types, seed_locations
from shared.core import HealthStatus, ServiceHealth, clear_request_context, set_request_context
from shared.core.logging_config import SecurityFilter, StructuredFormatter

def make_record(msg, **extra):
    record = logging.LogRecord("relief.test", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record

def test_formatter_emits_json_with_trace_context():
    set_request_context(request_id="req-1", user_id="provider-1")
    try:
        record = make_record("Inventory entry 1 updated", extra_fields={"entry_id": 1})
        payload = json.loads(StructuredFormatter("relief-inventory-service").format(record))
    finally:
        clear_request_context()
    assert payload["service"] == "relief-inventory-service"
    assert payload["message"] == "Inventory entry 1 updated"
    assert payload["trace"] == {"request_id": "req-1", "user_id": "provider-1"}
    assert payload["custom"] == {"entry_id": 1}

def test_security_filter_redacts_message_and_fields():
    record = make_record("token issued", extra_fields={"donor_contact": "+91 98140 00000", "entry_id": 3})
    assert SecurityFilter().filter(record)
    assert "***REDACTED***" in record.msg
    assert record.extra_fields == {"donor_contact": "***REDACTED***", "entry_id": 3}

def test_security_filter_ignores_non_string_messages():
    record = make_record({"not": "a string"})
    assert SecurityFilter().filter(record)
    assert record.msg == {"not": "a string"}

def test_overall_status():
    assert ServiceHealth.overall_status({}) == HealthStatus.PASS
    assert ServiceHealth.overall_status({"a": {"status": HealthStatus.WARN}}) == HealthStatus.WARN
    assert ServiceHealth.overall_status({
        "a": {"status": HealthStatus.WARN}, "b": {"status": HealthStatus.FAIL},
    }) == HealthStatus.FAIL

def test_readiness_and_startup_against_sqlite(engine, monkeypatch):
    monkeypatch.delenv("RELIEF_REQUIRED", raising=False)
    health = ServiceHealth("relief-test", engine=engine, required_env=["RELIEF_REQUIRED"])
    app = FastAPI()
    app.include_router(health.create_health_router())
    client = TestClient(app)

    ready = client.get("/health/ready").json()
    assert ready["checks"]["database:connectivity"]["status"] == "pass"

    startup = client.get("/health/startup")
    assert startup.status_code == 503
    checks = startup.json()["checks"]
    # Schema built by create_all, not alembic
    assert checks["database:migrations"]["status"] == "warn"
    assert "RELIEF_REQUIRED" in checks["config:environment"]["output"]

def test_seed_is_idempotent(db):
    assert seed_item_types(db, read_rows("item_types.csv")) == 0
    assert seed_locations(db, read_rows("locations.csv")) == 0
