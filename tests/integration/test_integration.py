"""
End-to-end tests against a running relief inventory service.

Skipped unless RELIEF_BASE_URL points at a deployed instance seeded with
seed/seed.py; JWT_SECRET must match the server's.
"""

import os
import time

import httpx
import pytest

from relief_inventory.api.deps import create_access_token

BASE_URL = os.getenv("RELIEF_BASE_URL")
HEALTH_CHECK_RETRIES = 30
HEALTH_CHECK_DELAY = 2

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not BASE_URL, reason="RELIEF_BASE_URL not set"),
]

class TestReliefInventoryIntegration:
    @classmethod
    def setup_class(cls):
        cls.client = httpx.Client(base_url=BASE_URL, timeout=30.0)
        cls.wait_for_service()
        suffix = str(int(time.time()))
        cls.provider = {"Authorization": f"Bearer {create_access_token(f'it-provider-{suffix}')}"}
        cls.requester = {"Authorization": f"Bearer {create_access_token(f'it-ngo-{suffix}')}"}
        cls.donor = {"Authorization": f"Bearer {create_access_token(f'it-donor-{suffix}')}"}

    @classmethod
    def teardown_class(cls):
        cls.client.close()

    @classmethod
    def wait_for_service(cls):
        for attempt in range(HEALTH_CHECK_RETRIES):
            try:
                if cls.client.get("/health").status_code == 200:
                    return
            except httpx.HTTPError as e:
                print(f"Attempt {attempt + 1}/{HEALTH_CHECK_RETRIES}: {e}")
            time.sleep(HEALTH_CHECK_DELAY)
        raise RuntimeError("Service failed to start within timeout period")

    def create_entry(self, **fields):
        item_types = self.client.get("/item-types/?category=SHELTER").json()
        payload = {
            "item_type_id": item_types[0]["id"],
            "district_code": "LDH",
            "tehsil_code": "LDH001",
            "quantity_total": 100,
        }
        payload.update(fields)
        response = self.client.post("/inventory/", json=payload, headers=self.provider)
        assert response.status_code == 201, response.text
        return response.json()

    def test_health_endpoints(self):
        for endpoint in ["/health", "/health/live", "/health/ready"]:
            response = self.client.get(endpoint)
            assert response.status_code in [200, 503]
            assert "status" in response.json()

    def test_metrics_endpoint(self):
        data = self.client.get("/metrics").json()
        assert "uptime_seconds" in data

    def test_resupply_round_trip(self):
        entry = self.create_entry()
        base = f"/inventory/{entry['id']}/resupply"
        request = self.client.post(base, json={"quantity_requested": 30}, headers=self.requester).json()

        response = self.client.post(f"{base}/{request['id']}/review", json={"decision": "APPROVE"}, headers=self.provider)
        assert response.status_code == 200
        response = self.client.post(f"{base}/{request['id']}/fulfill", headers=self.provider)
        assert response.status_code == 200

        updated = self.client.get(f"/inventory/{entry['id']}").json()
        assert (updated["quantity_total"], updated["quantity_available"]) == (130, 130)
        self.client.delete(f"/inventory/{entry['id']}", headers=self.provider)

    def test_donation_round_trip(self):
        entry = self.create_entry(quantity_available=90)
        base = f"/inventory/{entry['id']}/donations"
        offer = self.client.post(base, headers=self.donor, json={
            "donor_name": "Integration donor", "donor_contact": "it@example.org", "quantity_offered": 50,
        }).json()

        assert self.client.post(f"{base}/{offer['id']}/accept", headers=self.provider).status_code == 200
        assert self.client.post(f"{base}/{offer['id']}/deliver", headers=self.provider).status_code == 200

        updated = self.client.get(f"/inventory/{entry['id']}").json()
        assert (updated["quantity_total"], updated["quantity_available"]) == (140, 140)
        self.client.delete(f"/inventory/{entry['id']}", headers=self.provider)

    def test_error_handling(self):
        assert self.client.post("/inventory/", json={}).status_code == 401
        assert self.client.get("/inventory/999999999").status_code == 404
        response = self.client.post("/inventory/", json={"invalid": "data"}, headers=self.provider)
        assert response.status_code == 422

    def test_request_tracking(self):
        response = self.client.get("/inventory/")
        assert response.status_code == 200
        assert len(response.headers.get("X-Request-ID", "")) > 0

    @pytest.mark.performance
    def test_performance_baseline(self):
        for endpoint in ["/inventory/", "/inventory/summary", "/item-types/"]:
            start = time.time()
            response = self.client.get(endpoint)
            duration = time.time() - start
            assert response.status_code == 200
            assert duration < 1.0, f"{endpoint} took {duration:.3f}s"
