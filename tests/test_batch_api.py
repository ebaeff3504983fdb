"""
End-to-end batch workflow over HTTP

1. Farmer registers a harvest
2. Union mints the batch token
3. Processor relays the first transfer and records it
4. Processor relays a custodial self-transfer and records it
5. Consumer scans the QR code and sees the provenance
"""

import json
import logging
from dataclasses import replace
from unittest.mock import patch

from fastapi.testclient import TestClient

from conftest import PRIMARY_SEED, SECONDARY_SEED, upstream_response
from database.connection import get_session
from service.api import create_app

MINT_RESPONSE = json.dumps({
    "status": "success",
    "txHash": "mint0001",
    "unit": "policyabc436f6666656523",
    "policyId": "policyabc",
})

HARVEST = {
    "initial_weight_kg": 180,
    "variety": "Heirloom",
    "process": "Washed",
    "harvest_date": "2025-11-03",
    "location": "Guji Zone",
    "gps": "5.8500, 39.0500",
    "farmer_name": "Abebe Bekele",
}


def register(client):
    response = client.post("/api/batches", json=HARVEST)
    assert response.status_code == 201
    return response.json()


class TestRegisterHarvest:

    def test_register(self, client):
        batch = register(client)

        assert batch["status"] == "harvested"
        assert batch["isMinted"] is False
        assert batch["harvestDate"] == "2025-11-03"
        assert batch["farmer"]["name"] == "Abebe Bekele"
        assert batch["explorer"] == {}

    def test_weight_required(self, client):
        response = client.post("/api/batches", json={"variety": "Heirloom"})

        assert response.status_code == 422

    def test_weight_positive(self, client):
        response = client.post("/api/batches", json={**HARVEST, "initial_weight_kg": -5})

        assert response.status_code == 422


class TestMintEndpoint:

    @patch("requests.post")
    def test_mint_records_token(self, mock_post, client):
        batch = register(client)
        mock_post.return_value = upstream_response(200, MINT_RESPONSE)

        response = client.post("/api/mint", json={"batchId": batch["batchNumber"]})

        assert response.status_code == 200
        assert response.json() == {
            "status": "success",
            "txHash": "mint0001",
            "unit": "policyabc436f6666656523",
            "policyId": "policyabc",
            "batchId": batch["id"],
        }
        provenance = client.get(f"/api/batches/{batch['id']}").json()
        assert provenance["batch"]["isMinted"] is True
        assert provenance["batch"]["explorer"]["token"] == (
            "https://preprod.cardanoscan.io/token/policyabc436f6666656523"
        )

    @patch("requests.post")
    def test_unknown_batch(self, mock_post, client):
        response = client.post("/api/mint", json={"batchId": "BATCH-MISSING"})

        assert response.status_code == 404
        assert response.json() == {"error": "Batch not found"}
        mock_post.assert_not_called()

    @patch("requests.post")
    def test_double_mint_conflict(self, mock_post, client):
        batch = register(client)
        mock_post.return_value = upstream_response(200, MINT_RESPONSE)
        client.post("/api/mint", json={"batchId": batch["id"]})

        response = client.post("/api/mint", json={"batchId": batch["id"]})

        assert response.status_code == 409
        assert mock_post.call_count == 1

    @patch("requests.post")
    def test_mint_failure_leaves_batch_unminted(self, mock_post, client):
        batch = register(client)
        mock_post.return_value = upstream_response(200, json.dumps({"status": "error", "message": "No collateral"}))

        response = client.post("/api/mint", json={"batchId": batch["id"]})

        assert response.status_code == 502
        assert response.json() == {"error": "Minting failed: No collateral"}
        assert client.get(f"/api/batches/{batch['id']}").json()["batch"]["isMinted"] is False

    @patch("requests.post")
    def test_upstream_status_passed_through(self, mock_post, client):
        batch = register(client)
        mock_post.return_value = upstream_response(429, "rate limited")

        response = client.post("/api/mint", json={"batchId": batch["id"]})

        assert response.status_code == 429
        assert response.json() == {"error": "Minting API error: rate limited"}

    @patch("requests.post")
    def test_mint_without_cbor_hex(self, mock_post, settings, db_session, harvest_batch):
        app = create_app(replace(settings, cbor_hex=None))
        app.dependency_overrides[get_session] = lambda: db_session
        client = TestClient(app)

        response = client.post("/api/mint", json={"batchId": harvest_batch.id})

        assert response.status_code == 500
        assert "CBOR_HEX" in response.json()["error"]
        assert settings.secret_seed not in response.text
        mock_post.assert_not_called()
        assert harvest_batch.is_minted is False

    @patch("requests.post")
    def test_concurrent_mint_returns_conflict_with_token(self, mock_post, client, db_session, harvest_batch, caplog):
        def mint_recorded_elsewhere(*args, **kwargs):
            harvest_batch.is_minted = True
            harvest_batch.mint_tx_hash = "mint-other"
            db_session.commit()
            return upstream_response(200, MINT_RESPONSE)

        mock_post.side_effect = mint_recorded_elsewhere

        with caplog.at_level(logging.ERROR, logger="service.transfer_api"):
            response = client.post("/api/mint", json={"batchId": harvest_batch.id})

        assert response.status_code == 409
        body = response.json()
        assert "already minted" in body["error"]
        assert body["txHash"] == "mint0001"
        assert body["unit"] == "policyabc436f6666656523"
        assert body["batchId"] == harvest_batch.id
        assert harvest_batch.mint_tx_hash == "mint-other"
        assert "mint0001" in caplog.text


class TestProcessingWorkflow:

    @patch("requests.post")
    def test_full_journey(self, mock_post, client):
        batch = register(client)
        mock_post.return_value = upstream_response(200, MINT_RESPONSE)
        client.post("/api/mint", json={"batchId": batch["id"]})

        provenance = client.get(f"/api/batches/{batch['batchNumber']}").json()
        assert provenance["isFirstTransfer"] is True
        assert provenance["nextStatuses"][0] == "washed"
        unit = provenance["batch"]["mintUnit"]

        # First transfer out of the minting wallet
        mock_post.return_value = upstream_response(200, json.dumps({"status": "success", "txHash": "tx-washed"}))
        transfer = client.post("/api/transfer", json={
            "assetUnit": unit, "status": "washed", "isFirstTransfer": provenance["isFirstTransfer"],
        })
        assert transfer.status_code == 200
        assert mock_post.call_args.kwargs["json"]["secretSeed"] == PRIMARY_SEED

        recorded = client.post(f"/api/batches/{batch['id']}/status", json={
            "status": "washed", "tx_hash": transfer.json()["txHash"],
        })
        assert recorded.status_code == 200
        assert recorded.json()["batch"]["status"] == "washed"

        # Every later update is a custodial self-transfer
        provenance = client.get(f"/api/batches/{batch['id']}").json()
        assert provenance["isFirstTransfer"] is False

        mock_post.return_value = upstream_response(200, json.dumps({"status": "success", "txHash": "tx-graded"}))
        transfer = client.post("/api/transfer", json={
            "assetUnit": unit, "status": "graded", "isFirstTransfer": provenance["isFirstTransfer"],
        })
        assert mock_post.call_args.kwargs["json"]["secretSeed"] == SECONDARY_SEED

        recorded = client.post(f"/api/batches/{batch['id']}/status", json={
            "status": "graded", "tx_hash": "tx-graded", "note": "Grade 1, 86 points",
        })
        assert recorded.json()["fullyProcessed"] is True

        # Consumer scan by asset unit
        provenance = client.get(f"/api/batches/{unit}").json()
        assert provenance["fullyProcessed"] is True
        assert [h["status"] for h in provenance["history"]] == ["washed", "graded"]
        assert provenance["history"][1]["note"] == "Grade 1, 86 points"
        assert provenance["history"][0]["explorer"] == "https://preprod.cardanoscan.io/transaction/tx-washed"

    def test_unknown_status_rejected(self, client, db_session, harvest_batch):
        harvest_batch.is_minted = True
        db_session.commit()

        response = client.post(f"/api/batches/{harvest_batch.id}/status", json={"status": "roasted", "tx_hash": "tx-1"})

        assert response.status_code == 400
        assert "Unknown status" in response.json()["error"]

    def test_status_on_unminted_batch(self, client, harvest_batch):
        response = client.post(f"/api/batches/{harvest_batch.id}/status", json={"status": "washed", "tx_hash": "tx-1"})

        assert response.status_code == 400
        assert "has not been minted" in response.json()["error"]

    def test_write_back_requires_tx_hash(self, client, db_session, harvest_batch):
        harvest_batch.is_minted = True
        db_session.commit()

        response = client.post(f"/api/batches/{harvest_batch.id}/status", json={"status": "washed"})

        assert response.status_code == 422
        provenance = client.get(f"/api/batches/{harvest_batch.id}").json()
        assert provenance["isFirstTransfer"] is True
        assert provenance["batch"]["status"] == "harvested"
        assert provenance["history"] == []

    def test_unknown_batch_provenance(self, client):
        response = client.get("/api/batches/BATCH-00000000")

        assert response.status_code == 404
        assert response.json() == {"error": "Batch BATCH-00000000 not found"}


class TestListing:

    @patch("requests.post")
    def test_minted_grouped_by_farmer(self, mock_post, client):
        first = register(client)
        register(client)
        mock_post.return_value = upstream_response(200, MINT_RESPONSE)
        client.post("/api/mint", json={"batchId": first["id"]})

        everything = client.get("/api/batches").json()
        minted = client.get("/api/batches", params={"minted": "true"}).json()

        assert everything["total"] == 2
        assert "byFarmer" not in everything
        assert minted["total"] == 1
        assert minted["byFarmer"] == {"Abebe Bekele": [first["batchNumber"]]}
