"""Integration tests for API endpoints."""

from uuid import uuid4

from fastapi.testclient import TestClient


def _txn(description: str, **kwargs) -> dict:
    return {
        "description": description,
        "amount": kwargs.pop("amount", "32.90"),
        "type": kwargs.pop("transaction_type", "expense"),
        **kwargs,
    }


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_check(self, test_client: TestClient) -> None:
        """Test health check reports the AI backend."""
        response = test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["ai_enabled"] is True
        assert data["ai_backend"] == "fake"
        assert data["ai_model"] == "fake-model"
        assert data["ai_reachable"] is True
        assert data["cached_organizations"] == 0


class TestClassifyEndpoint:
    """Tests for /classify endpoint."""

    def test_rule_match(self, test_client: TestClient, categories) -> None:
        """Test a rule match is auto-validated and persisted."""
        transaction_id = str(uuid4())

        response = test_client.post(
            "/classify",
            json=_txn(
                "UBER* TRIP 4821 09/14",
                organization_id=str(uuid4()),
                transaction_id=transaction_id,
            ),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "rule"
        assert data["category_id"] == str(categories[0].id)
        assert data["category_name"] == "Transport"
        assert data["auto_validated"] is True
        assert data["transaction_id"] == transaction_id
        assert data["normalized_description"] == "uber trip"

    def test_ai_fallback(self, test_client: TestClient, ai_provider) -> None:
        response = test_client.post(
            "/classify", json=_txn("AWS EMEA", organization_id=str(uuid4()))
        )

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "ai"
        assert data["confidence"] == 0.75
        assert data["auto_validated"] is False
        assert len(ai_provider.requests) == 1

    def test_stateless(self, test_client: TestClient, organization_data) -> None:
        """Test a request without organization consults no organization data."""
        response = test_client.post("/classify", json=_txn("PAGAMENTO FATURA CARTAO"))

        assert response.status_code == 200
        assert response.json()["is_transfer"] is True
        organization_data.built[0].rules.find_active.assert_not_awaited()

    def test_persisted_with_transaction_id(
        self, test_client: TestClient, organization_data
    ) -> None:
        test_client.post(
            "/classify",
            json=_txn(
                "UBER TRIP", organization_id=str(uuid4()), transaction_id=str(uuid4())
            ),
        )

        organization_data.built[0].decisions.save.assert_awaited_once()

    def test_direction_sent_as_type(self, test_client: TestClient) -> None:
        """Test the request body carries the direction under ``type``."""
        body = {"description": "UBER* TRIP 4821 09/14", "amount": 10, "type": "expense"}

        response = test_client.post(
            "/classify", json={**body, "organization_id": str(uuid4())}
        )

        assert response.status_code == 200
        assert response.json()["source"] == "rule"

    def test_missing_type_rejected(self, test_client: TestClient) -> None:
        body = _txn("UBER")
        del body["type"]

        response = test_client.post("/classify", json=body)

        assert response.status_code == 422
        assert response.json()["detail"][0]["loc"] == ["body", "type"]

    def test_blank_description_rejected(self, test_client: TestClient) -> None:
        response = test_client.post("/classify", json=_txn("   "))

        assert response.status_code == 422

    def test_negative_amount_rejected(self, test_client: TestClient) -> None:
        response = test_client.post("/classify", json=_txn("UBER", amount="-10"))

        assert response.status_code == 422

    def test_unknown_transaction_type_rejected(self, test_client: TestClient) -> None:
        response = test_client.post(
            "/classify", json=_txn("UBER", transaction_type="refund")
        )

        assert response.status_code == 422


class TestClassifyBatchEndpoint:
    """Tests for /classify/batch endpoint."""

    def test_batch(self, test_client: TestClient) -> None:
        """Test results keep input order and stats add up."""
        organization_id = str(uuid4())
        response = test_client.post(
            "/classify/batch",
            json={
                "organization_id": organization_id,
                "transactions": [
                    _txn("UBER* TRIP 4821 09/14"),
                    _txn("NETFLIX.COM 0042"),
                    _txn("TRANSF CC 12345-6"),
                    _txn("AWS EMEA"),
                    _txn("STRIPE PAYOUT", transaction_type="income"),
                ],
            },
        )

        assert response.status_code == 200
        data = response.json()
        sources = [c["source"] for c in data["classifications"]]
        assert sources == ["rule", "pattern", "rule", "ai", "ai"]
        assert data["classifications"][2]["is_transfer"] is True
        assert data["classifications"][4]["category_name"] == "Sales"

        stats = data["stats"]
        assert stats["total"] == 5
        assert stats["by_source"] == {"rule": 2, "pattern": 1, "ai": 2}
        assert stats["by_confidence"] == {"high": 3, "medium": 2}
        assert stats["auto_validated"] == 3
        assert stats["transfers_detected"] == 1
        assert data["processing_time_ms"] >= 0

    def test_organization_taken_from_transactions(
        self, test_client: TestClient, organization_data
    ) -> None:
        organization_id = uuid4()

        response = test_client.post(
            "/classify/batch",
            json={
                "transactions": [
                    _txn("UBER TRIP", organization_id=str(organization_id))
                ]
            },
        )

        assert response.status_code == 200
        assert organization_data.built[0].organization_id == organization_id

    def test_mixed_organizations_rejected(self, test_client: TestClient) -> None:
        response = test_client.post(
            "/classify/batch",
            json={
                "transactions": [
                    _txn("UBER TRIP", organization_id=str(uuid4())),
                    _txn("UBER TRIP", organization_id=str(uuid4())),
                ]
            },
        )

        assert response.status_code == 422

    def test_empty_batch_rejected(self, test_client: TestClient) -> None:
        response = test_client.post("/classify/batch", json={"transactions": []})

        assert response.status_code == 422

    def test_oversized_batch_rejected(self, test_client: TestClient) -> None:
        response = test_client.post(
            "/classify/batch",
            json={"transactions": [_txn(f"VENDOR {i}") for i in range(1001)]},
        )

        assert response.status_code == 422


class TestCacheInvalidationEndpoint:
    """Tests for /organizations/{id}/cache/invalidate endpoint."""

    def test_invalidate_after_classification(self, test_client: TestClient) -> None:
        organization_id = str(uuid4())
        test_client.post(
            "/classify", json=_txn("NETFLIX.COM", organization_id=organization_id)
        )
        assert test_client.get("/health").json()["cached_organizations"] == 1

        response = test_client.post(
            f"/organizations/{organization_id}/cache/invalidate"
        )

        assert response.status_code == 200
        assert response.json() == {
            "organization_id": organization_id,
            "invalidated": True,
        }
        assert test_client.get("/health").json()["cached_organizations"] == 0

    def test_invalidate_nothing_cached(self, test_client: TestClient) -> None:
        response = test_client.post(f"/organizations/{uuid4()}/cache/invalidate")

        assert response.status_code == 200
        assert response.json()["invalidated"] is False
