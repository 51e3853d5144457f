"""Tests for transactions API endpoints."""

import pytest


def make_transaction(client, headers, company_id, **overrides):
    payload = {
        "companyId": company_id,
        "month": "Janeiro",
        "year": 2025,
        "amount": 100,
        "category": "Geral",
        "status": "ABERTO",
    }
    payload.update(overrides)
    response = client.post("/api/transactions", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestTransactionsAPI:
    """Test transaction CRUD endpoints."""

    def test_end_to_end(self, client, alice, alice_company):
        """Category and transaction created for a fresh company show up in its list."""
        company_id = alice_company["id"]
        category = client.post("/api/categories", json={
            "companyId": company_id,
            "name": "Salário",
            "type": "INCOME",
            "color": "#22c55e",
            "budget": 0,
        }, headers=alice)
        assert category.status_code == 201

        response = client.post("/api/transactions", json={
            "companyId": company_id,
            "month": "Janeiro",
            "year": 2025,
            "amount": 3500,
            "category": "Salário",
            "status": "PAGO",
        }, headers=alice)
        assert response.status_code == 201
        created = response.json()
        assert created["id"]

        listing = client.get("/api/transactions", params={"companyId": company_id}, headers=alice)
        assert listing.status_code == 200
        data = listing.json()["data"]
        assert len(data) == 1
        assert data[0]["id"] == created["id"]
        assert data[0]["month"] == "Janeiro"
        assert data[0]["year"] == 2025
        assert data[0]["amount"] == 3500
        assert data[0]["category"] == "Salário"
        assert data[0]["status"] == "PAGO"

    def test_rejection_lists_each_field(self, client, alice, alice_company):
        """Should return one message per invalid field."""
        response = client.post("/api/transactions", json={
            "companyId": alice_company["id"],
            "amount": -500,
            "category": "",
            "month": "January",
            "year": 1999,
            "status": "invalid",
        }, headers=alice)
        assert response.status_code == 400
        errors = response.json()["errors"]
        fields = {e["field"] for e in errors}
        assert fields == {"amount", "category", "month", "year", "status"}
        assert all(e["message"] for e in errors)

    def test_wrong_json_type(self, client, alice, alice_company):
        response = client.post("/api/transactions", json={
            "companyId": alice_company["id"], "amount": "lots",
        }, headers=alice)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "amount"

    def test_unaccented_march_is_stored_accented(self, client, alice, alice_company):
        created = make_transaction(client, alice, alice_company["id"], month="Marco")
        assert created["month"] == "Março"

    def test_description_is_sanitized(self, client, alice, alice_company):
        created = make_transaction(client, alice, alice_company["id"], description="  <b>Conta</b>   de luz ")
        assert created["description"] == "Conta de luz"

    def test_script_in_description_is_rejected(self, client, alice, alice_company):
        response = client.post("/api/transactions", json={
            "companyId": alice_company["id"], "month": "Janeiro", "year": 2025, "amount": 10,
            "category": "Geral", "status": "PAGO", "description": "<script>alert(1)</script>",
        }, headers=alice)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "description"

    def test_update_transaction(self, client, alice, alice_company):
        """Should merge the sent fields over the stored ones."""
        created = make_transaction(client, alice, alice_company["id"])
        response = client.put(f"/api/transactions/{created['id']}", json={"amount": 250.75}, headers=alice)
        assert response.status_code == 200
        data = response.json()
        assert data["amount"] == 250.75
        assert data["category"] == "Geral"

    def test_update_rejects_invalid_merge(self, client, alice, alice_company):
        created = make_transaction(client, alice, alice_company["id"])
        response = client.put(f"/api/transactions/{created['id']}", json={"year": 3000}, headers=alice)
        assert response.status_code == 400

    def test_delete_transaction(self, client, alice, alice_company):
        created = make_transaction(client, alice, alice_company["id"])
        assert client.delete(f"/api/transactions/{created['id']}", headers=alice).status_code == 204
        assert client.get(f"/api/transactions/{created['id']}", headers=alice).status_code == 404

    def test_foreign_transaction(self, client, alice, bob, alice_company):
        created = make_transaction(client, alice, alice_company["id"])
        assert client.get(f"/api/transactions/{created['id']}", headers=bob).status_code == 403
        assert client.patch(f"/api/transactions/{created['id']}/toggle-status", headers=bob).status_code == 403
        assert client.get("/api/transactions", params={"companyId": alice_company["id"]}, headers=bob).status_code == 403

    def test_create_for_missing_company(self, client, alice):
        response = client.post("/api/transactions", json={
            "companyId": "00000000-0000-0000-0000-000000000000", "month": "Janeiro",
            "year": 2025, "amount": 1, "category": "Geral", "status": "PAGO",
        }, headers=alice)
        assert response.status_code == 404


class TestTransactionListing:
    """Test ordering and pagination."""

    def test_newest_period_first(self, client, alice, alice_company):
        company_id = alice_company["id"]
        make_transaction(client, alice, company_id, month="Fevereiro", year=2024)
        make_transaction(client, alice, company_id, month="Dezembro", year=2024)
        make_transaction(client, alice, company_id, month="Março", year=2025)
        make_transaction(client, alice, company_id, month="Janeiro", year=2025)

        data = client.get("/api/transactions", params={"companyId": company_id}, headers=alice).json()["data"]
        assert [(t["month"], t["year"]) for t in data] == [
            ("Março", 2025), ("Janeiro", 2025), ("Dezembro", 2024), ("Fevereiro", 2024),
        ]

    def test_pagination(self, client, alice, alice_company):
        for _ in range(5):
            make_transaction(client, alice, alice_company["id"])

        body = client.get("/api/transactions", params={
            "companyId": alice_company["id"], "page": 2, "limit": 2,
        }, headers=alice).json()
        assert len(body["data"]) == 2
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "totalPages": 3}

    @pytest.mark.parametrize("page,limit,expected", [
        ("0", "1000", (1, 100)),
        ("-3", "0", (1, 50)),
        ("abc", "xyz", (1, 50)),
    ])
    def test_out_of_range_params_are_clamped(self, client, alice, alice_company, page, limit, expected):
        response = client.get("/api/transactions", params={
            "companyId": alice_company["id"], "page": page, "limit": limit,
        }, headers=alice)
        assert response.status_code == 200
        pagination = response.json()["pagination"]
        assert (pagination["page"], pagination["limit"]) == expected

    def test_without_company_spans_own_companies_only(self, client, alice, bob, alice_company):
        second = client.post("/api/companies", json={"name": "Second"}, headers=alice).json()
        bob_company = client.post("/api/companies", json={"name": "Bob Co"}, headers=bob).json()
        make_transaction(client, alice, alice_company["id"])
        make_transaction(client, alice, second["id"])
        make_transaction(client, bob, bob_company["id"])

        body = client.get("/api/transactions", headers=alice).json()
        assert body["pagination"]["total"] == 2


class TestStatusAndStats:
    """Test toggling and totals."""

    def test_toggle_status(self, client, alice, alice_company):
        created = make_transaction(client, alice, alice_company["id"], status="ABERTO")
        first = client.patch(f"/api/transactions/{created['id']}/toggle-status", headers=alice)
        assert first.status_code == 200
        assert first.json()["status"] == "PAGO"
        second = client.patch(f"/api/transactions/{created['id']}/toggle-status", headers=alice)
        assert second.json()["status"] == "ABERTO"

    def test_stats(self, client, alice, alice_company):
        company_id = alice_company["id"]
        make_transaction(client, alice, company_id, amount=100.10, status="PAGO")
        make_transaction(client, alice, company_id, amount=50.20, status="ABERTO")
        make_transaction(client, alice, company_id, amount=10, status="PAGO", month="Fevereiro")

        response = client.get("/api/stats", params={"companyId": company_id}, headers=alice)
        assert response.status_code == 200
        assert response.json() == {"paid": 110.1, "open": 50.2, "total": 160.3}

        january = client.get("/api/stats", params={
            "companyId": company_id, "month": "Janeiro", "year": 2025,
        }, headers=alice).json()
        assert january == {"paid": 100.1, "open": 50.2, "total": 150.3}

    def test_stats_rejects_bad_month(self, client, alice, alice_company):
        response = client.get("/api/stats", params={
            "companyId": alice_company["id"], "month": "Smarch",
        }, headers=alice)
        assert response.status_code == 400
