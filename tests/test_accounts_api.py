from __future__ import annotations


def test_account_crud(client):
    res = client.post("/api/accounts", json={"name": " Main card ", "currency": "eur"})
    assert res.status_code == 201, res.text
    acc = res.json()
    assert acc["name"] == "Main card"
    assert acc["currency"] == "EUR"

    assert [a["id"] for a in client.get("/api/accounts").json()] == [acc["id"]]

    renamed = client.patch(f"/api/accounts/{acc['id']}", json={"name": "Daily card"})
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Daily card"
    assert renamed.json()["currency"] == "EUR"

    assert client.delete(f"/api/accounts/{acc['id']}").status_code == 204
    assert client.get(f"/api/accounts/{acc['id']}").status_code == 404


def test_invalid_accounts_are_rejected(client):
    assert client.post("/api/accounts", json={"name": "Cash", "currency": "EURO"}).status_code == 422
    assert client.post("/api/accounts", json={"name": "   ", "currency": "USD"}).status_code == 422
    assert client.patch("/api/accounts/999", json={"name": "Ghost"}).status_code == 404


def test_transactions_are_booked_against_accounts(client, category_id):
    cid = category_id("Groceries")
    card = client.post("/api/accounts", json={"name": "Card", "currency": "USD"}).json()
    cash = client.post("/api/accounts", json={"name": "Cash", "currency": "USD"}).json()

    on_card = client.post(
        "/api/transactions",
        json={"category_id": cid, "account_id": card["id"], "amount": 25, "occurred_at": "2025-03-02"},
    )
    assert on_card.status_code == 201, on_card.text
    assert on_card.json()["account_id"] == card["id"]
    client.post("/api/transactions", json={"category_id": cid, "account_id": cash["id"], "amount": 5})
    client.post("/api/transactions", json={"category_id": cid, "amount": 7})

    card_only = client.get("/api/transactions", params={"account_id": card["id"]}).json()
    assert [t["id"] for t in card_only] == [on_card.json()["id"]]

    unknown = client.post("/api/transactions", json={"category_id": cid, "account_id": 999, "amount": 5})
    assert unknown.status_code == 404
    assert unknown.json()["detail"] == "Account not found"

    moved = client.patch(f"/api/transactions/{on_card.json()['id']}", json={"account_id": cash["id"]})
    assert moved.json()["account_id"] == cash["id"]
    cleared = client.patch(f"/api/transactions/{on_card.json()['id']}", json={"account_id": None})
    assert cleared.json()["account_id"] is None


def test_deleting_account_keeps_its_transactions(client, category_id):
    card = client.post("/api/accounts", json={"name": "Card", "currency": "USD"}).json()
    tx = client.post(
        "/api/transactions",
        json={"category_id": category_id("Rent"), "account_id": card["id"], "amount": 900},
    ).json()

    assert client.delete(f"/api/accounts/{card['id']}").status_code == 204

    kept = client.get(f"/api/transactions/{tx['id']}")
    assert kept.status_code == 200
    assert kept.json()["account_id"] is None
