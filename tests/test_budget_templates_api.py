from __future__ import annotations


def _create(client, category_id, **overrides):
    payload = {"category_id": category_id, "amount": 500, "start_month": "2025-01"}
    payload.update(overrides)
    return client.post("/api/budget-templates", json=payload)


def test_create_template(client, category_id):
    res = _create(client, category_id("Groceries"))
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["start_month"] == "2025-01"
    assert body["is_active"] is True
    assert body["category_name"] == "Groceries"


def test_duplicate_template_conflicts(client, category_id):
    assert _create(client, category_id("Groceries")).status_code == 201
    res = _create(client, category_id("Groceries"), amount=700)
    assert res.status_code == 409

    # an inactive template still holds the (user, category) slot
    other = _create(client, category_id("Rent"), is_active=False)
    assert other.status_code == 201
    assert _create(client, category_id("Rent")).status_code == 409


def test_move_template_onto_taken_category_conflicts(client, category_id):
    groceries = _create(client, category_id("Groceries")).json()
    _create(client, category_id("Rent"))

    res = client.patch(f"/api/budget-templates/{groceries['id']}", json={"category_id": category_id("Rent")})
    assert res.status_code == 409


def test_deactivate_and_delete(client, category_id):
    tid = _create(client, category_id("Groceries")).json()["id"]

    res = client.patch(f"/api/budget-templates/{tid}", json={"is_active": False})
    assert res.status_code == 200
    assert res.json()["is_active"] is False

    assert client.delete(f"/api/budget-templates/{tid}").status_code == 204
    assert client.get(f"/api/budget-templates/{tid}").status_code == 404


def test_manual_budget_run_materializes_templates(client, category_id):
    _create(client, category_id("Groceries"), amount=500)

    res = client.post("/api/scheduler/budgets/run", params={"month": "2025-06"})
    assert res.status_code == 200
    report = res.json()
    assert report["target_month"] == "2025-06"
    assert report["created"] == 1

    again = client.post("/api/scheduler/budgets/run", params={"month": "2025-06"}).json()
    assert again["created"] == 0
    assert again["skipped"] == 1

    budgets = client.get("/api/budgets", params={"month": "2025-06"}).json()
    assert len(budgets) == 1
    assert float(budgets[0]["limit_amount"]) == 500.0


def test_manual_budget_run_rejects_bad_month(client):
    res = client.post("/api/scheduler/budgets/run", params={"month": "2025-13"})
    assert res.status_code == 400
    assert res.json()["detail"] == "month must be between 01 and 12"
