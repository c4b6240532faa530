from __future__ import annotations

from datetime import date
from decimal import Decimal

from finance_analytics import models
from finance_analytics.services.analytics_service import AnalyticsService, percent_of


def _spend(client, category_id, amount, occurred_at, **extra):
    payload = {"category_id": category_id, "amount": amount, "occurred_at": occurred_at}
    payload.update(extra)
    res = client.post("/api/transactions", json=payload)
    assert res.status_code == 201, res.text
    return res.json()


def _march_ledger(client, category_id):
    _spend(client, category_id("Salary"), "3000", "2025-03-01")
    _spend(client, category_id("Groceries"), "120.50", "2025-03-02")
    _spend(client, category_id("Groceries"), "30", "2025-03-02")
    _spend(client, category_id("Rent"), "1000", "2025-03-05")
    _spend(client, category_id("Transport"), "20", "2025-03-10")
    _spend(client, category_id("Groceries"), "80", "2025-02-10")
    # planned entries are not part of the actual ledger
    _spend(client, category_id("Groceries"), "500", "2025-03-20", is_planned=True)


def test_month_summary(client, category_id):
    _march_ledger(client, category_id)

    res = client.get("/api/analytics/summary", params={"month": "2025-03"})

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["month"] == "2025-03"
    assert float(body["income"]) == 3000.0
    assert float(body["expense"]) == 1170.5
    assert float(body["balance"]) == 1829.5


def test_expenses_by_category_and_top(client, category_id):
    _march_ledger(client, category_id)

    rows = client.get("/api/analytics/categories", params={"month": "2025-03"}).json()
    assert [(r["category"], float(r["amount"])) for r in rows] == [
        ("Rent", 1000.0),
        ("Groceries", 150.5),
        ("Transport", 20.0),
    ]

    top = client.get("/api/analytics/categories/top", params={"month": "2025-03", "limit": 2}).json()
    assert [r["category"] for r in top] == ["Rent", "Groceries"]
    assert client.get("/api/analytics/categories/top", params={"month": "2025-03", "limit": 0}).status_code == 422


def test_daily_and_monthly_expenses(client, category_id):
    _march_ledger(client, category_id)

    daily = client.get("/api/analytics/daily", params={"month": "2025-03"}).json()
    assert [(d["day"], float(d["amount"])) for d in daily] == [
        ("2025-03-02", 150.5),
        ("2025-03-05", 1000.0),
        ("2025-03-10", 20.0),
    ]

    monthly = client.get("/api/analytics/monthly", params={"start": "2025-01-01", "end": "2025-03-31"}).json()
    assert [(m["month"], float(m["amount"]), m["count"]) for m in monthly] == [
        ("2025-02", 80.0, 1),
        ("2025-03", 1170.5, 4),
    ]

    bad = client.get("/api/analytics/monthly", params={"start": "2025-03-31", "end": "2025-01-01"})
    assert bad.status_code == 400


def test_account_filter(client, category_id):
    card = client.post("/api/accounts", json={"name": "Card", "currency": "USD"}).json()
    _spend(client, category_id("Groceries"), "40", "2025-03-03", account_id=card["id"])
    _spend(client, category_id("Groceries"), "60", "2025-03-04")

    summary = client.get("/api/analytics/summary", params={"month": "2025-03", "account_id": card["id"]}).json()
    assert float(summary["expense"]) == 40.0


def test_bad_or_missing_month(client):
    assert client.get("/api/analytics/summary", params={"month": "March"}).status_code == 400
    assert client.get("/api/analytics/summary").status_code == 422


def test_budget_status(client, category_id):
    _march_ledger(client, category_id)
    budget = client.post(
        "/api/budgets",
        json={"category_id": category_id("Groceries"), "month": "2025-03", "limit_amount": 400},
    ).json()
    client.post("/api/budgets", json={"category_id": category_id("Utilities"), "month": "2025-03", "limit_amount": 100})

    res = client.get(f"/api/analytics/budgets/{budget['id']}")

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["category"] == "Groceries"
    assert body["month"] == "2025-03"
    assert float(body["spent"]) == 150.5
    assert float(body["remaining"]) == 249.5
    assert float(body["percent_used"]) == 37.63

    statuses = client.get("/api/analytics/budgets", params={"month": "2025-03"}).json()
    assert {s["category"]: float(s["spent"]) for s in statuses} == {"Groceries": 150.5, "Utilities": 0.0}

    assert client.get("/api/analytics/budgets/999").status_code == 404


def test_upcoming_recurring_forecast(client, category_id):
    client.post(
        "/api/recurring",
        json={"category_id": category_id("Rent"), "amount": 1200, "frequency": "MONTHLY", "next_execution_date": "2025-03-20"},
    )
    client.post(
        "/api/recurring",
        json={"category_id": category_id("Transport"), "amount": 10, "frequency": "WEEKLY", "next_execution_date": "2025-04-25"},
    )
    paused = client.post(
        "/api/recurring",
        json={"category_id": category_id("Utilities"), "amount": 99, "frequency": "MONTHLY", "next_execution_date": "2025-03-25"},
    ).json()
    client.patch(f"/api/recurring/{paused['id']}", json={"is_active": False})

    res = client.get("/api/analytics/upcoming", params={"months": 3})

    assert res.status_code == 200, res.text
    assert [(m["month"], float(m["amount"]), m["count"]) for m in res.json()] == [
        ("2025-03", 1200.0, 1),
        ("2025-04", 1210.0, 2),
        ("2025-05", 1250.0, 6),
    ]


def test_overdue_obligation_is_forecast_from_today(db_session, demo_user, category_id, clock):
    db_session.add(
        models.RecurringTransaction(
            user_id=demo_user.id,
            category_id=category_id("Rent"),
            amount=Decimal("500"),
            frequency=models.RecurringFrequency.MONTHLY,
            next_execution_date=date(2025, 1, 1),
            is_active=True,
        )
    )
    db_session.commit()

    forecast = AnalyticsService(db_session, clock).upcoming_recurring(user_id=demo_user.id, months=2)

    assert [(m.month, m.amount, m.count) for m in forecast] == [
        (date(2025, 3, 1), Decimal("500.00"), 1),
        (date(2025, 4, 1), Decimal("500.00"), 1),
    ]


def test_empty_forecast_lists_every_month(db_session, demo_user, clock):
    forecast = AnalyticsService(db_session, clock).upcoming_recurring(user_id=demo_user.id, months=2)

    assert [(m.month, m.amount, m.count) for m in forecast] == [
        (date(2025, 3, 1), Decimal("0.00"), 0),
        (date(2025, 4, 1), Decimal("0.00"), 0),
    ]


def test_percent_of():
    assert percent_of(Decimal("150.50"), Decimal("400.00")) == Decimal("37.63")
    assert percent_of(Decimal("10"), Decimal("0")) == Decimal("0.00")
