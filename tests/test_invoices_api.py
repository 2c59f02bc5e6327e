from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from backend.fleetdesk.core.security import create_access_token
from backend.fleetdesk.db.base import Base
from backend.fleetdesk.db.session import SessionLocal, engine
from backend.fleetdesk.main import app
from backend.fleetdesk.models.contractor import Contractor
from backend.fleetdesk.models.invoice import Invoice
from backend.fleetdesk.models.order import Order
from backend.fleetdesk.models.tenant import Tenant
from backend.fleetdesk.models.user import User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def money(value) -> Decimal:
    return Decimal(str(value))


def create_tenant_with_contractor(email: str) -> tuple[str, int, int]:
    """Returns (token, tenant_id, contractor_id)."""
    db = SessionLocal()
    try:
        tenant = Tenant(name=f"Carrier {email}")
        db.add(tenant)
        db.flush()
        user = User(email=email, tenant_id=tenant.id)
        contractor = Contractor(tenant_id=tenant.id, name="Spedycja Nord", nip="5250001009")
        db.add_all([user, contractor])
        db.commit()
        return create_access_token(user_id=user.id), tenant.id, contractor.id
    finally:
        db.close()


def create_order(tenant_id: int, number: str) -> int:
    db = SessionLocal()
    try:
        order = Order(tenant_id=tenant_id, order_number=number, origin="Poznan", destination="Gdansk")
        db.add(order)
        db.commit()
        return order.id
    finally:
        db.close()


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def invoice_payload(contractor_id: int, **overrides) -> dict:
    payload = {
        "contractor_id": contractor_id,
        "issue_date": "2026-01-15",
        "sale_date": "2026-01-14",
        "due_date": "2026-01-29",
        "items": [{"description": "Transport Poznan - Gdansk", "quantity": "10", "unit_price_net": "100.00", "vat_rate": 23}],
    }
    payload.update(overrides)
    return payload


def test_create_pln_invoice_computes_totals_and_number():
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")

    resp = client.post("/api/invoices/", json=invoice_payload(contractor_id), headers=auth(token))
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["invoice_number"] == "FV/2026/01/0001"
    assert data["status"] == "DRAFT"
    assert data["currency"] == "PLN"
    assert money(data["net_amount"]) == Decimal("1000.00")
    assert money(data["vat_amount"]) == Decimal("230.00")
    assert money(data["gross_amount"]) == Decimal("1230.00")
    assert data["amount_in_pln"] is None
    item = data["items"][0]
    assert item["position"] == 0
    assert money(item["gross_amount"]) == Decimal("1230.00")


def test_invoice_numbers_follow_issue_month_per_tenant():
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")
    other_token, _, other_contractor_id = create_tenant_with_contractor("other@example.com")

    numbers = [
        client.post("/api/invoices/", json=invoice_payload(contractor_id), headers=auth(token)).json()["invoice_number"],
        client.post("/api/invoices/", json=invoice_payload(contractor_id), headers=auth(token)).json()["invoice_number"],
        client.post(
            "/api/invoices/", json=invoice_payload(contractor_id, issue_date="2026-02-02"), headers=auth(token)
        ).json()["invoice_number"],
        client.post("/api/invoices/", json=invoice_payload(other_contractor_id), headers=auth(other_token)).json()[
            "invoice_number"
        ],
    ]
    assert numbers == ["FV/2026/01/0001", "FV/2026/01/0002", "FV/2026/02/0001", "FV/2026/01/0001"]


def test_exempt_line_keeps_marker_and_has_no_vat():
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")
    items = [
        {"description": "Freight", "quantity": "10", "unit_price_net": "100.00", "vat_rate": 23},
        {"description": "Insurance", "quantity": "2", "unit_price_net": "50.00", "vat_rate": -1},
    ]

    resp = client.post("/api/invoices/", json=invoice_payload(contractor_id, items=items), headers=auth(token))
    assert resp.status_code == 201
    data = resp.json()
    assert data["items"][1]["vat_rate"] == -1
    assert money(data["items"][1]["vat_amount"]) == 0
    assert money(data["items"][1]["gross_amount"]) == Decimal("100.00")
    assert money(data["vat_amount"]) == Decimal("230.00")
    assert money(data["gross_amount"]) == Decimal("1330.00")


@pytest.mark.parametrize(
    "item",
    [
        {"description": "Freight", "quantity": "1", "unit_price_net": "100.00", "vat_rate": 7},
        {"description": "Freight", "quantity": "0", "unit_price_net": "100.00", "vat_rate": 23},
        {"description": "Freight", "quantity": "1", "unit_price_net": "-1.00", "vat_rate": 23},
        {"description": "Freight", "quantity": "3", "unit_price_net": "0.335", "vat_rate": 0},
        {"description": "Freight", "quantity": "1.0005", "unit_price_net": "100.00", "vat_rate": 0},
    ],
)
def test_invalid_line_items_are_rejected(item):
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")
    resp = client.post("/api/invoices/", json=invoice_payload(contractor_id, items=[item]), headers=auth(token))
    assert resp.status_code == 422


def test_stored_line_reproduces_its_net_amount():
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")
    items = [{"description": "Pallet wrap", "quantity": "3", "unit_price_net": "0.34", "vat_rate": 0}]

    resp = client.post("/api/invoices/", json=invoice_payload(contractor_id, items=items), headers=auth(token))
    assert resp.status_code == 201, resp.text
    item = resp.json()["items"][0]
    assert money(item["net_amount"]) == Decimal("1.02")
    assert money(item["quantity"]) * money(item["unit_price_net"]) == money(item["net_amount"])


def test_foreign_currency_invoice_converts_gross_to_pln():
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")
    payload = invoice_payload(
        contractor_id,
        currency="eur",
        exchange_rate={"rate": "4.25", "date": "2026-01-13", "table": "008/A/NBP/2026"},
        items=[{"description": "Transport Poznan - Berlin", "unit_price_net": "1000.00", "vat_rate": 0}],
    )

    resp = client.post("/api/invoices/", json=payload, headers=auth(token))
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["currency"] == "EUR"
    assert money(data["exchange_rate"]) == Decimal("4.25")
    assert data["exchange_rate_date"] == "2026-01-13"
    assert data["exchange_rate_table"] == "008/A/NBP/2026"
    assert money(data["amount_in_pln"]) == Decimal("4250.00")


def test_foreign_currency_invoice_rescaled_to_target_pln():
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")
    payload = invoice_payload(
        contractor_id,
        currency="EUR",
        exchange_rate={"rate": "4.25"},
        target_amount_in_pln="5000.00",
        items=[{"description": "Transport Poznan - Berlin", "unit_price_net": "1000.00", "vat_rate": 0}],
    )

    resp = client.post("/api/invoices/", json=payload, headers=auth(token))
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert money(data["items"][0]["unit_price_net"]) == Decimal("1176.47")
    assert money(data["gross_amount"]) == Decimal("1176.47")
    assert money(data["amount_in_pln"]) == Decimal("5000.00")


@pytest.mark.parametrize(
    "overrides",
    [
        {"currency": "EUR", "target_amount_in_pln": "5000.00"},
        {"currency": "PLN", "exchange_rate": {"rate": "1.0"}},
        {"currency": "EUR", "exchange_rate": {"rate": "0"}},
        {"items": []},
    ],
)
def test_invalid_currency_combinations_are_rejected(overrides):
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")
    resp = client.post("/api/invoices/", json=invoice_payload(contractor_id, **overrides), headers=auth(token))
    assert resp.status_code == 422


def test_calculate_endpoint_does_not_persist():
    client = TestClient(app)
    token, _, _ = create_tenant_with_contractor("billing@example.com")
    payload = {
        "currency": "EUR",
        "exchange_rate": {"rate": "4.25"},
        "target_amount_in_pln": "5000.00",
        "items": [{"description": "Transport", "unit_price_net": "1000.00", "vat_rate": 0}],
    }

    resp = client.post("/api/invoices/calculate", json=payload, headers=auth(token))
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert money(data["items"][0]["unit_price_net"]) == Decimal("1176.47")
    assert money(data["gross_amount"]) == Decimal("1176.47")
    assert money(data["amount_in_pln"]) == Decimal("5000.00")

    db = SessionLocal()
    try:
        assert db.query(Invoice).count() == 0
    finally:
        db.close()


def test_contractor_of_other_tenant_is_not_found():
    client = TestClient(app)
    token, _, _ = create_tenant_with_contractor("billing@example.com")
    _, _, other_contractor_id = create_tenant_with_contractor("other@example.com")

    resp = client.post("/api/invoices/", json=invoice_payload(other_contractor_id), headers=auth(token))
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Contractor not found"


def test_invoice_links_orders():
    client = TestClient(app)
    token, tenant_id, contractor_id = create_tenant_with_contractor("billing@example.com")
    order_ids = [create_order(tenant_id, "ZL/0001"), create_order(tenant_id, "ZL/0002")]

    resp = client.post("/api/invoices/", json=invoice_payload(contractor_id, order_ids=order_ids), headers=auth(token))
    assert resp.status_code == 201
    assert sorted(resp.json()["order_ids"]) == order_ids

    order = client.get(f"/api/orders/{order_ids[0]}", headers=auth(token)).json()
    assert order["invoice_id"] == resp.json()["id"]


def test_unknown_orders_are_rejected():
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")
    _, other_tenant_id, _ = create_tenant_with_contractor("other@example.com")
    foreign_order_id = create_order(other_tenant_id, "ZL/0001")

    resp = client.post(
        "/api/invoices/", json=invoice_payload(contractor_id, order_ids=[foreign_order_id]), headers=auth(token)
    )
    assert resp.status_code == 400


def test_update_draft_items_recomputes_totals():
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")
    invoice = client.post("/api/invoices/", json=invoice_payload(contractor_id), headers=auth(token)).json()

    resp = client.patch(
        f"/api/invoices/{invoice['id']}",
        json={
            "notes": "Corrected quantity",
            "items": [{"description": "Transport", "quantity": "5", "unit_price_net": "100.00", "vat_rate": 8}],
        },
        headers=auth(token),
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["notes"] == "Corrected quantity"
    assert len(data["items"]) == 1
    assert money(data["net_amount"]) == Decimal("500.00")
    assert money(data["vat_amount"]) == Decimal("40.00")
    assert money(data["gross_amount"]) == Decimal("540.00")



def test_update_foreign_items_reuses_stored_rate():
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")
    payload = invoice_payload(
        contractor_id,
        currency="EUR",
        exchange_rate={"rate": "4.25", "date": "2026-01-13", "table": "008/A/NBP/2026"},
    )
    invoice = client.post("/api/invoices/", json=payload, headers=auth(token)).json()

    resp = client.patch(
        f"/api/invoices/{invoice['id']}",
        json={"items": [{"description": "Transport Poznan - Berlin", "unit_price_net": "2000.00", "vat_rate": 0}]},
        headers=auth(token),
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert money(data["gross_amount"]) == Decimal("2000.00")
    assert money(data["amount_in_pln"]) == Decimal("8500.00")
    assert data["exchange_rate_date"] == "2026-01-13"
    assert data["exchange_rate_table"] == "008/A/NBP/2026"

def test_items_locked_after_issue():
    client = TestClient(app)
    token, _, contractor_id = create_tenant_with_contractor("billing@example.com")
    invoice = client.post("/api/invoices/", json=invoice_payload(contractor_id), headers=auth(token)).json()

    resp = client.patch(f"/api/invoices/{invoice['id']}", json={"status": "ISSUED"}, headers=auth(token))
    assert resp.status_code == 200
    assert resp.json()["status"] == "ISSUED"

    resp = client.patch(
        f"/api/invoices/{invoice['id']}",
        json={"items": [{"description": "Transport", "unit_price_net": "1.00"}]},
        headers=auth(token),
    )
    assert resp.status_code == 400

    resp = client.delete(f"/api/invoices/{invoice['id']}", headers=auth(token))
    assert resp.status_code == 400


def test_list_and_delete_invoices():
    client = TestClient(app)
    token, tenant_id, contractor_id = create_tenant_with_contractor("billing@example.com")
    order_id = create_order(tenant_id, "ZL/0001")
    first = client.post(
        "/api/invoices/", json=invoice_payload(contractor_id, order_ids=[order_id]), headers=auth(token)
    ).json()
    client.post("/api/invoices/", json=invoice_payload(contractor_id, issue_date="2026-02-02"), headers=auth(token))

    resp = client.get("/api/invoices/?start_date=2026-02-01", headers=auth(token))
    assert resp.json()["pagination"]["total"] == 1

    resp = client.get("/api/invoices/?limit=1", headers=auth(token))
    assert resp.json()["pagination"] == {"page": 1, "limit": 1, "total": 2, "totalPages": 2}

    resp = client.delete(f"/api/invoices/{first['id']}", headers=auth(token))
    assert resp.status_code == 200
    assert client.get(f"/api/invoices/{first['id']}", headers=auth(token)).status_code == 404
    assert client.get(f"/api/orders/{order_id}", headers=auth(token)).json()["invoice_id"] is None
