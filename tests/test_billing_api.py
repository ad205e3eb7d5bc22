from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.schemas.project import ProjectData
from app.services.project import renewal_of
from conftest import make_buildings, make_tenant


def billing(client: TestClient, project_id: int, month: str) -> list[dict]:
    response = client.get(f"/api/v1/projects/{project_id}/billing", params={"month": month})
    assert response.status_code == 200
    return response.json()


# ============================================================================
# BILL LISTING TESTS
# ============================================================================


def test_get_tenant_bills(client: TestClient, project: dict):
    response = client.get(
        f"/api/v1/projects/{project['id']}/tenants/t1/bills",
        params={"start": "2024-01-01", "end": "2024-12-31"},
    )
    assert response.status_code == 200
    data = response.json()
    assert [b["date"] for b in data["bills"]] == ["2024-03-01", "2024-06-01", "2024-09-01"]
    assert data["total"] == 81000
    assert data["capped"] is False
    assert data["bills"][0]["coverageStart"] == "2024-04-01"


def test_get_tenant_bills_inverted_range(client: TestClient, project: dict):
    response = client.get(
        f"/api/v1/projects/{project['id']}/tenants/t1/bills",
        params={"start": "2024-12-31", "end": "2024-01-01"},
    )
    assert response.status_code == 422


def test_get_tenant_bills_unknown_tenant(client: TestClient, project: dict):
    response = client.get(
        f"/api/v1/projects/{project['id']}/tenants/nobody/bills",
        params={"start": "2024-01-01", "end": "2024-12-31"},
    )
    assert response.status_code == 404


def test_get_billing_month(client: TestClient, project: dict):
    rows = billing(client, project["id"], "2024-03")
    assert rows == [
        {
            "tenantId": "t1",
            "tenantName": "Acme Ltd",
            "unitIds": ["u1"],
            "amountDue": 27000,
            "amountPaid": 0,
            "status": "Unpaid",
        }
    ]


@pytest.mark.parametrize("month", ["2024-3", "March", "2024-13"])
def test_get_billing_invalid_month(client: TestClient, project: dict, month: str):
    response = client.get(f"/api/v1/projects/{project['id']}/billing", params={"month": month})
    assert response.status_code == 422


# ============================================================================
# DEFER TESTS
# ============================================================================


def test_defer_moves_due_to_next_month(client: TestClient, project: dict):
    """Test deferring March moves the whole due amount to April."""
    response = client.post(
        f"/api/v1/projects/{project['id']}/billing/defer",
        json={"tenantId": "t1", "month": "2024-03"},
    )
    assert response.status_code == 201
    adjustment = response.json()
    assert adjustment["amount"] == 27000
    assert (adjustment["originalMonth"], adjustment["adjustedMonth"]) == (2, 3)
    assert adjustment["reason"] == "Defer payment"

    assert billing(client, project["id"], "2024-03") == []
    assert billing(client, project["id"], "2024-04")[0]["amountDue"] == 27000


def test_defer_december_rolls_into_next_year(client: TestClient):
    tenant = make_tenant(
        lease_start=date(2025, 1, 1),
        lease_end=date(2025, 12, 31),
        first_payment_date=date(2024, 12, 1),
    )
    created = client.post(
        "/api/v1/projects",
        json={
            "name": "Tower B",
            "data": ProjectData(buildings=make_buildings(), tenants=[tenant]).model_dump(
                mode="json", by_alias=True
            ),
        },
    ).json()

    response = client.post(
        f"/api/v1/projects/{created['id']}/billing/defer",
        json={"tenantId": "t1", "month": "2024-12"},
    )
    assert response.status_code == 201
    assert response.json()["adjustedYear"] == 2025
    assert response.json()["adjustedMonth"] == 0


def test_defer_month_without_bill(client: TestClient, project: dict):
    response = client.post(
        f"/api/v1/projects/{project['id']}/billing/defer",
        json={"tenantId": "t1", "month": "2024-02"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


# ============================================================================
# COLLECTION TESTS
# ============================================================================


def test_collect_and_revoke(client: TestClient, project: dict):
    """Test confirming a collection pays the month and revoking it undoes the payment."""
    response = client.post(
        f"/api/v1/projects/{project['id']}/billing/collect",
        json={"tenantId": "t1", "month": "2024-06"},
    )
    assert response.status_code == 201
    payment = response.json()
    assert payment["amount"] == 27000
    assert payment["date"] == "2024-06-15"
    assert payment["type"] == "Rent"
    assert billing(client, project["id"], "2024-06")[0]["status"] == "Paid"

    response = client.post(
        f"/api/v1/projects/{project['id']}/billing/revoke",
        json={"tenantId": "t1", "month": "2024-06"},
    )
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [payment["id"]]
    assert billing(client, project["id"], "2024-06")[0]["status"] == "Unpaid"


def test_collect_nothing_outstanding(client: TestClient, project: dict):
    client.post(
        f"/api/v1/projects/{project['id']}/billing/collect",
        json={"tenantId": "t1", "month": "2024-06"},
    )
    response = client.post(
        f"/api/v1/projects/{project['id']}/billing/collect",
        json={"tenantId": "t1", "month": "2024-06"},
    )
    assert response.status_code == 400


def test_revoke_without_payments(client: TestClient, project: dict):
    response = client.post(
        f"/api/v1/projects/{project['id']}/billing/revoke",
        json={"tenantId": "t1", "month": "2024-06"},
    )
    assert response.status_code == 404


# ============================================================================
# RENEWAL AND DEPOSIT TESTS
# ============================================================================


def test_renew_tenant(client: TestClient, project: dict):
    """Test renewal adds a Pending one-year contract and expires the old one."""
    response = client.post(f"/api/v1/projects/{project['id']}/tenants/t1/renew")
    assert response.status_code == 201
    renewal = response.json()
    assert renewal["status"] == "Pending"
    assert renewal["rootId"] == "t1"
    assert renewal["leaseStart"] == "2025-01-01"
    assert renewal["leaseEnd"] == "2025-12-31"
    assert renewal["firstPaymentDate"] == "2025-01-01"
    assert renewal["unitPrice"] is None
    assert renewal["monthlyRent"] == 9000

    dashboard = client.get(f"/api/v1/projects/{project['id']}", params={"year": 2024}).json()
    statuses = {t["id"]: t["status"] for t in dashboard["tenants"]}
    assert statuses["t1"] == "Expired"
    assert statuses[renewal["id"]] == "Pending"


def test_renewal_keeps_rent_from_monthly_rent():
    """Test a renewal of a monthly-rent lease bills the same rent."""
    tenant = make_tenant(total_area=100, monthly_rent=9000)
    renewal = renewal_of(tenant, "t2")
    assert renewal.unit_price is None
    assert renewal.resolved_monthly_rent() == tenant.resolved_monthly_rent() == 9000


def test_renewal_keeps_unit_price_exactly():
    """Test a renewal carries the daily unit price over unrounded."""
    tenant = make_tenant(total_area=1000, unit_price=3.125)
    renewal = renewal_of(tenant, "t2")
    assert renewal.unit_price == 3.125
    assert renewal.resolved_monthly_rent() == tenant.resolved_monthly_rent()


def test_renew_expired_tenant_fails(client: TestClient, project: dict):
    client.post(f"/api/v1/projects/{project['id']}/tenants/t1/renew")
    response = client.post(f"/api/v1/projects/{project['id']}/tenants/t1/renew")
    assert response.status_code == 400


def test_refund_deposit(client: TestClient):
    tenant = make_tenant(deposit_amount=18000, deposit_status="Paid", status="Terminated")
    created = client.post(
        "/api/v1/projects",
        json={
            "name": "Tower C",
            "data": ProjectData(buildings=make_buildings(), tenants=[tenant]).model_dump(
                mode="json", by_alias=True
            ),
        },
    ).json()
    url = f"/api/v1/projects/{created['id']}/tenants/t1/deposit"

    response = client.post(url, json={"action": "Refund", "on": "2025-01-10"})
    assert response.status_code == 201
    assert response.json()["amount"] == -18000
    assert response.json()["type"] == "DepositRefund"

    dashboard = client.get(f"/api/v1/projects/{created['id']}", params={"year": 2025}).json()
    assert dashboard["tenants"][0]["depositStatus"] == "Refunded"
    assert dashboard["financeSummary"]["totalDepositRefunded"] == 18000
    assert dashboard["financeSummary"]["pendingRefundTenantIds"] == []

    response = client.post(url, json={"action": "Deduct", "on": "2025-01-11"})
    assert response.status_code == 400


def test_deposit_without_amount(client: TestClient, project: dict):
    response = client.post(
        f"/api/v1/projects/{project['id']}/tenants/t1/deposit",
        json={"action": "Deduct", "on": "2024-12-31"},
    )
    assert response.status_code == 400


def test_deposit_invalid_action(client: TestClient, project: dict):
    response = client.post(
        f"/api/v1/projects/{project['id']}/tenants/t1/deposit",
        json={"action": "Keep", "on": "2024-12-31"},
    )
    assert response.status_code == 422
