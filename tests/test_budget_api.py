from fastapi.testclient import TestClient

FILL_U2 = {
    "id": "a_fill",
    "targetType": "Vacancy",
    "targetId": "u2",
    "targetName": "102",
    "projectedSignDate": "2024-04-01",
    "projectedUnitPrice": 2.0,
    "projectedRentFreeMonths": 1,
}

DEFER_MARCH = {
    "tenantId": "t1",
    "originalYear": 2024,
    "originalMonth": 2,
    "adjustedYear": 2024,
    "adjustedMonth": 4,
    "amount": 7000,
    "reason": "Tenant asked for time",
}


def budget_url(project: dict, path: str) -> str:
    return f"/api/v1/projects/{project['id']}/budget/{path}"


# ============================================================================
# VIEW TESTS
# ============================================================================


def test_get_budget_detail(client: TestClient, project: dict):
    response = client.get(budget_url(project, "detail"), params={"year": 2024})
    assert response.status_code == 200
    data = response.json()
    assert data["scenario"] == "current"
    assert [r["id"] for r in data["rows"]] == ["u2", "t1"]
    assert data["grandTotal"] == 81000
    assert len(data["occupancy"]) == 12


def test_get_budget_detail_requires_year(client: TestClient, project: dict):
    response = client.get(budget_url(project, "detail"))
    assert response.status_code == 422


def test_get_budget_detail_unknown_scenario(client: TestClient, project: dict):
    response = client.get(
        budget_url(project, "detail"), params={"year": 2024, "scenario": "missing"}
    )
    assert response.status_code == 404


def test_get_budget_execution(client: TestClient, project: dict):
    client.post(
        f"/api/v1/projects/{project['id']}/billing/collect",
        json={"tenantId": "t1", "month": "2024-03"},
    )
    response = client.get(budget_url(project, "execution"), params={"year": 2024})
    assert response.status_code == 200
    data = response.json()
    assert data["months"][2]["completionRate"] == 100
    assert data["budgetTotal"] == 81000
    assert data["completionRate"] == 33


def test_get_budget_trend(client: TestClient, project: dict):
    client.put(budget_url(project, "assumptions"), json=FILL_U2)

    response = client.get(budget_url(project, "trend"), params={"year": 2024})
    assert response.status_code == 200
    data = response.json()
    assert [y["year"] for y in data["years"]] == [2022, 2023, 2024, 2025, 2026]
    assert data["impact"]["vacancyCurrent"] == 133833


# ============================================================================
# ASSUMPTION TESTS
# ============================================================================


def test_put_assumption_updates_detail(client: TestClient, project: dict):
    response = client.put(budget_url(project, "assumptions"), json=FILL_U2)
    assert response.status_code == 200
    assert [a["id"] for a in response.json()] == ["a_fill"]

    detail = client.get(budget_url(project, "detail"), params={"year": 2024}).json()
    assert detail["grandTotal"] == 214833


def test_put_assumption_replaces_previous_for_same_target(client: TestClient, project: dict):
    client.put(budget_url(project, "assumptions"), json=FILL_U2)
    response = client.put(
        budget_url(project, "assumptions"),
        json={**FILL_U2, "id": "a_fill2", "projectedUnitPrice": 2.5},
    )
    assert [a["id"] for a in response.json()] == ["a_fill2"]


def test_put_assumption_invalid_target_type(client: TestClient, project: dict):
    response = client.put(
        budget_url(project, "assumptions"), json={**FILL_U2, "targetType": "Parking"}
    )
    assert response.status_code == 422


def test_assumptions_do_not_change_dashboard_receivable(client: TestClient, project: dict):
    """Test vacancy fill assumptions only affect the planning views."""
    client.put(budget_url(project, "assumptions"), json=FILL_U2)
    dashboard = client.get(f"/api/v1/projects/{project['id']}", params={"year": 2024}).json()
    assert dashboard["monthlyRevenueTarget"] == 81000


# ============================================================================
# ADJUSTMENT TESTS
# ============================================================================


def test_create_adjustment_moves_receivable(client: TestClient, project: dict):
    response = client.post(budget_url(project, "adjustments"), json=DEFER_MARCH)
    assert response.status_code == 201
    assert response.json()["id"].startswith("adj_")

    march = client.get(
        f"/api/v1/projects/{project['id']}/billing", params={"month": "2024-03"}
    ).json()
    may = client.get(
        f"/api/v1/projects/{project['id']}/billing", params={"month": "2024-05"}
    ).json()
    assert march[0]["amountDue"] == 20000
    assert may[0]["amountDue"] == 7000


def test_create_adjustment_same_month(client: TestClient, project: dict):
    response = client.post(
        budget_url(project, "adjustments"),
        json={**DEFER_MARCH, "adjustedMonth": 2},
    )
    assert response.status_code == 422


def test_create_adjustment_month_out_of_range(client: TestClient, project: dict):
    response = client.post(
        budget_url(project, "adjustments"),
        json={**DEFER_MARCH, "adjustedMonth": 12},
    )
    assert response.status_code == 422


def test_undo_adjustment(client: TestClient, project: dict):
    client.post(budget_url(project, "adjustments"), json=DEFER_MARCH)
    client.post(budget_url(project, "adjustments"), json={**DEFER_MARCH, "amount": 1000})

    response = client.delete(budget_url(project, "adjustments/last"))
    assert response.status_code == 200
    assert [a["amount"] for a in response.json()] == [7000]


def test_undo_adjustment_when_empty(client: TestClient, project: dict):
    response = client.delete(budget_url(project, "adjustments/last"))
    assert response.status_code == 400
