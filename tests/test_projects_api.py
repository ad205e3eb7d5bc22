from fastapi.testclient import TestClient

from app.schemas.project import ProjectData


# ============================================================================
# CREATE AND LIST PROJECT TESTS
# ============================================================================


def test_create_project(client: TestClient, document: ProjectData):
    """Test creating a project from an initial document."""
    response = client.post(
        "/api/v1/projects",
        json={"name": "Tower A", "data": document.model_dump(mode="json", by_alias=True)},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Tower A"
    assert "id" in data
    assert data["updatedAt"] is not None


def test_create_project_without_data(client: TestClient):
    response = client.post("/api/v1/projects", json={"name": "Empty"})
    assert response.status_code == 201


def test_create_project_blank_name(client: TestClient):
    """Test a whitespace-only name is rejected by the service."""
    response = client.post("/api/v1/projects", json={"name": "   "})
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_create_project_missing_name(client: TestClient):
    response = client.post("/api/v1/projects", json={})
    assert response.status_code == 422


def test_get_all_projects(client: TestClient, project: dict):
    response = client.get("/api/v1/projects")
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [project["id"]]


# ============================================================================
# DASHBOARD TESTS
# ============================================================================


def test_get_dashboard(client: TestClient, project: dict):
    """Test the dashboard re-derives every computed field for the requested year."""
    response = client.get(f"/api/v1/projects/{project['id']}", params={"year": 2024})
    assert response.status_code == 200
    data = response.json()
    assert data["year"] == 2024
    assert data["totalArea"] == 300
    assert data["leasedArea"] == 100
    assert data["occupancyRate"] == 33.3
    assert data["monthlyRevenueTarget"] == 81000
    assert data["newContractsCount"] == 1
    assert len(data["monthlyTrends"]) == 12
    assert len(data["prevYearMonthlyTrends"]) == 12
    assert data["tenants"][0]["id"] == "t1"
    assert data["buildings"][0]["units"][0]["status"] == "Occupied"


def test_get_dashboard_quarter_and_billing_month(client: TestClient, project: dict):
    response = client.get(
        f"/api/v1/projects/{project['id']}",
        params={"year": 2024, "quarter": "Q1", "billingMonth": "2024-03"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["monthlyRevenueTarget"] == 27000
    assert data["billingMonth"] == "2024-03"
    assert data["currentMonthBilling"][0]["amountDue"] == 27000
    assert data["currentMonthBilling"][0]["status"] == "Unpaid"


def test_get_dashboard_invalid_billing_month(client: TestClient, project: dict):
    response = client.get(
        f"/api/v1/projects/{project['id']}", params={"year": 2024, "billingMonth": "2024-13"}
    )
    assert response.status_code == 422


def test_get_dashboard_invalid_quarter(client: TestClient, project: dict):
    response = client.get(
        f"/api/v1/projects/{project['id']}", params={"year": 2024, "quarter": "Q5"}
    )
    assert response.status_code == 422


def test_get_dashboard_not_found(client: TestClient):
    response = client.get("/api/v1/projects/99999")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


# ============================================================================
# UPDATE PROJECT TESTS
# ============================================================================


def test_replace_data_ignores_computed_fields(client: TestClient, project: dict):
    """Test computed fields posted back with the document are not stored."""
    dashboard = client.get(f"/api/v1/projects/{project['id']}", params={"year": 2024}).json()
    dashboard["occupancyRate"] = 99.9
    dashboard["tenants"][0]["name"] = "Acme Holdings"

    response = client.put(f"/api/v1/projects/{project['id']}/data", json=dashboard)
    assert response.status_code == 200
    assert "occupancyRate" not in response.json()

    refreshed = client.get(f"/api/v1/projects/{project['id']}", params={"year": 2024}).json()
    assert refreshed["tenants"][0]["name"] == "Acme Holdings"
    assert refreshed["occupancyRate"] == 33.3


def test_replace_data_rejects_invalid_document(client: TestClient, project: dict):
    response = client.put(
        f"/api/v1/projects/{project['id']}/data",
        json={"tenants": [{"id": "t9", "leaseStart": "2024-01-01"}]},
    )
    assert response.status_code == 422


def test_replace_buildings_rederives_tenant_area(client: TestClient, project: dict):
    """Test changing a unit's area reprices the tenant at its daily unit price."""
    response = client.put(
        f"/api/v1/projects/{project['id']}/buildings",
        json=[
            {
                "id": "b1",
                "name": "Tower A",
                "units": [
                    {"id": "u1", "name": "101", "area": 120, "status": "Occupied"},
                    {"id": "u2", "name": "102", "area": 200},
                ],
            }
        ],
    )
    assert response.status_code == 200
    tenant = response.json()["tenants"][0]
    assert tenant["totalArea"] == 120
    assert tenant["monthlyRent"] == 10800


def test_update_yearly_target(client: TestClient, project: dict):
    response = client.patch(
        f"/api/v1/projects/{project['id']}/targets/2024",
        json={"revenue": 120000, "occupancy": 90},
    )
    assert response.status_code == 200
    assert response.json()["yearlyTargets"]["2024"]["revenue"] == 120000

    dashboard = client.get(f"/api/v1/projects/{project['id']}", params={"year": 2024}).json()
    assert dashboard["annualRevenueTarget"] == 120000
    assert dashboard["annualOccupancyTarget"] == 90


def test_update_yearly_target_out_of_range(client: TestClient, project: dict):
    response = client.patch(
        f"/api/v1/projects/{project['id']}/targets/2024",
        json={"revenue": 1000, "occupancy": 120},
    )
    assert response.status_code == 422
