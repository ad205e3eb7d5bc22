import logging
import uuid
from collections.abc import Callable

from sqlalchemy.orm import Session

import app.repositories.project as project_repo
from app.db.models.project import Project as ProjectModel
from app.domain.billing import monthly_rent_from_unit_price, round_currency
from app.domain.calendar import add_years, day_after, day_before
from app.errors import DomainValidationError, NotFoundError
from app.schemas.budget import YearlyTarget
from app.schemas.building import Building, find_unit
from app.schemas.project import ProjectData
from app.schemas.tenant import Tenant

logger = logging.getLogger(__name__)

AREA_TOLERANCE = 0.01


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def dump_document(document: ProjectData) -> dict:
    """Serialize the authoritative document for storage (camelCase JSON)."""
    return document.model_dump(mode="json", by_alias=True)


def get_project(db: Session, project_id: int) -> ProjectModel:
    project = project_repo.get_project_by_id(db, project_id)
    if not project:
        raise NotFoundError(f"Project with id {project_id} not found")
    return project


def load_document(db: Session, project_id: int) -> ProjectData:
    return ProjectData.model_validate(get_project(db, project_id).data)


def create_project(db: Session, name: str, document: ProjectData) -> ProjectModel:
    if not name.strip():
        raise DomainValidationError("Project name must not be empty")
    return project_repo.create_project(db, name=name.strip(), data=dump_document(document))


def save_document(db: Session, project_id: int, document: ProjectData) -> ProjectData:
    get_project(db, project_id)
    project_repo.update_project_data(db, project_id, dump_document(document))
    return document


def apply_change(
    db: Session,
    project_id: int,
    change: Callable[[ProjectData], ProjectData],
) -> ProjectData:
    """Load a project's document, apply a pure change and store the result."""
    document = load_document(db, project_id)
    return save_document(db, project_id, change(document))


def set_yearly_target(document: ProjectData, year: int, target: YearlyTarget) -> ProjectData:
    targets = {**document.yearly_targets, year: target}
    return document.model_copy(update={"yearly_targets": targets})


def renewal_of(tenant: Tenant, new_tenant_id: str) -> Tenant:
    """The Pending contract that continues a lease for one more year.

    It starts the day after the current lease end, bills from its start,
    drops rent-free periods and keeps the rent terms as stored.
    """
    start = day_after(tenant.lease_end)
    return tenant.model_copy(
        update={
            "id": new_tenant_id,
            "root_id": tenant.root_id or tenant.id,
            "lease_start": start,
            "lease_end": day_before(add_years(start, 1)),
            "termination_date": None,
            "first_payment_date": start,
            "first_payment_months": None,
            "rent_free_periods": [],
            "status": "Pending",
            "is_risk": False,
            "contract_parking_spaces": tenant.contract_parking(),
            "actual_parking_spaces": tenant.actual_parking(),
        }
    )


def renew_tenant(
    document: ProjectData, tenant_id: str, new_tenant_id: str
) -> tuple[ProjectData, Tenant]:
    """Add a renewal contract and mark the current one Expired.

    The old contract is kept so the chain stays traceable through ``root_id``.
    """
    tenant = document.tenant(tenant_id)
    if tenant is None:
        raise NotFoundError(f"Tenant '{tenant_id}' not found")
    if tenant.status in ("Terminated", "Expired"):
        raise DomainValidationError(f"Tenant '{tenant_id}' is {tenant.status.lower()} and cannot be renewed")

    renewal = renewal_of(tenant, new_tenant_id)
    tenants = [
        t.model_copy(update={"status": "Expired"}) if t.id == tenant.id else t
        for t in document.tenants
    ]
    logger.info("Renewed tenant %s as %s from %s", tenant.id, renewal.id, renewal.lease_start)
    return document.model_copy(update={"tenants": [*tenants, renewal]}), renewal


def rederive_tenant_areas(tenants: list[Tenant], buildings: list[Building]) -> list[Tenant]:
    """Recompute each tenant's area from its units and reprice from the unit price.

    Tenants whose area is unchanged are returned as is.
    """
    updated = []
    for tenant in tenants:
        area = 0.0
        for unit_id in tenant.unit_ids:
            found = find_unit(buildings, unit_id)
            if found is not None:
                area += found[1].area
        area = round(area, 2)
        if abs(area - tenant.total_area) < AREA_TOLERANCE:
            updated.append(tenant)
            continue
        price = tenant.resolved_unit_price()
        updated.append(
            tenant.model_copy(
                update={
                    "total_area": area,
                    "unit_price": price,
                    "monthly_rent": round_currency(monthly_rent_from_unit_price(price, area)),
                }
            )
        )
    return updated


def replace_buildings(document: ProjectData, buildings: list[Building]) -> ProjectData:
    return document.model_copy(
        update={
            "buildings": buildings,
            "tenants": rederive_tenant_areas(document.tenants, buildings),
        }
    )
