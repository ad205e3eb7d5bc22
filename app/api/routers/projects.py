from datetime import date

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

import app.repositories.project as project_repo
from app.api.deps import get_db, month_param
from app.schemas.budget import YearlyTarget
from app.schemas.building import Building
from app.schemas.dashboard import DashboardData, Quarter
from app.schemas.project import Project, ProjectCreate, ProjectData
from app.services.aggregation import recalculate
from app.services.project import (
    apply_change,
    create_project,
    load_document,
    replace_buildings,
    save_document,
    set_yearly_target,
)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
def create_new_project(project_data: ProjectCreate, db: Session = Depends(get_db)):
    """Create a project from an initial dashboard document."""
    project = create_project(db, name=project_data.name, document=project_data.data)
    return Project.model_validate(project)


@router.get("", response_model=list[Project])
def get_all_projects(db: Session = Depends(get_db)):
    return [Project.model_validate(p) for p in project_repo.get_all_projects(db)]


@router.get("/{project_id}", response_model=DashboardData)
def get_dashboard(
    project_id: int,
    year: int | None = Query(None, ge=1900, le=2100, description="Reporting year (default: current year)"),
    quarter: Quarter = Query("All", description="Reporting quarter"),
    billing_month: str | None = Query(
        None, alias="billingMonth", pattern=r"^\d{4}-\d{2}$", description="Billing month (YYYY-MM)"
    ),
    db: Session = Depends(get_db),
):
    """
    Get a project's dashboard.

    Every computed field is re-derived from the stored document on each call.
    """
    if billing_month is not None:
        month_param(billing_month)
    document = load_document(db, project_id)
    return recalculate(document, year or date.today().year, quarter, billing_month)


@router.put("/{project_id}/data", response_model=ProjectData)
def replace_project_data(
    project_id: int, document: ProjectData, db: Session = Depends(get_db)
):
    """Replace the authoritative document. Computed fields in the body are ignored."""
    return save_document(db, project_id, document)


@router.put("/{project_id}/buildings", response_model=ProjectData)
def replace_project_buildings(
    project_id: int, buildings: list[Building], db: Session = Depends(get_db)
):
    """Replace buildings and re-derive tenant areas and rents from the unit areas."""
    return apply_change(db, project_id, lambda doc: replace_buildings(doc, buildings))


@router.patch("/{project_id}/targets/{year}", response_model=ProjectData)
def update_yearly_target(
    project_id: int,
    target: YearlyTarget,
    year: int = Path(..., ge=1900, le=2100),
    db: Session = Depends(get_db),
):
    return apply_change(db, project_id, lambda doc: set_yearly_target(doc, year, target))
