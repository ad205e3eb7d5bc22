from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.budget import AdjustmentCreate, BudgetAdjustment, BudgetAssumption
from app.schemas.budget_view import BudgetDetail, BudgetTrend, ExecutionView
from app.services.budget import budget_detail, budget_trend, execution_view
from app.services.project import apply_change, load_document, new_id
from app.services.scenario import (
    add_adjustment,
    default_selector,
    resolve,
    undo_last_adjustment,
    upsert_assumption,
)

router = APIRouter(prefix="/projects/{project_id}/budget", tags=["budget"])

YEAR_QUERY = Query(..., ge=1900, le=2100, description="Budget year")
SCENARIO_QUERY = Query(
    None, description="Scenario id or 'current' (default: the active scenario, else current)"
)


@router.get("/detail", response_model=BudgetDetail)
def get_budget_detail(
    project_id: int,
    year: int = YEAR_QUERY,
    scenario: str | None = SCENARIO_QUERY,
    db: Session = Depends(get_db),
):
    """Monthly budget rows per tenant and vacant unit, with occupancy by month."""
    document = load_document(db, project_id)
    return budget_detail(resolve(document, scenario or default_selector(document)), year)


@router.get("/execution", response_model=ExecutionView)
def get_budget_execution(
    project_id: int,
    year: int = YEAR_QUERY,
    scenario: str | None = SCENARIO_QUERY,
    db: Session = Depends(get_db),
):
    document = load_document(db, project_id)
    data = resolve(document, scenario or default_selector(document))
    return execution_view(data, document.payments, year)


@router.get("/trend", response_model=BudgetTrend)
def get_budget_trend(
    project_id: int,
    year: int = YEAR_QUERY,
    scenario: str | None = SCENARIO_QUERY,
    db: Session = Depends(get_db),
):
    """Five-year comparison around ``year`` plus the assumption impact summary."""
    document = load_document(db, project_id)
    return budget_trend(resolve(document, scenario or default_selector(document)), year)


@router.put("/assumptions", response_model=list[BudgetAssumption])
def put_assumption(
    project_id: int,
    assumption: BudgetAssumption,
    scenario: str | None = SCENARIO_QUERY,
    db: Session = Depends(get_db),
):
    """
    Store an assumption for its (target, type), replacing any previous one.

    Returns the resulting assumption list of the scenario (or live data).
    """
    document = load_document(db, project_id)
    selector = scenario or default_selector(document)
    updated = apply_change(db, project_id, lambda doc: upsert_assumption(doc, selector, assumption))
    return resolve(updated, selector).assumptions


@router.post("/adjustments", response_model=BudgetAdjustment, status_code=status.HTTP_201_CREATED)
def create_adjustment(
    project_id: int,
    adjustment_data: AdjustmentCreate,
    scenario: str | None = SCENARIO_QUERY,
    db: Session = Depends(get_db),
):
    document = load_document(db, project_id)
    selector = scenario or default_selector(document)
    adjustment = BudgetAdjustment(id=new_id("adj"), **adjustment_data.model_dump())
    apply_change(db, project_id, lambda doc: add_adjustment(doc, selector, adjustment))
    return adjustment


@router.delete("/adjustments/last", response_model=list[BudgetAdjustment])
def undo_adjustment(
    project_id: int,
    scenario: str | None = SCENARIO_QUERY,
    db: Session = Depends(get_db),
):
    """Drop the most recent adjustment; returns the remaining list."""
    document = load_document(db, project_id)
    selector = scenario or default_selector(document)
    updated = apply_change(db, project_id, lambda doc: undo_last_adjustment(doc, selector))
    return resolve(updated, selector).adjustments
