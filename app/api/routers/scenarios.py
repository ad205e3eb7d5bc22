from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.budget import BudgetScenario
from app.schemas.scenario import ScenarioCreate, ScenarioUpdate
from app.services.project import apply_change, load_document, new_id, save_document
from app.services.scenario import (
    activate_scenario,
    create_scenario,
    delete_scenario,
    rename_scenario,
)

router = APIRouter(prefix="/projects/{project_id}/scenarios", tags=["scenarios"])


@router.get("", response_model=list[BudgetScenario])
def get_all_scenarios(project_id: int, db: Session = Depends(get_db)):
    return load_document(db, project_id).budget_scenarios


@router.post("", response_model=BudgetScenario, status_code=status.HTTP_201_CREATED)
def create_new_scenario(
    project_id: int, scenario_data: ScenarioCreate, db: Session = Depends(get_db)
):
    """
    Create a scenario seeded with the live assumptions and adjustments.

    With ``withSnapshot`` the live tenants and buildings are frozen into it.
    """
    document, scenario = create_scenario(
        load_document(db, project_id),
        scenario_id=new_id("scenario"),
        name=scenario_data.name,
        description=scenario_data.description,
        created_at=datetime.now(timezone.utc),
        with_snapshot=scenario_data.with_snapshot,
    )
    save_document(db, project_id, document)
    return scenario


@router.patch("/{scenario_id}", response_model=BudgetScenario)
def update_scenario(
    project_id: int,
    scenario_id: str,
    scenario_data: ScenarioUpdate,
    db: Session = Depends(get_db),
):
    document = apply_change(
        db,
        project_id,
        lambda doc: rename_scenario(
            doc, scenario_id, name=scenario_data.name, description=scenario_data.description
        ),
    )
    return document.scenario(scenario_id)


@router.delete("/{scenario_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_scenario_by_id(project_id: int, scenario_id: str, db: Session = Depends(get_db)):
    apply_change(db, project_id, lambda doc: delete_scenario(doc, scenario_id))


@router.post("/{scenario_id}/activate", response_model=list[BudgetScenario])
def activate_scenario_by_id(project_id: int, scenario_id: str, db: Session = Depends(get_db)):
    """Copy the scenario's plan into live data and make it the only active scenario."""
    document = apply_change(db, project_id, lambda doc: activate_scenario(doc, scenario_id))
    return document.budget_scenarios
