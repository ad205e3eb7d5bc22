from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_narrative_client
from app.schemas.dashboard import Quarter
from app.schemas.narrative import BudgetNarrativeRequest, NarrativeResponse
from app.services.aggregation import recalculate
from app.services.budget import budget_detail, execution_view
from app.services.narrative import (
    NarrativeClient,
    budget_summary,
    build_prompt,
    dashboard_summary,
)
from app.services.project import load_document, save_document
from app.services.scenario import default_selector, resolve

router = APIRouter(prefix="/projects/{project_id}/narrative", tags=["narrative"])

ANALYSIS_FIELDS = {"Occupancy": "occupancy", "Revenue": "revenue", "Execution": "execution"}


@router.post("/budget", response_model=NarrativeResponse)
async def create_budget_narrative(
    project_id: int,
    request: BudgetNarrativeRequest,
    scenario: str | None = Query(None, description="Scenario id or 'current'"),
    db: Session = Depends(get_db),
    client: NarrativeClient = Depends(get_narrative_client),
):
    """
    Describe one budget topic in prose.

    The text is stored in the project's budget analysis under the topic.
    """
    document = load_document(db, project_id)
    data = resolve(document, scenario or default_selector(document))
    summary = budget_summary(
        request.kind,
        budget_detail(data, request.year),
        execution_view(data, document.payments, request.year),
    )
    text = await client.generate(build_prompt(f"{request.kind} budget", summary))

    analysis = document.budget_analysis.model_copy(
        update={ANALYSIS_FIELDS[request.kind]: text}
    )
    save_document(db, project_id, document.model_copy(update={"budget_analysis": analysis}))
    return NarrativeResponse(text=text)


@router.post("/dashboard", response_model=NarrativeResponse)
async def create_dashboard_narrative(
    project_id: int,
    year: int | None = Query(None, ge=1900, le=2100),
    quarter: Quarter = Query("All"),
    db: Session = Depends(get_db),
    client: NarrativeClient = Depends(get_narrative_client),
):
    dashboard = recalculate(load_document(db, project_id), year or date.today().year, quarter)
    text = await client.generate(build_prompt("Leasing dashboard", dashboard_summary(dashboard)))
    return NarrativeResponse(text=text)
