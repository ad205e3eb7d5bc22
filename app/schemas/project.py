from datetime import datetime

from pydantic import ConfigDict, Field

from app.schemas.base import CamelModel
from app.schemas.budget import (
    BudgetAdjustment,
    BudgetAnalysis,
    BudgetAssumption,
    BudgetScenario,
    YearlyTarget,
)
from app.schemas.building import Building
from app.schemas.payment import PaymentRecord
from app.schemas.tenant import Tenant


class ProjectData(CamelModel):
    """The authoritative dashboard document.

    Computed dashboard fields sent along with it are ignored on input: they
    are re-derived from this data on every read.
    """

    buildings: list[Building] = Field(default_factory=list)
    tenants: list[Tenant] = Field(default_factory=list)
    payments: list[PaymentRecord] = Field(default_factory=list)
    budget_assumptions: list[BudgetAssumption] = Field(default_factory=list)
    budget_adjustments: list[BudgetAdjustment] = Field(default_factory=list)
    budget_scenarios: list[BudgetScenario] = Field(default_factory=list)
    yearly_targets: dict[int, YearlyTarget] = Field(default_factory=dict)
    budget_analysis: BudgetAnalysis = Field(default_factory=BudgetAnalysis)

    def tenant(self, tenant_id: str) -> Tenant | None:
        return next((t for t in self.tenants if t.id == tenant_id), None)

    def scenario(self, scenario_id: str) -> BudgetScenario | None:
        return next((s for s in self.budget_scenarios if s.id == scenario_id), None)


class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    data: ProjectData = Field(default_factory=ProjectData)


class Project(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    updated_at: datetime | None = None
