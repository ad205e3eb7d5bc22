from typing import Literal

from pydantic import Field

from app.schemas.base import CamelModel

BudgetCategory = Literal["Existing", "Renewal", "ReLease", "RiskTermination", "VacancyFill"]
MonthStatus = Literal["Active", "RentFree", "Vacant"]


class MonthValue(CamelModel):
    amount: int = 0
    status: MonthStatus = "Vacant"


class BudgetDetailRow(CamelModel):
    id: str
    name: str
    building: str = ""
    unit_names: str = ""
    area: float = 0
    unit_price: float | None = None
    category: BudgetCategory
    monthly_values: list[MonthValue]

    @property
    def total(self) -> int:
        return sum(v.amount for v in self.monthly_values)


class OccupancyPoint(CamelModel):
    month_index: int
    occupied_area: float
    rate: float


class BudgetDetail(CamelModel):
    year: int
    scenario: str
    rows: list[BudgetDetailRow] = Field(default_factory=list)
    column_totals: list[int] = Field(default_factory=lambda: [0] * 12)
    grand_total: int = 0
    occupancy: list[OccupancyPoint] = Field(default_factory=list)


class ExecutionMonth(CamelModel):
    month_index: int
    budget: int
    actual: float
    completion_rate: int
    display_rate: int


class ExecutionView(CamelModel):
    year: int
    scenario: str
    months: list[ExecutionMonth] = Field(default_factory=list)
    budget_total: int = 0
    actual_total: float = 0
    completion_rate: int = 0
    display_rate: int = 0


class YearMetrics(CamelModel):
    year: int
    total_revenue: int
    avg_occupancy: float
    avg_price: float


class ImpactSummary(CamelModel):
    """Revenue the planning assumptions add in the target and following year."""

    year: int
    vacancy_current: int = 0
    vacancy_next: int = 0
    renewal_current: int = 0
    renewal_next: int = 0
    risk_current: int = 0
    risk_next: int = 0


class BudgetTrend(CamelModel):
    year: int
    scenario: str
    years: list[YearMetrics] = Field(default_factory=list)
    impact: ImpactSummary
