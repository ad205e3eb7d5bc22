from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import Field, model_validator

from app.schemas.base import CamelModel
from app.schemas.building import Building
from app.schemas.tenant import Tenant

AssumptionTargetType = Literal["Vacancy", "Renewal", "RiskTermination", "Existing"]
AssumptionStrategy = Literal["Renewal", "ReLease"]

# Months in budget records are 0-based (0 = January).
MonthIndex = Annotated[int, Field(ge=0, le=11, description="Month index (0-11)")]
Year = Annotated[int, Field(ge=1900, le=2100, description="Year")]


class PriceAdjustmentRecord(CamelModel):
    start_date: date
    end_date: date | None = None
    new_unit_price: float = Field(..., ge=0)


class PaymentShiftRecord(CamelModel):
    is_active: bool = False
    from_year: Year
    from_month: MonthIndex
    to_year: Year
    to_month: MonthIndex
    amount: float = Field(..., ge=0)


class BudgetAssumption(CamelModel):
    """A persisted planning assumption for one target (unit or tenant)."""

    id: str
    target_type: AssumptionTargetType
    target_id: str
    target_name: str = ""
    strategy: AssumptionStrategy | None = None
    projected_sign_date: date | None = None
    projected_termination_date: date | None = None
    projected_unit_price: float | None = Field(None, ge=0)
    projected_rent_free_months: int | None = Field(None, ge=0)
    vacancy_gap_months: int | None = Field(None, ge=0)
    price_adjustment: PriceAdjustmentRecord | None = None
    payment_shift: PaymentShiftRecord | None = None


class BudgetAdjustment(CamelModel):
    """Relocation of a billed amount from one month to another."""

    id: str
    tenant_id: str
    tenant_name: str = ""
    original_year: Year
    original_month: MonthIndex
    adjusted_year: Year
    adjusted_month: MonthIndex
    amount: float = Field(..., ge=0)
    reason: str = ""


class DataSnapshot(CamelModel):
    tenants: list[Tenant] | None = None
    buildings: list[Building] | None = None


class BudgetScenario(CamelModel):
    id: str
    name: str
    description: str = ""
    created_at: datetime | None = None
    is_active: bool = False
    assumptions: list[BudgetAssumption] = Field(default_factory=list)
    adjustments: list[BudgetAdjustment] = Field(default_factory=list)
    base_data_snapshot: DataSnapshot | None = None


class BudgetAnalysis(CamelModel):
    occupancy: str = ""
    revenue: str = ""
    execution: str = ""


class YearlyTarget(CamelModel):
    revenue: float = Field(0, ge=0)
    occupancy: float = Field(0, ge=0, le=100)


class AdjustmentCreate(CamelModel):
    tenant_id: str
    tenant_name: str = ""
    original_year: Year
    original_month: MonthIndex
    adjusted_year: Year
    adjusted_month: MonthIndex
    amount: float = Field(..., gt=0)
    reason: str = ""

    @model_validator(mode="after")
    def validate_distinct_months(self):
        """Origin and destination must differ."""
        if (self.original_year, self.original_month) == (
            self.adjusted_year,
            self.adjusted_month,
        ):
            raise ValueError("Adjustment must move the amount to a different month")
        return self
