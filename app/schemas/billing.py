from datetime import date

from pydantic import Field

from app.schemas.base import CamelModel


class BillEventOut(CamelModel):
    date: date
    amount: int
    coverage_start: date | None = None
    coverage_end: date | None = None
    original_date: date | None = None


class BillScheduleOut(CamelModel):
    tenant_id: str
    start: date
    end: date
    bills: list[BillEventOut] = Field(default_factory=list)
    total: int = 0
    capped: bool = False


class TenantMonthRequest(CamelModel):
    tenant_id: str
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="Billing month (YYYY-MM)")


class DepositAction(CamelModel):
    action: str = Field(..., pattern="^(Refund|Deduct)$")
    on: date
