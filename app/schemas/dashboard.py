from typing import Literal

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.project import ProjectData
from app.schemas.tenant import Tenant

BillingStatus = Literal["Paid", "Partial", "Unpaid"]
Quarter = Literal["All", "Q1", "Q2", "Q3", "Q4"]


class MonthlyTrend(CamelModel):
    month: str
    month_index: int
    occupancy_rate: float
    revenue_target: int
    revenue_collected: float
    avg_unit_price: float
    leased_area: float = 0


class BillingDetail(CamelModel):
    tenant_id: str
    tenant_name: str
    unit_ids: list[str] = Field(default_factory=list)
    amount_due: int
    amount_paid: float
    status: BillingStatus


class ParkingStatDetail(CamelModel):
    tenant_id: str
    tenant_name: str
    contract_count: int
    actual_count: int


class ParkingStats(CamelModel):
    total_contract_spaces: int = 0
    total_actual_spaces: int = 0
    total_monthly_revenue: float = 0
    details: list[ParkingStatDetail] = Field(default_factory=list)


class FinanceSummary(CamelModel):
    total_rent_income: float = 0
    total_deposit_received: float = 0
    total_deposit_refunded: float = 0
    total_deposit_deducted: float = 0
    deposit_pool: float = 0
    deposit_receivable: float = 0
    pending_refund_amount: float = 0
    pending_refund_tenant_ids: list[str] = Field(default_factory=list)


class DashboardData(ProjectData):
    """The project document with every computed dashboard field layered on."""

    year: int
    quarter: Quarter = "All"
    billing_month: str
    total_area: float = 0
    leased_area: float = 0
    occupancy_rate: float = 0
    annual_revenue_target: float = 0
    annual_occupancy_target: float = 0
    annual_revenue_collected: float = 0
    monthly_revenue_target: int = 0
    monthly_revenue_collected: float = 0
    collection_rate: int = 0
    new_contracts_count: int = 0
    recent_signings: list[Tenant] = Field(default_factory=list)
    expiring_soon: list[Tenant] = Field(default_factory=list)
    monthly_trends: list[MonthlyTrend] = Field(default_factory=list)
    prev_year_monthly_trends: list[MonthlyTrend] = Field(default_factory=list)
    current_month_billing: list[BillingDetail] = Field(default_factory=list)
    parking_stats: ParkingStats = Field(default_factory=ParkingStats)
    finance_summary: FinanceSummary = Field(default_factory=FinanceSummary)
    capped_tenant_ids: list[str] = Field(default_factory=list)
