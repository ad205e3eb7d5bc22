"""Aggregation engine: rolls per-tenant bills into dashboard metrics.

Receivable amounts come from each tenant's own bill stream with its existing
terms (price adjustment, payment shift) and budget adjustments applied.
Strategy assumptions only affect the budget planning views.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date

from app.domain.assumptions import AssumptionBook
from app.domain.billing import DEFAULT_POLICY, BillingPolicy, BillSchedule
from app.domain.calendar import (
    QUARTER_MONTHS,
    add_years,
    month_end,
    month_prefix,
    month_start,
    parse_month,
    period_bounds,
)
from app.domain.contract_activity import CLOSED_STATUSES, OCCUPYING_STATUSES, LeaseActivityPolicy
from app.domain.overrides import project_lease, relocations_for_tenant
from app.schemas.budget import BudgetAdjustment, BudgetAssumption
from app.schemas.building import Building, leasable_area, self_use_unit_ids
from app.schemas.dashboard import (
    BillingDetail,
    DashboardData,
    FinanceSummary,
    MonthlyTrend,
    ParkingStatDetail,
    ParkingStats,
)
from app.schemas.payment import RENT_TYPES, REVENUE_TYPES, PaymentRecord
from app.schemas.project import ProjectData
from app.schemas.tenant import Tenant

logger = logging.getLogger(__name__)

RECENT_SIGNINGS_LIMIT = 10


class ReceivableBook:
    """Override-applied bill schedules for a set of tenants, built once per horizon."""

    def __init__(
        self,
        tenants: Sequence[Tenant],
        buildings: Sequence[Building],
        assumptions: Iterable[BudgetAssumption] = (),
        adjustments: Sequence[BudgetAdjustment] = (),
        *,
        horizon: date,
        policy: BillingPolicy = DEFAULT_POLICY,
    ):
        self.self_use_ids = self_use_unit_ids(list(buildings))
        self.assumptions = AssumptionBook.from_records(assumptions)
        self.schedules: dict[str, BillSchedule] = {}
        for tenant in tenants:
            if tenant.is_self_use(self.self_use_ids):
                continue
            existing = self.assumptions.existing_terms(tenant.id)
            self.schedules[tenant.id] = project_lease(
                tenant.lease_terms(),
                horizon=horizon,
                area=tenant.total_area,
                existing=existing,
                relocations=relocations_for_tenant(tenant.id, adjustments, existing),
                policy=policy,
            )

    def schedule(self, tenant_id: str) -> BillSchedule:
        return self.schedules.get(tenant_id, BillSchedule(tenant_id=tenant_id))

    def due(self, tenant_id: str, start: date, end: date) -> int:
        return self.schedule(tenant_id).within(start, end).total

    def total(self, start: date, end: date) -> int:
        return sum(s.within(start, end).total for s in self.schedules.values())

    @property
    def capped_tenant_ids(self) -> list[str]:
        return sorted(tid for tid, s in self.schedules.items() if s.capped)


def receivable_book(
    document: ProjectData, through: date, policy: BillingPolicy = DEFAULT_POLICY
) -> ReceivableBook:
    return ReceivableBook(
        document.tenants,
        document.buildings,
        document.budget_assumptions,
        document.budget_adjustments,
        horizon=add_years(through, policy.lookahead_years),
        policy=policy,
    )


def period_receivable(
    tenants: Sequence[Tenant],
    buildings: Sequence[Building],
    start: date,
    end: date,
    assumptions: Iterable[BudgetAssumption] = (),
    adjustments: Sequence[BudgetAdjustment] = (),
    policy: BillingPolicy = DEFAULT_POLICY,
) -> int:
    """Total billed within [start, end] across non-self-use tenants."""
    book = ReceivableBook(
        tenants,
        buildings,
        assumptions,
        adjustments,
        horizon=add_years(end, policy.lookahead_years),
        policy=policy,
    )
    return book.total(start, end)


def sum_payments(
    payments: Iterable[PaymentRecord],
    types: frozenset[str],
    start: date,
    end: date,
    tenant_id: str | None = None,
) -> float:
    return sum(
        p.amount
        for p in payments
        if p.type in types
        and start <= p.date <= end
        and (tenant_id is None or p.tenant_id == tenant_id)
    )


def _occupancy_rate(leased: float, total: float) -> float:
    return round(leased / total * 100, 1) if total > 0 else 0.0


def monthly_trends(
    document: ProjectData,
    year: int,
    quarter: str = "All",
    book: ReceivableBook | None = None,
) -> list[MonthlyTrend]:
    """Leased area, occupancy, average unit price and revenue per month."""
    self_use_ids = self_use_unit_ids(document.buildings)
    total_area = leasable_area(document.buildings)
    if book is None:
        book = receivable_book(document, month_end(year, 11))

    trends = []
    for m in QUARTER_MONTHS[quarter]:
        start, end = month_start(year, m), month_end(year, m)
        window = LeaseActivityPolicy(window_start=start, window_end=end)
        leased = 0.0
        weighted_price = 0.0
        for tenant in document.tenants:
            if tenant.is_self_use(self_use_ids):
                continue
            if not window.overlaps(
                lease_start=tenant.lease_start, lease_end=tenant.effective_lease_end
            ):
                continue
            leased += tenant.total_area
            weighted_price += tenant.resolved_unit_price() * tenant.total_area

        trends.append(
            MonthlyTrend(
                month=month_prefix(year, m),
                month_index=m,
                occupancy_rate=_occupancy_rate(leased, total_area),
                revenue_target=book.total(start, end),
                revenue_collected=sum_payments(document.payments, REVENUE_TYPES, start, end),
                avg_unit_price=round(weighted_price / leased, 2) if leased > 0 else 0.0,
                leased_area=leased,
            )
        )
    return trends


def billing_status(amount_due: float, amount_paid: float) -> str:
    if amount_due > 0 and amount_paid >= amount_due:
        return "Paid"
    if 0 < amount_paid < amount_due:
        return "Partial"
    if amount_due == 0 and amount_paid > 0:
        return "Paid"
    return "Unpaid"


def billing_details(
    document: ProjectData,
    year: int,
    month_index: int,
    book: ReceivableBook | None = None,
) -> list[BillingDetail]:
    """Per-tenant due/paid rows for one month.

    Self-use, terminated and expired tenants are skipped, as are rows with
    nothing due and nothing paid.
    """
    start, end = month_start(year, month_index), month_end(year, month_index)
    if book is None:
        book = receivable_book(document, end)
    self_use_ids = self_use_unit_ids(document.buildings)

    rows = []
    for tenant in document.tenants:
        if tenant.is_self_use(self_use_ids) or tenant.status in CLOSED_STATUSES:
            continue
        due = book.due(tenant.id, start, end)
        paid = sum_payments(document.payments, RENT_TYPES, start, end, tenant_id=tenant.id)
        if due == 0 and paid == 0:
            continue
        rows.append(
            BillingDetail(
                tenant_id=tenant.id,
                tenant_name=tenant.name,
                unit_ids=tenant.unit_ids,
                amount_due=due,
                amount_paid=paid,
                status=billing_status(due, paid),
            )
        )
    return rows


def billing_detail_for(
    document: ProjectData, tenant_id: str, year: int, month_index: int
) -> BillingDetail | None:
    return next(
        (
            row
            for row in billing_details(document, year, month_index)
            if row.tenant_id == tenant_id
        ),
        None,
    )


def sync_unit_statuses(buildings: Sequence[Building], tenants: Sequence[Tenant]) -> list[Building]:
    """Mark units held by an occupying tenant as Occupied.

    Occupied units (other than self-use) that no occupying tenant holds are
    reverted to Vacant. Other statuses are left alone.
    """
    synced = []
    for building in buildings:
        held = {
            uid
            for t in tenants
            if t.building_id == building.id and t.status in OCCUPYING_STATUSES
            for uid in t.unit_ids
        }
        units = []
        for unit in building.units:
            status = unit.status
            if unit.id in held:
                status = "Occupied"
            elif unit.status == "Occupied" and not unit.is_self_use:
                status = "Vacant"
            units.append(unit if status == unit.status else unit.model_copy(update={"status": status}))
        synced.append(building.model_copy(update={"units": units}))
    return synced


def parking_stats(
    tenants: Iterable[Tenant], payments: Iterable[PaymentRecord], start: date, end: date
) -> ParkingStats:
    details = []
    for tenant in tenants:
        if tenant.status in CLOSED_STATUSES:
            continue
        contract_count = tenant.contract_parking()
        actual_count = tenant.actual_parking()
        if contract_count > 0 or actual_count > 0:
            details.append(
                ParkingStatDetail(
                    tenant_id=tenant.id,
                    tenant_name=tenant.name,
                    contract_count=contract_count,
                    actual_count=actual_count,
                )
            )
    return ParkingStats(
        total_contract_spaces=sum(d.contract_count for d in details),
        total_actual_spaces=sum(d.actual_count for d in details),
        total_monthly_revenue=sum_payments(payments, frozenset({"ParkingFee"}), start, end),
        details=details,
    )


def finance_summary(tenants: Iterable[Tenant], payments: Sequence[PaymentRecord]) -> FinanceSummary:
    """Rent income and deposit pool across all recorded payments."""

    def total(kind: str) -> float:
        return sum(p.amount for p in payments if p.type == kind)

    rent_income = sum(p.amount for p in payments if p.type in RENT_TYPES)
    received = total("Deposit")
    refunded = sum(abs(p.amount) for p in payments if p.type == "DepositRefund")
    deducted = total("DepositToRent")

    tenants = list(tenants)
    pending = [
        t
        for t in tenants
        if t.status == "Terminated"
        and t.deposit_status not in ("Refunded", "Deducted")
        and t.deposit_amount > 0
    ]
    return FinanceSummary(
        total_rent_income=rent_income,
        total_deposit_received=received,
        total_deposit_refunded=refunded,
        total_deposit_deducted=deducted,
        deposit_pool=received - refunded - deducted,
        deposit_receivable=sum(
            t.deposit_amount
            for t in tenants
            if t.deposit_status == "Unpaid" and t.deposit_amount > 0
        ),
        pending_refund_amount=sum(t.deposit_amount for t in pending),
        pending_refund_tenant_ids=[t.id for t in pending],
    )


def recalculate(
    document: ProjectData,
    year: int,
    quarter: str = "All",
    billing_month: str | None = None,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> DashboardData:
    """Re-derive every computed dashboard field from the authoritative document.

    ``billing_month`` is ``YYYY-MM``; it defaults to the first month of the
    reporting period.
    """
    period_start, period_end = period_bounds(year, quarter)
    if billing_month is None:
        billing_month = month_prefix(year, QUARTER_MONTHS[quarter][0])
    billing_year, billing_m = parse_month(billing_month)

    buildings = sync_unit_statuses(document.buildings, document.tenants)
    self_use_ids = self_use_unit_ids(buildings)
    total_area = leasable_area(buildings)
    synced = document.model_copy(update={"buildings": buildings})

    through = max(period_end, month_end(billing_year, billing_m))
    book = receivable_book(synced, through, policy)
    prev_book = receivable_book(synced, month_end(year - 1, 11), policy)

    period = LeaseActivityPolicy(window_start=period_start, window_end=period_end)
    leased_area = sum(
        t.total_area
        for t in synced.tenants
        if not t.is_self_use(self_use_ids)
        and t.status not in CLOSED_STATUSES
        and period.in_place_at_end(lease_start=t.lease_start, lease_end=t.effective_lease_end)
    )

    target = synced.yearly_targets.get(year)
    revenue_target = book.total(period_start, period_end)
    revenue_collected = sum_payments(synced.payments, REVENUE_TYPES, period_start, period_end)
    collection_rate = (
        min(100, round(revenue_collected / revenue_target * 100)) if revenue_target > 0 else 0
    )

    signings = [
        t
        for t in synced.tenants
        if t.status != "Expired" and period.starts_within(lease_start=t.lease_start)
    ]
    expiring = [
        t
        for t in synced.tenants
        if t.status not in CLOSED_STATUSES and period.ends_within(lease_end=t.lease_end)
    ]

    capped = sorted(set(book.capped_tenant_ids) | set(prev_book.capped_tenant_ids))
    if capped:
        logger.warning("Bill generation hit the cycle cap for tenants: %s", ", ".join(capped))

    return DashboardData(
        **dict(synced),
        year=year,
        quarter=quarter,
        billing_month=billing_month,
        total_area=total_area,
        leased_area=leased_area,
        occupancy_rate=_occupancy_rate(leased_area, total_area),
        annual_revenue_target=target.revenue if target else 0,
        annual_occupancy_target=target.occupancy if target else 0,
        annual_revenue_collected=sum_payments(
            synced.payments, REVENUE_TYPES, month_start(year, 0), month_end(year, 11)
        ),
        monthly_revenue_target=revenue_target,
        monthly_revenue_collected=revenue_collected,
        collection_rate=collection_rate,
        new_contracts_count=min(len(signings), RECENT_SIGNINGS_LIMIT),
        recent_signings=signings[:RECENT_SIGNINGS_LIMIT],
        expiring_soon=expiring,
        monthly_trends=monthly_trends(synced, year, quarter, book),
        prev_year_monthly_trends=monthly_trends(synced, year - 1, "All", prev_book),
        current_month_billing=billing_details(synced, billing_year, billing_m, book),
        parking_stats=parking_stats(synced.tenants, synced.payments, period_start, period_end),
        finance_summary=finance_summary(synced.tenants, synced.payments),
        capped_tenant_ids=capped,
    )
