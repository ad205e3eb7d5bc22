"""Budget planning views built on the resolved scenario data.

Unlike the dashboard receivable, these views merge the synthetic streams
implied by renewal, re-lease, risk termination and vacancy fill assumptions
into each row.
"""

from collections.abc import Sequence

from app.domain.assumptions import (
    RENEWAL,
    RISK_TERMINATION,
    VACANCY,
    AssumptionBook,
    ReLease,
    Renewal,
    RiskTermination,
    VacancyFill,
)
from app.domain.billing import (
    ACTIVE,
    DEFAULT_POLICY,
    RENT_FREE,
    BillingPolicy,
    generate_schedule,
    round_currency,
)
from app.domain.calendar import add_years, month_end, month_start
from app.domain.overrides import (
    MonthSlot,
    project_lease_year,
    relocations_for_tenant,
    strategy_stream,
    vacancy_fill_stream,
)
from app.schemas.budget_view import (
    BudgetDetail,
    BudgetDetailRow,
    BudgetTrend,
    ExecutionMonth,
    ExecutionView,
    ImpactSummary,
    MonthValue,
    OccupancyPoint,
    YearMetrics,
)
from app.schemas.building import Building, Unit, leasable_area
from app.schemas.payment import REVENUE_TYPES, PaymentRecord
from app.schemas.tenant import Tenant
from app.services.scenario import ResolvedData

OCCUPIED_STATUSES = (ACTIVE, RENT_FREE)
TREND_YEARS_AROUND = 2
# Flat month length used to turn occupied area-months into area-days.
DAYS_PER_MONTH = 30


def _building_labels(tenant: Tenant, buildings: Sequence[Building]) -> tuple[str, str]:
    building = next((b for b in buildings if b.id == tenant.building_id), None)
    if building is None:
        return "", ", ".join(tenant.unit_ids)
    names = {u.id: u.name or u.id for u in building.units}
    return building.name, ", ".join(names.get(uid, uid) for uid in tenant.unit_ids)


def vacant_units(data: ResolvedData) -> list[tuple[Building, Unit]]:
    """Leasable units no active tenant holds and not already marked Occupied."""
    held = {uid for t in data.tenants if t.status == "Active" for uid in t.unit_ids}
    return [
        (building, unit)
        for building in data.buildings
        for unit in building.units
        if not unit.is_self_use and unit.status != "Occupied" and unit.id not in held
    ]


def _category(tenant: Tenant, year: int, strategy) -> str:
    if tenant.is_risk and isinstance(strategy, RiskTermination) and strategy.termination_date:
        return "RiskTermination"
    if tenant.lease_end.year == year:
        return "ReLease" if isinstance(strategy, ReLease) else "Renewal"
    return "Existing"


def _values(slots: Sequence[MonthSlot]) -> list[MonthValue]:
    return [MonthValue(amount=s.amount, status=s.status) for s in slots]


def tenant_row(
    tenant: Tenant,
    year: int,
    data: ResolvedData,
    book: AssumptionBook,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> BudgetDetailRow:
    """Twelve monthly slots for one tenant with every assumption applied.

    Risk tenants are planned by their risk termination assumption and tenants
    whose lease ends in the year by their renewal assumption; a projected
    termination earlier than lease end shortens the tenant's own stream.
    """
    strategy = book.strategy_for(
        tenant.id, is_risk=tenant.is_risk, expiring=tenant.lease_end.year == year
    )
    termination = strategy.termination_date if isinstance(strategy, RiskTermination) else None
    terms = tenant.lease_terms(termination_date=termination)
    stream = strategy_stream(terms, strategy, tenant.total_area) if strategy else None
    existing = book.existing_terms(tenant.id)

    slots = project_lease_year(
        terms,
        year,
        area=tenant.total_area,
        existing=existing,
        relocations=relocations_for_tenant(tenant.id, data.adjustments, existing),
        stream=stream,
        policy=policy,
    )
    building_name, unit_names = _building_labels(tenant, data.buildings)
    return BudgetDetailRow(
        id=tenant.id,
        name=tenant.name,
        building=building_name,
        unit_names=unit_names,
        area=tenant.total_area,
        unit_price=round(tenant.resolved_unit_price(), 2),
        category=_category(tenant, year, strategy),
        monthly_values=_values(slots),
    )


def vacancy_row(
    building: Building,
    unit: Unit,
    year: int,
    fill: VacancyFill | None,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> BudgetDetailRow:
    if fill is None:
        values = [MonthValue() for _ in range(12)]
        price = None
    else:
        stream = vacancy_fill_stream(fill, unit.area)
        values = _values(project_lease_year(stream.terms, year, area=unit.area, policy=policy))
        price = fill.unit_price or None
    return BudgetDetailRow(
        id=unit.id,
        name=unit.name or unit.id,
        building=building.name,
        unit_names=unit.name or unit.id,
        area=unit.area,
        unit_price=price,
        category="VacancyFill",
        monthly_values=values,
    )


def detail_rows(
    data: ResolvedData, year: int, policy: BillingPolicy = DEFAULT_POLICY
) -> list[BudgetDetailRow]:
    """Tenant rows (excluding terminated tenants) and vacant-unit rows, largest first.

    Tenant rows that bill nothing and are vacant all year are dropped.
    """
    book = AssumptionBook.from_records(data.assumptions)
    rows = []
    for tenant in data.tenants:
        if tenant.status == "Terminated":
            continue
        row = tenant_row(tenant, year, data, book, policy)
        if any(v.amount > 0 or v.status != "Vacant" for v in row.monthly_values):
            rows.append(row)

    for building, unit in vacant_units(data):
        rows.append(vacancy_row(building, unit, year, book.vacancy_fill(unit.id), policy))

    return sorted(rows, key=lambda r: r.area, reverse=True)


def column_totals(rows: Sequence[BudgetDetailRow]) -> list[int]:
    totals = [0] * 12
    for row in rows:
        for m, value in enumerate(row.monthly_values):
            totals[m] += value.amount
    return totals


def occupancy_by_month(
    rows: Sequence[BudgetDetailRow], buildings: Sequence[Building]
) -> list[OccupancyPoint]:
    total = leasable_area(list(buildings))
    points = []
    for m in range(12):
        occupied = sum(
            r.area for r in rows if r.monthly_values[m].status in OCCUPIED_STATUSES
        )
        rate = round(occupied / total * 100, 1) if total > 0 else 0.0
        points.append(OccupancyPoint(month_index=m, occupied_area=occupied, rate=rate))
    return points


def budget_detail(
    data: ResolvedData, year: int, policy: BillingPolicy = DEFAULT_POLICY
) -> BudgetDetail:
    rows = detail_rows(data, year, policy)
    totals = column_totals(rows)
    return BudgetDetail(
        year=year,
        scenario=data.selector,
        rows=rows,
        column_totals=totals,
        grand_total=sum(totals),
        occupancy=occupancy_by_month(rows, data.buildings),
    )


def year_metrics(
    data: ResolvedData, year: int, policy: BillingPolicy = DEFAULT_POLICY
) -> YearMetrics:
    """Total revenue, average occupancy and average daily unit price for a year."""
    rows = detail_rows(data, year, policy)
    total_area = leasable_area(data.buildings)
    revenue = sum(r.total for r in rows)
    occupied_area_months = sum(
        r.area for r in rows for v in r.monthly_values if v.status in OCCUPIED_STATUSES
    )
    avg_occupancy = (
        occupied_area_months / (total_area * 12) * 100 if total_area > 0 else 0.0
    )
    avg_price = (
        revenue / (occupied_area_months * DAYS_PER_MONTH) if occupied_area_months > 0 else 0.0
    )
    return YearMetrics(
        year=year,
        total_revenue=revenue,
        avg_occupancy=round(avg_occupancy, 1),
        avg_price=round(avg_price, 2),
    )


def _stream_revenue(stream, year: int, policy: BillingPolicy) -> int:
    horizon = add_years(month_end(year, 11), policy.lookahead_years)
    schedule = generate_schedule(stream.terms, horizon=horizon, policy=policy)
    return schedule.within(month_start(year, 0), month_end(year, 11)).total


def impact_summary(
    data: ResolvedData, year: int, policy: BillingPolicy = DEFAULT_POLICY
) -> ImpactSummary:
    """Revenue each kind of assumption contributes on its own stream."""
    book = AssumptionBook.from_records(data.assumptions)
    streams: dict[str, list] = {VACANCY: [], RENEWAL: [], RISK_TERMINATION: []}

    for _building, unit in vacant_units(data):
        fill = book.vacancy_fill(unit.id)
        if fill is not None:
            streams[VACANCY].append(vacancy_fill_stream(fill, unit.area))

    for tenant in data.tenants:
        renewal = book.get(tenant.id, RENEWAL)
        if isinstance(renewal, (Renewal, ReLease)):
            streams[RENEWAL].append(
                strategy_stream(tenant.lease_terms(), renewal, tenant.total_area)
            )
        risk = book.get(tenant.id, RISK_TERMINATION)
        if tenant.is_risk and isinstance(risk, RiskTermination):
            terms = tenant.lease_terms(termination_date=risk.termination_date)
            streams[RISK_TERMINATION].append(strategy_stream(terms, risk, tenant.total_area))

    def revenue(kind: str, y: int) -> int:
        return sum(_stream_revenue(s, y, policy) for s in streams[kind])

    return ImpactSummary(
        year=year,
        vacancy_current=revenue(VACANCY, year),
        vacancy_next=revenue(VACANCY, year + 1),
        renewal_current=revenue(RENEWAL, year),
        renewal_next=revenue(RENEWAL, year + 1),
        risk_current=revenue(RISK_TERMINATION, year),
        risk_next=revenue(RISK_TERMINATION, year + 1),
    )


def budget_trend(
    data: ResolvedData, year: int, policy: BillingPolicy = DEFAULT_POLICY
) -> BudgetTrend:
    years = range(year - TREND_YEARS_AROUND, year + TREND_YEARS_AROUND + 1)
    return BudgetTrend(
        year=year,
        scenario=data.selector,
        years=[year_metrics(data, y, policy) for y in years],
        impact=impact_summary(data, year, policy),
    )


def completion_rate(actual: float, budget: float) -> int:
    return round_currency(actual / budget * 100) if budget > 0 else 0


def display_rate(rate: int) -> int:
    return max(0, min(100, rate))


def execution_view(
    data: ResolvedData,
    payments: Sequence[PaymentRecord],
    year: int,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> ExecutionView:
    """Budgeted vs collected revenue per month.

    Completion rates are reported unclamped; ``display_rate`` is the same
    figure limited to 0..100 for colouring.
    """
    budget = column_totals(detail_rows(data, year, policy))
    actual = [0.0] * 12
    for payment in payments:
        if payment.date.year == year and payment.type in REVENUE_TYPES:
            actual[payment.date.month - 1] += payment.amount

    months = []
    for m in range(12):
        rate = completion_rate(actual[m], budget[m])
        months.append(
            ExecutionMonth(
                month_index=m,
                budget=budget[m],
                actual=actual[m],
                completion_rate=rate,
                display_rate=display_rate(rate),
            )
        )
    budget_total, actual_total = sum(budget), sum(actual)
    overall = completion_rate(actual_total, budget_total)
    return ExecutionView(
        year=year,
        scenario=data.selector,
        months=months,
        budget_total=budget_total,
        actual_total=actual_total,
        completion_rate=overall,
        display_rate=display_rate(overall),
    )
