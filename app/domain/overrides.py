"""Manual overrides layered on generated bills.

Payment shifts and budget adjustments are relocations: they take an amount
out of one billing month (never below zero) and add it to another. Strategy
assumptions add a second, synthetic lease stream on top of a tenant's own.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date
from typing import TYPE_CHECKING

from app.domain.assumptions import (
    ExistingTerms,
    PaymentShift,
    ReLease,
    Renewal,
    RiskTermination,
    StrategyAssumption,
    VacancyFill,
)
from app.domain.billing import (
    DEFAULT_POLICY,
    VACANT,
    BillEvent,
    BillingPolicy,
    BillSchedule,
    LeaseTerms,
    PriceChange,
    generate_schedule,
    month_statuses,
    monthly_rent_from_unit_price,
    rent_free_months_from,
    round_currency,
)
from app.domain.calendar import (
    add_months,
    add_years,
    day_after,
    day_before,
    month_start,
)

if TYPE_CHECKING:
    from app.schemas.budget import BudgetAdjustment

# Synthetic streams bill quarterly for one year from their start date.
STREAM_CYCLE_MONTHS = 3
STREAM_TERM_YEARS = 1


@dataclass(frozen=True, slots=True)
class Relocation:
    from_year: int
    from_month: int
    to_year: int
    to_month: int
    amount: float


@dataclass(frozen=True, slots=True)
class MonthSlot:
    amount: int
    status: str


@dataclass(frozen=True, slots=True)
class StrategyStream:
    """A synthetic lease that follows (or replaces) a tenant's own stream."""

    terms: LeaseTerms
    # Months starting after vacant_after and before terms.lease_start are
    # forced to Vacant.
    vacant_after: date | None = None

    @property
    def start(self) -> date:
        return self.terms.lease_start


def relocation_from_shift(shift: PaymentShift) -> Relocation:
    return Relocation(
        from_year=shift.from_year,
        from_month=shift.from_month,
        to_year=shift.to_year,
        to_month=shift.to_month,
        amount=shift.amount,
    )


def relocations_for_tenant(
    tenant_id: str,
    adjustments: Iterable[BudgetAdjustment],
    existing: ExistingTerms | None = None,
) -> list[Relocation]:
    """Relocations that apply to one tenant, in application order.

    The tenant's active payment shift comes first, then its budget
    adjustments in list order.
    """
    relocations: list[Relocation] = []
    if existing is not None and existing.payment_shift is not None:
        relocations.append(relocation_from_shift(existing.payment_shift))
    for adj in adjustments:
        if adj.tenant_id != tenant_id:
            continue
        relocations.append(
            Relocation(
                from_year=adj.original_year,
                from_month=adj.original_month,
                to_year=adj.adjusted_year,
                to_month=adj.adjusted_month,
                amount=adj.amount,
            )
        )
    return relocations


def relocate(schedule: BillSchedule, relocations: Iterable[Relocation]) -> BillSchedule:
    """Apply relocations to a schedule.

    Each relocation removes up to its amount from the origin month's events
    (earliest first, floored at zero) and adds one event for the full amount
    on the first day of the destination month.
    """
    events = list(schedule.events)
    for relocation in relocations:
        amount = round_currency(relocation.amount)
        if amount <= 0:
            continue

        origin = (relocation.from_year, relocation.from_month)
        remaining = amount
        kept: list[BillEvent] = []
        for event in events:
            if remaining > 0 and event.month_key == origin:
                taken = min(event.amount, remaining)
                remaining -= taken
                if event.amount > taken:
                    kept.append(replace(event, amount=event.amount - taken))
                continue
            kept.append(event)

        kept.append(
            BillEvent(
                date=month_start(relocation.to_year, relocation.to_month),
                amount=amount,
                original_date=month_start(relocation.from_year, relocation.from_month),
            )
        )
        events = sorted(kept, key=lambda e: e.date)

    return replace(schedule, events=tuple(events))


def price_change_for(existing: ExistingTerms | None, area: float) -> PriceChange | None:
    if existing is None or existing.price_adjustment is None:
        return None
    pa = existing.price_adjustment
    return PriceChange(
        start_date=pa.start_date,
        monthly_rent=monthly_rent_from_unit_price(pa.new_unit_price, area),
    )


def new_lease_terms(
    start: date,
    unit_price: float,
    area: float,
    rent_free_months: int = 0,
    tenant_id: str = "",
) -> LeaseTerms:
    """Terms of a projected one-year lease billed quarterly from its start."""
    return LeaseTerms(
        lease_start=start,
        lease_end=day_before(add_years(start, STREAM_TERM_YEARS)),
        monthly_rent=monthly_rent_from_unit_price(unit_price, area),
        regular_cycle_months=STREAM_CYCLE_MONTHS,
        first_cycle_months=STREAM_CYCLE_MONTHS,
        first_payment_date=start,
        rent_free=rent_free_months_from(start, rent_free_months),
        tenant_id=tenant_id,
    )


def strategy_stream(
    base: LeaseTerms,
    assumption: StrategyAssumption,
    area: float,
) -> StrategyStream:
    """The second stream a renewal, re-lease or risk termination implies.

    A renewal starts on its sign date. A re-lease starts the day after lease
    end plus the vacancy gap; a risk termination does the same from its
    projected termination date when it has one.
    """
    if isinstance(assumption, Renewal):
        start = assumption.sign_date
    elif isinstance(assumption, (ReLease, RiskTermination)):
        base_date = base.lease_end
        if isinstance(assumption, RiskTermination) and assumption.termination_date:
            base_date = assumption.termination_date
        start = day_after(add_months(base_date, assumption.vacancy_gap_months))
    else:
        raise TypeError(f"Unsupported strategy assumption: {assumption!r}")

    terms = new_lease_terms(
        start,
        assumption.unit_price,
        area,
        assumption.rent_free_months,
        tenant_id=base.tenant_id,
    )
    return StrategyStream(terms=terms, vacant_after=base.effective_end)


def vacancy_fill_stream(fill: VacancyFill, area: float) -> StrategyStream:
    terms = new_lease_terms(
        fill.sign_date, fill.unit_price, area, fill.rent_free_months, tenant_id=fill.target_id
    )
    return StrategyStream(terms=terms)


def overlay_statuses(
    base: Sequence[str],
    stream: Sequence[str],
    *,
    year: int,
    vacant_after: date | None,
    stream_start: date,
) -> list[str]:
    """Combine month labels of a tenant's stream and its successor stream."""
    merged: list[str] = []
    for m, (own, successor) in enumerate(zip(base, stream)):
        status = successor if successor != VACANT else own
        first_day = month_start(year, m)
        if vacant_after is not None and vacant_after < first_day < stream_start:
            status = VACANT
        merged.append(status)
    return merged


def year_slots(schedule: BillSchedule, statuses: Sequence[str], year: int) -> tuple[MonthSlot, ...]:
    amounts = schedule.monthly_amounts(year)
    return tuple(MonthSlot(amount=a, status=s) for a, s in zip(amounts, statuses))


def project_lease(
    terms: LeaseTerms,
    *,
    horizon: date,
    area: float,
    existing: ExistingTerms | None = None,
    relocations: Sequence[Relocation] = (),
    stream: StrategyStream | None = None,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> BillSchedule:
    """A tenant's schedule with every override applied.

    The tenant's own bills (repriced by its existing terms) are merged with
    an optional successor stream, then relocations are applied in order.
    """
    schedule = generate_schedule(
        terms,
        horizon=horizon,
        price_change=price_change_for(existing, area),
        policy=policy,
    )
    if stream is not None:
        schedule = schedule.merged(
            generate_schedule(stream.terms, horizon=horizon, policy=policy)
        )
    return relocate(schedule, relocations)


def project_lease_year(
    terms: LeaseTerms,
    year: int,
    *,
    area: float,
    existing: ExistingTerms | None = None,
    relocations: Sequence[Relocation] = (),
    stream: StrategyStream | None = None,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> tuple[MonthSlot, ...]:
    """Twelve monthly {amount, status} slots for one tenant and year."""
    horizon = add_years(month_start(year, 11), policy.lookahead_years)
    schedule = project_lease(
        terms,
        horizon=horizon,
        area=area,
        existing=existing,
        relocations=relocations,
        stream=stream,
        policy=policy,
    )
    statuses = month_statuses(terms, year, policy)
    if stream is not None:
        statuses = overlay_statuses(
            statuses,
            month_statuses(stream.terms, year, policy),
            year=year,
            vacant_after=stream.vacant_after,
            stream_start=stream.start,
        )
    return year_slots(schedule, statuses, year)
