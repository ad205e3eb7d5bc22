"""Bill generation: turns one lease's terms into dated, amount-bearing events.

The generator walks coverage cycles from lease start. Each cycle is billed
ahead of the coverage it pays for, prorated when the lease ends early in the
cycle, reduced by rent-free days and repriced by an optional price change.
Nothing here reads the clock or mutates its inputs, so identical terms always
produce identical schedules.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import date

from app.domain.calendar import (
    add_months,
    add_years,
    day_after,
    day_before,
    days_between_inclusive,
    month_end,
    month_start,
    overlap_days,
)
from app.domain.contract_activity import effective_lease_end

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365
MONTHS_PER_YEAR = 12

ACTIVE = "Active"
RENT_FREE = "RentFree"
VACANT = "Vacant"


def round_currency(amount: float) -> int:
    """Round half away from zero to whole currency units."""
    if amount < 0:
        return -math.floor(-amount + 0.5)
    return math.floor(amount + 0.5)


def monthly_rent_from_unit_price(unit_price: float, area: float) -> float:
    """Monthly rent for a daily price per unit of area (365-day year, 12 months)."""
    return unit_price * area * DAYS_PER_YEAR / MONTHS_PER_YEAR


def unit_price_from_monthly_rent(monthly_rent: float, area: float) -> float:
    if area <= 0:
        return 0.0
    return monthly_rent * MONTHS_PER_YEAR / (area * DAYS_PER_YEAR)


@dataclass(frozen=True, slots=True)
class BillingPolicy:
    """Tolerances of the billing walk.

    The defaults are compatibility values: a cycle within five days of its
    nominal length bills as a full cycle, rent-free days are deducted at a
    flat thirty-day month, and bills are issued one month before coverage.
    """

    full_cycle_tolerance_days: int = 5
    rent_free_month_days: int = 30
    rent_free_status_days: int = 15
    bill_lead_months: int = 1
    max_cycles: int = 200
    lookahead_years: int = 2


DEFAULT_POLICY = BillingPolicy()


@dataclass(frozen=True, slots=True)
class RentFreeInterval:
    start: date
    end: date


@dataclass(frozen=True, slots=True)
class PriceChange:
    """A repricing that applies to every cycle ending on or after start_date."""

    start_date: date
    monthly_rent: float


@dataclass(frozen=True, slots=True)
class LeaseTerms:
    """The billing-relevant parameters of a single lease."""

    lease_start: date
    lease_end: date
    monthly_rent: float
    regular_cycle_months: int
    first_cycle_months: int | None = None
    first_payment_date: date | None = None
    termination_date: date | None = None
    rent_free: tuple[RentFreeInterval, ...] = ()
    tenant_id: str = ""

    @property
    def effective_end(self) -> date:
        return effective_lease_end(self.lease_end, self.termination_date)

    def with_end(self, lease_end: date) -> LeaseTerms:
        return replace(self, lease_end=lease_end)


@dataclass(frozen=True, slots=True)
class BillEvent:
    date: date
    amount: int
    coverage_start: date | None = None
    coverage_end: date | None = None
    # Set on events relocated by a payment shift or budget adjustment.
    original_date: date | None = None

    @property
    def month_key(self) -> tuple[int, int]:
        return self.date.year, self.date.month - 1


@dataclass(frozen=True, slots=True)
class BillSchedule:
    events: tuple[BillEvent, ...] = ()
    capped: bool = False
    tenant_id: str = ""

    @property
    def total(self) -> int:
        return sum(event.amount for event in self.events)

    def within(self, start: date, end: date) -> BillSchedule:
        kept = tuple(e for e in self.events if start <= e.date <= end)
        return replace(self, events=kept)

    def merged(self, other: BillSchedule) -> BillSchedule:
        events = tuple(sorted(self.events + other.events, key=lambda e: e.date))
        return replace(self, events=events, capped=self.capped or other.capped)

    def monthly_amounts(self, year: int) -> list[int]:
        """Sum event amounts into a 12-slot array for one calendar year."""
        amounts = [0] * 12
        for event in self.events:
            if event.date.year == year:
                amounts[event.date.month - 1] += event.amount
        return amounts


def _cycle_amount(
    terms: LeaseTerms,
    coverage_start: date,
    coverage_end: date,
    effective_coverage_end: date,
    duration_months: int,
    monthly_rent: float,
    policy: BillingPolicy,
) -> float:
    free_days = sum(
        overlap_days(coverage_start, effective_coverage_end, rf.start, rf.end)
        for rf in terms.rent_free
    )

    full_cycle_days = days_between_inclusive(coverage_start, coverage_end)
    actual_days = days_between_inclusive(coverage_start, effective_coverage_end)

    if actual_days >= full_cycle_days - policy.full_cycle_tolerance_days:
        gross = monthly_rent * duration_months
    else:
        gross = (monthly_rent * MONTHS_PER_YEAR / DAYS_PER_YEAR) * actual_days

    deduction = (monthly_rent / policy.rent_free_month_days) * free_days
    return max(0.0, gross - deduction)


def generate_schedule(
    terms: LeaseTerms,
    *,
    horizon: date | None = None,
    price_change: PriceChange | None = None,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> BillSchedule:
    """Walk every coverage cycle of a lease and emit its bills.

    The walk stops at the effective lease end, once coverage starts after
    ``horizon`` (when given), or after ``policy.max_cycles`` cycles. Hitting
    the cycle cap marks the schedule as ``capped``.
    """
    if terms.monthly_rent <= 0:
        return BillSchedule(tenant_id=terms.tenant_id)

    effective_end = terms.effective_end
    regular_months = terms.regular_cycle_months
    first_months = (
        terms.first_cycle_months
        if terms.first_cycle_months and terms.first_cycle_months > 0
        else regular_months
    )

    coverage_start = terms.lease_start
    bill_date = terms.first_payment_date or add_months(
        terms.lease_start, -policy.bill_lead_months
    )

    events: list[BillEvent] = []
    cycles = 0
    months_elapsed = 0
    first_cycle = True
    while coverage_start <= effective_end:
        if cycles >= policy.max_cycles:
            logger.warning(
                "Bill generation for tenant %s stopped after %d cycles",
                terms.tenant_id or "<unknown>",
                cycles,
            )
            return BillSchedule(tuple(events), capped=True, tenant_id=terms.tenant_id)
        cycles += 1

        duration = first_months if first_cycle else regular_months
        # Cycle ends are anchored on the lease start so month-end days never drift.
        months_elapsed += duration
        coverage_end = day_before(add_months(terms.lease_start, months_elapsed))
        effective_coverage_end = min(coverage_end, effective_end)

        monthly_rent = terms.monthly_rent
        if price_change is not None and price_change.start_date <= effective_coverage_end:
            monthly_rent = price_change.monthly_rent

        amount = round_currency(
            _cycle_amount(
                terms,
                coverage_start,
                coverage_end,
                effective_coverage_end,
                duration,
                monthly_rent,
                policy,
            )
        )
        if amount > 0:
            events.append(
                BillEvent(
                    date=bill_date,
                    amount=amount,
                    coverage_start=coverage_start,
                    coverage_end=effective_coverage_end,
                )
            )

        coverage_start = day_after(effective_coverage_end)
        bill_date = add_months(coverage_start, -policy.bill_lead_months)
        first_cycle = False

        if horizon is not None and coverage_start > horizon:
            break

    return BillSchedule(tuple(events), tenant_id=terms.tenant_id)


def generate_bills(
    terms: LeaseTerms,
    window_start: date,
    window_end: date,
    *,
    price_change: PriceChange | None = None,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> BillSchedule:
    """Bills dated within [window_start, window_end].

    Generation runs ``policy.lookahead_years`` past the window so cycles that
    straddle its end are always fully walked.
    """
    schedule = generate_schedule(
        terms,
        horizon=add_years(window_end, policy.lookahead_years),
        price_change=price_change,
        policy=policy,
    )
    return schedule.within(window_start, window_end)


def month_statuses(
    terms: LeaseTerms,
    year: int,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> list[str]:
    """Occupancy label per calendar month, for display and occupancy only.

    A month is Active when it overlaps the lease, RentFree when a rent-free
    interval covers more than ``policy.rent_free_status_days`` of it, and
    Vacant otherwise.
    """
    effective_end = terms.effective_end
    statuses = [VACANT] * 12
    for m in range(12):
        start, end = month_start(year, m), month_end(year, m)
        if start > effective_end or end < terms.lease_start:
            continue
        statuses[m] = ACTIVE
        if any(
            overlap_days(start, end, rf.start, rf.end) > policy.rent_free_status_days
            for rf in terms.rent_free
        ):
            statuses[m] = RENT_FREE
    return statuses


def rent_free_months_from(start: date, months: int) -> tuple[RentFreeInterval, ...]:
    """A single rent-free interval covering the first ``months`` months from start."""
    if months <= 0:
        return ()
    return (RentFreeInterval(start=start, end=day_before(add_months(start, months))),)


__all__ = [
    "ACTIVE",
    "RENT_FREE",
    "VACANT",
    "BillEvent",
    "BillSchedule",
    "BillingPolicy",
    "DEFAULT_POLICY",
    "LeaseTerms",
    "PriceChange",
    "RentFreeInterval",
    "generate_bills",
    "generate_schedule",
    "month_statuses",
    "monthly_rent_from_unit_price",
    "rent_free_months_from",
    "round_currency",
    "unit_price_from_monthly_rent",
]
