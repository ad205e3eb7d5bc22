"""Budget assumptions decoded into one variant per planning situation.

Persisted assumption records carry every optional field at once and rely on
``targetType``/``strategy`` to say which ones matter. They are decoded here,
once, into a variant that holds only the fields its situation uses.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from app.schemas.budget import BudgetAssumption

VACANCY = "Vacancy"
RENEWAL = "Renewal"
RISK_TERMINATION = "RiskTermination"
EXISTING = "Existing"

RELEASE_STRATEGY = "ReLease"


@dataclass(frozen=True, slots=True)
class PriceAdjustment:
    start_date: date
    new_unit_price: float
    end_date: date | None = None


@dataclass(frozen=True, slots=True)
class PaymentShift:
    """Move ``amount`` from one billing month to another (0-based months)."""

    from_year: int
    from_month: int
    to_year: int
    to_month: int
    amount: float


@dataclass(frozen=True, slots=True)
class ExistingTerms:
    """Overrides on a running lease: a repricing and/or a payment shift."""

    target_id: str
    price_adjustment: PriceAdjustment | None = None
    payment_shift: PaymentShift | None = None


@dataclass(frozen=True, slots=True)
class VacancyFill:
    """A vacant unit expected to be let from ``sign_date``."""

    target_id: str
    sign_date: date
    unit_price: float
    rent_free_months: int = 0


@dataclass(frozen=True, slots=True)
class Renewal:
    """An expiring tenant expected to renew from ``sign_date``."""

    target_id: str
    sign_date: date
    unit_price: float
    rent_free_months: int = 0


@dataclass(frozen=True, slots=True)
class ReLease:
    """An expiring tenant leaves; the space is re-let after a vacancy gap."""

    target_id: str
    unit_price: float
    rent_free_months: int = 0
    vacancy_gap_months: int = 0


@dataclass(frozen=True, slots=True)
class RiskTermination:
    """A risk tenant leaves early (or at lease end) and the space is re-let."""

    target_id: str
    unit_price: float
    termination_date: date | None = None
    rent_free_months: int = 0
    vacancy_gap_months: int = 0


Assumption = Union[ExistingTerms, VacancyFill, Renewal, ReLease, RiskTermination]
StrategyAssumption = Union[Renewal, ReLease, RiskTermination]


def decode_assumption(record: BudgetAssumption) -> Assumption | None:
    """Decode a persisted assumption record.

    Returns None for records that lack what their situation needs (e.g. a
    renewal without a sign date); such records have no effect on billing.
    """
    price = record.projected_unit_price or 0.0
    rent_free = record.projected_rent_free_months or 0
    gap = record.vacancy_gap_months or 0

    if record.target_type == EXISTING:
        price_adjustment = None
        if record.price_adjustment is not None:
            pa = record.price_adjustment
            price_adjustment = PriceAdjustment(
                start_date=pa.start_date,
                new_unit_price=pa.new_unit_price,
                end_date=pa.end_date,
            )
        payment_shift = None
        if record.payment_shift is not None and record.payment_shift.is_active:
            ps = record.payment_shift
            payment_shift = PaymentShift(
                from_year=ps.from_year,
                from_month=ps.from_month,
                to_year=ps.to_year,
                to_month=ps.to_month,
                amount=ps.amount,
            )
        if price_adjustment is None and payment_shift is None:
            return None
        return ExistingTerms(
            target_id=record.target_id,
            price_adjustment=price_adjustment,
            payment_shift=payment_shift,
        )

    if record.target_type == VACANCY:
        if record.projected_sign_date is None:
            return None
        return VacancyFill(
            target_id=record.target_id,
            sign_date=record.projected_sign_date,
            unit_price=price,
            rent_free_months=rent_free,
        )

    if record.target_type == RENEWAL:
        if record.strategy == RELEASE_STRATEGY:
            return ReLease(
                target_id=record.target_id,
                unit_price=price,
                rent_free_months=rent_free,
                vacancy_gap_months=gap,
            )
        if record.projected_sign_date is None:
            return None
        return Renewal(
            target_id=record.target_id,
            sign_date=record.projected_sign_date,
            unit_price=price,
            rent_free_months=rent_free,
        )

    if record.target_type == RISK_TERMINATION:
        return RiskTermination(
            target_id=record.target_id,
            unit_price=price,
            termination_date=record.projected_termination_date,
            rent_free_months=rent_free,
            vacancy_gap_months=gap,
        )

    return None


@dataclass(frozen=True)
class AssumptionBook:
    """Decoded assumptions indexed by (target id, target type).

    Later records replace earlier ones for the same key.
    """

    entries: dict[tuple[str, str], Assumption]

    @classmethod
    def from_records(cls, records: Iterable[BudgetAssumption]) -> AssumptionBook:
        entries: dict[tuple[str, str], Assumption] = {}
        for record in records:
            decoded = decode_assumption(record)
            key = (record.target_id, record.target_type)
            if decoded is None:
                entries.pop(key, None)
            else:
                entries[key] = decoded
        return cls(entries)

    def get(self, target_id: str, target_type: str) -> Assumption | None:
        return self.entries.get((target_id, target_type))

    def existing_terms(self, tenant_id: str) -> ExistingTerms | None:
        found = self.get(tenant_id, EXISTING)
        return found if isinstance(found, ExistingTerms) else None

    def vacancy_fill(self, unit_id: str) -> VacancyFill | None:
        found = self.get(unit_id, VACANCY)
        return found if isinstance(found, VacancyFill) else None

    def strategy_for(
        self, tenant_id: str, *, is_risk: bool, expiring: bool
    ) -> StrategyAssumption | None:
        """The assumption that replaces a tenant's stream for a planning year.

        Risk tenants are planned by their RiskTermination assumption, tenants
        expiring in the year by their Renewal (or re-lease) assumption.
        """
        if is_risk:
            found = self.get(tenant_id, RISK_TERMINATION)
        elif expiring:
            found = self.get(tenant_id, RENEWAL)
        else:
            return None
        if isinstance(found, (Renewal, ReLease, RiskTermination)):
            return found
        return None
