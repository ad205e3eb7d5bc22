from datetime import date
from typing import Literal

from pydantic import Field, field_validator

from app.domain.billing import (
    LeaseTerms,
    RentFreeInterval,
    monthly_rent_from_unit_price,
    unit_price_from_monthly_rent,
)
from app.domain.contract_activity import effective_lease_end
from app.schemas.base import CamelModel

PaymentCycle = Literal["Monthly", "Quarterly", "SemiAnnual", "Annual"]
ContractStatus = Literal["Active", "Pending", "Expiring", "Terminated", "Expired"]
DepositStatus = Literal["Unpaid", "Paid", "Refunded", "Deducted"]

CYCLE_MONTHS: dict[str, int] = {
    "Monthly": 1,
    "Quarterly": 3,
    "SemiAnnual": 6,
    "Annual": 12,
}


class RentFreePeriod(CamelModel):
    start: date
    end: date


class Tenant(CamelModel):
    """A lease contract.

    When ``unit_price`` (per unit of area per day) is set together with a
    positive area it is the canonical price and the monthly rent is derived
    from it; otherwise the stored ``monthly_rent`` is used as is.
    """

    id: str
    name: str = ""
    root_id: str | None = None
    building_id: str | None = None
    unit_ids: list[str] = Field(default_factory=list)
    total_area: float = Field(0, ge=0)
    lease_start: date
    lease_end: date
    termination_date: date | None = None
    unit_price: float | None = Field(None, ge=0)
    monthly_rent: float = Field(0, ge=0)
    payment_cycle: PaymentCycle = "Quarterly"
    payment_cycle_months: int | None = Field(None, ge=0)
    first_payment_months: int | None = Field(None, ge=0)
    first_payment_date: date | None = None
    rent_free_periods: list[RentFreePeriod] = Field(default_factory=list)
    status: ContractStatus = "Active"
    is_risk: bool = False
    deposit_amount: float = Field(0, ge=0)
    deposit_status: DepositStatus = "Unpaid"
    parking_spaces: int | None = Field(None, ge=0)
    contract_parking_spaces: int | None = Field(None, ge=0)
    actual_parking_spaces: int | None = Field(None, ge=0)

    @field_validator("unit_ids")
    @classmethod
    def dedupe_unit_ids(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    @property
    def effective_lease_end(self) -> date:
        return effective_lease_end(self.lease_end, self.termination_date)

    @property
    def regular_cycle_months(self) -> int:
        return self.payment_cycle_months or CYCLE_MONTHS[self.payment_cycle]

    def resolved_monthly_rent(self) -> float:
        if self.unit_price and self.total_area > 0:
            return monthly_rent_from_unit_price(self.unit_price, self.total_area)
        return self.monthly_rent

    def resolved_unit_price(self) -> float:
        if self.unit_price:
            return self.unit_price
        return unit_price_from_monthly_rent(self.monthly_rent, self.total_area)

    def contract_parking(self) -> int:
        if self.contract_parking_spaces is not None:
            return self.contract_parking_spaces
        return self.parking_spaces or 0

    def actual_parking(self) -> int:
        if self.actual_parking_spaces is not None:
            return self.actual_parking_spaces
        return self.parking_spaces or 0

    def is_self_use(self, self_use_ids: frozenset[str]) -> bool:
        return any(uid in self_use_ids for uid in self.unit_ids)

    def lease_terms(self, termination_date: date | None = None) -> LeaseTerms:
        """Billing terms of this lease, optionally with an earlier projected end."""
        termination = self.termination_date
        if termination_date is not None and (
            termination is None or termination_date < termination
        ):
            termination = termination_date
        return LeaseTerms(
            lease_start=self.lease_start,
            lease_end=self.lease_end,
            monthly_rent=self.resolved_monthly_rent(),
            regular_cycle_months=self.regular_cycle_months,
            first_cycle_months=self.first_payment_months,
            first_payment_date=self.first_payment_date,
            termination_date=termination,
            rent_free=tuple(
                RentFreeInterval(start=rf.start, end=rf.end)
                for rf in self.rent_free_periods
            ),
            tenant_id=self.id,
        )
