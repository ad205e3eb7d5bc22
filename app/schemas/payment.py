from datetime import date
from typing import Literal

from app.schemas.base import CamelModel

PaymentType = Literal[
    "Rent",
    "Deposit",
    "DepositRefund",
    "DepositToRent",
    "ParkingFee",
    "ManagementFee",
    "Other",
]

# Payment types counted as rent against a tenant's bills.
RENT_TYPES = frozenset({"Rent", "DepositToRent"})
# Payment types counted as collected revenue.
REVENUE_TYPES = frozenset({"Rent", "DepositToRent", "ParkingFee"})


class PaymentRecord(CamelModel):
    """A cash event. Refunds carry negative amounts."""

    id: str
    tenant_id: str
    tenant_name: str = ""
    date: date
    amount: float
    type: PaymentType = "Rent"
    status: str = "Received"
    remarks: str = ""

    def in_month(self, year: int, month_index: int) -> bool:
        return self.date.year == year and self.date.month == month_index + 1
