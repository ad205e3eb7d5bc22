"""Receivable actions on the live document: bill listing, deferral, collection, deposits."""

import logging
from datetime import date

from app.domain.billing import DEFAULT_POLICY, BillingPolicy
from app.domain.calendar import add_years, month_end, month_prefix, month_start, next_month
from app.errors import DomainValidationError, NotFoundError
from app.schemas.billing import BillEventOut, BillScheduleOut
from app.schemas.budget import BudgetAdjustment
from app.schemas.payment import RENT_TYPES, PaymentRecord
from app.schemas.project import ProjectData
from app.schemas.tenant import Tenant
from app.services.aggregation import ReceivableBook, billing_detail_for
from app.services.scenario import CURRENT, add_adjustment

logger = logging.getLogger(__name__)

COLLECTION_DAY = 15
DEFER_REASON = "Defer payment"


def _get_tenant(document: ProjectData, tenant_id: str) -> Tenant:
    tenant = document.tenant(tenant_id)
    if tenant is None:
        raise NotFoundError(f"Tenant '{tenant_id}' not found")
    return tenant


def tenant_bills(
    document: ProjectData,
    tenant_id: str,
    start: date,
    end: date,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> BillScheduleOut:
    """A tenant's bills dated within [start, end] with live overrides applied."""
    tenant = _get_tenant(document, tenant_id)
    book = ReceivableBook(
        [tenant],
        document.buildings,
        document.budget_assumptions,
        document.budget_adjustments,
        horizon=add_years(end, policy.lookahead_years),
        policy=policy,
    )
    schedule = book.schedule(tenant.id)
    window = schedule.within(start, end)
    return BillScheduleOut(
        tenant_id=tenant.id,
        start=start,
        end=end,
        bills=[
            BillEventOut(
                date=e.date,
                amount=e.amount,
                coverage_start=e.coverage_start,
                coverage_end=e.coverage_end,
                original_date=e.original_date,
            )
            for e in window.events
        ],
        total=window.total,
        capped=schedule.capped,
    )


def defer_payment(
    document: ProjectData,
    tenant_id: str,
    year: int,
    month_index: int,
    adjustment_id: str,
) -> tuple[ProjectData, BudgetAdjustment]:
    """Move a tenant's whole due amount for a month to the following month."""
    tenant = _get_tenant(document, tenant_id)
    start, end = month_start(year, month_index), month_end(year, month_index)
    book = ReceivableBook(
        [tenant],
        document.buildings,
        document.budget_assumptions,
        document.budget_adjustments,
        horizon=add_years(end, DEFAULT_POLICY.lookahead_years),
    )
    amount_due = book.due(tenant.id, start, end)
    if amount_due <= 0:
        raise DomainValidationError(
            f"Nothing is due from tenant '{tenant_id}' in {month_prefix(year, month_index)}"
        )

    to_year, to_month = next_month(year, month_index)
    adjustment = BudgetAdjustment(
        id=adjustment_id,
        tenant_id=tenant.id,
        tenant_name=tenant.name,
        original_year=year,
        original_month=month_index,
        adjusted_year=to_year,
        adjusted_month=to_month,
        amount=amount_due,
        reason=DEFER_REASON,
    )
    logger.info(
        "Deferred %d of tenant %s from %s to %s",
        amount_due,
        tenant.id,
        month_prefix(year, month_index),
        month_prefix(to_year, to_month),
    )
    return add_adjustment(document, CURRENT, adjustment), adjustment


def confirm_collection(
    document: ProjectData,
    tenant_id: str,
    year: int,
    month_index: int,
    payment_id: str,
) -> tuple[ProjectData, PaymentRecord]:
    """Record the outstanding amount of a month's bill as collected.

    The payment is dated the 15th of the receivable month so it counts
    toward that month.
    """
    tenant = _get_tenant(document, tenant_id)
    detail = billing_detail_for(document, tenant.id, year, month_index)
    outstanding = detail.amount_due - detail.amount_paid if detail else 0
    if outstanding <= 0:
        raise DomainValidationError(
            f"Tenant '{tenant_id}' has nothing outstanding in {month_prefix(year, month_index)}"
        )

    prefix = month_prefix(year, month_index)
    payment = PaymentRecord(
        id=payment_id,
        tenant_id=tenant.id,
        tenant_name=tenant.name,
        date=date(year, month_index + 1, COLLECTION_DAY),
        amount=outstanding,
        type="Rent",
        status="Received",
        remarks=f"[{prefix}] monthly bill collected",
    )
    return document.model_copy(update={"payments": [*document.payments, payment]}), payment


def revoke_collection(
    document: ProjectData, tenant_id: str, year: int, month_index: int
) -> tuple[ProjectData, list[PaymentRecord]]:
    """Remove the tenant's rent payments dated in the month."""
    _get_tenant(document, tenant_id)
    removed = [
        p
        for p in document.payments
        if p.tenant_id == tenant_id and p.type in RENT_TYPES and p.in_month(year, month_index)
    ]
    if not removed:
        raise NotFoundError(
            f"No rent payments recorded for tenant '{tenant_id}' in {month_prefix(year, month_index)}"
        )
    removed_ids = {p.id for p in removed}
    payments = [p for p in document.payments if p.id not in removed_ids]
    return document.model_copy(update={"payments": payments}), removed


def settle_deposit(
    document: ProjectData,
    tenant_id: str,
    action: str,
    on: date,
    payment_id: str,
) -> tuple[ProjectData, PaymentRecord]:
    """Refund a tenant's deposit or deduct it against rent."""
    tenant = _get_tenant(document, tenant_id)
    if tenant.deposit_amount <= 0:
        raise DomainValidationError(f"Tenant '{tenant_id}' has no deposit to settle")
    if tenant.deposit_status in ("Refunded", "Deducted"):
        raise DomainValidationError(
            f"Deposit of tenant '{tenant_id}' is already {tenant.deposit_status.lower()}"
        )

    refund = action == "Refund"
    payment = PaymentRecord(
        id=payment_id,
        tenant_id=tenant.id,
        tenant_name=tenant.name,
        date=on,
        amount=-tenant.deposit_amount if refund else tenant.deposit_amount,
        type="DepositRefund" if refund else "DepositToRent",
        status="Received",
        remarks="Deposit refund" if refund else "Deposit deducted against rent",
    )
    settled = tenant.model_copy(
        update={"deposit_status": "Refunded" if refund else "Deducted"}
    )
    tenants = [settled if t.id == tenant.id else t for t in document.tenants]
    updated = document.model_copy(
        update={"tenants": tenants, "payments": [*document.payments, payment]}
    )
    return updated, payment
