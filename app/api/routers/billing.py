from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, month_param
from app.schemas.billing import BillScheduleOut, DepositAction, TenantMonthRequest
from app.schemas.budget import BudgetAdjustment
from app.schemas.dashboard import BillingDetail
from app.schemas.payment import PaymentRecord
from app.schemas.tenant import Tenant
from app.services.aggregation import billing_details
from app.services.billing import (
    confirm_collection,
    defer_payment,
    revoke_collection,
    settle_deposit,
    tenant_bills,
)
from app.services.project import load_document, new_id, renew_tenant, save_document

router = APIRouter(prefix="/projects/{project_id}", tags=["billing"])


@router.get("/tenants/{tenant_id}/bills", response_model=BillScheduleOut)
def get_tenant_bills(
    project_id: int,
    tenant_id: str,
    start: date = Query(..., description="First bill date included"),
    end: date = Query(..., description="Last bill date included"),
    db: Session = Depends(get_db),
):
    """Bills of one tenant dated within [start, end], overrides applied."""
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end must not be before start",
        )
    return tenant_bills(load_document(db, project_id), tenant_id, start, end)


@router.get("/billing", response_model=list[BillingDetail])
def get_billing(
    project_id: int,
    month: str = Query(..., pattern=r"^\d{4}-\d{2}$", description="Billing month (YYYY-MM)"),
    db: Session = Depends(get_db),
):
    """Due, paid and status per tenant for one month."""
    year, month_index = month_param(month)
    return billing_details(load_document(db, project_id), year, month_index)


@router.post("/billing/defer", response_model=BudgetAdjustment, status_code=status.HTTP_201_CREATED)
def defer_tenant_payment(
    project_id: int, request: TenantMonthRequest, db: Session = Depends(get_db)
):
    """Defer a tenant's whole due amount for a month to the next month."""
    year, month_index = month_param(request.month)
    document, adjustment = defer_payment(
        load_document(db, project_id), request.tenant_id, year, month_index, new_id("adj_defer")
    )
    save_document(db, project_id, document)
    return adjustment


@router.post("/billing/collect", response_model=PaymentRecord, status_code=status.HTTP_201_CREATED)
def collect_tenant_payment(
    project_id: int, request: TenantMonthRequest, db: Session = Depends(get_db)
):
    year, month_index = month_param(request.month)
    document, payment = confirm_collection(
        load_document(db, project_id), request.tenant_id, year, month_index, new_id("pay")
    )
    save_document(db, project_id, document)
    return payment


@router.post("/billing/revoke", response_model=list[PaymentRecord])
def revoke_tenant_payment(
    project_id: int, request: TenantMonthRequest, db: Session = Depends(get_db)
):
    """Remove the tenant's rent payments for the month; returns what was removed."""
    year, month_index = month_param(request.month)
    document, removed = revoke_collection(
        load_document(db, project_id), request.tenant_id, year, month_index
    )
    save_document(db, project_id, document)
    return removed


@router.post("/tenants/{tenant_id}/renew", response_model=Tenant, status_code=status.HTTP_201_CREATED)
def renew_tenant_contract(project_id: int, tenant_id: str, db: Session = Depends(get_db)):
    document, renewal = renew_tenant(load_document(db, project_id), tenant_id, new_id("t"))
    save_document(db, project_id, document)
    return renewal


@router.post("/tenants/{tenant_id}/deposit", response_model=PaymentRecord, status_code=status.HTTP_201_CREATED)
def settle_tenant_deposit(
    project_id: int, tenant_id: str, request: DepositAction, db: Session = Depends(get_db)
):
    """Refund a deposit or deduct it against rent."""
    document, payment = settle_deposit(
        load_document(db, project_id), tenant_id, request.action, request.on, new_id("pay_dep")
    )
    save_document(db, project_id, document)
    return payment
