"""
Payroll management API endpoints.

Create, read and list payroll records, apply administrative overrides to
base salary and tax, and force a recalculation of a record's totals from
its approved adjustments.

Handlers are plain ``def`` so FastAPI runs them in its threadpool; a
ledger call may block on a row lock and must not stall the event loop.
"""

import logging
from typing import Optional
from uuid import UUID
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query

from hr_backend.fastapi.core.enums import PayrollStatus
from hr_backend.fastapi.core.exceptions import PayrollError
from hr_backend.fastapi.schemas.payroll import (
    PayrollCreate, PayrollRead, PayrollUpdate, PayrollListResponse
)
from hr_backend.fastapi.services.payroll_ledger import PayrollLedger, get_payroll_ledger
from hr_backend.security.dependencies import CallerIdentity, RequirePayrollRole

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payroll-management"])


def raise_http_error(e: PayrollError) -> None:
    """Answer a ledger error with the HTTP status it carries."""
    raise HTTPException(status_code=e.status_code, detail=e.message) from e


@router.post(
    "/",
    response_model=PayrollRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create New Payroll Record"
)
def create_payroll_record(
    payroll_data: PayrollCreate,
    ledger: PayrollLedger = Depends(get_payroll_ledger),
    current_identity: CallerIdentity = RequirePayrollRole
):
    """
    Create a new payroll record.

    **Permissions:** SUPERADMIN, ADMIN, HR or FINANCE

    **Parameters:**
    - **employee_id**: ID of an active employee
    - **pay_period_start** / **pay_period_end**: Pay period, start before end
    - **base_salary**: Base salary (non-negative)
    - **tax**: Tax withheld (non-negative, default 0)
    - **status**: Initial status (default DRAFT)
    - **payment_date**: Payment date (optional)
    - **payment_method**: BANK_TRANSFER, CHECK, CASH or OTHER (optional)
    - **notes**: Additional notes (optional)

    **Returns:**
    - The payroll record with its employee summary, allowances and
      deductions at zero

    **Errors:**
    - **401**: Not authenticated
    - **403**: Role not allowed to manage payroll
    - **404**: Employee not found
    - **422**: Validation errors
    """
    try:
        payroll = ledger.create_payroll(payroll_data)
        return PayrollRead.model_validate(payroll)
    except PayrollError as e:
        raise_http_error(e)


@router.get("/", response_model=PayrollListResponse, summary="List Payroll Records")
def list_payroll_records(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
    employee_id: Optional[UUID] = Query(None, description="Filter by employee ID"),
    payroll_status: Optional[PayrollStatus] = Query(None, alias="status", description="Filter by status"),
    start_date: Optional[date] = Query(None, description="Periods starting on or after this date"),
    end_date: Optional[date] = Query(None, description="Periods ending on or before this date"),
    ledger: PayrollLedger = Depends(get_payroll_ledger),
    current_identity: CallerIdentity = RequirePayrollRole
):
    """
    Get a page of payroll records, newest pay period first.

    **Permissions:** SUPERADMIN, ADMIN, HR or FINANCE

    **Returns:**
    - Paginated payroll records and the total matching count
    """
    try:
        records, total = ledger.list_payrolls(
            skip=skip,
            limit=limit,
            employee_id=employee_id,
            status=payroll_status,
            start_date=start_date,
            end_date=end_date
        )
        return PayrollListResponse(
            payroll_records=[PayrollRead.model_validate(p) for p in records],
            total=total,
            skip=skip,
            limit=limit
        )
    except PayrollError as e:
        raise_http_error(e)


@router.get("/{payroll_id}", response_model=PayrollRead, summary="Get Payroll Record by ID")
def get_payroll_record(
    payroll_id: UUID,
    ledger: PayrollLedger = Depends(get_payroll_ledger),
    current_identity: CallerIdentity = RequirePayrollRole
):
    """
    Get a payroll record by ID.

    **Errors:**
    - **404**: Payroll record not found
    """
    try:
        return PayrollRead.model_validate(ledger.get_payroll(payroll_id))
    except PayrollError as e:
        raise_http_error(e)


@router.patch("/{payroll_id}", response_model=PayrollRead, summary="Update Payroll Record")
def update_payroll_record(
    payroll_id: UUID,
    payroll_update: PayrollUpdate,
    ledger: PayrollLedger = Depends(get_payroll_ledger),
    current_identity: CallerIdentity = RequirePayrollRole
):
    """
    Administrative override of base salary, tax, status, payment method
    or notes.

    Changing base salary or tax recomputes net salary from the stored
    allowances and deductions. Adjustments are not re-summed.

    **Permissions:** SUPERADMIN, ADMIN, HR or FINANCE

    **Errors:**
    - **404**: Payroll record not found
    - **409**: Concurrent update conflict, retry
    - **422**: Validation errors
    """
    try:
        payroll = ledger.direct_update_payroll(payroll_id, payroll_update)
        logger.info("Payroll %s overridden by %s", payroll_id, current_identity.user_id)
        return PayrollRead.model_validate(payroll)
    except PayrollError as e:
        raise_http_error(e)


@router.post(
    "/{payroll_id}/recalculate",
    response_model=PayrollRead,
    summary="Recalculate Payroll Totals"
)
def recalculate_payroll_record(
    payroll_id: UUID,
    ledger: PayrollLedger = Depends(get_payroll_ledger),
    current_identity: CallerIdentity = RequirePayrollRole
):
    """
    Re-derive allowances, deductions and net salary from approved adjustments.

    Safe to repeat; a second call without intervening changes returns the
    same totals.

    **Errors:**
    - **404**: Payroll record not found
    - **409**: Concurrent update conflict, retry
    - **503**: Storage unavailable
    """
    try:
        return PayrollRead.model_validate(ledger.recalculate(payroll_id))
    except PayrollError as e:
        raise_http_error(e)
