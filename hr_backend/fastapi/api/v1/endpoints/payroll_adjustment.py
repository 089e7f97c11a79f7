"""
Payroll adjustment API endpoints.

Every write that changes an adjustment's contribution recalculates the
parent payroll record before the response is sent.
"""

from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Response, status

from hr_backend.fastapi.api.v1.endpoints.payroll import raise_http_error
from hr_backend.fastapi.core.enums import AdjustmentType
from hr_backend.fastapi.core.exceptions import PayrollError
from hr_backend.fastapi.schemas.payroll_adjustment import (
    AdjustmentCreate, AdjustmentRead, AdjustmentUpdate, AdjustmentListResponse
)
from hr_backend.fastapi.services.payroll_ledger import PayrollLedger, get_payroll_ledger
from hr_backend.security.dependencies import CallerIdentity, RequirePayrollRole


router = APIRouter(tags=["payroll-adjustments"])


@router.post(
    "/",
    response_model=AdjustmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Payroll Adjustment"
)
def create_adjustment(
    adjustment_data: AdjustmentCreate,
    ledger: PayrollLedger = Depends(get_payroll_ledger),
    current_identity: CallerIdentity = RequirePayrollRole
):
    """
    Attach an adjustment to a payroll record.

    **Permissions:** SUPERADMIN, ADMIN, HR or FINANCE

    **Parameters:**
    - **payroll_id**: ID of an existing payroll record
    - **type**: BONUS, COMMISSION, DEDUCTION, ALLOWANCE, OVERTIME or OTHER
    - **amount**: Non-negative amount
    - **description**: Description (optional)
    - **approved**: Count toward totals right away (default false)
    - **approved_by**: Approver (defaults to the caller when approved)

    **Errors:**
    - **401**: Not authenticated
    - **403**: Role not allowed to manage payroll
    - **404**: Payroll record not found
    - **409**: Concurrent update conflict, retry
    - **422**: Validation errors
    """
    try:
        adjustment = ledger.create_adjustment(
            adjustment_data, acting_user_id=current_identity.user_id
        )
        return AdjustmentRead.model_validate(adjustment)
    except PayrollError as e:
        raise_http_error(e)


@router.get("/", response_model=AdjustmentListResponse, summary="List Payroll Adjustments")
def list_adjustments(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
    payroll_id: Optional[UUID] = Query(None, description="Filter by payroll record"),
    approved: Optional[bool] = Query(None, description="Filter by approval flag"),
    adjustment_type: Optional[AdjustmentType] = Query(None, alias="type", description="Filter by type"),
    ledger: PayrollLedger = Depends(get_payroll_ledger),
    current_identity: CallerIdentity = RequirePayrollRole
):
    """Get a page of adjustments in creation order."""
    try:
        records, total = ledger.list_adjustments(
            skip=skip,
            limit=limit,
            payroll_id=payroll_id,
            approved=approved,
            adjustment_type=adjustment_type
        )
        return AdjustmentListResponse(
            adjustments=[AdjustmentRead.model_validate(a) for a in records],
            total=total,
            skip=skip,
            limit=limit
        )
    except PayrollError as e:
        raise_http_error(e)


@router.get("/{adjustment_id}", response_model=AdjustmentRead, summary="Get Payroll Adjustment")
def get_adjustment(
    adjustment_id: UUID,
    ledger: PayrollLedger = Depends(get_payroll_ledger),
    current_identity: CallerIdentity = RequirePayrollRole
):
    try:
        return AdjustmentRead.model_validate(ledger.get_adjustment(adjustment_id))
    except PayrollError as e:
        raise_http_error(e)


@router.patch("/{adjustment_id}", response_model=AdjustmentRead, summary="Update Payroll Adjustment")
def update_adjustment(
    adjustment_id: UUID,
    adjustment_update: AdjustmentUpdate,
    ledger: PayrollLedger = Depends(get_payroll_ledger),
    current_identity: CallerIdentity = RequirePayrollRole
):
    """
    Partially update an adjustment.

    Changing amount, approved or type recalculates the parent payroll
    record in the same transaction.

    **Errors:**
    - **404**: Adjustment not found
    - **409**: Concurrent update conflict, retry
    - **422**: Validation errors
    """
    try:
        adjustment = ledger.update_adjustment(
            adjustment_id, adjustment_update, acting_user_id=current_identity.user_id
        )
        return AdjustmentRead.model_validate(adjustment)
    except PayrollError as e:
        raise_http_error(e)


@router.delete(
    "/{adjustment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Payroll Adjustment"
)
def delete_adjustment(
    adjustment_id: UUID,
    ledger: PayrollLedger = Depends(get_payroll_ledger),
    current_identity: CallerIdentity = RequirePayrollRole
):
    """
    Delete an adjustment and recalculate its payroll record.

    **Errors:**
    - **404**: Adjustment not found
    - **409**: Concurrent update conflict, retry
    """
    try:
        ledger.delete_adjustment(adjustment_id)
    except PayrollError as e:
        raise_http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
