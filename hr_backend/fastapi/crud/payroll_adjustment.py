"""
Payroll adjustment CRUD operations.

Functions here never commit; the caller owns the transaction.
"""

from uuid import UUID
from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session, Query, joinedload
from sqlalchemy import asc

from hr_backend.fastapi.core.enums import AdjustmentType
from hr_backend.fastapi.models.payroll import Payroll
from hr_backend.fastapi.models.payroll_adjustment import PayrollAdjustment
from hr_backend.fastapi.schemas.payroll_adjustment import AdjustmentCreate

# Parent payroll and its employee, for the employee summary in responses
WITH_EMPLOYEE = joinedload(PayrollAdjustment.payroll).joinedload(Payroll.employee)


def add_adjustment(
    db: Session,
    adjustment_data: AdjustmentCreate,
    approved_by: Optional[UUID] = None,
    approved_at: Optional[datetime] = None
) -> PayrollAdjustment:
    """
    Stage a new adjustment.

    Args:
        db: Database session
        adjustment_data: Validated adjustment creation data
        approved_by: Approver identity to record
        approved_at: Approval timestamp to record

    Returns:
        The flushed adjustment instance
    """
    db_adjustment = PayrollAdjustment(
        payroll_id=adjustment_data.payroll_id,
        type=adjustment_data.type,
        amount=adjustment_data.amount,
        description=adjustment_data.description,
        approved=adjustment_data.approved,
        approved_by=approved_by,
        approved_at=approved_at
    )

    db.add(db_adjustment)
    db.flush()

    return db_adjustment


def get_adjustment(db: Session, adjustment_id: UUID) -> Optional[PayrollAdjustment]:
    """
    Get an adjustment by ID with its payroll and employee loaded,
    refreshing any cached instance.

    Args:
        db: Database session
        adjustment_id: Adjustment unique identifier

    Returns:
        PayrollAdjustment instance if found, None otherwise
    """
    return (
        db.query(PayrollAdjustment)
        .options(WITH_EMPLOYEE)
        .filter(PayrollAdjustment.id == adjustment_id)
        .populate_existing()
        .first()
    )


def get_approved_adjustments(db: Session, payroll_id: UUID) -> List[PayrollAdjustment]:
    """All approved adjustments of one payroll record."""
    return (
        db.query(PayrollAdjustment)
        .filter(
            PayrollAdjustment.payroll_id == payroll_id,
            PayrollAdjustment.approved.is_(True)
        )
        .all()
    )


def _filtered_adjustments(
    db: Session,
    payroll_id: Optional[UUID] = None,
    approved: Optional[bool] = None,
    adjustment_type: Optional[AdjustmentType] = None
) -> Query:
    query = db.query(PayrollAdjustment)

    if payroll_id:
        query = query.filter(PayrollAdjustment.payroll_id == payroll_id)

    if approved is not None:
        query = query.filter(PayrollAdjustment.approved.is_(approved))

    if adjustment_type:
        query = query.filter(PayrollAdjustment.type == adjustment_type)

    return query


def get_adjustments(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    payroll_id: Optional[UUID] = None,
    approved: Optional[bool] = None,
    adjustment_type: Optional[AdjustmentType] = None
) -> List[PayrollAdjustment]:
    """
    Get a page of adjustments in creation order.

    Args:
        db: Database session
        skip: Number of records to skip
        limit: Maximum number of records to return
        payroll_id: Filter by payroll record
        approved: Filter by approval flag
        adjustment_type: Filter by adjustment type

    Returns:
        List of adjustment instances
    """
    query = _filtered_adjustments(db, payroll_id, approved, adjustment_type)
    return (
        query.options(WITH_EMPLOYEE)
        .order_by(asc(PayrollAdjustment.created_at))
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_adjustments_count(
    db: Session,
    payroll_id: Optional[UUID] = None,
    approved: Optional[bool] = None,
    adjustment_type: Optional[AdjustmentType] = None
) -> int:
    """Total count of adjustments matching the same filters as ``get_adjustments``."""
    return _filtered_adjustments(db, payroll_id, approved, adjustment_type).count()
