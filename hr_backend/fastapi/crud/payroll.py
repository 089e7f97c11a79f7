"""
Payroll CRUD operations.

Query and persistence helpers for Payroll records. Functions here never
commit; the caller owns the transaction.
"""

from uuid import UUID
from typing import List, Optional
from datetime import date
from decimal import Decimal
from sqlalchemy.orm import Session, Query, joinedload
from sqlalchemy import desc

from hr_backend.fastapi.core.enums import PayrollStatus
from hr_backend.fastapi.models.payroll import Payroll
from hr_backend.fastapi.schemas.payroll import PayrollCreate


def add_payroll(db: Session, payroll_data: PayrollCreate) -> Payroll:
    """
    Stage a new payroll record with empty derived totals.

    Args:
        db: Database session
        payroll_data: Validated payroll creation data

    Returns:
        The flushed payroll instance
    """
    db_payroll = Payroll(
        employee_id=payroll_data.employee_id,
        pay_period_start=payroll_data.pay_period_start,
        pay_period_end=payroll_data.pay_period_end,
        base_salary=payroll_data.base_salary,
        tax=payroll_data.tax,
        allowances=Decimal("0.00"),
        deductions=Decimal("0.00"),
        net_salary=payroll_data.base_salary - payroll_data.tax,
        status=payroll_data.status,
        payment_date=payroll_data.payment_date,
        payment_method=payroll_data.payment_method,
        notes=payroll_data.notes
    )

    db.add(db_payroll)
    db.flush()

    return db_payroll


def get_payroll(db: Session, payroll_id: UUID) -> Optional[Payroll]:
    """
    Get a payroll record by ID with its employee loaded.

    Refreshes any instance already in the identity map, so a record read
    at the end of a transaction carries the flushed totals.

    Args:
        db: Database session
        payroll_id: Payroll unique identifier

    Returns:
        Payroll instance if found, None otherwise
    """
    return (
        db.query(Payroll)
        .options(joinedload(Payroll.employee))
        .filter(Payroll.id == payroll_id)
        .populate_existing()
        .first()
    )


def lock_payroll_query(db: Session, payroll_id: UUID) -> Query:
    """Query selecting one payroll row with ``FOR UPDATE``."""
    return (
        db.query(Payroll)
        .filter(Payroll.id == payroll_id)
        .with_for_update()
        .populate_existing()
    )


def lock_payroll(db: Session, payroll_id: UUID) -> Optional[Payroll]:
    """
    Get a payroll record and hold its row lock until the transaction ends.

    Emits ``SELECT ... FOR UPDATE`` on backends that support it, and
    refreshes any instance already in the identity map.

    Args:
        db: Database session
        payroll_id: Payroll unique identifier

    Returns:
        Payroll instance if found, None otherwise
    """
    return lock_payroll_query(db, payroll_id).first()


def _filtered_payrolls(
    db: Session,
    employee_id: Optional[UUID] = None,
    status: Optional[PayrollStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> Query:
    query = db.query(Payroll)

    if employee_id:
        query = query.filter(Payroll.employee_id == employee_id)

    if status:
        query = query.filter(Payroll.status == status)

    if start_date:
        query = query.filter(Payroll.pay_period_start >= start_date)

    if end_date:
        query = query.filter(Payroll.pay_period_end <= end_date)

    return query


def get_payrolls(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    employee_id: Optional[UUID] = None,
    status: Optional[PayrollStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[Payroll]:
    """
    Get a page of payroll records, newest pay period first.

    Args:
        db: Database session
        skip: Number of records to skip
        limit: Maximum number of records to return
        employee_id: Filter by employee
        status: Filter by payroll status
        start_date: Periods starting on or after this date
        end_date: Periods ending on or before this date

    Returns:
        List of payroll instances
    """
    query = _filtered_payrolls(db, employee_id, status, start_date, end_date)
    return (
        query.options(joinedload(Payroll.employee))
        .order_by(desc(Payroll.pay_period_start), desc(Payroll.created_at))
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_payrolls_count(
    db: Session,
    employee_id: Optional[UUID] = None,
    status: Optional[PayrollStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> int:
    """Total count of payroll records matching the same filters as ``get_payrolls``."""
    return _filtered_payrolls(db, employee_id, status, start_date, end_date).count()
