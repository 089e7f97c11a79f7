"""
Payroll model for per-period employee pay.

This model stores the authoritative base salary and tax of a pay period
together with the totals derived from approved adjustments.
"""

from uuid import uuid4
from decimal import Decimal
from datetime import datetime, timezone
from sqlalchemy import Column, String, Numeric, Date, DateTime, ForeignKey, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from hr_backend.fastapi.core.enums import PaymentMethod, PayrollStatus
from hr_backend.fastapi.dependencies.database import Base


class Payroll(Base):
    """
    Payroll record for one employee and one pay period.

    ``base_salary`` and ``tax`` are set on creation or by an administrative
    override. ``allowances``, ``deductions`` and ``net_salary`` are derived
    and only written by the payroll ledger.

    Attributes:
        id: Unique identifier for the payroll record
        employee_id: Foreign key to Employee
        pay_period_start: First day of the pay period
        pay_period_end: Last day of the pay period
        base_salary: Base salary for the period
        tax: Tax withheld for the period
        allowances: Sum of approved additive adjustments
        deductions: Sum of approved subtractive adjustments
        net_salary: base_salary + allowances - tax - deductions
        status: Informational payroll status
        payment_date: When the payroll was paid
        payment_method: How the payroll is paid out
        notes: Free-form notes
        created_at: Timestamp when record was created
        updated_at: Timestamp of the last change
        employee: Relationship to Employee
        adjustments: Relationship to PayrollAdjustment
    """
    __tablename__ = "payroll"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
        index=True,
        doc="Unique identifier for the payroll record"
    )

    employee_id = Column(
        UUID(as_uuid=True),
        ForeignKey("employees.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        doc="Foreign key to the employee"
    )

    # Pay period
    pay_period_start = Column(
        Date,
        nullable=False,
        index=True,
        doc="First day of the pay period"
    )

    pay_period_end = Column(
        Date,
        nullable=False,
        index=True,
        doc="Last day of the pay period"
    )

    # Authoritative figures
    base_salary = Column(
        Numeric(precision=12, scale=2),
        nullable=False,
        doc="Base salary for the period"
    )

    tax = Column(
        Numeric(precision=12, scale=2),
        nullable=False,
        default=Decimal("0.00"),
        doc="Tax withheld for the period"
    )

    # Derived figures
    allowances = Column(
        Numeric(precision=12, scale=2),
        nullable=False,
        default=Decimal("0.00"),
        doc="Sum of approved additive adjustments"
    )

    deductions = Column(
        Numeric(precision=12, scale=2),
        nullable=False,
        default=Decimal("0.00"),
        doc="Sum of approved subtractive adjustments"
    )

    net_salary = Column(
        Numeric(precision=12, scale=2),
        nullable=False,
        doc="base_salary + allowances - tax - deductions"
    )

    status = Column(
        Enum(PayrollStatus, name="payroll_status"),
        nullable=False,
        default=PayrollStatus.DRAFT,
        index=True,
        doc="Informational payroll status"
    )

    payment_date = Column(
        DateTime(timezone=True),
        nullable=True,
        doc="When the payroll was paid"
    )

    payment_method = Column(
        Enum(PaymentMethod, name="payment_method"),
        nullable=True,
        doc="How the payroll is paid out"
    )

    notes = Column(
        String(500),
        nullable=True,
        doc="Additional notes about the payroll"
    )

    # Audit fields
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
        doc="Timestamp when the payroll record was created"
    )

    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        doc="Timestamp of the last change"
    )

    # Relationships
    employee = relationship(
        "Employee",
        back_populates="payroll_records",
        doc="The employee this payroll record belongs to"
    )

    adjustments = relationship(
        "PayrollAdjustment",
        back_populates="payroll",
        passive_deletes="all",
        doc="Adjustments applied to this payroll record"
    )

    def __repr__(self) -> str:
        return (
            f"<Payroll(id='{self.id}', "
            f"employee_id='{self.employee_id}', "
            f"net_salary={self.net_salary}, "
            f"status={self.status}, "
            f"period='{self.pay_period_start}..{self.pay_period_end}')>"
        )

    def __str__(self) -> str:
        return f"Payroll {self.id} for employee {self.employee_id} - ${self.net_salary}"
