"""
Payroll adjustment model.

An adjustment is a bonus, commission, allowance, deduction, overtime or
other amount attached to a payroll record. Only approved adjustments
count toward the record's totals.
"""

from uuid import uuid4
from datetime import datetime, timezone
from sqlalchemy import Column, String, Numeric, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from hr_backend.fastapi.core.enums import AdjustmentType
from hr_backend.fastapi.dependencies.database import Base


class PayrollAdjustment(Base):
    """
    Adjustment attached to a payroll record.

    Attributes:
        id: Unique identifier for the adjustment
        payroll_id: Foreign key to Payroll
        type: Adjustment type
        amount: Non-negative amount
        description: Optional description
        approved: Whether the amount counts toward payroll totals
        approved_by: Identity that approved the adjustment
        approved_at: When the adjustment was approved
        created_at: Timestamp when record was created
        updated_at: Timestamp of the last change
        payroll: Relationship to Payroll
    """
    __tablename__ = "payroll_adjustments"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
        index=True,
        doc="Unique identifier for the adjustment"
    )

    payroll_id = Column(
        UUID(as_uuid=True),
        ForeignKey("payroll.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        doc="Foreign key to the payroll record"
    )

    type = Column(
        Enum(AdjustmentType, name="adjustment_type"),
        nullable=False,
        index=True,
        doc="Adjustment type"
    )

    amount = Column(
        Numeric(precision=12, scale=2),
        nullable=False,
        doc="Adjustment amount (never negative)"
    )

    description = Column(
        String(500),
        nullable=True,
        doc="Description of the adjustment"
    )

    approved = Column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        doc="Only approved adjustments count toward payroll totals"
    )

    approved_by = Column(
        UUID(as_uuid=True),
        nullable=True,
        doc="Identity of the approver as supplied by the identity provider"
    )

    approved_at = Column(
        DateTime(timezone=True),
        nullable=True,
        doc="When the adjustment was approved"
    )

    # Audit fields
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
        doc="Timestamp when the adjustment was created"
    )

    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        doc="Timestamp of the last change"
    )

    payroll = relationship(
        "Payroll",
        back_populates="adjustments",
        doc="The payroll record this adjustment belongs to"
    )

    def __repr__(self) -> str:
        return (
            f"<PayrollAdjustment(id='{self.id}', "
            f"payroll_id='{self.payroll_id}', "
            f"type={self.type}, "
            f"amount={self.amount}, "
            f"approved={self.approved})>"
        )

    @property
    def employee(self):
        """Employee of the parent payroll record."""
        return self.payroll.employee if self.payroll is not None else None
