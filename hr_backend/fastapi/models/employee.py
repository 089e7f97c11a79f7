"""
Employee model.

Employees are managed outside the payroll core; payroll records only
reference them.
"""

from uuid import uuid4
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from hr_backend.fastapi.dependencies.database import Base


class Employee(Base):
    """
    Employee model.

    Attributes:
        id: Unique identifier (UUID)
        first_name: Given name
        last_name: Family name
        email: Unique work email
        deleted_at: Soft delete timestamp (None while active)
        created_at: Record creation timestamp
        payroll_records: Payroll records issued to this employee
    """

    __tablename__ = "employees"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
        index=True,
        doc="Unique employee identifier"
    )

    first_name = Column(
        String(100),
        nullable=False,
        doc="Given name"
    )

    last_name = Column(
        String(100),
        nullable=False,
        doc="Family name"
    )

    email = Column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        doc="Unique work email"
    )

    deleted_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
        doc="Soft delete timestamp"
    )

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        doc="When the employee record was created"
    )

    payroll_records = relationship(
        "Payroll",
        back_populates="employee",
        doc="Payroll records issued to this employee"
    )

    def __repr__(self) -> str:
        return f"<Employee(id='{self.id}', email='{self.email}')>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
