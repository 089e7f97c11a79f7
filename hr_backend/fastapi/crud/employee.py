"""
Employee lookups used by payroll operations.
"""

from uuid import UUID
from typing import Optional
from sqlalchemy.orm import Session

from hr_backend.fastapi.models.employee import Employee


def get_active_employee(db: Session, employee_id: UUID) -> Optional[Employee]:
    """
    Get an employee that has not been soft deleted.

    Args:
        db: Database session
        employee_id: Employee unique identifier

    Returns:
        Employee instance if found and active, None otherwise
    """
    return db.query(Employee).filter(
        Employee.id == employee_id,
        Employee.deleted_at.is_(None)
    ).first()
