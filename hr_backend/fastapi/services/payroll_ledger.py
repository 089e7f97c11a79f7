"""
Payroll ledger service.

Keeps every payroll record's derived totals consistent with its approved
adjustments:

    allowances = sum of approved additive adjustments
    deductions = sum of approved subtractive adjustments
    net_salary = base_salary + allowances - tax - deductions

Each public operation runs in a single transaction. Operations that touch
a payroll record's totals lock that record's row first, so concurrent
recalculations of the same record serialize while different records
proceed independently. If a required recalculation fails, the triggering
write is rolled back with it.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Tuple, Type, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.orm import Session, sessionmaker

from hr_backend.fastapi.core.enums import AdjustmentType, PayrollStatus
from hr_backend.fastapi.core.exceptions import (
    InfrastructureError, NotFoundError, ValidationError
)
from hr_backend.fastapi.crud import employee as employee_crud
from hr_backend.fastapi.crud import payroll as payroll_crud
from hr_backend.fastapi.crud import payroll_adjustment as adjustment_crud
from hr_backend.fastapi.dependencies.database import get_session_factory, session_scope
from hr_backend.fastapi.models.payroll import Payroll
from hr_backend.fastapi.models.payroll_adjustment import PayrollAdjustment
from hr_backend.fastapi.schemas.payroll import PayrollCreate, PayrollUpdate
from hr_backend.fastapi.schemas.payroll_adjustment import AdjustmentCreate, AdjustmentUpdate
from hr_backend.fastapi.services.payroll_calculator import compute_net_salary, sum_adjustments

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Patch fields that change an adjustment's contribution to the totals
RECALCULATING_FIELDS = frozenset({"amount", "approved", "type"})


def validate_input(schema: Type[SchemaT], data: Union[SchemaT, Mapping[str, Any]]) -> SchemaT:
    """
    Build the input struct of an operation, or raise ``ValidationError``.

    Args:
        schema: Pydantic model describing the operation input
        data: Already-built model instance or raw mapping

    Returns:
        Validated model instance
    """
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'input'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(f"Invalid {schema.__name__}: {details}", fields) from e


def _as_uuid(value: Union[UUID, str], name: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise ValidationError(f"{name} is not a valid identifier", [name])


class PayrollLedger:
    """
    Owns payroll records and their adjustments.

    Args:
        session_factory: Factory producing sessions bound to the payroll store
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Payroll records
    # ------------------------------------------------------------------

    def create_payroll(self, payroll_data: Union[PayrollCreate, Mapping[str, Any]]) -> Payroll:
        """
        Create a payroll record with no adjustments.

        Raises:
            ValidationError: Bad period, negative salary or tax, unknown status
                or payment method
            NotFoundError: Employee missing or soft deleted
        """
        data = validate_input(PayrollCreate, payroll_data)

        with session_scope(self._session_factory) as db:
            if employee_crud.get_active_employee(db, data.employee_id) is None:
                raise NotFoundError(f"Employee with ID {data.employee_id} not found")
            payroll = payroll_crud.add_payroll(db, data)
            payroll = payroll_crud.get_payroll(db, payroll.id)

        logger.info("Created payroll %s for employee %s", payroll.id, payroll.employee_id)
        return payroll

    def get_payroll(self, payroll_id: Union[UUID, str]) -> Payroll:
        payroll_id = _as_uuid(payroll_id, "payroll_id")
        with session_scope(self._session_factory) as db:
            payroll = payroll_crud.get_payroll(db, payroll_id)
            if payroll is None:
                raise NotFoundError(f"Payroll record with ID {payroll_id} not found")
        return payroll

    def list_payrolls(
        self,
        skip: int = 0,
        limit: int = 100,
        employee_id: Optional[UUID] = None,
        status: Optional[PayrollStatus] = None,
        start_date=None,
        end_date=None
    ) -> Tuple[List[Payroll], int]:
        """Return one page of payroll records and the total matching count."""
        with session_scope(self._session_factory) as db:
            records = payroll_crud.get_payrolls(
                db, skip=skip, limit=limit, employee_id=employee_id,
                status=status, start_date=start_date, end_date=end_date
            )
            total = payroll_crud.get_payrolls_count(
                db, employee_id=employee_id, status=status,
                start_date=start_date, end_date=end_date
            )
        return records, total

    def direct_update_payroll(
        self,
        payroll_id: Union[UUID, str],
        patch: Union[PayrollUpdate, Mapping[str, Any]]
    ) -> Payroll:
        """
        Administrative override of base_salary, tax, status, payment_method
        and notes.

        When base_salary or tax changes, net_salary is recomputed from the
        stored allowances and deductions; adjustments are not re-summed.

        Raises:
            ValidationError: Negative base_salary or tax, unknown status or
                payment method
            NotFoundError: Payroll record missing
        """
        payroll_id = _as_uuid(payroll_id, "payroll_id")
        changes = validate_input(PayrollUpdate, patch).model_dump(exclude_unset=True)

        with session_scope(self._session_factory) as db:
            payroll = payroll_crud.lock_payroll(db, payroll_id)
            if payroll is None:
                raise NotFoundError(f"Payroll record with ID {payroll_id} not found")

            for field, value in changes.items():
                setattr(payroll, field, value)

            if "base_salary" in changes or "tax" in changes:
                payroll.net_salary = compute_net_salary(
                    payroll.base_salary, payroll.allowances, payroll.tax, payroll.deductions
                )
            db.flush()
            payroll = payroll_crud.get_payroll(db, payroll_id)

        logger.info("Updated payroll %s fields=%s", payroll_id, sorted(changes))
        return payroll

    def recalculate(self, payroll_id: Union[UUID, str]) -> Payroll:
        """
        Re-derive a payroll record's totals from its approved adjustments.

        Raises:
            NotFoundError: Payroll record does not exist
        """
        payroll_id = _as_uuid(payroll_id, "payroll_id")
        with session_scope(self._session_factory) as db:
            if payroll_crud.get_payroll(db, payroll_id) is None:
                raise NotFoundError(f"Payroll record with ID {payroll_id} not found")
            self._recalculate(db, payroll_id)
            payroll = payroll_crud.get_payroll(db, payroll_id)
        return payroll

    # ------------------------------------------------------------------
    # Adjustments
    # ------------------------------------------------------------------

    def create_adjustment(
        self,
        adjustment_data: Union[AdjustmentCreate, Mapping[str, Any]],
        acting_user_id: Optional[UUID] = None
    ) -> PayrollAdjustment:
        """
        Create an adjustment on an existing payroll record.

        An approved adjustment triggers a recalculation in the same
        transaction. When approved without an explicit ``approved_by``,
        the acting user is recorded as approver.

        Raises:
            ValidationError: Unknown type or negative amount
            NotFoundError: Payroll record missing
        """
        data = validate_input(AdjustmentCreate, adjustment_data)

        approved_by = None
        approved_at = None
        if data.approved:
            approved_by = data.approved_by or acting_user_id
            approved_at = datetime.now(timezone.utc)

        with session_scope(self._session_factory) as db:
            if payroll_crud.lock_payroll(db, data.payroll_id) is None:
                raise NotFoundError(f"Payroll record with ID {data.payroll_id} not found")

            adjustment = adjustment_crud.add_adjustment(db, data, approved_by, approved_at)

            if adjustment.approved:
                self._recalculate(db, adjustment.payroll_id)

            adjustment = adjustment_crud.get_adjustment(db, adjustment.id)

        logger.info(
            "Created %s adjustment %s on payroll %s (approved=%s)",
            adjustment.type.value, adjustment.id, adjustment.payroll_id, adjustment.approved
        )
        return adjustment

    def get_adjustment(self, adjustment_id: Union[UUID, str]) -> PayrollAdjustment:
        adjustment_id = _as_uuid(adjustment_id, "adjustment_id")
        with session_scope(self._session_factory) as db:
            adjustment = adjustment_crud.get_adjustment(db, adjustment_id)
            if adjustment is None:
                raise NotFoundError(f"Payroll adjustment with ID {adjustment_id} not found")
        return adjustment

    def list_adjustments(
        self,
        skip: int = 0,
        limit: int = 100,
        payroll_id: Optional[UUID] = None,
        approved: Optional[bool] = None,
        adjustment_type: Optional[AdjustmentType] = None
    ) -> Tuple[List[PayrollAdjustment], int]:
        """Return one page of adjustments and the total matching count."""
        with session_scope(self._session_factory) as db:
            records = adjustment_crud.get_adjustments(
                db, skip=skip, limit=limit, payroll_id=payroll_id,
                approved=approved, adjustment_type=adjustment_type
            )
            total = adjustment_crud.get_adjustments_count(
                db, payroll_id=payroll_id, approved=approved, adjustment_type=adjustment_type
            )
        return records, total

    def update_adjustment(
        self,
        adjustment_id: Union[UUID, str],
        patch: Union[AdjustmentUpdate, Mapping[str, Any]],
        acting_user_id: Optional[UUID] = None
    ) -> PayrollAdjustment:
        """
        Apply a partial update to an adjustment.

        A patch touching amount, approved or type recalculates the parent
        payroll record in the same transaction.

        Raises:
            ValidationError: Unknown type, negative amount or null field
            NotFoundError: Adjustment missing
        """
        adjustment_id = _as_uuid(adjustment_id, "adjustment_id")
        changes = validate_input(AdjustmentUpdate, patch).model_dump(exclude_unset=True)

        with session_scope(self._session_factory) as db:
            adjustment = self._lock_adjustment(db, adjustment_id)

            if "approved" in changes:
                if changes["approved"] and not adjustment.approved:
                    adjustment.approved_at = datetime.now(timezone.utc)
                    if "approved_by" not in changes:
                        adjustment.approved_by = acting_user_id
                elif not changes["approved"]:
                    adjustment.approved_at = None
                    if "approved_by" not in changes:
                        adjustment.approved_by = None

            for field, value in changes.items():
                setattr(adjustment, field, value)
            db.flush()

            if RECALCULATING_FIELDS & changes.keys():
                self._recalculate(db, adjustment.payroll_id)

            adjustment = adjustment_crud.get_adjustment(db, adjustment_id)

        logger.info("Updated adjustment %s fields=%s", adjustment_id, sorted(changes))
        return adjustment

    def delete_adjustment(self, adjustment_id: Union[UUID, str]) -> None:
        """
        Remove an adjustment and recalculate its payroll record.

        Raises:
            NotFoundError: Adjustment missing
        """
        adjustment_id = _as_uuid(adjustment_id, "adjustment_id")

        with session_scope(self._session_factory) as db:
            adjustment = self._lock_adjustment(db, adjustment_id)
            payroll_id = adjustment.payroll_id

            db.delete(adjustment)
            db.flush()

            self._recalculate(db, payroll_id)

        logger.info("Deleted adjustment %s from payroll %s", adjustment_id, payroll_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock_adjustment(self, db: Session, adjustment_id: UUID) -> PayrollAdjustment:
        """
        Load an adjustment with its parent payroll row locked.

        The adjustment is read again after the lock is held so the caller
        works on the state no concurrent writer can still change.
        """
        adjustment = adjustment_crud.get_adjustment(db, adjustment_id)
        if adjustment is None:
            raise NotFoundError(f"Payroll adjustment with ID {adjustment_id} not found")

        if payroll_crud.lock_payroll(db, adjustment.payroll_id) is None:
            raise InfrastructureError(
                f"Payroll record {adjustment.payroll_id} of adjustment {adjustment_id} is missing"
            )

        adjustment = adjustment_crud.get_adjustment(db, adjustment_id)
        if adjustment is None:
            raise NotFoundError(f"Payroll adjustment with ID {adjustment_id} not found")
        return adjustment

    def _recalculate(self, db: Session, payroll_id: UUID) -> Payroll:
        """Recalculate inside the caller's transaction."""
        payroll = payroll_crud.lock_payroll(db, payroll_id)
        if payroll is None:
            logger.error("Payroll %s vanished during recalculation", payroll_id)
            raise InfrastructureError(f"Payroll record {payroll_id} vanished during recalculation")

        totals = sum_adjustments(adjustment_crud.get_approved_adjustments(db, payroll_id))

        payroll.allowances = totals.additions
        payroll.deductions = totals.deductions
        payroll.net_salary = compute_net_salary(
            payroll.base_salary, totals.additions, payroll.tax, totals.deductions
        )
        db.flush()

        logger.info(
            "Recalculated payroll %s: allowances=%s deductions=%s net_salary=%s",
            payroll_id, payroll.allowances, payroll.deductions, payroll.net_salary
        )
        return payroll


def get_payroll_ledger() -> PayrollLedger:
    """
    FastAPI dependency returning a ledger bound to the application engine.

    Usage:
        @router.post("/")
        def route(ledger: PayrollLedger = Depends(get_payroll_ledger)):
            ...
    """
    return PayrollLedger(get_session_factory())
