from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from hr_backend.fastapi.core.enums import AdjustmentType, PaymentMethod, PayrollStatus
from hr_backend.fastapi.core.exceptions import (
    InfrastructureError, NotFoundError, ValidationError
)
from hr_backend.fastapi.crud import payroll as payroll_crud
from hr_backend.fastapi.crud import payroll_adjustment as adjustment_crud
from hr_backend.fastapi.services.payroll_ledger import PayrollLedger


def adjustment(payroll, adjustment_type, amount, approved=True, **extra):
    data = {
        "payroll_id": payroll.id,
        "type": adjustment_type,
        "amount": Decimal(amount),
        "approved": approved,
    }
    data.update(extra)
    return data


def assert_invariant(record):
    assert record.net_salary == (
        record.base_salary + record.allowances - record.tax - record.deductions
    )


class TestScenarios:

    def test_approved_bonus_adds_to_net_salary(self, ledger, payroll):
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "300.00"))

        record = ledger.get_payroll(payroll.id)
        assert record.allowances == Decimal("300.00")
        assert record.deductions == Decimal("0.00")
        assert record.net_salary == Decimal("4800.00")

    def test_approved_deduction_subtracts(self, ledger, payroll):
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "300.00"))
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.DEDUCTION, "100.00"))

        record = ledger.get_payroll(payroll.id)
        assert record.deductions == Decimal("100.00")
        assert record.net_salary == Decimal("4700.00")

    def test_unapproving_drops_adjustment_from_totals(self, ledger, payroll):
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "300.00"))
        deduction = ledger.create_adjustment(
            adjustment(payroll, AdjustmentType.DEDUCTION, "100.00")
        )

        ledger.update_adjustment(deduction.id, {"approved": False})

        record = ledger.get_payroll(payroll.id)
        assert record.deductions == Decimal("0.00")
        assert record.net_salary == Decimal("4800.00")

    def test_deleting_bonus_recalculates(self, ledger, payroll):
        bonus = ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "300.00"))

        ledger.delete_adjustment(bonus.id)

        record = ledger.get_payroll(payroll.id)
        assert record.allowances == Decimal("0.00")
        assert record.net_salary == Decimal("4500.00")
        with pytest.raises(NotFoundError):
            ledger.get_adjustment(bonus.id)

    def test_negative_amount_is_rejected_before_any_write(self, ledger, payroll):
        with pytest.raises(ValidationError) as exc_info:
            ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "-50.00"))

        assert "amount" in exc_info.value.fields
        records, total = ledger.list_adjustments(payroll_id=payroll.id)
        assert total == 0
        assert ledger.get_payroll(payroll.id).net_salary == Decimal("4500.00")

    def test_direct_update_does_not_resum_adjustments(self, ledger, payroll):
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "300.00"))

        record = ledger.direct_update_payroll(payroll.id, {"base_salary": Decimal("5500.00")})

        assert record.base_salary == Decimal("5500.00")
        assert record.allowances == Decimal("300.00")
        assert record.net_salary == Decimal("5300.00")


class TestRecalculationProperties:

    def test_invariant_holds_after_mixed_operations(self, ledger, payroll):
        bonus = ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "250.50"))
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.ALLOWANCE, "120.25"))
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.COMMISSION, "80.00"))
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.DEDUCTION, "60.10"))
        other = ledger.create_adjustment(adjustment(payroll, AdjustmentType.OTHER, "15.00"))
        ledger.update_adjustment(bonus.id, {"amount": Decimal("200.00")})
        ledger.delete_adjustment(other.id)

        record = ledger.get_payroll(payroll.id)
        assert record.allowances == Decimal("400.25")
        assert record.deductions == Decimal("60.10")
        assert record.net_salary == Decimal("4840.15")
        assert_invariant(record)

    def test_recalculate_is_idempotent(self, ledger, payroll):
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "300.00"))
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.DEDUCTION, "75.00"))

        first = ledger.recalculate(payroll.id)
        first_totals = (first.allowances, first.deductions, first.net_salary)
        second = ledger.recalculate(payroll.id)

        assert (second.allowances, second.deductions, second.net_salary) == first_totals

    def test_adjustments_do_not_leak_between_payrolls(self, ledger, payroll, employee):
        other_payroll = ledger.create_payroll({
            "employee_id": employee.id,
            "pay_period_start": date(2025, 12, 1),
            "pay_period_end": date(2025, 12, 31),
            "base_salary": Decimal("3000.00"),
            "tax": Decimal("300.00"),
        })

        ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "300.00"))
        ledger.create_adjustment(adjustment(other_payroll, AdjustmentType.DEDUCTION, "50.00"))

        first = ledger.get_payroll(payroll.id)
        second = ledger.get_payroll(other_payroll.id)
        assert first.deductions == Decimal("0.00")
        assert first.net_salary == Decimal("4800.00")
        assert second.allowances == Decimal("0.00")
        assert second.net_salary == Decimal("2650.00")

    def test_unapproved_adjustment_excluded_until_approved(self, ledger, payroll):
        bonus = ledger.create_adjustment(
            adjustment(payroll, AdjustmentType.BONUS, "300.00", approved=False)
        )
        assert ledger.get_payroll(payroll.id).net_salary == Decimal("4500.00")

        ledger.update_adjustment(bonus.id, {"approved": True})

        assert ledger.get_payroll(payroll.id).net_salary == Decimal("4800.00")

    def test_overtime_counts_as_deduction(self, ledger, payroll):
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.OVERTIME, "40.00"))

        record = ledger.get_payroll(payroll.id)
        assert record.deductions == Decimal("40.00")
        assert record.net_salary == Decimal("4460.00")

    def test_type_change_moves_amount_between_totals(self, ledger, payroll):
        item = ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "100.00"))

        ledger.update_adjustment(item.id, {"type": AdjustmentType.DEDUCTION})

        record = ledger.get_payroll(payroll.id)
        assert record.allowances == Decimal("0.00")
        assert record.deductions == Decimal("100.00")
        assert record.net_salary == Decimal("4400.00")

    def test_description_only_patch_keeps_totals(self, ledger, payroll):
        item = ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "100.00"))

        updated = ledger.update_adjustment(item.id, {"description": "Referral bonus"})

        assert updated.description == "Referral bonus"
        assert ledger.get_payroll(payroll.id).net_salary == Decimal("4600.00")


class TestApprovalTracking:

    def test_create_approved_records_acting_user(self, ledger, payroll, approver_id):
        item = ledger.create_adjustment(
            adjustment(payroll, AdjustmentType.BONUS, "10.00"), acting_user_id=approver_id
        )

        assert item.approved_by == approver_id
        assert item.approved_at is not None

    def test_explicit_approver_wins(self, ledger, payroll, approver_id):
        explicit = uuid4()
        item = ledger.create_adjustment(
            adjustment(payroll, AdjustmentType.BONUS, "10.00", approved_by=explicit),
            acting_user_id=approver_id
        )

        assert item.approved_by == explicit

    def test_unapproved_create_has_no_approver(self, ledger, payroll, approver_id):
        item = ledger.create_adjustment(
            adjustment(payroll, AdjustmentType.BONUS, "10.00", approved=False),
            acting_user_id=approver_id
        )

        assert item.approved_by is None
        assert item.approved_at is None

    def test_approve_then_unapprove(self, ledger, payroll, approver_id):
        item = ledger.create_adjustment(
            adjustment(payroll, AdjustmentType.BONUS, "10.00", approved=False)
        )

        approved = ledger.update_adjustment(item.id, {"approved": True}, acting_user_id=approver_id)
        assert approved.approved_by == approver_id
        assert approved.approved_at is not None

        revoked = ledger.update_adjustment(item.id, {"approved": False})
        assert revoked.approved_by is None
        assert revoked.approved_at is None


class TestErrors:

    def test_create_adjustment_unknown_payroll(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.create_adjustment({
                "payroll_id": uuid4(),
                "type": AdjustmentType.BONUS,
                "amount": Decimal("10.00"),
            })

    def test_create_adjustment_unknown_type(self, ledger, payroll):
        with pytest.raises(ValidationError) as exc_info:
            ledger.create_adjustment(adjustment(payroll, "SIGNING_BONUS", "10.00"))

        assert "type" in exc_info.value.fields

    def test_update_adjustment_unknown_type(self, ledger, payroll):
        item = ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "10.00"))

        with pytest.raises(ValidationError):
            ledger.update_adjustment(item.id, {"type": "GIFT"})

    def test_update_adjustment_null_amount(self, ledger, payroll):
        item = ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "10.00"))

        with pytest.raises(ValidationError):
            ledger.update_adjustment(item.id, {"amount": None})

    def test_update_missing_adjustment(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.update_adjustment(uuid4(), {"approved": True})

    def test_delete_missing_adjustment(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.delete_adjustment(uuid4())

    def test_recalculate_unknown_payroll(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.recalculate(uuid4())

    def test_malformed_identifier(self, ledger):
        with pytest.raises(ValidationError):
            ledger.get_payroll("not-a-uuid")

    def test_direct_update_missing_payroll(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.direct_update_payroll(uuid4(), {"tax": Decimal("1.00")})

    @pytest.mark.parametrize("patch", [
        {"base_salary": Decimal("-1.00")},
        {"tax": Decimal("-0.01")},
        {"status": "ARCHIVED"},
        {"net_salary": Decimal("1.00")},
    ])
    def test_direct_update_rejects_bad_patch(self, ledger, payroll, patch):
        with pytest.raises(ValidationError):
            ledger.direct_update_payroll(payroll.id, patch)

        assert ledger.get_payroll(payroll.id).net_salary == Decimal("4500.00")


class TestAtomicity:

    def test_failed_recalculation_rolls_back_create(self, ledger, payroll, monkeypatch):
        def fail(db, payroll_id):
            raise InfrastructureError("Payroll record vanished during recalculation")

        monkeypatch.setattr(ledger, "_recalculate", fail)

        with pytest.raises(InfrastructureError):
            ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "300.00"))

        records, total = ledger.list_adjustments(payroll_id=payroll.id)
        assert total == 0
        assert ledger.get_payroll(payroll.id).net_salary == Decimal("4500.00")

    def test_failed_recalculation_rolls_back_update(self, ledger, payroll, monkeypatch):
        item = ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "300.00"))

        def fail(db, payroll_id):
            raise InfrastructureError("Payroll record vanished during recalculation")

        monkeypatch.setattr(ledger, "_recalculate", fail)

        with pytest.raises(InfrastructureError):
            ledger.update_adjustment(item.id, {"amount": Decimal("999.00")})

        assert ledger.get_adjustment(item.id).amount == Decimal("300.00")
        assert ledger.get_payroll(payroll.id).net_salary == Decimal("4800.00")

    def test_failed_recalculation_rolls_back_delete(self, ledger, payroll, monkeypatch):
        item = ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "300.00"))

        def fail(db, payroll_id):
            raise InfrastructureError("Payroll record vanished during recalculation")

        monkeypatch.setattr(ledger, "_recalculate", fail)

        with pytest.raises(InfrastructureError):
            ledger.delete_adjustment(item.id)

        assert ledger.get_adjustment(item.id).id == item.id

    def test_each_ledger_reads_fresh_totals(self, session_factory, ledger, payroll):
        other_ledger = PayrollLedger(session_factory)

        other_ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "300.00"))

        assert ledger.recalculate(payroll.id).net_salary == Decimal("4800.00")


class TestPayrollRecords:

    def test_create_payroll_starts_with_empty_totals(self, payroll):
        assert payroll.allowances == Decimal("0.00")
        assert payroll.deductions == Decimal("0.00")
        assert payroll.net_salary == Decimal("4500.00")
        assert payroll.status == PayrollStatus.DRAFT

    def test_create_payroll_unknown_employee(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.create_payroll({
                "employee_id": uuid4(),
                "pay_period_start": date(2025, 11, 1),
                "pay_period_end": date(2025, 11, 30),
                "base_salary": Decimal("1000.00"),
            })

    def test_create_payroll_rejects_inverted_period(self, ledger, employee):
        with pytest.raises(ValidationError):
            ledger.create_payroll({
                "employee_id": employee.id,
                "pay_period_start": date(2025, 11, 30),
                "pay_period_end": date(2025, 11, 1),
                "base_salary": Decimal("1000.00"),
            })

    def test_direct_update_status_only_keeps_net(self, ledger, payroll):
        record = ledger.direct_update_payroll(payroll.id, {"status": PayrollStatus.PAID})

        assert record.status == PayrollStatus.PAID
        assert record.net_salary == Decimal("4500.00")

    def test_list_payrolls_filters_by_status(self, ledger, payroll, employee):
        ledger.create_payroll({
            "employee_id": employee.id,
            "pay_period_start": date(2025, 12, 1),
            "pay_period_end": date(2025, 12, 31),
            "base_salary": Decimal("3000.00"),
            "status": PayrollStatus.PENDING,
        })

        records, total = ledger.list_payrolls()
        assert total == 2
        assert records[0].pay_period_start == date(2025, 12, 1)

        records, total = ledger.list_payrolls(status=PayrollStatus.DRAFT)
        assert total == 1
        assert records[0].id == payroll.id

    def test_list_adjustments_filters(self, ledger, payroll):
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "10.00"))
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.DEDUCTION, "5.00", approved=False))

        _, total = ledger.list_adjustments(payroll_id=payroll.id, approved=True)
        assert total == 1

        records, total = ledger.list_adjustments(adjustment_type=AdjustmentType.DEDUCTION)
        assert total == 1
        assert records[0].approved is False


class TestPaymentMethodAndEmployee:

    def test_create_payroll_with_payment_method(self, ledger, employee):
        record = ledger.create_payroll({
            "employee_id": employee.id,
            "pay_period_start": date(2025, 12, 1),
            "pay_period_end": date(2025, 12, 31),
            "base_salary": Decimal("1000.00"),
            "payment_method": "CASH",
        })

        assert ledger.get_payroll(record.id).payment_method == PaymentMethod.CASH

    def test_unknown_payment_method_is_rejected(self, ledger, employee):
        with pytest.raises(ValidationError) as exc_info:
            ledger.create_payroll({
                "employee_id": employee.id,
                "pay_period_start": date(2025, 12, 1),
                "pay_period_end": date(2025, 12, 31),
                "base_salary": Decimal("1000.00"),
                "payment_method": "CRYPTO",
            })

        assert "payment_method" in exc_info.value.fields

    def test_direct_update_sets_and_clears_payment_method(self, ledger, payroll):
        record = ledger.direct_update_payroll(payroll.id, {"payment_method": "CHECK"})
        assert record.payment_method == PaymentMethod.CHECK

        record = ledger.direct_update_payroll(payroll.id, {"payment_method": None})
        assert record.payment_method is None
        assert record.net_salary == Decimal("4500.00")

    def test_returned_payroll_formats_outside_its_session(self, ledger, payroll):
        record = ledger.get_payroll(payroll.id)

        assert str(payroll.employee_id) in str(record)
        assert str(record.id) in repr(record)

    def test_returned_records_carry_employee(self, ledger, payroll, employee):
        item = ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "10.00"))

        assert payroll.employee.email == employee.email
        assert item.employee.first_name == employee.first_name
        assert ledger.recalculate(payroll.id).employee.id == employee.id
        assert ledger.direct_update_payroll(payroll.id, {"notes": "x"}).employee.id == employee.id
        assert ledger.update_adjustment(item.id, {"amount": Decimal("20.00")}).employee.id == employee.id
        assert ledger.get_adjustment(item.id).employee.last_name == employee.last_name

        records, _ = ledger.list_payrolls()
        assert records[0].employee.id == employee.id
        records, _ = ledger.list_adjustments(payroll_id=payroll.id)
        assert records[0].employee.id == employee.id


@pytest.fixture
def lock_calls(monkeypatch):
    """Record payroll locks and adjustment reads while delegating to the real queries."""
    events = []
    real_lock_payroll = payroll_crud.lock_payroll
    real_get_adjustment = adjustment_crud.get_adjustment

    def lock_payroll(db, payroll_id):
        events.append(("lock_payroll", payroll_id))
        return real_lock_payroll(db, payroll_id)

    def get_adjustment(db, adjustment_id):
        events.append(("get_adjustment", adjustment_id))
        return real_get_adjustment(db, adjustment_id)

    monkeypatch.setattr(payroll_crud, "lock_payroll", lock_payroll)
    monkeypatch.setattr(adjustment_crud, "get_adjustment", get_adjustment)
    return events


class TestRowLocking:

    def test_lock_query_selects_for_update(self, session_factory):
        session = session_factory()
        try:
            query = payroll_crud.lock_payroll_query(session, uuid4())
            sql = str(query.statement.compile(dialect=postgresql.dialect()))
        finally:
            session.close()

        assert "FOR UPDATE" in sql

    def test_update_locks_parent_before_rereading(self, ledger, payroll, lock_calls):
        item = ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "10.00"))
        lock_calls.clear()

        ledger.update_adjustment(item.id, {"approved": False})

        assert lock_calls == [
            ("get_adjustment", item.id),
            ("lock_payroll", payroll.id),
            ("get_adjustment", item.id),
            ("lock_payroll", payroll.id),
            ("get_adjustment", item.id),
        ]

    def test_delete_locks_parent_before_rereading(self, ledger, payroll, lock_calls):
        item = ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "10.00"))
        lock_calls.clear()

        ledger.delete_adjustment(item.id)

        assert lock_calls == [
            ("get_adjustment", item.id),
            ("lock_payroll", payroll.id),
            ("get_adjustment", item.id),
            ("lock_payroll", payroll.id),
        ]

    def test_create_locks_only_its_own_payroll(self, ledger, payroll, lock_calls):
        ledger.create_adjustment(adjustment(payroll, AdjustmentType.BONUS, "10.00"))

        assert {payroll_id for name, payroll_id in lock_calls if name == "lock_payroll"} == {payroll.id}
        assert lock_calls[0] == ("lock_payroll", payroll.id)
