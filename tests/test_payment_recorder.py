"""Tests for recording payments against installments."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from gold_finance.core.exceptions import InvalidAmountError, NotFoundError, TransactionFailure
from gold_finance.models import Installment, Loan
from gold_finance.services.payment_recorder import record_payment
from gold_finance.services.penalty_service import apply_penalty


@pytest.fixture
def loan(make_loan) -> Loan:
    return make_loan(datetime(2025, 5, 1, 11, 0), net="500.00", rate="12")


@pytest.fixture
def next_installment(loan, add_installment) -> Installment:
    return add_installment(loan, date(2025, 7, 1), loan_balance="500.00", interest_due="5.00")


def _first(db, loan) -> Installment:
    return db.get(Installment, loan.current_installment_id)


class TestRejections:
    """Invalid requests leave every row untouched."""

    def test_zero_amounts_rejected(self, db, loan, now) -> None:
        inst = _first(db, loan)
        with pytest.raises(InvalidAmountError):
            record_payment(db, loan.loan_id, inst.payment_id, 0, 0, now=now)

        db.expire_all()
        assert _first(db, loan).payment_status == "Pending"

    def test_negative_amount_rejected(self, db, loan, now) -> None:
        inst = _first(db, loan)
        with pytest.raises(InvalidAmountError):
            record_payment(db, loan.loan_id, inst.payment_id, "-10", "5", now=now)

    def test_principal_above_balance_rejected(self, db, loan, now) -> None:
        inst = _first(db, loan)
        with pytest.raises(InvalidAmountError):
            record_payment(db, loan.loan_id, inst.payment_id, "500.01", 0, now=now)

        db.expire_all()
        assert db.get(Loan, loan.loan_id).principal_amount_paid == Decimal("0")
        assert _first(db, loan).loan_balance == Decimal("500.00")

    def test_unknown_installment_not_found(self, db, loan, now) -> None:
        with pytest.raises(NotFoundError):
            record_payment(db, loan.loan_id, 9999, "10", 0, now=now)

    def test_unknown_loan_not_found(self, db, loan, now) -> None:
        with pytest.raises(NotFoundError):
            record_payment(db, 9999, loan.current_installment_id, "10", 0, now=now)

    def test_installment_of_other_loan_not_found(self, db, make_loan, loan, now) -> None:
        other = make_loan(datetime(2025, 5, 2, 11, 0), net="1000.00")
        with pytest.raises(NotFoundError):
            record_payment(db, loan.loan_id, other.current_installment_id, "10", 0, now=now)

    def test_inactive_installment_not_found(self, db, loan, add_installment, now) -> None:
        dead = add_installment(loan, date(2025, 8, 1), loan_balance="500.00", is_active=False)
        with pytest.raises(NotFoundError):
            record_payment(db, loan.loan_id, dead.payment_id, "10", 0, now=now)

    def test_paid_installment_never_double_applied(self, db, loan, now) -> None:
        pid = loan.current_installment_id
        record_payment(db, loan.loan_id, pid, "100", "4.93", now=now)

        with pytest.raises(NotFoundError):
            record_payment(db, loan.loan_id, pid, "100", 0, now=now)

        db.expire_all()
        assert db.get(Loan, loan.loan_id).principal_amount_paid == Decimal("100.00")

    def test_lookup_precedes_amount_checks(self, db, loan, now) -> None:
        pid = loan.current_installment_id
        record_payment(db, loan.loan_id, pid, "100", 0, now=now)

        with pytest.raises(NotFoundError):
            record_payment(db, loan.loan_id, pid, 0, 0, now=now)
        with pytest.raises(NotFoundError):
            record_payment(db, loan.loan_id, 9999, "-5", 0, now=now)


class TestPartialPayment:
    """A payment that leaves principal outstanding."""

    def test_installment_marked_paid(self, db, loan, next_installment, now) -> None:
        outcome = record_payment(
            db, loan.loan_id, loan.current_installment_id, "200", "4.93",
            payment_mode="UPI", remarks="counter", now=now,
        )

        db.expire_all()
        inst = _first(db, loan)
        assert inst.payment_status == "Paid"
        assert inst.payment_date == now
        assert inst.principal_amount_paid == Decimal("200.00")
        assert inst.interest_amount_paid == Decimal("4.93")
        assert inst.loan_balance == Decimal("300.00")
        assert inst.payment_mode == "UPI"
        assert outcome.new_loan_balance == Decimal("300.00")
        assert outcome.completion_status == "Pending"

    def test_loan_principal_incremented(self, db, loan, next_installment, now) -> None:
        record_payment(db, loan.loan_id, loan.current_installment_id, "200", 0, now=now)

        db.expire_all()
        refreshed = db.get(Loan, loan.loan_id)
        assert refreshed.principal_amount_paid == Decimal("200.00")
        assert refreshed.completion_status == "Pending"

    def test_balance_propagated_to_open_installments(self, db, loan, next_installment, now) -> None:
        outcome = record_payment(db, loan.loan_id, loan.current_installment_id, "200", 0, now=now)

        db.expire_all()
        assert db.get(Installment, next_installment.payment_id).loan_balance == Decimal("300.00")
        assert outcome.installments_updated == 1

    def test_interest_only_payment(self, db, loan, now) -> None:
        record_payment(db, loan.loan_id, loan.current_installment_id, 0, "4.93", now=now)

        db.expire_all()
        inst = _first(db, loan)
        assert inst.payment_status == "Paid"
        assert inst.loan_balance == Decimal("500.00")
        assert db.get(Loan, loan.loan_id).principal_amount_paid == Decimal("0")

    def test_overdue_installment_is_payable(self, db, loan, add_installment, now) -> None:
        overdue = add_installment(
            loan, date(2025, 6, 1), loan_balance="500.00", interest_due="7.50", status="Overdue"
        )
        record_payment(db, loan.loan_id, overdue.payment_id, "50", "7.50", now=now)

        db.expire_all()
        assert db.get(Installment, overdue.payment_id).payment_status == "Paid"
        assert _first(db, loan).loan_balance == Decimal("450.00")


class TestClosure:
    """Paying the exact remaining balance closes the loan."""

    def test_exact_balance_completes_loan(self, db, loan, next_installment, add_installment, now) -> None:
        overdue = add_installment(loan, date(2025, 6, 1), loan_balance="500.00", status="Overdue")

        outcome = record_payment(db, loan.loan_id, loan.current_installment_id, "500.00", "4.93", now=now)

        db.expire_all()
        refreshed = db.get(Loan, loan.loan_id)
        assert refreshed.completion_status == "Completed"
        assert refreshed.principal_amount_paid == Decimal("500.00")
        assert refreshed.current_installment_id is None
        assert outcome.completion_status == "Completed"

        for pid in (next_installment.payment_id, overdue.payment_id):
            other = db.get(Installment, pid)
            assert other.is_active is False
            assert other.remarks == "Loan Closed"

    def test_paid_installments_untouched_on_close(self, db, loan, next_installment, now) -> None:
        record_payment(db, loan.loan_id, loan.current_installment_id, "100", 0, now=now)
        record_payment(db, loan.loan_id, next_installment.payment_id, "400", 0, now=now)

        db.expire_all()
        first = _first(db, loan)
        assert first.is_active is True
        assert first.payment_status == "Paid"
        assert db.get(Loan, loan.loan_id).completion_status == "Completed"


class TestAtomicity:
    """A database failure rolls the whole payment back."""

    def test_commit_failure_rolls_back(self, db, loan, next_installment, now, monkeypatch) -> None:
        def boom():
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(db, "commit", boom)

        with pytest.raises(TransactionFailure):
            record_payment(db, loan.loan_id, loan.current_installment_id, "200", "4.93", now=now)

        monkeypatch.undo()
        db.expire_all()
        assert db.get(Loan, loan.loan_id).principal_amount_paid == Decimal("0")
        assert _first(db, loan).payment_status == "Pending"
        assert db.get(Installment, next_installment.payment_id).loan_balance == Decimal("500.00")


class TestConsolidatedSchedule:
    """Payments after the penalty job has moved the balance onto one anchor."""

    @pytest.fixture
    def penalized(self, db, make_scheme, make_loan, add_installment, now):
        today = now.date()
        scheme = make_scheme([(1, 30, 12), (31, 60, 18)])
        loan = make_loan(
            datetime(2025, 3, 1, 10, 0), scheme=scheme, first_payment_month=today - timedelta(days=45)
        )
        anchor = add_installment(loan, today + timedelta(days=16), loan_balance="100000", interest_due="1000")
        later = add_installment(loan, today + timedelta(days=47), loan_balance="100000", interest_due="1000")
        assert apply_penalty(db, loan.loan_id, today) == "penalized"
        db.expire_all()
        return loan, anchor, later

    def test_interest_on_zero_balance_row_keeps_loan_open(self, db, penalized, now) -> None:
        loan, anchor, later = penalized

        outcome = record_payment(db, loan.loan_id, later.payment_id, 0, "500", now=now)

        db.expire_all()
        refreshed = db.get(Loan, loan.loan_id)
        assert outcome.completion_status == "Pending"
        assert refreshed.completion_status == "Pending"
        assert refreshed.principal_amount_paid == Decimal("0")
        assert refreshed.current_installment_id == anchor.payment_id

    def test_anchor_keeps_consolidated_balance(self, db, penalized, now) -> None:
        loan, anchor, later = penalized

        outcome = record_payment(db, loan.loan_id, later.payment_id, 0, "500", now=now)

        db.expire_all()
        row = db.get(Installment, anchor.payment_id)
        assert row.loan_balance == Decimal("100000.00")
        assert row.is_active is True
        assert outcome.installments_updated == 0

    def test_principal_against_zero_row_rejected(self, db, penalized, now) -> None:
        loan, _, later = penalized

        with pytest.raises(InvalidAmountError):
            record_payment(db, loan.loan_id, later.payment_id, "10", 0, now=now)
