"""Tests for the exception hierarchy."""

from gold_finance.core.exceptions import (
    GoldFinanceError,
    InvalidAmountError,
    NotFoundError,
    TransactionFailure,
)


class TestExceptionHierarchy:
    """Every engine error shares one base."""

    def test_base_is_exception(self) -> None:
        assert isinstance(GoldFinanceError("test"), Exception)

    def test_not_found_is_gold_finance_error(self) -> None:
        assert isinstance(NotFoundError("test"), GoldFinanceError)

    def test_invalid_amount_is_gold_finance_error(self) -> None:
        assert isinstance(InvalidAmountError("test"), GoldFinanceError)

    def test_transaction_failure_is_gold_finance_error(self) -> None:
        assert isinstance(TransactionFailure("test"), GoldFinanceError)

    def test_exception_message(self) -> None:
        err = NotFoundError("Loan 7 not found")
        assert str(err) == "Loan 7 not found"
