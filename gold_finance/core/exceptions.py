"""Exception hierarchy for the loan engine."""


class GoldFinanceError(Exception):
    """Base exception for all gold finance errors."""


class NotFoundError(GoldFinanceError):
    """A referenced loan, installment, customer or scheme does not exist
    or is not in the state the operation expects."""


class InvalidAmountError(GoldFinanceError):
    """A payment or loan amount violates its constraints."""


class TransactionFailure(GoldFinanceError):
    """A database error aborted a unit of work; it has been rolled back."""
