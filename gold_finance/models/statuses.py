# Loan.completion_status
LOAN_PENDING = "Pending"
LOAN_COMPLETED = "Completed"

# Installment.payment_status
PAYMENT_PENDING = "Pending"
PAYMENT_PAID = "Paid"
PAYMENT_OVERDUE = "Overdue"
PAYMENT_SKIPPED = "Skipped"

# statuses a payment may still be recorded against
PAYABLE_STATUSES = (PAYMENT_PENDING, PAYMENT_OVERDUE)
