# Automatically load all models so metadata knows them
from gold_finance.models.customer_model import Customer
from gold_finance.models.scheme_model import Scheme, SchemeSlab
from gold_finance.models.loan_model import Loan
from gold_finance.models.loan_installment_model import Installment
from gold_finance.models.ornament_model import Ornament
