from .account import Account
from .advance_return import AdvanceReturn
from .auditlog import AuditLog
from .balance_transfer import BalanceTransfer
from .client import Client
from .client_payment import ClientPayment
from .counter import VoucherCounter
from .entitymembership import Company, EntityMembership, User
from .expense import Expense, ExpenseHead, ExpenseLine
from .investment import Investment
from .ledger import LedgerEntry
from .vendor import Vendor
from .vendor_advance_return import VendorAdvanceReturn
from .vendor_payment import VendorPayment
